"""Resolution result types.

A module request always produces exactly one of ResolvedModule or
UnresolvedModule; check ``is_resolved`` to tell them apart.
"""
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

DTS_EXTENSION = '.d.ts'


def extension_of(file_name: str) -> str:
    """Return the TypeScript extension of a file ('.d.ts' counts as one)."""
    if file_name.lower().endswith(DTS_EXTENSION):
        return DTS_EXTENSION
    return os.path.splitext(file_name)[1]


class UnresolvedReason(Enum):
    BUILTIN = "built-in module"
    NOT_IN_INDEX = "module not in list"
    NO_DECLARATION = "cannot find .d.ts file"
    UNKNOWN_CONTAINING_FILE = "containing file not in list"


@dataclass(frozen=True)
class ResolvedModule:
    resolved_file_name: str
    extension: str
    is_resolved: bool = field(default=True, init=False)

    @classmethod
    def for_file(cls, file_name: str) -> 'ResolvedModule':
        return cls(resolved_file_name=file_name, extension=extension_of(file_name))


@dataclass(frozen=True)
class UnresolvedModule:
    reason: UnresolvedReason
    is_resolved: bool = field(default=False, init=False)


ResolutionResult = Union[ResolvedModule, UnresolvedModule]


@dataclass(frozen=True)
class ResolvedTypeReferenceDirective:
    resolved_file_name: str
    primary: bool


@dataclass
class TypeReferenceResolution:
    """Outcome of one type-reference directive lookup."""
    resolved: Optional[ResolvedTypeReferenceDirective] = None
    failed_lookup_locations: List[str] = field(default_factory=list)
