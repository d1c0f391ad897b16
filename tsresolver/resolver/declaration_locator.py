"""Upward search for TypeScript declaration files of a named package.

Re-implements the part of Node's module lookup the type checker needs,
starting from the nearest package boundary and climbing one directory at
a time:

    <dir>/node_modules/<scope>/<name>/package.json       (package ships types)
    <dir>/node_modules/@types/<mangled key>/package.json (community types)

A package root that exists but holds no matching declaration ends the
search; it is a definitive miss, not a reason to keep climbing.
"""
import json
import os
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, Optional

from .filesystem import FileSystem
from .module_ref import ModuleReference

NODE_MODULES = "node_modules"
PACKAGE_MANIFEST = "package.json"
TYPES_SCOPE = "@types"
INDEX_DTS = "index.d.ts"
DTS_EXTENSION = ".d.ts"

# Manifest fields that name the root declaration file, in precedence order
MANIFEST_TYPE_FIELDS = ("typings", "types")


class PackageManifestError(ValueError):
    """Raised when a package.json cannot be parsed as a JSON object."""

    def __init__(self, manifest_path: str, detail: str):
        self.manifest_path = manifest_path
        super().__init__(f"Invalid package manifest {manifest_path}: {detail}")


class WalkOutcome(Enum):
    CONTINUE = "continue"
    FOUND = "found"
    STOP = "stop"


@dataclass(frozen=True)
class WalkStep:
    """Result of probing one directory during an upward walk."""
    outcome: WalkOutcome
    path: Optional[str] = None

    @classmethod
    def keep_climbing(cls) -> 'WalkStep':
        return cls(WalkOutcome.CONTINUE)

    @classmethod
    def found(cls, path: str) -> 'WalkStep':
        return cls(WalkOutcome.FOUND, path)

    @classmethod
    def stop(cls) -> 'WalkStep':
        return cls(WalkOutcome.STOP)


class PackageVariant(Enum):
    SELF = "self"          # node_modules/<scope>/<name>
    AT_TYPES = "at-types"  # node_modules/@types/<mangled key>


def ancestor_directories(start_dir: str) -> Iterator[str]:
    """Yield start_dir and each of its parents up to the filesystem root."""
    current = os.path.normpath(start_dir)
    while True:
        yield current
        parent = os.path.dirname(current)
        if parent == current:
            return
        current = parent


def walk_up(start_dir: str, probe: Callable[[str], WalkStep]) -> Optional[str]:
    """Probe each ancestor directory until one reports FOUND or STOP.

    Returns:
        The found path, or None when the walk stopped or ran out of parents
    """
    for directory in ancestor_directories(start_dir):
        step = probe(directory)
        if step.outcome is WalkOutcome.FOUND:
            return step.path
        if step.outcome is WalkOutcome.STOP:
            return None
    return None


def read_package_manifest(fs: FileSystem, manifest_path: str) -> dict:
    """Read and parse a package.json.

    Raises:
        PackageManifestError: If the content is not a JSON object
    """
    content = fs.read_text(manifest_path)
    try:
        manifest = json.loads(content)
    except json.JSONDecodeError as e:
        raise PackageManifestError(manifest_path, str(e)) from e
    if not isinstance(manifest, dict):
        raise PackageManifestError(manifest_path, "expected a JSON object")
    return manifest


def find_manifest_declaration(fs: FileSystem, package_dir: str, manifest: dict) -> Optional[str]:
    """Pick the root declaration file of a package: typings, types, index.d.ts."""
    for field_name in MANIFEST_TYPE_FIELDS:
        value = manifest.get(field_name)
        if value and isinstance(value, str):
            candidate = os.path.normpath(os.path.join(package_dir, value))
            if fs.exists(candidate):
                return candidate

    index_file = os.path.join(package_dir, INDEX_DTS)
    if fs.exists(index_file):
        return index_file

    return None


class DeclarationLocator:
    """Find .d.ts files for named module references by searching on disk."""

    def __init__(self, fs: FileSystem):
        self.fs = fs

    def find_package_manifest(self, start_dir: str) -> Optional[str]:
        """Nearest package.json at or above start_dir (the package boundary)."""
        for directory in ancestor_directories(start_dir):
            manifest_path = os.path.join(directory, PACKAGE_MANIFEST)
            if self.fs.exists(manifest_path):
                return manifest_path
        return None

    @staticmethod
    def package_root(ref: ModuleReference, directory: str, variant: PackageVariant) -> str:
        if variant is PackageVariant.AT_TYPES:
            return os.path.join(directory, NODE_MODULES, TYPES_SCOPE, ref.mangled_key)
        if ref.scope:
            return os.path.join(directory, NODE_MODULES, ref.scope, ref.name)
        return os.path.join(directory, NODE_MODULES, ref.name)

    def find_declaration(
        self,
        ref: ModuleReference,
        search_root: str,
        variant: PackageVariant,
    ) -> Optional[str]:
        """Search upward from search_root's package for a declaration of ref.

        Args:
            ref: Named module reference (must have a name)
            search_root: Directory to start from, usually the importer's directory
            variant: Which package root to probe at each level

        Returns:
            Absolute path of the declaration file, or None

        Raises:
            ValueError: If ref is a path reference
            PackageManifestError: If a candidate package.json is corrupt
        """
        if not ref.is_named:
            raise ValueError(f"Declaration search needs a named module reference, got {ref!r}")

        # Start searching from the root of the importer's package
        boundary = self.find_package_manifest(search_root)
        if boundary is None:
            return None

        def probe(directory: str) -> WalkStep:
            # Already inside an installed package: skip to the parent
            if os.path.basename(directory) == NODE_MODULES:
                return WalkStep.keep_climbing()

            package_dir = self.package_root(ref, directory, variant)
            manifest_path = os.path.join(package_dir, PACKAGE_MANIFEST)
            if not self.fs.exists(manifest_path):
                return WalkStep.keep_climbing()

            if ref.subpath:
                # 'scheduler/tracing' -> '<root>/tracing.d.ts'
                segments = [s for s in ref.subpath.split("/") if s]
                dts_file = os.path.join(package_dir, *segments) + DTS_EXTENSION
                if self.fs.exists(dts_file):
                    return WalkStep.found(dts_file)
                return WalkStep.stop()

            manifest = read_package_manifest(self.fs, manifest_path)
            dts_file = find_manifest_declaration(self.fs, package_dir, manifest)
            if dts_file:
                return WalkStep.found(dts_file)

            # The package exists but has no declaration for this reference
            return WalkStep.stop()

        return walk_up(os.path.dirname(boundary), probe)

    def find_own_declaration(self, ref: ModuleReference, search_root: str) -> Optional[str]:
        """Declarations shipped inside the package itself."""
        return self.find_declaration(ref, search_root, PackageVariant.SELF)

    def find_at_types_declaration(self, ref: ModuleReference, search_root: str) -> Optional[str]:
        """Declarations from a separate @types/<mangled key> package."""
        return self.find_declaration(ref, search_root, PackageVariant.AT_TYPES)
