"""Host-facing resolver service.

Bundles the dependency index, module resolution and type-reference
resolution behind the surface a compiler host calls into.
"""
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from .compiler_options import CompilerOptions, load_compiler_options
from .dependency_index import DependencyIndex
from .filesystem import DiskFileSystem, FileSystem
from .module_resolver import ModuleResolver
from .results import ResolutionResult, ResolvedTypeReferenceDirective, TypeReferenceResolution
from .type_reference import DirectiveResolver, TypeReferenceResolver, resolve_type_reference_directive
from ..utils.logger import ResolutionTrace


class ResolverService:
    """Resolvers plus the dependency index mutation surface."""

    def __init__(
        self,
        options: Optional[CompilerOptions] = None,
        fs: Optional[FileSystem] = None,
        index: Optional[DependencyIndex] = None,
        trace: Optional[ResolutionTrace] = None,
        directive_resolver: DirectiveResolver = resolve_type_reference_directive,
    ):
        self.options = options or CompilerOptions()
        self.fs = fs or DiskFileSystem()
        self.index = index if index is not None else DependencyIndex()
        self.trace = trace or ResolutionTrace.disabled()
        self.module_resolver = ModuleResolver(self.index, self.fs, self.trace)
        self.type_reference_resolver = TypeReferenceResolver(
            self.options, self.fs, directive_resolver, self.trace
        )

    @classmethod
    def for_project(cls, config_file: str | Path, **kwargs) -> 'ResolverService':
        """Create a service using the compiler options of a tsconfig file."""
        return cls(options=load_compiler_options(config_file), **kwargs)

    # Dependency index

    def has_file(self, file_name: str) -> bool:
        return self.index.has(file_name)

    def add_file(self, file_name: str, dependencies: Mapping[str, str]) -> bool:
        return self.index.add(file_name, dependencies)

    def update_file(self, file_name: str, dependencies: Mapping[str, str]) -> bool:
        return self.index.update(file_name, dependencies)

    def remove_file(self, file_name: str) -> bool:
        return self.index.remove(file_name)

    def remove_all_files(self) -> None:
        self.index.clear()

    # Resolution

    def resolve_module_names(
        self,
        module_names: Sequence[str],
        containing_file: str,
        reused_names: Optional[Sequence[str]] = None,
        redirected_reference: Optional[object] = None,
    ) -> List[ResolutionResult]:
        return self.module_resolver.resolve_module_names(
            module_names, containing_file, reused_names, redirected_reference
        )

    def resolve_type_reference_directives(
        self,
        type_directive_names: Sequence[str],
        containing_file: str,
        redirected_reference: Optional[object] = None,
    ) -> List[Optional[ResolvedTypeReferenceDirective]]:
        return self.type_reference_resolver.resolve_type_reference_directives(
            type_directive_names, containing_file, redirected_reference
        )

    def lookup_type_reference_directives(
        self,
        type_directive_names: Sequence[str],
        containing_file: str,
        redirected_reference: Optional[object] = None,
    ) -> List[TypeReferenceResolution]:
        return self.type_reference_resolver.lookup_type_reference_directives(
            type_directive_names, containing_file, redirected_reference
        )
