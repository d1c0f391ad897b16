"""Resolution of `/// <reference types="..." />` directives.

The resolver passes each directive straight to a directive-resolution
primitive and hands back whatever it found. The default primitive follows
TypeScript's own lookup: type roots first (primary), then a node_modules
search from the containing file (secondary).
"""
import os
from typing import Callable, List, Optional, Sequence

from .compiler_options import CompilerOptions
from .declaration_locator import (
    DTS_EXTENSION,
    INDEX_DTS,
    MANIFEST_TYPE_FIELDS,
    NODE_MODULES,
    PACKAGE_MANIFEST,
    TYPES_SCOPE,
    ancestor_directories,
    read_package_manifest,
)
from .filesystem import FileSystem
from .module_ref import parse_module_ref
from .results import ResolvedTypeReferenceDirective, TypeReferenceResolution
from ..utils.logger import ResolutionTrace

DirectiveResolver = Callable[
    [str, str, CompilerOptions, FileSystem, Optional[object]],
    TypeReferenceResolution,
]


def _probe_type_package(fs: FileSystem, package_dir: str, failed: List[str]) -> Optional[str]:
    manifest_path = os.path.join(package_dir, PACKAGE_MANIFEST)
    if fs.exists(manifest_path):
        manifest = read_package_manifest(fs, manifest_path)
        for field_name in MANIFEST_TYPE_FIELDS:
            value = manifest.get(field_name)
            if value and isinstance(value, str):
                candidate = os.path.normpath(os.path.join(package_dir, value))
                if fs.exists(candidate):
                    return candidate
                failed.append(candidate)
    else:
        failed.append(manifest_path)

    index_file = os.path.join(package_dir, INDEX_DTS)
    if fs.exists(index_file):
        return index_file
    failed.append(index_file)
    return None


def default_type_roots(fs: FileSystem, start_dir: str) -> List[str]:
    """Every existing node_modules/@types directory at or above start_dir."""
    roots = []
    for directory in ancestor_directories(start_dir):
        candidate = os.path.join(directory, NODE_MODULES, TYPES_SCOPE)
        if fs.exists(candidate):
            roots.append(candidate)
    return roots


def resolve_type_reference_directive(
    name: str,
    containing_file: str,
    options: CompilerOptions,
    fs: FileSystem,
    redirected_reference: Optional[object] = None,
) -> TypeReferenceResolution:
    """Resolve one type-reference directive name.

    Args:
        name: Directive name, e.g. 'node' or 'jest'
        containing_file: File holding the directive
        options: Compiler options (typeRoots, config directory)
        fs: Filesystem to probe
        redirected_reference: Accepted for host compatibility; unused

    Returns:
        TypeReferenceResolution with the hit (if any) and every failed probe
    """
    failed: List[str] = []
    containing_dir = os.path.dirname(containing_file)

    type_roots = options.type_roots
    if type_roots is None:
        type_roots = default_type_roots(fs, options.config_dir or containing_dir)

    for root in type_roots:
        hit = _probe_type_package(fs, os.path.join(root, name), failed)
        if hit:
            return TypeReferenceResolution(ResolvedTypeReferenceDirective(hit, primary=True), failed)

    mangled = parse_module_ref(name).mangled_key or name
    for directory in ancestor_directories(containing_dir):
        if os.path.basename(directory) == NODE_MODULES:
            continue
        modules_dir = os.path.join(directory, NODE_MODULES)
        if not fs.exists(modules_dir):
            continue

        dts_file = os.path.join(modules_dir, name) + DTS_EXTENSION
        if fs.exists(dts_file):
            return TypeReferenceResolution(ResolvedTypeReferenceDirective(dts_file, primary=False), failed)
        failed.append(dts_file)

        for package_dir in (os.path.join(modules_dir, name),
                            os.path.join(modules_dir, TYPES_SCOPE, mangled)):
            hit = _probe_type_package(fs, package_dir, failed)
            if hit:
                return TypeReferenceResolution(ResolvedTypeReferenceDirective(hit, primary=False), failed)

    return TypeReferenceResolution(None, failed)


class TypeReferenceResolver:
    """Pass-through resolver for type-reference directives."""

    def __init__(
        self,
        options: CompilerOptions,
        fs: FileSystem,
        directive_resolver: DirectiveResolver = resolve_type_reference_directive,
        trace: Optional[ResolutionTrace] = None,
    ):
        self.options = options
        self.fs = fs
        self.directive_resolver = directive_resolver
        self.trace = trace or ResolutionTrace.disabled()

    def lookup_type_reference_directives(
        self,
        type_directive_names: Sequence[str],
        containing_file: str,
        redirected_reference: Optional[object] = None,
    ) -> List[TypeReferenceResolution]:
        """Full lookup results, failed locations included, one per name."""
        if isinstance(type_directive_names, str):
            raise TypeError("type_directive_names must be a sequence of names, not a string")

        self.trace.emit(f"resolveType: {containing_file}")
        results = []
        for name in type_directive_names:
            result = self.directive_resolver(
                name, containing_file, self.options, self.fs, redirected_reference
            )
            results.append(result)
            if result.resolved:
                flag = "P" if result.resolved.primary else "!P"
                self.trace.resolved(name, f"{flag} {result.resolved.resolved_file_name}")
            else:
                self.trace.failed_lookups(name, result.failed_lookup_locations)
        return results

    def resolve_type_reference_directives(
        self,
        type_directive_names: Sequence[str],
        containing_file: str,
        redirected_reference: Optional[object] = None,
    ) -> List[Optional[ResolvedTypeReferenceDirective]]:
        results = self.lookup_type_reference_directives(
            type_directive_names, containing_file, redirected_reference
        )
        return [result.resolved for result in results]
