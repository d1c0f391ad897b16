"""Module resolution for the type checker.

Three paths, picked by what is known about the containing file:

  A. Indexed by the bundler: use the recorded target, upgrading plain
     JavaScript targets to a co-located .ts/.tsx/.d.ts file or an @types
     package when one exists.
  B. Not indexed but a .d.ts file: declaration files never enter the
     bundler graph, so resolve their imports from disk.
  C. Anything else: unknown to us, so every reference stays unresolved.

No results are cached between calls; every request re-reads the index
and re-probes the disk.
"""
import os
from typing import List, Mapping, Optional, Sequence

from .builtins import is_builtin_module
from .declaration_locator import DTS_EXTENSION, DeclarationLocator
from .dependency_index import DependencyIndex
from .filesystem import FileSystem
from .module_ref import parse_module_ref
from .results import ResolutionResult, ResolvedModule, UnresolvedModule, UnresolvedReason
from ..utils.logger import ResolutionTrace

JAVASCRIPT_EXTENSIONS = frozenset({'.js', '.jsx'})

# Sibling files that can stand in for a JavaScript file, in precedence order
TYPESCRIPT_SIBLING_EXTENSIONS = ('.ts', '.tsx', DTS_EXTENSION)


def is_declaration_file(file_name: str) -> bool:
    return file_name.lower().endswith(DTS_EXTENSION)


class ModuleResolver:
    """Resolve module references to TypeScript source or declaration files.

    The DependencyIndex is shared with whoever keeps it in sync with the
    bundler; the resolver only reads it.
    """

    def __init__(
        self,
        index: DependencyIndex,
        fs: FileSystem,
        trace: Optional[ResolutionTrace] = None,
    ):
        self.index = index
        self.fs = fs
        self.locator = DeclarationLocator(fs)
        self.trace = trace or ResolutionTrace.disabled()

    def resolve_module_names(
        self,
        module_names: Sequence[str],
        containing_file: str,
        reused_names: Optional[Sequence[str]] = None,
        redirected_reference: Optional[object] = None,
    ) -> List[ResolutionResult]:
        """Resolve each module name imported by containing_file.

        Args:
            module_names: Module references in the order the host wants them
            containing_file: File which is importing/requiring each module
            reused_names: Accepted for host compatibility; unused
            redirected_reference: Accepted for host compatibility; unused

        Returns:
            One result per module name, in the same order

        Raises:
            TypeError: If module_names is a single string
            PackageManifestError: If a package.json consulted on disk is corrupt
        """
        if isinstance(module_names, str):
            raise TypeError("module_names must be a sequence of names, not a string")

        self.trace.containing_file(containing_file)

        dependencies = self.index.get(containing_file)
        if dependencies is not None:
            return [self._resolve_from_index(dependencies, name)
                    for name in module_names]

        # .d.ts files aren't in the bundler graph: they are declarations,
        # not sources. Look their imports up on disk.
        if is_declaration_file(containing_file):
            return [self._resolve_from_disk(name, containing_file)
                    for name in module_names]

        self.trace.unresolved("*", UnresolvedReason.UNKNOWN_CONTAINING_FILE.value)
        return [UnresolvedModule(UnresolvedReason.UNKNOWN_CONTAINING_FILE)
                for _ in module_names]

    def _builtin(self, module_name: str) -> UnresolvedModule:
        self.trace.ignored(module_name, UnresolvedReason.BUILTIN.value)
        return UnresolvedModule(UnresolvedReason.BUILTIN)

    def _resolved(self, module_name: str, file_name: str) -> ResolvedModule:
        self.trace.resolved(module_name, file_name)
        return ResolvedModule.for_file(file_name)

    def _resolve_from_index(
        self,
        dependencies: Mapping[str, str],
        module_name: str,
    ) -> ResolutionResult:
        if is_builtin_module(module_name):
            return self._builtin(module_name)

        file_name = dependencies.get(module_name)
        if file_name is None:
            # Seen with flow "import type" modules, which the bundler drops
            self.trace.unresolved(module_name, UnresolvedReason.NOT_IN_INDEX.value)
            return UnresolvedModule(UnresolvedReason.NOT_IN_INDEX)

        ext = os.path.splitext(file_name)[1].lower()
        if ext in JAVASCRIPT_EXTENSIONS:
            ts_file_name = self.find_matching_typescript_file(module_name, file_name)
            if ts_file_name:
                file_name = ts_file_name

        return self._resolved(module_name, file_name)

    def find_matching_typescript_file(
        self,
        module_name: str,
        js_file_name: str,
    ) -> Optional[str]:
        """Find the TypeScript source or declaration file behind a JavaScript file.

        Tries '<base>.ts', '<base>.tsx', '<base>.d.ts' next to the JavaScript
        file, then an @types package for named references, searched from the
        package that contains the JavaScript file.
        """
        base_file_name = os.path.splitext(js_file_name)[0]
        for ext in TYPESCRIPT_SIBLING_EXTENSIONS:
            candidate = base_file_name + ext
            if self.fs.exists(candidate):
                return candidate

        ref = parse_module_ref(module_name)
        if ref.is_named:
            return self.locator.find_at_types_declaration(ref, os.path.dirname(js_file_name))

        return None

    def _resolve_from_disk(self, module_name: str, containing_file: str) -> ResolutionResult:
        if is_builtin_module(module_name):
            return self._builtin(module_name)

        search_root = os.path.dirname(containing_file)
        ref = parse_module_ref(module_name)

        dts_file = None
        if ref.is_named:
            dts_file = (self.locator.find_own_declaration(ref, search_root)
                        or self.locator.find_at_types_declaration(ref, search_root))
        elif ref.subpath:
            # Relative to the containing file: './foo' -> '<dir>/foo.d.ts'
            target = os.path.normpath(os.path.join(search_root, ref.subpath)) + DTS_EXTENSION
            if self.fs.exists(target):
                dts_file = target

        if dts_file:
            return self._resolved(module_name, dts_file)

        self.trace.unresolved(module_name, UnresolvedReason.NO_DECLARATION.value)
        return UnresolvedModule(UnresolvedReason.NO_DECLARATION)
