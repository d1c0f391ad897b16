"""Module reference parsing.

Splits a raw import string into scope, package name, subpath and the
mangled key TypeScript uses for scoped `@types` packages.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ModuleReference:
    """Components of a module reference.

    Examples of how references are parsed:

      'react-native'              name='react-native', mangled_key='react-native'
      'react-native/Libraries/Promise'
                                  name='react-native', subpath='/Libraries/Promise'
      '@babel/core'               scope='@babel', name='core', mangled_key='babel__core'
      '@babel/core/parse'         scope='@babel', name='core', subpath='/parse'
      './parser'                  subpath='./parser'
      '/absolute/path/src/parser' subpath='/absolute/path/src/parser'
    """
    scope: Optional[str] = None
    name: Optional[str] = None
    subpath: Optional[str] = None
    mangled_key: Optional[str] = None

    @property
    def is_named(self) -> bool:
        # A defined, non-empty name means this is a package ("root") module
        return bool(self.name)

    @property
    def package_name(self) -> Optional[str]:
        """Scope and name joined the way they appear under node_modules."""
        if not self.is_named:
            return None
        if self.scope:
            return f"{self.scope}/{self.name}"
        return self.name


def mangle_scoped_package_name(scope: Optional[str], name: str) -> str:
    """Flatten a scoped package name: ('@babel', 'core') -> 'babel__core'."""
    if scope:
        return scope[1:] + "__" + name
    return name


def parse_module_ref(reference: str) -> ModuleReference:
    """Parse a module reference into its components.

    Total over any string input; never raises.

    Args:
        reference: Raw module reference, e.g. '@scope/pkg/sub/path' or './x'

    Returns:
        ModuleReference with the parsed components
    """
    if reference.startswith("."):
        return ModuleReference(subpath=reference)

    parts = reference.split("/")

    scope = None
    if parts[0].startswith("@"):
        scope = parts.pop(0)

    name = parts.pop(0) if parts else None

    subpath = None
    if parts:
        subpath = "/" + "/".join(parts)

    mangled_key = None
    if name:
        mangled_key = mangle_scoped_package_name(scope, name)
    else:
        # '/abs/path' splits into ['', ...]: no package name, only a path
        name = None

    return ModuleReference(
        scope=scope,
        name=name,
        subpath=subpath,
        mangled_key=mangled_key,
    )
