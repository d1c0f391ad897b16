"""Tests for the upward declaration search."""

import json
import pytest
from tsresolver.resolver.declaration_locator import (
    DeclarationLocator,
    PackageManifestError,
    PackageVariant,
    WalkStep,
    ancestor_directories,
    walk_up,
)
from tsresolver.resolver.filesystem import InMemoryFileSystem
from tsresolver.resolver.module_ref import parse_module_ref


def manifest(**fields) -> str:
    return json.dumps({'name': 'pkg', **fields})


class TestWalkUp:

    def test_ancestor_directories(self):
        assert list(ancestor_directories('/a/b/c')) == ['/a/b/c', '/a/b', '/a', '/']

    def test_found_ends_walk(self):
        visited = []

        def probe(directory):
            visited.append(directory)
            return WalkStep.found('/hit') if directory == '/a/b' else WalkStep.keep_climbing()

        assert walk_up('/a/b/c', probe) == '/hit'
        assert visited == ['/a/b/c', '/a/b']

    def test_stop_is_a_definitive_miss(self):
        visited = []

        def probe(directory):
            visited.append(directory)
            return WalkStep.stop() if directory == '/a/b' else WalkStep.keep_climbing()

        assert walk_up('/a/b/c', probe) is None
        assert visited == ['/a/b/c', '/a/b']

    def test_exhausted_walk(self):
        assert walk_up('/a/b', lambda d: WalkStep.keep_climbing()) is None


class TestPackageBoundary:

    def test_no_package_boundary(self):
        fs = InMemoryFileSystem({
            '/proj/node_modules/@types/foo/package.json': manifest(),
            '/proj/node_modules/@types/foo/index.d.ts': '',
        })
        locator = DeclarationLocator(fs)
        assert locator.find_at_types_declaration(parse_module_ref('foo'), '/proj/src') is None

    def test_nearest_manifest(self):
        fs = InMemoryFileSystem({
            '/proj/package.json': manifest(),
            '/proj/packages/app/package.json': manifest(),
        })
        locator = DeclarationLocator(fs)
        assert locator.find_package_manifest('/proj/packages/app/src') == '/proj/packages/app/package.json'
        assert locator.find_package_manifest('/proj/lib') == '/proj/package.json'


class TestAtTypesSearch:

    def test_scoped_package_uses_mangled_key(self):
        fs = InMemoryFileSystem({
            '/proj/package.json': manifest(),
            '/proj/node_modules/@types/babel__core/package.json': manifest(types='index.d.ts'),
            '/proj/node_modules/@types/babel__core/index.d.ts': '',
        })
        locator = DeclarationLocator(fs)
        result = locator.find_at_types_declaration(parse_module_ref('@babel/core'), '/proj/src/types')
        assert result == '/proj/node_modules/@types/babel__core/index.d.ts'

    def test_typings_wins_over_types(self):
        fs = InMemoryFileSystem({
            '/proj/package.json': manifest(),
            '/proj/node_modules/@types/foo/package.json': manifest(typings='./a.d.ts', types='./b.d.ts'),
            '/proj/node_modules/@types/foo/a.d.ts': '',
            '/proj/node_modules/@types/foo/b.d.ts': '',
            '/proj/node_modules/@types/foo/index.d.ts': '',
        })
        result = DeclarationLocator(fs).find_at_types_declaration(parse_module_ref('foo'), '/proj')
        assert result == '/proj/node_modules/@types/foo/a.d.ts'

    def test_missing_typings_falls_back_to_types_then_index(self):
        fs = InMemoryFileSystem({
            '/proj/package.json': manifest(),
            '/proj/node_modules/@types/foo/package.json': manifest(typings='gone.d.ts', types='lib/foo.d.ts'),
            '/proj/node_modules/@types/foo/lib/foo.d.ts': '',
            '/proj/node_modules/@types/bar/package.json': manifest(typings='gone.d.ts'),
            '/proj/node_modules/@types/bar/index.d.ts': '',
        })
        locator = DeclarationLocator(fs)
        assert locator.find_at_types_declaration(parse_module_ref('foo'), '/proj') == \
            '/proj/node_modules/@types/foo/lib/foo.d.ts'
        assert locator.find_at_types_declaration(parse_module_ref('bar'), '/proj') == \
            '/proj/node_modules/@types/bar/index.d.ts'

    def test_climbs_past_directories_without_package(self):
        fs = InMemoryFileSystem({
            '/repo/packages/app/package.json': manifest(),
            '/repo/node_modules/@types/react/package.json': manifest(),
            '/repo/node_modules/@types/react/index.d.ts': '',
        })
        result = DeclarationLocator(fs).find_at_types_declaration(
            parse_module_ref('react'), '/repo/packages/app/src'
        )
        assert result == '/repo/node_modules/@types/react/index.d.ts'

    def test_subpath_declaration(self):
        fs = InMemoryFileSystem({
            '/proj/package.json': manifest(),
            '/proj/node_modules/@types/scheduler/package.json': manifest(),
            '/proj/node_modules/@types/scheduler/tracing.d.ts': '',
        })
        result = DeclarationLocator(fs).find_at_types_declaration(
            parse_module_ref('scheduler/tracing'), '/proj/src'
        )
        assert result == '/proj/node_modules/@types/scheduler/tracing.d.ts'

    def test_subpath_miss_stops_search(self):
        # An outer @types package has the file, but the nearer one doesn't
        fs = InMemoryFileSystem({
            '/repo/app/package.json': manifest(),
            '/repo/app/node_modules/@types/scheduler/package.json': manifest(),
            '/repo/node_modules/@types/scheduler/package.json': manifest(),
            '/repo/node_modules/@types/scheduler/tracing.d.ts': '',
        })
        result = DeclarationLocator(fs).find_at_types_declaration(
            parse_module_ref('scheduler/tracing'), '/repo/app/src'
        )
        assert result is None

    def test_package_without_declarations_stops_search(self):
        fs = InMemoryFileSystem({
            '/repo/app/package.json': manifest(),
            '/repo/app/node_modules/@types/foo/package.json': manifest(),
            '/repo/node_modules/@types/foo/package.json': manifest(),
            '/repo/node_modules/@types/foo/index.d.ts': '',
        })
        result = DeclarationLocator(fs).find_at_types_declaration(parse_module_ref('foo'), '/repo/app')
        assert result is None

    def test_skips_node_modules_directories(self):
        # Starting inside an installed package: node_modules/node_modules/... is never probed
        fs = InMemoryFileSystem({
            '/repo/node_modules/lib/package.json': manifest(),
            '/repo/node_modules/node_modules/@types/foo/package.json': manifest(),
            '/repo/node_modules/node_modules/@types/foo/index.d.ts': '',
            '/repo/node_modules/@types/foo/package.json': manifest(),
            '/repo/node_modules/@types/foo/index.d.ts': '',
        })
        result = DeclarationLocator(fs).find_at_types_declaration(parse_module_ref('foo'), '/repo/node_modules/lib')
        assert result == '/repo/node_modules/@types/foo/index.d.ts'


class TestOwnDeclarations:

    def test_package_ships_types(self):
        fs = InMemoryFileSystem({
            '/proj/package.json': manifest(),
            '/proj/node_modules/@babel/core/package.json': manifest(types='lib/index.d.ts'),
            '/proj/node_modules/@babel/core/lib/index.d.ts': '',
        })
        result = DeclarationLocator(fs).find_own_declaration(parse_module_ref('@babel/core'), '/proj/src')
        assert result == '/proj/node_modules/@babel/core/lib/index.d.ts'

    def test_package_root_variants(self):
        ref = parse_module_ref('@babel/core')
        assert DeclarationLocator.package_root(ref, '/p', PackageVariant.SELF) == '/p/node_modules/@babel/core'
        assert DeclarationLocator.package_root(ref, '/p', PackageVariant.AT_TYPES) == \
            '/p/node_modules/@types/babel__core'

    def test_path_reference_rejected(self):
        locator = DeclarationLocator(InMemoryFileSystem())
        with pytest.raises(ValueError):
            locator.find_own_declaration(parse_module_ref('./foo'), '/proj')


class TestManifestErrors:

    def test_malformed_manifest_is_fatal(self):
        fs = InMemoryFileSystem({
            '/proj/package.json': manifest(),
            '/proj/node_modules/@types/foo/package.json': '{ not json',
        })
        with pytest.raises(PackageManifestError) as excinfo:
            DeclarationLocator(fs).find_at_types_declaration(parse_module_ref('foo'), '/proj')
        assert excinfo.value.manifest_path == '/proj/node_modules/@types/foo/package.json'

    def test_non_object_manifest_is_fatal(self):
        fs = InMemoryFileSystem({
            '/proj/package.json': manifest(),
            '/proj/node_modules/@types/foo/package.json': '[]',
        })
        with pytest.raises(PackageManifestError):
            DeclarationLocator(fs).find_at_types_declaration(parse_module_ref('foo'), '/proj')
