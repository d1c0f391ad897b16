"""Tests for collecting module references from source files."""

import pytest
from tsresolver.resolver.import_scanner import ImportScanner
from tsresolver.resolver.parser import LanguageParser


def scan(source: str, language: str = 'typescript'):
    parser = LanguageParser(language)
    code = source.encode('utf-8')
    tree = parser.parse_source(code)
    return ImportScanner().scan(tree.root_node, code)


class TestStaticImports:

    def test_import_forms(self):
        source = '''
import React from 'react';
import * as path from "path";
import { a, b as c } from './helpers';
import './polyfills';
'''
        assert scan(source) == ['react', 'path', './helpers', './polyfills']

    def test_type_only_import(self):
        assert scan("import type { Props } from './types';\n") == ['./types']

    def test_re_exports(self):
        source = "export * from './a';\nexport { b } from '@scope/b/sub';\nexport const x = 1;\n"
        assert scan(source) == ['./a', '@scope/b/sub']

    def test_duplicates_collapsed(self):
        source = "import a from './a';\nimport { b } from './a';\n"
        assert scan(source) == ['./a']


class TestCalls:

    def test_require_and_dynamic_import(self):
        source = '''
const fs = require('fs');
function load() {
  return import('./lazy');
}
'''
        assert scan(source, 'javascript') == ['fs', './lazy']

    def test_non_literal_require_is_skipped(self):
        source = "const name = './x';\nrequire(name);\nrequire(`./tpl/${name}`);\n"
        assert scan(source, 'javascript') == []

    def test_jsx_source(self):
        source = "import Button from './Button';\nexport default () => <Button />;\n"
        assert scan(source, 'tsx') == ['./Button']


def test_parser_from_extension():
    assert LanguageParser.from_file_extension('a/b.tsx').language == 'tsx'
    assert LanguageParser.from_file_extension('a/b.d.ts').language == 'typescript'
    assert LanguageParser.from_file_extension('a/b.mjs').language == 'javascript'
    assert LanguageParser.from_file_extension('a/b.json') is None


def test_unsupported_language():
    with pytest.raises(ValueError):
        LanguageParser('python')


def test_type_directives():
    source = '''/// <reference types="node" />
/// <reference types='jest'/>
/// <reference path="./globals.d.ts" />
/// <reference types="node" />
declare const x: number;
'''
    assert ImportScanner.scan_type_directives(source) == ['node', 'jest']


def test_parse_file_keeps_source(tmp_path):
    path = tmp_path / 'index.ts'
    path.write_text("import x from './x';\n")
    parsed = LanguageParser.from_file_extension(path).parse_file(path)
    assert parsed.path == path
    assert ImportScanner().scan(parsed.root_node, parsed.source) == ['./x']


def test_parse_missing_file(tmp_path):
    with pytest.raises(OSError):
        LanguageParser('typescript').parse_file(tmp_path / 'missing.ts')
