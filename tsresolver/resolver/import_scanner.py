"""Collect the module references a source file imports.

These are the names a compiler host would hand to resolve_module_names for
the file: static imports (including ``import type``), re-exports,
``require('x')`` and dynamic ``import('x')``.
"""
import re
from typing import List, Union

# /// <reference types="node" />
TYPES_DIRECTIVE_PATTERN = re.compile(
    r'^\s*///\s*<reference\s+types\s*=\s*["\']([^"\']+)["\']\s*/?>',
    re.MULTILINE,
)


class ImportScanner:
    def scan(self, root_node, source_code: Union[str, bytes]) -> List[str]:
        """Walk a tree-sitter tree and return imported module names.

        Returns:
            Module names in source order, without duplicates
        """
        if isinstance(source_code, str):
            source_code = source_code.encode('utf-8')

        modules: List[str] = []
        seen = set()

        def get_text(node) -> str:
            return source_code[node.start_byte:node.end_byte].decode('utf-8')

        def add(string_node) -> None:
            if string_node is None or string_node.type not in ('string', 'template_string'):
                return
            # No substitutions: `./a${b}` can't be resolved statically
            if any(child.type == 'template_substitution' for child in string_node.named_children):
                return
            name = get_text(string_node).strip('"\'`')
            if name and name not in seen:
                seen.add(name)
                modules.append(name)

        stack = [root_node]
        while stack:
            node = stack.pop()

            # import x from 'mod' / import type { T } from 'mod' / import 'mod'
            # export { x } from 'mod' / export * from 'mod'
            if node.type in ('import_statement', 'export_statement'):
                add(node.child_by_field_name('source'))

            # require('mod') / import('mod')
            elif node.type == 'call_expression':
                function_node = node.child_by_field_name('function')
                args_node = node.child_by_field_name('arguments')
                if (function_node is not None and args_node is not None
                        and args_node.named_child_count > 0
                        and (function_node.type == 'import' or get_text(function_node) == 'require')):
                    add(args_node.named_children[0])

            # import fs = require('fs')  (TypeScript)
            elif node.type == 'import_require_clause':
                add(node.child_by_field_name('source'))

            # Reversed so nodes pop in source order
            stack.extend(reversed(node.named_children))

        return modules

    @staticmethod
    def scan_type_directives(source_code: Union[str, bytes]) -> List[str]:
        """Return the names of ``/// <reference types="..." />`` directives."""
        if isinstance(source_code, bytes):
            source_code = source_code.decode('utf-8')

        names: List[str] = []
        for name in TYPES_DIRECTIVE_PATTERN.findall(source_code):
            if name not in names:
                names.append(name)
        return names
