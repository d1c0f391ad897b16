"""Tree-sitter parsers for the source files an importer can be written in."""
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Optional
from tree_sitter import Language, Parser, Tree
import tree_sitter_javascript as tsjavascript
import tree_sitter_typescript as tstypescript

# Grammar per dialect; TSX needs its own grammar for JSX inside TypeScript
GRAMMARS: Dict[str, Callable[[], object]] = {
    'javascript': tsjavascript.language,
    'typescript': tstypescript.language_typescript,
    'tsx': tstypescript.language_tsx,
}


@dataclass
class ParsedSource:
    """A syntax tree together with the bytes it was parsed from."""
    path: Optional[Path]
    source: bytes
    tree: Tree

    @property
    def root_node(self):
        return self.tree.root_node


class LanguageParser:
    """Parser for one JavaScript dialect (tree-sitter v0.22+ API)."""

    SUPPORTED_LANGUAGES = {
        '.js': 'javascript',
        '.jsx': 'javascript',
        '.mjs': 'javascript',
        '.cjs': 'javascript',
        '.ts': 'typescript',
        '.mts': 'typescript',
        '.cts': 'typescript',
        '.tsx': 'tsx',
    }

    def __init__(self, language: str):
        """Initialize parser for a dialect.

        Args:
            language: One of 'javascript', 'typescript', 'tsx'

        Raises:
            ValueError: If language is not supported
        """
        grammar = GRAMMARS.get(language)
        if grammar is None:
            raise ValueError(f"Unsupported language: {language}")
        self.language = language
        self.parser = Parser(Language(grammar()))

    def parse_source(self, source_code: bytes) -> Tree:
        return self.parser.parse(source_code)

    def parse_file(self, file_path: str | Path) -> ParsedSource:
        """Read and parse a file.

        Raises:
            OSError: If the file can't be read
        """
        file_path = Path(file_path)
        source = file_path.read_bytes()
        return ParsedSource(file_path, source, self.parser.parse(source))

    @classmethod
    def from_file_extension(cls, file_path: str | Path) -> Optional['LanguageParser']:
        """Pick the dialect from the suffix ('.d.ts' ends in '.ts', so TypeScript).

        Returns:
            LanguageParser instance, or None if extension not supported
        """
        language = cls.SUPPORTED_LANGUAGES.get(Path(file_path).suffix.lower())
        if language:
            return cls(language)
        return None
