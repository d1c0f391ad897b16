"""Compiler options shared by the resolvers, read from a tsconfig.json."""
import json
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional


# Strings are matched first so "//" inside a value survives
_JSONC_TOKENS = re.compile(r'("(?:\\.|[^"\\])*")|//[^\n]*|/\*.*?\*/', re.DOTALL)


@dataclass
class CompilerOptions:
    """The subset of TypeScript compiler options the resolvers consult."""
    type_roots: Optional[List[str]] = None  # absolute paths
    config_dir: Optional[str] = None


def strip_json_comments(content: str) -> str:
    """Remove // and /* */ comments and trailing commas (tsconfig is JSONC)."""
    content = _JSONC_TOKENS.sub(lambda m: m.group(1) or "", content)
    content = re.sub(r',(\s*[}\]])', r'\1', content)
    return content


def find_project(search_path: str | Path, file_name: str = "tsconfig.json") -> Optional[Path]:
    """Find the nearest project config file at or above search_path.

    Args:
        search_path: File or directory to start from
        file_name: Config file name to look for

    Returns:
        Path to the config file, or None if there is none
    """
    current = Path(search_path).resolve()
    if current.is_file():
        current = current.parent

    for directory in (current, *current.parents):
        candidate = directory / file_name
        if candidate.is_file():
            return candidate
    return None


def load_compiler_options(config_file: str | Path) -> CompilerOptions:
    """Load compiler options from a tsconfig file.

    Relative typeRoots are resolved against the config's directory.

    Raises:
        FileNotFoundError: If config_file doesn't exist
        ValueError: If the file isn't valid JSON (after comment stripping)
    """
    config_file = Path(config_file).resolve()
    if not config_file.exists():
        raise FileNotFoundError(f"Project file not found: {config_file}")

    content = strip_json_comments(config_file.read_text(encoding='utf-8'))
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid project file {config_file}: {e}") from e

    config_dir = str(config_file.parent)
    raw = data.get('compilerOptions') or {}

    type_roots = raw.get('typeRoots')
    if type_roots is not None:
        type_roots = [os.path.normpath(os.path.join(config_dir, root)) for root in type_roots]

    return CompilerOptions(
        type_roots=type_roots,
        config_dir=config_dir,
    )
