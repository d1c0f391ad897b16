"""Read-only filesystem capability used by the resolver.

The resolver only ever asks two questions of the disk: does a path exist,
and what does a (manifest) file contain. Both are injected so tests can
swap in an in-memory tree.
"""
import os
from pathlib import Path
from typing import Dict, Mapping, Optional, Protocol, Set


class FileSystem(Protocol):
    def exists(self, path: str) -> bool:
        ...

    def read_text(self, path: str) -> str:
        ...


class DiskFileSystem:
    """FileSystem backed by the real disk."""

    def __init__(self, encoding: str = 'utf-8'):
        self.encoding = encoding

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def read_text(self, path: str) -> str:
        return Path(path).read_text(encoding=self.encoding)


class InMemoryFileSystem:
    """Dict-backed FileSystem. Directories are implied by file paths.

    Every probe is counted in ``calls`` so callers can assert that a code
    path never touched the filesystem.
    """

    def __init__(self, files: Optional[Mapping[str, str]] = None):
        self._files: Dict[str, str] = {}
        self._dirs: Set[str] = set()
        self.calls = 0
        for path, content in (files or {}).items():
            self.write(path, content)

    def write(self, path: str, content: str = '') -> None:
        path = os.path.normpath(path)
        self._files[path] = content
        parent = os.path.dirname(path)
        while parent and parent not in self._dirs:
            self._dirs.add(parent)
            next_parent = os.path.dirname(parent)
            if next_parent == parent:
                break
            parent = next_parent

    def exists(self, path: str) -> bool:
        self.calls += 1
        path = os.path.normpath(path)
        return path in self._files or path in self._dirs

    def read_text(self, path: str) -> str:
        self.calls += 1
        path = os.path.normpath(path)
        if path not in self._files:
            raise FileNotFoundError(f"File not found: {path}")
        return self._files[path]
