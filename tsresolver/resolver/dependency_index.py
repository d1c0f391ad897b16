"""Per-file dependency records fed by the bundler.

Each record maps a module reference, exactly as written in the containing
file, to the absolute path the bundler resolved it to:

    {
        'react-native': '/repos/myproject/node_modules/react-native-windows/index.js',
        './App.tsx':    '/repos/myproject/packages/my-app/src/App.native.tsx',
        '../app.json':  '/repos/myproject/packages/my-app/app.json',
    }
"""
from typing import Dict, Iterator, Mapping, Optional

# module reference -> absolute path
DependencyRecord = Dict[str, str]


class DependencyIndex:
    """Mapping from containing file to its DependencyRecord.

    Records are replaced wholesale; there is no single-key mutation.
    """

    def __init__(self):
        self._files: Dict[str, DependencyRecord] = {}

    def has(self, file_name: str) -> bool:
        return file_name in self._files

    def add(self, file_name: str, dependencies: Mapping[str, str]) -> bool:
        """Add a record for a file the index has not seen yet.

        Returns:
            False if the file is already indexed (the existing record is kept)
        """
        if self.has(file_name):
            return False
        self._files[file_name] = dict(dependencies)
        return True

    def update(self, file_name: str, dependencies: Mapping[str, str]) -> bool:
        """Replace the record of an indexed file.

        Returns:
            False if the file is not indexed
        """
        if not self.has(file_name):
            return False
        self._files[file_name] = dict(dependencies)
        return True

    def remove(self, file_name: str) -> bool:
        if not self.has(file_name):
            return False
        del self._files[file_name]
        return True

    def clear(self) -> None:
        self._files = {}

    def get(self, file_name: str) -> Optional[DependencyRecord]:
        """Return the record for a file, or None if it is not indexed."""
        return self._files.get(file_name)

    def files(self) -> Iterator[str]:
        return iter(self._files)

    def __len__(self) -> int:
        return len(self._files)

    def __contains__(self, file_name: object) -> bool:
        return file_name in self._files
