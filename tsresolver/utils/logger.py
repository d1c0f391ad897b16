"""Resolution trace output with ASCII fallback for non-UTF-8 terminals.

The resolver reports each request as a short trace:

    /repo/app/index.js
       react-native → /repo/node_modules/@types/react-native/index.d.ts
       fs → IGNORED: built-in module

Arrows and check marks are swapped for ASCII on terminals that can't
encode them.
"""
import sys
import locale
from typing import Callable, Iterable, Optional


ICON_MAP = {
    '→': '->',
    '←': '<-',
    '✓': '[OK]',
    '✗': '[FAIL]',
    '⚠': '[WARN]',
    '…': '...',
    '•': '*',
}


def detect_terminal_encoding() -> str:
    """Detect the terminal's encoding capability.

    Returns:
        str: Terminal encoding ('utf-8', 'cp1252', 'ascii', etc.)
    """
    if hasattr(sys.stdout, 'encoding') and sys.stdout.encoding:
        return sys.stdout.encoding.lower()

    try:
        return locale.getpreferredencoding().lower()
    except Exception:
        pass

    return 'ascii'


def is_utf8_capable() -> bool:
    return detect_terminal_encoding() in ('utf-8', 'utf8', 'utf_8')


def sanitize_for_terminal(text: str) -> str:
    """Replace Unicode icons with ASCII equivalents if the terminal needs it."""
    if is_utf8_capable():
        return text

    for unicode_char, ascii_replacement in ICON_MAP.items():
        text = text.replace(unicode_char, ascii_replacement)
    return text


class ResolutionTrace:
    """Per-request trace of resolver decisions.

    Disabled traces skip formatting entirely, so leaving one wired into a
    hot resolution path costs a single attribute check.
    """

    def __init__(self, write: Optional[Callable[[str], None]] = None, enabled: bool = True):
        self._write = write
        self.enabled = enabled and write is not None

    @classmethod
    def disabled(cls) -> 'ResolutionTrace':
        return cls(None, enabled=False)

    @classmethod
    def to_console(cls, console, enabled: bool = True) -> 'ResolutionTrace':
        """Trace into a rich Console (markup disabled, paths may contain brackets)."""
        return cls(lambda line: console.print(line, markup=False, highlight=False), enabled)

    def emit(self, line: str) -> None:
        if self.enabled:
            self._write(sanitize_for_terminal(line))

    def containing_file(self, file_name: str) -> None:
        self.emit(file_name)

    def resolved(self, module_name: str, file_name: str) -> None:
        self.emit(f"   {module_name} → {file_name}")

    def ignored(self, module_name: str, reason: str) -> None:
        self.emit(f"   {module_name} → IGNORED: {reason}")

    def unresolved(self, module_name: str, reason: str) -> None:
        self.emit(f"   {module_name} → NO RESOLUTION: {reason}")

    def failed_lookups(self, name: str, locations: Iterable[str]) -> None:
        self.emit(f"   {name} → FAILED: {', '.join(locations)}")
