"""Rich Console that stays printable on non-UTF-8 terminals."""
from typing import Any

from rich.console import Console

from .logger import sanitize_for_terminal, is_utf8_capable


class SafeConsole(Console):
    """Console that replaces Unicode icons with ASCII where the terminal needs it.

    Output for the resolver CLI is mostly file paths and arrows; on legacy
    Windows consoles the arrows would otherwise raise UnicodeEncodeError.
    """

    def __init__(self, *args, **kwargs):
        self._needs_sanitization = not is_utf8_capable()
        if self._needs_sanitization:
            kwargs['legacy_windows'] = True
        super().__init__(*args, **kwargs)

    def print(self, *objects: Any, **kwargs) -> None:
        if self._needs_sanitization:
            objects = tuple(
                sanitize_for_terminal(obj) if isinstance(obj, str) else obj
                for obj in objects
            )
        super().print(*objects, **kwargs)
