"""Denylist screening for submitted shell commands.

The check is a case-insensitive substring match against a fixed set of
patterns describing destructive or system-disruptive operations. It is a
textual heuristic: whitespace tricks, variable expansion or encoding
(e.g. ``rm${IFS}-rf${IFS}/``) will slip through. Treat it as a best-effort
guard in front of the executor, not as a security boundary.
"""

from __future__ import annotations

import logging
from typing import Iterable

logger = logging.getLogger(__name__)


DEFAULT_DENYLIST: frozenset[str] = frozenset(
    {
        "rm -rf /",
        "mkfs",
        "dd if=",
        "format",
        "fdisk",
        "shutdown",
        "reboot",
        "halt",
        "init 0",
        "init 6",
        "kill -9 1",
        "killall -9",
        ":(){ :|:& };:",  # fork bomb
        "chmod 777 /",
        "chown root /",
    }
)


class CommandValidator:
    """Screens commands against an immutable denylist.

    Example usage::

        validator = CommandValidator()
        validator.is_dangerous("uname -a")   # False
        validator.is_dangerous("RM -RF /")   # True
    """

    def __init__(self, patterns: Iterable[str] = DEFAULT_DENYLIST) -> None:
        self._patterns = frozenset(p.lower() for p in patterns if p)

    @property
    def patterns(self) -> frozenset[str]:
        return self._patterns

    def match(self, command: str) -> str | None:
        """Return the first denylisted pattern found in the command, if any."""
        lowered = command.lower()
        for pattern in sorted(self._patterns):
            if pattern in lowered:
                return pattern
        return None

    def is_dangerous(self, command: str) -> bool:
        return self.match(command) is not None


def is_dangerous(command: str, patterns: Iterable[str] = DEFAULT_DENYLIST) -> bool:
    """Check a command against a denylist without keeping a validator around."""
    lowered = command.lower()
    return any(p.lower() in lowered for p in patterns if p)
