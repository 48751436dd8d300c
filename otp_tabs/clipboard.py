"""
clipboard.py — Put a code on the system clipboard.

There is no portable clipboard API in the standard library, so the copy is
piped into whichever clipboard tool the platform ships: `pbcopy` on macOS,
`wl-copy` / `xclip` / `xsel` on Linux, `clip` on Windows.
"""

import logging
import shutil
import subprocess
from typing import List, Optional, Protocol, Sequence

from otp_tabs.errors import ClipboardError

logger = logging.getLogger(__name__)

# Candidate commands, tried in order; the first one found on PATH is used.
CLIPBOARD_COMMANDS: Sequence[Sequence[str]] = (
    ("pbcopy",),
    ("wl-copy",),
    ("xclip", "-selection", "clipboard"),
    ("xsel", "--clipboard", "--input"),
    ("clip",),
)


class ClipboardSink(Protocol):
    def copy(self, text: str) -> None:
        """Place `text` on the clipboard or raise ClipboardError."""


def find_clipboard_command(
    candidates: Sequence[Sequence[str]] = CLIPBOARD_COMMANDS,
) -> Optional[List[str]]:
    """
    Return the first clipboard command available in PATH, or None.

    Uses shutil.which, so nothing is executed while probing.
    """
    for command in candidates:
        if shutil.which(command[0]) is not None:
            return list(command)
    return None


class CommandClipboard:
    """ClipboardSink backed by an external clipboard tool."""

    def __init__(self, command: Optional[Sequence[str]] = None, timeout: float = 2.0) -> None:
        self.command = list(command) if command is not None else None
        self.timeout = timeout

    def _resolve(self) -> List[str]:
        if self.command is None:
            self.command = find_clipboard_command()
        if self.command is None:
            raise ClipboardError(
                "Failed to access clipboard: no clipboard tool found "
                "(install xclip, xsel or wl-clipboard)"
            )
        return self.command

    def copy(self, text: str) -> None:
        """
        Pipe `text` (UTF-8) into the clipboard tool.

        Raises:
            ClipboardError: no tool available, the tool could not be started,
                timed out, or exited with a non-zero status
        """
        command = self._resolve()
        try:
            subprocess.run(
                command,
                input=text.encode("utf-8"),
                check=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                timeout=self.timeout,
            )
        except OSError as e:
            raise ClipboardError(f"Failed to access clipboard: {e}") from e
        except subprocess.TimeoutExpired as e:
            raise ClipboardError(f"Failed to copy to clipboard: {command[0]} timed out") from e
        except subprocess.CalledProcessError as e:
            detail = e.stderr.decode("utf-8", "replace").strip() if e.stderr else f"exit status {e.returncode}"
            raise ClipboardError(f"Failed to copy to clipboard: {detail}") from e
        logger.debug("Copied %d characters via %s", len(text), command[0])
