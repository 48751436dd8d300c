"""Display helpers shared by the terminal UI and the CLI."""

from typing import Dict, List, Optional

from otp_tabs.sessions import Message, SessionStore


def format_code(code: Optional[str]) -> str:
    """Group an even-length code in two halves: '123456' -> '123 456'.

    Odd lengths and very short codes are returned unchanged.
    """
    if not code:
        return ""
    if len(code) >= 4 and len(code) % 2 == 0:
        half = len(code) // 2
        return f"{code[:half]} {code[half:]}"
    return code


def countdown_bar(remaining: int, period: int, width: int) -> str:
    """Render `remaining / period` as a bar of `width` cells."""
    if width <= 0 or period <= 0:
        return ""
    remaining = max(0, min(remaining, period))
    filled = round(width * remaining / period)
    return "█" * filled + "░" * (width - filled)


def format_message(message: Optional[Message]) -> str:
    """Prefix a message with a check mark (info) or a warning sign (error)."""
    if message is None:
        return ""
    icon = "⚠ " if message.is_error else "✓ "
    return icon + message.text


def truncate(text: str, max_length: int) -> str:
    """Truncate text to max_length, appending '…' if truncated."""
    if max_length <= 0:
        return ""
    if len(text) <= max_length:
        return text
    return text[: max_length - 1] + "…"


def session_rows(store: SessionStore) -> List[Dict[str, object]]:
    """Everything the tab view draws, one dict per session in tab order."""
    active = store.active_index
    rows: List[Dict[str, object]] = []
    for index, session in enumerate(store):
        rows.append({
            "display_name": session.display_name,
            "secret_text": session.secret_text,
            "current_code": format_code(session.current_code),
            "remaining_seconds": session.remaining_seconds if session.has_code else None,
            "last_message": session.message.text if session.message else None,
            "message_kind": session.message.kind.value if session.message else None,
            "message_line": format_message(session.message),
            "editing_name": session.is_renaming,
            "active": index == active,
        })
    return rows
