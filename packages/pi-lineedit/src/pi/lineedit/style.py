"""ANSI styling helpers for editor decorations."""

from __future__ import annotations

_GREY = "\x1b[90m"
_DEFAULT_FG = "\x1b[39m"


def grey(text: str) -> str:
    """Bright-black foreground, used for the ghost suggestion."""
    return f"{_GREY}{text}{_DEFAULT_FG}"
