"""Editable line buffer with a cursor offset."""

from __future__ import annotations


class CursorRangeError(ValueError):
    """Raised when the cursor leaves ``[0, len(buffer)]``."""


class LineState:
    """The text being edited and the cursor position within it.

    Every mutation re-checks ``0 <= cursor <= len(buffer)``. Requests that
    would move the cursor out of range are rejected by returning ``False``
    rather than clamped, so callers can skip redrawing.
    """

    def __init__(self, buffer: str = "", cursor: int | None = None) -> None:
        self._buffer = buffer
        self._cursor = len(buffer) if cursor is None else cursor
        self._check()

    def __repr__(self) -> str:
        return f"LineState(buffer={self._buffer!r}, cursor={self._cursor})"

    @property
    def buffer(self) -> str:
        return self._buffer

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def at_end(self) -> bool:
        return self._cursor == len(self._buffer)

    def insert(self, text: str) -> None:
        """Splice *text* in at the cursor and advance past it."""
        c = self._cursor
        self._buffer = self._buffer[:c] + text + self._buffer[c:]
        self._cursor = c + len(text)
        self._check()

    def delete_backward(self) -> bool:
        """Remove the character before the cursor."""
        if self._cursor == 0:
            return False
        c = self._cursor
        self._buffer = self._buffer[: c - 1] + self._buffer[c:]
        self._cursor = c - 1
        self._check()
        return True

    def move(self, delta: int) -> bool:
        target = self._cursor + delta
        if target < 0 or target > len(self._buffer):
            return False
        self._cursor = target
        self._check()
        return True

    def set(self, text: str) -> None:
        """Replace the buffer, leaving the cursor at its end."""
        self._buffer = text
        self._cursor = len(text)
        self._check()

    def clear(self) -> None:
        self._buffer = ""
        self._cursor = 0

    def take(self) -> str:
        """Return the buffer and reset the line to empty."""
        text = self._buffer
        self.clear()
        return text

    def _check(self) -> None:
        if not 0 <= self._cursor <= len(self._buffer):
            raise CursorRangeError(
                f"cursor {self._cursor} outside buffer of length {len(self._buffer)}"
            )
