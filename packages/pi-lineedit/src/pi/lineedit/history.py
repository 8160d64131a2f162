"""Submitted-line history with an up/down browsing index."""

from __future__ import annotations


class History:
    """Most-recent-first record of submitted lines.

    ``index`` is ``-1`` while the user edits the live buffer and otherwise
    points at the entry currently shown. With a *limit*, the oldest entries
    are dropped once the history grows past it; without one it is unbounded.
    """

    def __init__(self, limit: int | None = None) -> None:
        if limit is not None and limit < 1:
            raise ValueError(f"history limit must be positive, got {limit}")
        self._entries: list[str] = []
        self._index: int = -1
        self._limit = limit

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, i: int) -> str:
        return self._entries[i]

    def __iter__(self):
        return iter(self._entries)

    @property
    def index(self) -> int:
        return self._index

    @property
    def limit(self) -> int | None:
        return self._limit

    def push(self, line: str) -> None:
        """Record *line* as the most recent entry."""
        self._entries.insert(0, line)
        if self._limit is not None and len(self._entries) > self._limit:
            del self._entries[self._limit:]
        if self._index >= len(self._entries):
            self._index = len(self._entries) - 1

    def older(self) -> str | None:
        """Step towards the oldest entry; ``None`` when already there."""
        if self._index >= len(self._entries) - 1:
            return None
        self._index += 1
        return self._entries[self._index]

    def newer(self) -> str:
        """Step towards the live buffer, which is represented by ``""``."""
        if self._index <= 0:
            self._index = -1
            return ""
        self._index -= 1
        return self._entries[self._index]

    def reset(self) -> None:
        self._index = -1
