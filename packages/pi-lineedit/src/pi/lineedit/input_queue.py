"""Pending raw input between the terminal reader and the key dispatcher.

The terminal reader pushes complete input sequences and pasted text events
synchronously from its event-loop callback; the editor drains them one at a
time. Pausing stops the draining without dropping anything. Once ``limit``
units are pending the queue asks its producer to stop reading (``on_full``)
and lets it resume (``on_drain``) when the backlog falls to half of that, so
excess input waits in the operating system's tty buffer instead of in memory.
"""

from __future__ import annotations

import asyncio
from collections import deque
from typing import Callable

from pi.lineedit.keys import END_OF_INPUT, EndOfInput, KeyEvent


class InputQueue:
    def __init__(
        self,
        limit: int = 1024,
        *,
        on_full: Callable[[], None] | None = None,
        on_drain: Callable[[], None] | None = None,
    ) -> None:
        if limit < 1:
            raise ValueError(f"input queue limit must be positive, got {limit}")
        self._units: deque[str | KeyEvent | EndOfInput] = deque()
        self._limit = limit
        self._on_full = on_full
        self._on_drain = on_drain
        self._throttled = False
        self._open = asyncio.Event()
        self._open.set()
        self._ready = asyncio.Event()

    def __len__(self) -> int:
        return len(self._units)

    @property
    def paused(self) -> bool:
        return not self._open.is_set()

    @property
    def throttled(self) -> bool:
        """Whether the producer has been asked to stop reading."""
        return self._throttled

    def put(self, unit: str | KeyEvent) -> None:
        self._units.append(unit)
        self._ready.set()
        if not self._throttled and len(self._units) >= self._limit:
            self._throttled = True
            if self._on_full is not None:
                self._on_full()

    def close(self) -> None:
        """Queue the end-of-input marker after everything already pending."""
        self._units.append(END_OF_INPUT)
        self._ready.set()

    async def get(self) -> str | KeyEvent | EndOfInput:
        """Wait until the queue is open and non-empty, then pop one unit."""
        while True:
            await self._open.wait()
            if self._units:
                break
            self._ready.clear()
            await self._ready.wait()

        unit = self._units.popleft()
        if self._throttled and len(self._units) <= self._limit // 2:
            self._throttled = False
            if self._on_drain is not None:
                self._on_drain()
        return unit

    def pause(self) -> None:
        self._open.clear()

    def resume(self) -> None:
        self._open.set()
