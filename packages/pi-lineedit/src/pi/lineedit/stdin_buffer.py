"""Split raw terminal reads into complete input sequences.

A single ``read`` on a raw-mode tty can return several keystrokes at once, or
only half of an escape sequence. ``StdinBuffer`` reassembles the stream so
that every emitted unit decodes to exactly one key, and collapses a bracketed
paste into a single unit so the editor sees the pasted block as one payload.
"""

from __future__ import annotations

import asyncio
import re
from typing import Callable

ESC = "\x1b"
BRACKETED_PASTE_START = "\x1b[200~"
BRACKETED_PASTE_END = "\x1b[201~"

_SGR_MOUSE_RE = re.compile(r"^<\d+;\d+;\d+[Mm]$")


def _csi_status(data: str) -> str:
    if len(data) < 3:
        return "incomplete"
    payload = data[2:]
    final = payload[-1]
    if not 0x40 <= ord(final) <= 0x7E:
        return "incomplete"
    if payload.startswith("<"):
        return "complete" if _SGR_MOUSE_RE.match(payload) else "incomplete"
    return "complete"


def _sequence_status(data: str) -> str:
    """Classify *data* as ``complete``, ``incomplete`` or ``not-escape``."""
    if not data.startswith(ESC):
        return "not-escape"
    if len(data) == 1:
        return "incomplete"

    kind = data[1]
    if kind == "[":
        if data.startswith(ESC + "[M"):
            # X10 mouse: ESC [ M b x y
            return "complete" if len(data) >= 6 else "incomplete"
        return _csi_status(data)
    if kind == "]":
        terminated = data.endswith(ESC + "\\") or data.endswith("\x07")
        return "complete" if terminated else "incomplete"
    if kind in ("P", "_"):
        return "complete" if data.endswith(ESC + "\\") else "incomplete"
    if kind == "O":
        return "complete" if len(data) >= 3 else "incomplete"
    # ESC + one character: meta key
    return "complete"


def split_sequences(buffer: str) -> tuple[list[str], str]:
    """Split *buffer* into complete sequences.

    Returns ``(sequences, remainder)`` where *remainder* is an escape
    sequence still waiting for more bytes.
    """
    sequences: list[str] = []
    pos = 0
    while pos < len(buffer):
        if buffer[pos] != ESC:
            sequences.append(buffer[pos])
            pos += 1
            continue

        end = pos + 1
        while True:
            if end > len(buffer):
                return sequences, buffer[pos:]
            status = _sequence_status(buffer[pos:end])
            if status != "incomplete":
                break
            end += 1
        sequences.append(buffer[pos:end])
        pos = end
    return sequences, ""


class StdinBuffer:
    """Reassembles terminal input and reports complete units.

    *on_data* receives each complete sequence; *on_paste* receives the body
    of a bracketed paste. A lone ESC is held for *timeout* seconds in case
    the rest of a sequence follows, then flushed as the escape key.
    """

    def __init__(
        self,
        on_data: Callable[[str], None],
        on_paste: Callable[[str], None],
        *,
        timeout: float = 0.01,
    ) -> None:
        self._on_data = on_data
        self._on_paste = on_paste
        self._timeout = timeout
        self._buffer = ""
        self._paste: str | None = None
        self._flush_handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> str:
        return self._buffer

    @property
    def in_paste(self) -> bool:
        return self._paste is not None

    def process(self, data: str) -> None:
        """Feed decoded text from one read."""
        self._cancel_flush()

        if self._paste is not None:
            self._paste += data
            self._finish_paste()
            return

        self._buffer += data
        start = self._buffer.find(BRACKETED_PASTE_START)
        if start != -1:
            sequences, _ = split_sequences(self._buffer[:start])
            for sequence in sequences:
                self._on_data(sequence)
            self._paste = self._buffer[start + len(BRACKETED_PASTE_START):]
            self._buffer = ""
            self._finish_paste()
            return

        sequences, self._buffer = split_sequences(self._buffer)
        for sequence in sequences:
            self._on_data(sequence)

        if self._buffer:
            self._schedule_flush()

    def flush(self) -> list[str]:
        """Return and forget whatever partial sequence is pending."""
        self._cancel_flush()
        if not self._buffer:
            return []
        pending, self._buffer = self._buffer, ""
        return [pending]

    def clear(self) -> None:
        self._cancel_flush()
        self._buffer = ""
        self._paste = None

    def _finish_paste(self) -> None:
        assert self._paste is not None
        end = self._paste.find(BRACKETED_PASTE_END)
        if end == -1:
            return
        body = self._paste[:end]
        rest = self._paste[end + len(BRACKETED_PASTE_END):]
        self._paste = None
        self._on_paste(body)
        if rest:
            self.process(rest)

    def _schedule_flush(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            for sequence in self.flush():
                self._on_data(sequence)
            return
        self._flush_handle = loop.call_later(self._timeout, self._flush_pending)

    def _flush_pending(self) -> None:
        self._flush_handle = None
        for sequence in self.flush():
            self._on_data(sequence)

    def _cancel_flush(self) -> None:
        if self._flush_handle is not None:
            self._flush_handle.cancel()
            self._flush_handle = None
