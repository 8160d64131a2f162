"""Terminal surface and process session for the line editor.

Provides the ``Terminal`` protocol (output primitives plus an input source
that can be paused), the ``TerminalSession`` protocol (raw mode and process
exit), and ``ProcessTerminal``, which implements both over
``sys.stdin``/``sys.stdout``.
"""

from __future__ import annotations

import asyncio
import codecs
import logging
import os
import sys
import termios
import tty
from typing import Callable, Protocol

from pi.lineedit.keys import KeyEvent
from pi.lineedit.stdin_buffer import StdinBuffer

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

_BRACKETED_PASTE_ENABLE = "\x1b[?2004h"
_BRACKETED_PASTE_DISABLE = "\x1b[?2004l"
_CLEAR_FROM_CURSOR = "\x1b[0J"
_CURSOR_TO_COLUMN_FMT = "\x1b[{}G"


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------


class Terminal(Protocol):
    """Output primitives and a pausable source of input units.

    ``on_input`` receives each raw key sequence as a ``str`` and each
    bracketed paste as a ready-made text :class:`KeyEvent`.
    """

    def start(
        self,
        on_input: Callable[[str | KeyEvent], None],
        on_end: Callable[[], None],
    ) -> None: ...

    def stop(self) -> None: ...

    def write(self, data: str) -> None: ...

    def cursor_to(self, column: int) -> None: ...

    def clear_from_cursor(self) -> None: ...

    def pause_input(self) -> None: ...

    def resume_input(self) -> None: ...


class TerminalSession(Protocol):
    """Process-wide terminal state and process termination."""

    def enter_raw_mode(self) -> None: ...

    def exit_process(self, code: int) -> None: ...


# ---------------------------------------------------------------------------
# ProcessTerminal implementation
# ---------------------------------------------------------------------------


class ProcessTerminal:
    """Terminal backed by the process's stdin and stdout.

    Raw mode is entered once through :meth:`enter_raw_mode` and restored by
    :meth:`stop` (and therefore by :meth:`exit_process`). Input is read with
    an asyncio reader on the stdin file descriptor; removing that reader is how
    input is paused, which leaves unread bytes queued in the tty.
    """

    def __init__(self) -> None:
        self._input_handler: Callable[[str | KeyEvent], None] | None = None
        self._end_handler: Callable[[], None] | None = None
        self._stdin_buffer: StdinBuffer | None = None
        self._reader_active: bool = False
        self._input_paused: bool = False
        self._started: bool = False
        self._original_termios: list | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        # Multi-byte characters may be split across reads
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._write_log_path: str = os.environ.get("PI_LINEEDIT_WRITE_LOG", "")

    # -- session ------------------------------------------------------------

    def enter_raw_mode(self) -> None:
        """Put stdin in raw mode, remembering the previous attributes."""
        fd = sys.stdin.fileno()
        if not os.isatty(fd):
            logger.debug("stdin is not a tty; leaving terminal mode unchanged")
            return
        self._original_termios = termios.tcgetattr(fd)
        tty.setraw(fd)

        # Keep "\n" -> "\r\n" translation so echoed handler output starts at column 0
        attrs = termios.tcgetattr(fd)
        attrs[1] |= termios.OPOST | termios.ONLCR
        termios.tcsetattr(fd, termios.TCSADRAIN, attrs)

    def exit_process(self, code: int) -> None:
        """Restore the terminal and end the process with *code*."""
        self.stop()
        raise SystemExit(code)

    # -- start / stop -------------------------------------------------------

    def start(
        self,
        on_input: Callable[[str | KeyEvent], None],
        on_end: Callable[[], None],
    ) -> None:
        """Enable bracketed paste and begin reading stdin on the running loop."""
        self._input_handler = on_input
        self._end_handler = on_end
        self._loop = asyncio.get_running_loop()
        self._stdin_buffer = StdinBuffer(self._on_sequence, self._on_paste)
        self._raw_write(_BRACKETED_PASTE_ENABLE)
        self._started = True
        self._add_reader()

    def stop(self) -> None:
        """Stop reading and restore the terminal attributes."""
        self._remove_reader()
        if self._stdin_buffer is not None:
            self._stdin_buffer.clear()
            self._stdin_buffer = None
        if self._started:
            self._raw_write(_BRACKETED_PASTE_DISABLE)
            self._started = False

        if self._original_termios is not None:
            termios.tcsetattr(sys.stdin.fileno(), termios.TCSADRAIN, self._original_termios)
            self._original_termios = None

        self._input_handler = None
        self._end_handler = None

    # -- input flow control -------------------------------------------------

    def pause_input(self) -> None:
        self._input_paused = True
        self._remove_reader()

    def resume_input(self) -> None:
        self._input_paused = False
        if self._input_handler is not None:
            self._add_reader()

    # -- output -------------------------------------------------------------

    def write(self, data: str) -> None:
        """Write *data* to stdout and optionally to the write log."""
        self._raw_write(data)

        if self._write_log_path:
            try:
                with open(self._write_log_path, "a", encoding="utf-8") as f:
                    f.write(data)
            except OSError:
                pass

    def cursor_to(self, column: int) -> None:
        """Move the cursor to zero-based *column* on the current row."""
        self._raw_write(_CURSOR_TO_COLUMN_FMT.format(column + 1))

    def clear_from_cursor(self) -> None:
        self._raw_write(_CLEAR_FROM_CURSOR)

    # -- private: stdin reading ---------------------------------------------

    def _add_reader(self) -> None:
        if self._reader_active or self._input_paused or self._loop is None:
            return
        self._loop.add_reader(sys.stdin.fileno(), self._on_stdin_readable)
        self._reader_active = True

    def _remove_reader(self) -> None:
        if not self._reader_active or self._loop is None:
            return
        self._loop.remove_reader(sys.stdin.fileno())
        self._reader_active = False

    def _on_stdin_readable(self) -> None:
        raw = os.read(sys.stdin.fileno(), 4096)
        if not raw:
            self._remove_reader()
            if self._end_handler is not None:
                self._end_handler()
            return

        if self._stdin_buffer is not None:
            self._stdin_buffer.process(self._decoder.decode(raw))

    def _on_sequence(self, sequence: str) -> None:
        if self._input_handler is not None:
            self._input_handler(sequence)

    def _on_paste(self, content: str) -> None:
        # Pasted text is never decoded as keys
        if self._input_handler is not None and content:
            self._input_handler(KeyEvent(text=content))

    # -- private: raw write -------------------------------------------------

    def _raw_write(self, data: str) -> None:
        sys.stdout.write(data)
        sys.stdout.flush()
