"""Interactive line editor for raw-mode terminals.

``LineEditor`` consumes decoded key events one at a time and keeps a single
line of text, its cursor, the submitted-line history and an autocomplete
queue. Every change is redrawn on the current terminal row as
``prefix + buffer``, optionally followed by a grey ghost suggestion that the
right arrow accepts. Lines are handed to the caller's ``on_line`` handler,
whose result is echoed below them.

Multi-line input (a paste, or the return key, which decodes as ``"\\r"``) is
split on line breaks; each completed line is submitted in order, with
rendering and terminal reading paused while the handler runs, so keystrokes
typed meanwhile are processed only after its output has been written.
"""

from __future__ import annotations

import inspect
import logging
import re
from dataclasses import replace
from typing import Awaitable, Callable, Optional, Sequence, TypeVar, Union

from pi.lineedit.config import EditorOptions
from pi.lineedit.history import History
from pi.lineedit.input_queue import InputQueue
from pi.lineedit.keys import EndOfInput, KeyEvent, decode_key, is_text_event
from pi.lineedit.line_state import LineState
from pi.lineedit.machine import (
    AcceptSuggestion,
    ArmExit,
    Completing,
    Edit,
    Effect,
    Idle,
    Mode,
    QueryCompletions,
    Redraw,
    ShowSuggestion,
    Terminate,
    cycle,
    step,
)
from pi.lineedit.terminal import Terminal, TerminalSession
from pi.lineedit.utils import TAB_EXPANSION, visible_width

logger = logging.getLogger(__name__)

T = TypeVar("T")
MaybeAwaitable = Union[T, Awaitable[T]]

LineHandler = Callable[[str], MaybeAwaitable[Optional[str]]]
CompletionLookup = Callable[[str], MaybeAwaitable[Optional[Sequence[str]]]]
BufferTransform = Callable[[str], MaybeAwaitable[str]]

_LINE_BREAK_RE = re.compile(r"\r\n|\n|\r")


async def _resolve(value):
    if inspect.isawaitable(value):
        return await value
    return value


class LineEditor:
    """Single-line editor driven by key events.

    Args:
        terminal: Output primitives and the raw input source.
        on_line: Called with each submitted line; may be a coroutine function.
            A non-``None`` result is written followed by a newline.
        on_autocomplete: Optional lookup from the current buffer to candidate
            texts to append after it. Queried on tab and after edits.
        transform_buffer: Optional display transform (masking, highlighting).
            Never applied to history or submitted lines.
        options: See :class:`~pi.lineedit.config.EditorOptions`.
        session: Raw-mode and process-exit capability; defaults to *terminal*.
    """

    def __init__(
        self,
        terminal: Terminal,
        on_line: LineHandler,
        on_autocomplete: CompletionLookup | None = None,
        transform_buffer: BufferTransform | None = None,
        options: EditorOptions | None = None,
        session: TerminalSession | None = None,
    ) -> None:
        self._terminal = terminal
        self._session: TerminalSession = session if session is not None else terminal  # type: ignore[assignment]
        self._on_line = on_line
        self._on_autocomplete = on_autocomplete
        self._transform_buffer = transform_buffer
        self._options = options if options is not None else EditorOptions()

        self._line = LineState()
        self._history = History(self._options.history_limit)
        self._mode: Mode = Idle()
        self._prefix: str = self._options.prefix
        self._paused: bool = False
        self._closed: bool = False
        self._exit_code: int | None = None
        self._queue = InputQueue(
            self._options.input_queue_limit,
            on_full=self._on_queue_full,
            on_drain=self._on_queue_drain,
        )

    # -- state --------------------------------------------------------------

    @property
    def buffer(self) -> str:
        return self._line.buffer

    @property
    def cursor(self) -> int:
        return self._line.cursor

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def history(self) -> History:
        return self._history

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def suggestion(self) -> str | None:
        """The ghost text currently displayed after the cursor, if any."""
        if isinstance(self._mode, Completing):
            return self._mode.suggestion
        return None

    @property
    def completion_queue(self) -> tuple[str, ...] | None:
        """Candidates not yet shown; ``None`` when no lookup is active."""
        if isinstance(self._mode, Completing):
            return self._mode.queue
        return None

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def exit_code(self) -> int | None:
        return self._exit_code

    @property
    def input_queue(self) -> InputQueue:
        return self._queue

    # -- key dispatch -------------------------------------------------------

    async def handle(self, event: KeyEvent | EndOfInput) -> None:
        """Process one key event. Events must be fed in arrival order."""
        if self._closed:
            return
        transition = step(self._mode, event)
        self._mode = transition.mode
        for effect in transition.effects:
            await self._apply(effect)

    async def _apply(self, effect: Effect) -> None:
        if isinstance(effect, Edit):
            await self._edit(effect.event)
        elif isinstance(effect, ShowSuggestion):
            self._show_suggestion(effect.text)
        elif isinstance(effect, QueryCompletions):
            await self._query_completions()
        elif isinstance(effect, Redraw):
            await self.refresh(effect.auto_suggest)
        elif isinstance(effect, AcceptSuggestion):
            await self._accept_suggestion(effect.text)
        elif isinstance(effect, ArmExit):
            self._arm_exit(effect.key)
        elif isinstance(effect, Terminate):
            self._terminate(effect.code)
        else:
            raise TypeError(f"unknown effect {effect!r}")

    async def _edit(self, event: KeyEvent) -> None:
        name = event.name
        if name == "up":
            entry = self._history.older()
            if entry is not None:
                self._line.set(entry)
                await self.refresh()
        elif name == "down":
            self._line.set(self._history.newer())
            await self.refresh()
        elif name == "left":
            await self._move_cursor(-1)
        elif name == "right":
            await self._move_cursor(1)
        elif name in ("delete", "backspace"):
            if self._line.delete_backward():
                await self.refresh()
        elif is_text_event(event):
            await self._insert_text(event.text)
        else:
            logger.debug("ignoring key %r (ctrl=%s meta=%s)", name, event.ctrl, event.meta)

    async def _move_cursor(self, delta: int) -> None:
        if self._line.move(delta):
            await self.refresh()

    def _arm_exit(self, key: str) -> None:
        self._terminal.write(f"\n(To exit, press ^{key} again or {self._options.exit_hint})\n")
        self._line.clear()

    def _terminate(self, code: int) -> None:
        logger.debug("terminating with status %d", code)
        self._closed = True
        self._exit_code = code
        self._session.exit_process(code)

    # -- text insertion and submission --------------------------------------

    async def _insert_text(self, text: str) -> None:
        self._history.reset()
        segments = _LINE_BREAK_RE.split(text)
        for i, segment in enumerate(segments):
            if i > 0:
                await self._submit_line()
                await self.refresh()
            self._line.insert(segment)
            await self.refresh()

    async def _submit_line(self) -> None:
        if not self._line.buffer:
            self._terminal.write("\n")
            return
        await self.refresh(auto_suggest=False)
        self.pause()
        self._terminal.write("\n")
        line = self._line.take()
        self._history.push(line)
        logger.debug("submitting line (%d chars)", len(line))
        result = await _resolve(self._on_line(line))
        if result is not None:
            self._terminal.write(f"{result}\n")
        self.unpause()

    # -- autocomplete -------------------------------------------------------

    async def _cycle(self) -> None:
        transition = cycle(self._mode)
        self._mode = transition.mode
        for effect in transition.effects:
            await self._apply(effect)

    async def _query_completions(self) -> None:
        if self._on_autocomplete is None:
            return
        candidates = await _resolve(self._on_autocomplete(self._line.buffer))
        if not candidates:
            return
        logger.debug("completion lookup returned %d candidates", len(candidates))
        self._mode = Completing(tuple(candidates))
        await self._cycle()

    def _show_suggestion(self, text: str) -> None:
        if self._paused or not self._line.at_end:
            if isinstance(self._mode, Completing):
                self._mode = replace(self._mode, suggestion=None)
            return
        self._terminal.clear_from_cursor()
        self._terminal.write(self._options.suggestion_style(text))
        self._terminal.cursor_to(self._column())

    async def _accept_suggestion(self, text: str) -> None:
        if not self._line.at_end:
            await self._move_cursor(1)
            return
        self._line.insert(text)
        await self.refresh()

    # -- rendering ----------------------------------------------------------

    def _column(self) -> int:
        return visible_width(self._prefix) + visible_width(self._line.buffer[: self._line.cursor])

    def clear(self) -> None:
        """Erase the current row from column 0 to the end of the screen."""
        self._terminal.cursor_to(0)
        self._terminal.clear_from_cursor()

    async def refresh(self, auto_suggest: bool = True) -> None:
        """Redraw ``prefix + buffer`` and place the cursor.

        Any displayed suggestion and pending completions are dropped first.
        With *auto_suggest* and a non-empty buffer, one autocomplete cycle
        runs afterwards so edits preview a completion without a tab press.
        """
        if self._paused:
            return
        if isinstance(self._mode, Completing):
            self._mode = Idle()
        self.clear()
        shown = self._line.buffer
        if self._transform_buffer is not None:
            shown = await _resolve(self._transform_buffer(shown))
        # Drawn the way visible_width measures it
        shown = shown.replace("\t", TAB_EXPANSION)
        self._terminal.write(self._prefix + shown)
        self._terminal.cursor_to(self._column())
        if auto_suggest and self._line.buffer:
            await self._cycle()

    async def set_prefix(self, prefix: str | None) -> None:
        self._prefix = prefix or ""
        await self.refresh()

    # -- pause control ------------------------------------------------------

    def pause(self) -> None:
        """Suppress rendering and stop consuming input until :meth:`unpause`."""
        self._paused = True
        self._queue.pause()
        self._terminal.pause_input()

    def unpause(self) -> None:
        """Resume input consumption. Does not redraw."""
        self._queue.resume()
        if not self._queue.throttled:
            self._terminal.resume_input()
        self._paused = False

    def _on_queue_full(self) -> None:
        self._terminal.pause_input()

    def _on_queue_drain(self) -> None:
        if not self._paused:
            self._terminal.resume_input()

    # -- main loop ----------------------------------------------------------

    async def run(self) -> int | None:
        """Read and dispatch input until termination.

        Returns the exit status when the session's ``exit_process`` returns
        instead of ending the process.
        """
        self._session.enter_raw_mode()
        self._terminal.start(self._queue.put, self._queue.close)
        try:
            await self.refresh(auto_suggest=False)
            while not self._closed:
                unit = await self._queue.get()
                # Pastes arrive as ready-made text events
                event = decode_key(unit) if isinstance(unit, str) else unit
                await self.handle(event)
        except Exception:
            logger.exception("line editor failed")
            self._terminate(1)
        finally:
            self._terminal.stop()
        return self._exit_code
