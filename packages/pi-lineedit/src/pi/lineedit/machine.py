"""Editor mode transitions as a pure function.

The editor is always in exactly one mode:

``Idle``
    Plain editing.
``ExitArmed``
    A first ctrl/meta+c was pressed; a second one in a row terminates.
``Completing``
    A completion queue was fetched. ``queue`` holds the candidates not yet
    shown and ``suggestion`` the candidate currently displayed as ghost text,
    if any. An empty queue means the candidates are exhausted and the next tab
    clears the display before a fresh lookup.

:func:`step` maps ``(mode, event)`` to a :class:`Transition` holding the next
mode and the effects the editor has to carry out. Nothing here touches the
buffer or the terminal.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from pi.lineedit.keys import EndOfInput, KeyEvent

# ---------------------------------------------------------------------------
# Modes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class ExitArmed:
    pass


@dataclass(frozen=True)
class Completing:
    queue: tuple[str, ...]
    suggestion: str | None = None


Mode = Union[Idle, ExitArmed, Completing]

# ---------------------------------------------------------------------------
# Effects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Terminate:
    code: int = 0


@dataclass(frozen=True)
class ArmExit:
    """Warn that *key* must be pressed again to exit, and clear the line."""

    key: str


@dataclass(frozen=True)
class ShowSuggestion:
    text: str


@dataclass(frozen=True)
class Redraw:
    auto_suggest: bool = True


@dataclass(frozen=True)
class QueryCompletions:
    pass


@dataclass(frozen=True)
class AcceptSuggestion:
    text: str


@dataclass(frozen=True)
class Edit:
    """Hand *event* to the buffer/history editing table."""

    event: KeyEvent


Effect = Union[Terminate, ArmExit, ShowSuggestion, Redraw, QueryCompletions, AcceptSuggestion, Edit]


@dataclass(frozen=True)
class Transition:
    mode: Mode
    effects: tuple[Effect, ...] = ()


# ---------------------------------------------------------------------------
# Transition functions
# ---------------------------------------------------------------------------

_TERMINATE_KEYS = frozenset({"d", "z"})


def cycle(mode: Mode) -> Transition:
    """Advance autocomplete: show the next candidate, or re-query."""
    if isinstance(mode, Completing):
        if mode.queue:
            head, *rest = mode.queue
            return Transition(Completing(tuple(rest), head), (ShowSuggestion(head),))
        return Transition(Idle(), (Redraw(auto_suggest=False),))
    return Transition(Idle(), (QueryCompletions(),))


def step(mode: Mode, event: KeyEvent | EndOfInput) -> Transition:
    """Return the transition *event* causes in *mode*."""
    if isinstance(event, EndOfInput):
        return Transition(mode, (Terminate(0),))

    if event.ctrl or event.meta:
        if event.name in _TERMINATE_KEYS:
            return Transition(mode, (Terminate(0),))
        if event.name == "c":
            if isinstance(mode, ExitArmed):
                return Transition(mode, (Terminate(0),))
            return Transition(ExitArmed(), (ArmExit("C"),))

    if event.name == "tab":
        return cycle(mode)

    if event.name == "right" and isinstance(mode, Completing) and mode.suggestion:
        return Transition(Idle(), (AcceptSuggestion(mode.suggestion),))

    return Transition(Idle(), (Edit(event),))
