"""Keyboard input decoding for the line editor.

Turns one complete terminal input sequence (as split by
:class:`~pi.lineedit.stdin_buffer.StdinBuffer`) into a structured
:class:`KeyEvent`. Legacy xterm/VT sequences are recognised, including the
``CSI 1;<mod>X`` and ``CSI <n>;<mod>~`` forms that carry modifier keys.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Key event
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KeyEvent:
    """A decoded keystroke.

    ``name`` is ``None`` for printable or pasted text; ``text`` always holds
    the raw payload the event was decoded from.
    """

    name: str | None = None
    ctrl: bool = False
    meta: bool = False
    shift: bool = False
    text: str = ""


class EndOfInput:
    __slots__ = ()

    def __repr__(self) -> str:
        return "END_OF_INPUT"


END_OF_INPUT = EndOfInput()
"""Emitted once the input stream is exhausted; the editor terminates on it."""

TEXT_KEY_NAMES = frozenset({None, "return", "enter"})

# ---------------------------------------------------------------------------
# Legacy escape sequences
# ---------------------------------------------------------------------------

MODIFIERS: dict[str, int] = {
    "shift": 1,
    "alt": 2,
    "ctrl": 4,
}

# Unmodified sequences -> key names
LEGACY_KEY_SEQUENCES: dict[str, str] = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1b[H": "home",
    "\x1b[F": "end",
    "\x1b[E": "clear",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\x1bOH": "home",
    "\x1bOF": "end",
    "\x1bOP": "f1",
    "\x1bOQ": "f2",
    "\x1bOR": "f3",
    "\x1bOS": "f4",
    "\x1b[Z": "tab",
}

# Final byte of ``CSI 1;<mod><final>`` -> key name
_CSI_LETTER_KEYS: dict[str, str] = {
    "A": "up",
    "B": "down",
    "C": "right",
    "D": "left",
    "H": "home",
    "F": "end",
    "E": "clear",
    "P": "f1",
    "Q": "f2",
    "R": "f3",
    "S": "f4",
}

# Number of ``CSI <n>~`` -> key name
_CSI_TILDE_KEYS: dict[int, str] = {
    1: "home",
    2: "insert",
    3: "delete",
    4: "end",
    5: "pageUp",
    6: "pageDown",
    7: "home",
    8: "end",
    15: "f5",
    17: "f6",
    18: "f7",
    19: "f8",
    20: "f9",
    21: "f10",
    23: "f11",
    24: "f12",
}

_CSI_LETTER_RE = re.compile(r"^\x1b(?:\[|O)(?:1;)?(\d+)?([A-HPQRSZ])$")
_CSI_TILDE_RE = re.compile(r"^\x1b\[(\d+)(?:;(\d+))?~$")


def _modifier_flags(param: str | None) -> tuple[bool, bool, bool]:
    """Return ``(shift, meta, ctrl)`` for an xterm modifier parameter."""
    if not param:
        return False, False, False
    mod = int(param) - 1
    return (
        bool(mod & MODIFIERS["shift"]),
        bool(mod & MODIFIERS["alt"]),
        bool(mod & MODIFIERS["ctrl"]),
    )


def _decode_escape(data: str) -> KeyEvent:
    name = LEGACY_KEY_SEQUENCES.get(data)
    if name is not None:
        return KeyEvent(name=name, shift=data == "\x1b[Z", text=data)

    m = _CSI_LETTER_RE.match(data)
    if m and m.group(2) in _CSI_LETTER_KEYS:
        shift, meta, ctrl = _modifier_flags(m.group(1))
        return KeyEvent(
            name=_CSI_LETTER_KEYS[m.group(2)],
            ctrl=ctrl,
            meta=meta,
            shift=shift,
            text=data,
        )

    m = _CSI_TILDE_RE.match(data)
    if m and int(m.group(1)) in _CSI_TILDE_KEYS:
        shift, meta, ctrl = _modifier_flags(m.group(2))
        return KeyEvent(
            name=_CSI_TILDE_KEYS[int(m.group(1))],
            ctrl=ctrl,
            meta=meta,
            shift=shift,
            text=data,
        )

    # Meta + key: ESC followed by one character
    if len(data) == 2:
        inner = _decode_single(data[1])
        return KeyEvent(
            name=inner.name,
            ctrl=inner.ctrl,
            meta=True,
            shift=inner.shift,
            text=data,
        )

    return KeyEvent(name="unknown", text=data)


def _decode_single(ch: str) -> KeyEvent:
    if ch == "\r":
        return KeyEvent(name="return", text=ch)
    if ch == "\n":
        return KeyEvent(name="enter", text=ch)
    if ch == "\t":
        return KeyEvent(name="tab", text=ch)
    if ch in ("\x7f", "\x08"):
        return KeyEvent(name="backspace", text=ch)
    if ch == "\x1b":
        return KeyEvent(name="escape", text=ch)
    if ch == "\x00":
        return KeyEvent(name="space", ctrl=True, text=ch)
    if ch == " ":
        return KeyEvent(name="space", text=ch)

    code = ord(ch)
    if 1 <= code <= 26:
        return KeyEvent(name=chr(code + ord("a") - 1), ctrl=True, text=ch)
    if 0x1C <= code <= 0x1F:
        return KeyEvent(name=chr(code + 0x40), ctrl=True, text=ch)
    if "a" <= ch <= "z" or "0" <= ch <= "9":
        return KeyEvent(name=ch, text=ch)
    if "A" <= ch <= "Z":
        return KeyEvent(name=ch.lower(), shift=True, text=ch)
    return KeyEvent(text=ch)


# ---------------------------------------------------------------------------
# decode_key
# ---------------------------------------------------------------------------


def decode_key(data: str) -> KeyEvent:
    """Decode one complete input sequence into a :class:`KeyEvent`.

    Text longer than one character that does not start with ESC (a paste
    delivered in one unit) is returned verbatim as a text event.
    """
    if not data:
        return KeyEvent()
    if data.startswith("\x1b") and len(data) > 1:
        return _decode_escape(data)
    if len(data) == 1:
        return _decode_single(data)
    return KeyEvent(text=data)


def is_text_event(event: KeyEvent) -> bool:
    """Whether the dispatcher should treat *event* as typed or pasted text."""
    if event.ctrl or event.meta or not event.text:
        return False
    if event.name in TEXT_KEY_NAMES:
        return True
    # Plain printable characters carry their own name ("a", "space", ...)
    return len(event.text) == 1 and event.text.isprintable()
