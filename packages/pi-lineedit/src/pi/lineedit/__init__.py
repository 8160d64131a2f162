"""pi-lineedit: interactive line editor for raw-mode terminals."""

# Options
from pi.lineedit.config import EditorOptions

# Editor
from pi.lineedit.editor import BufferTransform, CompletionLookup, LineEditor, LineHandler

# History and buffer model
from pi.lineedit.history import History
from pi.lineedit.input_queue import InputQueue

# Keyboard input decoding
from pi.lineedit.keys import END_OF_INPUT, EndOfInput, KeyEvent, decode_key, is_text_event
from pi.lineedit.line_state import CursorRangeError, LineState

# Mode state machine
from pi.lineedit.machine import (
    AcceptSuggestion,
    ArmExit,
    Completing,
    Edit,
    ExitArmed,
    Idle,
    QueryCompletions,
    Redraw,
    ShowSuggestion,
    Terminate,
    Transition,
    cycle,
    step,
)

# Input buffering
from pi.lineedit.stdin_buffer import StdinBuffer

# Styling
from pi.lineedit.style import grey

# Terminal interface and implementation
from pi.lineedit.terminal import ProcessTerminal, Terminal, TerminalSession

# Width measurement
from pi.lineedit.utils import visible_width

__all__ = [
    # Options
    "EditorOptions",
    # Editor
    "BufferTransform",
    "CompletionLookup",
    "LineEditor",
    "LineHandler",
    # Model
    "CursorRangeError",
    "History",
    "InputQueue",
    "LineState",
    # Keys
    "END_OF_INPUT",
    "EndOfInput",
    "KeyEvent",
    "decode_key",
    "is_text_event",
    # Machine
    "AcceptSuggestion",
    "ArmExit",
    "Completing",
    "Edit",
    "ExitArmed",
    "Idle",
    "QueryCompletions",
    "Redraw",
    "ShowSuggestion",
    "Terminate",
    "Transition",
    "cycle",
    "step",
    # Terminal
    "ProcessTerminal",
    "StdinBuffer",
    "Terminal",
    "TerminalSession",
    # Text
    "grey",
    "visible_width",
]
