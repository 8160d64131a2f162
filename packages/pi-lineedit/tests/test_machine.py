"""Tests for pi.lineedit.machine -- mode transitions without any I/O."""

from __future__ import annotations

import pytest

from pi.lineedit.keys import END_OF_INPUT, KeyEvent, decode_key
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

ALL_MODES = [Idle(), ExitArmed(), Completing(("x",), "y"), Completing(())]


class TestTermination:
    @pytest.mark.parametrize("mode", ALL_MODES)
    def test_end_of_input(self, mode) -> None:
        assert step(mode, END_OF_INPUT).effects == (Terminate(0),)

    @pytest.mark.parametrize("data", ["\x04", "\x1a", "\x1bd", "\x1bz"])
    @pytest.mark.parametrize("mode", ALL_MODES)
    def test_ctrl_or_meta_d_and_z(self, mode, data: str) -> None:
        assert step(mode, decode_key(data)).effects == (Terminate(0),)

    def test_plain_d_is_an_edit(self) -> None:
        event = decode_key("d")
        assert step(Idle(), event) == Transition(Idle(), (Edit(event),))


class TestExitGuard:
    @pytest.mark.parametrize("data", ["\x03", "\x1bc"])
    def test_first_ctrl_c_arms(self, data: str) -> None:
        assert step(Idle(), decode_key(data)) == Transition(ExitArmed(), (ArmExit("C"),))

    def test_second_ctrl_c_terminates(self) -> None:
        assert step(ExitArmed(), decode_key("\x03")).effects == (Terminate(0),)

    def test_ctrl_c_while_completing_arms(self) -> None:
        transition = step(Completing(("a",), "b"), decode_key("\x03"))
        assert transition.mode == ExitArmed()

    def test_other_key_disarms(self) -> None:
        transition = step(ExitArmed(), decode_key("x"))
        assert transition.mode == Idle()
        assert transition.effects == (Edit(decode_key("x")),)

    def test_tab_disarms(self) -> None:
        assert step(ExitArmed(), decode_key("\t")).mode == Idle()

    def test_ctrl_c_then_key_then_ctrl_c_does_not_terminate(self) -> None:
        mode = step(Idle(), decode_key("\x03")).mode
        mode = step(mode, decode_key("a")).mode
        transition = step(mode, decode_key("\x03"))
        assert transition.mode == ExitArmed()
        assert Terminate(0) not in transition.effects


class TestCycle:
    def test_idle_queries(self) -> None:
        assert cycle(Idle()) == Transition(Idle(), (QueryCompletions(),))

    def test_exit_armed_queries(self) -> None:
        assert cycle(ExitArmed()) == Transition(Idle(), (QueryCompletions(),))

    def test_shows_next_candidate(self) -> None:
        transition = cycle(Completing(("abc", "abd")))
        assert transition.mode == Completing(("abd",), "abc")
        assert transition.effects == (ShowSuggestion("abc"),)

    def test_last_candidate(self) -> None:
        transition = cycle(Completing(("abd",), "abc"))
        assert transition.mode == Completing((), "abd")
        assert transition.effects == (ShowSuggestion("abd"),)

    def test_exhausted_queue_redraws(self) -> None:
        transition = cycle(Completing((), "abd"))
        assert transition.mode == Idle()
        assert transition.effects == (Redraw(auto_suggest=False),)

    def test_full_rotation(self) -> None:
        shown = []
        mode = Completing(("abc", "abd"))
        for _ in range(4):
            transition = cycle(mode)
            mode = transition.mode
            shown.extend(e.text for e in transition.effects if isinstance(e, ShowSuggestion))
            if isinstance(mode, Idle):
                mode = Completing(("abc", "abd"))
        assert shown == ["abc", "abd", "abc"]

    def test_tab_key_cycles(self) -> None:
        assert step(Completing(("z",)), decode_key("\t")) == cycle(Completing(("z",)))


class TestAcceptSuggestion:
    def test_right_accepts_displayed_suggestion(self) -> None:
        transition = step(Completing((), "foo"), decode_key("\x1b[C"))
        assert transition == Transition(Idle(), (AcceptSuggestion("foo"),))

    def test_right_without_suggestion_is_an_edit(self) -> None:
        event = decode_key("\x1b[C")
        assert step(Idle(), event) == Transition(Idle(), (Edit(event),))
        assert step(Completing(("a",)), event) == Transition(Idle(), (Edit(event),))


class TestEdits:
    @pytest.mark.parametrize("data", ["a", "\x1b[A", "\x1b[D", "\x7f", "x\ny", "\r"])
    def test_edits_leave_completion(self, data: str) -> None:
        event = decode_key(data)
        assert step(Completing(("a",), "b"), event) == Transition(Idle(), (Edit(event),))

    def test_unrecognised_ctrl_key_is_an_edit(self) -> None:
        event = KeyEvent(name="a", ctrl=True, text="\x01")
        assert step(Idle(), event).effects == (Edit(event),)
