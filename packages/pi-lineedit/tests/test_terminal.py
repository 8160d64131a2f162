"""Tests for pi.lineedit.terminal.ProcessTerminal over a pipe-backed stdin."""

from __future__ import annotations

import asyncio
import os
import sys

import pytest

from pi.lineedit.keys import KeyEvent
from pi.lineedit.terminal import ProcessTerminal


class PipeStdin:
    def __init__(self, fd: int) -> None:
        self._fd = fd

    def fileno(self) -> int:
        return self._fd


class Events:
    def __init__(self) -> None:
        self.units: list[str | KeyEvent] = []
        self.ended = 0

    def on_input(self, unit: str | KeyEvent) -> None:
        self.units.append(unit)

    def on_end(self) -> None:
        self.ended += 1


class Pipe:
    """OS pipe whose read end stands in for stdin."""

    def __init__(self) -> None:
        self.read_fd, self._write_fd = os.pipe()

    def write(self, data: bytes) -> None:
        os.write(self._write_fd, data)

    def close_writer(self) -> None:
        if self._write_fd is not None:
            os.close(self._write_fd)
            self._write_fd = None

    def close(self) -> None:
        self.close_writer()
        os.close(self.read_fd)


@pytest.fixture
def pipe(monkeypatch):
    p = Pipe()
    monkeypatch.setattr(sys, "stdin", PipeStdin(p.read_fd))
    yield p
    p.close()


async def settle() -> None:
    await asyncio.sleep(0.05)


class TestOutput:
    def test_cursor_and_clear_sequences(self, capsys) -> None:
        term = ProcessTerminal()
        term.cursor_to(0)
        term.cursor_to(7)
        term.clear_from_cursor()
        term.write("hi")
        assert capsys.readouterr().out == "\x1b[1G\x1b[8G\x1b[0Jhi"

    def test_write_log(self, capsys, monkeypatch, tmp_path) -> None:
        log = tmp_path / "writes.log"
        monkeypatch.setenv("PI_LINEEDIT_WRITE_LOG", str(log))
        term = ProcessTerminal()
        term.write("abc")
        term.write("def")
        assert log.read_text(encoding="utf-8") == "abcdef"

    def test_unwritable_write_log_is_ignored(self, capsys, monkeypatch, tmp_path) -> None:
        monkeypatch.setenv("PI_LINEEDIT_WRITE_LOG", str(tmp_path))
        term = ProcessTerminal()
        term.write("x")
        assert capsys.readouterr().out == "x"


class TestSession:
    def test_raw_mode_skipped_without_tty(self, pipe) -> None:
        term = ProcessTerminal()
        term.enter_raw_mode()
        assert term._original_termios is None

    def test_exit_process_raises_system_exit(self, pipe, capsys) -> None:
        term = ProcessTerminal()
        with pytest.raises(SystemExit) as excinfo:
            term.exit_process(3)
        assert excinfo.value.code == 3


class TestInput:
    @pytest.mark.asyncio
    async def test_reads_keys(self, pipe, capsys) -> None:
        events = Events()
        term = ProcessTerminal()
        term.start(events.on_input, events.on_end)
        assert capsys.readouterr().out == "\x1b[?2004h"

        pipe.write(b"ab\x1b[A")
        await settle()
        assert events.units == ["a", "b", "\x1b[A"]

        term.stop()
        assert capsys.readouterr().out == "\x1b[?2004l"

    @pytest.mark.asyncio
    async def test_paste_is_single_unit(self, pipe, capsys) -> None:
        events = Events()
        term = ProcessTerminal()
        term.start(events.on_input, events.on_end)
        pipe.write(b"\x1b[200~x\ny\x1b[201~")
        await settle()
        assert events.units == [KeyEvent(text="x\ny")]
        term.stop()

    @pytest.mark.asyncio
    async def test_paste_is_never_decoded_as_keys(self, pipe, capsys) -> None:
        events = Events()
        term = ProcessTerminal()
        term.start(events.on_input, events.on_end)
        pipe.write(b"\x1b[200~\t\x1b[201~\t\x1b[200~\x1b[A\x1b[201~")
        await settle()
        assert events.units == [KeyEvent(text="\t"), "\t", KeyEvent(text="\x1b[A")]
        term.stop()

    @pytest.mark.asyncio
    async def test_multibyte_character_split_across_reads(self, pipe, capsys) -> None:
        events = Events()
        term = ProcessTerminal()
        term.start(events.on_input, events.on_end)
        pipe.write(b"\xc3")
        await settle()
        pipe.write(b"\xa9")
        await settle()
        assert events.units == ["é"]
        term.stop()

    @pytest.mark.asyncio
    async def test_end_of_stream(self, pipe, capsys) -> None:
        events = Events()
        term = ProcessTerminal()
        term.start(events.on_input, events.on_end)
        pipe.close_writer()
        await settle()
        assert events.ended == 1
        term.stop()

    @pytest.mark.asyncio
    async def test_paused_input_stays_in_pipe(self, pipe, capsys) -> None:
        events = Events()
        term = ProcessTerminal()
        term.start(events.on_input, events.on_end)
        term.pause_input()
        pipe.write(b"z")
        await settle()
        assert events.units == []

        term.resume_input()
        await settle()
        assert events.units == ["z"]
        term.stop()

    @pytest.mark.asyncio
    async def test_stop_is_idempotent(self, pipe, capsys) -> None:
        term = ProcessTerminal()
        term.start(lambda unit: None, lambda: None)
        term.stop()
        term.stop()
        assert capsys.readouterr().out.count("\x1b[?2004l") == 1
