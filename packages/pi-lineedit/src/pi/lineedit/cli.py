"""CLI entry point for pi-lineedit. Runs an echo REPL on the line editor."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Iterable

import click

from pi.lineedit.config import PROMPT_ENV, EditorOptions
from pi.lineedit.editor import LineEditor
from pi.lineedit.terminal import ProcessTerminal


def make_completer(words: Iterable[str]) -> Callable[[str], list[str] | None]:
    """Complete the last whitespace-separated token against *words*.

    Candidates are the missing suffixes, in the order the words were given.
    """
    vocabulary = list(dict.fromkeys(words))

    def complete(buffer: str) -> list[str] | None:
        if not buffer or buffer[-1].isspace():
            return None
        token = buffer.split()[-1]
        suffixes = [w[len(token):] for w in vocabulary if w.startswith(token) and w != token]
        return suffixes or None

    return complete


def mask_buffer(buffer: str) -> str:
    return "*" * len(buffer)


def echo_line(line: str) -> str:
    return line


@click.command()
@click.option("--prompt", envvar=PROMPT_ENV, default="> ", show_default=True, help="Prompt shown before the input")
@click.option("--mask", is_flag=True, help="Render typed text as '*'")
@click.option("--word", "words", multiple=True, help="Completion vocabulary; repeat for more words")
@click.option("--history-limit", type=click.IntRange(min=1), default=None, help="Keep at most N history entries")
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr")
def main(prompt, mask, words, history_limit, verbose):
    """Interactive line editor demo: every submitted line is echoed back."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    overrides: dict = {"prefix": prompt}
    if history_limit is not None:
        overrides["history_limit"] = history_limit
    try:
        options = EditorOptions.from_env(**overrides)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e

    editor = LineEditor(
        ProcessTerminal(),
        echo_line,
        on_autocomplete=make_completer(words) if words else None,
        transform_buffer=mask_buffer if mask else None,
        options=options,
    )
    asyncio.run(editor.run())


if __name__ == "__main__":
    main()
