"""Editor options and their environment overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Callable

from pi.lineedit.style import grey

PROMPT_ENV = "PI_LINEEDIT_PROMPT"
HISTORY_LIMIT_ENV = "PI_LINEEDIT_HISTORY_LIMIT"


@dataclass
class EditorOptions:
    """Construction-time settings for :class:`~pi.lineedit.editor.LineEditor`.

    Attributes:
        prefix: Text rendered before the buffer, typically a prompt.
        history_limit: Maximum number of remembered lines; ``None`` keeps all.
        suggestion_style: Applied to the ghost suggestion before it is written.
        input_queue_limit: Pending input units before reading from the
            terminal is suspended.
        exit_hint: Named in the ctrl+c warning as the alternative way out.
    """

    prefix: str = ""
    history_limit: int | None = None
    suggestion_style: Callable[[str], str] = field(default=grey)
    input_queue_limit: int = 1024
    exit_hint: str = "^D"

    @classmethod
    def from_env(cls, **overrides) -> EditorOptions:
        """Build options from ``PI_LINEEDIT_*`` variables, then *overrides*."""
        values: dict = {}
        prompt = os.environ.get(PROMPT_ENV)
        if prompt is not None:
            values["prefix"] = prompt
        raw_limit = os.environ.get(HISTORY_LIMIT_ENV, "").strip()
        if raw_limit:
            values["history_limit"] = parse_history_limit(raw_limit)
        values.update(overrides)
        return cls(**values)


def parse_history_limit(raw: str) -> int | None:
    """Parse a history limit; zero or a negative number means unbounded."""
    try:
        limit = int(raw)
    except ValueError:
        raise ValueError(f"{HISTORY_LIMIT_ENV} must be an integer, got {raw!r}") from None
    return limit if limit > 0 else None
