"""Interactive choice between several candidate entries."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Sequence

from rich.console import Console
from rich.markup import escape

from classdict.engine.cascade import Candidate

logger = logging.getLogger(__name__)

CANCEL_TOKENS = frozenset({"q", "quit", "cancel", "0"})


@dataclass(frozen=True)
class Selection:
    """Result of disambiguation: a chosen candidate, or None if cancelled."""

    candidate: Candidate | None
    defaulted: bool = False  # invalid input fell back to the first candidate

    @property
    def cancelled(self) -> bool:
        return self.candidate is None


class Disambiguator:
    """Presents a numbered list of candidates and reads one selection.

    Accepts a number in [1, N] or a cancellation token (q, quit, cancel,
    0, or end of input). Anything else selects the first candidate and
    says so; there is no re-prompt loop and no timeout.
    """

    def __init__(
        self,
        console: Console | None = None,
        read_line: Callable[[str], str] | None = None,
    ):
        self.console = console or Console()
        self._read_line = read_line or self.console.input

    def disambiguate(self, candidates: Sequence[Candidate]) -> Selection:
        """Ask the user to pick one candidate.

        Args:
            candidates: Candidates in cascade order

        Returns:
            Selection (candidate None when cancelled)
        """
        if not candidates:
            return Selection(None)
        if len(candidates) == 1:
            return Selection(candidates[0])

        count = len(candidates)
        self.console.print(f"[bold]{count} entries match:[/bold]")
        for number, candidate in enumerate(candidates, start=1):
            entry = candidate.entry
            self.console.print(
                f"  {number:>2}. {escape(entry.headword)}"
                f"  [dim]({candidate.stage.label}, {entry.source_location})[/dim]"
            )

        try:
            answer = self._read_line(f"Select entry [1-{count}] or q to cancel: ")
        except EOFError:
            return Selection(None)

        answer = answer.strip().lower()
        if answer in CANCEL_TOKENS:
            return Selection(None)

        if answer.isdecimal() and 1 <= int(answer) <= count:
            return Selection(candidates[int(answer) - 1])

        logger.warning(f"Invalid selection {answer!r} for {count} candidates; using 1")
        self.console.print(
            f"[yellow]Invalid selection '{escape(answer)}', showing entry 1[/yellow]"
        )
        return Selection(candidates[0], defaulted=True)
