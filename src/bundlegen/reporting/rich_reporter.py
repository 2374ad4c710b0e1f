from __future__ import annotations

import os
from typing import Dict

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from .base import Outcome, Reporter, Stage, get_verbosity

_MARKS = {
    Outcome.OK: "[green]✔[/]",
    Outcome.FAILED: "[red]✖[/]",
    Outcome.SKIPPED: "[dim]-[/]",
}


class RichReporter(Reporter):
    """Terminal reporter with one progress bar per counted stage.

    ``BUNDLEGEN_PROGRESS_TRANSIENT=1`` clears the bars from the screen once
    the last counted stage finishes.
    """

    def __init__(self, console: Console | None = None):
        super().__init__()
        self.console = console or Console(stderr=True, highlight=False)
        flag = os.getenv("BUNDLEGEN_PROGRESS_TRANSIENT", "")
        self._transient = flag.lower() in ("1", "true", "yes")
        self._progress: Progress | None = None
        self._bars: Dict[str, TaskID] = {}

    def _bar_for(self, st: Stage) -> TaskID:
        if self._progress is None:
            self._progress = Progress(
                SpinnerColumn(),
                TextColumn("{task.description}"),
                BarColumn(bar_width=None),
                MofNCompleteColumn(),
                TimeElapsedColumn(),
                console=self.console,
                transient=self._transient,
            )
            self._progress.start()
        return self._progress.add_task(st.title, total=st.total)

    def _stop(self) -> None:
        if self._progress is not None:
            self._progress.stop()
            self._progress = None
        self._bars.clear()

    def on_begin(self, st: Stage) -> None:
        if st.total is None:
            self.console.rule(escape(st.title))
        else:
            self._bars[st.key] = self._bar_for(st)

    def on_tick(self, st: Stage, item: str | None) -> None:
        bar = self._bars.get(st.key)
        if bar is None or self._progress is None:
            return
        label = f"{escape(st.title)} [dim]{escape(item)}[/]" if item else st.title
        self._progress.update(bar, completed=st.done, description=label)

    def on_finish(self, st: Stage) -> None:
        assert st.outcome is not None
        bar = self._bars.pop(st.key, None)
        if bar is not None and self._progress is not None:
            self._progress.update(bar, description=st.title)
            if not self._bars:
                self._stop()
        self.console.print(
            _MARKS[st.outcome]
            + escape(
                f" {st.title} {st.progress_text} ({st.elapsed:.2f}s){st.counters()}"
            )
        )

    def info(self, message: str) -> None:
        self.console.print(escape(message))

    def detail(self, message: str, level: int = 1) -> None:
        if get_verbosity() >= level:
            self.console.print(f"[dim]{escape(message)}[/]")

    def warn(self, message: str) -> None:
        self.console.print(f"[yellow]warning:[/] {escape(message)}")

    def fail(self, message: str) -> None:
        self.console.print(f"[bold red]error:[/] {escape(message)}")

    def heading(self, title: str) -> None:
        self.console.rule(f"[bold]{escape(title)}")

    def close(self) -> None:
        self._stop()
