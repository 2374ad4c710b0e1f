from __future__ import annotations

import sys
from typing import TextIO

from .base import Outcome, Reporter, Stage, get_verbosity

_MARKS = {Outcome.OK: "ok", Outcome.FAILED: "FAILED", Outcome.SKIPPED: "skipped"}

_COLORS = {"INFO": "32", "WARN": "33", "ERROR": "31", "DEBUG": "36"}


class PlainReporter(Reporter):
    """Line-per-event output, colored only on a terminal."""

    def __init__(self, stream: TextIO | None = None, color: bool | None = None):
        super().__init__()
        self.stream = stream or sys.stderr
        if color is None:
            isatty = getattr(self.stream, "isatty", None)
            color = bool(isatty and isatty())
        self.color = color

    def _line(self, text: str) -> None:
        print(text, file=self.stream)

    def _tagged(self, tag: str, message: str) -> None:
        label = f"\x1b[{_COLORS[tag]}m{tag}\x1b[0m" if self.color else tag
        self._line(f"{label}: {message}")

    def on_begin(self, st: Stage) -> None:
        if st.total is None:
            self.heading(st.title)

    def on_tick(self, st: Stage, item: str | None) -> None:
        self._line(f"    {st.title}: {item or st.done} ({st.progress_text})")

    def on_finish(self, st: Stage) -> None:
        assert st.outcome is not None
        progress = f" {st.progress_text}" if st.total is not None else ""
        self._line(
            f"  [{_MARKS[st.outcome]}] {st.title}{progress}"
            f" in {st.elapsed:.2f}s{st.counters()}"
        )

    def info(self, message: str) -> None:
        self._tagged("INFO", message)

    def detail(self, message: str, level: int = 1) -> None:
        if get_verbosity() >= level:
            self._tagged("DEBUG", message)

    def warn(self, message: str) -> None:
        self._tagged("WARN", message)

    def fail(self, message: str) -> None:
        self._tagged("ERROR", message)

    def heading(self, title: str) -> None:
        self._line(f"\n== {title} ==")
