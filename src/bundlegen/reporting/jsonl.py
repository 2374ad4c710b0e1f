"""JSON lines reporter: one event object per line on stdout."""

from __future__ import annotations

import json
import sys
from typing import Any, TextIO

from .base import Reporter, Stage, get_verbosity


class JsonLinesReporter(Reporter):
    def __init__(self, stream: TextIO | None = None):
        super().__init__()
        self.stream = stream or sys.stdout

    def _event(self, event: str, **payload: Any) -> None:
        payload["event"] = event
        self.stream.write(json.dumps(payload, sort_keys=True, default=str) + "\n")

    def on_begin(self, st: Stage) -> None:
        self._event("stage_begin", stage=st.key, title=st.title, total=st.total, **st.fields)

    def on_tick(self, st: Stage, item: str | None) -> None:
        self._event("stage_tick", stage=st.key, done=st.done, item=item)

    def on_finish(self, st: Stage) -> None:
        assert st.outcome is not None
        self._event(
            "stage_end",
            stage=st.key,
            outcome=st.outcome.value,
            done=st.done,
            total=st.total,
            seconds=round(st.elapsed, 6),
            **st.fields,
        )

    def summary(self, kind: str, **counters: Any) -> None:
        self._event("summary", kind=kind, **counters)

    def info(self, message: str) -> None:
        self._event("log", level="info", message=message)

    def detail(self, message: str, level: int = 1) -> None:
        if get_verbosity() >= level:
            self._event("log", level="debug", message=message)

    def warn(self, message: str) -> None:
        self._event("log", level="warning", message=message)

    def fail(self, message: str) -> None:
        self._event("log", level="error", message=message)

    def heading(self, title: str) -> None:
        self._event("heading", title=title)
