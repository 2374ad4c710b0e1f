"""Reporter interface shared by every output backend.

A packing run is a handful of stages (discovery, one build per platform,
merge, write, cleanup). Each counted stage is bracketed by ``begin`` and
``finish`` with one ``tick`` per group; everything else is a plain message
or a ``summary`` of key=value counters.
"""

from __future__ import annotations

import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, Optional

__all__ = [
    "Outcome",
    "Stage",
    "Reporter",
    "set_reporter",
    "get_reporter",
    "set_verbosity",
    "get_verbosity",
    "stage",
    "format_counters",
]


class Outcome(Enum):
    OK = "ok"
    FAILED = "failed"
    SKIPPED = "skipped"


# Stage fields echoed on completion lines, in this order.
_COUNTER_KEYS = ("platform", "groups", "assets", "bytes")


def format_counters(counters: Dict[str, Any]) -> str:
    return " ".join(f"{k}={v}" for k, v in counters.items())


@dataclass(slots=True)
class Stage:
    key: str
    title: str
    total: Optional[int] = None
    done: int = 0
    outcome: Optional[Outcome] = None
    started: float = field(default_factory=time.monotonic)
    finished: Optional[float] = None
    fields: Dict[str, Any] = field(default_factory=dict)

    @property
    def elapsed(self) -> float:
        end = self.finished if self.finished is not None else time.monotonic()
        return end - self.started

    @property
    def progress_text(self) -> str:
        return f"{self.done}/{self.total}" if self.total is not None else ""

    def counters(self) -> str:
        shown = {k: self.fields[k] for k in _COUNTER_KEYS if k in self.fields}
        return f" [{format_counters(shown)}]" if shown else ""


_verbosity = 0


def set_verbosity(level: int) -> None:
    global _verbosity
    _verbosity = max(0, level)


def get_verbosity() -> int:
    return _verbosity


class Reporter:
    """Output sink for one run. Subclasses render; this class keeps state."""

    def __init__(self) -> None:
        self._stages: Dict[str, Stage] = {}

    # stage bookkeeping, shared by all backends

    def begin(
        self, key: str, title: str, total: int | None = None, **fields: Any
    ) -> None:
        st = Stage(key, title, total, fields=dict(fields))
        self._stages[key] = st
        self.on_begin(st)

    def tick(self, key: str, item: str | None = None, **fields: Any) -> None:
        st = self._stages.get(key)
        if st is None:
            return
        st.done += 1
        st.fields.update(fields)
        self.on_tick(st, item)

    def finish(self, key: str, outcome: Outcome = Outcome.OK, **fields: Any) -> None:
        st = self._stages.pop(key, None)
        if st is None:
            return
        st.outcome = outcome
        st.finished = time.monotonic()
        st.fields.update(fields)
        self.on_finish(st)

    def summary(self, kind: str, **counters: Any) -> None:
        self.info(f"{kind.capitalize()} summary: {format_counters(counters)}")

    # rendering hooks

    def on_begin(self, st: Stage) -> None:
        pass

    def on_tick(self, st: Stage, item: str | None) -> None:
        pass

    def on_finish(self, st: Stage) -> None:
        pass

    def info(self, message: str) -> None:
        pass

    def detail(self, message: str, level: int = 1) -> None:
        pass

    def warn(self, message: str) -> None:
        self.info(message)

    def fail(self, message: str) -> None:
        self.info(message)

    def heading(self, title: str) -> None:
        pass

    def close(self) -> None:
        pass


_active: Reporter | None = None


def set_reporter(rep: Reporter) -> None:
    global _active
    _active = rep


def get_reporter() -> Reporter:
    global _active
    if _active is None:
        from .plain import PlainReporter

        _active = PlainReporter(stream=sys.stderr)
    return _active


@contextmanager
def stage(
    key: str, title: str, total: int | None = None, **fields: Any
) -> Iterator[Reporter]:
    """Run the body as one reported stage.

    Yields the active reporter for ``tick`` calls. The stage is marked
    failed when the body raises; the exception propagates.
    """
    rep = get_reporter()
    rep.begin(key, title, total, **fields)
    try:
        yield rep
    except BaseException:
        rep.finish(key, Outcome.FAILED)
        raise
    rep.finish(key)
