"""Pluggable output backends for packing runs."""

from .base import (
    Outcome,
    Reporter,
    Stage,
    get_reporter,
    get_verbosity,
    set_reporter,
    set_verbosity,
    stage,
)
from .jsonl import JsonLinesReporter
from .plain import PlainReporter
from .rich_reporter import RichReporter
from .silent import SilentReporter

__all__ = [
    "Outcome",
    "Reporter",
    "Stage",
    "get_reporter",
    "set_reporter",
    "get_verbosity",
    "set_verbosity",
    "stage",
    "PlainReporter",
    "JsonLinesReporter",
    "RichReporter",
    "SilentReporter",
    "make_reporter",
]

_BACKENDS = {
    "plain": PlainReporter,
    "json": JsonLinesReporter,
    "silent": SilentReporter,
}


def make_reporter(name: str, *, interactive: bool = False) -> Reporter:
    # rich needs a terminal; fall back to plain lines otherwise
    if name == "rich":
        return RichReporter() if interactive else PlainReporter()
    return _BACKENDS[name]()
