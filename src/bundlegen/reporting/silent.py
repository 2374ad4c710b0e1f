from __future__ import annotations

from .base import Reporter


class SilentReporter(Reporter):
    """Discards everything; used for ``--reporter silent`` and in tests."""
