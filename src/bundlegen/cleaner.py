"""Staging workspace cleanup.

Runs only after every container of a run has been committed, so a failure
here never affects the produced artifacts: it is logged and the remaining
directories are still processed.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Iterable, List

from .logging import get_logger
from .reporting import get_reporter

__all__ = ["clean_staging"]

logger = get_logger("cleaner")


def clean_staging(dirs: Iterable[Path]) -> List[Path]:
    """Remove each directory recursively; return the ones left behind."""
    failed: List[Path] = []
    removed = 0
    for d in dirs:
        if not d.exists():
            continue
        try:
            shutil.rmtree(d)
        except OSError as exc:
            logger.warning("Could not remove staging directory %s: %s", d, exc)
            failed.append(d)
        else:
            removed += 1
    get_reporter().summary("cleanup", removed=removed, failed=len(failed))
    return failed
