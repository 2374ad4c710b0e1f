"""Path utilities (logical asset addresses)."""

from __future__ import annotations
from pathlib import Path, PurePosixPath

__all__ = ["to_address"]


def to_address(path: Path, root: Path) -> str:
    """Logical address of ``path`` under ``root`` with '/' separators.

    Host separators never leak into addresses, so a bundle built on Windows
    resolves the same names as one built on Linux.
    """
    rel = path.relative_to(root)
    return str(PurePosixPath(*rel.parts))
