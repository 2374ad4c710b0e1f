"""File IO helpers: bounded reads and atomic / transactional writes."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Iterable, List, Tuple

from ..errors import BundleError, E_WRITE_IO
from ..logging import get_logger

__all__ = [
    "DataError",
    "safe_read_file",
    "stage_bytes",
    "atomic_write_bytes",
    "transactional_write",
]

logger = get_logger("io")


class DataError(RuntimeError):
    pass


def safe_read_file(path: Path, max_size: int | None = None) -> bytes:
    if not path.is_file():
        raise DataError(f"File not found: {path}")
    if max_size is not None:
        size = path.stat().st_size
        if size > max_size:
            raise DataError(f"File too large: {size}>{max_size}")
    return path.read_bytes()


def stage_bytes(target: Path, data: bytes) -> Path:
    """Write ``data`` to a temp file next to ``target`` and return its path.

    The temp file lives in the target's directory so the final rename never
    crosses a filesystem boundary.
    """
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{target.name}.", suffix=".tmp", dir=target.parent
    )
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    return tmp


def atomic_write_bytes(target: Path, data: bytes) -> int:
    tmp = stage_bytes(target, data)
    try:
        os.replace(tmp, target)
    except OSError as exc:
        tmp.unlink(missing_ok=True)
        raise BundleError(
            code=E_WRITE_IO,
            message=f"Cannot replace {target.name}: {exc}",
            context={"path": str(target)},
        ) from exc
    return len(data)


def _backup_path(target: Path) -> Path:
    fd, name = tempfile.mkstemp(
        prefix=f".{target.name}.", suffix=".bak", dir=target.parent
    )
    os.close(fd)
    return Path(name)


def _rollback(committed: List[Tuple[Path, Path | None]]) -> None:
    """Put back the previous contents of already replaced targets."""
    for target, backup in reversed(committed):
        try:
            if backup is None:
                target.unlink(missing_ok=True)
            else:
                os.replace(backup, target)
        except OSError as exc:
            logger.error("Could not restore %s: %s", target, exc)


def transactional_write(files: Iterable[Tuple[Path, bytes]]) -> List[Path]:
    """Write several files so either all of them land or none does.

    Every payload is staged to a temp file first. Targets are only replaced
    once all payloads are staged; a failure while staging removes the temp
    files and leaves every target untouched. Existing targets are moved to
    a backup before being replaced, and a failure while replacing restores
    every target already committed. Returns the written targets in input
    order.
    """
    staged: List[Tuple[Path, Path]] = []
    try:
        for target, data in files:
            staged.append((target, stage_bytes(target, data)))
    except BaseException as exc:
        for _target, tmp in staged:
            tmp.unlink(missing_ok=True)
        if isinstance(exc, OSError):
            raise BundleError(
                code=E_WRITE_IO,
                message=f"Staging failed: {exc}",
                context={"staged": len(staged)},
            ) from exc
        raise
    committed: List[Tuple[Path, Path | None]] = []
    pending = list(staged)
    try:
        while pending:
            target, tmp = pending[0]
            backup = None
            if target.exists():
                backup = _backup_path(target)
                try:
                    os.replace(target, backup)
                except OSError:
                    backup.unlink(missing_ok=True)
                    raise
            try:
                os.replace(tmp, target)
            except OSError:
                if backup is not None:
                    os.replace(backup, target)
                raise
            committed.append((target, backup))
            pending.pop(0)
    except OSError as exc:
        _rollback(committed)
        for _target, tmp in pending:
            tmp.unlink(missing_ok=True)
        raise BundleError(
            code=E_WRITE_IO,
            message=(
                f"Commit failed at {pending[0][0].name}: {exc}; "
                f"restored {len(committed)} earlier file(s)"
            ),
            context={"path": str(pending[0][0])},
        ) from exc
    for _target, backup in committed:
        if backup is not None:
            backup.unlink(missing_ok=True)
    return [target for target, _backup in committed]
