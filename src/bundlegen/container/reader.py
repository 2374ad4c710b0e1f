"""Container reading and inspection.

Public functions:
- parse_header(data) -> (magic_ok, version)
- parse_index(data) -> tuple of IndexEntry
- read_platform(data, platform) -> memoryview
- read_platform_file(path, platform) -> bytes
- inspect_container(path) -> dict
- validate_container(info) -> list[str]

``read_platform`` slices without copying other platforms' data;
``read_platform_file`` only reads the header, the index and the requested
range from disk.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Tuple

from ..errors import (
    BadMagicError,
    TruncatedFileError,
    UnsupportedVersionError,
    E_BAD_MAGIC,
    E_TRUNCATED,
    E_UNSUPPORTED_VERSION,
)
from ..platforms import Platform, canonical_platforms
from .constants import (
    DATA_START,
    HEADER_SIZE,
    INDEX_ENTRY_SIZE,
    MAGIC,
    SUPPORTED_VERSIONS,
)
from .layout import IndexEntry
from .packers import unpack_index_entry

__all__ = [
    "parse_header",
    "parse_index",
    "read_platform",
    "read_platform_file",
    "inspect_container",
    "validate_container",
]


def _check_header(head: bytes | memoryview, source: str) -> int:
    if len(head) < len(MAGIC) or bytes(head[: len(MAGIC)]) != MAGIC:
        raise BadMagicError(
            code=E_BAD_MAGIC,
            message=f"{source} is not a multi-platform bundle",
            context={"source": source, "found": bytes(head[: len(MAGIC)]).hex()},
        )
    if len(head) < HEADER_SIZE:
        raise TruncatedFileError(
            code=E_TRUNCATED,
            message=f"{source} ends inside the header",
            context={"source": source, "size": len(head)},
        )
    version = head[len(MAGIC)]
    if version not in SUPPORTED_VERSIONS:
        raise UnsupportedVersionError(
            code=E_UNSUPPORTED_VERSION,
            message=f"{source} has unsupported container version {version}",
            context={
                "source": source,
                "version": version,
                "supported": sorted(SUPPORTED_VERSIONS),
            },
        )
    return version


def _entries_from(raw: bytes | memoryview, source: str) -> Tuple[IndexEntry, ...]:
    if len(raw) < DATA_START:
        raise TruncatedFileError(
            code=E_TRUNCATED,
            message=f"{source} ends inside the index table",
            context={"source": source, "size": len(raw)},
        )
    entries = []
    for platform in canonical_platforms():
        offset, length = unpack_index_entry(
            raw, HEADER_SIZE + platform.index * INDEX_ENTRY_SIZE
        )
        entries.append(IndexEntry(platform, offset, length))
    return tuple(entries)


def _check_range(
    entry: IndexEntry, total: int, source: str
) -> None:
    if entry.end > total:
        raise TruncatedFileError(
            code=E_TRUNCATED,
            message=(
                f"{entry.platform.value} payload of {source} exceeds file: "
                f"{entry.offset}+{entry.length}>{total}"
            ),
            context={
                "source": source,
                "platform": entry.platform.value,
                "offset": entry.offset,
                "length": entry.length,
                "size": total,
            },
        )


def parse_header(data: bytes | memoryview, *, source: str = "data") -> int:
    """Validate magic and version; return the version."""
    return _check_header(data, source)


def parse_index(
    data: bytes | memoryview, *, source: str = "data"
) -> Tuple[IndexEntry, ...]:
    _check_header(data, source)
    return _entries_from(data, source)


def read_platform(
    data: bytes | bytearray | memoryview,
    platform: Platform | str,
    *,
    source: str = "data",
) -> memoryview:
    """Return the payload for ``platform`` as a zero-copy view of ``data``."""
    platform = Platform.parse(platform)
    view = memoryview(data)
    entry = parse_index(view, source=source)[platform.index]
    _check_range(entry, len(view), source)
    return view[entry.offset : entry.end]


def _read_exact(f: BinaryIO, size: int) -> bytes:
    chunks = []
    remaining = size
    while remaining:
        chunk = f.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def read_platform_file(path: str | Path, platform: Platform | str) -> bytes:
    """Read one platform's payload from a container file on disk."""
    platform = Platform.parse(platform)
    p = Path(path)
    source = p.name
    total = p.stat().st_size
    with p.open("rb") as f:
        head = _read_exact(f, DATA_START)
        _check_header(head, source)
        entry = _entries_from(head, source)[platform.index]
        _check_range(entry, total, source)
        f.seek(entry.offset)
        return _read_exact(f, entry.length)


def inspect_container(path: str | Path) -> Dict[str, Any]:
    """Describe a container file without validating its payloads."""
    p = Path(path)
    size = p.stat().st_size
    with p.open("rb") as f:
        head = _read_exact(f, DATA_START)
    magic_ok = head[: len(MAGIC)] == MAGIC
    info: Dict[str, Any] = {
        "file": str(p),
        "file_size": size,
        "magic_ok": magic_ok,
        "version": head[len(MAGIC)] if len(head) >= HEADER_SIZE else None,
        "index": [],
    }
    if magic_ok and len(head) >= DATA_START:
        for platform in canonical_platforms():
            offset, length = unpack_index_entry(
                head, HEADER_SIZE + platform.index * INDEX_ENTRY_SIZE
            )
            info["index"].append(
                {"platform": platform.value, "offset": offset, "length": length}
            )
    return info


def validate_container(info: Dict[str, Any]) -> List[str]:
    issues: List[str] = []
    if not info["magic_ok"]:
        issues.append("Header magic mismatch")
        return issues
    if info["version"] is None:
        issues.append("Header truncated")
        return issues
    if info["version"] not in SUPPORTED_VERSIONS:
        issues.append(f"Unsupported version {info['version']}")
    index = info["index"]
    if len(index) != len(canonical_platforms()):
        issues.append("Index table truncated")
        return issues
    file_size = info["file_size"]
    expected = DATA_START
    for e in index:
        if e["offset"] != expected:
            issues.append(
                f"{e['platform']} offset {e['offset']} is not contiguous "
                f"(expected {expected})"
            )
        if e["offset"] + e["length"] > file_size:
            issues.append(f"{e['platform']} payload exceeds file size")
        expected = e["offset"] + e["length"]
    if expected != file_size:
        issues.append(
            f"Last payload ends at {expected}, file size is {file_size}"
        )
    return issues
