"""Pure binary packing functions for the container header and index.

All functions are side-effect free and validate sizes.
"""

from __future__ import annotations

from typing import Tuple

from ..errors import format_error
from .constants import (
    HEADER_SIZE,
    INDEX_ENTRY,
    INDEX_ENTRY_SIZE,
    MAGIC,
    U32_MAX,
)
from .layout import ContainerLayout

__all__ = ["pack_header", "pack_index_entry", "pack_index", "unpack_index_entry"]


def pack_header(version: int) -> bytes:
    if not 0 <= version <= 0xFF:
        raise format_error(f"Version {version} does not fit in one byte")
    out = MAGIC + bytes((version,))
    if len(out) != HEADER_SIZE:  # pragma: no cover
        raise format_error("Header size mismatch")
    return out


def pack_index_entry(offset: int, length: int) -> bytes:
    if not (0 <= offset <= U32_MAX and 0 <= length <= U32_MAX):
        raise format_error(
            f"Index entry out of u32 range: offset={offset} length={length}"
        )
    return INDEX_ENTRY.pack(offset, length)


def pack_index(layout: ContainerLayout) -> bytes:
    out = b"".join(pack_index_entry(e.offset, e.length) for e in layout.entries)
    if len(out) != layout.index_size:
        raise format_error(
            f"Index size mismatch: plan={layout.index_size} packed={len(out)}"
        )
    return out


def unpack_index_entry(raw: bytes | memoryview, offset: int) -> Tuple[int, int]:
    if offset + INDEX_ENTRY_SIZE > len(raw):  # pragma: no cover
        raise ValueError("Index entry out of range")
    return INDEX_ENTRY.unpack_from(raw, offset)
