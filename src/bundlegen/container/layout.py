"""Container layout planning.

The index table has a fixed size known from the platform count, so every
offset is computable from the blob lengths alone, before any byte is
written. The writer emits bytes strictly following the returned plan.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Sequence, Tuple

from ..errors import FormatError, E_SIZE_LIMIT, format_error
from ..platforms import Platform, canonical_platforms
from .constants import (
    DATA_START,
    HEADER_SIZE,
    INDEX_SIZE,
    PLATFORM_COUNT,
    U32_MAX,
)

__all__ = ["IndexEntry", "ContainerLayout", "plan_container", "layout_to_dict"]


@dataclass(frozen=True, slots=True)
class IndexEntry:
    platform: Platform
    offset: int
    length: int

    @property
    def end(self) -> int:
        return self.offset + self.length


@dataclass(frozen=True, slots=True)
class ContainerLayout:
    header_size: int
    index_size: int
    data_start: int
    entries: Tuple[IndexEntry, ...]
    file_size: int

    def entry(self, platform: Platform) -> IndexEntry:
        return self.entries[platform.index]


def plan_container(
    lengths: Sequence[int], *, group: str | None = None
) -> ContainerLayout:
    """Compute offsets for blobs of ``lengths`` given in canonical order."""
    if len(lengths) != PLATFORM_COUNT:
        raise format_error(
            f"Expected {PLATFORM_COUNT} platform blobs, got {len(lengths)}",
            {"group": group, "blobs": len(lengths)},
        )
    entries = []
    cursor = DATA_START
    for platform, length in zip(canonical_platforms(), lengths):
        if length < 0:
            raise format_error(
                f"Negative blob length {length}",
                {"group": group, "platform": platform.value},
            )
        if cursor + length > U32_MAX:
            raise FormatError(
                code=E_SIZE_LIMIT,
                message=(
                    f"{platform.value} blob ends at byte {cursor + length}, "
                    f"beyond the 32-bit container limit ({U32_MAX})"
                ),
                context={
                    "group": group,
                    "platform": platform.value,
                    "length": length,
                },
            )
        entries.append(IndexEntry(platform, cursor, length))
        cursor += length
    return ContainerLayout(
        header_size=HEADER_SIZE,
        index_size=INDEX_SIZE,
        data_start=DATA_START,
        entries=tuple(entries),
        file_size=cursor,
    )


def layout_to_dict(layout: ContainerLayout) -> Dict[str, Any]:
    return {
        "header_size": layout.header_size,
        "index_size": layout.index_size,
        "data_start": layout.data_start,
        "file_size": layout.file_size,
        "index": [
            {
                "platform": e.platform.value,
                "offset": e.offset,
                "length": e.length,
            }
            for e in layout.entries
        ],
    }
