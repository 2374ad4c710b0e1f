"""Container writer: merge per-platform blobs into one bundle.

The writer consumes the immutable :class:`ContainerLayout` produced by
:func:`plan_container`. The whole container is assembled in one buffer of
the planned size and every emitted position is checked against the plan;
a container is never written to its final path incrementally.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Sequence, Tuple

from ..errors import format_error
from ..logging import get_logger
from ..models import PlatformBlob
from ..platforms import canonical_platforms
from ..utils.io import atomic_write_bytes, transactional_write
from .constants import VERSION
from .layout import ContainerLayout, plan_container
from .packers import pack_header, pack_index

__all__ = ["build_container", "write_container", "write_containers"]

logger = get_logger("writer")


def _check_blob_order(blobs: Sequence[PlatformBlob], group: str | None) -> None:
    expected = canonical_platforms()
    if len(blobs) != len(expected):
        raise format_error(
            f"Blob/platform count mismatch: {len(blobs)} blobs for "
            f"{len(expected)} platforms",
            {"group": group, "blobs": [b.platform.value for b in blobs]},
        )
    for position, (blob, platform) in enumerate(zip(blobs, expected)):
        if blob.platform is not platform:
            raise format_error(
                f"Blob at index {position} is {blob.platform.value}, "
                f"expected {platform.value}",
                {"group": group, "platform": blob.platform.value},
            )


def build_container(
    blobs: Sequence[PlatformBlob], *, group: str | None = None
) -> Tuple[bytes, ContainerLayout]:
    """Assemble container bytes for ``blobs`` given in canonical order.

    Returns the bytes together with the layout they follow.
    """
    _check_blob_order(blobs, group)
    layout = plan_container([len(b.data) for b in blobs], group=group)
    buf = bytearray(layout.file_size)
    header = pack_header(VERSION)
    buf[0 : layout.header_size] = header
    buf[layout.header_size : layout.data_start] = pack_index(layout)
    for entry, blob in zip(layout.entries, blobs):
        buf[entry.offset : entry.end] = blob.data
    if len(buf) != layout.file_size:
        raise format_error(
            f"Container size mismatch: plan={layout.file_size} "
            f"actual={len(buf)}",
            {"group": group},
        )
    logger.debug(
        "Assembled %s: %s",
        group or "container",
        " ".join(
            f"{e.platform.value}@{e.offset}+{e.length}" for e in layout.entries
        ),
    )
    return bytes(buf), layout


def write_container(
    path: Path, blobs: Sequence[PlatformBlob], *, group: str | None = None
) -> ContainerLayout:
    """Build and atomically write a single container to ``path``."""
    data, layout = build_container(blobs, group=group)
    atomic_write_bytes(path, data)
    return layout


def write_containers(
    items: Iterable[Tuple[Path, bytes]],
) -> List[Path]:
    """Commit pre-built containers as one all-or-nothing transaction."""
    return transactional_write(items)
