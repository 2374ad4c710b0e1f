"""Build manifest generation.

The manifest is an optional JSON artifact summarising the containers
written by one run. It is only produced when explicitly requested.

Per container it records the file name and size, whole-file sha256/crc32,
the number of assets in the group, and the index table with a sha256 per
platform payload so two builds can be compared without the files at hand.
"""

from __future__ import annotations

import hashlib
import json
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Sequence

from .container.layout import ContainerLayout
from .platforms import canonical_platforms
from .utils.io import atomic_write_bytes

__all__ = ["ContainerRecord", "container_record", "manifest_dict", "build_manifest"]

MANIFEST_VERSION = 1


@dataclass(slots=True)
class ContainerRecord:
    group: str
    file: str
    file_size: int
    sha256: str
    crc32: int
    asset_count: int
    index: List[Dict[str, Any]]


def container_record(
    group: str,
    file_name: str,
    data: bytes,
    layout: ContainerLayout,
    asset_count: int,
) -> ContainerRecord:
    view = memoryview(data)
    return ContainerRecord(
        group=group,
        file=file_name,
        file_size=len(data),
        sha256=hashlib.sha256(data).hexdigest(),
        crc32=zlib.crc32(data) & 0xFFFFFFFF,
        asset_count=asset_count,
        index=[
            {
                "platform": e.platform.value,
                "offset": e.offset,
                "length": e.length,
                "sha256": hashlib.sha256(view[e.offset : e.end]).hexdigest(),
            }
            for e in layout.entries
        ],
    )


def manifest_dict(records: Sequence[ContainerRecord]) -> Dict[str, Any]:
    return {
        "version": MANIFEST_VERSION,
        "platforms": [p.value for p in canonical_platforms()],
        "containers": [
            {
                "group": r.group,
                "file": r.file,
                "file_size": r.file_size,
                "sha256": r.sha256,
                "crc32": f"{r.crc32:08x}",
                "asset_count": r.asset_count,
                "index": r.index,
            }
            for r in sorted(records, key=lambda r: r.group)
        ],
    }


def build_manifest(records: Sequence[ContainerRecord], output_path: Path) -> Path:
    text = json.dumps(manifest_dict(records), indent=2, sort_keys=True) + "\n"
    atomic_write_bytes(output_path, text.encode("utf-8"))
    return output_path
