"""Container format constants (version 1).

Layout::

    magic    11 bytes  ASCII "RisingWorld"
    version   1 byte
    index     8 bytes per platform: offset u32-le, length u32-le
    data      platform blobs concatenated in canonical platform order

Offsets are absolute from the start of the file. All integers are unsigned
32-bit little-endian, which caps any offset or end position at
``U32_MAX``: a container must stay below 4 GiB in total.
"""

from __future__ import annotations

import struct

from ..platforms import canonical_platforms

MAGIC = b"RisingWorld"
VERSION = 1
SUPPORTED_VERSIONS = frozenset({VERSION})

INDEX_ENTRY = struct.Struct("<II")
INDEX_ENTRY_SIZE = INDEX_ENTRY.size

HEADER_SIZE = len(MAGIC) + 1
PLATFORM_COUNT = len(canonical_platforms())
INDEX_SIZE = PLATFORM_COUNT * INDEX_ENTRY_SIZE
DATA_START = HEADER_SIZE + INDEX_SIZE

U32_MAX = 0xFFFFFFFF


__all__ = [
    "MAGIC",
    "VERSION",
    "SUPPORTED_VERSIONS",
    "INDEX_ENTRY",
    "INDEX_ENTRY_SIZE",
    "HEADER_SIZE",
    "PLATFORM_COUNT",
    "INDEX_SIZE",
    "DATA_START",
    "U32_MAX",
]
