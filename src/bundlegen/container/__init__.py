"""Multi-platform bundle container format (version 1)."""

from .constants import MAGIC, VERSION
from .layout import ContainerLayout, IndexEntry, plan_container, layout_to_dict
from .writer import build_container, write_container, write_containers
from .reader import (
    inspect_container,
    parse_header,
    parse_index,
    read_platform,
    read_platform_file,
    validate_container,
)

__all__ = [
    "MAGIC",
    "VERSION",
    "ContainerLayout",
    "IndexEntry",
    "plan_container",
    "layout_to_dict",
    "build_container",
    "write_container",
    "write_containers",
    "inspect_container",
    "parse_header",
    "parse_index",
    "read_platform",
    "read_platform_file",
    "validate_container",
]
