"""bundlegen: pack content groups into multi-platform bundle containers."""

from .api import (
    PackOptions,
    PackResult,
    diff_containers,
    extract_platform,
    inspect_container,
    pack_content,
    plan_groups,
    validate_bundle,
)
from .container import read_platform, read_platform_file
from .models import AssetEntry, ContentGroup, PlatformBlob
from .platforms import Platform, PlatformSettings, canonical_platforms

__version__ = "0.1.0"

__all__ = [
    "PackOptions",
    "PackResult",
    "pack_content",
    "plan_groups",
    "inspect_container",
    "validate_bundle",
    "extract_platform",
    "diff_containers",
    "read_platform",
    "read_platform_file",
    "AssetEntry",
    "ContentGroup",
    "PlatformBlob",
    "Platform",
    "PlatformSettings",
    "canonical_platforms",
]
