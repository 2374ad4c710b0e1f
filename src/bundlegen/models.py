"""Dataclass models shared across the packing pipeline."""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Tuple

from .platforms import Platform

BUNDLE_SUFFIX = ".bundle"


@dataclass(frozen=True, slots=True)
class AssetEntry:
    # Logical name resolved by consumers at runtime ('/' separated).
    address: str
    # File the build step reads.
    source_path: Path


@dataclass(frozen=True, slots=True)
class ContentGroup:
    name: str
    source_dir: Path
    entries: Tuple[AssetEntry, ...] = ()

    @property
    def bundle_name(self) -> str:
        return f"{self.name}{BUNDLE_SUFFIX}"

    def to_manifest(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "bundle": self.bundle_name,
            "source_dir": str(self.source_dir),
            "assets": [
                {"address": e.address, "path": str(e.source_path)}
                for e in self.entries
            ],
        }


@dataclass(frozen=True, slots=True)
class PlatformBlob:
    platform: Platform
    data: bytes


__all__ = ["AssetEntry", "ContentGroup", "PlatformBlob", "BUNDLE_SUFFIX"]
