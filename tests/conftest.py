from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple

import pytest

from bundlegen.platforms import Platform, PlatformSettings
from bundlegen.reporting import SilentReporter, set_reporter


def blob_for(group: str, platform: Platform) -> bytes:
    """Distinct, recognisable payload per (group, platform)."""
    return f"{group}:{platform.value}:".encode("ascii") * (
        3 + platform.index
    )


class FakeBuild:
    """Build step stand-in that writes ``blob_for`` payloads.

    ``skip`` lists (group, platform) pairs that silently produce no output.
    """

    def __init__(
        self,
        *,
        skip: Sequence[Tuple[str, Platform]] = (),
        payloads: Dict[Tuple[str, Platform], bytes] | None = None,
    ):
        self.skip = set(skip)
        self.payloads = payloads or {}
        self.calls: List[Tuple[Platform, List[str], PlatformSettings]] = []

    def build(
        self,
        groups: Sequence[Dict[str, Any]],
        platform: Platform,
        output_dir: Path,
        settings: PlatformSettings,
    ) -> None:
        self.calls.append((platform, [g["name"] for g in groups], settings))
        for g in groups:
            if (g["name"], platform) in self.skip:
                continue
            data = self.payloads.get(
                (g["name"], platform), blob_for(g["name"], platform)
            )
            (output_dir / g["bundle"]).write_bytes(data)


@pytest.fixture(autouse=True)
def _silent_reporter():
    set_reporter(SilentReporter())
    yield


@pytest.fixture
def content_root(tmp_path: Path) -> Path:
    """Two groups: 'Alpha' with three files, 'beta' with one."""
    root = tmp_path / "AssetBundles"
    (root / "Alpha" / "textures").mkdir(parents=True)
    (root / "Alpha" / "a.txt").write_text("a")
    (root / "Alpha" / "textures" / "wood.png").write_bytes(b"\x89PNG")
    (root / "Alpha" / "textures" / "stone.png").write_bytes(b"\x89PNG2")
    (root / "beta").mkdir()
    (root / "beta" / "model.obj").write_text("v 0 0 0\n")
    return root
