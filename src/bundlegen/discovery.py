"""Content group discovery.

Every immediate subdirectory of the content root becomes one content group
named after the folder (lowercased). Files below a group folder are listed
recursively in sorted order; their addresses are relative to the content
root, so they start with the group folder's own name
(``Textures/wood/oak.png``).
"""

from __future__ import annotations

import fnmatch
from pathlib import Path
from typing import Dict, Iterator, List, Sequence

from .errors import discovery_error
from .logging import get_logger
from .models import AssetEntry, ContentGroup
from .reporting import get_reporter
from .utils.paths import to_address

__all__ = ["discover_groups", "iter_group_files"]

logger = get_logger("discovery")


def _excluded(name: str, patterns: Sequence[str]) -> bool:
    return any(fnmatch.fnmatch(name, pat) for pat in patterns)


def iter_group_files(
    group_dir: Path, exclude: Sequence[str] = ()
) -> Iterator[Path]:
    """Yield regular files under ``group_dir`` depth-first, sorted by name."""
    for child in sorted(group_dir.iterdir(), key=lambda p: p.name):
        if _excluded(child.name, exclude):
            continue
        if child.is_dir():
            yield from iter_group_files(child, exclude)
        elif child.is_file():
            yield child


def discover_groups(
    content_root: str | Path, *, exclude: Sequence[str] = ()
) -> List[ContentGroup]:
    root = Path(content_root)
    if not root.is_dir():
        raise discovery_error(
            f"Content root does not exist or is not a directory: {root}",
            {"content_root": str(root)},
        )
    folders = sorted(
        (p for p in root.iterdir() if p.is_dir()), key=lambda p: p.name
    )
    if not folders:
        raise discovery_error(
            f"Content root {root} has no group folders; nothing to build",
            {"content_root": str(root)},
        )
    seen: Dict[str, Path] = {}
    groups: List[ContentGroup] = []
    rep = get_reporter()
    for folder in folders:
        name = folder.name.lower()
        if name in seen:
            raise discovery_error(
                f"Folders '{seen[name].name}' and '{folder.name}' both map "
                f"to group '{name}'",
                {"group": name, "content_root": str(root)},
            )
        seen[name] = folder
        entries = tuple(
            AssetEntry(address=to_address(f, root), source_path=f)
            for f in iter_group_files(folder, exclude)
        )
        group = ContentGroup(name=name, source_dir=folder, entries=entries)
        if not entries:
            logger.warning("Group '%s' has no assets", name)
        rep.detail(f"{group.bundle_name}: {len(entries)} assets")
        groups.append(group)
    rep.summary(
        "discovery",
        groups=len(groups),
        assets=sum(len(g.entries) for g in groups),
    )
    return groups
