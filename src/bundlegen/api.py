"""High-level API for bundlegen.

``pack_content`` runs a full packing run: discovery, one build per
platform, merge of every group into a container, an all-or-nothing commit
of the containers, an optional manifest and staging cleanup. Any failure
before the commit leaves the output directory untouched.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from .cleaner import clean_staging
from .collaborators import BuildCollaborator
from .container.reader import (
    inspect_container as _inspect_container_impl,
    read_platform,
    read_platform_file,
    validate_container as _validate_container_impl,
)
from .container.writer import build_container, write_containers
from .discovery import discover_groups
from .logging import get_logger, section
from .manifest import ContainerRecord, build_manifest, container_record
from .models import ContentGroup
from .orchestrator import ArtifactSet, build_platform_artifacts
from .platforms import Platform, canonical_platforms
from .reporting import get_reporter, stage
from .utils.io import atomic_write_bytes

__all__ = [
    "PackOptions",
    "PackResult",
    "pack_content",
    "plan_groups",
    "inspect_container",
    "validate_bundle",
    "extract_platform",
    "diff_containers",
]


@dataclass(slots=True)
class PackOptions:
    content_root: Path
    output_dir: Path
    # Per-platform build output lives under here; defaults to output_dir.
    staging_root: Optional[Path] = None
    exclude: Sequence[str] = ()
    keep_staging: bool = False
    manifest_path: Optional[Path] = None
    platform_settings: Mapping[Platform, Mapping[str, Any]] = field(
        default_factory=dict
    )


@dataclass(slots=True)
class PackResult:
    containers: List[Path]
    bytes_written: Dict[str, int]
    manifest_path: Optional[Path] = None
    leftover_staging: List[Path] = field(default_factory=list)


def plan_groups(
    content_root: str | Path, *, exclude: Sequence[str] = ()
) -> List[ContentGroup]:
    """Discover groups without building anything."""
    return discover_groups(content_root, exclude=exclude)


def _merge_groups(
    groups: Sequence[ContentGroup],
    artifacts: ArtifactSet,
    output_dir: Path,
    records: List[ContainerRecord],
) -> Iterator[Tuple[Path, bytes]]:
    with stage("merge", "Merge containers", total=len(groups)) as rep:
        for group in groups:
            blobs = artifacts.load_blobs(group.name)
            data, layout = build_container(blobs, group=group.name)
            records.append(
                container_record(
                    group.name,
                    group.bundle_name,
                    data,
                    layout,
                    len(group.entries),
                )
            )
            rep.tick("merge", group.bundle_name)
            yield output_dir / group.bundle_name, data


def pack_content(
    options: PackOptions, collaborator: BuildCollaborator
) -> PackResult:
    logger = get_logger()
    rep = get_reporter()
    output_dir = Path(options.output_dir)
    staging_root = Path(options.staging_root or output_dir)

    with section("Discover content groups"):
        groups = discover_groups(options.content_root, exclude=options.exclude)

    with section("Build platform bundles"):
        artifacts = build_platform_artifacts(
            groups,
            staging_root,
            collaborator,
            settings=options.platform_settings,
        )

    records: List[ContainerRecord] = []
    with section("Write containers"):
        output_dir.mkdir(parents=True, exist_ok=True)
        written = write_containers(
            _merge_groups(groups, artifacts, output_dir, records)
        )
        sizes = {r.group: r.file_size for r in records}
        for r in records:
            logger.info("Wrote %s (%d bytes)", r.file, r.file_size)
        rep.summary("write", containers=len(written), bytes=sum(sizes.values()))

    manifest_path = None
    if options.manifest_path is not None:
        manifest_path = build_manifest(records, Path(options.manifest_path))
        rep.summary("manifest", file=manifest_path.name, containers=len(records))

    leftover: List[Path] = []
    if options.keep_staging:
        logger.info("Keeping staging directories under %s", staging_root)
    else:
        with section("Clean staging"):
            leftover = clean_staging(artifacts.staging_dirs)

    return PackResult(
        containers=written,
        bytes_written=sizes,
        manifest_path=manifest_path,
        leftover_staging=leftover,
    )


def inspect_container(path: str | Path) -> Dict[str, Any]:
    return _inspect_container_impl(path)


def validate_bundle(path: str | Path) -> List[str]:
    return _validate_container_impl(_inspect_container_impl(path))


def extract_platform(
    path: str | Path, platform: Platform | str, output_path: str | Path
) -> int:
    """Write one platform's payload from ``path`` to ``output_path``."""
    data = read_platform_file(path, platform)
    return atomic_write_bytes(Path(output_path), data)


def diff_containers(left: str | Path, right: str | Path) -> Dict[str, Any]:
    """Compare two containers platform by platform.

    Returns a JSON-serialisable dict; ``summary.count`` is the number of
    platforms whose payload differs.
    """
    left_p, right_p = Path(left), Path(right)
    left_data = left_p.read_bytes()
    right_data = right_p.read_bytes()
    platforms: Dict[str, Any] = {}
    diff_count = 0
    for platform in canonical_platforms():
        a = read_platform(left_data, platform, source=left_p.name)
        b = read_platform(right_data, platform, source=right_p.name)
        ha = hashlib.sha256(a).hexdigest()
        hb = hashlib.sha256(b).hexdigest()
        same = ha == hb
        if not same:
            diff_count += 1
        platforms[platform.value] = {
            "same": same,
            "left": {"length": len(a), "sha256": ha},
            "right": {"length": len(b), "sha256": hb},
        }
    return {
        "left": str(left_p),
        "right": str(right_p),
        "platforms": platforms,
        "summary": {"count": diff_count},
    }
