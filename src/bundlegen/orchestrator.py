"""Per-platform build orchestration.

For each platform in canonical order the orchestrator resolves the
platform's build settings, clears the platform's staging directory, runs
the build step once for every group, then checks that each group's bundle
is present. The first missing bundle aborts the whole run: a container
missing one platform is worse than no container at all.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence

from .collaborators import BuildCollaborator
from .errors import (
    BuildError,
    BundleError,
    MissingArtifactError,
    E_BUILD_FAILED,
    E_MISSING_ARTIFACT,
)
from .logging import get_logger
from .models import ContentGroup, PlatformBlob
from .platforms import (
    Platform,
    PlatformSettings,
    canonical_platforms,
    resolve_settings,
)
from .reporting import get_reporter, stage
from .utils.io import DataError, safe_read_file

__all__ = ["ArtifactSet", "build_platform_artifacts", "staging_dir_for"]

logger = get_logger("orchestrator")


def staging_dir_for(staging_root: Path, platform: Platform) -> Path:
    return staging_root / platform.staging_dir_name


@dataclass(slots=True)
class ArtifactSet:
    """Verified per-platform bundle paths for every group of a run."""

    paths: Dict[str, Dict[Platform, Path]] = field(default_factory=dict)
    staging_dirs: List[Path] = field(default_factory=list)

    def add(self, group: str, platform: Platform, path: Path) -> None:
        self.paths.setdefault(group, {})[platform] = path

    def load_blobs(self, group: str) -> List[PlatformBlob]:
        """Read a group's platform bundles in canonical order."""
        by_platform = self.paths.get(group, {})
        blobs = []
        for platform in canonical_platforms():
            path = by_platform.get(platform)
            if path is None:
                raise MissingArtifactError(
                    code=E_MISSING_ARTIFACT,
                    message=f"No {platform.value} bundle recorded for '{group}'",
                    context={"group": group, "platform": platform.value},
                )
            try:
                data = safe_read_file(path)
            except DataError as exc:
                raise MissingArtifactError(
                    code=E_MISSING_ARTIFACT,
                    message=f"{platform.value} bundle for '{group}' vanished: {exc}",
                    context={
                        "group": group,
                        "platform": platform.value,
                        "path": str(path),
                    },
                ) from exc
            blobs.append(PlatformBlob(platform, data))
        return blobs


def _prepare_staging(output_dir: Path) -> None:
    # Bundles left by an earlier run must never satisfy verification.
    if output_dir.exists():
        shutil.rmtree(output_dir)
    output_dir.mkdir(parents=True)


def build_platform_artifacts(
    groups: Sequence[ContentGroup],
    staging_root: str | Path,
    collaborator: BuildCollaborator,
    *,
    settings: Mapping[Platform, Mapping[str, Any]] | None = None,
) -> ArtifactSet:
    staging_root = Path(staging_root)
    manifests = [g.to_manifest() for g in groups]
    artifacts = ArtifactSet()
    platforms = canonical_platforms()
    for platform in platforms:
        output_dir = staging_dir_for(staging_root, platform)
        stage_key = f"build.{platform.staging_dir_name.lower()}"
        with stage(
            stage_key,
            f"Build {platform.value}",
            total=len(groups),
            platform=platform.value,
        ) as rep:
            # configure -> build -> verify
            platform_settings: PlatformSettings = resolve_settings(
                platform, settings
            )
            logger.debug(
                "%s settings: graphics_apis=%s default_apis=%s options=%s",
                platform.value,
                ",".join(platform_settings.graphics_apis) or "-",
                platform_settings.use_default_graphics_apis,
                ",".join(platform_settings.build_options) or "-",
            )
            _prepare_staging(output_dir)
            artifacts.staging_dirs.append(output_dir)
            try:
                collaborator.build(
                    manifests, platform, output_dir, platform_settings
                )
            except BundleError:
                raise
            except Exception as exc:
                raise BuildError(
                    code=E_BUILD_FAILED,
                    message=f"{platform.value} build failed: {exc}",
                    context={"platform": platform.value},
                ) from exc
            for group in groups:
                path = output_dir / group.bundle_name
                if not path.is_file():
                    raise MissingArtifactError(
                        code=E_MISSING_ARTIFACT,
                        message=(
                            f"{platform.value} build produced no bundle for "
                            f"group '{group.name}'"
                        ),
                        context={
                            "group": group.name,
                            "platform": platform.value,
                            "expected": str(path),
                        },
                    )
                artifacts.add(group.name, platform, path)
                rep.tick(stage_key, group.bundle_name)
    get_reporter().summary(
        "build",
        platforms=len(platforms),
        groups=len(groups),
        bundles=len(platforms) * len(groups),
    )
    return artifacts
