"""Build step interface and a command-line driven implementation.

The build step compiles group manifests into platform-specific bundle
files. bundlegen treats it as a black box: it is called once per platform
with every group and must leave ``{group}.bundle`` files in ``output_dir``.
"""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from typing import Any, Dict, List, Protocol, Sequence

from .errors import BuildError, E_BUILD_FAILED
from .logging import get_logger
from .platforms import Platform, PlatformSettings

__all__ = [
    "BuildCollaborator",
    "CommandBuildCollaborator",
    "GROUPS_MANIFEST_NAME",
]

logger = get_logger("build")

GROUPS_MANIFEST_NAME = "groups.json"


def _decode(raw: bytes | None) -> str:
    return (raw or b"").decode("utf-8", errors="replace")


class BuildCollaborator(Protocol):
    def build(
        self,
        groups: Sequence[Dict[str, Any]],
        platform: Platform,
        output_dir: Path,
        settings: PlatformSettings,
    ) -> None: ...


class CommandBuildCollaborator:
    """Run an external command once per platform.

    The group manifests and the platform settings are written to
    ``output_dir/groups.json`` first. Each element of ``command`` may use the
    placeholders ``{platform}``, ``{output_dir}``, ``{manifest}``,
    ``{graphics_apis}`` and ``{build_options}`` (lists are comma-joined).
    """

    def __init__(
        self,
        command: Sequence[str],
        *,
        timeout: float | None = None,
        cwd: Path | None = None,
    ):
        if not command:
            raise ValueError("Build command must not be empty")
        self.command = list(command)
        self.timeout = timeout
        self.cwd = cwd

    def _expand(
        self,
        platform: Platform,
        output_dir: Path,
        manifest: Path,
        settings: PlatformSettings,
    ) -> List[str]:
        values = {
            "platform": platform.value,
            "output_dir": str(output_dir),
            "manifest": str(manifest),
            "graphics_apis": ",".join(settings.graphics_apis),
            "build_options": ",".join(settings.build_options),
        }
        try:
            return [arg.format(**values) for arg in self.command]
        except (KeyError, IndexError) as exc:
            raise BuildError(
                code=E_BUILD_FAILED,
                message=f"Unknown placeholder in build command: {exc}",
                context={"platform": platform.value},
            ) from exc

    def build(
        self,
        groups: Sequence[Dict[str, Any]],
        platform: Platform,
        output_dir: Path,
        settings: PlatformSettings,
    ) -> None:
        manifest = output_dir / GROUPS_MANIFEST_NAME
        payload = {
            "platform": platform.value,
            "settings": settings.to_dict(),
            "groups": list(groups),
        }
        manifest.write_text(
            json.dumps(payload, indent=2, sort_keys=True) + "\n",
            encoding="utf-8",
        )
        argv = self._expand(platform, output_dir, manifest, settings)
        logger.debug("Running build command: %s", " ".join(argv))
        try:
            proc = subprocess.run(
                argv,
                cwd=self.cwd,
                capture_output=True,
                timeout=self.timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise BuildError(
                code=E_BUILD_FAILED,
                message=f"{platform.value} build could not run: {exc}",
                context={"platform": platform.value, "command": argv[0]},
            ) from exc
        # engine logs are not guaranteed to be UTF-8
        for line in _decode(proc.stdout).splitlines():
            logger.debug("%s: %s", platform.value, line)
        if proc.returncode != 0:
            tail = "\n".join(_decode(proc.stderr).strip().splitlines()[-10:])
            raise BuildError(
                code=E_BUILD_FAILED,
                message=(
                    f"{platform.value} build exited with code {proc.returncode}"
                ),
                context={"platform": platform.value, "stderr": tail},
            )
        manifest.unlink(missing_ok=True)
