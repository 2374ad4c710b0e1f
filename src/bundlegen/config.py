"""Build configuration loading (YAML or JSON).

Example ``bundlegen.yaml``::

    content_root: Assets/AssetBundles
    output_dir: Build
    build_command: [engine, -batchmode, -buildTarget, "{platform}",
                    -manifest, "{manifest}", -out, "{output_dir}"]
    exclude: ["*.meta"]
    platforms:
      Linux:
        graphics_apis: [Vulkan, OpenGLCore]

Relative paths resolve against the directory holding the config file.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from .errors import config_error
from .platforms import Platform

__all__ = ["BuildConfig", "load_config", "parse_config"]

_KNOWN_KEYS = {
    "content_root",
    "output_dir",
    "staging_dir",
    "build_command",
    "build_timeout",
    "exclude",
    "keep_staging",
    "platforms",
}
_PLATFORM_KEYS = {"graphics_apis", "use_default_graphics_apis", "build_options"}


@dataclass(slots=True)
class BuildConfig:
    content_root: Path
    output_dir: Path
    staging_dir: Optional[Path] = None
    build_command: List[str] = field(default_factory=list)
    build_timeout: Optional[float] = None
    exclude: List[str] = field(default_factory=list)
    keep_staging: bool = False
    platforms: Dict[Platform, Dict[str, Any]] = field(default_factory=dict)

    @property
    def staging_root(self) -> Path:
        return self.staging_dir if self.staging_dir is not None else self.output_dir


def load_config(path: str | Path) -> BuildConfig:
    p = Path(path)
    if not p.is_file():
        raise config_error(f"Config file not found: {p}", {"path": str(p)})
    text = p.read_text(encoding="utf-8")
    try:
        if p.suffix.lower() in {".yaml", ".yml"}:
            data: Any = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise config_error(f"Cannot parse {p.name}: {exc}", {"path": str(p)}) from exc
    if not isinstance(data, dict):
        raise config_error("Root of configuration must be a mapping", {"path": str(p)})
    return parse_config(data, base_dir=p.parent)


def _path(value: Any, key: str, base_dir: Path) -> Path:
    if not isinstance(value, str) or not value:
        raise config_error(f"'{key}' must be a non-empty string", {"key": key})
    candidate = Path(value)
    return candidate if candidate.is_absolute() else base_dir / candidate


def _bool(value: Any, key: str) -> bool:
    if not isinstance(value, bool):
        raise config_error(f"'{key}' must be true or false", {"key": key})
    return value


def _str_list(value: Any, key: str) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise config_error(f"'{key}' must be a list of strings", {"key": key})
    return list(value)


def _platform_overrides(value: Any) -> Dict[Platform, Dict[str, Any]]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise config_error("'platforms' must be a mapping", {"key": "platforms"})
    out: Dict[Platform, Dict[str, Any]] = {}
    for name, overrides in value.items():
        try:
            platform = Platform.parse(name)
        except ValueError as exc:
            raise config_error(str(exc), {"key": "platforms", "platform": name}) from exc
        if not isinstance(overrides, Mapping):
            raise config_error(
                f"Settings for {platform.value} must be a mapping",
                {"platform": platform.value},
            )
        unknown = set(overrides) - _PLATFORM_KEYS
        if unknown:
            raise config_error(
                f"Unknown settings for {platform.value}: {sorted(unknown)}",
                {"platform": platform.value},
            )
        entry: Dict[str, Any] = {}
        for key in ("graphics_apis", "build_options"):
            if key in overrides:
                entry[key] = _str_list(overrides[key], f"platforms.{name}.{key}")
        if "use_default_graphics_apis" in overrides:
            entry["use_default_graphics_apis"] = _bool(
                overrides["use_default_graphics_apis"],
                f"platforms.{name}.use_default_graphics_apis",
            )
        out[platform] = entry
    return out


def parse_config(data: Mapping[str, Any], *, base_dir: Path) -> BuildConfig:
    unknown = set(data) - _KNOWN_KEYS
    if unknown:
        raise config_error(f"Unknown configuration keys: {sorted(unknown)}")
    if "content_root" not in data:
        raise config_error("'content_root' is required", {"key": "content_root"})
    content_root = _path(data["content_root"], "content_root", base_dir)
    output_dir = _path(data.get("output_dir", "Build"), "output_dir", base_dir)
    staging_dir = (
        _path(data["staging_dir"], "staging_dir", base_dir)
        if data.get("staging_dir") is not None
        else None
    )
    timeout = data.get("build_timeout")
    if timeout is not None and (
        not isinstance(timeout, (int, float)) or timeout <= 0
    ):
        raise config_error("'build_timeout' must be a positive number")
    return BuildConfig(
        content_root=content_root,
        output_dir=output_dir,
        staging_dir=staging_dir,
        build_command=_str_list(data.get("build_command"), "build_command"),
        build_timeout=float(timeout) if timeout is not None else None,
        exclude=_str_list(data.get("exclude"), "exclude"),
        keep_staging=_bool(data.get("keep_staging", False), "keep_staging"),
        platforms=_platform_overrides(data.get("platforms")),
    )
