"""Closed, ordered set of target platforms and their build settings.

The declaration order of :class:`Platform` is the canonical platform order:
it fixes the position of each platform in a container's index table and the
order of the data blocks. Never reorder or insert members; the container
format depends on both count and order.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Mapping, Tuple

__all__ = [
    "Platform",
    "PlatformSettings",
    "canonical_platforms",
    "platform_index",
    "default_settings",
    "resolve_settings",
]


class Platform(Enum):
    WINDOWS = "Windows"
    LINUX = "Linux"
    MACOS = "macOS"

    @property
    def index(self) -> int:
        return platform_index(self)

    @property
    def staging_dir_name(self) -> str:
        return self.value

    @classmethod
    def parse(cls, text: "str | Platform") -> "Platform":
        if isinstance(text, Platform):
            return text
        key = str(text).strip().lower()
        try:
            return _ALIASES[key]
        except KeyError:
            names = ", ".join(p.value for p in cls)
            raise ValueError(
                f"Unknown platform '{text}' (expected one of: {names})"
            ) from None

    def __str__(self) -> str:
        return self.value


_CANONICAL: Tuple[Platform, ...] = tuple(Platform)

_ALIASES: Dict[str, Platform] = {
    "windows": Platform.WINDOWS,
    "win": Platform.WINDOWS,
    "win64": Platform.WINDOWS,
    "standalonewindows": Platform.WINDOWS,
    "linux": Platform.LINUX,
    "linux64": Platform.LINUX,
    "standalonelinux64": Platform.LINUX,
    "macos": Platform.MACOS,
    "mac": Platform.MACOS,
    "osx": Platform.MACOS,
    "standaloneosx": Platform.MACOS,
}


def canonical_platforms() -> Tuple[Platform, ...]:
    return _CANONICAL


def platform_index(platform: Platform) -> int:
    return _CANONICAL.index(platform)


DEFAULT_BUILD_OPTIONS: Tuple[str, ...] = (
    "StrictMode",
    "ChunkBasedCompression",
    "StripEngineVersion",
)


@dataclass(frozen=True, slots=True)
class PlatformSettings:
    """Build configuration handed to the build step for one platform."""

    graphics_apis: Tuple[str, ...] = ()
    use_default_graphics_apis: bool = False
    build_options: Tuple[str, ...] = DEFAULT_BUILD_OPTIONS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "graphics_apis": list(self.graphics_apis),
            "use_default_graphics_apis": self.use_default_graphics_apis,
            "build_options": list(self.build_options),
        }


_DEFAULT_SETTINGS: Dict[Platform, PlatformSettings] = {
    Platform.WINDOWS: PlatformSettings(
        graphics_apis=("Direct3D11", "Direct3D12", "Vulkan")
    ),
    Platform.LINUX: PlatformSettings(graphics_apis=("Vulkan",)),
    Platform.MACOS: PlatformSettings(graphics_apis=("Metal",)),
}


def default_settings(platform: Platform) -> PlatformSettings:
    return _DEFAULT_SETTINGS[platform]


def resolve_settings(
    platform: Platform,
    overrides: Mapping[Platform, Mapping[str, Any]] | None = None,
) -> PlatformSettings:
    """Return default settings for ``platform`` with optional overrides.

    An override that sets ``graphics_apis`` to an empty list switches the
    platform to the engine's default graphics APIs.
    """
    settings = default_settings(platform)
    if not overrides or platform not in overrides:
        return settings
    o = overrides[platform]
    if "graphics_apis" in o:
        apis = tuple(str(a) for a in (o["graphics_apis"] or ()))
        settings = replace(
            settings,
            graphics_apis=apis,
            use_default_graphics_apis=not apis,
        )
    if "use_default_graphics_apis" in o:
        settings = replace(
            settings,
            use_default_graphics_apis=bool(o["use_default_graphics_apis"]),
        )
    if "build_options" in o:
        settings = replace(
            settings,
            build_options=tuple(str(b) for b in (o["build_options"] or ())),
        )
    return settings
