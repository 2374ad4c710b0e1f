import pytest

from bundlegen.platforms import (
    Platform,
    PlatformSettings,
    canonical_platforms,
    default_settings,
    resolve_settings,
)


def test_canonical_order_is_windows_linux_macos():
    assert canonical_platforms() == (
        Platform.WINDOWS,
        Platform.LINUX,
        Platform.MACOS,
    )
    assert [p.index for p in canonical_platforms()] == [0, 1, 2]


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Windows", Platform.WINDOWS),
        ("win64", Platform.WINDOWS),
        ("StandaloneWindows", Platform.WINDOWS),
        ("linux", Platform.LINUX),
        ("StandaloneLinux64", Platform.LINUX),
        ("macOS", Platform.MACOS),
        ("OSX", Platform.MACOS),
        (" mac ", Platform.MACOS),
    ],
)
def test_parse_accepts_names_and_aliases(text, expected):
    assert Platform.parse(text) is expected


def test_parse_rejects_unknown_platform():
    with pytest.raises(ValueError, match="Unknown platform 'android'"):
        Platform.parse("android")


def test_default_graphics_apis():
    assert default_settings(Platform.WINDOWS).graphics_apis == (
        "Direct3D11",
        "Direct3D12",
        "Vulkan",
    )
    assert default_settings(Platform.LINUX).graphics_apis == ("Vulkan",)
    assert default_settings(Platform.MACOS).graphics_apis == ("Metal",)
    assert not default_settings(Platform.MACOS).use_default_graphics_apis


def test_resolve_settings_applies_overrides_per_platform():
    overrides = {
        Platform.LINUX: {"graphics_apis": ["Vulkan", "OpenGLCore"]},
        Platform.MACOS: {"graphics_apis": [], "build_options": ["StrictMode"]},
    }
    linux = resolve_settings(Platform.LINUX, overrides)
    assert linux.graphics_apis == ("Vulkan", "OpenGLCore")
    assert not linux.use_default_graphics_apis
    mac = resolve_settings(Platform.MACOS, overrides)
    assert mac == PlatformSettings(
        graphics_apis=(),
        use_default_graphics_apis=True,
        build_options=("StrictMode",),
    )
    # untouched platform keeps its defaults
    assert resolve_settings(Platform.WINDOWS, overrides) == default_settings(
        Platform.WINDOWS
    )
