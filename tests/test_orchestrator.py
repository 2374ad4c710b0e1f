from pathlib import Path

import pytest

from bundlegen.discovery import discover_groups
from bundlegen.errors import BuildError, MissingArtifactError, E_MISSING_ARTIFACT
from bundlegen.orchestrator import build_platform_artifacts
from bundlegen.platforms import Platform, canonical_platforms

from conftest import FakeBuild, blob_for


def test_one_build_call_per_platform_in_canonical_order(
    content_root: Path, tmp_path: Path
):
    fake = FakeBuild()
    groups = discover_groups(content_root)
    artifacts = build_platform_artifacts(groups, tmp_path / "staging", fake)
    assert [c[0] for c in fake.calls] == list(canonical_platforms())
    # every call batches all groups
    assert all(c[1] == ["alpha", "beta"] for c in fake.calls)
    assert artifacts.staging_dirs == [
        tmp_path / "staging" / "Windows",
        tmp_path / "staging" / "Linux",
        tmp_path / "staging" / "macOS",
    ]


def test_settings_are_passed_into_each_build(content_root: Path, tmp_path: Path):
    fake = FakeBuild()
    build_platform_artifacts(
        discover_groups(content_root),
        tmp_path / "staging",
        fake,
        settings={Platform.LINUX: {"graphics_apis": ["OpenGLCore"]}},
    )
    apis = {c[0]: c[2].graphics_apis for c in fake.calls}
    assert apis[Platform.WINDOWS] == ("Direct3D11", "Direct3D12", "Vulkan")
    assert apis[Platform.LINUX] == ("OpenGLCore",)
    assert apis[Platform.MACOS] == ("Metal",)


def test_blobs_load_in_canonical_order(content_root: Path, tmp_path: Path):
    artifacts = build_platform_artifacts(
        discover_groups(content_root), tmp_path / "staging", FakeBuild()
    )
    blobs = artifacts.load_blobs("beta")
    assert [b.platform for b in blobs] == list(canonical_platforms())
    assert [b.data for b in blobs] == [
        blob_for("beta", p) for p in canonical_platforms()
    ]


def test_missing_bundle_names_group_and_platform(
    content_root: Path, tmp_path: Path
):
    fake = FakeBuild(skip=[("beta", Platform.LINUX)])
    with pytest.raises(MissingArtifactError) as ei:
        build_platform_artifacts(
            discover_groups(content_root), tmp_path / "staging", fake
        )
    err = ei.value
    assert err.code == E_MISSING_ARTIFACT
    assert err.context["group"] == "beta"
    assert err.context["platform"] == "Linux"
    # aborted before macOS was built
    assert [c[0] for c in fake.calls] == [Platform.WINDOWS, Platform.LINUX]


def test_stale_staging_output_does_not_satisfy_verification(
    content_root: Path, tmp_path: Path
):
    stale = tmp_path / "staging" / "Linux"
    stale.mkdir(parents=True)
    (stale / "beta.bundle").write_bytes(b"left over from last week")
    fake = FakeBuild(skip=[("beta", Platform.LINUX)])
    with pytest.raises(MissingArtifactError):
        build_platform_artifacts(
            discover_groups(content_root), tmp_path / "staging", fake
        )


def test_build_step_exception_becomes_build_error(
    content_root: Path, tmp_path: Path
):
    class Exploding:
        def build(self, groups, platform, output_dir, settings):
            raise RuntimeError("engine crashed")

    with pytest.raises(BuildError) as ei:
        build_platform_artifacts(
            discover_groups(content_root), tmp_path / "staging", Exploding()
        )
    assert ei.value.context == {"platform": "Windows"}
    assert "engine crashed" in ei.value.message
