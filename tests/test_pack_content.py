"""End-to-end packing runs with a fake build step."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from bundlegen.api import PackOptions, pack_content, validate_bundle
from bundlegen.container import read_platform, read_platform_file
from bundlegen.errors import FormatError, MissingArtifactError
from bundlegen.platforms import Platform, canonical_platforms

from conftest import FakeBuild, blob_for


def _options(content_root: Path, out: Path, **kw) -> PackOptions:
    return PackOptions(content_root=content_root, output_dir=out, **kw)


def test_two_groups_three_platforms(content_root: Path, tmp_path: Path):
    out = tmp_path / "Build"
    result = pack_content(_options(content_root, out), FakeBuild())
    assert sorted(p.name for p in result.containers) == [
        "alpha.bundle",
        "beta.bundle",
    ]
    for group in ("alpha", "beta"):
        data = (out / f"{group}.bundle").read_bytes()
        assert data[:11] == b"RisingWorld"
        assert data[11] == 1
        assert data[12:36] != b"\x00" * 24  # 3 platforms x 8 bytes
        assert bytes(read_platform(data, "Linux")) == blob_for(
            group, Platform.LINUX
        )
        assert result.bytes_written[group] == len(data)
        assert validate_bundle(out / f"{group}.bundle") == []


def test_staging_is_removed_after_success(content_root: Path, tmp_path: Path):
    out = tmp_path / "Build"
    result = pack_content(_options(content_root, out), FakeBuild())
    assert result.leftover_staging == []
    assert sorted(p.name for p in out.iterdir()) == [
        "alpha.bundle",
        "beta.bundle",
    ]


def test_keep_staging_leaves_platform_dirs(content_root: Path, tmp_path: Path):
    out = tmp_path / "Build"
    pack_content(_options(content_root, out, keep_staging=True), FakeBuild())
    for p in canonical_platforms():
        assert (out / p.value / "alpha.bundle").is_file()


def test_missing_artifact_writes_no_container(content_root: Path, tmp_path: Path):
    out = tmp_path / "Build"
    fake = FakeBuild(skip=[("alpha", Platform.MACOS)])
    with pytest.raises(MissingArtifactError) as ei:
        pack_content(_options(content_root, out, staging_root=tmp_path / "st"), fake)
    assert ei.value.context["group"] == "alpha"
    assert ei.value.context["platform"] == "macOS"
    assert not list(out.glob("*.bundle"))
    # staging is kept for inspection after a failed run
    assert (tmp_path / "st" / "Windows" / "alpha.bundle").is_file()


def test_failed_run_keeps_previous_containers(content_root: Path, tmp_path: Path):
    out = tmp_path / "Build"
    pack_content(_options(content_root, out), FakeBuild())
    before = (out / "beta.bundle").read_bytes()
    with pytest.raises(MissingArtifactError):
        pack_content(
            _options(content_root, out),
            FakeBuild(skip=[("beta", Platform.WINDOWS)]),
        )
    assert (out / "beta.bundle").read_bytes() == before


def test_merge_failure_leaves_no_partial_output(
    content_root: Path, tmp_path: Path, monkeypatch
):
    import bundlegen.api as api

    real = api.build_container

    def fail_on_beta(blobs, *, group=None):
        if group == "beta":
            raise FormatError(code="E_FORMAT", message="boom", context={"group": group})
        return real(blobs, group=group)

    monkeypatch.setattr(api, "build_container", fail_on_beta)
    out = tmp_path / "Build"
    with pytest.raises(FormatError):
        pack_content(_options(content_root, out), FakeBuild())
    # alpha was merged first but must not be committed alone
    assert not (out / "alpha.bundle").exists()
    assert not [p for p in out.iterdir() if p.suffix == ".tmp"]


def test_empty_and_large_payloads(content_root: Path, tmp_path: Path):
    big = bytes(range(256)) * (8 * 1024)  # 2 MiB
    payloads = {
        ("alpha", Platform.WINDOWS): b"",
        ("alpha", Platform.LINUX): big,
    }
    out = tmp_path / "Build"
    pack_content(_options(content_root, out), FakeBuild(payloads=payloads))
    path = out / "alpha.bundle"
    assert read_platform_file(path, Platform.WINDOWS) == b""
    assert read_platform_file(path, Platform.LINUX) == big
    assert read_platform_file(path, Platform.MACOS) == blob_for(
        "alpha", Platform.MACOS
    )


def test_manifest_describes_containers(content_root: Path, tmp_path: Path):
    out = tmp_path / "Build"
    manifest = tmp_path / "bundles.manifest.json"
    result = pack_content(
        _options(content_root, out, manifest_path=manifest), FakeBuild()
    )
    assert result.manifest_path == manifest
    doc = json.loads(manifest.read_text(encoding="utf-8"))
    assert doc["platforms"] == ["Windows", "Linux", "macOS"]
    alpha = doc["containers"][0]
    assert alpha["group"] == "alpha"
    assert alpha["asset_count"] == 3
    assert alpha["file_size"] == (out / "alpha.bundle").stat().st_size
    assert [e["platform"] for e in alpha["index"]] == ["Windows", "Linux", "macOS"]
    assert alpha["index"][0]["offset"] == 36


def test_identical_inputs_produce_identical_bytes(content_root: Path, tmp_path: Path):
    a, b = tmp_path / "A", tmp_path / "B"
    pack_content(_options(content_root, a), FakeBuild())
    pack_content(_options(content_root, b), FakeBuild())
    for name in ("alpha.bundle", "beta.bundle"):
        assert (a / name).read_bytes() == (b / name).read_bytes()
