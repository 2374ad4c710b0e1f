import sys
from pathlib import Path

import pytest

from bundlegen.collaborators import GROUPS_MANIFEST_NAME, CommandBuildCollaborator
from bundlegen.errors import BuildError
from bundlegen.platforms import Platform, resolve_settings

# Reads groups.json and writes "<group>@<platform>" into each bundle.
SCRIPT = """
import json, sys
from pathlib import Path
manifest, out, apis = sys.argv[1], Path(sys.argv[2]), sys.argv[3]
doc = json.loads(Path(manifest).read_text())
for g in doc["groups"]:
    (out / g["bundle"]).write_text(g["name"] + "@" + doc["platform"] + "|" + apis)
"""

GROUPS = [{"name": "alpha", "bundle": "alpha.bundle", "source_dir": "x", "assets": []}]


def test_command_receives_manifest_and_placeholders(tmp_path: Path):
    script = tmp_path / "fake_engine.py"
    script.write_text(SCRIPT, encoding="utf-8")
    out = tmp_path / "Linux"
    out.mkdir()
    collab = CommandBuildCollaborator(
        [sys.executable, str(script), "{manifest}", "{output_dir}", "{graphics_apis}"]
    )
    collab.build(GROUPS, Platform.LINUX, out, resolve_settings(Platform.LINUX))
    assert (out / "alpha.bundle").read_text() == "alpha@Linux|Vulkan"
    assert not (out / GROUPS_MANIFEST_NAME).exists()


def test_non_zero_exit_raises_build_error(tmp_path: Path):
    collab = CommandBuildCollaborator(
        [sys.executable, "-c", "import sys; sys.stderr.write('no license'); sys.exit(3)"]
    )
    with pytest.raises(BuildError) as ei:
        collab.build(GROUPS, Platform.MACOS, tmp_path, resolve_settings(Platform.MACOS))
    assert ei.value.context["platform"] == "macOS"
    assert "no license" in ei.value.context["stderr"]
    assert "code 3" in ei.value.message


def test_missing_executable_raises_build_error(tmp_path: Path):
    collab = CommandBuildCollaborator([str(tmp_path / "no-such-engine")])
    with pytest.raises(BuildError):
        collab.build(GROUPS, Platform.WINDOWS, tmp_path, resolve_settings(Platform.WINDOWS))


def test_unknown_placeholder(tmp_path: Path):
    collab = CommandBuildCollaborator(["engine", "{target}"])
    with pytest.raises(BuildError):
        collab.build(GROUPS, Platform.WINDOWS, tmp_path, resolve_settings(Platform.WINDOWS))


def test_empty_command_rejected():
    with pytest.raises(ValueError):
        CommandBuildCollaborator([])


# Writes the bundles, then logs bytes that are not valid UTF-8.
NOISY_SCRIPT = SCRIPT + """
sys.stdout.buffer.write(b"Compiling shader \\xff\\xfe variants\\n")
sys.stderr.buffer.write(b"warning \\x81\\n")
"""


def test_undecodable_engine_output_does_not_fail_build(tmp_path: Path):
    script = tmp_path / "noisy_engine.py"
    script.write_text(NOISY_SCRIPT, encoding="utf-8")
    out = tmp_path / "Windows"
    out.mkdir()
    collab = CommandBuildCollaborator(
        [sys.executable, str(script), "{manifest}", "{output_dir}", "{graphics_apis}"]
    )
    collab.build(GROUPS, Platform.WINDOWS, out, resolve_settings(Platform.WINDOWS))
    assert (out / "alpha.bundle").read_text().startswith("alpha@Windows|")


def test_undecodable_stderr_kept_in_failure_context(tmp_path: Path):
    collab = CommandBuildCollaborator(
        [
            sys.executable,
            "-c",
            "import sys; sys.stderr.buffer.write(b'bad \\xff license'); sys.exit(1)",
        ]
    )
    with pytest.raises(BuildError) as ei:
        collab.build(GROUPS, Platform.LINUX, tmp_path, resolve_settings(Platform.LINUX))
    assert ei.value.context["stderr"] == "bad \ufffd license"
