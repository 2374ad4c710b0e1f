import io
import json
import logging

import pytest

from bundlegen.logging import configure_logging, get_logger, section, step
from bundlegen.reporting import (
    JsonLinesReporter,
    PlainReporter,
    make_reporter,
    set_reporter,
    stage,
)


def _events(buf: io.StringIO):
    return [json.loads(line) for line in buf.getvalue().splitlines()]


def test_jsonl_stage_events_and_summary():
    buf = io.StringIO()
    set_reporter(JsonLinesReporter(stream=buf))
    with stage("build.linux", "Build Linux", total=2, platform="Linux") as rep:
        rep.tick("build.linux", "alpha.bundle")
        rep.tick("build.linux", "beta.bundle")
    rep.summary("build", platforms=3, groups=2)
    events = _events(buf)
    assert [e["event"] for e in events] == [
        "stage_begin",
        "stage_tick",
        "stage_tick",
        "stage_end",
        "summary",
    ]
    assert events[3]["outcome"] == "ok"
    assert events[3]["platform"] == "Linux"
    assert events[4] == {"event": "summary", "kind": "build", "platforms": 3, "groups": 2}


def test_failed_stage_is_marked_and_reraised():
    buf = io.StringIO()
    set_reporter(JsonLinesReporter(stream=buf))
    with pytest.raises(RuntimeError):
        with stage("merge", "Merge containers", total=1):
            raise RuntimeError("boom")
    assert _events(buf)[-1]["outcome"] == "failed"


def test_plain_summary_line():
    buf = io.StringIO()
    rep = PlainReporter(stream=buf, color=False)
    rep.summary("cleanup", removed=3, failed=0)
    assert buf.getvalue() == "INFO: Cleanup summary: removed=3 failed=0\n"


def test_logger_routes_into_reporter():
    buf = io.StringIO()
    set_reporter(PlainReporter(stream=buf, color=False))
    configure_logging(0)
    get_logger("discovery").warning("Group '%s' has no assets", "empty")
    get_logger().debug("hidden at default verbosity")
    assert buf.getvalue() == "WARN: Group 'empty' has no assets\n"
    logging.getLogger("bundlegen").handlers.clear()


def test_make_reporter_falls_back_without_terminal():
    assert isinstance(make_reporter("rich", interactive=False), PlainReporter)
    assert isinstance(make_reporter("json"), JsonLinesReporter)


def test_section_brackets_its_body():
    buf = io.StringIO()
    set_reporter(JsonLinesReporter(stream=buf))
    with section("Write containers"):
        pass
    with pytest.raises(OSError):
        with section("Clean staging"):
            raise OSError("busy")
    events = [(e["event"], e.get("title") or e.get("outcome")) for e in _events(buf)]
    assert events == [
        ("stage_begin", "Write containers"),
        ("stage_end", "ok"),
        ("stage_begin", "Clean staging"),
        ("stage_end", "failed"),
    ]


def test_step_goes_through_the_logger():
    buf = io.StringIO()
    set_reporter(PlainReporter(stream=buf, color=False))
    configure_logging(0)
    step("alpha.bundle: 3 assets")
    get_logger().setLevel(logging.WARNING)
    step("suppressed")
    assert buf.getvalue() == "INFO: alpha.bundle: 3 assets\n"
    logging.getLogger("bundlegen").handlers.clear()
