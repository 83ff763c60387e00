import io
import json
from typing import List, Tuple

import pytest

from dynlog import HandlerKind, InvalidLevelName, Logger, Severity, new


def _json_logger(level: Severity = Severity.INFO) -> Tuple[Logger, io.StringIO]:
    out = io.StringIO()
    return new(out, HandlerKind.JSON, level=level, timestamps=False), out


def _records(out: io.StringIO) -> List[dict]:
    return [json.loads(line) for line in out.getvalue().splitlines()]


@pytest.mark.parametrize("threshold", list(Severity))
@pytest.mark.parametrize("severity", list(Severity))
def test_records_admitted_by_threshold(threshold: Severity, severity: Severity) -> None:
    log, out = _json_logger(threshold)
    log.log(severity, "hello")
    assert bool(out.getvalue()) == (severity <= threshold)


def test_level_change_reaches_every_derived_logger() -> None:
    root, out = _json_logger(Severity.ERROR)
    child_a = root.bind(subsystem="a")
    child_b = root.with_group("b").bind(id=1)

    child_a.set_level(Severity.DEBUG)
    child_b.debug("visible")
    assert _records(out) == [{"b": {"id": 1}, "level": "debug", "msg": "visible"}]

    child_b.set_level(Severity.ERROR)
    child_a.info("hidden")
    root.warning("hidden")
    assert len(_records(out)) == 1
    assert root.level is child_a.level is child_b.level


def test_level_set_by_name_through_child_applies_to_root() -> None:
    root, out = _json_logger(Severity.ERROR)
    root.with_group("worker").set_level_by_name("DEBUG")
    root.debug("tick")
    assert _records(out)[0]["msg"] == "tick"
    assert root.get_level() is Severity.DEBUG


def test_counter_sets_shared_level() -> None:
    root, _ = _json_logger()
    child = root.bind(job="sync")
    child.set_level_by_counter(1)
    assert root.get_level() is Severity.WARN
    assert not root.enabled(Severity.INFO)


def test_invalid_level_name_leaves_level_unchanged() -> None:
    log, _ = _json_logger(Severity.WARN)
    assert log.get_level() is Severity.WARN
    with pytest.raises(InvalidLevelName) as excinfo:
        log.set_level_by_name("verbose")
    assert excinfo.value.name == "verbose"
    assert log.get_level() is Severity.WARN


def test_bound_attributes_and_call_attributes() -> None:
    log, out = _json_logger()
    log.bind(service="api", region="eu").info("started", port=8080)
    assert _records(out) == [
        {"service": "api", "region": "eu", "port": 8080, "level": "info", "msg": "started"}
    ]


def test_groups_nest_bound_and_call_attributes() -> None:
    log, out = _json_logger()
    handle = log.bind(app="svc").with_group("request").bind(id=7).with_group("user")
    handle.info("handled", name="ada")
    record = _records(out)[0]
    assert record["app"] == "svc"
    assert record["request"] == {"id": 7, "user": {"name": "ada"}}
    assert handle.groups == ("request", "user")


def test_group_without_attributes_is_omitted() -> None:
    log, out = _json_logger()
    log.with_group("empty").info("plain")
    assert _records(out) == [{"level": "info", "msg": "plain"}]


def test_empty_group_name_returns_same_logger() -> None:
    log, _ = _json_logger()
    assert log.with_group("") is log


def test_derivation_does_not_touch_parent_context() -> None:
    log, _ = _json_logger()
    grouped = log.with_group("g").bind(a=1)
    grouped.bind(b=2)
    assert grouped.context == {"g": {"a": 1}}
    assert log.context == {}


def test_set_level_twice_matches_single_call() -> None:
    once, out_once = _json_logger(Severity.ERROR)
    twice, out_twice = _json_logger(Severity.ERROR)
    once.set_level(Severity.INFO)
    twice.set_level(Severity.INFO)
    twice.set_level(Severity.INFO)
    for log in (once, twice):
        for severity in Severity:
            log.log(severity, "probe")
    assert out_once.getvalue() == out_twice.getvalue()
    assert twice.get_level() is Severity.INFO


def test_exception_renders_traceback() -> None:
    log, out = _json_logger()
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        log.with_group("job").exception("failed", attempt=2)
    record = _records(out)[0]
    assert record["level"] == "error"
    assert record["job"] == {"attempt": 2}
    assert "RuntimeError: boom" in record["exception"]


def test_default_output_is_stderr(capsys: pytest.CaptureFixture) -> None:
    log = new(handler="json", timestamps=False)
    log.error("to stderr")
    captured = capsys.readouterr()
    assert json.loads(captured.err) == {"level": "error", "msg": "to stderr"}
    assert captured.out == ""


def test_timestamps_are_added_by_default() -> None:
    out = io.StringIO()
    new(out, "json").info("stamped")
    assert "time" in json.loads(out.getvalue())
