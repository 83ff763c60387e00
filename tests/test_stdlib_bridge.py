import io
import json
import logging

from dynlog import HandlerKind, Severity, install_stdlib_bridge, new, remove_stdlib_bridge


def test_stdlib_records_follow_shared_level() -> None:
    out = io.StringIO()
    log = new(out, HandlerKind.JSON, level=Severity.WARN, timestamps=False)
    target = logging.getLogger("tests.bridge")
    target.propagate = False
    handler = install_stdlib_bridge(log, target)
    try:
        target.info("quiet")
        target.warning("loud %s", "arg")
        log.bind(component="x").set_level(Severity.DEBUG)
        target.debug("now visible")
    finally:
        remove_stdlib_bridge(handler)

    records = [json.loads(line) for line in out.getvalue().splitlines()]
    assert [record["msg"] for record in records] == ["loud arg", "now visible"]
    assert records[0]["logger"] == "tests.bridge"
    assert records[0]["level"] == "warning"
    assert records[1]["level"] == "debug"


def test_bridge_opens_target_level() -> None:
    out = io.StringIO()
    log = new(out, HandlerKind.TEXT, timestamps=False)
    target = logging.getLogger("tests.bridge.text")
    target.propagate = False
    target.setLevel(logging.ERROR)
    handler = install_stdlib_bridge(log, target)
    try:
        assert target.level == logging.DEBUG
        target.info("through text")
    finally:
        remove_stdlib_bridge(handler)
    assert 'msg="through text"' in out.getvalue()
    assert "logger=tests.bridge.text" in out.getvalue()


def test_removing_bridge_restores_previous_level() -> None:
    log = new(io.StringIO(), HandlerKind.JSON, timestamps=False)
    target = logging.getLogger("tests.bridge.restore")
    target.setLevel(logging.WARNING)
    handler = install_stdlib_bridge(log, target)
    assert handler.previous_level == logging.WARNING
    assert target.level == logging.DEBUG
    remove_stdlib_bridge(handler)
    assert target.level == logging.WARNING
    assert handler not in target.handlers
