from __future__ import annotations

import json
import logging
import sys

from depman.logging_utils import JsonFormatter, configure_logging


def _record(msg: str, **extra) -> logging.LogRecord:
    rec = logging.LogRecord("procrun.runner", logging.INFO, __file__, 1, msg, (), None)
    rec.__dict__.update(extra)
    return rec


def test_json_formatter_is_single_line() -> None:
    line = JsonFormatter().format(_record("finished flutter", exit_code=3, meta={"op": "pub get"}))

    assert "\n" not in line
    payload = json.loads(line)
    assert payload["level"] == "info"
    assert payload["module"] == "procrun.runner"
    assert payload["msg"] == "finished flutter"
    assert payload["meta"] == {"op": "pub get", "exit_code": 3}
    assert payload["ts"].endswith("Z")


def test_json_formatter_stringifies_unserializable_meta() -> None:
    payload = json.loads(JsonFormatter().format(_record("x", meta={"obj": object()})))

    assert payload["meta"]["obj"].startswith("<object object")


def test_configure_logging_is_idempotent(tmp_path) -> None:
    log_file = tmp_path / "logs" / "depman.log"
    root = logging.getLogger()

    configure_logging("DEBUG", structured=False, log_file=str(log_file))
    count = len(root.handlers)
    configure_logging("INFO", structured=True, log_file=str(log_file))

    assert len(root.handlers) == count
    assert root.level == logging.INFO
    assert log_file.parent.is_dir()
    stderr_handlers = [h for h in root.handlers if getattr(h, "stream", None) is sys.stderr]
    assert stderr_handlers and isinstance(stderr_handlers[0].formatter, JsonFormatter)
