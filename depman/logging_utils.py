# depman/logging_utils.py
from __future__ import annotations
import datetime
import json
import logging
import logging.handlers as lh
import os
import sys
from typing import Any, Optional, Union


class JsonFormatter(logging.Formatter):
    """Compact single-line JSON formatter for logs.

    Emits objects with keys: ts (ISO8601 UTC), level, module, msg, meta.
    meta is taken from record.__dict__.get('meta') and enriched with the few
    well-known fields the runner attaches to its "finished" record
    (executable, cwd, exit_code, timed_out, elapsed).
    """

    _META_KEYS = ("executable", "cwd", "exit_code", "timed_out", "elapsed")

    def _safe(self, v: Any) -> Any:
        try:
            json.dumps(v)
            return v
        except (TypeError, ValueError):
            return str(v)

    def format(self, record: logging.LogRecord) -> str:
        meta = {}
        raw_meta = record.__dict__.get("meta")
        if isinstance(raw_meta, dict):
            meta.update({str(k): self._safe(v) for k, v in raw_meta.items()})

        for k in self._META_KEYS:
            if record.__dict__.get(k) is not None:
                meta[k] = self._safe(record.__dict__[k])

        if record.exc_info:
            meta["exc"] = self.formatException(record.exc_info)

        payload = {
            "ts": datetime.datetime.now(datetime.timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname.lower(),
            "module": record.name,
            "msg": record.getMessage(),
            "meta": meta,
        }
        return json.dumps(payload, separators=(",", ":"))


HUMAN_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _level(value: Union[str, int, None]) -> int:
    if isinstance(value, int):
        return value
    name = str(value or "INFO").strip().upper()
    lvl = logging.getLevelName(name)
    return lvl if isinstance(lvl, int) else logging.INFO


def configure_logging(
    level: Union[str, int, None] = "INFO",
    structured: bool = False,
    log_file: Optional[str] = None,
) -> None:
    """Configure global logging for the application.

    Logs go to stderr because stdout carries the wrapped tool's output.
    Optionally also to a rotating file. Safe to call more than once: existing
    handlers are reused and only their formatter is updated.
    """
    lg = logging.getLogger()
    lg.setLevel(_level(level))

    fmt: logging.Formatter = JsonFormatter() if structured else logging.Formatter(HUMAN_FORMAT)

    add_sh = True
    for h in lg.handlers:
        if isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr:
            add_sh = False
            h.setFormatter(fmt)
            break
    if add_sh:
        sh = logging.StreamHandler(sys.stderr)
        sh.setFormatter(fmt)
        lg.addHandler(sh)

    if log_file:
        log_path = os.path.abspath(log_file)
        add_fh = True
        for h in lg.handlers:
            base = getattr(h, "baseFilename", None)
            if base and os.path.abspath(base) == log_path:
                add_fh = False
                h.setFormatter(fmt)
                break
        if add_fh:
            os.makedirs(os.path.dirname(log_path) or ".", exist_ok=True)
            fh = lh.RotatingFileHandler(log_path, maxBytes=2_000_000, backupCount=3, encoding="utf-8")
            fh.setFormatter(fmt)
            lg.addHandler(fh)
