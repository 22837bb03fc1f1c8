from __future__ import annotations
"""
Configuration loader for depman.

Environment variables:

- DEPMAN_FLUTTER_BIN=flutter        # tool name or absolute path to the flutter executable
- DEPMAN_EXTRA_PATHS=~/flutter/bin  # extra search-path dirs (os.pathsep separated)
- DEPMAN_PUB_TIMEOUT=600            # seconds; unset/0 means no timeout
- DEPMAN_CHDIR_MODE=0               # 1 = switch the ambient cwd instead of passing cwd to the child
- DEPMAN_LOG_LEVEL=INFO
- DEPMAN_LOG_JSON=0                 # 1 = single-line JSON log records
- DEPMAN_LOG_FILE=                  # optional rotating log file

Precedence: env > project config (.depman/config.json) > defaults.
A local .env is loaded first without clobbering variables already set.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import jsonschema
from dotenv import load_dotenv

log = logging.getLogger(__name__)

CONFIG_DIRNAME = ".depman"
CONFIG_FILENAME = "config.json"

# Where Flutter SDKs usually live when the app is started from Finder with a
# bare launchd PATH.
_DEFAULT_EXTRA_PATHS = [
    "~/flutter/bin",
    "~/development/flutter/bin",
    "~/fvm/default/bin",
    "/opt/homebrew/bin",
    "/usr/local/bin",
]


def load_env_variables() -> None:
    """Load a local .env if present (non-destructive)."""
    load_dotenv(override=False)


DEFAULT_CONFIG: Dict[str, Any] = {
    "flutter": {
        "executable": "flutter",
        "extra_search_paths": list(_DEFAULT_EXTRA_PATHS),
        "pub_timeout_sec": None,
    },
    "runner": {
        "chdir_mode": False,
    },
    "logging": {
        "level": "INFO",
        "structured": False,
        "file": None,
    },
}


CONFIG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "flutter": {
            "type": "object",
            "properties": {
                "executable": {"type": "string", "minLength": 1},
                "extra_search_paths": {"type": "array", "items": {"type": "string"}},
                "pub_timeout_sec": {"type": ["number", "null"], "minimum": 0},
            },
            "required": ["executable"],
        },
        "runner": {
            "type": "object",
            "properties": {"chdir_mode": {"type": "boolean"}},
        },
        "logging": {
            "type": "object",
            "properties": {
                "level": {"type": "string"},
                "structured": {"type": "boolean"},
                "file": {"type": ["string", "null"]},
            },
        },
    },
    "additionalProperties": True,
}


def _env_bool(name: str, default: bool) -> bool:
    """Read an environment variable as a boolean.

    Accepts (case-insensitive): '1','true','yes','on' -> True; '0','false','no','off' -> False.
    Unset or unrecognized values return `default`.
    """
    val = os.getenv(name)
    if val is None:
        return default
    v = str(val).strip().lower()
    if v in ("1", "true", "yes", "on"):
        return True
    if v in ("0", "false", "no", "off"):
        return False
    return default


def _env_float(name: str, default: Optional[float], min_value: Optional[float] = None) -> Optional[float]:
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    try:
        fval = float(val)
    except ValueError:
        log.warning("ignoring non-numeric %s=%r", name, val)
        return default
    if min_value is not None and fval < min_value:
        return default
    return fval


def _deep_merge(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(a)
    for k, v in b.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _validate(cfg: Dict[str, Any]) -> None:
    try:
        jsonschema.validate(cfg, CONFIG_SCHEMA)
    except jsonschema.ValidationError as e:
        log.warning("config schema validation failed: %s", e.message)


def _apply_env_overrides(cfg: Dict[str, Any]) -> None:
    flutter = cfg.setdefault("flutter", {})
    exe = os.getenv("DEPMAN_FLUTTER_BIN")
    if exe and exe.strip():
        flutter["executable"] = exe.strip()

    extra = os.getenv("DEPMAN_EXTRA_PATHS")
    if extra and extra.strip():
        dirs = [d for d in extra.split(os.pathsep) if d.strip()]
        # Explicit env dirs are searched before the built-in guesses.
        flutter["extra_search_paths"] = dirs + [
            d for d in flutter.get("extra_search_paths") or [] if d not in dirs
        ]

    timeout = _env_float("DEPMAN_PUB_TIMEOUT", flutter.get("pub_timeout_sec"), min_value=0)
    # 0 means "no timeout"
    flutter["pub_timeout_sec"] = timeout or None

    runner = cfg.setdefault("runner", {})
    runner["chdir_mode"] = _env_bool("DEPMAN_CHDIR_MODE", bool(runner.get("chdir_mode", False)))

    logging_cfg = cfg.setdefault("logging", {})
    level = os.getenv("DEPMAN_LOG_LEVEL")
    if level and level.strip():
        logging_cfg["level"] = level.strip().upper()
    logging_cfg["structured"] = _env_bool("DEPMAN_LOG_JSON", bool(logging_cfg.get("structured", False)))
    log_file = os.getenv("DEPMAN_LOG_FILE")
    if log_file and log_file.strip():
        logging_cfg["file"] = log_file.strip()


def find_config_file(start: Optional[Path] = None) -> Optional[Path]:
    """Return .depman/config.json under `start` (defaults to CWD) if it exists."""
    root = Path(start) if start is not None else Path.cwd()
    candidate = root / CONFIG_DIRNAME / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Build the effective config: defaults, then the project file (explicit
    `path` or ./.depman/config.json), then environment overrides.

    An unreadable or malformed config file is logged and skipped.
    """
    load_env_variables()
    cfg = json.loads(json.dumps(DEFAULT_CONFIG))

    cfg_path = Path(path) if path else find_config_file()
    if cfg_path is not None:
        try:
            data = json.loads(cfg_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            log.warning("config file not found: %s", cfg_path)
        except (OSError, json.JSONDecodeError) as e:
            log.warning("could not read config %s: %s", cfg_path, e)
        else:
            if isinstance(data, dict):
                cfg = _deep_merge(cfg, data)
            else:
                log.warning("ignoring config %s: top-level value must be an object", cfg_path)

    # Validate what the files produced; env values are typed by the overrides.
    _validate(cfg)
    _apply_env_overrides(cfg)
    return cfg


def write_default_config(root: Optional[Path] = None) -> Path:
    root = Path(root) if root is not None else Path.cwd()
    out = root / CONFIG_DIRNAME / CONFIG_FILENAME
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(DEFAULT_CONFIG, indent=2) + "\n", encoding="utf-8")
    return out


__all__ = [
    "CONFIG_SCHEMA",
    "DEFAULT_CONFIG",
    "find_config_file",
    "load_config",
    "load_env_variables",
    "write_default_config",
]
