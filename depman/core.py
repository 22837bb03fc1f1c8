# depman/core.py
from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional

from procrun.errors import CommandError

from .config import load_config, write_default_config
from .logging_utils import configure_logging
from .schemas import CommandResponse, ErrorResponse
from .service import PubService, ServiceResponse


EXIT_ERROR = 1
EXIT_TIMEOUT = 124


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser("depman", description="Run flutter pub operations on a package directory.")
    p.add_argument("--config", default="", help="Path to .depman/config.json (optional)")
    p.add_argument("--init-config", action="store_true", help="Write default .depman/config.json and exit")
    p.add_argument("--log-level", default=None, help="Logging level (overrides config)")
    p.add_argument("--json", action="store_true", help="Print the structured response as JSON")
    p.add_argument("--timeout", type=float, default=None, help="Kill the tool after this many seconds")
    p.add_argument("--flutter", default=None, help="Flutter executable name or path")

    sub = p.add_subparsers(dest="command")

    g = sub.add_parser("get", help="flutter pub get")
    g.add_argument("path", help="Package directory")

    u = sub.add_parser("upgrade", help="flutter pub upgrade [dependency]")
    u.add_argument("path", help="Package directory")
    u.add_argument("dependency", nargs="?", default=None, help="Only upgrade this dependency")

    r = sub.add_parser("run", help="Pass arguments straight to flutter")
    r.add_argument("--cwd", default=None, help="Directory to run in")
    r.add_argument("args", nargs=argparse.REMAINDER, help="Arguments for flutter")

    sub.add_parser("which", help="Show the resolved flutter executable")
    return p


def _emit(resp: ServiceResponse, as_json: bool) -> int:
    if as_json:
        print(resp.model_dump_json())
    if isinstance(resp, ErrorResponse):
        if not as_json:
            print(f"error: {resp.message}", file=sys.stderr)
        return EXIT_ERROR
    if not as_json:
        sys.stdout.write(resp.output)
        sys.stdout.flush()
    if resp.timed_out:
        return EXIT_TIMEOUT
    return resp.exit_code


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    if args.init_config:
        out = write_default_config()
        print(f"wrote {out}")
        return 0

    cfg = load_config(args.config or None)
    logging_cfg = cfg.get("logging") or {}
    configure_logging(
        level=args.log_level or logging_cfg.get("level"),
        structured=bool(logging_cfg.get("structured")),
        log_file=logging_cfg.get("file"),
    )

    flutter_cfg = cfg.setdefault("flutter", {})
    if args.flutter:
        flutter_cfg["executable"] = args.flutter
    if args.timeout is not None:
        flutter_cfg["pub_timeout_sec"] = args.timeout or None

    service = PubService.from_config(cfg)

    if args.command == "get":
        return _emit(service.pub_get({"path": args.path}), args.json)

    if args.command == "upgrade":
        return _emit(service.pub_upgrade({"path": args.path, "dependency": args.dependency}), args.json)

    if args.command == "run":
        passthrough = list(args.args)
        if passthrough and passthrough[0] == "--":
            passthrough = passthrough[1:]
        try:
            res = service.pub.run(passthrough, cwd=args.cwd)
        except CommandError as e:
            return _emit(service.error_response(e), args.json)
        return _emit(CommandResponse.from_result(res), args.json)

    if args.command == "which":
        info = service.describe()
        if args.json:
            print(json.dumps(info))
        if info["path"] is None:
            if args.json:
                return EXIT_ERROR
            print(f"error: {info['tool']} is not installed or not on the search path", file=sys.stderr)
            return EXIT_ERROR
        if not args.json:
            print(info["path"])
        return 0

    _build_parser().print_help()
    return 2
