# procrun/flutter.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from procrun.errors import InvalidArguments
from procrun.models import ExecutionResult
from procrun.runner import CommandRunner
from procrun.workdir import resolve_directory

log = logging.getLogger(__name__)


class FlutterPub:
    """
    Dependency operations forwarded to the flutter tool:
      - pub_get:     flutter pub get              (in the package directory)
      - pub_upgrade: flutter pub upgrade [dep]    (in the package directory)
      - run:         flutter <args...>            (plain passthrough)

    Output is relayed verbatim; nothing here parses what flutter prints.
    """

    name = "flutter"

    def __init__(self, runner: CommandRunner, tool: str = "flutter", timeout: Optional[float] = None):
        self.runner = runner
        self.tool = tool
        self.timeout = timeout

    @staticmethod
    def detect(package_path: str) -> bool:
        return (Path(package_path) / "pubspec.yaml").exists()

    def available(self) -> bool:
        return self.runner.resolver.find(self.tool) is not None

    def executable_path(self) -> str:
        return self.runner.resolver.resolve(self.tool)

    def _in_package(self, package_path: str, args: Sequence[str]) -> ExecutionResult:
        target = resolve_directory(package_path)
        if not self.detect(target):
            log.warning("no pubspec.yaml in %s; running %s anyway", target, " ".join(args))
        return self.runner.run_tool(self.tool, args, cwd=target, timeout=self.timeout)

    def pub_get(self, package_path: str) -> ExecutionResult:
        return self._in_package(package_path, ["pub", "get"])

    def pub_upgrade(self, package_path: str, dependency: Optional[str] = None) -> ExecutionResult:
        args = ["pub", "upgrade"]
        if dependency is not None:
            dependency = dependency.strip()
            if not dependency:
                raise InvalidArguments("dependency name must not be blank")
            args.append(dependency)
        return self._in_package(package_path, args)

    def run(self, arguments: Sequence[str], cwd: Optional[str] = None) -> ExecutionResult:
        target = resolve_directory(cwd) if cwd is not None else None
        return self.runner.run_tool(self.tool, arguments, cwd=target, timeout=self.timeout)


__all__ = ["FlutterPub"]
