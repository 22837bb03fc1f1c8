# procrun/__init__.py
"""
procrun package public surface.

Resolve an external tool on the search path, run it with an argument list
(optionally inside a given directory), and get back its combined output and
exit code. Flutter pub operations are built on top in procrun.flutter.

The canonical runner lives in procrun.runner; do not grow a second copy.
"""

from __future__ import annotations

from .errors import (
    CommandError,
    DirectoryNotFound,
    DirectoryRestoreFailed,
    ExecutableNotFound,
    InvalidArguments,
    LaunchFailed,
)
from .flutter import FlutterPub
from .models import ExecutionResult, Invocation
from .resolver import ExecutableResolver, build_search_path
from .runner import CommandRunner
from .workdir import resolve_directory, working_directory

__all__ = [
    "CommandError",
    "CommandRunner",
    "DirectoryNotFound",
    "DirectoryRestoreFailed",
    "ExecutableNotFound",
    "ExecutableResolver",
    "ExecutionResult",
    "FlutterPub",
    "InvalidArguments",
    "Invocation",
    "LaunchFailed",
    "build_search_path",
    "resolve_directory",
    "working_directory",
]
