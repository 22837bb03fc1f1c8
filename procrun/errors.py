# procrun/errors.py
"""
Error taxonomy for the command runner.

Every error carries a stable ``code`` (what kind of failure) and a short
human-readable ``message`` so host layers can turn it into a structured
response without inspecting exception types.

A non-zero exit code from the wrapped tool is NOT an error; it is returned
as data on ExecutionResult.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class CommandError(Exception):
    """Base class for all runner failures."""

    code: str = "COMMAND_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message}


class ExecutableNotFound(CommandError, LookupError):
    """The named executable could not be located on the search path."""

    code = "EXECUTABLE_NOT_FOUND"

    def __init__(self, name: str, detail: Optional[str] = None):
        msg = f"executable not found: {name}"
        if detail:
            msg = f"{msg} ({detail})"
        super().__init__(msg)
        self.name = name


class LaunchFailed(CommandError):
    """The OS refused to start the process (permissions, missing file, ...)."""

    code = "LAUNCH_FAILED"

    def __init__(self, executable: str, os_error: OSError):
        detail = os_error.strerror or str(os_error)
        super().__init__(f"failed to launch {executable}: {detail}")
        self.executable = executable
        self.os_error = os_error


class InvalidArguments(CommandError, ValueError):
    """Malformed caller input (empty name, missing path, non-string args)."""

    code = "INVALID_ARGUMENTS"


class DirectoryNotFound(InvalidArguments):
    code = "DIRECTORY_NOT_FOUND"

    def __init__(self, path: str):
        super().__init__(f"directory does not exist: {path}")
        self.path = path


class DirectoryRestoreFailed(CommandError):
    """
    The original working directory could not be restored (or snapshotted).

    Restore failures are logged rather than raised so they never mask the
    primary result or exception of the scoped operation.
    """

    code = "DIRECTORY_RESTORE_FAILED"

    def __init__(self, path: Optional[str], detail: str):
        super().__init__(f"could not restore working directory {path or '<unknown>'}: {detail}")
        self.path = path


__all__ = [
    "CommandError",
    "ExecutableNotFound",
    "LaunchFailed",
    "InvalidArguments",
    "DirectoryNotFound",
    "DirectoryRestoreFailed",
]
