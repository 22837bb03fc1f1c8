# procrun/models.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Tuple

from procrun.errors import InvalidArguments


@dataclass(frozen=True)
class Invocation:
    """
    One command invocation, built right before execution and discarded after.

    `arguments` never includes the executable itself.
    """

    executable: str
    arguments: Tuple[str, ...] = ()
    working_directory: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.executable, str) or not self.executable.strip():
            raise InvalidArguments("executable must be a non-empty string")
        args = tuple(self.arguments)
        bad = [a for a in args if not isinstance(a, str)]
        if bad:
            raise InvalidArguments(f"arguments must be strings, got {bad[0]!r}")
        if "\x00" in self.executable or any("\x00" in a for a in args):
            raise InvalidArguments("executable and arguments must not contain NUL bytes")
        if args and args[0] in (self.executable, os.path.basename(self.executable)):
            raise InvalidArguments("arguments must not repeat the executable name")
        object.__setattr__(self, "arguments", args)

    @classmethod
    def build(
        cls,
        executable: str,
        arguments: Sequence[str] = (),
        working_directory: Optional[str] = None,
    ) -> "Invocation":
        if isinstance(arguments, str):
            raise InvalidArguments("arguments must be a sequence of strings, not a single string")
        return cls(executable, tuple(arguments), working_directory)

    @property
    def argv(self) -> list[str]:
        return [self.executable, *self.arguments]


@dataclass(frozen=True)
class ExecutionResult:
    output: str
    exit_code: int
    timed_out: bool = False
    executable: str = ""
    arguments: Tuple[str, ...] = field(default_factory=tuple)
    elapsed_sec: float = 0.0

    @property
    def ok(self) -> bool:
        return self.exit_code == 0 and not self.timed_out

    def to_dict(self) -> Dict[str, Any]:
        return {
            "output": self.output,
            "exit_code": self.exit_code,
            "timed_out": self.timed_out,
            "executable": self.executable,
            "arguments": list(self.arguments),
            "elapsed_sec": self.elapsed_sec,
            "ok": self.ok,
        }


__all__ = ["Invocation", "ExecutionResult"]
