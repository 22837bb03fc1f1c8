# procrun/workdir.py
"""procrun.workdir

Helpers for directory-scoped execution.

- resolve_directory(path, base=None) -> str:
  Resolve a (possibly relative) directory against `base` (defaults to the
  current working directory) and require that it exists.

- working_directory(path):
  Context manager that switches the process-wide working directory for the
  duration of the block and restores it on every exit path. The working
  directory is shared by all threads, so entries are serialized by a
  module-level lock. Prefer passing `cwd=` to the spawn call; this is the
  fallback for callers that really need the ambient directory changed.
"""

from __future__ import annotations

import logging
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

from procrun.errors import DirectoryNotFound, DirectoryRestoreFailed, InvalidArguments

log = logging.getLogger(__name__)

_CWD_LOCK = threading.RLock()


def resolve_directory(path: Union[str, Path, None], base: Union[str, Path, None] = None) -> str:
    if path is None or not str(path).strip():
        raise InvalidArguments("a directory path is required")
    p = Path(str(path)).expanduser()
    if not p.is_absolute():
        p = Path(base if base is not None else os.getcwd()) / p
    resolved = os.path.abspath(str(p))
    if not os.path.isdir(resolved):
        raise DirectoryNotFound(resolved)
    return resolved


@contextmanager
def working_directory(path: Union[str, Path]) -> Iterator[str]:
    """Temporarily chdir into `path`, yielding the absolute target directory."""
    target = resolve_directory(path)
    with _CWD_LOCK:
        try:
            original: Optional[str] = os.getcwd()
        except OSError as e:
            # The current directory was removed underneath us; there is
            # nothing safe to come back to.
            raise DirectoryRestoreFailed(None, f"cannot snapshot working directory: {e}") from e

        os.chdir(target)
        try:
            yield target
        finally:
            try:
                os.chdir(original)
            except OSError as e:
                err = DirectoryRestoreFailed(original, str(e))
                err.__cause__ = e
                log.error(err.message, exc_info=err)


__all__ = ["resolve_directory", "working_directory"]
