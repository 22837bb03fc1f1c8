# procrun/resolver.py
"""
Executable resolution against the process search path.

An ExecutableResolver is meant to be constructed once at process start and
handed to whoever needs it. Each logical name is looked up at most once per
resolver; "not found" is cached as well, so a missing tool does not trigger
a fresh PATH scan on every call.
"""

from __future__ import annotations

import logging
import os
import shutil
import sys
import threading
from typing import Callable, Dict, Iterable, List, Optional

from procrun.errors import ExecutableNotFound, InvalidArguments

log = logging.getLogger(__name__)

WhichFn = Callable[..., Optional[str]]


def _is_windows() -> bool:
    return sys.platform.startswith("win")


def _looks_like_path(name: str) -> bool:
    if os.path.sep in name or (os.path.altsep and os.path.altsep in name):
        return True
    return _is_windows() and ":" in name


def build_search_path(extra_dirs: Iterable[str] = (), base: Optional[str] = None) -> str:
    """
    Return `base` (defaults to $PATH) with `extra_dirs` appended.

    Entries are expanded (~, $VARS) and de-duplicated while keeping order.
    """
    if base is None:
        base = os.environ.get("PATH", os.defpath)
    parts: List[str] = [p for p in base.split(os.pathsep) if p]
    for d in extra_dirs:
        d = os.path.expandvars(os.path.expanduser(str(d).strip()))
        if d:
            parts.append(d)
    seen = set()
    ordered = []
    for p in parts:
        if p in seen:
            continue
        seen.add(p)
        ordered.append(p)
    return os.pathsep.join(ordered)


class ExecutableResolver:
    """Memoizing name -> absolute path lookup."""

    def __init__(
        self,
        search_path: Optional[str] = None,
        *,
        extra_dirs: Iterable[str] = (),
        which: WhichFn = shutil.which,
    ):
        self.search_path = build_search_path(extra_dirs, base=search_path)
        self._which = which
        self._cache: Dict[str, Optional[str]] = {}
        self._lock = threading.Lock()

    def _lookup(self, name: str) -> Optional[str]:
        if _looks_like_path(name):
            candidate = os.path.abspath(os.path.expanduser(name))
            if os.path.isfile(candidate) and os.access(candidate, os.X_OK):
                return candidate
            # "bin/flutter" style names may still resolve via PATH
        found = self._which(name, path=self.search_path)
        return os.path.abspath(found) if found else None

    def find(self, name: str) -> Optional[str]:
        """Return the resolved absolute path for `name`, or None when missing."""
        if not isinstance(name, str) or not name.strip():
            raise InvalidArguments("executable name must be a non-empty string")
        if "\x00" in name:
            raise InvalidArguments("executable name must not contain NUL bytes")

        with self._lock:
            if name in self._cache:
                return self._cache[name]
            try:
                resolved = self._lookup(name)
            except OSError as e:
                log.warning("executable lookup failed for %s: %s", name, e)
                resolved = None
            self._cache[name] = resolved

        if resolved:
            log.debug("resolved %s -> %s", name, resolved)
        else:
            log.info("executable %s not found on search path", name)
        return resolved

    def resolve(self, name: str) -> str:
        resolved = self.find(name)
        if resolved is None:
            raise ExecutableNotFound(name)
        return resolved

    def is_cached(self, name: str) -> bool:
        with self._lock:
            return name in self._cache


__all__ = ["ExecutableResolver", "build_search_path"]
