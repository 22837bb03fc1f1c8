from __future__ import annotations

import logging
import os
import stat
from pathlib import Path
from typing import Callable, Iterator

import pytest

from procrun.resolver import ExecutableResolver
from procrun.runner import CommandRunner

# Prints its arguments and working directory, exits with $FAKE_EXIT (default 0).
FAKE_FLUTTER = """#!/bin/sh
echo "args: $*"
echo "cwd: $(pwd)"
exit ${FAKE_EXIT:-0}
"""


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.startswith("DEPMAN_") or name == "FAKE_EXIT":
            monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _restore_root_handlers() -> Iterator[None]:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for h in list(root.handlers):
        if h not in handlers:
            root.removeHandler(h)
            h.close()
    root.setLevel(level)


@pytest.fixture()
def bin_dir(tmp_path: Path) -> Path:
    d = tmp_path / "bin"
    d.mkdir()
    return d


@pytest.fixture()
def make_tool(bin_dir: Path) -> Callable[[str, str], Path]:
    def _make(name: str, body: str) -> Path:
        path = bin_dir / name
        path.write_text(body, encoding="utf-8")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return _make


@pytest.fixture()
def resolver(bin_dir: Path) -> ExecutableResolver:
    # Stub dir first, then the real PATH so scripts can still find `sleep` etc.
    return ExecutableResolver(search_path=f"{bin_dir}{os.pathsep}{os.environ.get('PATH', os.defpath)}")


@pytest.fixture()
def runner(resolver: ExecutableResolver) -> CommandRunner:
    return CommandRunner(resolver)


@pytest.fixture()
def fake_flutter(make_tool) -> Path:
    return make_tool("fakeflutter", FAKE_FLUTTER)


@pytest.fixture()
def package_dir(tmp_path: Path) -> Path:
    pkg = tmp_path / "my_app"
    pkg.mkdir()
    (pkg / "pubspec.yaml").write_text("name: my_app\n", encoding="utf-8")
    return pkg
