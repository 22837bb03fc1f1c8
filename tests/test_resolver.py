from __future__ import annotations

import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from procrun.errors import ExecutableNotFound, InvalidArguments
from procrun.resolver import ExecutableResolver, build_search_path


class CountingWhich:
    def __init__(self, result=None, exc=None):
        self.calls = []
        self.result = result
        self.exc = exc

    def __call__(self, name, path=None):
        self.calls.append((name, path))
        if self.exc is not None:
            raise self.exc
        return self.result


def test_resolve_returns_absolute_path(make_tool, bin_dir: Path) -> None:
    tool = make_tool("mytool", "#!/bin/sh\nexit 0\n")
    resolver = ExecutableResolver(search_path=str(bin_dir))

    resolved = resolver.resolve("mytool")

    assert os.path.isabs(resolved)
    assert Path(resolved) == tool


def test_resolve_is_cached_and_stable(make_tool, bin_dir: Path) -> None:
    make_tool("mytool", "#!/bin/sh\nexit 0\n")
    which = CountingWhich(result=str(bin_dir / "mytool"))
    resolver = ExecutableResolver(search_path=str(bin_dir), which=which)

    first = resolver.resolve("mytool")
    second = resolver.resolve("mytool")

    assert first == second
    assert len(which.calls) == 1
    assert resolver.is_cached("mytool")


def test_missing_executable_raises_consistently(bin_dir: Path) -> None:
    which = CountingWhich(result=None)
    resolver = ExecutableResolver(search_path=str(bin_dir), which=which)

    for _ in range(3):
        with pytest.raises(ExecutableNotFound) as exc_info:
            resolver.resolve("no-such-tool-xyz")
        assert exc_info.value.code == "EXECUTABLE_NOT_FOUND"

    # Not-found is cached too: one lookup for three calls.
    assert len(which.calls) == 1
    assert resolver.find("no-such-tool-xyz") is None


def test_lookup_failure_is_reported_as_not_found(bin_dir: Path) -> None:
    which = CountingWhich(exc=PermissionError("denied"))
    resolver = ExecutableResolver(search_path=str(bin_dir), which=which)

    with pytest.raises(ExecutableNotFound):
        resolver.resolve("mytool")
    with pytest.raises(ExecutableNotFound):
        resolver.resolve("mytool")
    assert len(which.calls) == 1


@pytest.mark.parametrize("name", ["", "   "])
def test_empty_name_is_invalid(name: str) -> None:
    with pytest.raises(InvalidArguments):
        ExecutableResolver().resolve(name)


def test_path_like_name_is_used_directly(make_tool, tmp_path: Path) -> None:
    tool = make_tool("direct", "#!/bin/sh\nexit 0\n")
    which = CountingWhich(result=None)
    resolver = ExecutableResolver(search_path=str(tmp_path / "empty"), which=which)

    assert resolver.resolve(str(tool)) == str(tool)
    assert which.calls == []


def test_extra_dirs_are_searched(make_tool, bin_dir: Path, tmp_path: Path) -> None:
    make_tool("extratool", "#!/bin/sh\nexit 0\n")
    resolver = ExecutableResolver(search_path=str(tmp_path / "empty"), extra_dirs=[str(bin_dir)])

    assert resolver.resolve("extratool") == str(bin_dir / "extratool")


def test_build_search_path_appends_and_dedups() -> None:
    sep = os.pathsep
    out = build_search_path(["/opt/b", "/usr/bin", "  "], base=f"/usr/bin{sep}/bin")

    assert out.split(sep) == ["/usr/bin", "/bin", "/opt/b"]


def test_build_search_path_expands_home(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))

    out = build_search_path(["~/flutter/bin"], base="")

    assert out == str(tmp_path / "flutter" / "bin")


def test_nul_in_name_is_invalid() -> None:
    with pytest.raises(InvalidArguments):
        ExecutableResolver().resolve("flut\x00ter")


def test_concurrent_resolve_looks_up_once(bin_dir: Path) -> None:
    class SlowWhich(CountingWhich):
        def __call__(self, name, path=None):
            time.sleep(0.05)
            return super().__call__(name, path=path)

    which = SlowWhich(result=str(bin_dir / "mytool"))
    resolver = ExecutableResolver(search_path=str(bin_dir), which=which)
    barrier = threading.Barrier(8)

    def resolve(_):
        barrier.wait()
        return resolver.resolve("mytool")

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(resolve, range(8)))

    assert set(results) == {str(bin_dir / "mytool")}
    assert len(which.calls) == 1
