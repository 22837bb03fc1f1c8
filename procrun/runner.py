# procrun/runner.py
"""
Canonical subprocess runner.

One implementation used everywhere: resolve a tool once, spawn it with an
argument vector, capture stdout and stderr through a single pipe (so the
combined text keeps emission order as far as the OS pipe preserves it), block
until exit and hand back an ExecutionResult.

Failure contract:
- ExecutableNotFound: no resolved path (propagated from the resolver).
- LaunchFailed: the OS refused to start the child; no result is produced.
- Non-zero exit codes are returned as data, never raised.
- Timeouts kill the child and return a result with timed_out=True.
"""

from __future__ import annotations

import logging
import os
import subprocess
import time
from typing import Dict, Optional, Sequence

from procrun.errors import ExecutableNotFound, LaunchFailed
from procrun.models import ExecutionResult, Invocation
from procrun.resolver import ExecutableResolver
from procrun.workdir import resolve_directory, working_directory

log = logging.getLogger(__name__)

# Grace period for draining the pipe after a timed-out child was killed.
KILL_DRAIN_SEC = 5.0


def decode_output(data: Optional[bytes]) -> str:
    """Decode captured bytes as UTF-8; undecodable output becomes ""."""
    if not data:
        return ""
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        log.warning("discarding %d bytes of non-UTF-8 output: %s", len(data), e)
        return ""


class CommandRunner:
    """
    Runs resolved executables and captures their combined output.

    By default the working-directory override is handed to the spawn call
    (`cwd=`), which leaves the parent's directory alone and is safe from any
    thread. With `chdir_mode=True` the runner instead switches the ambient
    directory around process creation (serialized, always restored).
    """

    def __init__(
        self,
        resolver: Optional[ExecutableResolver] = None,
        *,
        chdir_mode: bool = False,
        kill_drain_sec: float = KILL_DRAIN_SEC,
        subprocess_module=None,
    ):
        self.resolver = resolver or ExecutableResolver()
        self.chdir_mode = bool(chdir_mode)
        self.kill_drain_sec = kill_drain_sec
        # Injectable for tests (defaults to stdlib subprocess).
        self._subprocess = subprocess_module or subprocess

    def _child_env(self, cwd: Optional[str], env: Optional[Dict[str, str]]) -> Dict[str, str]:
        proc_env = os.environ.copy()
        proc_env["PATH"] = self.resolver.search_path
        if env:
            proc_env.update(env)
        if cwd:
            proc_env["PWD"] = cwd
        return proc_env

    def _spawn(self, inv: Invocation, env: Dict[str, str]):
        sp = self._subprocess
        popen_kwargs = {
            "stdout": sp.PIPE,
            "stderr": sp.STDOUT,
            "stdin": sp.DEVNULL,
            "env": env,
        }
        try:
            if inv.working_directory and self.chdir_mode:
                # Only the acquisition of the child happens inside the scope;
                # waiting for it does not hold the directory lock.
                with working_directory(inv.working_directory):
                    return sp.Popen(inv.argv, **popen_kwargs)
            return sp.Popen(inv.argv, cwd=inv.working_directory, **popen_kwargs)
        except OSError as e:
            log.error("launch failed for %s: %s", inv.executable, e)
            raise LaunchFailed(inv.executable, e) from e

    def run(
        self,
        executable: Optional[str],
        arguments: Sequence[str] = (),
        *,
        cwd: Optional[str] = None,
        timeout: Optional[float] = None,
        env: Optional[Dict[str, str]] = None,
    ) -> ExecutionResult:
        """Run an already-resolved executable and wait for it to finish."""
        if executable is None:
            raise ExecutableNotFound("<unresolved>", "no resolved executable path was provided")

        if cwd is not None:
            # Same DirectoryNotFound in both modes, raised before anything is spawned.
            cwd = resolve_directory(cwd)
        inv = Invocation.build(executable, arguments, cwd)
        log.debug("run: %s (cwd=%s, timeout=%s)", " ".join(inv.argv), cwd, timeout)

        t0 = time.time()
        proc = self._spawn(inv, self._child_env(cwd, env))

        timed_out = False
        try:
            out, _ = proc.communicate(timeout=timeout)
        except self._subprocess.TimeoutExpired:
            timed_out = True
            log.warning("%s timed out after %ss; killing", inv.executable, timeout)
            proc.kill()
            try:
                out, _ = proc.communicate(timeout=self.kill_drain_sec)
            except self._subprocess.TimeoutExpired as e:
                # A grandchild still holds the pipe open; keep what was read so far.
                out = e.output or b""
                proc.stdout.close()
                proc.wait()

        result = ExecutionResult(
            output=decode_output(out),
            exit_code=proc.returncode,
            timed_out=timed_out,
            executable=inv.executable,
            arguments=inv.arguments,
            elapsed_sec=round(time.time() - t0, 6),
        )
        log.info(
            "finished %s %s: exit=%s timed_out=%s elapsed=%.3fs",
            os.path.basename(inv.executable),
            " ".join(inv.arguments),
            result.exit_code,
            result.timed_out,
            result.elapsed_sec,
            extra={
                "executable": inv.executable,
                "cwd": inv.working_directory,
                "exit_code": result.exit_code,
                "timed_out": result.timed_out,
                "elapsed": result.elapsed_sec,
            },
        )
        return result

    def run_tool(
        self,
        name: str,
        arguments: Sequence[str] = (),
        *,
        cwd: Optional[str] = None,
        timeout: Optional[float] = None,
        env: Optional[Dict[str, str]] = None,
    ) -> ExecutionResult:
        """Resolve `name` through the resolver, then run it."""
        return self.run(self.resolver.resolve(name), arguments, cwd=cwd, timeout=timeout, env=env)

    def run_in_directory(
        self,
        name: str,
        arguments: Sequence[str],
        directory: str,
        *,
        timeout: Optional[float] = None,
        env: Optional[Dict[str, str]] = None,
    ) -> ExecutionResult:
        """
        Run `name` inside `directory` (relative paths resolve against the
        current working directory). A missing directory fails before any
        process is spawned.
        """
        target = resolve_directory(directory)
        return self.run_tool(name, arguments, cwd=target, timeout=timeout, env=env)


__all__ = ["CommandRunner", "decode_output"]
