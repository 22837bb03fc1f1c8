# depman/service.py
"""
Host-facing dependency operations.

A UI layer (or the CLI in depman.core) calls exactly two operations:

    pub_get({"path": ...})
    pub_upgrade({"path": ..., "dependency": ...})

and gets back either a CommandResponse (output + exit_code) or an
ErrorResponse (code + message). Failures are reported, never retried; a
non-zero exit code is a CommandResponse like any other.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from procrun.errors import CommandError, ExecutableNotFound, InvalidArguments
from procrun.flutter import FlutterPub
from procrun.models import ExecutionResult
from procrun.resolver import ExecutableResolver
from procrun.runner import CommandRunner

from .schemas import CommandResponse, ErrorResponse, PubGetRequest, PubUpgradeRequest

log = logging.getLogger(__name__)

ServiceResponse = Union[CommandResponse, ErrorResponse]
M = TypeVar("M", bound=BaseModel)


def _validation_message(e: ValidationError) -> str:
    parts = []
    for err in e.errors():
        loc = ".".join(str(x) for x in err.get("loc", ())) or "request"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(parts) or "invalid request"


class PubService:
    def __init__(self, pub: FlutterPub):
        self.pub = pub

    @classmethod
    def from_config(cls, cfg: Mapping[str, Any]) -> "PubService":
        """Build one resolver + runner pair from a depman config mapping."""
        flutter_cfg = cfg.get("flutter") or {}
        runner_cfg = cfg.get("runner") or {}
        resolver = ExecutableResolver(extra_dirs=flutter_cfg.get("extra_search_paths") or ())
        runner = CommandRunner(resolver, chdir_mode=bool(runner_cfg.get("chdir_mode", False)))
        return cls(
            FlutterPub(
                runner,
                tool=flutter_cfg.get("executable") or "flutter",
                timeout=flutter_cfg.get("pub_timeout_sec"),
            )
        )

    def error_response(self, err: CommandError) -> ErrorResponse:
        if isinstance(err, ExecutableNotFound):
            log.error("%s", err.message)
            return ErrorResponse(
                code=err.code,
                message=f"{self.pub.tool} is not installed or not on the search path",
            )
        log.error("%s failed: %s", err.code, err.message)
        return ErrorResponse.from_error(err)

    def _call(
        self,
        model: Type[M],
        payload: Union[M, Mapping[str, Any], None],
        op: Callable[[M], ExecutionResult],
    ) -> ServiceResponse:
        try:
            req = payload if isinstance(payload, model) else model.model_validate(payload or {})
        except ValidationError as e:
            return ErrorResponse(code=InvalidArguments.code, message=_validation_message(e))
        try:
            res = op(req)
        except CommandError as e:
            return self.error_response(e)
        return CommandResponse.from_result(res)

    def pub_get(self, payload: Union[PubGetRequest, Mapping[str, Any], None]) -> ServiceResponse:
        return self._call(PubGetRequest, payload, lambda r: self.pub.pub_get(r.path))

    def pub_upgrade(self, payload: Union[PubUpgradeRequest, Mapping[str, Any], None]) -> ServiceResponse:
        return self._call(
            PubUpgradeRequest,
            payload,
            lambda r: self.pub.pub_upgrade(r.path, dependency=r.dependency),
        )

    def describe(self) -> Dict[str, Optional[str]]:
        return {"tool": self.pub.tool, "path": self.pub.runner.resolver.find(self.pub.tool)}


__all__ = ["PubService", "ServiceResponse"]
