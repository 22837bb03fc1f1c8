# depman/schemas.py
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from procrun.errors import CommandError
from procrun.models import ExecutionResult


class PubGetRequest(BaseModel):
    path: str = Field(..., min_length=1, description="Package directory (absolute or relative to the CWD).")


class PubUpgradeRequest(BaseModel):
    path: str = Field(..., min_length=1, description="Package directory (absolute or relative to the CWD).")
    dependency: Optional[str] = Field(None, description="Upgrade only this dependency.")


class CommandResponse(BaseModel):
    output: str = ""
    exit_code: int
    timed_out: bool = False

    @classmethod
    def from_result(cls, res: ExecutionResult) -> "CommandResponse":
        return cls(output=res.output, exit_code=res.exit_code, timed_out=res.timed_out)


class ErrorResponse(BaseModel):
    code: str
    message: str

    @classmethod
    def from_error(cls, err: CommandError) -> "ErrorResponse":
        return cls(code=err.code, message=err.message)
