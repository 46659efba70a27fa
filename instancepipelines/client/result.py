"""
Structured command result returned by the invocation surface.
"""

import json
from typing import Any, Optional

from pydantic import BaseModel

from ..core.schemas import Outcome, RunResult


class ErrorInfo(BaseModel):
    type: str
    message: str
    step: Optional[str] = None


class CommandResult(BaseModel):
    """Outcome of one command: success flag, message, payload and error details."""
    success: bool
    message: Optional[str] = None
    data: Optional[Any] = None
    error: Optional[ErrorInfo] = None
    elapsed: float = 0.0

    @classmethod
    def from_run(cls, result: RunResult) -> "CommandResult":
        error = None
        if result.outcome == Outcome.ERRORED:
            error = ErrorInfo(type=result.error_type or "Exception", message=result.message or "",
                              step=result.failed_step)
        return cls(
            success=result.success,
            message=result.message,
            data=result.model_dump(mode="json"),
            error=error,
            elapsed=result.elapsed,
        )

    @classmethod
    def from_exception(cls, error: Exception) -> "CommandResult":
        return cls(success=False, message=str(error),
                   error=ErrorInfo(type=type(error).__name__, message=str(error)))


def to_json(value: Any) -> str:
    """Serialize a result (or any part of it) as indented JSON without null values."""
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json", exclude_none=True)
    return json.dumps(_drop_none(value), indent=2, default=str)


def _drop_none(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _drop_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_drop_none(v) for v in value]
    return value
