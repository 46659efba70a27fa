"""
Mutable context shared by the processors of a single pipeline run.
"""

import copy
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from .errors import MissingParameterError
from .schemas import Instance, Outcome, StepRecord

DEFAULT_ABORT_MESSAGE = "Pipeline aborted"

_REQUIRED = object()


@dataclass(frozen=True)
class ArgsSnapshot:
    """Point-in-time copy of a context, handed to progress callbacks."""
    pipeline_name: str
    parameters: Dict[str, Any]
    instance: Optional[Instance]
    aborted: bool
    abort_message: Optional[str]
    log: Tuple[StepRecord, ...]

    @property
    def last_step(self) -> Optional[StepRecord]:
        return self.log[-1] if self.log else None


class PipelineArgs:
    """
    Context owned by one in-flight pipeline run.

    Stores:
    - Parameters supplied at invocation and produced by processors
    - The target instance, once a processor has resolved or created it
    - The abort flag and its reason (set together, never cleared)
    - The step log, appended by the engine only
    """

    def __init__(self, pipeline_name: str, parameters: Optional[Mapping[str, Any]] = None):
        """
        Initialize a new pipeline context.

        Args:
            pipeline_name: Name of the pipeline being run (for diagnostics)
            parameters: Initial parameter mapping, may be empty
        """
        self.pipeline_name = pipeline_name
        self.parameters: Dict[str, Any] = dict(parameters or {})
        self.instance: Optional[Instance] = None
        self._aborted = False
        self._abort_message: Optional[str] = None
        self._log = []

    @property
    def aborted(self) -> bool:
        return self._aborted

    @property
    def abort_message(self) -> Optional[str]:
        return self._abort_message

    @property
    def log(self) -> Tuple[StepRecord, ...]:
        return tuple(self._log)

    def get_parameter(self, key: str, default: Any = _REQUIRED) -> Any:
        """
        Return a parameter value.

        Raises:
            MissingParameterError: If the key is absent and no default is given
        """
        if key in self.parameters:
            return self.parameters[key]
        if default is _REQUIRED:
            raise MissingParameterError(key, self.pipeline_name)
        return default

    def set_parameter(self, key: str, value: Any) -> None:
        self.parameters[key] = value

    def has_parameter(self, key: str) -> bool:
        return key in self.parameters

    def require(self, *keys: str) -> None:
        """Fail on the first of ``keys`` missing from the parameters."""
        for key in keys:
            if key not in self.parameters:
                raise MissingParameterError(key, self.pipeline_name)

    def abort(self, message: str) -> None:
        """
        Stop the pipeline after the current processor.

        The first call wins so the most specific reason is kept; later calls
        are no-ops.
        """
        if self._aborted:
            return
        self._aborted = True
        self._abort_message = message if message and message.strip() else DEFAULT_ABORT_MESSAGE

    def snapshot(self) -> ArgsSnapshot:
        return ArgsSnapshot(
            pipeline_name=self.pipeline_name,
            parameters=copy.copy(self.parameters),
            instance=self.instance,
            aborted=self._aborted,
            abort_message=self._abort_message,
            log=tuple(self._log),
        )

    def _append_log(self, processor_name: str, outcome: Outcome,
                    message: Optional[str] = None, elapsed: float = 0.0) -> StepRecord:
        # Engine-only; processors report through abort() or by raising.
        record = StepRecord(processor=processor_name, outcome=outcome, message=message, elapsed=elapsed)
        self._log.append(record)
        return record

    def _replace_last_log(self, processor_name: str, outcome: Outcome,
                          message: Optional[str] = None, elapsed: float = 0.0) -> StepRecord:
        # Engine-only; rewrites the record of a step whose after-step hook failed.
        record = StepRecord(processor=processor_name, outcome=outcome, message=message, elapsed=elapsed)
        if self._log and self._log[-1].processor == processor_name:
            self._log[-1] = record
        else:
            self._log.append(record)
        return record

    def __repr__(self) -> str:
        return (f"PipelineArgs(pipeline={self.pipeline_name!r}, parameters={list(self.parameters)}, "
                f"aborted={self._aborted})")
