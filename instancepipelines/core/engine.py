"""
Pipeline execution engine.

Runs the processors of a named pipeline in order against one context and
classifies the run as succeeded, aborted or errored. The engine performs no
rollback: compensating work belongs to explicitly authored processors.
"""

import time
from pathlib import PurePath
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from .args import PipelineArgs
from .errors import MissingParameterError
from .processor import Processor
from .registry import PipelineDefinition, PipelineRegistry
from .schemas import Outcome, RunResult

AfterStep = Callable[[Processor, PipelineArgs], None]


class _StepFailure:
    """An unexpected error raised while running (or reporting) a step."""

    def __init__(self, processor_name: str, error: BaseException):
        self.processor_name = processor_name
        self.error = error

    @property
    def message(self) -> str:
        return f"{self.processor_name}: {self.error}"


def _json_safe(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, PurePath):
        return str(value)
    if isinstance(value, Mapping):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_json_safe(v) for v in value]
    return str(value)


class PipelineEngine:
    """
    Executes resolved processor chains.

    Features:
    - Strictly sequential execution in definition order
    - Abort stops the chain without being treated as a crash
    - Unexpected errors are captured into the result, never re-raised
    - Every step that ran gets exactly one log record
    """

    def __init__(self, registry: PipelineRegistry):
        self.registry = registry

    def prepare(self, pipeline_name: str,
                parameters: Optional[Mapping[str, Any]] = None) -> Tuple[PipelineDefinition, PipelineArgs]:
        """
        Resolve a pipeline, run its pre-flight checks and build a fresh context.

        Raises:
            UnknownPipelineError: If the name has no registered definition
            PreflightError: If a pre-flight check rejects the parameters
        """
        definition = self.registry.get(pipeline_name)
        initial = dict(parameters or {})
        for check in definition.preflight:
            check(initial)
        return definition, PipelineArgs(pipeline_name, initial)

    def execute(self, pipeline_name: str, parameters: Optional[Mapping[str, Any]] = None) -> RunResult:
        """
        Run a pipeline to completion.

        Args:
            pipeline_name: Registered pipeline name
            parameters: Initial parameters for the context

        Returns:
            RunResult describing the outcome

        Raises:
            UnknownPipelineError: Before any processor runs, if the name is unknown
            PreflightError: Before any processor runs, if a pre-flight check fails
        """
        definition, args = self.prepare(pipeline_name, parameters)
        return self.run(definition, args)

    def run(self, definition: PipelineDefinition, args: PipelineArgs,
            after_step: Optional[AfterStep] = None) -> RunResult:
        """
        Run the steps of ``definition`` against ``args``.

        ``after_step`` is called after every step, once its record is in the
        log, including a step that raised. An exception escaping it turns that
        step's record into an errored one; a step that already raised keeps
        its own error.
        """
        start_time = time.time()
        failure: Optional[_StepFailure] = None

        for processor in definition.steps:
            if args.aborted:
                break

            step_start = time.time()
            try:
                missing = [key for key in processor.requires if not args.has_parameter(key)]
                if missing:
                    raise MissingParameterError(missing[0], args.pipeline_name)
                processor.process(args)
            except Exception as e:
                failure = _StepFailure(processor.name, e)
                args._append_log(processor.name, Outcome.ERRORED, failure.message, time.time() - step_start)
            else:
                if args.aborted:
                    args._append_log(processor.name, Outcome.ABORTED, args.abort_message, time.time() - step_start)
                else:
                    args._append_log(processor.name, Outcome.SUCCEEDED, None, time.time() - step_start)

            if after_step is not None:
                try:
                    after_step(processor, args)
                except Exception as e:
                    if failure is not None:
                        raise
                    failure = _StepFailure(processor.name, e)
                    args._replace_last_log(processor.name, Outcome.ERRORED, failure.message,
                                           time.time() - step_start)

            if failure is not None:
                break

        return self._build_result(args, failure, time.time() - start_time)

    def _build_result(self, args: PipelineArgs, failure: Optional[_StepFailure], elapsed: float) -> RunResult:
        result: Dict[str, Any] = {
            "pipeline": args.pipeline_name,
            "instance": args.instance,
            "log": list(args.log),
            "parameters": _json_safe(args.parameters),
            "elapsed": elapsed,
        }
        if failure is not None:
            result.update(
                outcome=Outcome.ERRORED,
                message=failure.message,
                failed_step=failure.processor_name,
                error_type=type(failure.error).__name__,
            )
        elif args.aborted:
            aborting = next((r.processor for r in args.log if r.outcome == Outcome.ABORTED), None)
            result.update(outcome=Outcome.ABORTED, message=args.abort_message, failed_step=aborting)
        else:
            result.update(outcome=Outcome.SUCCEEDED)
        return RunResult(**result)
