"""
Interactive pipeline execution.

The wizard variant runs a pipeline on a worker thread and suspends it after
every processor flagged as a checkpoint. The external driver (typically a UI)
talks to the suspended run through two queues: it receives ``Checkpoint``
messages and answers with "continue" or "cancel". A run whose checkpoint is
never answered stays suspended; there is no timeout.

Checkpoints reach the driver through exactly one channel: the
``on_checkpoint`` callback when one is given, otherwise ``WizardRun.checkpoints``.
"""

import queue
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from .args import ArgsSnapshot, PipelineArgs
from .engine import PipelineEngine
from .processor import Processor
from .registry import PipelineDefinition
from .schemas import Outcome, RunResult

CANCEL_MESSAGE = "user cancelled"

_CONTINUE = "continue"
_CANCEL = "cancel"


@dataclass
class Checkpoint:
    """
    Message posted by a suspended run.

    ``args`` is the live context: the driver may inspect it and change
    parameters while the run is suspended.
    """
    run: "WizardRun"
    processor: str
    owner: Any
    args: PipelineArgs

    def resume(self, **updates: Any) -> None:
        self.run.resume(**updates)

    def cancel(self) -> None:
        self.run.cancel()


class WizardRun:
    """Handle to one interactive pipeline run."""

    def __init__(self, definition: PipelineDefinition, args: PipelineArgs, owner: Any,
                 on_step_completed: Optional[Callable[[ArgsSnapshot], None]] = None,
                 on_finished: Optional[Callable[[RunResult], None]] = None,
                 on_checkpoint: Optional[Callable[[Checkpoint], None]] = None):
        self.definition = definition
        self.args = args
        self.owner = owner
        self.checkpoints: "queue.Queue[Checkpoint]" = queue.Queue()
        self.result: Optional[RunResult] = None
        self._on_step_completed = on_step_completed
        self._on_finished = on_finished
        self._on_checkpoint = on_checkpoint
        self._commands: "queue.Queue[tuple]" = queue.Queue()
        self._done = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def pipeline_name(self) -> str:
        return self.definition.name

    @property
    def finished(self) -> bool:
        return self._done.is_set()

    def resume(self, **updates: Any) -> None:
        """Continue past the current (or next) checkpoint, applying parameter updates first."""
        self._commands.put((_CONTINUE, updates))

    def cancel(self) -> None:
        """End the run at the current (or next) checkpoint with an abort."""
        self._commands.put((_CANCEL, {}))

    def next_checkpoint(self, timeout: Optional[float] = None) -> Optional[Checkpoint]:
        """
        Wait for the run to suspend.

        Returns:
            The checkpoint, or None if the run finished or the timeout expired
        """
        while True:
            try:
                return self.checkpoints.get(timeout=0.05 if timeout is None else timeout)
            except queue.Empty:
                if self.finished and self.checkpoints.empty():
                    return None
                if timeout is not None:
                    return None

    def wait(self, timeout: Optional[float] = None) -> Optional[RunResult]:
        """Block until the run finishes; returns None on timeout."""
        self._done.wait(timeout)
        return self.result

    def _start(self, engine: PipelineEngine) -> None:
        self._thread = threading.Thread(
            target=self._run, args=(engine,), name=f"wizard-{self.pipeline_name}", daemon=True
        )
        self._thread.start()

    def _run(self, engine: PipelineEngine) -> None:
        try:
            result = engine.run(self.definition, self.args, after_step=self._after_step)
        except Exception as e:
            # a callback failing after an already errored step escapes engine.run
            result = RunResult(
                pipeline=self.pipeline_name,
                outcome=Outcome.ERRORED,
                instance=self.args.instance,
                log=list(self.args.log),
                message=str(e),
                error_type=type(e).__name__,
            )
        self.result = result
        try:
            if self._on_finished is not None:
                self._on_finished(result)
        finally:
            self._done.set()

    def _after_step(self, processor: Processor, args: PipelineArgs) -> None:
        if self._on_step_completed is not None:
            self._on_step_completed(args.snapshot())

        if not processor.checkpoint or args.aborted or args.log[-1].outcome == Outcome.ERRORED:
            return

        checkpoint = Checkpoint(run=self, processor=processor.name, owner=self.owner, args=args)
        if self._on_checkpoint is not None:
            self._on_checkpoint(checkpoint)
        else:
            self.checkpoints.put(checkpoint)

        command, updates = self._commands.get()
        if command == _CANCEL:
            args.abort(CANCEL_MESSAGE)
            return
        for key, value in updates.items():
            args.set_parameter(key, value)


class WizardPipelineManager:
    """
    Starts pipelines in interactive, step-confirmed mode.

    Unknown pipelines and failed pre-flight checks raise from ``start``
    synchronously; everything after that is reported through the returned
    ``WizardRun`` and the callbacks.
    """

    def __init__(self, engine: PipelineEngine):
        self.engine = engine

    def start(self, pipeline_name: str, owner: Any, *extra: Any,
              on_step_completed: Optional[Callable[[ArgsSnapshot], None]] = None,
              on_finished: Optional[Callable[[RunResult], None]] = None,
              on_checkpoint: Optional[Callable[[Checkpoint], None]] = None,
              **parameters: Any) -> WizardRun:
        """
        Start a pipeline run on a worker thread.

        Args:
            pipeline_name: Registered pipeline name
            owner: Opaque reference to the driver, passed back in checkpoints
            *extra: Positional parameters, mapped onto the definition's ``arguments``
            on_step_completed: Called with an args snapshot after every step,
                including one that raised
            on_finished: Called exactly once with the final result
            on_checkpoint: Called (on the worker thread) when the run suspends,
                instead of posting to ``WizardRun.checkpoints``
            **parameters: Named initial parameters

        Returns:
            WizardRun handle for the started run
        """
        definition = self.engine.registry.get(pipeline_name)
        initial: Dict[str, Any] = self._map_arguments(definition, extra)
        initial.update(parameters)

        definition, args = self.engine.prepare(pipeline_name, initial)
        run = WizardRun(definition, args, owner,
                        on_step_completed=on_step_completed,
                        on_finished=on_finished,
                        on_checkpoint=on_checkpoint)
        run._start(self.engine)
        return run

    @staticmethod
    def _map_arguments(definition: PipelineDefinition, extra: tuple) -> Dict[str, Any]:
        if len(extra) > len(definition.arguments):
            raise TypeError(
                f"Pipeline '{definition.name}' takes {len(definition.arguments)} positional "
                f"parameters ({', '.join(definition.arguments) or 'none'}) but {len(extra)} were given"
            )
        return dict(zip(definition.arguments, extra))
