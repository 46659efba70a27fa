"""
Base class for pipeline processors.

A processor is a single unit of provisioning logic. It reads and writes the
shared ``PipelineArgs`` and reports its outcome in one of three ways:

- returns normally: the step succeeded
- calls ``args.abort(reason)`` and returns: business failure, the chain stops
  and the run is reported as aborted
- raises: infrastructure failure, the chain stops and the run is reported as
  errored

Processors never call other processors and never see the pipeline they
belong to. Instances are shared between runs, so they keep no per-run state.
"""

from abc import ABC, abstractmethod
from typing import Optional, Tuple

from .args import PipelineArgs


class Processor(ABC):
    """
    Base class for pipeline processors.

    Subclasses declare the parameter keys they read in ``requires`` and the
    keys they write in ``produces``. The engine checks ``requires`` before
    calling ``process``.
    """

    requires: Tuple[str, ...] = ()
    produces: Tuple[str, ...] = ()

    def __init__(self, name: Optional[str] = None, checkpoint: bool = False):
        """
        Initialize a processor.

        Args:
            name: Stable identifier used in definitions and logs (defaults to the class name)
            checkpoint: Pause after this processor when run interactively
        """
        self.name = name or self.__class__.__name__
        self.checkpoint = checkpoint

    @abstractmethod
    def process(self, args: PipelineArgs) -> None:
        """
        Run the unit of work against the shared context.

        All subclasses must implement this method.
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        flag = ", checkpoint=True" if self.checkpoint else ""
        return f"{self.__class__.__name__}(name={self.name!r}{flag})"


class FunctionProcessor(Processor):
    """Adapts a plain callable ``fn(args)`` to the processor interface."""

    def __init__(self, fn, name: Optional[str] = None, checkpoint: bool = False,
                 requires: Tuple[str, ...] = (), produces: Tuple[str, ...] = ()):
        super().__init__(name=name or getattr(fn, "__name__", None), checkpoint=checkpoint)
        self.fn = fn
        self.requires = tuple(requires)
        self.produces = tuple(produces)

    def process(self, args: PipelineArgs) -> None:
        self.fn(args)
