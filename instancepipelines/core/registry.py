"""
Named pipeline definitions and the registry that resolves them.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Tuple

from .errors import UnknownPipelineError
from .processor import Processor

PreflightCheck = Callable[[Mapping[str, Any]], None]


@dataclass(frozen=True)
class PipelineDefinition:
    """
    An ordered, immutable chain of processors registered under a name.

    ``arguments`` names the parameters that positional extras map onto when
    the pipeline is started interactively. ``preflight`` checks receive the
    initial parameters and raise to prevent the run from starting.
    """
    name: str
    steps: Tuple[Processor, ...]
    arguments: Tuple[str, ...] = ()
    preflight: Tuple[PreflightCheck, ...] = ()
    description: str = ""

    def __post_init__(self):
        object.__setattr__(self, "steps", tuple(self.steps))
        object.__setattr__(self, "arguments", tuple(self.arguments))
        object.__setattr__(self, "preflight", tuple(self.preflight))
        if not self.name:
            raise ValueError("Pipeline name must not be empty")
        for step in self.steps:
            if not isinstance(step, Processor):
                raise TypeError(f"Pipeline '{self.name}' step {step!r} is not a Processor")

    @property
    def step_names(self) -> List[str]:
        return [step.name for step in self.steps]

    @property
    def checkpoints(self) -> List[str]:
        return [step.name for step in self.steps if step.checkpoint]


class PipelineRegistry:
    """
    Read-only mapping from pipeline name to definition.

    Populated once from a static registration table; resolution is pure and
    always yields the same ordered processors for a given name.
    """

    def __init__(self, definitions: Iterable[PipelineDefinition] = ()):
        self._definitions: Dict[str, PipelineDefinition] = {}
        for definition in definitions:
            if definition.name in self._definitions:
                raise ValueError(f"Pipeline '{definition.name}' is registered twice")
            self._definitions[definition.name] = definition

    @classmethod
    def from_table(cls, table: Mapping[str, Iterable[Processor]]) -> "PipelineRegistry":
        """Build a registry from a plain ``{name: [processors]}`` table."""
        return cls(PipelineDefinition(name=name, steps=tuple(steps)) for name, steps in table.items())

    def get(self, pipeline_name: str) -> PipelineDefinition:
        try:
            return self._definitions[pipeline_name]
        except KeyError:
            raise UnknownPipelineError(pipeline_name) from None

    def resolve(self, pipeline_name: str) -> Tuple[Processor, ...]:
        """
        Return the ordered processors of a pipeline.

        Raises:
            UnknownPipelineError: If the name has no registered definition
        """
        return self.get(pipeline_name).steps

    def names(self) -> List[str]:
        return list(self._definitions)

    def __contains__(self, pipeline_name: object) -> bool:
        return pipeline_name in self._definitions

    def __iter__(self):
        return iter(self._definitions.values())

    def __len__(self) -> int:
        return len(self._definitions)
