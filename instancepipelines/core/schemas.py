"""
Result schemas shared by the engine, the wizard and the client.
"""

from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class Outcome(str, Enum):
    """Outcome of a single step or of a whole run."""
    SUCCEEDED = "succeeded"
    ABORTED = "aborted"
    ERRORED = "errored"


class Instance(BaseModel):
    """Handle to a managed web application: name plus root path."""
    name: str
    root_path: Path
    site_id: Optional[int] = None

    @property
    def web_root(self) -> Path:
        return self.root_path / "Website"


class StepRecord(BaseModel):
    """One entry of a run log, appended by the engine after each step."""
    processor: str
    outcome: Outcome
    message: Optional[str] = None
    elapsed: float = 0.0


class RunResult(BaseModel):
    """Final result of a pipeline run."""
    pipeline: str
    outcome: Outcome
    instance: Optional[Instance] = None
    log: List[StepRecord] = Field(default_factory=list)
    message: Optional[str] = None
    failed_step: Optional[str] = None
    error_type: Optional[str] = None
    parameters: Dict[str, Any] = Field(default_factory=dict)
    elapsed: float = 0.0

    @property
    def success(self) -> bool:
        return self.outcome == Outcome.SUCCEEDED

    @property
    def aborted(self) -> bool:
        return self.outcome == Outcome.ABORTED

    @property
    def errored(self) -> bool:
        return self.outcome == Outcome.ERRORED
