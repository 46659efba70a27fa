"""
Core pipeline engine for provisioning web-application instances.

This package provides the shared run context, the processor base class, the
pipeline registry, the synchronous engine and the interactive wizard variant.
"""

from .args import ArgsSnapshot, PipelineArgs
from .engine import PipelineEngine
from .errors import (
    MissingParameterError,
    PackageValidationError,
    PipelineError,
    PreflightError,
    UnknownPipelineError,
    WebServerError,
)
from .processor import FunctionProcessor, Processor
from .registry import PipelineDefinition, PipelineRegistry
from .schemas import Instance, Outcome, RunResult, StepRecord
from .wizard import CANCEL_MESSAGE, Checkpoint, WizardPipelineManager, WizardRun

__all__ = [
    'ArgsSnapshot',
    'PipelineArgs',
    'PipelineEngine',
    'MissingParameterError',
    'PackageValidationError',
    'PipelineError',
    'PreflightError',
    'UnknownPipelineError',
    'WebServerError',
    'FunctionProcessor',
    'Processor',
    'PipelineDefinition',
    'PipelineRegistry',
    'Instance',
    'Outcome',
    'RunResult',
    'StepRecord',
    'CANCEL_MESSAGE',
    'Checkpoint',
    'WizardPipelineManager',
    'WizardRun',
]
