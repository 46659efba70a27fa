"""
Instance Pipelines

Provisions and manages local web-application instances (install, import,
uninstall, delete, reconfigure) by running named chains of processors against
a web-server management surface and the instance files on disk.

Features:
- Three-way run outcome: succeeded, aborted (business rule), errored (infrastructure)
- Static registration table of pipelines
- Interactive runs that suspend at checkpoints for an external driver
"""

__version__ = "0.1.0"

from .core import (
    Instance,
    Outcome,
    PipelineArgs,
    PipelineDefinition,
    PipelineEngine,
    PipelineRegistry,
    Processor,
    RunResult,
    WizardPipelineManager,
)

__all__ = [
    'Instance',
    'Outcome',
    'PipelineArgs',
    'PipelineDefinition',
    'PipelineEngine',
    'PipelineRegistry',
    'Processor',
    'RunResult',
    'WizardPipelineManager',
]
