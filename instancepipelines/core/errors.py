"""
Error taxonomy for pipeline execution.

Business-rule stoppage is not an exception: processors call
``PipelineArgs.abort`` for that. The exceptions here cover programming and
configuration defects, pre-flight rejection and infrastructure failures.
"""

from typing import Optional


class PipelineError(Exception):
    """Base class for all errors raised by the pipeline framework."""


class UnknownPipelineError(PipelineError, KeyError):
    """Raised when a pipeline name has no registered definition."""

    def __init__(self, pipeline_name: str):
        super().__init__(pipeline_name)
        self.pipeline_name = pipeline_name

    def __str__(self) -> str:
        return f"Unknown pipeline: '{self.pipeline_name}'"


class MissingParameterError(PipelineError, KeyError):
    """Raised when a required parameter is absent from the pipeline context."""

    def __init__(self, key: str, pipeline_name: Optional[str] = None):
        super().__init__(key)
        self.key = key
        self.pipeline_name = pipeline_name

    def __str__(self) -> str:
        if self.pipeline_name:
            return f"Missing required parameter '{self.key}' in pipeline '{self.pipeline_name}'"
        return f"Missing required parameter '{self.key}'"


class PreflightError(PipelineError):
    """Raised by pre-flight checks; the pipeline is never started."""


class PackageValidationError(PreflightError):
    """Raised when a package archive is unreadable or lacks required files."""

    def __init__(self, message: str, path: Optional[str] = None, missing: Optional[str] = None):
        super().__init__(message)
        self.path = path
        self.missing = missing


class WebServerError(PipelineError):
    """Raised when the web-server management surface fails."""
