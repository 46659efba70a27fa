"""
Process-wide logging setup and run-log forwarding.

The pipeline core never writes to the logging system itself. Callers that
want a finished run in their logs pass the result to ``forward_run_log``.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

from .core.schemas import Outcome, RunResult

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
INFO_LOG = "instancepipelines.log"
DEBUG_LOG = "instancepipelines.debug"

logger = logging.getLogger(__name__)


def configure_logging(log_dir: Optional[Union[str, Path]] = None, level: str = "INFO") -> None:
    """
    Install console and file handlers on the root logger.

    Call once at startup. With ``log_dir`` set, INFO and above go to
    ``instancepipelines.log`` and everything goes to ``instancepipelines.debug``.
    """
    handlers = []

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level.upper())
    handlers.append(console)

    if log_dir is not None:
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)

        info = logging.FileHandler(directory / INFO_LOG, encoding="utf-8")
        info.setLevel(logging.INFO)
        handlers.append(info)

        debug = logging.FileHandler(directory / DEBUG_LOG, encoding="utf-8")
        debug.setLevel(logging.DEBUG)
        handlers.append(debug)

    logging.basicConfig(level=logging.DEBUG, format=LOG_FORMAT, handlers=handlers, force=True)


def forward_run_log(result: RunResult, target: Optional[logging.Logger] = None) -> None:
    """Write the step records and outcome of a finished run to a logger."""
    target = target or logger

    for record in result.log:
        if record.outcome == Outcome.ERRORED:
            target.error(f"[{result.pipeline}] {record.processor} failed: {record.message}")
        elif record.outcome == Outcome.ABORTED:
            target.warning(f"[{result.pipeline}] {record.processor} aborted: {record.message}")
        else:
            target.info(f"[{result.pipeline}] {record.processor} completed in {record.elapsed:.2f}s")

    if result.outcome == Outcome.SUCCEEDED:
        target.info(f"Pipeline '{result.pipeline}' completed successfully in {result.elapsed:.2f}s")
    elif result.outcome == Outcome.ABORTED:
        target.info(f"Pipeline '{result.pipeline}' aborted: {result.message}")
    else:
        target.error(f"Pipeline '{result.pipeline}' errored ({result.error_type}): {result.message}")
