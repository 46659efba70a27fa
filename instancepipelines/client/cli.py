"""
Command-line invocation surface.

Commands provide output when work is done, as JSON, without progress
indication (unless run with --interactive).
"""

import logging
from typing import List, Optional, Tuple

import click
import typer

from ..config import get_settings
from ..core.engine import PipelineEngine
from ..core.errors import PreflightError, UnknownPipelineError
from ..core.registry import PipelineDefinition
from ..core.wizard import Checkpoint, WizardPipelineManager
from ..logs import configure_logging, forward_run_log
from ..pipelines.definitions import get_default_registry
from .query import QueryError, query_result
from .result import CommandResult, to_json

logger = logging.getLogger(__name__)

app = typer.Typer(add_completion=False, help="Provision and manage local web-application instances.")


@app.callback()
def main(
    log_dir: Optional[str] = typer.Option(None, "--log-dir", help="Folder for the log files"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to the console"),
) -> None:
    settings = get_settings()
    configure_logging(log_dir or settings.log_dir, "DEBUG" if verbose else settings.log_level)


def parse_parameters(definition: PipelineDefinition, values: List[str]) -> dict:
    """
    Turn ``KEY=VALUE`` items into parameters.

    Items without "=" are positional and map onto the pipeline's arguments.
    """
    parameters = {}
    positional = []
    for item in values:
        key, sep, value = item.partition("=")
        if sep and key:
            parameters[key] = value
        else:
            positional.append(item)

    if len(positional) > len(definition.arguments):
        raise typer.BadParameter(
            f"Pipeline '{definition.name}' takes at most {len(definition.arguments)} positional "
            f"values ({', '.join(definition.arguments) or 'none'})"
        )
    for key, value in zip(definition.arguments, positional):
        parameters.setdefault(key, value)
    return parameters


def _console_driver(checkpoint: Checkpoint) -> None:
    typer.echo(f"Paused after {checkpoint.processor}. Current parameters:", err=True)
    for key, value in checkpoint.args.parameters.items():
        typer.echo(f"  {key} = {value}", err=True)
    if typer.confirm("Continue?", default=True, err=True):
        checkpoint.resume()
    else:
        checkpoint.cancel()


def _emit(result: CommandResult, query: Optional[str]) -> int:
    try:
        narrowed = query_result(result, query)
    except QueryError as e:
        typer.echo(f"{e}: ")
        typer.echo(to_json(result))
        return 1
    typer.echo(to_json(narrowed))
    return 0


@app.command("run")
def run_pipeline(
    pipeline: str = typer.Argument(..., help="Pipeline name (see 'list')"),
    values: Optional[List[str]] = typer.Argument(None, help="Parameters as KEY=VALUE or positional values"),
    query: Optional[str] = typer.Option(None, "--query", "-q", help="Return only part of the output, e.g. data/instance"),
    data: bool = typer.Option(False, "--data", help="Return only the 'data' part of the output"),
    interactive: bool = typer.Option(False, "--interactive", "-i", help="Confirm at each checkpoint"),
    wait: bool = typer.Option(False, "--wait", help="Wait for a key press before terminating"),
) -> None:
    """Run a pipeline and print its result as JSON."""
    if data:
        query = "data"

    registry = get_default_registry()
    code = 0
    try:
        definition = registry.get(pipeline)
        parameters = parse_parameters(definition, values or [])
        engine = PipelineEngine(registry)
        if interactive:
            run = WizardPipelineManager(engine).start(pipeline, "console", **parameters)
            while True:
                checkpoint = run.next_checkpoint()
                if checkpoint is None:
                    break
                _console_driver(checkpoint)
            run_result = run.wait()
        else:
            run_result = engine.execute(pipeline, parameters)
    except (UnknownPipelineError, PreflightError) as e:
        logger.warning(str(e))
        code = _emit(CommandResult.from_exception(e), None) or 1
    else:
        forward_run_log(run_result)
        code = _emit(CommandResult.from_run(run_result), query)

    if wait:
        click.pause()
    if code:
        raise typer.Exit(code=code)


@app.command("list")
def list_pipelines() -> None:
    """List registered pipelines with their steps."""
    registry = get_default_registry()
    for definition in registry:
        arguments: Tuple[str, ...] = definition.arguments
        typer.echo(f"{definition.name} {' '.join(f'<{a}>' for a in arguments)}".rstrip())
        if definition.description:
            typer.echo(f"    {definition.description}")
        for step in definition.steps:
            marker = " (checkpoint)" if step.checkpoint else ""
            typer.echo(f"    - {step.name}{marker}")
