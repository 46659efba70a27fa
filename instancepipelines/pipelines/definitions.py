"""
Registration table of the provisioning pipelines.

Pipelines are declared statically here and built once per process.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional, Union

from ..config import Settings, get_settings
from ..core.registry import PipelineDefinition, PipelineRegistry
from ..files.agent import AgentFiles
from ..files.archive import IMPORT_MANIFEST, validate_package
from ..webserver.base import WebServerGateway
from ..webserver.http import HttpWebServerGateway
from ..webserver.memory import InMemoryWebServer
from .processors import (
    BindHost,
    CheckSiteAvailable,
    CreateSite,
    DeleteAgentFiles,
    DeleteInstanceFiles,
    ExtractPackage,
    ReadImportSettings,
    RemoveSite,
    ResolveInstance,
    StopSite,
    ValidatePackage,
)

INSTALL_MANIFEST = ("Web.config",)


def _import_preflight(parameters) -> None:
    if "package_path" in parameters:
        validate_package(parameters["package_path"], IMPORT_MANIFEST)


def build_registry(gateway: WebServerGateway,
                   agent_files: Optional[AgentFiles] = None,
                   instances_root: Union[str, Path] = "instances") -> PipelineRegistry:
    """
    Build the registry of provisioning pipelines.

    Args:
        gateway: Web-server management gateway used by the processors
        agent_files: Agent file manager (defaults to the standard agent folder)
        instances_root: Folder new instances are created in

    Returns:
        Registry holding install, import, uninstall, delete and reconfigure
    """
    agent_files = agent_files or AgentFiles()
    uninstall_steps = (
        ResolveInstance(gateway),
        StopSite(gateway),
        DeleteAgentFiles(agent_files),
        RemoveSite(gateway),
    )

    return PipelineRegistry([
        PipelineDefinition(
            name="install",
            steps=(
                ValidatePackage(INSTALL_MANIFEST),
                CheckSiteAvailable(gateway),
                ExtractPackage(instances_root),
                CreateSite(gateway),
                BindHost(gateway),
            ),
            arguments=("package_path", "instance_name"),
            description="Install a new instance from a package",
        ),
        PipelineDefinition(
            name="import",
            steps=(
                ValidatePackage(IMPORT_MANIFEST),
                ReadImportSettings(checkpoint=True),
                CheckSiteAvailable(gateway),
                ExtractPackage(instances_root, prefix="Website"),
                CreateSite(gateway),
                BindHost(gateway),
            ),
            arguments=("package_path",),
            preflight=(_import_preflight,),
            description="Import an exported instance",
        ),
        PipelineDefinition(
            name="uninstall",
            steps=uninstall_steps,
            arguments=("instance_name",),
            description="Remove an instance from the web server, keeping its files",
        ),
        PipelineDefinition(
            name="delete",
            steps=uninstall_steps + (DeleteInstanceFiles(),),
            arguments=("instance_name",),
            description="Remove an instance and delete its files",
        ),
        PipelineDefinition(
            name="reconfigure",
            steps=(ResolveInstance(gateway), BindHost(gateway)),
            arguments=("instance_name", "host_name"),
            description="Add a host binding to an existing instance",
        ),
    ])


def build_gateway(settings: Settings) -> WebServerGateway:
    if settings.webserver_backend == "http":
        return HttpWebServerGateway(
            settings.webserver_url,
            api_key=settings.webserver_api_key,
            timeout=settings.request_timeout,
            max_retries=settings.max_retries,
            retry_delay=settings.retry_delay,
        )
    return InMemoryWebServer()


@lru_cache
def get_default_registry() -> PipelineRegistry:
    """Return the process-wide registry, built from settings on first use."""
    settings = get_settings()
    return build_registry(
        build_gateway(settings),
        AgentFiles(settings.agent_folder),
        settings.instances_root,
    )
