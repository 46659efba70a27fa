"""
Provisioning processors.

Each processor is one step of an install, import, uninstall, delete or
reconfigure pipeline. Business-rule failures (a package lacking a file, a
name or host already taken, an instance that does not exist) abort the run;
failures of the web server or the filesystem are raised and end the run as
errored.

Parameter keys:
- ``package_path``: zip package to install or import
- ``instance_name``: site name of the instance
- ``host_name``: host to bind (defaults to the instance name)
- ``app_pool``: application pool name (defaults to the instance name)
- ``root_path``: instance root folder; the web root is ``root_path/Website``
"""

import logging
import shutil
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Iterable, Optional, Union

from ..core.args import PipelineArgs
from ..core.errors import MissingParameterError, PackageValidationError
from ..core.processor import Processor
from ..core.schemas import Instance
from ..files.agent import AgentFiles
from ..files.archive import APP_POOL_SETTINGS, WEBSITE_SETTINGS, PackageArchive
from ..webserver.base import Binding, WebServerGateway

logger = logging.getLogger(__name__)


def _require_instance(args: PipelineArgs) -> Instance:
    if args.instance is None:
        raise MissingParameterError("instance", args.pipeline_name)
    return args.instance


class ValidatePackage(Processor):
    """Aborts when the package lacks any of the required files."""

    requires = ("package_path",)

    def __init__(self, required: Iterable[str], name: Optional[str] = None, checkpoint: bool = False):
        super().__init__(name=name, checkpoint=checkpoint)
        self.required = tuple(required)

    def process(self, args: PipelineArgs) -> None:
        path = Path(args.get_parameter("package_path"))
        if not path.is_file():
            args.abort(f"Package '{path}' does not exist")
            return
        try:
            archive = PackageArchive(path)
        except PackageValidationError as e:
            args.abort(str(e))
            return
        with archive:
            for entry in self.required:
                if not archive.contains(entry):
                    args.abort(f"Wrong package. The package does not contain the {entry} file.")
                    return
        logger.info(f"Package {path.name} contains all {len(self.required)} required files")


class ReadImportSettings(Processor):
    """
    Reads site and application pool settings exported with a package.

    Values already present in the parameters win over the exported ones, so
    a driver can override them at this step's checkpoint too.
    """

    requires = ("package_path",)
    produces = ("instance_name", "host_name", "app_pool")

    def process(self, args: PipelineArgs) -> None:
        with PackageArchive(args.get_parameter("package_path")) as archive:
            try:
                website = ET.fromstring(archive.read_text(WEBSITE_SETTINGS))
                app_pool = ET.fromstring(archive.read_text(APP_POOL_SETTINGS))
            except (KeyError, ET.ParseError) as e:
                args.abort(f"Cannot read import settings: {e}")
                return

        site = next((el for el in website.iter() if el.tag.lower() == "site" and el.get("name")), None)
        if site is None:
            args.abort(f"{WEBSITE_SETTINGS} does not describe a website")
            return

        hosts = []
        for binding in site.iter("binding"):
            information = binding.get("bindingInformation", "")
            host = information.split(":", 2)[-1] if information.count(":") >= 2 else ""
            if host:
                hosts.append(host)

        pool = next((el.get("name") for el in app_pool.iter() if el.tag.lower() == "add" and el.get("name")), None)
        if pool is None:
            pool = next((el.get("APPPOOL.NAME") for el in app_pool.iter() if el.get("APPPOOL.NAME")), None)

        if not args.has_parameter("instance_name"):
            args.set_parameter("instance_name", site.get("name"))
        if not args.has_parameter("host_name") and hosts:
            args.set_parameter("host_name", hosts[0])
        if not args.has_parameter("app_pool") and pool:
            args.set_parameter("app_pool", pool)

        logger.info(f"Import settings: site '{site.get('name')}', hosts {hosts}, pool '{pool}'")


class CheckSiteAvailable(Processor):
    """Aborts when the site name or the host is already taken."""

    requires = ("instance_name",)

    def __init__(self, gateway: WebServerGateway, name: Optional[str] = None, checkpoint: bool = False):
        super().__init__(name=name, checkpoint=checkpoint)
        self.gateway = gateway

    def process(self, args: PipelineArgs) -> None:
        instance_name = args.get_parameter("instance_name")
        if self.gateway.website_exists(instance_name):
            args.abort(f"Website '{instance_name}' already exists")
            return
        host = args.get_parameter("host_name", instance_name)
        if self.gateway.binding_exists(host):
            args.abort(f"Host '{host}' is already bound to another website")


class ExtractPackage(Processor):
    """Extracts the package into the instance web root."""

    requires = ("package_path", "instance_name")
    produces = ("root_path",)

    def __init__(self, instances_root: Union[str, Path], prefix: str = "",
                 name: Optional[str] = None, checkpoint: bool = False):
        super().__init__(name=name, checkpoint=checkpoint)
        self.instances_root = Path(instances_root)
        self.prefix = prefix

    def process(self, args: PipelineArgs) -> None:
        instance_name = args.get_parameter("instance_name")
        root_path = Path(args.get_parameter("root_path", self.instances_root / instance_name))
        web_root = root_path / "Website"
        if web_root.exists() and any(web_root.iterdir()):
            args.abort(f"Folder '{web_root}' already exists and is not empty")
            return

        web_root.mkdir(parents=True, exist_ok=True)
        with PackageArchive(args.get_parameter("package_path")) as archive:
            archive.extract(web_root, self.prefix)
        args.set_parameter("root_path", root_path)


class CreateSite(Processor):
    """Registers the instance with the web server and sets ``args.instance``."""

    requires = ("instance_name", "root_path")

    def __init__(self, gateway: WebServerGateway, name: Optional[str] = None, checkpoint: bool = False):
        super().__init__(name=name, checkpoint=checkpoint)
        self.gateway = gateway

    def process(self, args: PipelineArgs) -> None:
        instance_name = args.get_parameter("instance_name")
        root_path = Path(args.get_parameter("root_path"))
        site = self.gateway.create_site(
            instance_name,
            str(root_path / "Website"),
            app_pool=args.get_parameter("app_pool", None),
        )
        args.instance = Instance(name=site.name, root_path=root_path, site_id=site.id)


class BindHost(Processor):
    """Adds the host binding of the instance; aborts if the host is taken."""

    requires = ("instance_name",)

    def __init__(self, gateway: WebServerGateway, name: Optional[str] = None, checkpoint: bool = False):
        super().__init__(name=name, checkpoint=checkpoint)
        self.gateway = gateway

    def process(self, args: PipelineArgs) -> None:
        instance_name = args.get_parameter("instance_name")
        binding = Binding(
            host=args.get_parameter("host_name", instance_name),
            protocol=args.get_parameter("protocol", "http"),
            port=int(args.get_parameter("port", 80)),
        )
        if self.gateway.binding_exists(binding.host):
            args.abort(f"Host binding '{binding.host}' already exists")
            return
        if not self.gateway.add_binding(instance_name, binding):
            args.abort(f"Cannot bind '{binding.host}': website '{instance_name}' does not exist")


class ResolveInstance(Processor):
    """Looks up an existing instance by name and sets ``args.instance``."""

    requires = ("instance_name",)
    produces = ("root_path",)

    def __init__(self, gateway: WebServerGateway, name: Optional[str] = None, checkpoint: bool = False):
        super().__init__(name=name, checkpoint=checkpoint)
        self.gateway = gateway

    def process(self, args: PipelineArgs) -> None:
        instance_name = args.get_parameter("instance_name")
        site = self.gateway.get_site(instance_name)
        if site is None:
            args.abort(f"Instance '{instance_name}' not found")
            return
        web_root = Path(self.gateway.get_web_root_path(site))
        root_path = web_root.parent if web_root.name.lower() == "website" else web_root
        args.instance = Instance(name=site.name, root_path=root_path, site_id=site.id)
        args.set_parameter("root_path", root_path)


class StopSite(Processor):
    def __init__(self, gateway: WebServerGateway, name: Optional[str] = None, checkpoint: bool = False):
        super().__init__(name=name, checkpoint=checkpoint)
        self.gateway = gateway

    def process(self, args: PipelineArgs) -> None:
        instance = _require_instance(args)
        logger.info(f"Stopping website '{instance.name}'")
        self.gateway.stop_site(instance.name)


class DeleteAgentFiles(Processor):
    def __init__(self, agent_files: AgentFiles, name: Optional[str] = None, checkpoint: bool = False):
        super().__init__(name=name, checkpoint=checkpoint)
        self.agent_files = agent_files

    def process(self, args: PipelineArgs) -> None:
        self.agent_files.delete_agent_files(_require_instance(args))


class RemoveSite(Processor):
    def __init__(self, gateway: WebServerGateway, name: Optional[str] = None, checkpoint: bool = False):
        super().__init__(name=name, checkpoint=checkpoint)
        self.gateway = gateway

    def process(self, args: PipelineArgs) -> None:
        instance = _require_instance(args)
        if instance.site_id is not None:
            self.gateway.delete_site(instance.site_id)
        else:
            self.gateway.delete_site_by_name(instance.name)


class DeleteInstanceFiles(Processor):
    """Removes the instance root folder."""

    def process(self, args: PipelineArgs) -> None:
        instance = _require_instance(args)
        if instance.root_path.exists():
            logger.info(f"Deleting instance folder {instance.root_path}")
            shutil.rmtree(instance.root_path)
