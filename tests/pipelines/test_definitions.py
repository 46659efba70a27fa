"""
End-to-end tests of the registered provisioning pipelines.
"""

import tempfile
import unittest
import zipfile
from pathlib import Path

from instancepipelines.core.engine import PipelineEngine
from instancepipelines.core.errors import PackageValidationError
from instancepipelines.core.schemas import Outcome
from instancepipelines.core.wizard import CANCEL_MESSAGE, WizardPipelineManager
from instancepipelines.files.agent import AgentFiles
from instancepipelines.pipelines.definitions import build_gateway, build_registry
from instancepipelines.config import Settings
from instancepipelines.webserver.base import Binding
from instancepipelines.webserver.http import HttpWebServerGateway
from instancepipelines.webserver.memory import InMemoryWebServer

WEBSITE_SETTINGS = """<appcmd><SITE SITE.NAME="Shop"><site name="Shop" id="9"><bindings>
<binding protocol="http" bindingInformation="*:80:shop.local" /></bindings></site></SITE></appcmd>"""
APP_POOL_SETTINGS = """<appcmd><APPPOOL APPPOOL.NAME="ShopPool"><add name="ShopPool" /></APPPOOL></appcmd>"""


def write_zip(path: Path, entries) -> Path:
    with zipfile.ZipFile(path, "w") as archive:
        for name, content in entries.items():
            archive.writestr(name, content)
    return path


class TestRegisteredPipelines(unittest.TestCase):
    """Runs install, import, reconfigure, uninstall and delete against an in-memory server."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.server = InMemoryWebServer()
        self.agent_files = AgentFiles()
        self.registry = build_registry(self.server, self.agent_files, self.tmp / "instances")
        self.engine = PipelineEngine(self.registry)
        self.install_package = write_zip(self.tmp / "install.zip", {
            "Web.config": "<configuration/>",
            "default.aspx": "hello",
        })
        self.export = write_zip(self.tmp / "export.zip", {
            "AppPoolSettings.xml": APP_POOL_SETTINGS,
            "WebsiteSettings.xml": WEBSITE_SETTINGS,
            "Website/Web.config": "<configuration/>",
        })

    def tearDown(self):
        self._tmp.cleanup()

    def install(self, name="site1", **extra):
        return self.engine.execute("install", dict(package_path=str(self.install_package), instance_name=name, **extra))

    def test_registered_names(self):
        self.assertEqual(self.registry.names(), ["install", "import", "uninstall", "delete", "reconfigure"])
        self.assertEqual(self.registry.get("import").checkpoints, ["ReadImportSettings"])

    def test_install(self):
        result = self.install(host_name="site1.local")

        self.assertEqual(result.outcome, Outcome.SUCCEEDED, result.message)
        self.assertEqual(result.instance.name, "site1")
        self.assertEqual([r.processor for r in result.log],
                         ["ValidatePackage", "CheckSiteAvailable", "ExtractPackage", "CreateSite", "BindHost"])
        self.assertTrue((self.tmp / "instances" / "site1" / "Website" / "default.aspx").is_file())
        self.assertTrue(self.server.binding_exists("site1.local"))

    def test_install_twice_aborts(self):
        self.install()
        result = self.install()
        self.assertEqual(result.outcome, Outcome.ABORTED)
        self.assertEqual(result.failed_step, "CheckSiteAvailable")

    def test_install_invalid_package_aborts(self):
        result = self.engine.execute("install", {"package_path": str(self.export), "instance_name": "x"})
        self.assertEqual(result.outcome, Outcome.ABORTED)
        self.assertEqual(len(result.log), 1)
        self.assertFalse(self.server.website_exists("x"))

    def test_install_without_name_errors(self):
        result = self.engine.execute("install", {"package_path": str(self.install_package)})
        self.assertEqual(result.outcome, Outcome.ERRORED)
        self.assertEqual(result.error_type, "MissingParameterError")
        self.assertEqual(result.failed_step, "CheckSiteAvailable")

    def test_import(self):
        result = self.engine.execute("import", {"package_path": str(self.export)})
        self.assertEqual(result.outcome, Outcome.SUCCEEDED, result.message)
        site = self.server.get_site("Shop")
        self.assertEqual(site.app_pool, "ShopPool")
        self.assertTrue(self.server.binding_exists("shop.local"))
        self.assertTrue((self.tmp / "instances" / "Shop" / "Website" / "Web.config").is_file())

    def test_import_preflight_rejects_package(self):
        with self.assertRaises(PackageValidationError):
            self.engine.execute("import", {"package_path": str(self.install_package)})
        self.assertEqual(self.server.list_sites(), [])

    def test_interactive_import_with_rename(self):
        manager = WizardPipelineManager(self.engine)
        run = manager.start("import", "window", str(self.export))
        checkpoint = run.next_checkpoint(timeout=5)
        self.assertEqual(checkpoint.args.get_parameter("instance_name"), "Shop")
        checkpoint.resume(instance_name="Shop2", host_name="shop2.local")
        result = run.wait(5)

        self.assertTrue(result.success, result.message)
        self.assertTrue(self.server.website_exists("Shop2"))
        self.assertTrue(self.server.binding_exists("shop2.local"))

    def test_interactive_import_cancelled(self):
        run = WizardPipelineManager(self.engine).start("import", None, str(self.export))
        run.next_checkpoint(timeout=5)
        run.cancel()
        result = run.wait(5)
        self.assertEqual(result.message, CANCEL_MESSAGE)
        self.assertEqual(self.server.list_sites(), [])

    def test_reconfigure(self):
        self.install()
        result = self.engine.execute("reconfigure", {"instance_name": "site1", "host_name": "alias.local"})
        self.assertTrue(result.success, result.message)
        self.assertTrue(self.server.binding_exists("alias.local"))

    def test_uninstall_keeps_files(self):
        installed = self.install()
        agent = self.agent_files.agent_path(installed.instance)
        agent.mkdir(parents=True)

        result = self.engine.execute("uninstall", {"instance_name": "site1"})

        self.assertTrue(result.success, result.message)
        self.assertEqual([r.processor for r in result.log],
                         ["ResolveInstance", "StopSite", "DeleteAgentFiles", "RemoveSite"])
        self.assertFalse(self.server.website_exists("site1"))
        self.assertFalse(agent.exists())
        self.assertTrue((self.tmp / "instances" / "site1" / "Website").is_dir())

    def test_delete_removes_files(self):
        self.install()
        result = self.engine.execute("delete", {"instance_name": "site1"})
        self.assertTrue(result.success, result.message)
        self.assertFalse((self.tmp / "instances" / "site1").exists())

    def test_uninstall_unknown_instance_aborts(self):
        result = self.engine.execute("uninstall", {"instance_name": "missing"})
        self.assertEqual(result.outcome, Outcome.ABORTED)
        self.assertEqual(len(result.log), 1)

    def test_uninstall_gateway_failure_errors(self):
        self.install()

        def fail(name):
            raise Exception("management API unreachable")

        self.server.stop_site = fail
        result = self.engine.execute("uninstall", {"instance_name": "site1"})
        self.assertEqual(result.outcome, Outcome.ERRORED)
        self.assertEqual(result.failed_step, "StopSite")
        self.assertTrue(self.server.website_exists("site1"))

    def test_bound_host_aborts_reconfigure(self):
        self.install()
        self.server.create_site("other", "/srv/other", bindings=[Binding(host="taken.local")])
        result = self.engine.execute("reconfigure", {"instance_name": "site1", "host_name": "taken.local"})
        self.assertEqual(result.outcome, Outcome.ABORTED)
        self.assertEqual(result.failed_step, "BindHost")


class TestBuildGateway(unittest.TestCase):
    def test_memory_backend(self):
        self.assertIsInstance(build_gateway(Settings(webserver_backend="memory")), InMemoryWebServer)

    def test_http_backend(self):
        gateway = build_gateway(Settings(webserver_backend="http", webserver_url="http://iis.local/api",
                                         max_retries=5))
        self.assertIsInstance(gateway, HttpWebServerGateway)
        self.assertEqual(gateway.max_retries, 5)


if __name__ == "__main__":
    unittest.main()
