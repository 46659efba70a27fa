"""
Unit tests for the in-memory web server and the shared gateway rules.
"""

import unittest

from instancepipelines.core.errors import WebServerError
from instancepipelines.webserver.base import Binding, Site, State
from instancepipelines.webserver.memory import InMemoryWebServer


class TestBinding(unittest.TestCase):
    def test_information(self):
        self.assertEqual(Binding(host="site1.local").information, "*:80:site1.local")

    def test_parse(self):
        binding = Binding.parse("127.0.0.1:8080:site1.local", protocol="https")
        self.assertEqual(binding.ip, "127.0.0.1")
        self.assertEqual(binding.port, 8080)
        self.assertEqual(binding.host, "site1.local")
        self.assertEqual(binding.protocol, "https")

    def test_parse_invalid(self):
        with self.assertRaises(ValueError):
            Binding.parse("site1.local")


class TestInMemoryWebServer(unittest.TestCase):
    """Tests for the InMemoryWebServer class."""

    def setUp(self):
        self.server = InMemoryWebServer()
        self.site = self.server.create_site("Site1", "/srv/site1/Website", bindings=[Binding(host="site1.local")])

    def test_create_and_lookup(self):
        self.assertEqual(self.site.id, 1)
        self.assertEqual(self.site.app_pool, "Site1")
        self.assertTrue(self.server.website_exists("site1"))
        self.assertEqual(self.server.get_site("SITE1").id, self.site.id)
        self.assertIsNone(self.server.get_site("other"))

    def test_create_duplicate_fails(self):
        with self.assertRaises(WebServerError):
            self.server.create_site("site1", "/srv/other")

    def test_returned_sites_are_copies(self):
        self.server.list_sites()[0].bindings.clear()
        self.assertTrue(self.server.binding_exists("site1.local"))

    def test_binding_exists_ignores_case(self):
        self.assertTrue(self.server.binding_exists("SITE1.local"))
        self.assertFalse(self.server.binding_exists("other.local"))

    def test_add_binding(self):
        self.assertTrue(self.server.add_binding("Site1", Binding(host="alias.local")))
        self.assertTrue(self.server.binding_exists("alias.local"))

    def test_add_binding_refused(self):
        """Test that taken hosts and unknown sites are refused without changes."""
        self.server.create_site("Site2", "/srv/site2/Website")
        self.assertFalse(self.server.add_binding("Site2", Binding(host="Site1.Local")))
        self.assertFalse(self.server.add_binding("missing", Binding(host="new.local")))
        self.assertEqual(self.server.get_site("Site2").bindings, [])

    def test_application_pool_running(self):
        self.assertTrue(self.server.is_application_pool_running("Site1"))
        self.server.stop_site("Site1")
        self.assertFalse(self.server.is_application_pool_running("Site1"))
        self.assertEqual(self.server.get_site("Site1").state, State.STOPPED)
        self.server.start_site("Site1")
        self.assertTrue(self.server.is_application_pool_running("Site1"))

    def test_unknown_pool_is_not_running(self):
        self.assertFalse(self.server.is_application_pool_running("missing"))

    def test_stop_unknown_site(self):
        with self.assertRaises(WebServerError):
            self.server.stop_site("missing")

    def test_delete_removes_exclusive_pool(self):
        self.assertTrue(self.server.delete_site(self.site.id))
        self.assertFalse(self.server.website_exists("Site1"))
        self.assertIsNone(self.server.get_application_pool("Site1"))
        self.assertEqual(self.server.list_application_pools(), [])

    def test_delete_keeps_shared_pool(self):
        self.server.create_site("Site2", "/srv/site2/Website", app_pool="Site1")
        self.server.delete_site_by_name("site2")
        self.assertEqual([pool.name for pool in self.server.list_application_pools()], ["Site1"])
        self.assertIsNotNone(self.server.get_application_pool("Site1"))
        self.server.delete_site_by_name("Site1")
        self.assertIsNone(self.server.get_application_pool("Site1"))

    def test_delete_missing_site_is_noop(self):
        self.assertFalse(self.server.delete_site(999))
        self.assertFalse(self.server.delete_site_by_name("missing"))
        self.assertEqual(len(self.server.list_sites()), 1)

    def test_web_root_path(self):
        self.assertEqual(self.server.get_web_root_path(self.site), "/srv/site1/Website")
        with self.assertRaises(WebServerError) as ctx:
            self.server.get_web_root_path(Site(id=7, name="broken"))
        self.assertIn("corrupted or misconfigured", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
