"""
Unit tests for agent file removal.
"""

import tempfile
import unittest
from pathlib import Path

from instancepipelines.core.schemas import Instance
from instancepipelines.files.agent import AgentFiles


class TestAgentFiles(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.instance = Instance(name="site1", root_path=Path(self._tmp.name) / "site1")

    def tearDown(self):
        self._tmp.cleanup()

    def test_agent_path(self):
        agent_files = AgentFiles("/admin/agent/")
        self.assertEqual(agent_files.agent_path(self.instance),
                         self.instance.root_path / "Website" / "admin" / "agent")

    def test_delete_agent_files(self):
        agent_files = AgentFiles()
        folder = agent_files.agent_path(self.instance)
        folder.mkdir(parents=True)
        (folder / "InstallModules.aspx").write_text("agent")

        self.assertTrue(agent_files.delete_agent_files(self.instance))
        self.assertFalse(folder.exists())
        self.assertTrue(folder.parent.exists())

    def test_nothing_to_delete(self):
        self.assertFalse(AgentFiles().delete_agent_files(self.instance))


if __name__ == "__main__":
    unittest.main()
