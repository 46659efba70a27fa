"""
Agent file management.

Remote-execution agent pages are dropped into an instance's web root while it
is being provisioned. They must not outlive the instance.
"""

import logging
import shutil
from pathlib import Path

from ..core.schemas import Instance

logger = logging.getLogger(__name__)

DEFAULT_AGENT_FOLDER = "admin/agent"


class AgentFiles:
    """Locates and removes the agent folder of an instance."""

    def __init__(self, folder: str = DEFAULT_AGENT_FOLDER):
        self.folder = folder.strip("/\\")

    def agent_path(self, instance: Instance) -> Path:
        return instance.web_root / self.folder

    def delete_agent_files(self, instance: Instance) -> bool:
        """
        Remove the agent folder of ``instance``.

        Returns:
            True if something was removed, False if there was nothing to remove
        """
        path = self.agent_path(instance)
        if not path.exists():
            logger.debug(f"No agent files for instance '{instance.name}' at {path}")
            return False
        logger.info(f"Deleting agent files of instance '{instance.name}' at {path}")
        if path.is_dir():
            shutil.rmtree(path)
        else:
            path.unlink()
        return True
