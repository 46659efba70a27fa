"""
Base gateway class for web-server management surfaces.

This module provides the data models for sites, bindings and application
pools, and the abstract gateway that processors talk to. Implementations
supply a handful of primitives; the lookup and consistency rules shared by
every backend live here.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional, Sequence, Union

from pydantic import BaseModel, Field

from ..core.errors import WebServerError

logger = logging.getLogger(__name__)


class State(str, Enum):
    STARTED = "started"
    STOPPED = "stopped"


class Binding(BaseModel):
    """A host binding in ``ip:port:host`` form."""
    host: str
    protocol: str = "http"
    ip: str = "*"
    port: int = 80

    @property
    def information(self) -> str:
        return f"{self.ip}:{self.port}:{self.host}"

    @classmethod
    def parse(cls, information: str, protocol: str = "http") -> "Binding":
        """Parse ``ip:port:host`` binding information."""
        parts = information.split(":", 2)
        if len(parts) != 3:
            raise ValueError(f"Invalid binding information: '{information}'")
        ip, port, host = parts
        return cls(host=host, protocol=protocol, ip=ip or "*", port=int(port))


class WorkerProcess(BaseModel):
    pid: int
    state: State = State.STARTED


class ApplicationPool(BaseModel):
    name: str
    state: State = State.STARTED
    worker_processes: List[WorkerProcess] = Field(default_factory=list)


class Site(BaseModel):
    id: int
    name: str
    physical_path: Optional[str] = None
    app_pool: Optional[str] = None
    bindings: List[Binding] = Field(default_factory=list)
    state: State = State.STARTED


class WebServerGateway(ABC):
    """Abstract base class for web-server management gateways."""

    @abstractmethod
    def list_sites(self) -> List[Site]:
        """Return every site known to the server."""
        pass

    @abstractmethod
    def create_site(self, name: str, physical_path: str, app_pool: Optional[str] = None,
                    bindings: Sequence[Binding] = ()) -> Site:
        """Create a site (and its application pool if missing)."""
        pass

    @abstractmethod
    def get_application_pool(self, name: str) -> Optional[ApplicationPool]:
        pass

    @abstractmethod
    def stop_site(self, name: str) -> None:
        """Stop a site and its application pool."""
        pass

    @abstractmethod
    def _remove_site(self, site: Site) -> None:
        pass

    @abstractmethod
    def _remove_application_pool(self, name: str) -> None:
        pass

    @abstractmethod
    def _add_binding(self, site: Site, binding: Binding) -> None:
        pass

    def get_site(self, name: str) -> Optional[Site]:
        """Find a site by name, ignoring case."""
        wanted = name.lower()
        return next((site for site in self.list_sites() if site.name.lower() == wanted), None)

    def website_exists(self, name: str) -> bool:
        return self.get_site(name) is not None

    def binding_exists(self, host: str) -> bool:
        """Check whether any site is bound to ``host``, ignoring case."""
        wanted = host.lower()
        return any(binding.host.lower() == wanted for site in self.list_sites() for binding in site.bindings)

    def add_binding(self, site_name: str, binding: Binding) -> bool:
        """
        Add a host binding to a site.

        Returns:
            False if the host is already bound anywhere or the site does not
            exist; nothing is changed in that case
        """
        site = self.get_site(site_name)
        if site is None or self.binding_exists(binding.host):
            return False
        logger.info(f"Adding binding {binding.protocol}://{binding.information} to site '{site.name}'")
        self._add_binding(site, binding)
        return True

    def delete_site(self, site_id: int) -> bool:
        """
        Delete a site by id.

        Application pools that no other site uses are deleted as well.

        Returns:
            False if there was no such site
        """
        sites = self.list_sites()
        site = next((s for s in sites if s.id == site_id), None)
        if site is None:
            return False
        return self._delete(site, sites)

    def delete_site_by_name(self, name: str) -> bool:
        sites = self.list_sites()
        wanted = name.lower()
        site = next((s for s in sites if s.name.lower() == wanted), None)
        if site is None:
            return False
        return self._delete(site, sites)

    def is_application_pool_running(self, pool: Union[str, ApplicationPool]) -> bool:
        """True iff the pool has at least one running worker process."""
        if isinstance(pool, str):
            pool = self.get_application_pool(pool)
            if pool is None:
                return False
        return any(wp is not None and wp.state == State.STARTED for wp in pool.worker_processes)

    def get_web_root_path(self, site: Site) -> str:
        if not site.physical_path:
            raise WebServerError(f"Website {site.id} seems to be corrupted or misconfigured")
        return site.physical_path

    def _delete(self, site: Site, sites: List[Site]) -> bool:
        logger.info(f"Deleting website {site.id} ('{site.name}')")
        self._remove_site(site)
        pool = site.app_pool
        if pool and not any(s.id != site.id and (s.app_pool or "").lower() == pool.lower() for s in sites):
            logger.info(f"Deleting application pool '{pool}' (no longer used)")
            self._remove_application_pool(pool)
        return True
