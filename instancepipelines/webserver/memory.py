"""
In-memory web server.

Keeps sites and application pools in process memory. Used for dry runs and
as the management surface in tests.
"""

import copy
import itertools
import logging
import threading
from typing import Dict, List, Optional, Sequence

from ..core.errors import WebServerError
from .base import ApplicationPool, Binding, Site, State, WebServerGateway, WorkerProcess

logger = logging.getLogger(__name__)


class InMemoryWebServer(WebServerGateway):
    """Gateway backed by plain dictionaries, guarded by a lock."""

    def __init__(self):
        self._lock = threading.RLock()
        self._sites: Dict[int, Site] = {}
        self._pools: Dict[str, ApplicationPool] = {}
        self._ids = itertools.count(1)
        self._pids = itertools.count(1000)

    def list_sites(self) -> List[Site]:
        with self._lock:
            return [copy.deepcopy(site) for site in self._sites.values()]

    def list_application_pools(self) -> List[ApplicationPool]:
        with self._lock:
            return [copy.deepcopy(pool) for pool in self._pools.values()]

    def create_site(self, name: str, physical_path: str, app_pool: Optional[str] = None,
                    bindings: Sequence[Binding] = ()) -> Site:
        with self._lock:
            if self.website_exists(name):
                raise WebServerError(f"Website '{name}' already exists")
            pool_name = app_pool or name
            if pool_name not in self._pools:
                self._pools[pool_name] = ApplicationPool(
                    name=pool_name, worker_processes=[WorkerProcess(pid=next(self._pids))]
                )
            site = Site(
                id=next(self._ids),
                name=name,
                physical_path=str(physical_path),
                app_pool=pool_name,
                bindings=list(bindings),
            )
            self._sites[site.id] = site
            logger.info(f"Created website {site.id} ('{name}') in pool '{pool_name}'")
            return copy.deepcopy(site)

    def get_application_pool(self, name: str) -> Optional[ApplicationPool]:
        with self._lock:
            pool = self._pools.get(name)
            return copy.deepcopy(pool) if pool else None

    def start_site(self, name: str) -> None:
        with self._lock:
            site = self._find(name)
            site.state = State.STARTED
            pool = self._pools.get(site.app_pool or "")
            if pool is not None and pool.state != State.STARTED:
                pool.state = State.STARTED
                pool.worker_processes = [WorkerProcess(pid=next(self._pids))]

    def stop_site(self, name: str) -> None:
        with self._lock:
            site = self._find(name)
            site.state = State.STOPPED
            pool = self._pools.get(site.app_pool or "")
            if pool is not None:
                pool.state = State.STOPPED
                pool.worker_processes = []

    def add_binding(self, site_name: str, binding: Binding) -> bool:
        with self._lock:
            return super().add_binding(site_name, binding)

    def delete_site(self, site_id: int) -> bool:
        with self._lock:
            return super().delete_site(site_id)

    def delete_site_by_name(self, name: str) -> bool:
        with self._lock:
            return super().delete_site_by_name(name)

    def _find(self, name: str) -> Site:
        wanted = name.lower()
        for site in self._sites.values():
            if site.name.lower() == wanted:
                return site
        raise WebServerError(f"Website '{name}' does not exist")

    def _remove_site(self, site: Site) -> None:
        self._sites.pop(site.id, None)

    def _remove_application_pool(self, name: str) -> None:
        self._pools.pop(name, None)

    def _add_binding(self, site: Site, binding: Binding) -> None:
        self._sites[site.id].bindings.append(binding)
