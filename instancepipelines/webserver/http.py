"""
HTTP gateway implementation.

This module provides the HttpWebServerGateway class for talking to a REST
web-server management API (sites, bindings and application pools exposed as
JSON resources).
"""

import logging
import time
from typing import Any, List, Optional, Sequence

import requests

from ..core.errors import WebServerError
from .base import ApplicationPool, Binding, Site, WebServerGateway

logger = logging.getLogger(__name__)


class HttpWebServerGateway(WebServerGateway):
    """
    Gateway using a REST management API.

    Connection failures, timeouts and 5xx responses are retried with a fixed
    delay; anything left over raises WebServerError.
    """

    def __init__(self, base_url: str, api_key: Optional[str] = None, timeout: float = 30.0,
                 max_retries: int = 3, retry_delay: float = 2.0,
                 session: Optional[requests.Session] = None):
        """
        Initialize the gateway.

        Args:
            base_url: Root URL of the management API
            api_key: Optional bearer token
            timeout: Request timeout in seconds
            max_retries: Maximum number of attempts per request
            retry_delay: Delay between attempts in seconds
            session: Optional pre-configured requests session
        """
        if not base_url:
            raise ValueError("Web server management URL not provided")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if api_key:
            self.session.headers.update({"Authorization": f"Bearer {api_key}"})

    def list_sites(self) -> List[Site]:
        data = self._request("GET", "/sites")
        return [Site.model_validate(item) for item in data.get("sites", [])]

    def create_site(self, name: str, physical_path: str, app_pool: Optional[str] = None,
                    bindings: Sequence[Binding] = ()) -> Site:
        payload = {
            "name": name,
            "physical_path": str(physical_path),
            "app_pool": app_pool or name,
            "bindings": [binding.model_dump() for binding in bindings],
        }
        data = self._request("POST", "/sites", json=payload)
        site = Site.model_validate(data)
        logger.info(f"Created website {site.id} ('{site.name}')")
        return site

    def get_application_pool(self, name: str) -> Optional[ApplicationPool]:
        data = self._request("GET", f"/application-pools/{name}", allow_missing=True)
        return ApplicationPool.model_validate(data) if data is not None else None

    def stop_site(self, name: str) -> None:
        site = self.get_site(name)
        if site is None:
            raise WebServerError(f"Website '{name}' does not exist")
        self._request("POST", f"/sites/{site.id}/stop")
        if site.app_pool:
            self._request("POST", f"/application-pools/{site.app_pool}/stop", allow_missing=True)

    def _remove_site(self, site: Site) -> None:
        self._request("DELETE", f"/sites/{site.id}", allow_missing=True)

    def _remove_application_pool(self, name: str) -> None:
        self._request("DELETE", f"/application-pools/{name}", allow_missing=True)

    def _add_binding(self, site: Site, binding: Binding) -> None:
        self._request("POST", f"/sites/{site.id}/bindings", json=binding.model_dump())

    def _request(self, method: str, path: str, allow_missing: bool = False, **kwargs) -> Any:
        """
        Send a request with retry logic.

        Returns:
            Decoded JSON body, {} for empty bodies, None for a 404 when
            ``allow_missing`` is set

        Raises:
            WebServerError: If the request fails after all attempts
        """
        url = f"{self.base_url}{path}"
        attempts = 0
        last_error = ""

        while attempts < self.max_retries:
            attempts += 1
            try:
                response = self.session.request(method, url, timeout=self.timeout, **kwargs)
            except (requests.ConnectionError, requests.Timeout) as e:
                last_error = str(e)
                logger.warning(f"{method} {url}: attempt {attempts} failed with error: {last_error}")
            else:
                if response.status_code == 404 and allow_missing:
                    return None
                if response.status_code < 500:
                    if not response.ok:
                        raise WebServerError(
                            f"{method} {url} failed with status {response.status_code}: {response.text}"
                        )
                    return response.json() if response.content else {}
                last_error = f"status {response.status_code}"
                logger.warning(f"{method} {url}: attempt {attempts} failed with {last_error}")

            if attempts < self.max_retries:
                time.sleep(self.retry_delay)

        logger.error(f"{method} {url}: all {self.max_retries} attempts failed")
        raise WebServerError(f"{method} {url} failed after {self.max_retries} attempts: {last_error}")
