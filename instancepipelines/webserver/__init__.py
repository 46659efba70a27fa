"""
Web-server management gateways.
"""

from .base import ApplicationPool, Binding, Site, State, WebServerGateway, WorkerProcess
from .http import HttpWebServerGateway
from .memory import InMemoryWebServer

__all__ = [
    'ApplicationPool',
    'Binding',
    'Site',
    'State',
    'WebServerGateway',
    'WorkerProcess',
    'HttpWebServerGateway',
    'InMemoryWebServer',
]
