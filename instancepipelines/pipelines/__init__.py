"""
Provisioning pipelines for web-application instances.

Features:
- Install a new instance from a package
- Import an exported instance (with a settings checkpoint)
- Uninstall or delete an instance
- Reconfigure host bindings
"""

from .definitions import build_gateway, build_registry, get_default_registry
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

__all__ = [
    'build_gateway',
    'build_registry',
    'get_default_registry',
    'BindHost',
    'CheckSiteAvailable',
    'CreateSite',
    'DeleteAgentFiles',
    'DeleteInstanceFiles',
    'ExtractPackage',
    'ReadImportSettings',
    'RemoveSite',
    'ResolveInstance',
    'StopSite',
    'ValidatePackage',
]
