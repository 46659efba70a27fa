"""
Filesystem collaborators: package archives and agent files.
"""

from .agent import AgentFiles
from .archive import (
    APP_POOL_SETTINGS,
    IMPORT_MANIFEST,
    WEB_CONFIG,
    WEBSITE_SETTINGS,
    PackageArchive,
    extract_package,
    missing_entries,
    validate_package,
)

__all__ = [
    'AgentFiles',
    'APP_POOL_SETTINGS',
    'IMPORT_MANIFEST',
    'WEB_CONFIG',
    'WEBSITE_SETTINGS',
    'PackageArchive',
    'extract_package',
    'missing_entries',
    'validate_package',
]
