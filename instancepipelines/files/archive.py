"""
Package archive inspection.

Packages are zip files. Pre-flight checks use ``validate_package`` to reject a
package before a pipeline is started; processors use ``missing_entries`` to
abort a running pipeline instead.
"""

import logging
import zipfile
from pathlib import Path, PurePosixPath
from typing import Iterable, List, Set, Union

from ..core.errors import PackageValidationError

logger = logging.getLogger(__name__)

APP_POOL_SETTINGS = "AppPoolSettings.xml"
WEBSITE_SETTINGS = "WebsiteSettings.xml"
WEB_CONFIG = "Website/Web.config"

IMPORT_MANIFEST = (APP_POOL_SETTINGS, WEBSITE_SETTINGS, WEB_CONFIG)

PathLike = Union[str, Path]


def _normalize(name: str) -> str:
    return name.replace("\\", "/").lstrip("/")


class PackageArchive:
    """Read-only view of a zip package."""

    def __init__(self, path: PathLike):
        self.path = Path(path)
        try:
            self._zip = zipfile.ZipFile(self.path)
        except (OSError, zipfile.BadZipFile) as e:
            raise PackageValidationError(f"Cannot read package '{self.path}': {e}", path=str(self.path)) from e
        self.entries: Set[str] = {_normalize(info.filename) for info in self._zip.infolist()}

    def __enter__(self) -> "PackageArchive":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        self._zip.close()

    def contains(self, name: str) -> bool:
        return _normalize(name) in self.entries

    def read_text(self, name: str, encoding: str = "utf-8") -> str:
        wanted = _normalize(name)
        for info in self._zip.infolist():
            if _normalize(info.filename) == wanted:
                return self._zip.read(info).decode(encoding)
        raise KeyError(name)

    def extract(self, target: PathLike, prefix: str = "") -> int:
        """
        Extract entries below ``prefix`` into ``target``, stripping the prefix.

        Returns:
            Number of files written

        Raises:
            PackageValidationError: If an entry would land outside ``target``
        """
        target = Path(target).resolve()
        prefix = _normalize(prefix).rstrip("/")
        count = 0

        for info in self._zip.infolist():
            name = _normalize(info.filename)
            if prefix:
                if name != prefix and not name.startswith(prefix + "/"):
                    continue
                name = name[len(prefix):].lstrip("/")
            if not name:
                continue

            destination = (target / PurePosixPath(name)).resolve()
            if destination != target and target not in destination.parents:
                raise PackageValidationError(
                    f"Package entry '{info.filename}' escapes the target directory", path=str(self.path)
                )

            if info.is_dir():
                destination.mkdir(parents=True, exist_ok=True)
                continue
            destination.parent.mkdir(parents=True, exist_ok=True)
            with self._zip.open(info) as source, open(destination, "wb") as sink:
                while True:
                    chunk = source.read(1024 * 1024)
                    if not chunk:
                        break
                    sink.write(chunk)
            count += 1

        logger.info(f"Extracted {count} files from {self.path.name} to {target}")
        return count


def missing_entries(path: PathLike, required: Iterable[str]) -> List[str]:
    """Return the required entries absent from the package, in order."""
    with PackageArchive(path) as archive:
        return [name for name in required if not archive.contains(name)]


def validate_package(path: PathLike, required: Iterable[str] = IMPORT_MANIFEST) -> None:
    """
    Check that a package contains every required file.

    Raises:
        PackageValidationError: For an unreadable package or the first missing file
    """
    missing = missing_entries(path, required)
    if missing:
        raise PackageValidationError(
            f"Wrong package for import. The package does not contain the {missing[0]} file.",
            path=str(path),
            missing=missing[0],
        )


def extract_package(path: PathLike, target: PathLike, prefix: str = "") -> int:
    with PackageArchive(path) as archive:
        return archive.extract(target, prefix)
