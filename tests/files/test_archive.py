"""
Unit tests for package archive inspection and extraction.
"""

import tempfile
import unittest
import zipfile
from pathlib import Path

from instancepipelines.core.errors import PackageValidationError
from instancepipelines.files.archive import (
    IMPORT_MANIFEST,
    PackageArchive,
    extract_package,
    missing_entries,
    validate_package,
)


def write_zip(path: Path, entries) -> Path:
    with zipfile.ZipFile(path, "w") as archive:
        for name, content in entries.items():
            archive.writestr(name, content)
    return path


class TestPackageArchive(unittest.TestCase):
    """Tests for package validation and extraction."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.package = write_zip(self.tmp / "export.zip", {
            "AppPoolSettings.xml": "<appcmd/>",
            "WebsiteSettings.xml": "<appcmd/>",
            "Website/Web.config": "<configuration/>",
            "Website/bin/app.dll": "binary",
        })

    def tearDown(self):
        self._tmp.cleanup()

    def test_entries(self):
        with PackageArchive(self.package) as archive:
            self.assertIn("Website/Web.config", archive.entries)
            self.assertTrue(archive.contains("Website\\Web.config"))
            self.assertEqual(archive.read_text("AppPoolSettings.xml"), "<appcmd/>")
            with self.assertRaises(KeyError):
                archive.read_text("missing.xml")

    def test_valid_import_package(self):
        validate_package(self.package, IMPORT_MANIFEST)
        self.assertEqual(missing_entries(self.package, IMPORT_MANIFEST), [])

    def test_missing_file(self):
        package = write_zip(self.tmp / "partial.zip", {"AppPoolSettings.xml": "<appcmd/>"})
        with self.assertRaises(PackageValidationError) as ctx:
            validate_package(package)
        self.assertEqual(ctx.exception.missing, "WebsiteSettings.xml")
        self.assertEqual(
            str(ctx.exception),
            "Wrong package for import. The package does not contain the WebsiteSettings.xml file.",
        )
        self.assertEqual(missing_entries(package, IMPORT_MANIFEST), ["WebsiteSettings.xml", "Website/Web.config"])

    def test_unreadable_package(self):
        broken = self.tmp / "broken.zip"
        broken.write_text("not a zip")
        with self.assertRaises(PackageValidationError):
            validate_package(broken)
        with self.assertRaises(PackageValidationError):
            validate_package(self.tmp / "absent.zip")

    def test_extract_with_prefix(self):
        target = self.tmp / "site"
        count = extract_package(self.package, target, prefix="Website")
        self.assertEqual(count, 2)
        self.assertTrue((target / "Web.config").is_file())
        self.assertEqual((target / "bin" / "app.dll").read_text(), "binary")
        self.assertFalse((target / "AppPoolSettings.xml").exists())

    def test_extract_everything(self):
        target = self.tmp / "all"
        self.assertEqual(extract_package(self.package, target), 4)
        self.assertTrue((target / "Website" / "Web.config").is_file())

    def test_extract_refuses_escaping_entries(self):
        package = write_zip(self.tmp / "evil.zip", {"../escape.txt": "x"})
        with self.assertRaises(PackageValidationError):
            extract_package(package, self.tmp / "target")
        self.assertFalse((self.tmp / "escape.txt").exists())


if __name__ == "__main__":
    unittest.main()
