"""
Version utility for reading application version from version.txt
"""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as package_version
from pathlib import Path
from typing import Optional

DISTRIBUTION_NAME = "plancritic"

# Cache for the version to avoid reading file multiple times
_cached_version: Optional[str] = None


def _version_file() -> Path:
    # plancritic/utils/version.py -> project root
    return Path(__file__).resolve().parent.parent.parent / "version.txt"


def _validate(version: str) -> str:
    if not version:
        raise ValueError("Version file is empty")

    # Basic validation - should follow semantic versioning pattern
    version_parts = version.split(".")
    if len(version_parts) != 3 or not all(part.isdigit() for part in version_parts):
        raise ValueError(
            f"Invalid version format: {version}. Expected semantic versioning (e.g., '1.0.0')"
        )
    return version


def get_version() -> str:
    """
    Get application version.

    Reads version.txt from a source checkout, falling back to the metadata of
    the installed distribution.

    Returns:
        Version string (e.g., "1.0.0")

    Raises:
        FileNotFoundError: If neither version.txt nor package metadata exists
        ValueError: If version.txt is empty or not a semantic version
    """
    global _cached_version

    if _cached_version is not None:
        return _cached_version

    version_file = _version_file()
    if version_file.exists():
        try:
            version = version_file.read_text(encoding="utf-8").strip()
        except OSError as e:
            raise FileNotFoundError(f"Failed to read version file: {e}")
    else:
        try:
            version = package_version(DISTRIBUTION_NAME)
        except PackageNotFoundError:
            raise FileNotFoundError(f"Version file not found: {version_file}")

    _cached_version = _validate(version)
    return _cached_version
