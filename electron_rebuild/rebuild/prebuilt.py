"""Locating an installed Electron prebuilt package."""

import json
from pathlib import Path

from electron_rebuild.core.logger.logger import get_logger

logger = get_logger(__name__)

PREBUILT_PACKAGES = ("electron", "electron-prebuilt", "electron-prebuilt-compile")
PATH_SIDECAR = "path.txt"


def locate_electron_prebuilt(start_dir: Path | None = None) -> Path | None:
    """Find an Electron prebuilt package in node_modules above ``start_dir``.

    Args:
        start_dir: Directory to start searching from. Defaults to the cwd.

    Returns:
        The package directory, or None when nothing is installed.
    """
    start = (start_dir or Path.cwd()).resolve()
    for directory in (start, *start.parents):
        for package in PREBUILT_PACKAGES:
            candidate = directory / "node_modules" / package
            if (candidate / "package.json").is_file():
                logger.debug(f"Found Electron prebuilt at {candidate}")
                return candidate
    return None


def resolve_electron_executable(prebuilt_dir: Path) -> Path | None:
    """Resolve the Electron executable named by the ``path.txt`` sidecar.

    Returns:
        The executable path, or None when the sidecar is absent.
    """
    sidecar = prebuilt_dir / PATH_SIDECAR
    try:
        relative = sidecar.read_text(encoding="utf-8").strip()
    except OSError:
        return None

    candidate = (prebuilt_dir / relative).resolve()
    dist_candidate = (prebuilt_dir / "dist" / relative).resolve()
    if not candidate.exists() and dist_candidate.exists():
        return dist_candidate
    return candidate


def read_electron_version(prebuilt_dir: Path) -> str | None:
    """Version of the Electron prebuilt from its package.json."""
    try:
        data = json.loads((prebuilt_dir / "package.json").read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Failed to read Electron version from {prebuilt_dir}: {e}")
        return None
    version = data.get("version") if isinstance(data, dict) else None
    return str(version) if version else None
