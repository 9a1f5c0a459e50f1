"""package.json dependency reading for module selection."""

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from electron_rebuild.core.exceptions.errors import ManifestError
from electron_rebuild.core.logger.logger import get_logger
from electron_rebuild.models.rebuild import DependencyClass

logger = get_logger(__name__)


def load_manifest(manifest_path: Path) -> dict[str, Any]:
    """Read and parse a package.json file.

    Args:
        manifest_path: Path to package.json.

    Returns:
        Parsed manifest.

    Raises:
        ManifestError: If the file is missing, unreadable or not a JSON object.
    """
    try:
        data = json.loads(manifest_path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as e:
        raise ManifestError(
            f"Failed to read package manifest {manifest_path}: {e}",
            manifest_path=str(manifest_path),
        ) from e

    if not isinstance(data, dict):
        raise ManifestError(
            f"Package manifest is not a JSON object: {manifest_path}",
            manifest_path=str(manifest_path),
        )
    return data


def dependency_names(
    manifest: dict[str, Any],
    classes: Iterable[DependencyClass],
) -> list[str]:
    """Collect dependency names from the given manifest sections, in order.

    Missing sections count as empty.
    """
    names: list[str] = []
    for dep_class in classes:
        section = manifest.get(dep_class.value) or {}
        if not isinstance(section, dict):
            logger.warning(f"Ignoring malformed '{dep_class.value}' section in package manifest")
            continue
        names.extend(section.keys())
    return names
