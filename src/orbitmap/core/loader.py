"""Read configuration snapshots and project scans from JSON files."""

import json
import logging
from pathlib import Path
from typing import Any, List, Union

from pydantic import ValidationError

from orbitmap.core.graph import build_project_files
from orbitmap.core.schemas import ConfigSnapshot, ProjectFile

logger = logging.getLogger(__name__)


class SnapshotError(Exception):
    """Raised when a snapshot file cannot be read or does not validate."""
    pass


def _read_json(path: Union[str, Path]) -> Any:
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except OSError as e:
        raise SnapshotError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise SnapshotError(f"Invalid JSON in {path}: {e}") from e


def load_config_snapshot(path: Union[str, Path]) -> ConfigSnapshot:
    """Load a configuration snapshot (skills, mcps, plugins, ...)."""
    data = _read_json(path)
    try:
        snapshot = ConfigSnapshot.model_validate(data)
    except ValidationError as e:
        raise SnapshotError(f"Invalid configuration snapshot {path}: {e}") from e

    logger.debug(
        f"Loaded snapshot {path}: {len(snapshot.skills)} skills, {len(snapshot.mcps)} mcps, "
        f"{len(snapshot.plugins)} plugins, {len(snapshot.hooks)} hooks"
    )
    return snapshot


def load_project_files(path: Union[str, Path]) -> List[ProjectFile]:
    """Load a project scan.

    Accepts either a list of already-analysed files or a mapping of
    project-relative path to source text, which is analysed here.
    """
    data = _read_json(path)

    if isinstance(data, dict):
        if not all(isinstance(v, str) for v in data.values()):
            raise SnapshotError(f"Source mapping in {path} must map paths to text")
        return build_project_files(data)

    if not isinstance(data, list):
        raise SnapshotError(f"Expected a list of files or a path mapping in {path}")

    try:
        return [ProjectFile.model_validate(item) for item in data]
    except ValidationError as e:
        raise SnapshotError(f"Invalid project file list {path}: {e}") from e
