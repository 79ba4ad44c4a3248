"""File-structure layout.

Orbit layout for a project's source files:

- origin:     the virtual root anchor (``__root__``)
- first ring: one anchor per directory (``__dir_<name>__``)
- around each directory anchor, files on an inner ring when their importance
  is above the threshold, otherwise on an outer ring, most important first
"""

import logging
import math
from typing import Dict, List, Optional

from orbitmap.config import ProjectLayoutConfig
from orbitmap.core.registry import ROOT_ID
from orbitmap.core.schemas import ORIGIN, ProjectFile, Vec3

logger = logging.getLogger(__name__)


def directory_anchor_id(directory: str) -> str:
    return f"__dir_{directory}__"


def layout_project(
    files: List[ProjectFile],
    config: Optional[ProjectLayoutConfig] = None,
) -> Dict[str, Vec3]:
    """Compute positions for the root anchor, directory anchors and files.

    Configured main directories always get an anchor, in configured order;
    other file categories follow in first-seen order.
    """
    config = config or ProjectLayoutConfig()
    positions: Dict[str, Vec3] = {ROOT_ID: ORIGIN}

    groups: Dict[str, List[ProjectFile]] = {}
    for file in files:
        groups.setdefault(file.category, []).append(file)

    directories = list(config.main_directories)
    directories += [category for category in groups if category not in directories]

    count = len(directories)
    for index, directory in enumerate(directories):
        angle = 2 * math.pi * index / count
        positions[directory_anchor_id(directory)] = (
            math.cos(angle) * config.directory_radius,
            0.0,
            math.sin(angle) * config.directory_radius,
        )

    for category, members in groups.items():
        center = positions[directory_anchor_id(category)]
        inner = [f for f in members if f.importance > config.importance_threshold]
        outer = [f for f in members if f.importance <= config.importance_threshold]
        _place_ring(inner, center, config.inner_radius, config, positions)
        _place_ring(outer, center, config.outer_radius, config, positions)

    logger.debug(f"Laid out {len(files)} files across {count} directories")
    return positions


def _place_ring(
    files: List[ProjectFile],
    center: Vec3,
    radius: float,
    config: ProjectLayoutConfig,
    positions: Dict[str, Vec3],
) -> None:
    count = len(files)
    if count == 0:
        return

    # sorted() is stable: equal importance keeps input order
    ordered = sorted(files, key=lambda f: f.importance, reverse=True)
    for index, file in enumerate(ordered):
        angle = 2 * math.pi * index / count
        positions[file.id] = (
            center[0] + math.cos(angle) * radius,
            center[1] + math.sin(index * 0.5) * config.vertical_spread + config.vertical_offset,
            center[2] + math.sin(angle) * radius,
        )
