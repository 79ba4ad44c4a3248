"""Layout engines.

1. Radial (radial.py): layered radial layout of configuration graphs
2. Project (project.py): orbit layout of a project's source files
3. Workspace (workspace.py): sessions on a grid, modules inside a session
"""

from orbitmap.core.layout.radial import (
    RESERVED_ANCHORS,
    allocate_sectors,
    endpoint_positions,
    layout,
)
from orbitmap.core.layout.project import directory_anchor_id, layout_project
from orbitmap.core.layout.workspace import (
    SESSION_ZONE_RADIUS,
    is_inside_session,
    module_position,
    session_grid_position,
)

__all__ = [
    "RESERVED_ANCHORS",
    "allocate_sectors",
    "endpoint_positions",
    "layout",
    "directory_anchor_id",
    "layout_project",
    "SESSION_ZONE_RADIUS",
    "is_inside_session",
    "module_position",
    "session_grid_position",
]
