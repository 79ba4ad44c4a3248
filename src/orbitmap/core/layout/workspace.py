"""Placement of sessions on the workspace floor and of modules inside a session."""

import math
from typing import Sequence

from orbitmap.core.schemas import Vec3

# Sessions
GRID_SPACING = 35.0
GRID_COLS = 4
SESSION_ZONE_RADIUS = 12.0

# Modules inside a session
MODULE_HOVER_HEIGHT = 0.8
SINGLE_RING_MAX = 6
SINGLE_RING_RADIUS = 5.0
INNER_RING_MAX = 5
INNER_RING_RADIUS = 4.0
OUTER_RING_RADIUS = 8.0


def session_grid_position(index: int) -> Vec3:
    """Position of the index-th session on a four-column grid."""
    col = index % GRID_COLS
    row = index // GRID_COLS
    offset_x = ((GRID_COLS - 1) * GRID_SPACING) / 2
    offset_z = (row * GRID_SPACING) / 2
    return (
        col * GRID_SPACING - offset_x,
        0.0,
        row * GRID_SPACING - min(offset_z, GRID_SPACING),
    )


def _on_ring(center: Vec3, radius: float, index: int, count: int, y: float) -> Vec3:
    # First slot points at -z
    angle = (index / count) * 2 * math.pi - math.pi / 2
    return (center[0] + math.cos(angle) * radius, y, center[2] + math.sin(angle) * radius)


def module_position(module_count: int, index: int, center: Vec3) -> Vec3:
    """Position of the index-th attached module around a session center.

    One module sits on the center, up to six share one ring, more are split
    over an inner ring (at most five) and an outer ring.
    """
    y = center[1] + MODULE_HOVER_HEIGHT

    if module_count <= 1:
        return (center[0], y, center[2])

    if module_count <= SINGLE_RING_MAX:
        return _on_ring(center, SINGLE_RING_RADIUS, index, module_count, y)

    inner_count = min(math.ceil(module_count / 2), INNER_RING_MAX)
    if index < inner_count:
        return _on_ring(center, INNER_RING_RADIUS, index, inner_count, y)

    outer_count = module_count - inner_count
    return _on_ring(center, OUTER_RING_RADIUS, index - inner_count, outer_count, y)


def is_inside_session(point: Sequence[float], center: Vec3) -> bool:
    """Whether a point lies within a session's zone, ignoring height."""
    dx = point[0] - center[0]
    dz = point[2] - center[2]
    return math.hypot(dx, dz) <= SESSION_ZONE_RADIUS
