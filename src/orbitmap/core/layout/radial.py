"""Layered radial layout.

Nodes are placed on concentric layers around the origin:

- center:   the hub node(s), at the origin
- core:     adapters, on a ring at ``core_radius``
- tool:     category hubs, on a ring at ``tool_radius``, one layer up
- resource: configuration leaves, grouped by role into angular sectors
            starting at ``resource_radius``, two layers up

Resource groups get a sector proportional to their size (with a minimum
width) and overflow into extra rings, further out and alternating up and
down, when the sector arc cannot hold all members at the minimum spacing.
The result depends only on the input order and content.
"""

import logging
import math
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from orbitmap.config import LayoutConfig
from orbitmap.core.registry import CENTER_ID, ROOT_ID, layer_for, role_for
from orbitmap.core.schemas import ORIGIN, Connection, Node, NodeLayer, NodeRole, Vec3

logger = logging.getLogger(__name__)

TWO_PI = 2 * math.pi

# Angular order of resource sectors
RESOURCE_GROUP_ORDER: List[NodeRole] = [
    NodeRole.SKILL,
    NodeRole.MCP,
    NodeRole.PLUGIN,
    NodeRole.HOOK,
    NodeRole.RULE,
    NodeRole.AGENT,
    NodeRole.MEMORY,
    NodeRole.DOCUMENT,
]

# Ids that may be referenced by connections without a backing node.
RESERVED_ANCHORS: Dict[str, Vec3] = {
    CENTER_ID: ORIGIN,
    ROOT_ID: ORIGIN,
}


def _polar(radius: float, angle: float, y: float) -> Vec3:
    return (radius * math.cos(angle), y, radius * math.sin(angle))


# ============================================================================
# Entry Point
# ============================================================================

def layout(nodes: Iterable[Node], config: Optional[LayoutConfig] = None) -> Dict[str, Vec3]:
    """Compute a position for every node.

    Args:
        nodes: Nodes to place, in a stable order
        config: Layout tunables (defaults when omitted)

    Returns:
        Mapping of node id to (x, y, z). Empty input gives an empty mapping.
    """
    config = config or LayoutConfig()
    positions: Dict[str, Vec3] = {}

    layers: Dict[NodeLayer, List[Node]] = {layer: [] for layer in NodeLayer}
    for node in nodes:
        layers[layer_for(node.type)].append(node)

    for node in layers[NodeLayer.CENTER]:
        positions[node.id] = ORIGIN

    _place_ring(layers[NodeLayer.CORE], config.core_radius, 0.0, config, positions)
    _place_ring(layers[NodeLayer.TOOL], config.tool_radius, config.layer_height, config, positions)
    _place_resources(layers[NodeLayer.RESOURCE], config, positions)

    logger.debug(
        f"Laid out {len(positions)} nodes "
        f"(core={len(layers[NodeLayer.CORE])}, tool={len(layers[NodeLayer.TOOL])}, "
        f"resource={len(layers[NodeLayer.RESOURCE])})"
    )
    return positions


def _place_ring(
    nodes: List[Node],
    radius: float,
    height: float,
    config: LayoutConfig,
    positions: Dict[str, Vec3],
) -> None:
    """Spread nodes evenly around a ring with a sin(2*angle) vertical ripple."""
    count = len(nodes)
    for i, node in enumerate(nodes):
        angle = config.start_angle + TWO_PI * i / count
        y = height + math.sin(2 * angle) * config.vertical_spread
        positions[node.id] = _polar(radius, angle, y)


# ============================================================================
# Resource Sectors
# ============================================================================

def group_resources(nodes: List[Node]) -> List[Tuple[NodeRole, List[Node]]]:
    """Group resource nodes by role in sector order, keeping input order inside."""
    buckets: Dict[NodeRole, List[Node]] = {}
    for node in nodes:
        buckets.setdefault(role_for(node.type), []).append(node)
    return [(role, buckets[role]) for role in RESOURCE_GROUP_ORDER if role in buckets]


def allocate_sectors(sizes: List[int], config: LayoutConfig) -> List[Tuple[float, float]]:
    """Split the circle into consecutive sectors, one per group.

    Widths are proportional to group size over the angle left after the
    inter-group gaps. Groups whose share falls under ``min_sector_angle`` are
    raised to it and the remainder is re-shared among the others. When the
    minimum widths alone do not fit, every group gets an equal share.

    Returns:
        (start_angle, width) per group, in input order
    """
    count = len(sizes)
    if count == 0:
        return []

    available = max(TWO_PI - config.group_gap * count, 0.0)
    floor = config.min_sector_angle

    if floor * count >= available:
        widths = [available / count] * count
    else:
        floored: set = set()
        while True:
            remaining = available - floor * len(floored)
            free_total = sum(size for i, size in enumerate(sizes) if i not in floored)
            widths = [
                floor if i in floored else remaining * size / free_total
                for i, size in enumerate(sizes)
            ]
            newly_floored = {
                i for i, width in enumerate(widths) if i not in floored and width < floor
            }
            if not newly_floored:
                break
            floored |= newly_floored

    sectors = []
    angle = config.start_angle
    for width in widths:
        sectors.append((angle, width))
        angle += width + config.group_gap
    return sectors


def ring_capacity(usable_angle: float, radius: float, config: LayoutConfig) -> int:
    """How many nodes fit on one ring arc at the minimum spacing (at least 1)."""
    fit = int(usable_angle * radius // config.min_arc_spacing) + 1
    return max(1, min(config.max_per_ring, fit))


def ring_vertical_offset(ring: int, config: LayoutConfig) -> float:
    """Vertical offset of an overflow ring: 0, up, down, further up, ..."""
    if ring == 0:
        return 0.0
    magnitude = ((ring + 1) // 2) * config.ring_vertical_step
    return magnitude if ring % 2 == 1 else -magnitude


def _place_resources(nodes: List[Node], config: LayoutConfig, positions: Dict[str, Vec3]) -> None:
    groups = group_resources(nodes)
    if not groups:
        return

    sectors = allocate_sectors([len(members) for _, members in groups], config)
    base_y = 2 * config.layer_height

    for (role, members), (start, width) in zip(groups, sectors):
        inset = width * config.sector_inset
        usable = width - 2 * inset

        remaining = members
        ring = 0
        while remaining:
            radius = config.resource_radius + ring * config.ring_step
            capacity = ring_capacity(usable, radius, config)
            chunk, remaining = remaining[:capacity], remaining[capacity:]
            y = base_y + ring_vertical_offset(ring, config)

            for j, node in enumerate(chunk):
                if len(chunk) == 1:
                    angle = start + width / 2
                else:
                    angle = start + inset + usable * j / (len(chunk) - 1)
                positions[node.id] = _polar(radius, angle, y)
            ring += 1

        logger.debug(f"Placed {len(members)} {role.value} nodes on {ring} ring(s)")


# ============================================================================
# Connection Endpoints
# ============================================================================

def endpoint_positions(
    connection: Connection,
    positions: Mapping[str, Vec3],
    fallback: Vec3 = ORIGIN,
) -> Tuple[Vec3, Vec3]:
    """Resolve both ends of a connection.

    Missing endpoints resolve to their reserved anchor, or to ``fallback``,
    so dangling connections are still drawn.
    """
    def resolve(node_id: str) -> Vec3:
        if node_id in positions:
            return positions[node_id]
        return RESERVED_ANCHORS.get(node_id, fallback)

    return resolve(connection.source), resolve(connection.target)
