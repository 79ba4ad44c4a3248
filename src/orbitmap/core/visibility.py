"""Connection visibility.

Decides which connections are drawn for the current hover/selection state.
The skeleton (center to hubs) is always visible; hovering a category reveals
its outgoing edges, hovering a leaf reveals only the edge from its owning
category, and selecting a node reveals everything touching it.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple

from orbitmap.core.registry import CENTER_ID, category_for, layer_for
from orbitmap.core.schemas import Connection, ConnectionKind, NodeLayer, NodeType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Focus:
    """Current interaction state: ids of the hovered and selected nodes."""
    hovered: Optional[str] = None
    selected: Optional[str] = None


def _layer_of(node_id: str, node_types: Mapping[str, NodeType]) -> Optional[NodeLayer]:
    node_type = node_types.get(node_id)
    if node_type is None:
        # The center may be referenced without a backing node
        return NodeLayer.CENTER if node_id == CENTER_ID else None
    return layer_for(node_type)


def connection_kind(connection: Connection, node_types: Mapping[str, NodeType]) -> ConnectionKind:
    """Classify a connection from the layers of its endpoints.

    center -> core/tool is skeleton, core -> tool is routing, anything
    else is a leaf edge.
    """
    source = _layer_of(connection.source, node_types)
    target = _layer_of(connection.target, node_types)

    if source == NodeLayer.CENTER and target in (NodeLayer.CORE, NodeLayer.TOOL):
        return ConnectionKind.SKELETON
    if source == NodeLayer.CORE and target == NodeLayer.TOOL:
        return ConnectionKind.ROUTING
    return ConnectionKind.LEAF


def visible_connections(
    connections: List[Connection],
    focus: Focus,
    node_types: Mapping[str, NodeType],
) -> List[Connection]:
    """Return the connections visible for a focus state.

    Rules, merged in order and de-duplicated by connection id:

    1. Every skeleton connection.
    2. Hovered category: every connection leaving it.
    3. Hovered leaf: only the connection from its owning category.
    4. Selected node: every connection touching it (for a category this
       includes its skeleton edge from the center).

    Args:
        connections: All connections of the graph
        focus: Hovered/selected node ids
        node_types: Node id to type, used to find layers and owners

    Returns:
        Visible connections, skeleton first, each id at most once
    """
    visible: Dict[str, Connection] = {}

    for conn in connections:
        if connection_kind(conn, node_types) == ConnectionKind.SKELETON:
            visible.setdefault(conn.id, conn)

    hovered = focus.hovered
    hovered_type = node_types.get(hovered) if hovered else None
    if hovered_type is not None:
        hovered_layer = layer_for(hovered_type)
        if hovered_layer == NodeLayer.TOOL:
            for conn in connections:
                if conn.source == hovered:
                    visible.setdefault(conn.id, conn)
        elif hovered_layer == NodeLayer.RESOURCE:
            owner = category_for(hovered_type)
            if owner:
                for conn in connections:
                    if conn.source == owner and conn.target == hovered:
                        visible.setdefault(conn.id, conn)

    selected = focus.selected
    if selected:
        for conn in connections:
            if conn.source == selected or conn.target == selected:
                visible.setdefault(conn.id, conn)

    return list(visible.values())


def focus_state(connection: Connection, focus: Focus) -> Tuple[bool, bool]:
    """Return (highlighted, dimmed) for a visible connection.

    A selection dims everything not touching it; a hover dims everything
    not touching it only while nothing is selected.
    """
    def touches(node_id: Optional[str]) -> bool:
        return node_id is not None and node_id in (connection.source, connection.target)

    hover_related = touches(focus.hovered)
    select_related = touches(focus.selected)
    highlighted = hover_related or select_related

    if focus.selected:
        dimmed = not select_related
    else:
        dimmed = focus.hovered is not None and not hover_related
    return highlighted, dimmed


class VisibilityCache:
    """Caller-owned memo for visible_connections.

    Entries are keyed by focus and belong to one connection list (and one
    node-type mapping), compared by identity. Passing a different list
    drops every entry; call invalidate() after mutating a list in place.
    """

    def __init__(self, max_entries: int = 256):
        self.max_entries = max_entries
        self._connections: Optional[List[Connection]] = None
        self._node_types: Optional[Mapping[str, NodeType]] = None
        self._entries: "OrderedDict[Focus, List[Connection]]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def invalidate(self) -> None:
        self._entries.clear()
        self._connections = None
        self._node_types = None

    def resolve(
        self,
        connections: List[Connection],
        focus: Focus,
        node_types: Mapping[str, NodeType],
    ) -> List[Connection]:
        if connections is not self._connections or node_types is not self._node_types:
            if self._entries:
                logger.debug("Connection set changed, dropping visibility cache")
            self.invalidate()
            self._connections = connections
            self._node_types = node_types

        cached = self._entries.get(focus)
        if cached is not None:
            self.hits += 1
            self._entries.move_to_end(focus)
            return list(cached)

        self.misses += 1
        result = visible_connections(connections, focus, node_types)
        self._entries[focus] = result
        if len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)
        return list(result)
