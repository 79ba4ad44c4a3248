"""Node search and type filtering with a caller-owned result cache."""

import logging
from collections import OrderedDict
from typing import Iterable, List, Optional

from orbitmap.core.schemas import Node, NodeType

logger = logging.getLogger(__name__)


class SearchCache:
    """Bounded memo of search results for one node list.

    Results belong to the node list they were computed for, compared by
    identity: searching a different list drops every entry. The oldest
    query is evicted once ``max_entries`` is exceeded.
    """

    def __init__(self, max_entries: int = 100):
        self.max_entries = max_entries
        self._nodes: Optional[List[Node]] = None
        self._entries: "OrderedDict[str, List[Node]]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()
        self._nodes = None

    def bind(self, nodes: List[Node]) -> None:
        """Attach the cache to a node list, dropping results of any other list."""
        if nodes is not self._nodes:
            self._entries.clear()
            self._nodes = nodes

    def get(self, query: str) -> Optional[List[Node]]:
        return self._entries.get(query)

    def put(self, query: str, results: List[Node]) -> None:
        self._entries[query] = results
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Evicted search cache entry '{evicted}'")


def _matches(node: Node, needle: str) -> bool:
    return (
        needle in node.title.lower()
        or needle in node.description.lower()
        or any(needle in tag.lower() for tag in node.tags)
    )


def search_nodes(nodes: List[Node], query: str, cache: Optional[SearchCache] = None) -> List[Node]:
    """Case-insensitive substring search over titles, descriptions and tags.

    A blank query returns every node. Results keep node order.
    """
    needle = (query or "").strip().lower()
    if not needle:
        return list(nodes)

    if cache is not None:
        cache.bind(nodes)
        cached = cache.get(needle)
        if cached is not None:
            return list(cached)

    results = [node for node in nodes if _matches(node, needle)]

    if cache is not None:
        cache.put(needle, results)
    return list(results)


def filter_nodes(
    nodes: List[Node],
    query: str = "",
    enabled_types: Optional[Iterable[NodeType]] = None,
    cache: Optional[SearchCache] = None,
) -> List[Node]:
    """Nodes to lay out: search by query first, then keep enabled types only.

    ``enabled_types`` of None keeps every type; an empty collection keeps none.
    """
    result = search_nodes(nodes, query, cache)
    if enabled_types is None:
        return result

    enabled = set(enabled_types)
    kept = [node for node in result if node.type in enabled]
    logger.debug(f"Type filter kept {len(kept)} of {len(result)} nodes")
    return kept
