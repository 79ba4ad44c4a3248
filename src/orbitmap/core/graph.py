"""Graph builders.

Turns host-provided data into nodes and connections:

1. Configuration graph: a ConfigSnapshot becomes a center hub, one category
   hub per configuration kind and one leaf per configured item. With an
   adapter, the center routes to the categories through a core node.

2. Project graph: source file contents (keyed by project-relative path)
   become ProjectFiles with resolved imports, reverse imports and an
   importance score, then nodes plus import connections.

Reading files from disk is left to the caller.
"""

import logging
import posixpath
import re
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

from orbitmap.core.registry import CATEGORIES, CENTER_ID, ROOT_ID, CategoryDefinition
from orbitmap.core.schemas import (
    Connection,
    ConnectionType,
    ConfigSnapshot,
    GraphData,
    Node,
    NodeRole,
    NodeTier,
    NodeType,
    ProjectFile,
)

logger = logging.getLogger(__name__)

ADAPTER_ID = "adapter-config"


class _ConnectionIds:
    """Hands out unique connection ids of the form source->target."""

    def __init__(self):
        self._seen: Dict[str, int] = {}

    def next(self, source: str, target: str) -> str:
        base = f"{source}->{target}"
        count = self._seen.get(base, 0)
        self._seen[base] = count + 1
        return base if count == 0 else f"{base}#{count}"


# ============================================================================
# Configuration Graph
# ============================================================================

def _config_items(snapshot: ConfigSnapshot, role: NodeRole) -> List[Tuple[str, str, bool, str]]:
    """(name, description, enabled, path) for every item of one kind."""
    if role == NodeRole.SKILL:
        return [(s.name, s.description or "", s.enabled, s.path or "") for s in snapshot.skills]
    if role == NodeRole.MCP:
        return [(m.name, m.description or "", m.enabled, "") for m in snapshot.mcps]
    if role == NodeRole.PLUGIN:
        return [(p.name, p.description or "", p.enabled, p.path or "") for p in snapshot.plugins]
    if role == NodeRole.HOOK:
        return [(h.name, f"{h.type} hook", h.enabled, "") for h in snapshot.hooks]
    if role == NodeRole.RULE:
        return [(r.name, r.description or "", r.enabled, r.path) for r in snapshot.rules]
    if role == NodeRole.AGENT:
        return [
            (a.name, a.description or a.purpose or "", a.enabled, a.path)
            for a in snapshot.agents
        ]
    if role == NodeRole.MEMORY:
        return [(m.name, m.description or "", m.enabled, m.path) for m in snapshot.memory]
    return []


def _category_node(category: CategoryDefinition) -> Node:
    return Node(
        id=category.id,
        type=NodeType.CATEGORY,
        title=category.title,
        description=f"{category.title} configuration",
        tags=["category", "claude"],
        importance=0.9,
    )


def build_config_graph(snapshot: ConfigSnapshot, include_adapter: bool = False) -> GraphData:
    """Build the layered configuration graph.

    Args:
        snapshot: Configuration read by the host
        include_adapter: Route center -> adapter -> categories instead of
            linking categories straight to the center

    Returns:
        GraphData with the center, the category hubs (always all seven,
        even when empty), one leaf per item and their connections
    """
    ids = _ConnectionIds()
    nodes: List[Node] = []
    connections: List[Connection] = []

    nodes.append(Node(
        id=CENTER_ID,
        type=NodeType.CLAUDE,
        title="Claude Code",
        description=f"Model: {snapshot.model or 'unknown'}",
        file_path=snapshot.knowledge_base_path,
        tags=["center", "claude", "system"],
        importance=1.0,
    ))

    hub = CENTER_ID
    if include_adapter:
        nodes.append(Node(
            id=ADAPTER_ID,
            type=NodeType.ADAPTER,
            title="Config Adapter",
            description="Reads the configuration directory",
            tags=["adapter"],
            importance=0.95,
        ))
        connections.append(Connection(
            id=ids.next(CENTER_ID, ADAPTER_ID),
            source=CENTER_ID,
            target=ADAPTER_ID,
            type=ConnectionType.INVOKE,
            strength=1.0,
            label="invoke",
        ))
        hub = ADAPTER_ID

    for category in CATEGORIES:
        nodes.append(_category_node(category))
        connections.append(Connection(
            id=ids.next(hub, category.id),
            source=hub,
            target=category.id,
            type=ConnectionType.ROUTE if include_adapter else ConnectionType.DEPENDENCY,
            strength=0.7 if include_adapter else 0.9,
            label="route",
        ))

    for category in CATEGORIES:
        node_type = NodeType(category.role.value)
        for name, description, enabled, path in _config_items(snapshot, category.role):
            node_id = f"{node_type.value}-{name}"
            nodes.append(Node(
                id=node_id,
                type=node_type,
                title=name,
                description=description or f"{node_type.value}: {name}",
                file_path=path,
                tags=[node_type.value, "claude"],
                importance=0.7 if enabled else 0.3,
                enabled=enabled,
            ))
            connections.append(Connection(
                id=ids.next(category.id, node_id),
                source=category.id,
                target=node_id,
                type=ConnectionType.PARENT_CHILD,
                strength=0.5,
            ))

    logger.info(f"Built configuration graph: {len(nodes)} nodes, {len(connections)} connections")
    return GraphData(nodes=nodes, connections=connections)


# ============================================================================
# Project Files
# ============================================================================

SOURCE_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx")

SKIP_PATTERNS = (
    "node_modules", ".next", ".git", "dist", "build", "out", "coverage", "__tests__",
)

TYPE_WEIGHTS: Dict[NodeType, float] = {
    NodeType.STORE: 1.0,
    NodeType.SERVICE: 0.9,
    NodeType.PAGE: 0.8,
    NodeType.API_ROUTE: 0.8,
    NodeType.COMPONENT_SCENE: 0.7,
    NodeType.COMPONENT_UI: 0.6,
    NodeType.UTIL: 0.5,
    NodeType.TYPE_DEF: 0.4,
    NodeType.DOCUMENT: 0.3,
}
DEFAULT_TYPE_WEIGHT = 0.3

TYPE_DESCRIPTIONS: Dict[NodeType, str] = {
    NodeType.PAGE: "Page",
    NodeType.API_ROUTE: "API route",
    NodeType.COMPONENT_SCENE: "Scene component",
    NodeType.COMPONENT_UI: "UI component",
    NodeType.SERVICE: "Service",
    NodeType.STORE: "State store",
    NodeType.UTIL: "Utility",
    NodeType.TYPE_DEF: "Type definitions",
}

_IMPORT_PATTERN = re.compile(r"""import\s+(?:.*?\s+from\s+)?['"](.+?)['"]""")


def should_skip(relative_path: str) -> bool:
    return any(pattern in relative_path for pattern in SKIP_PATTERNS)


def classify_file_type(relative_path: str) -> NodeType:
    """Infer a project node type from a project-relative path."""
    path = "/" + relative_path.replace("\\", "/").lstrip("/")

    if "/app/" in path and (path.endswith("page.tsx") or path.endswith("layout.tsx")):
        return NodeType.PAGE
    if "/app/api/" in path or path.endswith("route.ts"):
        return NodeType.API_ROUTE
    if "/components/scene/" in path:
        return NodeType.COMPONENT_SCENE
    if "/components/ui" in path:
        return NodeType.COMPONENT_UI
    if "/services/" in path:
        return NodeType.SERVICE
    if "/stores/" in path:
        return NodeType.STORE
    if "/utils/" in path:
        return NodeType.UTIL
    if "/types/" in path:
        return NodeType.TYPE_DEF
    return NodeType.DOCUMENT


def file_category(relative_path: str) -> str:
    """First path segment, or 'root' for top-level files."""
    parts = relative_path.replace("\\", "/").strip("/").split("/")
    return parts[0] if len(parts) > 1 else "root"


def describe_file(node_type: NodeType, relative_path: str) -> str:
    return f"{TYPE_DESCRIPTIONS.get(node_type, 'Project file')} - {relative_path}"


def _resolve_import(spec: str, current_path: str, known: Set[str]) -> Optional[str]:
    if spec.startswith("@/"):
        base = spec[2:]
    else:
        base = posixpath.normpath(posixpath.join(posixpath.dirname(current_path), spec))

    for ext in SOURCE_EXTENSIONS:
        if base + ext in known:
            return base + ext
    for ext in SOURCE_EXTENSIONS:
        index_path = posixpath.join(base, "index" + ext)
        if index_path in known:
            return index_path
    return None


def parse_imports(content: str, current_path: str, known_paths: Iterable[str]) -> List[str]:
    """Resolve relative and ``@/`` imports of a source file to known file ids.

    Package imports and imports that do not resolve to a known file are
    ignored.
    """
    known = set(known_paths)
    imports = []
    for match in _IMPORT_PATTERN.finditer(content):
        spec = match.group(1)
        if not (spec.startswith("./") or spec.startswith("../") or spec.startswith("@/")):
            continue
        resolved = _resolve_import(spec, current_path, known)
        if resolved and resolved not in imports:
            imports.append(resolved)
    return imports


def link_exported_by(files: List[ProjectFile]) -> List[ProjectFile]:
    """Return copies of the files with ``exported_by`` filled from imports."""
    importers: Dict[str, List[str]] = {f.id: [] for f in files}
    for file in files:
        for imported in file.imports:
            if imported in importers:
                importers[imported].append(file.id)
    return [f.model_copy(update={"exported_by": importers[f.id]}) for f in files]


def compute_importance(files: List[ProjectFile]) -> List[ProjectFile]:
    """Return copies of the files with an importance score.

    importance = 0.5 * reverse-import share + 0.2 * size share
               + 0.3 * type weight, capped at 1.0
    """
    if not files:
        return []

    max_importers = max(max(len(f.exported_by) for f in files), 1)
    max_lines = max(max(f.lines for f in files), 1)

    scored = []
    for file in files:
        dependency_score = len(file.exported_by) / max_importers
        size_score = min(file.lines / max_lines, 1.0)
        type_weight = TYPE_WEIGHTS.get(file.type, DEFAULT_TYPE_WEIGHT)
        importance = min(dependency_score * 0.5 + size_score * 0.2 + type_weight * 0.3, 1.0)
        scored.append(file.model_copy(update={"importance": importance}))
    return scored


def build_project_files(sources: Mapping[str, str], root: str = "") -> List[ProjectFile]:
    """Analyze project sources keyed by project-relative path.

    Non-source files and skipped directories are dropped; the rest are
    typed, categorized, linked by import and scored.
    """
    paths = [
        p for p in sources
        if p.endswith(SOURCE_EXTENSIONS) and not should_skip(p)
    ]
    known = set(paths)

    files = []
    for path in paths:
        content = sources[path]
        node_type = classify_file_type(path)
        files.append(ProjectFile(
            id=path,
            path=posixpath.join(root, path) if root else path,
            name=posixpath.basename(path),
            type=node_type,
            category=file_category(path),
            lines=len(content.split("\n")),
            imports=parse_imports(content, path, known),
            description=describe_file(node_type, path),
        ))

    files = compute_importance(link_exported_by(files))
    logger.info(f"Analyzed {len(files)} project files")
    return files


def tier_for(importance: float) -> NodeTier:
    if importance > 0.7:
        return NodeTier.CORE_SKILL
    if importance > 0.4:
        return NodeTier.SKILL
    return NodeTier.ITEM


def build_project_graph(files: List[ProjectFile]) -> GraphData:
    """Nodes for the virtual root and every file, plus one connection per import."""
    ids = _ConnectionIds()
    nodes = [Node(
        id=ROOT_ID,
        type=NodeType.FOLDER,
        title="src/",
        description="Project root",
        file_path="src/",
        tags=["root"],
        importance=1.0,
        tier=NodeTier.CORE_SKILL,
    )]
    connections = []

    known = {f.id for f in files}
    for file in files:
        nodes.append(Node(
            id=file.id,
            type=file.type,
            title=file.name,
            description=file.description,
            file_path=file.path,
            tags=[file.type.value, file.category],
            links=list(file.imports),
            importance=file.importance,
            group=file.category,
            tier=tier_for(file.importance),
        ))
        for imported in file.imports:
            if imported not in known:
                logger.debug(f"Import target {imported} of {file.id} is not a project file")
            connections.append(Connection(
                id=ids.next(file.id, imported),
                source=file.id,
                target=imported,
                type=ConnectionType.IMPORT,
                strength=0.8,
                label="imports",
            ))

    return GraphData(nodes=nodes, connections=connections)
