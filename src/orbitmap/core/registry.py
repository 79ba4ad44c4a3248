"""Type & color registry.

Maps every node category to its layer, role, shape, icon and semantic
colors. Lookups over the closed enums use exhaustive ``match`` statements and
the enum-keyed tables are checked for completeness at import time, so adding
a new category without registering it fails immediately.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Mapping, Optional, Type, assert_never

from orbitmap.core.schemas import (
    ORIGIN,
    ConnectionKind,
    Node,
    NodeLayer,
    NodeRole,
    NodeType,
    NodeVisual,
    PlacedNode,
    ShapeType,
    Vec3,
)

logger = logging.getLogger(__name__)


class RegistryError(Exception):
    """Raised when a registry table does not cover its enum."""
    pass


# ============================================================================
# Layer & Role
# ============================================================================

def layer_for(node_type: NodeType) -> NodeLayer:
    """Return the concentric layer a node type lives on."""
    match node_type:
        case NodeType.CLAUDE:
            return NodeLayer.CENTER
        case NodeType.ADAPTER:
            return NodeLayer.CORE
        case NodeType.CATEGORY:
            return NodeLayer.TOOL
        case (
            NodeType.SKILL | NodeType.MCP | NodeType.PLUGIN | NodeType.HOOK
            | NodeType.RULE | NodeType.AGENT | NodeType.MEMORY | NodeType.DOCUMENT
            | NodeType.PAGE | NodeType.API_ROUTE | NodeType.COMPONENT_SCENE
            | NodeType.COMPONENT_UI | NodeType.SERVICE | NodeType.STORE
            | NodeType.UTIL | NodeType.TYPE_DEF | NodeType.FOLDER
        ):
            return NodeLayer.RESOURCE
        case _:
            assert_never(node_type)


def role_for(node_type: NodeType) -> NodeRole:
    """Return the semantic role of a node type.

    Project structure types have no configuration role and are treated
    as documents.
    """
    match node_type:
        case NodeType.CLAUDE:
            return NodeRole.CLAUDE
        case NodeType.ADAPTER:
            return NodeRole.ADAPTER
        case NodeType.CATEGORY:
            return NodeRole.CATEGORY
        case NodeType.SKILL:
            return NodeRole.SKILL
        case NodeType.MCP:
            return NodeRole.MCP
        case NodeType.PLUGIN:
            return NodeRole.PLUGIN
        case NodeType.HOOK:
            return NodeRole.HOOK
        case NodeType.RULE:
            return NodeRole.RULE
        case NodeType.AGENT:
            return NodeRole.AGENT
        case NodeType.MEMORY:
            return NodeRole.MEMORY
        case (
            NodeType.DOCUMENT | NodeType.PAGE | NodeType.API_ROUTE
            | NodeType.COMPONENT_SCENE | NodeType.COMPONENT_UI | NodeType.SERVICE
            | NodeType.STORE | NodeType.UTIL | NodeType.TYPE_DEF | NodeType.FOLDER
        ):
            return NodeRole.DOCUMENT
        case _:
            assert_never(node_type)


# ============================================================================
# Categories
# ============================================================================

CENTER_ID = "center"
ROOT_ID = "__root__"


@dataclass(frozen=True)
class CategoryDefinition:
    """A tool-layer category hub owning one kind of configuration leaf."""
    id: str
    title: str
    role: NodeRole
    color: str
    icon: str


# Fixed order: also the angular order of the hubs around the center.
CATEGORIES: List[CategoryDefinition] = [
    CategoryDefinition("category-skills", "Skills", NodeRole.SKILL, "#10B981", "zap"),
    CategoryDefinition("category-mcp", "MCP Servers", NodeRole.MCP, "#06B6D4", "server"),
    CategoryDefinition("category-plugins", "Plugins", NodeRole.PLUGIN, "#F59E0B", "puzzle"),
    CategoryDefinition("category-rules", "Rules", NodeRole.RULE, "#8B5CF6", "file-text"),
    CategoryDefinition("category-agents", "Agents", NodeRole.AGENT, "#EC4899", "users"),
    CategoryDefinition("category-memory", "Memory", NodeRole.MEMORY, "#14B8A6", "database"),
    CategoryDefinition("category-hooks", "Hook Items", NodeRole.HOOK, "#EF4444", "anchor"),
]

CATEGORY_BY_ROLE: Dict[NodeRole, CategoryDefinition] = {c.role: c for c in CATEGORIES}


def category_for(node_type: NodeType) -> Optional[str]:
    """Return the id of the category hub that owns a leaf type, if any."""
    definition = CATEGORY_BY_ROLE.get(role_for(node_type))
    return definition.id if definition else None


# ============================================================================
# Shapes & Icons
# ============================================================================

TYPE_SHAPES: Dict[NodeType, ShapeType] = {
    NodeType.CLAUDE: ShapeType.SPHERE,
    NodeType.ADAPTER: ShapeType.OCTAHEDRON,
    NodeType.CATEGORY: ShapeType.CUBE,
    NodeType.SKILL: ShapeType.TORUS,
    NodeType.MCP: ShapeType.CYLINDER,
    NodeType.PLUGIN: ShapeType.DODECAHEDRON,
    NodeType.HOOK: ShapeType.CONE,
    NodeType.RULE: ShapeType.BOX,
    NodeType.AGENT: ShapeType.ICOSAHEDRON,
    NodeType.MEMORY: ShapeType.SPHERE,
    NodeType.DOCUMENT: ShapeType.CUBE,
    NodeType.PAGE: ShapeType.CUBE,
    NodeType.API_ROUTE: ShapeType.CYLINDER,
    NodeType.COMPONENT_SCENE: ShapeType.OCTAHEDRON,
    NodeType.COMPONENT_UI: ShapeType.SPHERE,
    NodeType.SERVICE: ShapeType.TORUS,
    NodeType.STORE: ShapeType.DODECAHEDRON,
    NodeType.UTIL: ShapeType.SPHERE,
    NodeType.TYPE_DEF: ShapeType.OCTAHEDRON,
    NodeType.FOLDER: ShapeType.CUBE,
}

ROLE_SHAPES: Dict[NodeRole, ShapeType] = {
    NodeRole.CLAUDE: ShapeType.DODECAHEDRON,
    NodeRole.ADAPTER: ShapeType.OCTAHEDRON,
    NodeRole.CATEGORY: ShapeType.OCTAHEDRON,
    NodeRole.SKILL: ShapeType.CUBE,
    NodeRole.MCP: ShapeType.CYLINDER,
    NodeRole.PLUGIN: ShapeType.TORUS,
    NodeRole.HOOK: ShapeType.CONE,
    NodeRole.RULE: ShapeType.BOX,
    NodeRole.AGENT: ShapeType.ICOSAHEDRON,
    NodeRole.MEMORY: ShapeType.SPHERE,
    NodeRole.DOCUMENT: ShapeType.SPHERE,
}

ROLE_ICONS: Dict[NodeRole, str] = {
    NodeRole.CLAUDE: "🤖",
    NodeRole.ADAPTER: "🔌",
    NodeRole.CATEGORY: "📁",
    NodeRole.SKILL: "⚡",
    NodeRole.MCP: "🌐",
    NodeRole.PLUGIN: "🧩",
    NodeRole.HOOK: "🪝",
    NodeRole.RULE: "📋",
    NodeRole.AGENT: "🤖",
    NodeRole.MEMORY: "💾",
    NodeRole.DOCUMENT: "📄",
}

PROJECT_TYPES = frozenset([
    NodeType.PAGE,
    NodeType.API_ROUTE,
    NodeType.COMPONENT_SCENE,
    NodeType.COMPONENT_UI,
    NodeType.SERVICE,
    NodeType.STORE,
    NodeType.UTIL,
    NodeType.TYPE_DEF,
    NodeType.FOLDER,
])

FILE_TYPE_ICONS: Dict[NodeType, str] = {
    NodeType.PAGE: "📄",
    NodeType.API_ROUTE: "🔌",
    NodeType.COMPONENT_SCENE: "🎬",
    NodeType.COMPONENT_UI: "🎨",
    NodeType.SERVICE: "⚙️",
    NodeType.STORE: "📦",
    NodeType.UTIL: "🔧",
    NodeType.TYPE_DEF: "📝",
    NodeType.FOLDER: "📁",
}

LAYER_SIZES: Dict[NodeLayer, float] = {
    NodeLayer.CENTER: 2.0,
    NodeLayer.CORE: 1.5,
    NodeLayer.TOOL: 1.2,
    NodeLayer.RESOURCE: 0.8,
}

DISABLED_COLOR = "#666666"
DISABLED_SIZE = 0.5


# ============================================================================
# Colors
# ============================================================================

@dataclass(frozen=True)
class SemanticColor:
    """Primary/secondary/glow triple with an optional opacity."""
    primary: str
    secondary: str
    glow: str
    opacity: Optional[float] = None


@dataclass(frozen=True)
class ColorScheme(SemanticColor):
    """Semantic color extended with interaction states."""
    hover: str = ""
    selected: str = ""
    dim: str = ""


SEMANTIC_COLORS: Dict[str, SemanticColor] = {
    "llm": SemanticColor("#5B8EFF", "#4A5FC1", "#7AA2FF"),
    "infra": SemanticColor("#00FFFF", "#00BFA5", "#4DD0E1"),
    "review": SemanticColor("#FFB74D", "#FFA726", "#FFCC80"),
    "automation": SemanticColor("#AB47BC", "#8E24AA", "#CE93D8"),
    "security": SemanticColor("#EF5350", "#E53935", "#FF8A80"),
    "documentation": SemanticColor("#66BB6A", "#4CAF50", "#A5D6A7"),
    "frontend": SemanticColor("#EC407A", "#D81B60", "#F8BBD0"),
    "backend": SemanticColor("#42A5F5", "#1E88E5", "#90CAF9"),
    "data": SemanticColor("#26A69A", "#00897B", "#80CBC4"),
    "experimental": SemanticColor("#78909C", "#546E7A", "#90A4AE", opacity=0.6),
    "plugin": SemanticColor("#FFA726", "#FF9800", "#FFCC80"),
    "skill": SemanticColor("#7E57C2", "#5E35B1", "#B39DDB"),
    "mcp": SemanticColor("#29B6F6", "#039BE5", "#81D4FA"),
    "category": SemanticColor("#00FFFF", "#00BCD4", "#80DEEA"),
    "claude": SemanticColor("#0066FF", "#0044CC", "#4499FF"),
    "adapter": SemanticColor("#00FFFF", "#00BFA5", "#4DD0E1"),
    "hook": SemanticColor("#EF4444", "#DC2626", "#F87171"),
    "rule": SemanticColor("#8B5CF6", "#7C3AED", "#A78BFA"),
    "agent": SemanticColor("#EC4899", "#DB2777", "#F472B6"),
    "memory": SemanticColor("#14B8A6", "#0D9488", "#2DD4BF"),
    "default": SemanticColor("#9E9E9E", "#757575", "#BDBDBD"),
    # Project structure
    "page": SemanticColor("#2196F3", "#1976D2", "#64B5F6"),
    "api-route": SemanticColor("#4CAF50", "#388E3C", "#81C784"),
    "component-scene": SemanticColor("#9C27B0", "#7B1FA2", "#BA68C8"),
    "component-ui": SemanticColor("#E91E63", "#C2185B", "#F06292"),
    "service": SemanticColor("#FF9800", "#F57C00", "#FFB74D"),
    "store": SemanticColor("#F44336", "#D32F2F", "#EF5350"),
    "util": SemanticColor("#FFEB3B", "#FBC02D", "#FFF176"),
    "type-def": SemanticColor("#607D8B", "#455A64", "#78909C"),
    "folder": SemanticColor("#BDBDBD", "#9E9E9E", "#E0E0E0", opacity=0.7),
    "document": SemanticColor("#3B82F6", "#2563EB", "#93C5FD"),
}

LAYER_COLORS: Dict[NodeLayer, SemanticColor] = {
    NodeLayer.CENTER: SEMANTIC_COLORS["claude"],
    NodeLayer.CORE: SemanticColor("#00FFFF", "#00BCD4", "#80FFFF"),
    NodeLayer.TOOL: SemanticColor("#FF00FF", "#C20084", "#FF80FF"),
    NodeLayer.RESOURCE: SemanticColor("#FFA500", "#FF8C00", "#FFD280"),
}

# invoke / fetch / provide
CONNECTION_COLORS: Dict[ConnectionKind, str] = {
    ConnectionKind.SKELETON: "#00FFFF",
    ConnectionKind.ROUTING: "#FF00FF",
    ConnectionKind.LEAF: "#FFA500",
}

DEFAULT_CONNECTION_COLOR = "#808080"

# Checked in order; first keyword hit wins.
_TYPE_KEYWORDS = [
    (("llm", "prompt", "ai"), "llm"),
    (("infra", "tool", "devops"), "infra"),
    (("review", "qa", "test"), "review"),
    (("automat", "workflow", "cicd"), "automation"),
    (("security", "audit", "scan"), "security"),
    (("doc", "knowledge", "guide"), "documentation"),
    (("frontend", "ui", "react"), "frontend"),
    (("backend", "api", "server"), "backend"),
    (("data", "analytics", "database"), "data"),
    (("experiment", "beta", "draft"), "experimental"),
    (("plugin",), "plugin"),
    (("skill",), "skill"),
    (("mcp",), "mcp"),
    (("category",), "category"),
]

_NAME_KEYWORDS = [
    (("prompt", "llm"), "llm"),
    (("deploy", "infra"), "infra"),
    (("review", "test"), "review"),
    (("auto", "ci"), "automation"),
    (("security", "auth"), "security"),
    (("doc", "guide"), "documentation"),
    (("frontend", "ui"), "frontend"),
    (("backend", "api"), "backend"),
    (("data", "sql"), "data"),
]


def _match_keywords(text: str, table) -> Optional[SemanticColor]:
    for keywords, key in table:
        if any(kw in text for kw in keywords):
            return SEMANTIC_COLORS[key]
    return None


def color_for_type(type_name: Optional[str]) -> SemanticColor:
    """Semantic color for a type name: exact match, then keyword match, then default."""
    if not type_name:
        return SEMANTIC_COLORS["default"]

    lowered = type_name.lower()
    if lowered in SEMANTIC_COLORS:
        return SEMANTIC_COLORS[lowered]

    return _match_keywords(lowered, _TYPE_KEYWORDS) or SEMANTIC_COLORS["default"]


def color_for_name(name: Optional[str]) -> SemanticColor:
    """Fallback color derived from keywords in a node title."""
    if not name:
        return SEMANTIC_COLORS["default"]
    return _match_keywords(name.lower(), _NAME_KEYWORDS) or SEMANTIC_COLORS["default"]


def color_for_layer(layer: NodeLayer) -> SemanticColor:
    return LAYER_COLORS[layer]


def full_color_scheme(type_name: Optional[str]) -> ColorScheme:
    """Color for a type plus its hover, selected and dim variants."""
    base = color_for_type(type_name)
    return ColorScheme(
        primary=base.primary,
        secondary=base.secondary,
        glow=base.glow,
        opacity=base.opacity,
        hover=base.glow,
        selected=base.secondary,
        dim=base.primary,
    )


def connection_color(kind: Optional[ConnectionKind]) -> str:
    if kind is None:
        return DEFAULT_CONNECTION_COLOR
    return CONNECTION_COLORS[kind]


@dataclass(frozen=True)
class ConnectionStyle:
    color: str
    width: float
    opacity: float
    dashed: bool


def connection_style(
    kind: ConnectionKind,
    highlighted: bool = False,
    dimmed: bool = False,
) -> ConnectionStyle:
    """Line style for a connection under the current focus state.

    Dimming wins over highlighting; skeleton and routing lines are drawn
    heavier than leaf lines at rest.
    """
    structural = kind in (ConnectionKind.SKELETON, ConnectionKind.ROUTING)
    if dimmed:
        width, opacity = 0.3, 0.06
    elif highlighted:
        width, opacity = 2.0, 0.85
    elif structural:
        width, opacity = 1.2, 0.5
    else:
        width, opacity = 0.8, 0.3

    return ConnectionStyle(
        color=connection_color(kind),
        width=width,
        opacity=opacity,
        dashed=kind == ConnectionKind.ROUTING,
    )


# ============================================================================
# Node Styling
# ============================================================================

def style_node(node: Node, position: Vec3) -> PlacedNode:
    """Attach a position, layer, role and derived visual to a node."""
    layer = layer_for(node.type)
    role = role_for(node.type)

    if node.type in PROJECT_TYPES:
        # Project files are sized and colored by importance and file type
        visual = NodeVisual(
            color=color_for_type(node.type.value).primary,
            size=0.5 + node.importance * 0.5,
            shape=TYPE_SHAPES[node.type],
            glow=node.importance > 0.7,
            icon=FILE_TYPE_ICONS[node.type],
        )
    elif node.enabled:
        visual = NodeVisual(
            color=color_for_layer(layer).primary,
            size=LAYER_SIZES[layer],
            shape=ROLE_SHAPES[role],
            glow=layer != NodeLayer.RESOURCE,
            icon=ROLE_ICONS[role],
        )
    else:
        visual = NodeVisual(
            color=DISABLED_COLOR,
            size=min(LAYER_SIZES[layer], DISABLED_SIZE),
            shape=ROLE_SHAPES[role],
            glow=False,
            icon=ROLE_ICONS[role],
        )

    return PlacedNode(
        **node.model_dump(),
        position=position,
        layer=layer,
        role=role,
        visual=visual,
    )


def style_nodes(nodes: List[Node], positions: Mapping[str, Vec3]) -> List[PlacedNode]:
    """Style every node; nodes the layout did not place sit at the origin."""
    placed = []
    for node in nodes:
        position = positions.get(node.id)
        if position is None:
            logger.debug(f"No position for node {node.id}, using origin")
            position = ORIGIN
        placed.append(style_node(node, position))
    return placed


# ============================================================================
# Completeness
# ============================================================================

def _require_complete(name: str, table: Mapping, enum_type: Type[Enum]) -> None:
    missing = [member.value for member in enum_type if member not in table]
    if missing:
        raise RegistryError(f"{name} is missing entries for: {', '.join(missing)}")


_require_complete("TYPE_SHAPES", TYPE_SHAPES, NodeType)
_require_complete("ROLE_SHAPES", ROLE_SHAPES, NodeRole)
_require_complete("ROLE_ICONS", ROLE_ICONS, NodeRole)
_require_complete("LAYER_SIZES", LAYER_SIZES, NodeLayer)
_require_complete("LAYER_COLORS", LAYER_COLORS, NodeLayer)
_require_complete("CONNECTION_COLORS", CONNECTION_COLORS, ConnectionKind)
_require_complete("SEMANTIC_COLORS", SEMANTIC_COLORS, NodeType)

if set(FILE_TYPE_ICONS) != PROJECT_TYPES:
    raise RegistryError("FILE_TYPE_ICONS must cover exactly the project structure types")
