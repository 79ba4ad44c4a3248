"""
Pydantic schemas for orbitmap.

This module defines the closed enumerations and the value objects shared by
the layout engine, the visibility resolver, the recommender and the workspace
store. Positions are never stored on a Node: the layout returns them.
"""

import time
import uuid
from enum import Enum
from typing import Optional, List, Dict, Any, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator


Vec3 = Tuple[float, float, float]

ORIGIN: Vec3 = (0.0, 0.0, 0.0)


# Enums

class NodeType(str, Enum):
    """Closed set of node categories."""
    CLAUDE = "claude"
    ADAPTER = "adapter"
    CATEGORY = "category"
    # Configuration leaves
    SKILL = "skill"
    MCP = "mcp"
    PLUGIN = "plugin"
    HOOK = "hook"
    RULE = "rule"
    AGENT = "agent"
    MEMORY = "memory"
    DOCUMENT = "document"
    # Project structure
    PAGE = "page"
    API_ROUTE = "api-route"
    COMPONENT_SCENE = "component-scene"
    COMPONENT_UI = "component-ui"
    SERVICE = "service"
    STORE = "store"
    UTIL = "util"
    TYPE_DEF = "type-def"
    FOLDER = "folder"


class NodeLayer(str, Enum):
    """Concentric layer a node is placed on."""
    CENTER = "center"
    CORE = "core"
    TOOL = "tool"
    RESOURCE = "resource"


class NodeRole(str, Enum):
    """Semantic role used for grouping, shapes and icons."""
    CLAUDE = "claude"
    ADAPTER = "adapter"
    CATEGORY = "category"
    SKILL = "skill"
    MCP = "mcp"
    PLUGIN = "plugin"
    HOOK = "hook"
    RULE = "rule"
    AGENT = "agent"
    MEMORY = "memory"
    DOCUMENT = "document"


class ShapeType(str, Enum):
    """Geometric primitive used to render a node."""
    SPHERE = "sphere"
    CUBE = "cube"
    CYLINDER = "cylinder"
    OCTAHEDRON = "octahedron"
    TORUS = "torus"
    DODECAHEDRON = "dodecahedron"
    CONE = "cone"
    BOX = "box"
    ICOSAHEDRON = "icosahedron"


class NodeTier(str, Enum):
    """Importance tier of a project file node."""
    CORE_SKILL = "CoreSkill"
    SKILL = "Skill"
    ITEM = "Item"


class ConnectionType(str, Enum):
    """Relationship carried by a connection."""
    REFERENCE = "reference"
    DEPENDENCY = "dependency"
    RELATED = "related"
    PARENT_CHILD = "parent-child"
    IMPORT = "import"
    CONTAINS = "contains"
    INVOKE = "invoke"
    ROUTE = "route"


class ConnectionKind(str, Enum):
    """Structural kind of a connection, derived from its endpoint layers."""
    SKELETON = "skeleton"
    ROUTING = "routing"
    LEAF = "leaf"


class ModuleType(str, Enum):
    """Type of an attachable workspace module."""
    SKILL = "skill"
    MCP = "mcp"
    PLUGIN = "plugin"
    HOOK = "hook"
    RULE = "rule"
    AGENT = "agent"
    MEMORY = "memory"


class SessionStatus(str, Enum):
    """Lifecycle status of a workspace session."""
    DRAFTING = "drafting"
    READY = "ready"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class MessageRole(str, Enum):
    USER = "user"
    SYSTEM = "system"


class ActionType(str, Enum):
    """Kind of action suggested by a session analysis."""
    ADD_MODULES = "add-modules"
    CHANGE_STATUS = "change-status"
    REFINE_REQUIREMENT = "refine-requirement"
    INFO = "info"


# Graph

class Node(BaseModel):
    """A visualized entity. Carries no position."""

    id: str = Field(..., description="Unique node identifier")
    type: NodeType = Field(..., description="Closed node category")
    title: str = Field("", description="Display title")
    description: str = Field("", description="Free-text description")
    file_path: str = Field("", description="Backing file, if any")
    tags: List[str] = Field(default_factory=list, description="Free-form tags")
    links: List[str] = Field(default_factory=list, description="Related node ids")
    importance: float = Field(0.5, ge=0.0, le=1.0, description="Importance (0.0-1.0)")
    enabled: bool = Field(True, description="Disabled nodes are dimmed, never hidden")
    group: Optional[str] = Field(None, description="Directory/category for project files")
    tier: Optional[NodeTier] = Field(None, description="Importance tier for project files")


class NodeVisual(BaseModel):
    """Derived rendering attributes of a node."""

    color: str
    size: float
    shape: ShapeType
    glow: bool
    icon: str


class PlacedNode(Node):
    """A node with its layout position and derived visual attributes."""

    position: Vec3 = Field(ORIGIN, description="Position computed by the layout")
    layer: NodeLayer
    role: NodeRole
    visual: NodeVisual


class Connection(BaseModel):
    """Directed edge between two node ids. Kind is derived, never stored."""

    id: str = Field(..., description="Unique connection identifier")
    source: str = Field(..., description="Source node id")
    target: str = Field(..., description="Target node id")
    type: ConnectionType = Field(ConnectionType.REFERENCE, description="Relationship type")
    strength: float = Field(0.5, ge=0.0, le=1.0, description="Advisory strength")
    label: Optional[str] = Field(None, description="Optional display label")


class GraphData(BaseModel):
    """Nodes and connections produced by a graph builder."""

    nodes: List[Node] = Field(default_factory=list)
    connections: List[Connection] = Field(default_factory=list)


# Project structure

class ProjectFile(BaseModel):
    """A source file of a scanned project."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Project-relative path, used as node id")
    path: str = Field("", description="Absolute path on disk")
    name: str = Field("", description="Base name")
    type: NodeType = Field(NodeType.DOCUMENT, description="Project structure node type")
    category: str = Field("root", description="First path segment")
    lines: int = Field(0, ge=0, description="Line count")
    imports: List[str] = Field(default_factory=list, description="Resolved imported file ids")
    exported_by: List[str] = Field(
        default_factory=list, alias="exportedBy", description="Ids of files importing this one"
    )
    importance: float = Field(0.0, ge=0.0, le=1.0)
    description: str = ""


# Configuration snapshot

class SkillRecord(BaseModel):
    id: Optional[str] = None
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None
    path: Optional[str] = None
    enabled: bool = True


class McpRecord(BaseModel):
    name: str
    description: Optional[str] = None
    type: Optional[str] = None
    command: Optional[str] = None
    args: List[str] = Field(default_factory=list)
    env: Dict[str, str] = Field(default_factory=dict)
    source: Optional[str] = None
    enabled: bool = True


class PluginRecord(BaseModel):
    name: str
    version: Optional[str] = None
    description: Optional[str] = None
    marketplace: Optional[str] = None
    path: Optional[str] = None
    enabled: bool = True
    config: Dict[str, Any] = Field(default_factory=dict)


class HookRecord(BaseModel):
    name: str
    type: str = Field(..., description="Hook event, e.g. PreToolUse")
    matcher: Optional[str] = None
    command: Optional[str] = None
    timeout: Optional[int] = None
    enabled: bool = True


class RuleRecord(BaseModel):
    name: str
    description: Optional[str] = None
    path: str = ""
    category: Optional[str] = None
    content: Optional[str] = None
    enabled: bool = True


class AgentRecord(BaseModel):
    name: str
    description: Optional[str] = None
    path: str = ""
    purpose: Optional[str] = None
    enabled: bool = True


class MemoryRecord(BaseModel):
    name: str
    description: Optional[str] = None
    path: str = ""
    type: Optional[str] = None
    enabled: bool = True


class ConfigSnapshot(BaseModel):
    """Hierarchical assistant configuration as read from disk by the host."""

    model_config = ConfigDict(populate_by_name=True)

    skills: List[SkillRecord] = Field(default_factory=list)
    mcps: List[McpRecord] = Field(default_factory=list)
    plugins: List[PluginRecord] = Field(default_factory=list)
    hooks: List[HookRecord] = Field(default_factory=list)
    rules: List[RuleRecord] = Field(default_factory=list)
    agents: List[AgentRecord] = Field(default_factory=list)
    memory: List[MemoryRecord] = Field(default_factory=list)
    knowledge_base_path: str = Field("", alias="knowledgeBasePath")
    model: Optional[str] = None


# Workspace

class Module(BaseModel):
    """A configuration item that can be attached to a session."""

    id: str
    type: ModuleType
    name: str
    description: str = ""
    tags: List[str] = Field(default_factory=list)
    enabled: bool = True
    icon: str = ""


class Recommendation(BaseModel):
    """A scored module suggestion for a session."""

    module_id: str = Field(..., description="Recommended module id")
    score: float = Field(..., ge=0.0, le=1.0, description="Relevance score (0.0-1.0)")
    reason: str = Field("", description="Fired signals joined with ' | '")


class SuggestedAction(BaseModel):
    label: str
    description: str
    type: ActionType
    module_ids: Optional[List[str]] = None
    target_status: Optional[SessionStatus] = None


class SessionAnalysis(BaseModel):
    """Result of analysing a session's requirement text."""

    summary: str
    detected_intents: List[str] = Field(default_factory=list)
    recommended_modules: List[Recommendation] = Field(default_factory=list)
    suggested_actions: List[SuggestedAction] = Field(default_factory=list)


def now_ms() -> int:
    return int(time.time() * 1000)


def new_id() -> str:
    return str(uuid.uuid4())


class ChatMessage(BaseModel):
    id: str = Field(default_factory=new_id)
    role: MessageRole
    content: str
    timestamp: int = Field(default_factory=now_ms, description="Epoch milliseconds")
    analysis: Optional[SessionAnalysis] = None


class Session(BaseModel):
    """A user-created grouping of modules plus a requirement description."""

    id: str = Field(default_factory=new_id)
    name: str
    description: str = ""
    module_ids: List[str] = Field(default_factory=list, description="Ordered, no duplicates")
    status: SessionStatus = SessionStatus.DRAFTING
    messages: List[ChatMessage] = Field(default_factory=list)
    position: Vec3 = ORIGIN
    color: str = "#00FFFF"
    created_at: int = Field(default_factory=now_ms)
    updated_at: int = Field(default_factory=now_ms)
    result: Optional[str] = None

    @field_validator("module_ids")
    @classmethod
    def _dedupe_module_ids(cls, value: List[str]) -> List[str]:
        return list(dict.fromkeys(value))
