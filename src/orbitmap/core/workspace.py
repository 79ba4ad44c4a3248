"""Workspace store.

Owns the module palette and the sessions built from it. Sessions are
replaced with updated copies on every change, never edited in place, and
recommendations are recomputed whenever a session's module set changes.
"""

import logging
from typing import Dict, List, Optional, Sequence, Set

from orbitmap.config import RecommenderConfig
from orbitmap.core.analysis import analyze_session
from orbitmap.core.layout.workspace import is_inside_session, module_position, session_grid_position
from orbitmap.core.recommender import recommend
from orbitmap.core.schemas import (
    ActionType,
    ChatMessage,
    ConfigSnapshot,
    MessageRole,
    Module,
    ModuleType,
    Recommendation,
    Session,
    SessionAnalysis,
    SessionStatus,
    SuggestedAction,
    Vec3,
    now_ms,
)

logger = logging.getLogger(__name__)


SESSION_COLORS = [
    "#00FFFF", "#FF00FF", "#FFFF00", "#FF6B6B",
    "#4ECDC4", "#45B7D1", "#96E6A1", "#DDA0DD",
]

MODULE_TYPE_ICONS: Dict[ModuleType, str] = {
    ModuleType.SKILL: "Zap",
    ModuleType.MCP: "Server",
    ModuleType.PLUGIN: "Puzzle",
    ModuleType.HOOK: "Anchor",
    ModuleType.RULE: "BookOpen",
    ModuleType.AGENT: "Bot",
    ModuleType.MEMORY: "Brain",
}


class SessionNotFoundError(KeyError):
    """Raised when an operation names a session the store does not hold."""
    pass


def flatten_config_to_modules(snapshot: ConfigSnapshot) -> List[Module]:
    """Turn every configured item into an attachable module."""
    modules = []

    def add(module_type: ModuleType, key: str, name: str, description: str,
            tags: List[Optional[str]], enabled: bool) -> None:
        modules.append(Module(
            id=f"{module_type.value}-{key}",
            type=module_type,
            name=name,
            description=description,
            tags=[t for t in tags if t],
            enabled=enabled,
            icon=MODULE_TYPE_ICONS[module_type],
        ))

    for s in snapshot.skills:
        add(ModuleType.SKILL, s.id or s.name, s.name, s.description or "",
            [s.category or "general", "skill"], s.enabled)
    for m in snapshot.mcps:
        add(ModuleType.MCP, m.name, m.name, m.description or "",
            ["mcp", m.type or "stdio"], m.enabled)
    for p in snapshot.plugins:
        add(ModuleType.PLUGIN, p.name, p.name, p.description or "",
            ["plugin", p.marketplace], p.enabled)
    for h in snapshot.hooks:
        matcher = f" ({h.matcher})" if h.matcher else ""
        add(ModuleType.HOOK, h.name, h.name, f"{h.type} hook{matcher}",
            ["hook", h.type], h.enabled)
    for r in snapshot.rules:
        add(ModuleType.RULE, r.name, r.name, r.description or "",
            ["rule", r.category], r.enabled)
    for a in snapshot.agents:
        add(ModuleType.AGENT, a.name, a.name, a.description or a.purpose or "",
            ["agent"], a.enabled)
    for mem in snapshot.memory:
        add(ModuleType.MEMORY, mem.name, mem.name, mem.description or "",
            ["memory", mem.type], mem.enabled)

    return modules


def filter_modules(
    modules: List[Module],
    search: str = "",
    module_type: Optional[ModuleType] = None,
) -> List[Module]:
    """Palette filter: by type, then by substring on name, description or tags."""
    filtered = modules
    if module_type is not None:
        filtered = [m for m in filtered if m.type == module_type]

    query = search.strip().lower()
    if query:
        filtered = [
            m for m in filtered
            if query in m.name.lower()
            or query in m.description.lower()
            or any(query in t.lower() for t in m.tags)
        ]
    return filtered


class WorkspaceStore:
    """In-memory owner of modules, sessions and the current recommendations."""

    def __init__(
        self,
        modules: Optional[List[Module]] = None,
        config: Optional[RecommenderConfig] = None,
    ):
        self.modules: List[Module] = list(modules or [])
        self.sessions: List[Session] = []
        self.selected_session_id: Optional[str] = None
        self.selected_modules: Set[str] = set()
        self.recommendations: List[Recommendation] = []
        self.config = config or RecommenderConfig()

    # ------------------------------------------------------------------
    # Modules
    # ------------------------------------------------------------------

    def load_modules(self, snapshot: ConfigSnapshot) -> List[Module]:
        self.modules = flatten_config_to_modules(snapshot)
        logger.info(f"Loaded {len(self.modules)} workspace modules")
        return self.modules

    def get_module(self, module_id: str) -> Optional[Module]:
        return next((m for m in self.modules if m.id == module_id), None)

    def filter_modules(self, search: str = "", module_type: Optional[ModuleType] = None) -> List[Module]:
        return filter_modules(self.modules, search, module_type)

    def toggle_module_selection(self, module_id: str, multi_select: bool = False) -> Set[str]:
        if not multi_select:
            self.selected_modules = {module_id}
        elif module_id in self.selected_modules:
            self.selected_modules = self.selected_modules - {module_id}
        else:
            self.selected_modules = self.selected_modules | {module_id}
        return self.selected_modules

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def get_session(self, session_id: str) -> Optional[Session]:
        return next((s for s in self.sessions if s.id == session_id), None)

    def _require(self, session_id: str) -> Session:
        session = self.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def _replace(self, session: Session, touch: bool = True) -> Session:
        if touch:
            session = session.model_copy(update={"updated_at": now_ms()})
        self.sessions = [session if s.id == session.id else s for s in self.sessions]
        return session

    def create_session(self, name: str, description: str = "") -> Session:
        """Create a drafting session at the next grid slot and select it."""
        index = len(self.sessions)
        session = Session(
            name=name,
            description=description,
            position=session_grid_position(index),
            color=SESSION_COLORS[index % len(SESSION_COLORS)],
        )
        self.sessions = [*self.sessions, session]
        self.selected_session_id = session.id
        logger.debug(f"Created session {session.id} ({name})")
        return session

    def delete_session(self, session_id: str) -> None:
        self.sessions = [s for s in self.sessions if s.id != session_id]
        if self.selected_session_id == session_id:
            self.selected_session_id = None

    def update_session(
        self,
        session_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        result: Optional[str] = None,
    ) -> Session:
        updates = {
            key: value
            for key, value in (("name", name), ("description", description), ("result", result))
            if value is not None
        }
        return self._replace(self._require(session_id).model_copy(update=updates))

    def set_session_status(self, session_id: str, status: SessionStatus) -> Session:
        return self._replace(self._require(session_id).model_copy(update={"status": status}))

    def add_module_to_session(self, session_id: str, module_id: str) -> Session:
        """Attach a module; attaching it twice is a no-op."""
        session = self._require(session_id)
        if module_id not in session.module_ids:
            session = self._replace(
                session.model_copy(update={"module_ids": [*session.module_ids, module_id]})
            )
        self.compute_recommendations(session_id)
        return session

    def remove_module_from_session(self, session_id: str, module_id: str) -> Session:
        session = self._require(session_id)
        session = self._replace(session.model_copy(update={
            "module_ids": [m for m in session.module_ids if m != module_id],
        }))
        self.compute_recommendations(session_id)
        return session

    def session_modules(self, session_id: str) -> List[Module]:
        """Attached modules in attachment order; unknown ids are skipped."""
        by_id = {m.id: m for m in self.modules}
        session = self._require(session_id)
        return [by_id[mid] for mid in session.module_ids if mid in by_id]

    def module_positions(self, session_id: str) -> Dict[str, Vec3]:
        session = self._require(session_id)
        count = len(session.module_ids)
        return {
            module_id: module_position(count, index, session.position)
            for index, module_id in enumerate(session.module_ids)
        }

    def session_at(self, point: Sequence[float]) -> Optional[Session]:
        """First session whose zone contains the point."""
        return next((s for s in self.sessions if is_inside_session(point, s.position)), None)

    def drop_module(self, module_id: str, point: Sequence[float]) -> Optional[Session]:
        """Attach a dragged module to the session under the drop point.

        Returns None when the point is outside every session, leaving it to
        the caller to create one.
        """
        target = self.session_at(point)
        if target is None:
            return None
        return self.add_module_to_session(target.id, module_id)

    # ------------------------------------------------------------------
    # Recommendations & Chat
    # ------------------------------------------------------------------

    def compute_recommendations(self, session_id: str) -> List[Recommendation]:
        session = self.get_session(session_id)
        if session is None:
            self.clear_recommendations()
        else:
            self.recommendations = recommend(
                session.name, session.description, self.modules, session.module_ids, self.config
            )
        return self.recommendations

    def clear_recommendations(self) -> None:
        self.recommendations = []

    def _append_message(self, session_id: str, message: ChatMessage) -> Session:
        session = self._require(session_id)
        return self._replace(
            session.model_copy(update={"messages": [*session.messages, message]}),
            touch=False,
        )

    def send_message(self, session_id: str, content: str) -> SessionAnalysis:
        """Log a user message, make it the description and reply with an analysis."""
        session = self._require(session_id)
        user_message = ChatMessage(role=MessageRole.USER, content=content)
        session = self._replace(session.model_copy(update={
            "messages": [*session.messages, user_message],
            "description": content,
        }))

        analysis = analyze_session(session, self.modules, self.config)
        self._append_message(session_id, ChatMessage(
            role=MessageRole.SYSTEM,
            content=analysis.summary,
            analysis=analysis,
        ))
        self.recommendations = analysis.recommended_modules
        return analysis

    def apply_action(self, session_id: str, action: SuggestedAction) -> Session:
        """Carry out a suggested action and log a confirmation message."""
        session = self._require(session_id)

        if action.type == ActionType.ADD_MODULES and action.module_ids:
            existing = set(session.module_ids)
            new_ids = [mid for mid in action.module_ids if mid not in existing]
            if new_ids:
                self._replace(session.model_copy(update={
                    "module_ids": [*session.module_ids, *new_ids],
                }))
            self._append_message(session_id, ChatMessage(
                role=MessageRole.SYSTEM,
                content=f"Added {len(new_ids)} module{'s' if len(new_ids) > 1 else ''} to this session.",
            ))
            self.compute_recommendations(session_id)

        elif action.type == ActionType.CHANGE_STATUS and action.target_status:
            self.set_session_status(session_id, action.target_status)
            self._append_message(session_id, ChatMessage(
                role=MessageRole.SYSTEM,
                content=f"Session status changed to **{action.target_status.value}**.",
            ))

        return self._require(session_id)
