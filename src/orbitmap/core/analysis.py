"""Session analysis.

Combines intent detection and module recommendation into a summary and a
list of suggested actions for a session's chat log.
"""

import logging
from typing import List, Optional

from orbitmap.config import RecommenderConfig
from orbitmap.core.intent import Intent, classify, intent_label
from orbitmap.core.recommender import recommend
from orbitmap.core.schemas import (
    ActionType,
    MessageRole,
    Module,
    Recommendation,
    Session,
    SessionAnalysis,
    SessionStatus,
    SuggestedAction,
)

logger = logging.getLogger(__name__)

READY_MODULE_COUNT = 3

TIPS = [
    "Drag modules from the left palette to add them manually.",
    "You can keep chatting to refine recommendations.",
    "Modules are matched by keywords in your description.",
    'Try mentioning specific tools like "React", "PostgreSQL", or "Playwright".',
]


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'s' if count > 1 else ''}"


def _user_messages(session: Session) -> List[str]:
    return [m.content for m in session.messages if m.role == MessageRole.USER]


def build_summary(intents: List[str], message_count: int, module_count: int, rec_count: int) -> str:
    """Human-readable summary; the first exchange reads differently from follow-ups."""
    names = ", ".join(intent_label(i) for i in intents)

    if message_count <= 1:
        if rec_count > 0:
            summary = (
                f"Detected focus area: **{names}**. Found {_plural(rec_count, 'recommended module')} "
                f"based on your requirement."
            )
            if module_count > 0:
                summary += f" You currently have {_plural(module_count, 'module')} attached."
            return summary
        return (
            f"Detected focus area: **{names}**. Describe your requirement in more "
            f"detail for better module recommendations."
        )

    return (
        f"Updated analysis, focus: **{names}**. "
        f"{rec_count} recommended module{'s' if rec_count > 1 else ''} available. "
        f"{_plural(module_count, 'module')} attached so far."
    )


def build_actions(
    intents: List[str],
    recommendations: List[Recommendation],
    session: Session,
    config: Optional[RecommenderConfig] = None,
) -> List[SuggestedAction]:
    """Suggested next steps for a session. Always ends with one tip."""
    config = config or RecommenderConfig()
    actions = []

    top = [r for r in recommendations if r.score >= config.action_min_score]
    top = top[:config.action_max_modules]
    if top:
        actions.append(SuggestedAction(
            label=f"Add {_plural(len(top), 'module')}",
            description="Add top recommended modules to this session",
            type=ActionType.ADD_MODULES,
            module_ids=[r.module_id for r in top],
        ))

    if len(session.module_ids) >= READY_MODULE_COUNT and session.status == SessionStatus.DRAFTING:
        actions.append(SuggestedAction(
            label="Mark as Ready",
            description="Session has enough modules, mark it ready to run",
            type=ActionType.CHANGE_STATUS,
            target_status=SessionStatus.READY,
        ))

    if intents == [Intent.GENERAL.value]:
        actions.append(SuggestedAction(
            label="Be more specific",
            description="Try mentioning specific technologies or goals for better results",
            type=ActionType.REFINE_REQUIREMENT,
        ))

    # Rotates with the conversation so the same state always yields the same tip
    tip = TIPS[len(_user_messages(session)) % len(TIPS)]
    actions.append(SuggestedAction(label="Tip", description=tip, type=ActionType.INFO))
    return actions


def analyze_session(
    session: Session,
    modules: List[Module],
    config: Optional[RecommenderConfig] = None,
) -> SessionAnalysis:
    """Analyze a session's name, description and user messages.

    Args:
        session: Session to analyze (not modified)
        modules: All known modules
        config: Recommender tunables

    Returns:
        SessionAnalysis with summary, intents, recommendations and actions
    """
    user_texts = _user_messages(session)
    full_text = " ".join([session.name, session.description, *user_texts])

    intents = classify(full_text)
    recommendations = recommend(session.name, full_text, modules, session.module_ids, config)

    summary = build_summary(
        intents,
        len(user_texts),
        len(session.module_ids),
        len(recommendations),
    )
    actions = build_actions(intents, recommendations, session, config)

    logger.debug(
        f"Session {session.id}: intents={intents}, "
        f"{len(recommendations)} recommendations, {len(actions)} actions"
    )
    return SessionAnalysis(
        summary=summary,
        detected_intents=intents,
        recommended_modules=recommendations,
        suggested_actions=actions,
    )
