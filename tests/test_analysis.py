"""Tests for session analysis."""

import pytest

from orbitmap.core.analysis import TIPS, analyze_session, build_actions, build_summary
from orbitmap.core.schemas import (
    ActionType,
    ChatMessage,
    MessageRole,
    Module,
    ModuleType,
    Recommendation,
    Session,
    SessionStatus,
)


@pytest.fixture
def modules():
    return [
        Module(id="mcp-playwright", type=ModuleType.MCP, name="playwright", tags=["mcp", "stdio"]),
        Module(id="skill-testing-pro", type=ModuleType.SKILL, name="testing-pro", tags=["testing", "qa"]),
        Module(id="rule-style", type=ModuleType.RULE, name="style", tags=["rule"]),
    ]


def test_analyze_first_exchange(modules):
    """A fresh session gets intents, recommendations and an add action."""
    session = Session(name="Browser checks", description="testing with playwright")
    analysis = analyze_session(session, modules)

    assert analysis.detected_intents == ["testing"]
    assert [r.module_id for r in analysis.recommended_modules] == ["skill-testing-pro", "mcp-playwright"]
    assert analysis.summary == (
        "Detected focus area: **Testing**. Found 2 recommended modules based on your requirement."
    )

    add = analysis.suggested_actions[0]
    assert add.type == ActionType.ADD_MODULES
    assert add.label == "Add 2 modules"
    assert add.module_ids == ["skill-testing-pro", "mcp-playwright"]
    assert analysis.suggested_actions[-1].type == ActionType.INFO


def test_analyze_does_not_mutate_session(modules):
    """The analyzed session is left untouched."""
    session = Session(name="Browser checks", description="testing")
    before = session.model_dump()
    analyze_session(session, modules)
    assert session.model_dump() == before


def test_analyze_general_asks_for_detail(modules):
    """Nothing recognizable asks for a more specific requirement."""
    analysis = analyze_session(Session(name="Hello"), modules)
    assert analysis.detected_intents == ["general"]
    assert "Describe your requirement in more detail" in analysis.summary
    types = [a.type for a in analysis.suggested_actions]
    assert ActionType.REFINE_REQUIREMENT in types
    assert ActionType.ADD_MODULES not in types


def test_user_messages_feed_the_analysis(modules):
    """Chat messages count toward intents and select the follow-up summary."""
    session = Session(
        name="Helper",
        messages=[
            ChatMessage(role=MessageRole.USER, content="hello"),
            ChatMessage(role=MessageRole.SYSTEM, content="deploy everything"),
            ChatMessage(role=MessageRole.USER, content="add playwright"),
        ],
    )
    analysis = analyze_session(session, modules)
    assert "deployment" not in analysis.detected_intents
    assert analysis.summary.startswith("Updated analysis")
    assert [r.module_id for r in analysis.recommended_modules] == ["mcp-playwright"]


class TestSummary:
    """Summary wording."""

    def test_first_with_attached_modules(self):
        summary = build_summary(["testing"], 1, 1, 1)
        assert summary == (
            "Detected focus area: **Testing**. Found 1 recommended module based on your "
            "requirement. You currently have 1 module attached."
        )

    def test_follow_up(self):
        summary = build_summary(["testing", "security"], 2, 3, 0)
        assert summary == (
            "Updated analysis, focus: **Testing, Security**. "
            "0 recommended module available. 3 modules attached so far."
        )


class TestActions:
    """Suggested next steps."""

    def test_add_only_strong_recommendations(self):
        recs = [
            Recommendation(module_id="a", score=0.9),
            Recommendation(module_id="b", score=0.5),
            Recommendation(module_id="c", score=0.4),
            Recommendation(module_id="d", score=0.35),
            Recommendation(module_id="e", score=0.2),
        ]
        actions = build_actions(["testing"], recs, Session(name="s"))
        assert actions[0].module_ids == ["a", "b", "c"]

    def test_ready_when_enough_modules(self):
        session = Session(name="s", module_ids=["a", "b", "c"])
        actions = build_actions(["testing"], [], session)
        ready = [a for a in actions if a.type == ActionType.CHANGE_STATUS]
        assert ready and ready[0].target_status == SessionStatus.READY

    def test_no_ready_unless_drafting(self):
        session = Session(name="s", module_ids=["a", "b", "c"], status=SessionStatus.RUNNING)
        actions = build_actions(["testing"], [], session)
        assert all(a.type != ActionType.CHANGE_STATUS for a in actions)

    def test_tip_rotates_with_user_messages(self):
        session = Session(
            name="s",
            messages=[ChatMessage(role=MessageRole.USER, content="x")] * 2,
        )
        tip = build_actions(["testing"], [], session)[-1]
        assert tip.type == ActionType.INFO
        assert tip.description == TIPS[2]
