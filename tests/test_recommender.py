"""Tests for the keyword recommender and intent detection."""

import pytest

from orbitmap.config import RecommenderConfig
from orbitmap.core.intent import Intent, classify, intent_label
from orbitmap.core.recommender import (
    GENERIC_REASON,
    NAME_REASON,
    recommend,
    score_module,
    tokenize,
)
from orbitmap.core.schemas import Module, ModuleType


@pytest.fixture
def modules():
    return [
        Module(id="mcp-playwright", type=ModuleType.MCP, name="playwright", tags=["mcp", "stdio"]),
        Module(id="skill-testing-pro", type=ModuleType.SKILL, name="testing-pro", tags=["testing", "qa"]),
        Module(
            id="skill-pdf",
            type=ModuleType.SKILL,
            name="pdf",
            description="Extract text from PDF documents",
            tags=["documents", "skill"],
        ),
        Module(id="rule-style", type=ModuleType.RULE, name="style", tags=["rule"]),
    ]


class TestTokenize:
    """Tokenizer behavior."""

    def test_lowercases_and_strips_punctuation(self):
        assert tokenize("Hello, World!") == {"hello", "world"}

    def test_drops_stop_words_and_short_tokens(self):
        assert tokenize("I want to use the API") == {"api"}

    def test_keeps_hyphens_and_cjk(self):
        assert tokenize("e2e-tests 测试") == {"e2e-tests", "测试"}

    def test_empty(self):
        assert tokenize("") == set()
        assert tokenize(None) == set()


class TestScoring:
    """Per-module signals."""

    def test_tag_and_name_match(self, modules):
        rec = score_module(modules[1], {"testing"}, set())
        assert rec.score == pytest.approx(0.7)
        assert "Tags: testing" in rec.reason
        assert NAME_REASON in rec.reason

    def test_description_overlap_is_capped(self):
        module = Module(
            id="m", type=ModuleType.SKILL, name="zzz",
            description="alpha beta gamma delta epsilon",
        )
        rec = score_module(module, {"alpha", "beta", "gamma", "delta", "epsilon"}, set())
        assert rec.score == pytest.approx(0.3)

    def test_type_affinity(self, modules):
        rec = score_module(modules[3], {"nothing"}, {"rule"})
        assert rec.score == pytest.approx(0.1)

    def test_no_signal_gives_generic_reason(self, modules):
        rec = score_module(modules[3], {"nothing"}, set())
        assert rec.score == 0.0
        assert rec.reason == GENERIC_REASON

    def test_score_is_clamped(self):
        module = Module(
            id="m", type=ModuleType.SKILL, name="react",
            tags=["react", "reactjs", "react-ui", "frontend-react"],
        )
        assert score_module(module, {"react"}, set()).score == 1.0


class TestRecommend:
    """Ranking, filtering and exclusion."""

    def test_testing_scenario_with_playwright(self, modules):
        recs = recommend(
            "", "Need help with API testing and test coverage using Playwright", modules, []
        )
        ids = [r.module_id for r in recs]
        assert ids[0] == "skill-testing-pro"
        assert "mcp-playwright" in ids

    def test_testing_scenario_without_playwright(self, modules):
        recs = recommend("", "Need help with API testing and test coverage", modules, [])
        ids = [r.module_id for r in recs]
        assert ids[0] == "skill-testing-pro"
        assert "mcp-playwright" not in ids

    def test_attached_modules_are_excluded(self, modules):
        recs = recommend("", "testing with playwright", modules, ["skill-testing-pro"])
        assert "skill-testing-pro" not in [r.module_id for r in recs]

    def test_scores_sorted_and_bounded(self, modules):
        recs = recommend("pdf tests", "extract documents, testing, playwright", modules, [])
        scores = [r.score for r in recs]
        assert scores == sorted(scores, reverse=True)
        assert all(0.0 < s <= 1.0 for s in scores)

    def test_threshold_is_strict(self, modules):
        # only the type-affinity bonus (exactly 0.1) applies to rule-style
        attached = Module(id="rule-other", type=ModuleType.RULE, name="other")
        recs = recommend("", "nothing relevant here", [*modules, attached], ["rule-other"])
        assert recs == []

    def test_empty_text(self, modules):
        assert recommend("", "", modules, []) == []

    def test_name_contributes_tokens(self, modules):
        recs = recommend("playwright", "", modules, [])
        assert [r.module_id for r in recs] == ["mcp-playwright"]

    def test_max_results(self):
        many = [
            Module(id=f"skill-{i}", type=ModuleType.SKILL, name=f"docs{i}", tags=["docs"])
            for i in range(10)
        ]
        recs = recommend("", "docs", many, [], RecommenderConfig(max_results=3))
        assert [r.module_id for r in recs] == ["skill-0", "skill-1", "skill-2"]

    def test_ties_keep_module_order(self):
        # tag match only: every module scores 0.3
        tied = [Module(id=f"m{i}", type=ModuleType.SKILL, name=f"zz{i}", tags=["docs"]) for i in range(7)]
        recs = recommend("", "docs", tied, [])
        assert [r.module_id for r in recs] == ["m0", "m1", "m2", "m3", "m4"]
        assert all(r.score == pytest.approx(0.3) for r in recs)


class TestIntent:
    """Bilingual intent detection."""

    def test_chinese_review_and_security(self):
        intents = classify("帮我做代码审查和安全检查")
        assert "code-review" in intents
        assert "security" in intents

    def test_english(self):
        assert classify("Deploy the release pipeline") == ["deployment"]

    def test_declaration_order(self):
        intents = classify("fix the slow database query")
        assert intents == ["debugging", "backend", "data", "performance"]

    def test_general_fallback(self):
        assert classify("hello there") == ["general"]
        assert classify("") == ["general"]

    def test_labels(self):
        assert intent_label(Intent.TESTING.value) == "Testing"
        assert intent_label("unknown") == "unknown"
