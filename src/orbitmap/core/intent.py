"""Intent detection for session requirements.

Classifies free text into focus areas with bilingual (English/Chinese)
keyword lists. Matching is plain substring search on the lowercased text:
fast, deterministic, no LLM calls.
"""

import logging
from enum import Enum
from typing import Dict, List

logger = logging.getLogger(__name__)


# ============================================================================
# Intents
# ============================================================================

class Intent(str, Enum):
    """Focus area of a session. Declaration order is reporting order."""
    CODE_REVIEW = "code-review"
    TESTING = "testing"
    DEPLOYMENT = "deployment"
    DEBUGGING = "debugging"
    FRONTEND = "frontend"
    BACKEND = "backend"
    DATA = "data"
    AUTOMATION = "automation"
    SECURITY = "security"
    DOCUMENTATION = "documentation"
    PERFORMANCE = "performance"
    REFACTORING = "refactoring"
    GENERAL = "general"                # Nothing matched


INTENT_KEYWORDS: Dict[Intent, List[str]] = {
    Intent.CODE_REVIEW: [
        "review", "code review", "check code", "lint", "quality",
        "代码审查", "审查", "代码质量", "检查代码",
    ],
    Intent.TESTING: [
        "test", "unit test", "e2e", "coverage", "tdd",
        "测试", "单元测试", "端到端", "覆盖率",
    ],
    Intent.DEPLOYMENT: [
        "deploy", "ci/cd", "pipeline", "release", "publish",
        "部署", "发布", "上线", "流水线",
    ],
    Intent.DEBUGGING: [
        "debug", "bug", "fix", "error", "issue", "crash",
        "调试", "错误", "修复", "问题", "崩溃",
    ],
    Intent.FRONTEND: [
        "react", "next", "ui", "component", "css", "tailwind", "page", "layout",
        "前端", "组件", "界面", "页面", "布局", "样式",
    ],
    Intent.BACKEND: [
        "api", "server", "database", "endpoint", "rest", "graphql", "auth",
        "后端", "接口", "数据库", "服务器", "认证",
    ],
    Intent.DATA: [
        "data", "analytics", "sql", "query", "report", "chart", "visualization",
        "数据", "分析", "查询", "报告", "图表", "可视化",
    ],
    Intent.AUTOMATION: [
        "automate", "script", "bot", "scrape", "crawl", "schedule",
        "自动化", "脚本", "爬虫", "定时",
    ],
    Intent.SECURITY: [
        "security", "auth", "oauth", "vulnerability", "encrypt",
        "安全", "认证", "授权", "漏洞", "加密",
    ],
    Intent.DOCUMENTATION: [
        "doc", "readme", "document", "guide", "tutorial",
        "文档", "说明", "指南", "教程",
    ],
    Intent.PERFORMANCE: [
        "performance", "optimize", "speed", "cache", "latency", "slow",
        "性能", "优化", "速度", "缓存", "延迟", "慢",
    ],
    Intent.REFACTORING: [
        "refactor", "cleanup", "restructure", "migrate", "modernize",
        "重构", "清理", "迁移", "现代化",
    ],
}

INTENT_LABELS: Dict[Intent, str] = {
    Intent.CODE_REVIEW: "Code Review",
    Intent.TESTING: "Testing",
    Intent.DEPLOYMENT: "Deployment",
    Intent.DEBUGGING: "Debugging",
    Intent.FRONTEND: "Frontend Development",
    Intent.BACKEND: "Backend Development",
    Intent.DATA: "Data & Analytics",
    Intent.AUTOMATION: "Automation",
    Intent.SECURITY: "Security",
    Intent.DOCUMENTATION: "Documentation",
    Intent.PERFORMANCE: "Performance Optimization",
    Intent.REFACTORING: "Refactoring",
    Intent.GENERAL: "General",
}


# ============================================================================
# Classification
# ============================================================================

def classify(text: str) -> List[str]:
    """Detect every intent whose keywords appear in the text.

    Args:
        text: Free-form requirement text, any mix of English and Chinese

    Returns:
        Intent values in declaration order, or ``["general"]`` when
        nothing matched
    """
    lowered = (text or "").lower()
    detected = [
        intent.value
        for intent, keywords in INTENT_KEYWORDS.items()
        if any(keyword in lowered for keyword in keywords)
    ]
    if not detected:
        return [Intent.GENERAL.value]

    logger.debug(f"Detected intents: {detected}")
    return detected


def intent_label(intent: str) -> str:
    """Display label of an intent value; unknown values are returned as-is."""
    try:
        return INTENT_LABELS[Intent(intent)]
    except ValueError:
        return intent
