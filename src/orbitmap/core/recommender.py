"""Keyword recommender.

Scores unattached modules against the tokens of a session's name and
description. No language model involved: tags, names and descriptions are
matched by substring and token overlap.

Signals per candidate:
- +0.3 per tag that contains, or is contained in, any session token
- +0.4 when the module name contains, or is contained in, any token
- +0.1 per description token shared with the session, at most +0.3
- +0.1 when a module of the same type is already attached
"""

import logging
import re
from typing import Iterable, List, Optional, Set

from orbitmap.config import RecommenderConfig
from orbitmap.core.schemas import Module, Recommendation

logger = logging.getLogger(__name__)


STOP_WORDS = frozenset([
    # English
    "the", "a", "an", "is", "are", "was", "were", "be", "been", "being",
    "have", "has", "had", "do", "does", "did", "will", "would", "could",
    "should", "may", "might", "shall", "can", "need", "to", "of", "in",
    "for", "on", "with", "at", "by", "from", "as", "into", "through",
    "and", "but", "or", "not", "no", "so", "if", "then", "than", "that",
    "this", "it", "its", "my", "your", "our", "their", "his", "her",
    # Chinese
    "的", "是", "了", "在", "和", "有", "我", "你", "他", "她", "它",
    "们", "这", "那", "个", "一", "不", "也", "都", "要", "就", "会",
    # Filler verbs
    "use", "using", "used", "want", "make", "get",
])

_NON_TOKEN = re.compile(r"[^a-z0-9\u4e00-\u9fff\s-]")

TAG_WEIGHT = 0.3
NAME_WEIGHT = 0.4
DESCRIPTION_WEIGHT = 0.1
DESCRIPTION_CAP = 0.3
TYPE_AFFINITY_WEIGHT = 0.1

NAME_REASON = "名称匹配"
DESCRIPTION_REASON = "描述相关"
GENERIC_REASON = "通用推荐"


def tokenize(text: Optional[str]) -> Set[str]:
    """Lowercase, strip punctuation, split, drop short tokens and stop words."""
    if not text:
        return set()
    cleaned = _NON_TOKEN.sub(" ", text.lower())
    return {t for t in cleaned.split() if len(t) > 1 and t not in STOP_WORDS}


def _related(a: str, b: str) -> bool:
    return a in b or b in a


def score_module(module: Module, tokens: Set[str], attached_types: Set[str]) -> Recommendation:
    """Score one candidate module; the score is clamped to 1.0."""
    score = 0.0
    reasons = []

    matched_tags = [
        tag for tag in module.tags
        if any(_related(tag.lower(), token) for token in tokens)
    ]
    if matched_tags:
        score += TAG_WEIGHT * len(matched_tags)
        reasons.append(f"Tags: {', '.join(matched_tags)}")

    name = module.name.lower()
    if any(_related(name, token) for token in tokens):
        score += NAME_WEIGHT
        reasons.append(NAME_REASON)

    overlap = tokenize(module.description) & tokens
    if overlap:
        score += min(DESCRIPTION_WEIGHT * len(overlap), DESCRIPTION_CAP)
        reasons.append(DESCRIPTION_REASON)

    if module.type.value in attached_types:
        score += TYPE_AFFINITY_WEIGHT
        reasons.append(f"同类型: {module.type.value}")

    return Recommendation(
        module_id=module.id,
        score=min(score, 1.0),
        reason=" | ".join(reasons) or GENERIC_REASON,
    )


def recommend(
    name: str,
    description: str,
    modules: List[Module],
    attached_ids: Iterable[str],
    config: Optional[RecommenderConfig] = None,
) -> List[Recommendation]:
    """Recommend modules for a session.

    Args:
        name: Session name
        description: Session requirement text
        modules: All known modules
        attached_ids: Ids already attached to the session (never recommended)
        config: Result limit and score threshold

    Returns:
        Recommendations scoring above the threshold, best first, ties in
        module order, at most ``max_results``
    """
    config = config or RecommenderConfig()
    tokens = tokenize(description) | tokenize(name)
    if not tokens:
        return []

    attached = set(attached_ids)
    attached_types = {m.type.value for m in modules if m.id in attached}

    candidates = [
        score_module(module, tokens, attached_types)
        for module in modules
        if module.id not in attached
    ]
    kept = [r for r in candidates if r.score > config.min_score]
    # sorted() is stable: equal scores keep module order
    ranked = sorted(kept, key=lambda r: r.score, reverse=True)[:config.max_results]

    logger.debug(
        f"Scored {len(candidates)} modules against {len(tokens)} tokens, "
        f"{len(kept)} above {config.min_score}"
    )
    return ranked
