# briki/services/ranker.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence, TypeVar

from .keywords import DEFAULT_KEYWORDS, KeywordConfig, normalize_text
from .validators import WORLDWIDE, as_str_list, as_text, field, normalize_country

logger = logging.getLogger(__name__)

Plan = TypeVar("Plan")


@dataclass(frozen=True)
class ScoredPlan:
    plan: Any
    score: float


def _count_hits(text: str, keywords: Iterable[str]) -> int:
    """How many of the keywords occur in text (plain substring match)."""
    return sum(1 for kw in keywords if kw in text)


def _has_tag(tags: Sequence[str], keywords: Iterable[str]) -> bool:
    return any(kw in tag for tag in tags for kw in keywords)


class PlanRanker:
    """
    Keyword-weighted relevance ranking of insurance plans against a free-text query.

    Stateless apart from the immutable keyword config, so one instance can be
    shared across requests and threads.
    """

    def __init__(self, keywords: KeywordConfig = DEFAULT_KEYWORDS):
        self.keywords = keywords

    def _query_words(self, query: str) -> List[str]:
        return [w for w in query.split() if len(w) >= self.keywords.min_word_length]

    def score(self, query: str, plan: Any) -> float:
        """Additive relevance score of a single plan. Never raises on malformed plans."""
        kw = self.keywords
        q = normalize_text(query)
        if not q.strip():
            return 0.0

        category = as_text(field(plan, "category"))
        tags = [normalize_text(t) for t in as_str_list(field(plan, "tags"))]
        score = 0.0

        category_hit = _count_hits(q, kw.categories.get(category, ())) > 0
        if category_hit:
            score += kw.category_weight

        for words in kw.attributes.values():
            hits = _count_hits(q, words)
            if not hits:
                continue
            if _has_tag(tags, words):
                score += hits * 2
            elif category_hit:
                score += hits

        if category == "auto":
            for words in kw.vehicles.values():
                hits = _count_hits(q, words)
                if hits:
                    score += hits * 3 if _has_tag(tags, words) else hits

        words = self._query_words(q)
        name = normalize_text(as_text(field(plan, "name")))
        description = normalize_text(as_text(field(plan, "description")))
        score += 2 * sum(1 for w in words if w in name)
        score += sum(1 for w in words if w in description)
        for feature in as_str_list(field(plan, "features")):
            feature = normalize_text(feature)
            score += 0.5 * sum(1 for w in words if w in feature)

        if any(t in q for t in kw.price_terms) and any(kw.price_tag in t for t in tags):
            score += kw.price_bonus
        if any(t in q for t in kw.premium_terms) and any(p in t for t in tags for p in kw.premium_tags):
            score += kw.premium_bonus

        return score

    def score_all(self, query: str, plans: Iterable[Any]) -> List[ScoredPlan]:
        return [ScoredPlan(plan=p, score=self.score(query, p)) for p in plans or ()]

    def rank(self, query: str, plans: Iterable[Plan], limit: int = 5) -> List[Plan]:
        """
        Top `limit` plans with positive score, best first.

        Equal scores keep their input order (sorted() is stable).
        """
        if limit <= 0:
            return []
        scored = [s for s in self.score_all(query, plans) if s.score > 0]
        scored = sorted(scored, key=lambda s: -s.score)[:limit]
        logger.debug(
            "Ranked query=%r -> %s",
            query,
            [(as_text(field(s.plan, "id")), s.score) for s in scored],
        )
        return [s.plan for s in scored]


_default_ranker = PlanRanker()


def rank_plans(
    query: str,
    plans: Iterable[Plan],
    limit: int = 5,
    keywords: Optional[KeywordConfig] = None,
) -> List[Plan]:
    ranker = _default_ranker if keywords is None else PlanRanker(keywords)
    return ranker.rank(query, plans, limit)


def _allowed_countries(plan: Any) -> Optional[List[str]]:
    restrictions = field(plan, "restrictions")
    lists = [
        field(restrictions, "countries"),
        field(plan, "available_countries"),
        field(plan, "availableCountries"),
    ]
    present = [as_str_list(v) for v in lists if v is not None]
    if not present:
        return None
    return [normalize_country(c) for codes in present for c in codes]


def filter_by_country(plans: Iterable[Plan], country: Optional[str]) -> List[Plan]:
    """
    Drop plans whose country allow-list excludes `country`.

    Plans without an allow-list are always kept; an allow-list containing
    "WW" admits every country. No country means no filtering.
    """
    plans = list(plans or ())
    code = normalize_country(country)
    if not code:
        return plans
    kept = []
    for plan in plans:
        allowed = _allowed_countries(plan)
        if allowed is None or code in allowed or WORLDWIDE in allowed:
            kept.append(plan)
    if plans and not kept:
        logger.info("Country filter %s removed all %d plans", code, len(plans))
    return kept
