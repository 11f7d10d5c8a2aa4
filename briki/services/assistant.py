# briki/services/assistant.py
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .. import config
from .intent import (
    analyze_context_needs,
    detect_category,
    extract_requested_plan_count,
    is_follow_up_question,
    should_suggest_plans,
)
from .llm_client import ChatCompletionClient, LLMUnavailableError
from .llm_explainer import build_system_prompt, fallback_reply
from .plan_catalog import find_plans
from .ranker import PlanRanker, filter_by_country
from .validators import field as get_field

logger = logging.getLogger(__name__)


@dataclass
class AssistantReply:
    message: str
    suggested_plans: List[Any] = field(default_factory=list)
    category: str = "general"
    needs_more_context: bool = False
    suggested_questions: List[str] = field(default_factory=list)
    used_fallback: bool = False


def _history_messages(history: Sequence[Any]) -> List[Dict[str, str]]:
    out = []
    for msg in list(history)[-config.MAX_HISTORY_MESSAGES:]:
        role = get_field(msg, "role", "user")
        content = get_field(msg, "content", "")
        if role in ("user", "assistant") and content:
            out.append({"role": role, "content": content})
    return out


def _conversation_text(message: str, history: Sequence[Any]) -> str:
    user_turns = [get_field(m, "content", "") for m in history if get_field(m, "role") == "user"]
    return " ".join([*user_turns, message])


def _is_new_request(message: str, category: str, previous: Sequence[Any]) -> bool:
    # shopping intent for a category none of the previous plans belong to
    if category == "general" or not should_suggest_plans(message):
        return False
    return category not in {get_field(p, "category") for p in previous}


def generate_reply(
    message: str,
    plans: Sequence[Any],
    *,
    history: Sequence[Any] = (),
    country: Optional[str] = None,
    previous_plan_ids: Sequence[str] = (),
    llm: Optional[ChatCompletionClient] = None,
    ranker: Optional[PlanRanker] = None,
) -> AssistantReply:
    """
    Answer one chat turn and decide which plans, if any, to attach.

    Plans come from the caller's catalog; the LLM only writes the text.
    Without a client, or when the model is unreachable, a templated reply
    is returned instead.
    """
    request_id = uuid.uuid4().hex[:8]
    ranker = ranker or PlanRanker()
    candidates = filter_by_country(plans, country or config.DEFAULT_COUNTRY)
    context_plans = ranker.rank(message, candidates, config.CHAT_CONTEXT_PLANS)
    logger.info(
        "[%s] chat turn: %d chars, %d history, %d/%d plans after country filter",
        request_id, len(message), len(history), len(candidates), len(plans),
    )

    category = detect_category(message)
    analysis = analyze_context_needs(_conversation_text(message, history), category)

    suggested: List[Any] = []
    previous = find_plans(list(candidates), list(previous_plan_ids)) if previous_plan_ids else []
    if previous and is_follow_up_question(message) and not _is_new_request(message, category, previous):
        suggested = previous
        logger.info("[%s] follow-up question, re-attaching %d plans", request_id, len(suggested))
    elif should_suggest_plans(message):
        limit = extract_requested_plan_count(message) or config.CHAT_PLAN_LIMIT
        suggested = ranker.rank(message, candidates, limit)
        logger.info("[%s] plan intent detected, %d plans suggested", request_id, len(suggested))

    used_fallback = llm is None
    text = ""
    if llm is not None:
        messages = [
            {"role": "system", "content": build_system_prompt(context_plans, bool(history))},
            *_history_messages(history),
            {"role": "user", "content": message},
        ]
        try:
            text = llm.complete(messages)
        except LLMUnavailableError as e:
            logger.error("[%s] LLM unavailable, using fallback reply: %s", request_id, e)
            used_fallback = True
    if used_fallback:
        text = fallback_reply(
            suggested,
            category=category,
            questions=analysis.suggested_questions if analysis.needs_more_context else None,
        )

    return AssistantReply(
        message=text,
        suggested_plans=suggested,
        category=category,
        needs_more_context=analysis.needs_more_context,
        suggested_questions=analysis.suggested_questions,
        used_fallback=used_fallback,
    )
