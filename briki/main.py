# briki/main.py
from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Path, Query

from . import config
from .deps import get_llm_client
from .schemas import (
    ChatRequest,
    ChatResponse,
    FilterResponse,
    InsuranceCategory,
    InsurancePlan,
    IntentRequest,
    IntentResponse,
    PlanFilters,
    SearchResponse,
)
from .services.assistant import generate_reply
from .services.intent import detect_category, extract_requested_plan_count, should_suggest_plans
from .services.plan_catalog import (
    filter_plans,
    find_plan,
    load_plans,
    plans_by_category,
    plans_by_tags,
)
from .services.ranker import filter_by_country, rank_plans

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Briki Insurance Assistant")


# -----------------------------
# Dependencies
# -----------------------------
def get_catalog() -> List[InsurancePlan]:
    """Fresh catalog per request; never raises (falls back to [])."""
    return load_plans()


# -----------------------------
# Routes
# -----------------------------
@app.get("/health")
def health(plans: List[InsurancePlan] = Depends(get_catalog)):
    return {"status": "ok", "plans": len(plans)}


@app.get("/plans", response_model=List[InsurancePlan])
def list_plans(
    category: Optional[InsuranceCategory] = Query(None, description="travel, auto, pet or health"),
    plans: List[InsurancePlan] = Depends(get_catalog),
):
    if category:
        return plans_by_category(plans, category)
    return plans


@app.get("/plans/search", response_model=SearchResponse)
def search_plans(
    query: Optional[str] = Query(None, description="Free-text need, e.g. 'seguro barato para mi perro'"),
    limit: int = Query(config.SEARCH_DEFAULT_LIMIT, ge=1, le=50),
    country: Optional[str] = Query(None, description="Two-letter country code; omit to search all plans"),
    plans: List[InsurancePlan] = Depends(get_catalog),
):
    if not query or not query.strip():
        raise HTTPException(status_code=400, detail="A search query is required.")
    candidates = filter_by_country(plans, country)
    results = rank_plans(query, candidates, limit)
    logger.info("Search %r -> %d of %d plans", query, len(results), len(candidates))
    return SearchResponse(results=results, count=len(results), query=query)


@app.get("/plans/tags", response_model=List[InsurancePlan])
def plans_with_tags(
    tags: Optional[str] = Query(None, description="Comma-separated tags, e.g. 'económico,familiar'"),
    plans: List[InsurancePlan] = Depends(get_catalog),
):
    wanted = [t.strip() for t in (tags or "").split(",") if t.strip()]
    if not wanted:
        raise HTTPException(status_code=400, detail="At least one tag is required.")
    results = plans_by_tags(plans, wanted)
    logger.info("Tags %s -> %d plans", wanted, len(results))
    return results


@app.post("/plans/filter", response_model=FilterResponse)
def filter_catalog(
    filters: PlanFilters,
    plans: List[InsurancePlan] = Depends(get_catalog),
):
    if filters.is_empty():
        raise HTTPException(status_code=400, detail="At least one filter criterion is required.")
    results = filter_plans(plans, filters)
    return FilterResponse(results=results, count=len(results), filters=filters)


@app.get("/plans/{plan_id}", response_model=InsurancePlan)
def get_plan_detail(
    plan_id: str = Path(..., description="Plan id, e.g. pet-sura-basico"),
    plans: List[InsurancePlan] = Depends(get_catalog),
):
    plan = find_plan(plans, plan_id)
    if plan is None:
        raise HTTPException(status_code=404, detail=f"Plan '{plan_id}' not found.")
    return plan


@app.post("/assistant/chat", response_model=ChatResponse)
def chat(
    req: ChatRequest,
    plans: List[InsurancePlan] = Depends(get_catalog),
    llm=Depends(get_llm_client),
):
    reply = generate_reply(
        req.message,
        plans,
        history=req.history,
        country=req.country,
        previous_plan_ids=req.previous_plan_ids,
        llm=llm,
    )
    return ChatResponse(
        message=reply.message,
        suggested_plans=reply.suggested_plans,
        category=reply.category,
        needs_more_context=reply.needs_more_context,
        suggested_questions=reply.suggested_questions,
        used_fallback=reply.used_fallback,
    )


@app.post("/assistant/intent", response_model=IntentResponse)
def intent(req: IntentRequest):
    return IntentResponse(
        suggest_plans=should_suggest_plans(req.message),
        category=detect_category(req.message),
        requested_count=extract_requested_plan_count(req.message),
    )
