# briki/services/plan_catalog.py
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd
from pydantic import ValidationError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from .. import config
from ..deps import get_engine
from ..schemas import INSURANCE_CATEGORIES, InsurancePlan, PlanFilters
from .keywords import normalize_text

logger = logging.getLogger(__name__)

# Columns stored as JSON strings in plans.sqlite
JSON_COLUMNS = (
    "coverage", "features", "exclusions", "addOns", "tags",
    "restrictions", "availableCountries",
)

SELECT_ALL = text("SELECT * FROM plans")


def _decode_row(row: Dict[str, Any]) -> Dict[str, Any]:
    out = {}
    for key, value in row.items():
        if value is None:
            continue
        if key in JSON_COLUMNS and isinstance(value, str):
            value = json.loads(value) if value else None
            if value is None:
                continue
        out[key] = value
    return out


def _parse_plan(raw: Dict[str, Any], source: str) -> Optional[InsurancePlan]:
    try:
        return InsurancePlan.model_validate(raw)
    except ValidationError as e:
        logger.warning("Skipping invalid plan from %s: %s", source, e.errors()[:3])
        return None


def load_plans_from_sqlite() -> List[InsurancePlan]:
    """Read the plans table. Raises FileNotFoundError when the database is missing."""
    eng = get_engine()
    df = pd.read_sql(SELECT_ALL, eng)
    if df.empty:
        return []
    # NaN -> None so optional fields validate
    df = df.astype(object).where(pd.notna(df), None)
    plans = []
    for row in df.to_dict(orient="records"):
        try:
            decoded = _decode_row(row)
        except json.JSONDecodeError as e:
            logger.warning("Skipping plan %s with bad JSON column: %s", row.get("id"), e)
            continue
        plan = _parse_plan(decoded, "sqlite")
        if plan is not None:
            plans.append(plan)
    return plans


def load_plans_from_json(plans_dir: Path | None = None) -> List[InsurancePlan]:
    """
    Load seed plans laid out as <plans_dir>/<category>/*.json.

    A file whose plan category differs from its folder, or that fails to
    parse, is skipped with a warning.
    """
    base = Path(plans_dir or config.PLANS_DIR)
    plans: List[InsurancePlan] = []
    for category in INSURANCE_CATEGORIES:
        folder = base / category
        if not folder.is_dir():
            logger.warning("Plan directory not found: %s", folder)
            continue
        for path in sorted(folder.glob("*.json")):
            try:
                with open(path, "r", encoding="utf-8") as f:
                    raw = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.warning("Could not read plan file %s: %s", path, e)
                continue
            plan = _parse_plan(raw, str(path))
            if plan is None:
                continue
            if plan.category != category:
                logger.warning(
                    "Plan in %s has category %s, expected %s", path.name, plan.category, category
                )
                continue
            if not plan.external_link:
                plan = plan.model_copy(update={"external_link": f"https://brikiapp.com/plan/{plan.id}"})
            plans.append(plan)
    return plans


def load_plans() -> List[InsurancePlan]:
    """
    Full catalog for one request.

    Preference order:
      1) plans.sqlite built by the data pipeline
      2) JSON seed files
      3) empty list (the ranker treats it as a no-op)
    """
    try:
        plans = load_plans_from_sqlite()
        if plans:
            return plans
        logger.info("plans.sqlite is empty, falling back to JSON seeds")
    except (FileNotFoundError, SQLAlchemyError) as e:
        logger.info("SQLite catalog unavailable (%s), falling back to JSON seeds", e)

    try:
        return load_plans_from_json()
    except OSError as e:
        logger.error("Could not load JSON seed plans: %s", e)
        return []


def plans_by_category(plans: List[InsurancePlan], category: str) -> List[InsurancePlan]:
    return [p for p in plans if p.category == category]


def find_plan(plans: List[InsurancePlan], plan_id: str) -> Optional[InsurancePlan]:
    for plan in plans:
        if plan.id == plan_id:
            return plan
    return None


def find_plans(plans: List[InsurancePlan], plan_ids: List[str]) -> List[InsurancePlan]:
    """Plans for the given ids, in id order; unknown ids are ignored."""
    by_id = {p.id: p for p in plans}
    return [by_id[i] for i in plan_ids if i in by_id]


def plans_by_tags(plans: List[InsurancePlan], tags: List[str]) -> List[InsurancePlan]:
    """Plans with at least one tag containing any of `tags` (case and accent insensitive)."""
    wanted = [normalize_text(t).strip() for t in tags]
    wanted = [t for t in wanted if t]
    if not wanted:
        return []
    out = []
    for plan in plans:
        plan_tags = [normalize_text(t) for t in plan.tags]
        if any(w in t for w in wanted for t in plan_tags):
            out.append(plan)
    return out


def _outside(value: Optional[float], low: Optional[float], high: Optional[float]) -> bool:
    # unknown values are not filtered out
    if value is None:
        return False
    if low is not None and value < low:
        return True
    return high is not None and value > high


def filter_plans(plans: List[InsurancePlan], filters: PlanFilters) -> List[InsurancePlan]:
    """
    Attribute filter: price, coverage and deductible ranges, currency,
    providers, minimum rating, status and a region tag substring.

    Every criterion left unset is ignored; plans missing a deductible or
    rating pass those checks.
    """
    region = normalize_text(filters.region).strip() if filters.region else ""
    out = []
    for plan in plans:
        if _outside(plan.base_price, filters.min_price, filters.max_price):
            continue
        if _outside(plan.coverage_amount, filters.min_coverage, filters.max_coverage):
            continue
        if _outside(plan.deductible, filters.min_deductible, filters.max_deductible):
            continue
        if filters.currency and plan.currency != filters.currency:
            continue
        if filters.providers and plan.provider not in filters.providers:
            continue
        if _outside(plan.rating, filters.min_rating, None):
            continue
        if filters.status and plan.status != filters.status:
            continue
        if region and not any(region in normalize_text(t) for t in plan.tags):
            continue
        out.append(plan)
    return out
