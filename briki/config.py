"""Centralized configuration for the Briki plan service.

Reads settings from environment variables (via python-dotenv) with sensible
defaults. Numeric values use safe parsers that log a warning and fall back
to the default when the env value is invalid or out of range.
"""
import logging
import math
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _safe_int(key: str, default: int) -> int:
    """Parse *key* from the environment as an int, returning *default* on failure."""
    raw = os.environ.get(key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid %s=%r, using default %d", key, raw, default)
        return default


def _safe_float(key: str, default: float) -> float:
    """Parse *key* from the environment as a float, returning *default* on failure or non-finite values."""
    raw = os.environ.get(key)
    if raw is None:
        return default
    try:
        val = float(raw)
        if math.isnan(val) or math.isinf(val):
            logger.warning("Invalid %s=%r (non-finite), using default %s", key, raw, default)
            return default
        return val
    except ValueError:
        logger.warning("Invalid %s=%r, using default %s", key, raw, default)
        return default


def _safe_positive_int(key: str, default: int) -> int:
    """Parse env as int; require value >= 1, else use default and log."""
    val = _safe_int(key, default)
    if val < 1:
        logger.warning("Invalid %s=%d (must be >= 1), using default %d", key, val, default)
        return default
    return val


def _safe_float_positive(key: str, default: float) -> float:
    """Parse env as float; require value > 0, else use default and log."""
    val = _safe_float(key, default)
    if val <= 0:
        logger.warning("Invalid %s=%s (must be > 0), using default %s", key, val, default)
        return default
    return val


ROOT = Path(__file__).resolve().parents[1]

DATA_DIR = Path(os.environ.get("BRIKI_DATA_DIR", ROOT / "briki" / "data"))
PLANS_DIR = Path(os.environ.get("BRIKI_PLANS_DIR", DATA_DIR / "plans"))
SQLITE_PATH = Path(os.environ.get("BRIKI_SQLITE_PATH", DATA_DIR / "plans.sqlite"))

# OpenAI chat model used by the assistant; empty key means offline replies
OPENAI_API_KEY: str | None = os.environ.get("OPENAI_API_KEY") or None
OPENAI_MODEL = os.environ.get("OPENAI_MODEL", "gpt-4o")
LLM_MAX_TOKENS = _safe_positive_int("LLM_MAX_TOKENS", 1000)
LLM_TEMPERATURE = _safe_float("LLM_TEMPERATURE", 0.7)
LLM_MAX_RETRIES = _safe_positive_int("LLM_MAX_RETRIES", 3)
LLM_BACKOFF_SECONDS = _safe_float_positive("LLM_BACKOFF_SECONDS", 1.0)

# Two-letter code used when the caller does not send one
DEFAULT_COUNTRY = os.environ.get("DEFAULT_COUNTRY", "CO").strip().upper() or "CO"

# Ranking limits
CHAT_PLAN_LIMIT = _safe_positive_int("CHAT_PLAN_LIMIT", 3)
CHAT_CONTEXT_PLANS = _safe_positive_int("CHAT_CONTEXT_PLANS", 6)
SEARCH_DEFAULT_LIMIT = _safe_positive_int("SEARCH_DEFAULT_LIMIT", 5)
MAX_HISTORY_MESSAGES = _safe_positive_int("MAX_HISTORY_MESSAGES", 6)

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"
