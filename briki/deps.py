from functools import lru_cache
from sqlalchemy import create_engine

from . import config


@lru_cache(maxsize=1)
def get_engine():
    if not config.SQLITE_PATH.exists():
        # The data pipeline creates this; callers fall back to the JSON seeds
        raise FileNotFoundError(
            f"{config.SQLITE_PATH} not found. Run data_pipeline/build_plans_sqlite.py"
        )
    return create_engine(f"sqlite:///{config.SQLITE_PATH}")


@lru_cache(maxsize=1)
def get_llm_client():
    """Shared chat client, or None when no OpenAI key is configured."""
    if not config.OPENAI_API_KEY:
        return None
    from .services.llm_client import ChatCompletionClient
    return ChatCompletionClient(api_key=config.OPENAI_API_KEY, model=config.OPENAI_MODEL)
