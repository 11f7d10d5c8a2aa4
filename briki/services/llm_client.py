# briki/services/llm_client.py
from __future__ import annotations

import logging
import time
from typing import Callable, Dict, List, Optional

import openai
from openai import OpenAI

from .. import config

logger = logging.getLogger(__name__)


class LLMUnavailableError(RuntimeError):
    """The chat model could not produce a reply after all retries."""


class ChatCompletionClient:
    """
    Thin wrapper over the OpenAI chat completions API.

    Failed calls are retried with exponential backoff
    (backoff, 2*backoff, 4*backoff, ...) before giving up.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = config.OPENAI_MODEL,
        *,
        max_retries: int = config.LLM_MAX_RETRIES,
        backoff_seconds: float = config.LLM_BACKOFF_SECONDS,
        max_tokens: int = config.LLM_MAX_TOKENS,
        temperature: float = config.LLM_TEMPERATURE,
        client=None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        # max_retries=0 on the SDK client: retries are handled here
        self.client = client or OpenAI(api_key=api_key, max_retries=0)
        self.model = model
        self.max_retries = max(1, max_retries)
        self.backoff_seconds = backoff_seconds
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._sleep = sleep

    def complete(self, messages: List[Dict[str, str]]) -> str:
        last_error: Optional[Exception] = None
        for attempt in range(1, self.max_retries + 1):
            try:
                start = time.monotonic()
                response = self.client.chat.completions.create(
                    model=self.model,
                    messages=messages,
                    max_tokens=self.max_tokens,
                    temperature=self.temperature,
                )
                usage = getattr(response, "usage", None)
                logger.info(
                    "LLM reply in %.0fms (model=%s, tokens=%s)",
                    (time.monotonic() - start) * 1000,
                    self.model,
                    getattr(usage, "total_tokens", 0),
                )
                content = response.choices[0].message.content
                return content or "Lo siento, no pude generar una respuesta."
            except openai.APIError as e:
                last_error = e
                logger.warning("LLM attempt %d/%d failed: %s", attempt, self.max_retries, e)
                if attempt < self.max_retries:
                    self._sleep(self.backoff_seconds * 2 ** (attempt - 1))
        raise LLMUnavailableError(f"chat completion failed after {self.max_retries} attempts") from last_error
