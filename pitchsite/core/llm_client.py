"""
LLM client for external-service content composition.
Wraps OpenAI chat completions with a hard timeout and a circuit breaker.
A failed call is never retried; callers fall back instead.
"""

import time
from typing import Optional, Tuple, Dict, Any

import structlog

from .config import settings

logger = structlog.get_logger()


class LLMError(Exception):
    """Any failure to obtain usable text from the LLM."""


class CircuitBreaker:
    """
    Simple in-memory circuit breaker per key_name.
    - Open after N consecutive failures; remain open for cooldown seconds
    - When open, calls fail immediately so the composer uses templates
    """
    _state: Dict[str, Dict[str, Any]] = {}

    @classmethod
    def _now(cls) -> float:
        return time.time()

    @classmethod
    def record_result(cls, key: str, success: bool) -> None:
        st = cls._state.setdefault(key, {"failures": 0, "open_until": 0.0})
        if success:
            st["failures"] = 0
            st["open_until"] = 0.0
        else:
            st["failures"] += 1
            if st["failures"] >= settings.CIRCUIT_BREAKER_THRESHOLD:
                st["open_until"] = cls._now() + settings.CIRCUIT_BREAKER_COOLDOWN

    @classmethod
    def is_open(cls, key: str) -> bool:
        st = cls._state.get(key)
        if not st:
            return False
        if st["open_until"] <= cls._now():
            return False
        return True

    @classmethod
    def reset(cls) -> None:
        cls._state = {}


class LLMClient:
    """
    OpenAI chat-completions client returning (text, metadata).
    """

    SYSTEM_PROMPT = (
        "You are an expert B2B marketing copywriter specializing in personalized "
        "account-based marketing content. Return only valid JSON."
    )

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None, timeout: Optional[int] = None):
        from openai import OpenAI

        self.api_key = api_key or settings.OPENAI_API_KEY
        if not self.api_key:
            raise ValueError("OPENAI_API_KEY is required")

        self.model = model or settings.OPENAI_MODEL
        self.timeout = timeout or settings.LLM_TIMEOUT
        self.client = OpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=0)

    def generate(
        self,
        key_name: str,
        prompt: str,
        force_json: bool = True,
        temperature: float = 0.7,
    ) -> Tuple[str, Dict[str, Any]]:
        """
        Generate a completion.

        Args:
            key_name: Identifier for circuit breaker tracking
            prompt: The user prompt
            force_json: Request a JSON object response
            temperature: Sampling temperature

        Returns:
            Tuple of (response_text, metadata)

        Raises:
            LLMError: breaker open, API failure, timeout or empty response
        """
        meta: Dict[str, Any] = {
            "model": self.model,
            "token_usage": 0,
        }

        if CircuitBreaker.is_open(key_name):
            raise LLMError(
                f"Circuit breaker is open for {key_name}. "
                f"Wait {settings.CIRCUIT_BREAKER_COOLDOWN}s before retrying."
            )

        kwargs: Dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": self.SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": temperature,
        }
        if force_json:
            kwargs["response_format"] = {"type": "json_object"}

        started = time.monotonic()
        try:
            resp = self.client.chat.completions.create(**kwargs)
            raw = resp.choices[0].message.content if resp.choices else None
            if not raw:
                raise LLMError("Empty response from model")
        except LLMError:
            CircuitBreaker.record_result(key_name, success=False)
            raise
        except Exception as e:
            CircuitBreaker.record_result(key_name, success=False)
            raise LLMError(f"{self.model} generation failed: {e}") from e

        CircuitBreaker.record_result(key_name, success=True)

        meta["duration_seconds"] = round(time.monotonic() - started, 2)
        usage = getattr(resp, "usage", None)
        if usage is not None:
            meta["token_usage"] = getattr(usage, "total_tokens", 0) or 0

        logger.info("llm_generation_complete", key=key_name, **meta)
        return raw, meta
