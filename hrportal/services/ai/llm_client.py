"""
Shared LLM client

Wraps an OpenAI-compatible chat completion endpoint with request throttling
and JSON extraction.
"""
import asyncio
import json
import time
from contextlib import asynccontextmanager
from typing import Dict, List, Any, Optional, Tuple
from openai import AsyncOpenAI
from loguru import logger

from hrportal.core.config import settings


class LLMResponseError(ValueError):
    """The model answered with something that is not usable"""


class RequestThrottle:
    """
    Per-minute request budget plus a cap on requests in flight

    The budget refills continuously. A caller that finds it empty sleeps for
    exactly the time the next request needs to become available.
    """

    def __init__(self, per_minute: int, max_in_flight: int):
        self.per_minute = max(per_minute, 1)
        self.max_in_flight = max(max_in_flight, 1)
        self._budget = float(self.per_minute)
        self._refilled_at = time.monotonic()
        self._budget_lock = asyncio.Lock()
        self._in_flight = asyncio.Semaphore(self.max_in_flight)

    def _refill(self) -> None:
        now = time.monotonic()
        earned = (now - self._refilled_at) * self.per_minute / 60.0
        self._budget = min(float(self.per_minute), self._budget + earned)
        self._refilled_at = now

    async def _spend(self) -> None:
        async with self._budget_lock:
            self._refill()
            while self._budget < 1:
                await asyncio.sleep((1 - self._budget) * 60.0 / self.per_minute)
                self._refill()
            self._budget -= 1

    @asynccontextmanager
    async def slot(self):
        """Hold one request's worth of budget and one in-flight slot"""
        await self._spend()
        async with self._in_flight:
            yield


def extract_json(content: str) -> Dict[str, Any]:
    """
    Parse the JSON object inside a model reply

    Strips markdown code fences, then parses the span between the first
    '{' and the last '}'.
    """
    text = content.strip()
    if text.startswith("```json"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    text = text.strip()

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        logger.error("No JSON object in LLM reply: {}", text[:500])
        raise LLMResponseError("LLM reply does not contain a JSON object")

    try:
        data = json.loads(text[start:end + 1])
    except json.JSONDecodeError as exc:
        logger.error("JSON parse failed: {}\nRaw content: {}", exc, text[:500])
        raise LLMResponseError(f"LLM reply is not valid JSON: {exc}")
    if not isinstance(data, dict):
        raise LLMResponseError("LLM reply JSON is not an object")
    return data


class LLMClient:
    """
    Process-wide LLM client

    Shared through get_llm_client() so every request handler and background
    job draws from the same throttle. The OpenAI client is only built on the
    first real call, so an unconfigured deployment still starts and serves
    the rule-based fallbacks.
    """

    def __init__(self):
        self.model = settings.llm_model
        self.api_key = settings.llm_api_key
        self.base_url = settings.llm_base_url
        self.temperature = settings.llm_temperature
        self.max_tokens = settings.llm_max_tokens
        self.timeout = settings.llm_timeout

        self._client: Optional[AsyncOpenAI] = None
        self._throttle = RequestThrottle(settings.llm_rate_limit, settings.llm_max_concurrency)
        logger.info(
            "LLMClient ready: model={}, max_concurrency={}, rate_limit={}/min",
            self.model,
            settings.llm_max_concurrency,
            settings.llm_rate_limit,
        )

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self.is_configured():
                raise LLMResponseError("LLM API key is not configured")
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
            )
        return self._client

    async def chat(
        self,
        messages: List[Dict[str, str]],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        model: Optional[str] = None,
    ) -> str:
        """Send a chat request, return the reply text"""
        client = self.client
        async with self._throttle.slot():
            try:
                response = await client.chat.completions.create(
                    model=model or self.model,
                    messages=messages,
                    temperature=temperature if temperature is not None else self.temperature,
                    max_tokens=max_tokens or self.max_tokens,
                )
            except Exception as exc:
                logger.error("LLM call failed: {}", exc)
                raise
        if not response or not response.choices:
            raise LLMResponseError("LLM returned no choices")
        content = response.choices[0].message.content
        if content is None:
            raise LLMResponseError("LLM returned empty content")
        return content.strip()

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """System + user message, free-text reply"""
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        return await self.chat(messages, temperature, max_tokens)

    async def complete_json(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> Dict[str, Any]:
        """System + user message, parsed JSON reply"""
        content = await self.complete(system_prompt, user_prompt, temperature, max_tokens)
        return extract_json(content)

    async def complete_json_or_fallback(
        self,
        system_prompt: str,
        user_prompt: str,
        fallback: Dict[str, Any],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> Tuple[Dict[str, Any], bool]:
        """
        Like complete_json, but any transport or parse failure yields `fallback`

        Returns (data, is_fallback).
        """
        try:
            if not self.is_configured():
                raise LLMResponseError("LLM API key is not configured")
            data = await self.complete_json(system_prompt, user_prompt, temperature, max_tokens)
            return data, False
        except Exception as exc:
            logger.warning("Using fallback result: {}", exc)
            return fallback, True

    def is_configured(self) -> bool:
        """Whether an API key is set"""
        return bool(self.api_key) and self.api_key != "your-api-key-here"

    def get_status(self) -> Dict[str, Any]:
        return {
            "model": self.model,
            "base_url": self.base_url,
            "api_key_configured": self.is_configured(),
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "timeout": self.timeout,
            "max_concurrency": settings.llm_max_concurrency,
            "rate_limit": settings.llm_rate_limit,
        }


_llm_client: Optional[LLMClient] = None


def get_llm_client() -> LLMClient:
    """LLMClient singleton"""
    global _llm_client
    if _llm_client is None:
        _llm_client = LLMClient()
    return _llm_client
