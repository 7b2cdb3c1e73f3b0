"""OpenRouter chat-completion client used by the moderation stage."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

import httpx
from fastapi import status

from .config import Settings
from .errors import OpenRouterError

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 2048
DEFAULT_TEMPERATURE = 0.3


@dataclass(frozen=True)
class ModelCapabilities:
    """Which request parameters a model accepts."""

    max_tokens_param: str = "max_completion_tokens"
    supports_temperature: bool = False
    is_reasoning_model: bool = True


_REASONING = ModelCapabilities()
_CLASSIC = ModelCapabilities(
    max_tokens_param="max_tokens",
    supports_temperature=True,
    is_reasoning_model=False,
)
_REALTIME = ModelCapabilities(is_reasoning_model=False)

MODEL_CAPABILITIES: dict[str, ModelCapabilities] = {
    "gpt-5": _REASONING,
    "gpt-5-nano": _REASONING,
    "gpt-5-mini": _REASONING,
    "gpt-5.1": _REASONING,
    "gpt-5.2": _REASONING,
    "gpt-5.2-pro": _REASONING,
    "gpt-4o": _CLASSIC,
    "gpt-4o-mini": _CLASSIC,
    "gpt-realtime": _REALTIME,
    "gpt-realtime-mini": _REALTIME,
}


def get_model_capabilities(model: str) -> ModelCapabilities:
    """Look up ``model`` by its bare id; unknown models are treated as reasoning models."""

    bare = model.rsplit("/", 1)[-1]
    return MODEL_CAPABILITIES.get(bare, _REASONING)


def voice_direction_max_tokens(text: str) -> int:
    """Scale the transform budget with the input to stop runaway generation."""

    return min(max(len(text) * 3, 256), DEFAULT_MAX_TOKENS)


@dataclass
class Completion:
    text: str
    model: str
    elapsed_ms: int = 0
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class OpenRouterClient:
    """Client for single-shot chat completions against OpenRouter."""

    _client_lock: asyncio.Lock = asyncio.Lock()
    _client_pool: dict[tuple[str, float], httpx.AsyncClient] = {}

    def __init__(
        self,
        settings: Settings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._settings = settings
        self._transport = transport

    def _client_key(self) -> tuple[str, float]:
        return (self._base_url, float(self._settings.request_timeout))

    async def _get_http_client(self) -> httpx.AsyncClient:
        if self._transport is not None:
            return httpx.AsyncClient(transport=self._transport)

        key = self._client_key()
        client = self.__class__._client_pool.get(key)
        if client is not None:
            return client

        async with self.__class__._client_lock:
            client = self.__class__._client_pool.get(key)
            if client is None:
                timeout = httpx.Timeout(self._settings.request_timeout, connect=10.0)
                limits = httpx.Limits(
                    max_connections=20,
                    max_keepalive_connections=10,
                )
                client = httpx.AsyncClient(
                    timeout=timeout,
                    limits=limits,
                    http2=True,
                )
                self.__class__._client_pool[key] = client
        return client

    @property
    def _headers(self) -> dict[str, str]:
        api_key = self._settings.openrouter_api_key
        if api_key is None:
            raise OpenRouterError(
                status.HTTP_503_SERVICE_UNAVAILABLE, "OpenRouter API key is not configured"
            )
        headers = {
            "Authorization": f"Bearer {api_key.get_secret_value()}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self._settings.openrouter_app_url:
            referer = str(self._settings.openrouter_app_url)
            headers["HTTP-Referer"] = referer
            headers["Referer"] = referer
        if self._settings.openrouter_app_name:
            headers["X-Title"] = self._settings.openrouter_app_name
        return headers

    @property
    def _base_url(self) -> str:
        """Return the OpenRouter API base URL without a trailing slash."""

        return str(self._settings.openrouter_base_url).rstrip("/")

    @staticmethod
    def build_payload(
        system_prompt: str,
        user_text: str,
        *,
        model: str,
        reasoning_effort: str = "minimal",
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> dict[str, Any]:
        capabilities = get_model_capabilities(model)
        payload: dict[str, Any] = {
            "model": model,
            "stream": False,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_text},
            ],
            capabilities.max_tokens_param: max_tokens,
        }
        if capabilities.is_reasoning_model:
            payload["reasoning"] = {"effort": reasoning_effort or "minimal"}
        if capabilities.supports_temperature:
            payload["temperature"] = DEFAULT_TEMPERATURE
        return payload

    async def complete(
        self,
        system_prompt: str,
        user_text: str,
        *,
        model: str,
        reasoning_effort: str = "minimal",
        max_tokens: int = DEFAULT_MAX_TOKENS,
        label: str = "completion",
    ) -> Completion:
        """Run one completion and return its text and usage.

        Transport failures and non-2xx responses raise ``OpenRouterError``.
        """

        payload = self.build_payload(
            system_prompt,
            user_text,
            model=model,
            reasoning_effort=reasoning_effort,
            max_tokens=max_tokens,
        )

        client = await self._get_http_client()
        started = time.perf_counter()
        try:
            response = await client.post(
                f"{self._base_url}/chat/completions",
                headers=self._headers,
                json=payload,
            )
        except httpx.HTTPError as exc:
            raise OpenRouterError(status.HTTP_502_BAD_GATEWAY, str(exc)) from exc
        finally:
            if self._transport is not None:
                await client.aclose()

        elapsed_ms = round((time.perf_counter() - started) * 1000)

        if response.status_code >= 400:
            detail = self._extract_error_detail(response.content)
            raise OpenRouterError(response.status_code, detail)

        try:
            body = response.json()
        except ValueError as exc:
            raise OpenRouterError(status.HTTP_502_BAD_GATEWAY, str(exc)) from exc

        text = self._extract_text(body)
        usage = body.get("usage") if isinstance(body, Mapping) else None
        usage = usage if isinstance(usage, Mapping) else {}

        logger.info(
            "[%s] %s completed in %dms: %r",
            label,
            model,
            elapsed_ms,
            text[:100] + ("..." if len(text) > 100 else ""),
        )

        return Completion(
            text=text,
            model=str(body.get("model") or model),
            elapsed_ms=elapsed_ms,
            prompt_tokens=int(usage.get("prompt_tokens") or 0),
            completion_tokens=int(usage.get("completion_tokens") or 0),
            total_tokens=int(usage.get("total_tokens") or 0),
        )

    @staticmethod
    def _extract_text(payload: Any) -> str:
        if not isinstance(payload, Mapping):
            raise OpenRouterError(
                status.HTTP_502_BAD_GATEWAY, "Completion response is not an object"
            )
        choices = payload.get("choices")
        if not isinstance(choices, Sequence) or not choices:
            # An empty completion is a valid (empty) answer
            return ""
        first = choices[0]
        message = first.get("message") if isinstance(first, Mapping) else None
        if not isinstance(message, Mapping):
            return ""
        content = message.get("content")
        if isinstance(content, str):
            return content.strip()
        if isinstance(content, Sequence):
            parts = [
                part.get("text", "")
                for part in content
                if isinstance(part, Mapping) and part.get("type") == "text"
            ]
            return "".join(parts).strip()
        return ""

    @staticmethod
    def _extract_error_detail(raw: bytes) -> Any:
        if not raw:
            return "OpenRouter returned an empty error response."
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError:
            text = raw.decode("utf-8", errors="ignore")
        try:
            payload = json.loads(text)
        except json.JSONDecodeError:
            return text
        if isinstance(payload, dict):
            return payload.get("error") or payload
        return payload

    @classmethod
    async def aclose_shared(cls) -> None:
        async with cls._client_lock:
            clients = list(cls._client_pool.values())
            cls._client_pool.clear()
        for client in clients:
            try:
                await client.aclose()
            except Exception:  # pragma: no cover - best effort cleanup
                logger.debug("Failed to close pooled OpenRouter client", exc_info=True)


__all__ = [
    "Completion",
    "MODEL_CAPABILITIES",
    "ModelCapabilities",
    "OpenRouterClient",
    "get_model_capabilities",
    "voice_direction_max_tokens",
]
