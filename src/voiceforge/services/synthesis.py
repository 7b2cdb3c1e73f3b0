"""ElevenLabs text-to-speech client."""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import httpx
from fastapi import status

from voiceforge.config import Settings
from voiceforge.errors import SynthesisError
from voiceforge.schemas.voices import VoiceConfig

logger = logging.getLogger(__name__)

OUTPUT_FORMAT = "mp3_44100_128"


@dataclass
class SynthesisResult:
    audio: bytes
    history_item_id: Optional[str] = None


class Synthesizer(Protocol):
    async def synthesize(self, text: str, voice: VoiceConfig) -> SynthesisResult: ...

    async def fetch_history_audio(self, history_item_id: str) -> bytes: ...


class ElevenLabsSynthesizer:
    """
    Synthesize complete utterances with ElevenLabs.

    Uses a singleton httpx.AsyncClient for connection pooling across requests.
    The provider-side history id returned with each clip is kept so the clip
    can be replayed later without paying for synthesis again.
    """

    # Singleton HTTP client for connection pooling
    _http_client: Optional[httpx.AsyncClient] = None

    def __init__(
        self,
        settings: Settings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._api_key = (
            settings.elevenlabs_api_key.get_secret_value()
            if settings.elevenlabs_api_key else None
        )
        self._base_url = str(settings.elevenlabs_base_url).rstrip("/")
        self._timeout = settings.elevenlabs_timeout
        self._transport = transport

        if not self._api_key:
            logger.warning("No ElevenLabs API key configured. Synthesis will fail.")

    def _client(self) -> httpx.AsyncClient:
        if self._transport is not None:
            return httpx.AsyncClient(transport=self._transport, timeout=self._timeout)
        cls = self.__class__
        if cls._http_client is None:
            cls._http_client = httpx.AsyncClient(timeout=self._timeout)
            logger.info("Created singleton httpx.AsyncClient for synthesis")
        return cls._http_client

    @classmethod
    async def close_http_client(cls) -> None:
        """Close the singleton HTTP client. Call on app shutdown."""
        if cls._http_client is not None:
            await cls._http_client.aclose()
            cls._http_client = None
            logger.info("Closed synthesis HTTP client")

    @property
    def _headers(self) -> dict[str, str]:
        if not self._api_key:
            raise SynthesisError(
                status.HTTP_503_SERVICE_UNAVAILABLE, "ElevenLabs API key is not configured"
            )
        return {"xi-api-key": self._api_key, "Content-Type": "application/json"}

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        client = self._client()
        try:
            response = await client.request(method, url, headers=self._headers, **kwargs)
        except httpx.HTTPError as exc:
            raise SynthesisError(status.HTTP_502_BAD_GATEWAY, str(exc)) from exc
        finally:
            if self._transport is not None:
                await client.aclose()

        if response.status_code >= 400:
            raise SynthesisError(response.status_code, self._error_detail(response))
        return response

    async def synthesize(self, text: str, voice: VoiceConfig) -> SynthesisResult:
        if not voice.elevenlabs_voice_id:
            raise SynthesisError(
                status.HTTP_400_BAD_REQUEST, f"Voice {voice.alias} has no ElevenLabs voice id"
            )

        payload = {
            "text": text,
            "model_id": voice.elevenlabs_model_id,
            "voice_settings": voice.voice_settings(),
        }
        response = await self._request(
            "POST",
            f"{self._base_url}/text-to-speech/{voice.elevenlabs_voice_id}",
            params={"output_format": OUTPUT_FORMAT},
            json=payload,
        )
        audio = response.content
        history_item_id = response.headers.get("history-item-id")
        logger.info(
            f"ElevenLabs synthesized {len(audio)} bytes for voice {voice.alias}: {text[:50]}..."
        )
        return SynthesisResult(audio=audio, history_item_id=history_item_id)

    async def fetch_history_audio(self, history_item_id: str) -> bytes:
        response = await self._request(
            "GET", f"{self._base_url}/history/{history_item_id}/audio"
        )
        return response.content

    @staticmethod
    def _error_detail(response: httpx.Response):
        try:
            payload = response.json()
        except ValueError:
            return response.text or f"ElevenLabs returned {response.status_code}"
        if isinstance(payload, dict):
            detail = payload.get("detail") or payload
            if isinstance(detail, dict):
                return detail.get("message") or detail
            return detail
        return payload


__all__ = ["ElevenLabsSynthesizer", "SynthesisResult", "Synthesizer"]
