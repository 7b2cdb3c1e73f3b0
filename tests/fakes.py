"""In-memory collaborators shared by the scheduler and router tests."""

from __future__ import annotations

import asyncio
from typing import Any, Optional

from voiceforge.errors import OpenRouterError, SynthesisError
from voiceforge.moderation.orchestrator import ModerationResult
from voiceforge.openrouter import Completion
from voiceforge.pipeline.runner import PipelineResult, RequestPipeline
from voiceforge.schemas.app_settings import AppSettings
from voiceforge.schemas.voices import VoiceConfig
from voiceforge.services.events import QUEUE_UPDATE
from voiceforge.services.synthesis import SynthesisResult


class FakeProvider:
    """Answers each sub-call by its label; an exception value is raised."""

    def __init__(self, responses: Optional[dict[str, Any]] = None):
        self.responses = responses or {}
        self.calls: list[dict[str, Any]] = []

    async def complete(
        self,
        system_prompt: str,
        user_text: str,
        *,
        model: str,
        reasoning_effort: str = "minimal",
        max_tokens: int = 2048,
        label: str = "completion",
    ) -> Completion:
        self.calls.append(
            {
                "label": label,
                "system_prompt": system_prompt,
                "user_text": user_text,
                "model": model,
                "max_tokens": max_tokens,
            }
        )
        response = self.responses.get(label, "PASS" if label != "voice" else user_text)
        if isinstance(response, Exception):
            raise response
        return Completion(
            text=response,
            model=model,
            prompt_tokens=10,
            completion_tokens=5,
            total_tokens=15,
        )


def provider_failure(message: str = "upstream timeout") -> OpenRouterError:
    return OpenRouterError(502, message)


class FakePipeline(RequestPipeline):
    """Real sanitize/replace/truncate stages with scripted moderation verdicts."""

    def __init__(self, blocked: Optional[dict[str, str]] = None):
        super().__init__(None, api_key_present=False)
        self.blocked = blocked or {}

    async def run(
        self, text: str, voice: Optional[VoiceConfig], settings: AppSettings
    ) -> PipelineResult:
        result = self.transform(text, voice, settings)
        reason = self.blocked.get(text)
        if reason is not None:
            result.moderation_used = True
            result.moderation = ModerationResult(blocked=True, block_reason=reason)
        return result


class FakeSynthesizer:
    def __init__(self, fail_on: Optional[set[str]] = None):
        self.fail_on = fail_on or set()
        self.texts: list[str] = []
        self.fetched: list[str] = []

    async def synthesize(self, text: str, voice: VoiceConfig) -> SynthesisResult:
        self.texts.append(text)
        if text in self.fail_on:
            raise SynthesisError(500, "voice exploded")
        return SynthesisResult(
            audio=f"audio:{text}".encode(), history_item_id=f"hist-{len(self.texts)}"
        )

    async def fetch_history_audio(self, history_item_id: str) -> bytes:
        self.fetched.append(history_item_id)
        return b"replayed"


class GatedSynthesizer(FakeSynthesizer):
    """Holds synthesis of the listed texts until the test opens the gate."""

    def __init__(self, gated: set[str]):
        super().__init__()
        self.gated = gated
        self.gate = asyncio.Event()

    async def synthesize(self, text: str, voice: VoiceConfig) -> SynthesisResult:
        if text in self.gated:
            await self.gate.wait()
        return await super().synthesize(text, voice)


class FakeActuator:
    """Overlay and refund actuator recording every call in order."""

    def __init__(self):
        self.overlay: list[tuple[str, ...]] = []
        self.refunds: list[dict[str, Any]] = []

    async def show(self, text: str) -> None:
        self.overlay.append(("show", text))

    async def hide(self) -> None:
        self.overlay.append(("hide",))

    async def refund(self, redemption_id, reward_id, username, reason) -> bool:
        self.refunds.append(
            {
                "redemption_id": redemption_id,
                "reward_id": reward_id,
                "username": username,
                "reason": reason,
            }
        )
        return bool(redemption_id and reward_id)


class SlowHideActuator(FakeActuator):
    """Records a hide only once the test opens the gate."""

    def __init__(self):
        super().__init__()
        self.gate = asyncio.Event()

    async def hide(self) -> None:
        await self.gate.wait()
        await super().hide()


class FakeEvents:
    def __init__(self):
        self.events: list[tuple[str, dict[str, Any]]] = []

    async def publish(self, event: str, payload: dict[str, Any]) -> None:
        self.events.append((event, payload))

    def of_type(self, event: str) -> list[dict[str, Any]]:
        return [payload for name, payload in self.events if name == event]


class SlowQueueEvents(FakeEvents):
    """Blocks queue updates that show no lingering item while the gate is shut."""

    def __init__(self):
        super().__init__()
        self.gate = asyncio.Event()
        self.gate.set()

    async def publish(self, event: str, payload: dict[str, Any]) -> None:
        if event == QUEUE_UPDATE and not payload.get("is_lingering"):
            await self.gate.wait()
        await super().publish(event, payload)


def make_app_settings(**overrides: Any) -> AppSettings:
    values: dict[str, Any] = {
        "voices": [
            VoiceConfig(alias="robot", elevenlabs_voice_id="voice-robot"),
            VoiceConfig(alias="loud", elevenlabs_voice_id="voice-loud", volume=150),
        ],
        "default_voice_alias": "robot",
        "minimum_linger_ms": 60_000,
        "animation_duration_ms": 0,
    }
    values.update(overrides)
    return AppSettings(**values)
