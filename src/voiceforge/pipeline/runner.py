"""Run one request through sanitize -> replace -> truncate -> moderate."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from ..moderation.resolution import resolve_generative_config
from ..schemas.app_settings import AppSettings
from ..schemas.moderation import EffectiveGenerativeConfig
from ..schemas.queue import UsageMetrics
from ..schemas.voices import VoiceConfig
from .directives import is_emotion_capable
from .length import TruncatedBy, apply_max_length, resolve_max_length
from .replacements import AppliedRuleSet, apply_replacements
from .sanitizer import resolve_sanitization, sanitize

if TYPE_CHECKING:
    from ..moderation.orchestrator import ModerationOrchestrator, ModerationResult

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    original_text: str
    after_sanitization: str = ""
    sanitization_applied: list[str] = field(default_factory=list)
    after_replacements: str = ""
    replacement_sets: list[AppliedRuleSet] = field(default_factory=list)
    after_truncation: str = ""
    was_truncated: bool = False
    truncated_by: Optional[TruncatedBy] = None
    moderation_used: bool = False
    moderation: Optional[ModerationResult] = None
    final_text: str = ""

    @property
    def blocked(self) -> bool:
        return self.moderation is not None and self.moderation.blocked

    @property
    def block_reason(self) -> Optional[str]:
        return self.moderation.block_reason if self.moderation is not None else None

    @property
    def tags_added(self) -> list[str]:
        return list(self.moderation.tags_added) if self.moderation is not None else []

    @property
    def usage(self) -> Optional[UsageMetrics]:
        return self.moderation.usage if self.moderation is not None else None


def _moderation_wanted(config: EffectiveGenerativeConfig) -> bool:
    return config.enabled and (
        config.content_moderation.enabled or config.emotion_enhancement
    )


class RequestPipeline:
    """Pure text pipeline; the scheduler owns every side effect."""

    def __init__(
        self,
        orchestrator: Optional[ModerationOrchestrator],
        *,
        api_key_present: bool,
    ):
        self._orchestrator = orchestrator
        self._api_key_present = api_key_present

    def resolve_generative(
        self, voice: Optional[VoiceConfig], settings: AppSettings
    ) -> EffectiveGenerativeConfig:
        return resolve_generative_config(
            voice,
            settings.generative,
            api_key_present=self._api_key_present and self._orchestrator is not None,
        )

    def transform(
        self, text: str, voice: Optional[VoiceConfig], settings: AppSettings
    ) -> PipelineResult:
        """Run the synchronous stages (sanitize, replace, truncate)."""

        result = PipelineResult(original_text=text)
        logger.info("[1/6] SOURCE: %r", text)

        sanitized = sanitize(text, resolve_sanitization(voice, settings.sanitization))
        result.after_sanitization = sanitized.text
        result.sanitization_applied = sanitized.applied
        logger.info(
            "[2/6] SANITIZE: %r (%s)",
            sanitized.text,
            ", ".join(sanitized.applied) or "unchanged",
        )

        replaced = apply_replacements(sanitized.text, voice, settings.global_replacements)
        result.after_replacements = replaced.text
        result.replacement_sets = replaced.applied
        logger.info(
            "[3/6] REPLACE: %r (%d rule sets fired)", replaced.text, len(replaced.applied)
        )

        limited = apply_max_length(
            replaced.text, resolve_max_length(voice, settings.max_message_length)
        )
        result.after_truncation = limited.text
        result.was_truncated = limited.was_truncated
        result.truncated_by = limited.truncated_by
        logger.info(
            "[4/6] TRUNCATE: %r (%s)",
            limited.text,
            f"by {limited.truncated_by}" if limited.truncated_by else "within limits",
        )

        result.final_text = limited.text
        return result

    async def run(
        self, text: str, voice: Optional[VoiceConfig], settings: AppSettings
    ) -> PipelineResult:
        result = self.transform(text, voice, settings)

        config = self.resolve_generative(voice, settings)
        if self._orchestrator is None or not _moderation_wanted(config) or not result.final_text:
            logger.info("[5/6] MODERATE: skipped")
        else:
            moderation = await self._orchestrator.process(
                result.after_truncation,
                config,
                emotion_capable=is_emotion_capable(voice.elevenlabs_model_id if voice else None),
            )
            result.moderation_used = True
            result.moderation = moderation
            if moderation.blocked:
                logger.info("[5/6] MODERATE: blocked (%s)", moderation.block_reason)
            else:
                if moderation.text:
                    result.final_text = moderation.text
                logger.info(
                    "[5/6] MODERATE: %r (tags: %s)",
                    result.final_text,
                    ", ".join(moderation.tags_added) or "none",
                )

        logger.info("[6/6] FINAL: %r", None if result.blocked else result.final_text)
        return result


__all__ = ["PipelineResult", "RequestPipeline"]
