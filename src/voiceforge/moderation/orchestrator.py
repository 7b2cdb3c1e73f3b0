"""Parallel moderation and voice-direction against the generative provider."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Literal, Optional, Protocol

from ..errors import ProviderTransportError
from ..openrouter import Completion, DEFAULT_MAX_TOKENS, voice_direction_max_tokens
from ..pipeline.directives import NEUTRAL_TAG, postprocess_directive_tags
from ..schemas.moderation import EffectiveGenerativeConfig
from ..schemas.queue import UsageMetrics
from .preservation import check_word_preservation, has_spam_directive
from .prompts import (
    RESPONSE_BLOCKED_PREFIX,
    build_copyright_prompt,
    build_safety_prompt,
    build_topics_prompt,
    build_voice_direction_prompt,
)

logger = logging.getLogger(__name__)

TaskKind = Literal["safety", "topics", "copyright", "voice"]
TaskStatus = Literal["success", "blocked", "provider_error"]

# Fold order; the first classifier to block supplies the reason
CLASSIFIER_ORDER: tuple[TaskKind, ...] = ("safety", "topics", "copyright")

DEFAULT_BLOCK_REASON = "Content flagged as inappropriate"


class GenerativeProvider(Protocol):
    async def complete(
        self,
        system_prompt: str,
        user_text: str,
        *,
        model: str,
        reasoning_effort: str = "minimal",
        max_tokens: int = DEFAULT_MAX_TOKENS,
        label: str = "completion",
    ) -> Completion: ...


@dataclass
class Verdict:
    blocked: bool
    reason: Optional[str] = None


def parse_verdict(response: Optional[str]) -> Verdict:
    """Read a classifier answer. Anything but a ``BLOCKED:`` prefix is a pass."""

    if not response:
        return Verdict(blocked=False)
    trimmed = response.strip()
    if trimmed.upper().startswith(RESPONSE_BLOCKED_PREFIX):
        reason = trimmed[len(RESPONSE_BLOCKED_PREFIX) :].strip()
        return Verdict(blocked=True, reason=reason or DEFAULT_BLOCK_REASON)
    return Verdict(blocked=False)


@dataclass
class TaskOutcome:
    kind: TaskKind
    status: TaskStatus
    output: str = ""
    completion: Optional[Completion] = None
    error: Optional[str] = None
    block_reason: Optional[str] = None


@dataclass
class ModerationResult:
    blocked: bool = False
    block_reason: Optional[str] = None
    text: str = ""
    tags_added: list[str] = field(default_factory=list)
    usage: UsageMetrics = field(default_factory=UsageMetrics)
    model: Optional[str] = None
    content_rewritten: bool = False
    preservation_ratio: float = 1.0
    preservation_warning: Optional[str] = None
    provider_errors: dict[str, str] = field(default_factory=dict)
    prompts: dict[str, str] = field(default_factory=dict)

    @property
    def error_summary(self) -> Optional[str]:
        if not self.provider_errors:
            return None
        return "; ".join(f"{kind}: {error}" for kind, error in self.provider_errors.items())


class ModerationOrchestrator:
    """Run the classifier prompts and the voice-direction transform concurrently."""

    def __init__(self, provider: GenerativeProvider):
        self._provider = provider

    def build_prompts(
        self, config: EffectiveGenerativeConfig, *, emotion_capable: bool
    ) -> dict[TaskKind, str]:
        moderation = config.content_moderation
        prompts: dict[TaskKind, str] = {}
        if moderation.enabled:
            candidates: dict[TaskKind, Optional[str]] = {
                "safety": build_safety_prompt(moderation),
                "topics": build_topics_prompt(
                    moderation.blocked_topics, moderation.custom_instructions
                ),
                "copyright": build_copyright_prompt(moderation.rules),
            }
            prompts.update({kind: prompt for kind, prompt in candidates.items() if prompt})
        prompts["voice"] = build_voice_direction_prompt(
            emotion_capable=emotion_capable and config.emotion_enhancement,
            profanity=moderation.profanity,
        )
        return prompts

    async def _run_task(
        self,
        kind: TaskKind,
        prompt: str,
        text: str,
        *,
        model: str,
        reasoning_effort: str,
    ) -> TaskOutcome:
        max_tokens = voice_direction_max_tokens(text) if kind == "voice" else DEFAULT_MAX_TOKENS
        try:
            completion = await self._provider.complete(
                prompt,
                text,
                model=model,
                reasoning_effort=reasoning_effort,
                max_tokens=max_tokens,
                label=kind,
            )
        except ProviderTransportError as exc:
            logger.error("[%s] provider call failed: %s", kind, exc.describe())
            return TaskOutcome(kind=kind, status="provider_error", error=str(exc))

        if kind == "voice":
            return TaskOutcome(
                kind=kind, status="success", output=completion.text, completion=completion
            )
        verdict = parse_verdict(completion.text)
        return TaskOutcome(
            kind=kind,
            status="blocked" if verdict.blocked else "success",
            output=completion.text,
            completion=completion,
            block_reason=verdict.reason,
        )

    async def process(
        self,
        text: str,
        config: EffectiveGenerativeConfig,
        *,
        emotion_capable: bool,
    ) -> ModerationResult:
        if not text:
            return ModerationResult(text="")

        model = config.model or "openai/gpt-5-nano"
        prompts = self.build_prompts(config, emotion_capable=emotion_capable)
        kinds = list(prompts)
        logger.info("Running %d generative tasks in parallel: %s", len(kinds), ", ".join(kinds))

        started = time.perf_counter()
        settled = await asyncio.gather(
            *(
                self._run_task(
                    kind,
                    prompts[kind],
                    text,
                    model=model,
                    reasoning_effort=config.reasoning_effort,
                )
                for kind in kinds
            ),
            return_exceptions=True,
        )

        outcomes: dict[TaskKind, TaskOutcome] = {}
        for kind, outcome in zip(kinds, settled):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, BaseException):
                logger.error("[%s] task raised unexpectedly", kind, exc_info=outcome)
                outcome = TaskOutcome(kind=kind, status="provider_error", error=str(outcome))
            outcomes[kind] = outcome

        usage = UsageMetrics(
            total_ms=round((time.perf_counter() - started) * 1000),
            parallel_tasks=len(kinds),
        )
        for outcome in outcomes.values():
            if outcome.completion is not None:
                usage.prompt_tokens += outcome.completion.prompt_tokens
                usage.completion_tokens += outcome.completion.completion_tokens
                usage.total_tokens += outcome.completion.total_tokens

        result = ModerationResult(
            usage=usage,
            model=model,
            prompts=dict(prompts),
            provider_errors={
                kind: outcome.error or "unknown error"
                for kind, outcome in outcomes.items()
                if outcome.status == "provider_error"
            },
        )

        for kind in CLASSIFIER_ORDER:
            outcome = outcomes.get(kind)
            if outcome is not None and outcome.status == "blocked":
                logger.info("Content blocked by %s: %s", kind, outcome.block_reason)
                result.blocked = True
                result.block_reason = outcome.block_reason
                return result

        classifier_errors = [
            outcomes[kind].error
            for kind in CLASSIFIER_ORDER
            if kind in outcomes and outcomes[kind].status == "provider_error"
        ]
        moderation = config.content_moderation
        if classifier_errors and moderation.enabled:
            if moderation.on_failure == "block":
                result.blocked = True
                result.block_reason = f"Content moderation unavailable: {classifier_errors[0]}"
                logger.warning("Moderation failed closed: %s", result.block_reason)
                return result
            logger.warning(
                "Moderation failed open, continuing without a verdict: %s",
                "; ".join(str(error) for error in classifier_errors),
            )

        voice = outcomes.get("voice")
        candidate = voice.output if voice is not None and voice.output else text

        if not has_spam_directive(text):
            preservation = check_word_preservation(text, candidate, moderation.profanity)
            result.preservation_ratio = preservation.ratio
            if not preservation.preserved:
                logger.warning(
                    "Voice direction rewrote the message, using original: %s",
                    preservation.warning,
                )
                result.content_rewritten = True
                result.preservation_warning = preservation.warning
                tags_active = emotion_capable and config.emotion_enhancement
                candidate = f"{NEUTRAL_TAG} {text}" if tags_active else text

        processed = postprocess_directive_tags(candidate)
        result.text = processed.text
        result.tags_added = processed.tags_found
        return result


__all__ = [
    "CLASSIFIER_ORDER",
    "GenerativeProvider",
    "ModerationOrchestrator",
    "ModerationResult",
    "TaskOutcome",
    "Verdict",
    "parse_verdict",
]
