"""Exception types shared across the pipeline, providers and scheduler."""

from __future__ import annotations

from typing import Any


class RuleError(ValueError):
    """A single replacement rule could not be compiled."""

    def __init__(self, pattern: str, reason: str):
        super().__init__(f"Invalid replacement rule {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class ProviderTransportError(Exception):
    """Wrap transport or API failures when talking to an external provider."""

    provider = "provider"

    def __init__(self, status_code: int, detail: Any):
        super().__init__(str(detail))
        self.status_code = status_code
        self.detail = detail

    def describe(self) -> str:
        detail = self.detail
        if isinstance(detail, dict):
            detail = detail.get("message") or detail
        return f"{self.provider} error {self.status_code}: {detail}"


class OpenRouterError(ProviderTransportError):
    """Failure while requesting a completion from the generative text provider."""

    provider = "OpenRouter"


class SynthesisError(ProviderTransportError):
    """Failure while requesting audio from the synthesis provider."""

    provider = "ElevenLabs"


class VoiceNotFoundError(LookupError):
    """No voice profile matches the requested alias or the configured default."""

    def __init__(self, alias: str | None):
        super().__init__(f"No voice found for alias: {alias}")
        self.alias = alias


class SchedulerInvariantViolation(RuntimeError):
    """An operator action referenced an item in an unexpected state."""


__all__ = [
    "OpenRouterError",
    "ProviderTransportError",
    "RuleError",
    "SchedulerInvariantViolation",
    "SynthesisError",
    "VoiceNotFoundError",
]
