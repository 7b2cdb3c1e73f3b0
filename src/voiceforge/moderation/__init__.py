"""Content moderation and voice direction via the generative provider."""

from .orchestrator import (
    GenerativeProvider,
    ModerationOrchestrator,
    ModerationResult,
    TaskOutcome,
    parse_verdict,
)
from .preservation import PreservationResult, check_word_preservation
from .resolution import resolve_generative_config

__all__ = [
    "GenerativeProvider",
    "ModerationOrchestrator",
    "ModerationResult",
    "PreservationResult",
    "TaskOutcome",
    "check_word_preservation",
    "parse_verdict",
    "resolve_generative_config",
]
