"""Text pipeline stages applied to every viewer request."""

from .directives import ALLOWED_DIRECTIVE_TAGS, is_emotion_capable, postprocess_directive_tags
from .length import apply_max_length, resolve_max_length
from .replacements import apply_replacements, preview_rule, validate_pattern
from .runner import PipelineResult, RequestPipeline
from .sanitizer import resolve_sanitization, sanitize

__all__ = [
    "ALLOWED_DIRECTIVE_TAGS",
    "PipelineResult",
    "RequestPipeline",
    "apply_max_length",
    "apply_replacements",
    "is_emotion_capable",
    "postprocess_directive_tags",
    "resolve_max_length",
    "resolve_sanitization",
    "preview_rule",
    "sanitize",
    "validate_pattern",
]
