"""Preview endpoints for sanitization, replacement rules and truncation."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from ..pipeline import RequestPipeline, preview_rule, validate_pattern
from ..schemas.voices import ReplacementRule
from ..services.settings_store import SettingsStore
from .settings import get_settings_store

router = APIRouter(prefix="/api/text-processing", tags=["text-processing"])


class TextTestRequest(BaseModel):
    text: str
    alias: Optional[str] = None
    include_moderation: bool = Field(
        default=False,
        description="Also run the generative stage (calls the provider).",
    )


class RulePreviewRequest(BaseModel):
    text: str
    rule: ReplacementRule


class PatternRequest(BaseModel):
    pattern: str


def get_pipeline(request: Request) -> RequestPipeline:
    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        raise HTTPException(status_code=503, detail="Text pipeline not available")
    return pipeline


@router.post("/test")
async def test_text(
    body: TextTestRequest,
    pipeline: RequestPipeline = Depends(get_pipeline),
    store: SettingsStore = Depends(get_settings_store),
) -> dict[str, Any]:
    """Show what each stage does to ``text`` for the given voice."""
    settings = store.get_settings()
    voice = settings.find_voice(body.alias) or settings.find_voice(settings.default_voice_alias)
    if body.include_moderation:
        result = await pipeline.run(body.text, voice, settings)
    else:
        result = pipeline.transform(body.text, voice, settings)

    return {
        "original": result.original_text,
        "after_sanitization": result.after_sanitization,
        "sanitization_applied": result.sanitization_applied,
        "after_replacements": result.after_replacements,
        "replacement_sets": [asdict(applied) for applied in result.replacement_sets],
        "after_truncation": result.after_truncation,
        "was_truncated": result.was_truncated,
        "truncated_by": result.truncated_by,
        "moderation_used": result.moderation_used,
        "blocked": result.blocked,
        "block_reason": result.block_reason,
        "tags_added": result.tags_added,
        "final": None if result.blocked else result.final_text,
        "voice_alias": voice.alias if voice else None,
    }


@router.post("/test-rule")
async def preview_replacement_rule(body: RulePreviewRequest) -> dict[str, Any]:
    return asdict(preview_rule(body.text, body.rule))


@router.post("/validate-pattern")
async def validate_regex_pattern(body: PatternRequest) -> dict[str, Any]:
    return asdict(validate_pattern(body.pattern))
