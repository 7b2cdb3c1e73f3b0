"""API routes for the operator settings document."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from ..schemas.app_settings import AppSettings
from ..services.settings_store import SettingsStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/settings", tags=["settings"])


def get_settings_store(request: Request) -> SettingsStore:
    store = getattr(request.app.state, "settings_store", None)
    if store is None:
        raise HTTPException(status_code=503, detail="Settings store not available")
    return store


def _apply_runtime_settings(request: Request, settings: AppSettings) -> None:
    history = getattr(request.app.state, "history", None)
    if history is not None:
        history.configure(
            limit=settings.history_in_app_limit,
            file_logging_enabled=settings.history_file_logging_enabled,
        )


@router.get("", response_model=AppSettings)
async def read_settings(store: SettingsStore = Depends(get_settings_store)) -> AppSettings:
    return store.get_settings()


@router.put("", response_model=AppSettings)
async def update_settings(
    payload: AppSettings,
    request: Request,
    store: SettingsStore = Depends(get_settings_store),
) -> AppSettings:
    saved = store.replace(payload)
    _apply_runtime_settings(request, saved)
    logger.info(f"Settings updated ({len(saved.voices)} voices)")
    return saved


@router.post("/reset", response_model=AppSettings)
async def reset_settings(
    request: Request, store: SettingsStore = Depends(get_settings_store)
) -> AppSettings:
    defaults = store.reset_to_defaults()
    _apply_runtime_settings(request, defaults)
    return defaults
