"""REST API endpoints for the request history."""

from __future__ import annotations

from typing import Any, Literal

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from ..scheduler import QueueScheduler
from ..schemas.queue import ActionResult, HistoryEntry
from ..services.history import HistoryLog
from .queue import ensure_success, get_scheduler

router = APIRouter(prefix="/api/history", tags=["history"])


class ReplayRequest(BaseModel):
    position: Literal["front", "back"] = "back"
    use_show_hide: bool = True


def get_history(request: Request) -> HistoryLog:
    history = getattr(request.app.state, "history", None)
    if history is None:
        raise HTTPException(status_code=503, detail="History not available")
    return history


def _require_entry(history: HistoryLog, entry_id: str) -> None:
    if history.find(entry_id) is None:
        raise HTTPException(status_code=404, detail="History entry not found")


@router.get("", response_model=list[HistoryEntry])
async def list_history(history: HistoryLog = Depends(get_history)) -> list[HistoryEntry]:
    """Newest entries first."""
    return history.entries


@router.delete("")
async def clear_history(history: HistoryLog = Depends(get_history)) -> dict[str, Any]:
    """Forget in-app history. Daily audit files are kept."""
    history.clear()
    return {"success": True}


@router.post("/{entry_id}/refund", response_model=ActionResult)
async def refund_entry(
    entry_id: str,
    history: HistoryLog = Depends(get_history),
    scheduler: QueueScheduler = Depends(get_scheduler),
) -> ActionResult:
    _require_entry(history, entry_id)
    return ensure_success(await scheduler.refund_history(entry_id))


@router.post("/{entry_id}/replay", response_model=ActionResult)
async def replay_entry(
    entry_id: str,
    body: ReplayRequest | None = None,
    history: HistoryLog = Depends(get_history),
    scheduler: QueueScheduler = Depends(get_scheduler),
) -> ActionResult:
    _require_entry(history, entry_id)
    body = body or ReplayRequest()
    return ensure_success(
        await scheduler.replay(entry_id, body.position, body.use_show_hide)
    )
