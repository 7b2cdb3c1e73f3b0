"""REST API endpoints for the playback queue."""

from __future__ import annotations

from typing import Any, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from ..scheduler import QueueScheduler
from ..schemas.queue import ActionResult, QueueSnapshot

router = APIRouter(prefix="/api/queue", tags=["queue"])


class FinishedRequest(BaseModel):
    """Optional playback report sent by the playback consumer."""

    duration_ms: Optional[int] = Field(default=None, ge=0)


class ModerateRequest(BaseModel):
    """Operator decision for an item held for review."""

    action: Literal["allow", "refund"]
    position: Literal["front", "back"] = "back"


def get_scheduler(request: Request) -> QueueScheduler:
    scheduler = getattr(request.app.state, "scheduler", None)
    if scheduler is None:
        raise HTTPException(status_code=503, detail="Queue scheduler not available")
    return scheduler


def ensure_success(result: ActionResult) -> ActionResult:
    """Translate a failed operator action into a 409 response."""
    if not result.success:
        raise HTTPException(status_code=409, detail=result.error or "Action failed")
    return result


def _require_item(scheduler: QueueScheduler, item_id: str) -> None:
    if scheduler.state.find(item_id) is None:
        raise HTTPException(status_code=404, detail="Queue item not found")


@router.get("", response_model=QueueSnapshot)
async def read_queue(scheduler: QueueScheduler = Depends(get_scheduler)) -> QueueSnapshot:
    return scheduler.snapshot()


@router.post("/pause", response_model=QueueSnapshot)
async def pause_queue(scheduler: QueueScheduler = Depends(get_scheduler)) -> QueueSnapshot:
    await scheduler.pause()
    return scheduler.snapshot()


@router.post("/resume", response_model=QueueSnapshot)
async def resume_queue(scheduler: QueueScheduler = Depends(get_scheduler)) -> QueueSnapshot:
    await scheduler.resume()
    return scheduler.snapshot()


@router.post("/clear")
async def clear_queue(scheduler: QueueScheduler = Depends(get_scheduler)) -> dict[str, Any]:
    cleared = await scheduler.clear()
    return {"success": True, "cleared": cleared}


@router.post("/{item_id}/finished", response_model=ActionResult)
async def playback_finished(
    item_id: str,
    body: Optional[FinishedRequest] = None,
    scheduler: QueueScheduler = Depends(get_scheduler),
) -> ActionResult:
    _require_item(scheduler, item_id)
    duration_ms = body.duration_ms if body is not None else None
    return ensure_success(await scheduler.playback_finished(item_id, duration_ms))


@router.post("/{item_id}/moderate", response_model=ActionResult)
async def moderate_item(
    item_id: str,
    body: ModerateRequest,
    scheduler: QueueScheduler = Depends(get_scheduler),
) -> ActionResult:
    """Allow a held item back into the queue, or refund and drop it."""
    _require_item(scheduler, item_id)
    return ensure_success(await scheduler.moderate(item_id, body.action, body.position))


@router.post("/{item_id}/cancel", response_model=ActionResult)
async def cancel_item(
    item_id: str, scheduler: QueueScheduler = Depends(get_scheduler)
) -> ActionResult:
    _require_item(scheduler, item_id)
    return ensure_success(await scheduler.cancel(item_id))
