"""Overlay and refund actuation through Streamer.bot's HTTP server."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Protocol

import httpx

from ..config import Settings
from ..schemas.app_settings import StreamerbotActions

logger = logging.getLogger(__name__)


class OverlayActuator(Protocol):
    async def show(self, text: str) -> None: ...

    async def hide(self) -> None: ...


class RefundActuator(Protocol):
    async def refund(
        self,
        redemption_id: Optional[str],
        reward_id: Optional[str],
        username: Optional[str],
        reason: str,
    ) -> bool: ...


class StreamerbotActuator:
    """Trigger Streamer.bot actions via ``POST /DoAction``.

    Show and hide are best effort: a missing action id or server URL is a
    silent no-op and transport failures are only logged. ``refund`` reports
    whether the action was accepted and never raises.
    """

    def __init__(
        self,
        settings: Settings,
        actions: Callable[[], StreamerbotActions],
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = (
            str(settings.streamerbot_url).rstrip("/") if settings.streamerbot_url else None
        )
        self._timeout = settings.streamerbot_timeout
        self._actions = actions
        self._transport = transport

    async def _do_action(self, action_id: str, args: dict[str, Any]) -> bool:
        if not self._base_url:
            return False
        payload = {"action": {"id": action_id}, "args": args}
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(f"{self._base_url}/DoAction", json=payload)
        except httpx.HTTPError as exc:
            logger.warning("Streamer.bot action %s failed: %s", action_id, exc)
            return False
        if response.status_code >= 400:
            logger.warning(
                "Streamer.bot action %s returned %s: %s",
                action_id,
                response.status_code,
                response.text[:200],
            )
            return False
        return True

    async def show(self, text: str) -> None:
        action_id = self._actions().show_action_id
        if action_id:
            await self._do_action(action_id, {"text": text})

    async def hide(self) -> None:
        action_id = self._actions().hide_action_id
        if action_id:
            await self._do_action(action_id, {})

    async def refund(
        self,
        redemption_id: Optional[str],
        reward_id: Optional[str],
        username: Optional[str],
        reason: str,
    ) -> bool:
        if not redemption_id or not reward_id:
            logger.info("Refund skipped, missing redemption or reward id (%s)", reason)
            return False
        action_id = self._actions().refund_action_id
        if not action_id:
            logger.warning("Refund skipped, no refund action configured (%s)", reason)
            return False

        accepted = await self._do_action(
            action_id,
            {
                "redemptionId": redemption_id,
                "rewardId": reward_id,
                "username": username or "",
                "reason": reason,
            },
        )
        if accepted:
            logger.info("Refund requested for %s: %s", username or "unknown", reason)
        return accepted


__all__ = ["OverlayActuator", "RefundActuator", "StreamerbotActuator"]
