"""Single-slot queue scheduler driving items from request to playback."""

from __future__ import annotations

import asyncio
import base64
import logging
from typing import Callable, Literal, Optional

from ..errors import ProviderTransportError, VoiceNotFoundError
from ..pipeline.runner import PipelineResult, RequestPipeline
from ..schemas.app_settings import AppSettings
from ..schemas.queue import (
    ActionResult,
    HistoryStatus,
    ItemSource,
    ItemStatus,
    QueueItem,
    QueueSnapshot,
)
from ..schemas.voices import VoiceConfig
from ..services.events import AUDIO_PLAY, HISTORY_UPDATE, QUEUE_UPDATE, EventPublisher
from ..services.history import HistoryLog, build_history_entry
from ..services.streamerbot import OverlayActuator, RefundActuator
from ..services.synthesis import Synthesizer
from .state import InsertPosition, QueueState

logger = logging.getLogger(__name__)

ModerationAction = Literal["allow", "refund"]


class QueueScheduler:
    """Advance queued items one at a time: transform, synthesize, play, linger.

    Every failure path removes the item, records history and schedules the
    next advance, so a single bad item never stalls the queue. Lingering and
    processing may overlap; overlay show/hide never does.
    """

    def __init__(
        self,
        *,
        pipeline: RequestPipeline,
        synthesizer: Synthesizer,
        overlay: OverlayActuator,
        refunds: RefundActuator,
        history: HistoryLog,
        events: EventPublisher,
        settings: Callable[[], AppSettings],
    ):
        self._pipeline = pipeline
        self._synthesizer = synthesizer
        self._overlay = overlay
        self._refunds = refunds
        self._history = history
        self._events = events
        self._settings = settings
        self._state = QueueState()
        self._tasks: set[asyncio.Task[None]] = set()
        self._shutdown = False

    @property
    def state(self) -> QueueState:
        return self._state

    # Inbound

    def enqueue(
        self,
        text: str,
        *,
        alias: Optional[str] = None,
        username: Optional[str] = None,
        redemption_id: Optional[str] = None,
        reward_id: Optional[str] = None,
    ) -> tuple[QueueItem, int]:
        item = QueueItem(
            text=text,
            alias=alias,
            username=username,
            redemption_id=redemption_id,
            reward_id=reward_id,
        )
        position = self._state.append(item)
        logger.info(f"Queued {item.id} at position {position} for {username or 'anonymous'}")
        self._schedule_advance()
        return item, position

    def snapshot(self) -> QueueSnapshot:
        return QueueSnapshot(
            items=[item.summary() for item in self._state],
            is_processing=self._state.processing,
            is_paused=self._state.paused,
            current_id=self._state.current_id,
            is_lingering=self._state.is_lingering,
        )

    # Advance loop

    def _schedule_advance(self) -> None:
        if self._shutdown:
            return
        task = asyncio.create_task(self.advance())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def wait_idle(self) -> None:
        """Wait until no advance is in flight. Linger timers are not awaited."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def advance(self) -> None:
        """Claim the next queued item and carry it as far as playback."""
        if self._shutdown or self._state.paused or self._state.processing:
            return
        item = self._state.next_queued()
        if item is None:
            return

        self._state.begin_processing(item)
        await self._publish_queue()
        settings = self._settings()
        voice: Optional[VoiceConfig] = None

        try:
            voice = settings.resolve_voice(item.alias)
            if item.source is ItemSource.REQUEST:
                result = await self._pipeline.run(item.text, voice, settings)
                self._apply_pipeline_result(item, result)
                if result.blocked:
                    await self._handle_blocked(item, voice, settings)
                    return

            if not item.processed_text:
                await self._handle_failure(item, voice, "Message is empty after processing")
                return

            if item.audio is None:
                synthesized = await self._synthesizer.synthesize(item.processed_text, voice)
                item.audio = synthesized.audio
                item.history_item_id = synthesized.history_item_id
                item.characters_used = len(item.processed_text)

            await self._interrupt_lingering(settings)
            await self._play(item, voice, settings)
        except (ProviderTransportError, VoiceNotFoundError) as exc:
            message = exc.describe() if isinstance(exc, ProviderTransportError) else str(exc)
            await self._handle_failure(item, voice, message)
        except Exception as exc:
            logger.exception(f"Unexpected error while processing {item.id}")
            await self._handle_failure(item, voice, str(exc) or exc.__class__.__name__)

    @staticmethod
    def _apply_pipeline_result(item: QueueItem, result: PipelineResult) -> None:
        item.after_sanitization = result.after_sanitization
        item.sanitization_applied = list(result.sanitization_applied)
        item.after_replacements = result.after_replacements
        item.after_truncation = result.after_truncation
        item.was_truncated = result.was_truncated
        item.truncated_by = result.truncated_by
        item.pre_moderation_text = result.after_truncation
        item.moderation_used = result.moderation_used

        moderation = result.moderation
        if moderation is not None:
            item.tags_added = list(moderation.tags_added)
            item.moderation_usage = moderation.usage
            item.moderation_model = moderation.model
            item.moderation_error = moderation.error_summary
            item.content_rewritten = moderation.content_rewritten

        if result.blocked:
            item.block_reason = result.block_reason
            item.processed_text = None
        else:
            if moderation is not None:
                item.after_moderation = result.final_text
            item.processed_text = result.final_text

    async def _handle_blocked(
        self, item: QueueItem, voice: VoiceConfig, settings: AppSettings
    ) -> None:
        if settings.manual_moderation_enabled:
            item.status = ItemStatus.PENDING_MODERATION
            logger.info(f"Held {item.id} for review: {item.block_reason}")
        else:
            item.status = ItemStatus.BLOCKED
            item.refunded = await self._refunds.refund(
                item.redemption_id,
                item.reward_id,
                item.username,
                f"Content blocked: {item.block_reason}",
            )
            await self._record(item, "blocked", voice=voice)
            self._state.remove(item.id)
            logger.info(f"Blocked {item.id}: {item.block_reason}")

        self._state.finish_processing(item)
        await self._publish_queue()
        self._schedule_advance()

    async def _handle_failure(
        self, item: QueueItem, voice: Optional[VoiceConfig], message: str
    ) -> None:
        logger.error(f"TTS failed for {item.id}: {message}")
        item.status = ItemStatus.ERROR
        item.error = message
        if item.source is not ItemSource.REPLAY:
            item.refunded = await self._refunds.refund(
                item.redemption_id, item.reward_id, item.username, f"TTS error: {message}"
            )
            await self._record(item, "error", voice=voice)

        self._state.remove(item.id)
        self._state.finish_processing(item)
        await self._publish_queue()
        self._schedule_advance()

    # Playback and linger

    async def _interrupt_lingering(self, settings: AppSettings) -> None:
        pending = self._state.teardown
        if pending is not None:
            logger.debug("Waiting for the previous overlay hide to finish")
            await asyncio.wait({pending})
            await asyncio.sleep(settings.animation_duration_ms / 1000)

        lingering = self._state.lingering_item()
        if lingering is None:
            return
        logger.debug(f"Interrupting lingering item {lingering.id}")
        self._state.cancel_linger()
        if lingering.use_show_hide:
            await self._overlay.hide()
            await asyncio.sleep(settings.animation_duration_ms / 1000)
        self._state.remove(lingering.id)
        await self._publish_queue()

    async def _play(self, item: QueueItem, voice: VoiceConfig, settings: AppSettings) -> None:
        item.status = ItemStatus.PLAYING
        if item.use_show_hide:
            await self._overlay.show(item.display_text)
        await self._events.publish(
            AUDIO_PLAY,
            {
                "id": item.id,
                "alias": voice.alias,
                "audio_base64": base64.b64encode(item.audio or b"").decode("ascii"),
                "volume": settings.effective_volume(voice),
            },
        )
        await self._publish_queue()
        logger.info(f"Playing {item.id} with voice {voice.alias}")

    async def playback_finished(
        self, item_id: str, duration_ms: Optional[int] = None
    ) -> ActionResult:
        item = self._state.find(item_id)
        if item is None:
            return ActionResult(success=False, error="Item not found", item_id=item_id)
        if item.status is not ItemStatus.PLAYING:
            return ActionResult(
                success=False,
                error=f"Item is {item.status.value}, not playing",
                item_id=item_id,
            )

        settings = self._settings()
        self._state.finish_processing(item)
        if item.source is not ItemSource.REPLAY:
            await self._record(
                item,
                "completed",
                voice=settings.find_voice(item.alias),
                duration_ms=duration_ms,
            )

        self._state.cancel_linger()
        task = asyncio.create_task(self._linger(item, settings.minimum_linger_ms))
        self._state.start_linger(item, task)
        await self._publish_queue()
        self._schedule_advance()
        return ActionResult(success=True, item_id=item_id)

    async def _linger(self, item: QueueItem, linger_ms: int) -> None:
        try:
            await asyncio.sleep(linger_ms / 1000)
        except asyncio.CancelledError:
            logger.debug(f"Linger for {item.id} was interrupted")
            raise
        self._state.end_linger()
        self._state.remove(item.id)
        if item.use_show_hide:
            # The hide must reach the overlay before the next item's show
            hide = asyncio.ensure_future(self._overlay.hide())
            self._state.start_teardown(hide)
            await asyncio.shield(hide)
        await self._publish_queue()

    # Operator actions

    async def moderate(
        self,
        item_id: str,
        action: ModerationAction,
        position: InsertPosition = "back",
    ) -> ActionResult:
        item = self._state.find(item_id)
        if item is None or item.status is not ItemStatus.PENDING_MODERATION:
            return ActionResult(
                success=False, error="Item is not awaiting moderation", item_id=item_id
            )

        if action == "allow":
            self._state.remove(item.id)
            item.status = ItemStatus.QUEUED
            item.source = ItemSource.MODERATED
            item.use_show_hide = True
            item.moderation_override = True
            item.processed_text = item.pre_moderation_text or item.text
            self._state.insert(item, position)
            logger.info(f"Moderator allowed {item.id} ({position})")
            await self._publish_queue()
            self._schedule_advance()
            return ActionResult(success=True, item_id=item.id)

        item.status = ItemStatus.BLOCKED
        item.refunded = await self._refunds.refund(
            item.redemption_id, item.reward_id, item.username, "Manually refunded by streamer"
        )
        await self._record(item, "blocked", voice=self._settings().find_voice(item.alias))
        self._state.remove(item.id)
        await self._publish_queue()
        return ActionResult(success=True, refunded=item.refunded, item_id=item.id)

    async def cancel(self, item_id: str) -> ActionResult:
        item = self._state.find(item_id)
        if item is None:
            return ActionResult(success=False, error="Item not found", item_id=item_id)
        if item.status not in (ItemStatus.QUEUED, ItemStatus.PENDING_MODERATION):
            return ActionResult(
                success=False,
                error=f"Cannot cancel an item that is {item.status.value}",
                item_id=item_id,
            )

        item.status = ItemStatus.CANCELLED
        self._state.remove(item.id)
        if item.source is not ItemSource.REPLAY:
            item.refunded = await self._refunds.refund(
                item.redemption_id, item.reward_id, item.username, "Cancelled by streamer"
            )
            await self._record(
                item, "cancelled", voice=self._settings().find_voice(item.alias)
            )
        await self._publish_queue()
        return ActionResult(success=True, refunded=item.refunded, item_id=item.id)

    async def pause(self) -> None:
        self._state.paused = True
        logger.info("Queue paused")
        await self._publish_queue()

    async def resume(self) -> None:
        self._state.paused = False
        logger.info("Queue resumed")
        await self._publish_queue()
        self._schedule_advance()

    async def clear(self) -> int:
        """Drop every waiting item. Active and lingering items are left alone."""
        waiting = [
            item
            for item in self._state
            if item.status in (ItemStatus.QUEUED, ItemStatus.PENDING_MODERATION)
        ]
        settings = self._settings()
        for item in waiting:
            item.status = ItemStatus.CANCELLED
            self._state.remove(item.id)
            if item.source is not ItemSource.REPLAY:
                await self._record(
                    item,
                    "cancelled",
                    voice=settings.find_voice(item.alias),
                    error="Queue cleared",
                )
        logger.info(f"Cleared {len(waiting)} waiting items")
        await self._publish_queue()
        return len(waiting)

    async def replay(
        self,
        history_id: str,
        position: InsertPosition = "back",
        use_show_hide: bool = True,
    ) -> ActionResult:
        entry = self._history.find(history_id)
        if entry is None:
            return ActionResult(success=False, error="History entry not found", item_id=history_id)
        if not entry.history_item_id:
            return ActionResult(
                success=False, error="No stored audio for this entry", item_id=history_id
            )

        try:
            audio = await self._synthesizer.fetch_history_audio(entry.history_item_id)
        except ProviderTransportError as exc:
            logger.warning(f"Replay of {history_id} failed: {exc.describe()}")
            return ActionResult(success=False, error=exc.describe(), item_id=history_id)

        item = QueueItem(
            text=entry.original_text,
            alias=entry.voice_alias,
            username=entry.username,
            source=ItemSource.REPLAY,
            use_show_hide=use_show_hide,
            processed_text=entry.final_text,
            audio=audio,
            history_item_id=entry.history_item_id,
            characters_used=entry.characters_used,
        )
        self._state.insert(item, position)
        logger.info(f"Replaying history entry {history_id} as {item.id}")
        await self._publish_queue()
        self._schedule_advance()
        return ActionResult(success=True, item_id=item.id)

    async def refund_history(self, entry_id: str) -> ActionResult:
        entry = self._history.find(entry_id)
        if entry is None:
            return ActionResult(success=False, error="History entry not found", item_id=entry_id)
        if entry.refunded:
            return ActionResult(success=False, error="Already refunded", item_id=entry_id)
        if not entry.redemption_id or not entry.reward_id:
            return ActionResult(
                success=False, error="Missing redemption or reward id", item_id=entry_id
            )

        refunded = await self._refunds.refund(
            entry.redemption_id, entry.reward_id, entry.username, "Manual refund by streamer"
        )
        if not refunded:
            return ActionResult(
                success=False, error="Refund request failed", refunded=False, item_id=entry_id
            )
        updated = self._history.mark_refunded(entry_id)
        if updated is not None:
            await self._events.publish(HISTORY_UPDATE, {"entry": updated.model_dump(mode="json")})
        return ActionResult(success=True, refunded=True, item_id=entry_id)

    async def shutdown(self) -> None:
        self._shutdown = True
        self._state.cancel_linger()
        for task in list(self._tasks):
            if not task.done():
                task.cancel()
        await asyncio.gather(*list(self._tasks), return_exceptions=True)
        self._tasks.clear()

    # Helpers

    async def _record(
        self,
        item: QueueItem,
        status: HistoryStatus,
        *,
        voice: Optional[VoiceConfig] = None,
        duration_ms: Optional[int] = None,
        error: Optional[str] = None,
    ) -> None:
        entry = build_history_entry(
            item, status, voice=voice, duration_ms=duration_ms, error=error
        )
        await self._history.add(entry)
        await self._events.publish(HISTORY_UPDATE, {"entry": entry.model_dump(mode="json")})

    async def _publish_queue(self) -> None:
        await self._events.publish(QUEUE_UPDATE, self.snapshot().model_dump(mode="json"))


__all__ = ["ModerationAction", "QueueScheduler"]
