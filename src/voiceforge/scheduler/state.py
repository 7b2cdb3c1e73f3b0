"""Owned queue state for the single-slot scheduler."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterator, Literal, Optional

from ..errors import SchedulerInvariantViolation
from ..schemas.queue import ItemStatus, QueueItem

logger = logging.getLogger(__name__)

InsertPosition = Literal["front", "back"]


class QueueState:
    """Ordered work list plus the ``processing`` and ``paused`` flags.

    Every mutation goes through these methods so the single-processing rule
    is checked in one place. The scheduler is the only owner.
    """

    def __init__(self) -> None:
        self._items: list[QueueItem] = []
        self.paused = False
        self._current_id: Optional[str] = None
        self._lingering_id: Optional[str] = None
        self._linger_task: Optional[asyncio.Task[None]] = None
        self._teardown: Optional[asyncio.Future[None]] = None

    def __iter__(self) -> Iterator[QueueItem]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    @property
    def processing(self) -> bool:
        return self._current_id is not None

    @property
    def current_id(self) -> Optional[str]:
        return self._current_id

    @property
    def is_lingering(self) -> bool:
        return self._lingering_id is not None

    def find(self, item_id: str) -> Optional[QueueItem]:
        return next((item for item in self._items if item.id == item_id), None)

    def append(self, item: QueueItem) -> int:
        """Add ``item`` at the back and return its 1-based position."""
        self._items.append(item)
        return len(self._items)

    def insert(self, item: QueueItem, position: InsertPosition) -> int:
        """Insert ahead of the remaining queued items or at the back."""
        if position == "back":
            return self.append(item)
        index = next(
            (i for i, other in enumerate(self._items) if other.status is ItemStatus.QUEUED),
            len(self._items),
        )
        self._items.insert(index, item)
        return index + 1

    def remove(self, item_id: str) -> Optional[QueueItem]:
        item = self.find(item_id)
        if item is not None:
            self._items.remove(item)
        return item

    def next_queued(self) -> Optional[QueueItem]:
        return next((item for item in self._items if item.status is ItemStatus.QUEUED), None)

    def begin_processing(self, item: QueueItem) -> None:
        if self._current_id is not None:
            raise SchedulerInvariantViolation(
                f"Cannot start {item.id} while {self._current_id} is processing"
            )
        item.status = ItemStatus.PROCESSING
        self._current_id = item.id

    def finish_processing(self, item: QueueItem) -> None:
        if self._current_id != item.id:
            logger.warning(
                "Item %s finished but %s holds the processing slot", item.id, self._current_id
            )
            return
        self._current_id = None

    # Linger bookkeeping

    def lingering_item(self) -> Optional[QueueItem]:
        if self._lingering_id is None:
            return None
        return self.find(self._lingering_id)

    def start_linger(self, item: QueueItem, task: asyncio.Task[None]) -> None:
        item.status = ItemStatus.LINGERING
        self._lingering_id = item.id
        self._linger_task = task

    def end_linger(self) -> None:
        """Forget the linger without touching the timer task."""
        self._lingering_id = None
        self._linger_task = None

    def cancel_linger(self) -> None:
        task = self._linger_task
        self.end_linger()
        if task is not None and not task.done():
            task.cancel()

    # Overlay teardown

    @property
    def teardown(self) -> Optional[asyncio.Future[None]]:
        """The hide sent for an expired linger, while it is still in flight."""
        return self._teardown

    def start_teardown(self, hide: asyncio.Future[None]) -> None:
        self._teardown = hide
        hide.add_done_callback(self._end_teardown)

    def _end_teardown(self, hide: asyncio.Future[None]) -> None:
        if self._teardown is hide:
            self._teardown = None


__all__ = ["InsertPosition", "QueueState"]
