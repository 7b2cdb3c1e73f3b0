"""Single-slot queue scheduler."""

from .scheduler import ModerationAction, QueueScheduler
from .state import InsertPosition, QueueState

__all__ = ["InsertPosition", "ModerationAction", "QueueScheduler", "QueueState"]
