"""
Outbound collaborators

The engine never delivers notifications or renders celebrations itself. It
hands StreakReminder and CelebrationEvent records to these sinks, and delivery
belongs to the sink.
"""

import logging
from abc import ABC, abstractmethod
from typing import List

from north_gamification.models import CelebrationEvent, StreakReminder

logger = logging.getLogger(__name__)


class ReminderSink(ABC):
    @abstractmethod
    async def submit_reminder(self, reminder: StreakReminder) -> None: ...


class CelebrationSink(ABC):
    @abstractmethod
    async def submit_celebration(self, user_id: str, event: CelebrationEvent) -> None: ...


class CollectingReminderSink(ReminderSink):
    """Keeps submitted reminders in memory"""

    def __init__(self):
        self.reminders: List[StreakReminder] = []

    async def submit_reminder(self, reminder: StreakReminder) -> None:
        self.reminders.append(reminder)
        logger.debug(
            f"Reminder {reminder.reminder_type.value} queued for user {reminder.user_id} "
            f"at {reminder.scheduled_for.isoformat()}"
        )


class CollectingCelebrationSink(CelebrationSink):
    """Keeps submitted celebrations in memory"""

    def __init__(self):
        self.events: List[tuple[str, CelebrationEvent]] = []

    async def submit_celebration(self, user_id: str, event: CelebrationEvent) -> None:
        self.events.append((user_id, event))
        logger.debug(f"Celebration {event.type.value} ({event.intensity.value}) for user {user_id}")
