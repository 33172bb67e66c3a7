"""
Reminder Scheduler

Turns streak risk into StreakReminder requests. Reminders are persisted
through the store and queued per user; the engine flushes the queue to the
ReminderSink once the surrounding write has committed, or discards it if the
write failed.

Delays:
- GENTLE_NUDGE: +2h (low risk)
- MOTIVATION_BOOST: +1h (medium risk)
- STREAK_RISK_ALERT: +30min (high risk)
- RECOVERY_SUPPORT: +4h, then recovery steps at +4h, +1d, +2d
"""

import logging
from datetime import timedelta
from typing import Dict, List, Optional

from north_gamification.exceptions import EntityNotFoundError
from north_gamification.gamification.catalog import get_streak_display_name
from north_gamification.gamification.sinks import ReminderSink
from north_gamification.gamification.store import GamificationStore
from north_gamification.gamification.streak_system import classify_risk, generate_reminder_message
from north_gamification.models import (
    ReminderType,
    Streak,
    StreakRecovery,
    StreakReminder,
    StreakRiskLevel,
    StreakType,
)
from north_gamification.monitoring import track_reminder_scheduled
from north_gamification.utils.datetime_helpers import Clock, IdFactory, new_id, now_utc

logger = logging.getLogger(__name__)

REMINDER_DELAYS: Dict[ReminderType, timedelta] = {
    ReminderType.GENTLE_NUDGE: timedelta(hours=2),
    ReminderType.MOTIVATION_BOOST: timedelta(hours=1),
    ReminderType.STREAK_RISK_ALERT: timedelta(minutes=30),
    ReminderType.RECOVERY_SUPPORT: timedelta(hours=4),
}

RISK_REMINDER_TYPES: Dict[StreakRiskLevel, ReminderType] = {
    StreakRiskLevel.LOW_RISK: ReminderType.GENTLE_NUDGE,
    StreakRiskLevel.MEDIUM_RISK: ReminderType.MOTIVATION_BOOST,
    StreakRiskLevel.HIGH_RISK: ReminderType.STREAK_RISK_ALERT,
}

RECOVERY_REMINDER_OFFSETS = (
    timedelta(hours=4),
    timedelta(days=1),
    timedelta(days=2),
)


def generate_recovery_message(streak_type: StreakType, step: int) -> str:
    """Copy for recovery step `step` (0-based)"""
    name = get_streak_display_name(streak_type)
    if step == 0:
        return f"Take a small step to restart your {name} habit"
    if step == 1:
        return f"Keep building momentum with your {name} recovery"
    if step == 2:
        return f"Final push! Complete your {name} recovery today"
    return f"Continue your {name} recovery journey"


class ReminderScheduler:
    """Creates, lists and acknowledges streak reminders"""

    def __init__(
        self,
        store: GamificationStore,
        sink: Optional[ReminderSink] = None,
        clock: Clock = now_utc,
        id_factory: IdFactory = new_id,
    ):
        self.store = store
        self.sink = sink
        self.clock = clock
        self.id_factory = id_factory
        self._pending: Dict[str, List[StreakReminder]] = {}

    async def _schedule(
        self,
        user_id: str,
        streak_id: str,
        streak_type: StreakType,
        reminder_type: ReminderType,
        message: str,
        delay: timedelta,
    ) -> StreakReminder:
        reminder = StreakReminder(
            id=self.id_factory(),
            user_id=user_id,
            streak_id=streak_id,
            streak_type=streak_type,
            reminder_type=reminder_type,
            message=message,
            scheduled_for=self.clock() + delay,
        )
        await self.store.save_reminder(user_id, reminder)
        self._pending.setdefault(user_id, []).append(reminder)

        track_reminder_scheduled(reminder_type.value)
        logger.info(
            f"Scheduled {reminder_type.value} reminder for user {user_id} "
            f"({streak_type.value}) at {reminder.scheduled_for.isoformat()}"
        )
        return reminder

    async def schedule_for_risk(self, user_id: str, streak: Streak) -> Optional[StreakReminder]:
        """Reminder matching the streak's risk level; None when the streak is safe"""
        reminder_type = RISK_REMINDER_TYPES.get(streak.risk_level)
        if reminder_type is None:
            return None

        return await self._schedule(
            user_id,
            streak.id,
            streak.type,
            reminder_type,
            generate_reminder_message(streak, streak.risk_level),
            REMINDER_DELAYS[reminder_type],
        )

    async def schedule_streak_reminder(
        self,
        user_id: str,
        streak_id: str,
        reminder_type: ReminderType,
    ) -> StreakReminder:
        """
        Schedule a reminder of an explicit type for one streak

        Raises:
            EntityNotFoundError: streak does not exist for this user
        """
        streak = await self.store.get_streak_by_id(user_id, streak_id)
        if streak is None:
            raise EntityNotFoundError(
                f"Streak {streak_id} not found",
                record_type="Streak",
                record_id=streak_id,
                user_id=user_id,
                operation="schedule_streak_reminder",
            )

        risk_level = classify_risk(streak.last_activity_date, self.clock().date())
        return await self._schedule(
            user_id,
            streak.id,
            streak.type,
            reminder_type,
            generate_reminder_message(streak, risk_level),
            REMINDER_DELAYS[reminder_type],
        )

    async def schedule_recovery_reminders(
        self, user_id: str, recovery: StreakRecovery
    ) -> List[StreakReminder]:
        reminders = []
        for step, offset in enumerate(RECOVERY_REMINDER_OFFSETS):
            reminders.append(await self._schedule(
                user_id,
                recovery.original_streak_id,
                recovery.streak_type,
                ReminderType.RECOVERY_SUPPORT,
                f"Recovery step {step + 1}: {generate_recovery_message(recovery.streak_type, step)}",
                offset,
            ))
        return reminders

    async def get_active_reminders(self, user_id: str) -> List[StreakReminder]:
        """Unread reminders, soonest first"""
        reminders = await self.store.get_reminders(user_id)
        return sorted(
            (r for r in reminders if not r.is_read),
            key=lambda r: r.scheduled_for,
        )

    async def acknowledge(self, user_id: str, reminder_id: str) -> StreakReminder:
        reminder = await self.store.mark_reminder_read(user_id, reminder_id)
        if reminder is None:
            raise EntityNotFoundError(
                f"Reminder {reminder_id} not found",
                record_type="StreakReminder",
                record_id=reminder_id,
                user_id=user_id,
                operation="acknowledge_reminder",
            )
        logger.debug(f"Reminder {reminder_id} acknowledged by user {user_id}")
        return reminder

    async def flush(self, user_id: str) -> int:
        """Hand queued reminders to the sink; returns how many were submitted"""
        pending = self._pending.pop(user_id, [])
        if self.sink is None:
            return 0
        for reminder in pending:
            await self.sink.submit_reminder(reminder)
        return len(pending)

    def discard(self, user_id: str) -> None:
        dropped = self._pending.pop(user_id, [])
        if dropped:
            logger.debug(f"Discarded {len(dropped)} queued reminders for user {user_id}")
