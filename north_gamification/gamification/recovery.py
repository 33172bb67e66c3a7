"""
Streak Recovery Workflow

Lets a user restore a broken streak by completing a fixed number of
recovery actions.

States: INITIATED -> IN_PROGRESS -> COMPLETED | ABANDONED

- initiate() snapshots the broken streak's best count and schedules three
  RECOVERY_SUPPORT reminders (+4h, +1d, +2d)
- every action is worth the medium micro-win points
- the third action completes the recovery and starts a brand-new streak at
  1 day that keeps the original best count
- an action arriving after the recovery window abandons the recovery
  (window_days = 0 keeps recoveries open until abandoned explicitly)
"""

import logging
from datetime import datetime, timedelta
from typing import Any, List, Optional

from north_gamification.config import RECOVERY_WINDOW_DAYS
from north_gamification.exceptions import (
    EntityNotFoundError,
    RecoveryAbandonedError,
    RecoveryAlreadyCompleteError,
    RecoveryExpiredError,
)
from north_gamification.gamification.catalog import (
    MICRO_WIN_POINTS,
    get_action_description,
    resolve_action,
)
from north_gamification.gamification.celebrations import celebrate_micro_win, celebrate_streak
from north_gamification.gamification.store import GamificationStore
from north_gamification.models import (
    MicroWinDifficulty,
    RecoveryAction,
    RecoveryActionResult,
    RecoveryStatus,
    Streak,
    StreakRecovery,
)
from north_gamification.monitoring import track_recovery
from north_gamification.utils.datetime_helpers import Clock, IdFactory, new_id, now_utc

logger = logging.getLogger(__name__)

RECOVERY_COMPLETION_ACTIONS = 3


class RecoveryWorkflow:
    """Opens, advances, completes and abandons streak recoveries"""

    def __init__(
        self,
        store: GamificationStore,
        reminders=None,
        window_days: int = RECOVERY_WINDOW_DAYS,
        clock: Clock = now_utc,
        id_factory: IdFactory = new_id,
    ):
        self.store = store
        self.reminders = reminders
        self.window_days = window_days
        self.clock = clock
        self.id_factory = id_factory
        logger.debug(f"RecoveryWorkflow initialized (window {window_days} days)")

    async def get_recovery(self, user_id: str, recovery_id: str) -> StreakRecovery:
        recovery = await self.store.get_recovery(user_id, recovery_id)
        if recovery is None:
            raise EntityNotFoundError(
                f"Recovery {recovery_id} not found",
                record_type="StreakRecovery",
                record_id=recovery_id,
                user_id=user_id,
            )
        return recovery

    async def get_open_recoveries(self, user_id: str) -> List[StreakRecovery]:
        return [r for r in await self.store.get_recoveries(user_id) if r.is_open]

    def is_expired(self, recovery: StreakRecovery, now: Optional[datetime] = None) -> bool:
        if self.window_days <= 0 or not recovery.is_open:
            return False
        now = now or self.clock()
        return now - recovery.recovery_started > timedelta(days=self.window_days)

    async def initiate(self, user_id: str, broken_streak_id: str) -> StreakRecovery:
        """
        Open a recovery for a broken streak

        Returns the existing recovery if one is already open for the streak.

        Raises:
            EntityNotFoundError: streak does not exist for this user
        """
        streak = await self.store.get_streak_by_id(user_id, broken_streak_id)
        if streak is None:
            raise EntityNotFoundError(
                f"Streak {broken_streak_id} not found",
                record_type="Streak",
                record_id=broken_streak_id,
                user_id=user_id,
                operation="initiate_recovery",
            )

        for recovery in await self.get_open_recoveries(user_id):
            if recovery.original_streak_id == broken_streak_id:
                logger.debug(f"Recovery {recovery.id} already open for streak {broken_streak_id}")
                return recovery

        now = self.clock()
        recovery = StreakRecovery(
            id=self.id_factory(),
            user_id=user_id,
            original_streak_id=streak.id,
            streak_type=streak.type,
            broken_at=now,
            recovery_started=now,
            original_count=streak.best_count,
        )
        await self.store.save_recovery(user_id, recovery)

        if self.reminders is not None:
            await self.reminders.schedule_recovery_reminders(user_id, recovery)

        track_recovery("started")
        logger.info(
            f"Recovery {recovery.id} started for user {user_id} "
            f"({streak.type.value}, best {streak.best_count})"
        )
        return recovery

    async def expire_if_stale(self, user_id: str, recovery_id: str) -> Optional[StreakRecovery]:
        """
        Abandon the recovery if its window has elapsed

        Returns the abandoned recovery, or None if it was still within its
        window (or already closed).
        """
        recovery = await self.get_recovery(user_id, recovery_id)
        now = self.clock()
        if not self.is_expired(recovery, now):
            return None

        expired = recovery.model_copy(update={
            "status": RecoveryStatus.ABANDONED,
            "abandoned_at": now,
        })
        await self.store.save_recovery(user_id, expired)

        track_recovery("expired")
        logger.info(f"Recovery {recovery_id} for user {user_id} expired after {self.window_days} days")
        return expired

    async def process_action(self, user_id: str, recovery_id: str, action: Any) -> RecoveryActionResult:
        """
        Record one recovery action

        Raises:
            EntityNotFoundError: recovery does not exist for this user
            UnknownActionError: action is not a UserAction
            RecoveryAlreadyCompleteError: recovery already succeeded
            RecoveryAbandonedError: recovery was abandoned
            RecoveryExpiredError: recovery window elapsed (recovery is abandoned)
        """
        action = resolve_action(action)
        recovery = await self.get_recovery(user_id, recovery_id)

        if recovery.status == RecoveryStatus.COMPLETED:
            raise RecoveryAlreadyCompleteError(recovery_id, user_id=user_id)
        if recovery.status == RecoveryStatus.ABANDONED:
            raise RecoveryAbandonedError(recovery_id, user_id=user_id)
        if await self.expire_if_stale(user_id, recovery_id) is not None:
            raise RecoveryExpiredError(recovery_id, self.window_days, user_id=user_id)

        now = self.clock()
        recovery_action = RecoveryAction(
            id=self.id_factory(),
            action_type=action,
            completed_at=now,
            points_awarded=MICRO_WIN_POINTS[MicroWinDifficulty.MEDIUM],
            description=f"Recovery action: {get_action_description(action)}",
        )
        actions = [*recovery.recovery_actions, recovery_action]
        is_complete = len(actions) >= RECOVERY_COMPLETION_ACTIONS

        new_streak = None
        if is_complete:
            new_streak = Streak(
                id=self.id_factory(),
                type=recovery.streak_type,
                current_count=1,
                best_count=max(recovery.original_count, 1),
                last_activity_date=now.date(),
                recovery_attempts=len(actions),
            )
            await self.store.save_streak(user_id, new_streak)

            updated = recovery.model_copy(update={
                "recovery_actions": actions,
                "status": RecoveryStatus.COMPLETED,
                "recovery_completed": now,
                "is_successful": True,
            })
            celebration = celebrate_streak(recovery.streak_type, 1, is_new_record=False, timestamp=now)

            track_recovery("completed")
            logger.info(f"Recovery {recovery_id} completed for user {user_id}; new streak {new_streak.id}")
        else:
            updated = recovery.model_copy(update={
                "recovery_actions": actions,
                "status": RecoveryStatus.IN_PROGRESS,
            })
            celebration = celebrate_micro_win("Recovery Progress", recovery_action.points_awarded, now)
            logger.info(
                f"Recovery {recovery_id} for user {user_id}: "
                f"{len(actions)}/{RECOVERY_COMPLETION_ACTIONS} actions"
            )

        await self.store.save_recovery(user_id, updated)

        return RecoveryActionResult(
            recovery=updated,
            action_processed=recovery_action,
            is_recovery_complete=is_complete,
            new_streak_started=new_streak,
            celebration_event=celebration,
        )

    async def abandon(self, user_id: str, recovery_id: str) -> StreakRecovery:
        """
        Close an open recovery without restoring the streak

        Abandoning an already abandoned recovery returns it unchanged.

        Raises:
            RecoveryAlreadyCompleteError: recovery already succeeded
        """
        recovery = await self.get_recovery(user_id, recovery_id)
        if recovery.status == RecoveryStatus.COMPLETED:
            raise RecoveryAlreadyCompleteError(recovery_id, user_id=user_id)
        if recovery.status == RecoveryStatus.ABANDONED:
            return recovery

        abandoned = recovery.model_copy(update={
            "status": RecoveryStatus.ABANDONED,
            "abandoned_at": self.clock(),
        })
        await self.store.save_recovery(user_id, abandoned)

        track_recovery("abandoned")
        logger.info(f"Recovery {recovery_id} abandoned by user {user_id}")
        return abandoned
