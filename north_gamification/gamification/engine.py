"""
GamificationEngine - API boundary of the gamification core

Wires the components together and exposes every operation as a coroutine
returning Result; no exception crosses this boundary.

Concurrency:
- Mutations for one user run under that user's asyncio.Lock and inside a
  store transaction, so an operation's writes land together or not at all
- Reads take no lock and may observe a slightly stale risk level
- Different users never contend

Reminders and celebrations are handed to the sinks only after the write
they belong to has committed.
"""

import asyncio
import logging
import random
from datetime import date
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Type, TypeVar

from north_gamification.config import (
    AUTO_START_RECOVERY,
    DEFAULT_MICRO_WIN_LIMIT,
    POINTS_HISTORY_DEFAULT_LIMIT,
    RECOVERY_WINDOW_DAYS,
)
from north_gamification.exceptions import (
    RecoveryExpiredError,
    ValidationError,
    wrap_store_exception,
)
from north_gamification.gamification.achievement_system import AchievementRegistry
from north_gamification.gamification.celebrations import celebrate_achievement, celebrate_level_up
from north_gamification.gamification.micro_wins import MicroWinGenerator
from north_gamification.gamification.points_ledger import (
    PointsLedger,
    get_level_from_points,
    get_points_required_for_next_level,
)
from north_gamification.gamification.recovery import RecoveryWorkflow
from north_gamification.gamification.reminders import ReminderScheduler
from north_gamification.gamification.sinks import CelebrationSink, ReminderSink
from north_gamification.gamification.store import GamificationStore, InMemoryGamificationStore
from north_gamification.gamification.streak_system import StreakEngine
from north_gamification.models import (
    Achievement,
    CelebrationEvent,
    GamificationProfile,
    LevelUpResult,
    MicroWinOpportunity,
    MicroWinResult,
    PointsHistoryEntry,
    PointsResult,
    RecoveryActionResult,
    ReminderType,
    Result,
    Streak,
    StreakRecovery,
    StreakReminder,
    StreakRiskAnalysis,
    StreakStatistics,
    StreakType,
    StreakUpdateResult,
)
from north_gamification.monitoring import track_operation
from north_gamification.utils.datetime_helpers import Clock, IdFactory, new_id, now_utc

logger = logging.getLogger(__name__)

T = TypeVar("T")
E = TypeVar("E", bound=Enum)

Mutation = Callable[[], Awaitable[Tuple[T, List[CelebrationEvent]]]]


def _coerce_enum(enum_cls: Type[E], value: Any, field: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(
            f"Unknown {field}: {value!r}",
            field=field,
            value=str(value),
        ) from None


class GamificationEngine:
    """
    Gamification facade used by the service/UI layers.

    Example:
        engine = GamificationEngine(InMemoryGamificationStore())
        result = await engine.award_points("user-1", UserAction.CHECK_BALANCE)
        if result.is_success:
            print(result.value.total_points)
    """

    def __init__(
        self,
        store: Optional[GamificationStore] = None,
        reminder_sink: Optional[ReminderSink] = None,
        celebration_sink: Optional[CelebrationSink] = None,
        clock: Clock = now_utc,
        id_factory: IdFactory = new_id,
        rng: Optional[random.Random] = None,
        recovery_window_days: int = RECOVERY_WINDOW_DAYS,
        auto_start_recovery: bool = AUTO_START_RECOVERY,
    ):
        self.store = store or InMemoryGamificationStore()
        self.celebration_sink = celebration_sink
        self.clock = clock
        self._locks: Dict[str, asyncio.Lock] = {}

        self.reminders = ReminderScheduler(self.store, reminder_sink, clock=clock, id_factory=id_factory)
        self.recovery = RecoveryWorkflow(
            self.store,
            self.reminders,
            window_days=recovery_window_days,
            clock=clock,
            id_factory=id_factory,
        )
        self.streaks = StreakEngine(
            self.store,
            reminders=self.reminders,
            recovery=self.recovery,
            auto_start_recovery=auto_start_recovery,
            clock=clock,
            id_factory=id_factory,
        )
        self.ledger = PointsLedger(self.store, self.streaks, clock=clock, id_factory=id_factory)
        self.achievements = AchievementRegistry(self.store, self.ledger, clock=clock, id_factory=id_factory)
        self.ledger.achievements = self.achievements
        self.micro_wins = MicroWinGenerator(
            self.store,
            self.streaks,
            self.ledger,
            rng=rng,
            clock=clock,
            id_factory=id_factory,
        )
        logger.info("GamificationEngine initialized")

    # ==========================================
    # Plumbing
    # ==========================================

    def _lock_for(self, user_id: str) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = self._locks[user_id] = asyncio.Lock()
        return lock

    async def _mutate(
        self,
        user_id: str,
        operation: str,
        mutation: Mutation,
        context: Optional[Dict[str, Any]] = None,
    ) -> Result:
        """Run a write under the user's lock and transaction, then notify sinks"""
        async with self._lock_for(user_id):
            try:
                with track_operation(operation):
                    async with self.store.transaction(user_id):
                        value, celebrations = await mutation()
            except Exception as e:
                self.reminders.discard(user_id)
                return Result.failure(wrap_store_exception(e, operation, user_id=user_id, context=context))

            await self._notify(user_id, celebrations)
            return Result.success(value)

    async def _read(
        self,
        user_id: str,
        operation: str,
        read: Callable[[], Awaitable[T]],
    ) -> Result:
        try:
            with track_operation(operation):
                return Result.success(await read())
        except Exception as e:
            return Result.failure(wrap_store_exception(e, operation, user_id=user_id))

    async def _notify(self, user_id: str, celebrations: List[CelebrationEvent]) -> None:
        """Deliver committed reminders and celebrations; sink errors are logged"""
        try:
            await self.reminders.flush(user_id)
        except Exception as e:
            logger.error(f"Reminder sink failed for user {user_id}: {e}", exc_info=True)

        if self.celebration_sink is None:
            return
        for event in celebrations:
            try:
                await self.celebration_sink.submit_celebration(user_id, event)
            except Exception as e:
                logger.error(f"Celebration sink failed for user {user_id}: {e}", exc_info=True)

    def _side_effect_events(
        self,
        events: List[CelebrationEvent],
        new_achievements: List[Achievement],
        level_up: Optional[LevelUpResult],
    ) -> List[CelebrationEvent]:
        """Append achievement and level-up celebrations to an operation's events"""
        now = self.clock()
        events = list(events)
        events.extend(celebrate_achievement(a, now) for a in new_achievements)
        if level_up is not None:
            events.append(celebrate_level_up(level_up, now))
        return events

    # ==========================================
    # Points & Levels
    # ==========================================

    @staticmethod
    def get_level_from_points(points: int) -> int:
        return get_level_from_points(points)

    @staticmethod
    def get_points_required_for_next_level(level: int) -> int:
        return get_points_required_for_next_level(level)

    async def award_points(
        self,
        user_id: str,
        action: Any,
        points: Optional[int] = None,
        description: Optional[str] = None,
    ) -> Result[PointsResult]:
        async def mutation():
            result = await self.ledger.award(user_id, action, points, description)
            return result, result.celebrations

        return await self._mutate(user_id, "award_points", mutation, {"action": str(action)})

    async def get_profile(self, user_id: str) -> Result[GamificationProfile]:
        return await self._read(user_id, "get_profile", lambda: self.ledger.get_profile(user_id))

    async def get_points_history(
        self, user_id: str, limit: Optional[int] = None
    ) -> Result[List[PointsHistoryEntry]]:
        limit = POINTS_HISTORY_DEFAULT_LIMIT if limit is None else limit
        return await self._read(
            user_id, "get_points_history", lambda: self.ledger.get_points_history(user_id, limit)
        )

    # ==========================================
    # Streaks
    # ==========================================

    async def update_streak(
        self,
        user_id: str,
        streak_type: Any,
        activity_date: Optional[date] = None,
    ) -> Result[StreakUpdateResult]:
        async def mutation():
            resolved = _coerce_enum(StreakType, streak_type, "streak_type")
            before = await self.ledger.get_profile(user_id)
            result = await self.streaks.update(user_id, resolved, activity_date)

            # Streak achievements credit points, which can level the user up
            new_achievements = await self.achievements.check_streak_triggers(user_id)
            level_up = await self.ledger.level_up_since(user_id, before.level)
            result = result.model_copy(update={
                "new_achievements": new_achievements,
                "level_up": level_up,
            })
            return result, self._side_effect_events(
                [result.celebration_event] if result.celebration_event else [],
                new_achievements,
                level_up,
            )

        return await self._mutate(user_id, "update_streak", mutation, {"streak_type": str(streak_type)})

    async def get_streaks(self, user_id: str) -> Result[List[Streak]]:
        return await self._read(user_id, "get_streaks", lambda: self.streaks.get_streaks(user_id))

    async def analyze_streak_risks(self, user_id: str) -> Result[List[StreakRiskAnalysis]]:
        return await self._read(
            user_id, "analyze_streak_risks", lambda: self.streaks.analyze_streak_risks(user_id)
        )

    async def get_streak_statistics(self, user_id: str) -> Result[StreakStatistics]:
        return await self._read(
            user_id, "get_streak_statistics", lambda: self.streaks.get_streak_statistics(user_id)
        )

    # ==========================================
    # Reminders
    # ==========================================

    async def schedule_streak_reminder(
        self,
        user_id: str,
        streak_id: str,
        reminder_type: Any,
    ) -> Result[StreakReminder]:
        async def mutation():
            resolved = _coerce_enum(ReminderType, reminder_type, "reminder_type")
            return await self.reminders.schedule_streak_reminder(user_id, streak_id, resolved), []

        return await self._mutate(
            user_id, "schedule_streak_reminder", mutation, {"streak_id": streak_id}
        )

    async def get_active_reminders(self, user_id: str) -> Result[List[StreakReminder]]:
        return await self._read(
            user_id, "get_active_reminders", lambda: self.reminders.get_active_reminders(user_id)
        )

    async def acknowledge_reminder(self, user_id: str, reminder_id: str) -> Result[StreakReminder]:
        async def mutation():
            return await self.reminders.acknowledge(user_id, reminder_id), []

        return await self._mutate(
            user_id, "acknowledge_reminder", mutation, {"reminder_id": reminder_id}
        )

    # ==========================================
    # Recovery
    # ==========================================

    async def initiate_recovery(self, user_id: str, broken_streak_id: str) -> Result[StreakRecovery]:
        async def mutation():
            return await self.recovery.initiate(user_id, broken_streak_id), []

        return await self._mutate(
            user_id, "initiate_recovery", mutation, {"streak_id": broken_streak_id}
        )

    async def process_recovery_action(
        self,
        user_id: str,
        recovery_id: str,
        action: Any,
    ) -> Result[RecoveryActionResult]:
        context = {"recovery_id": recovery_id, "action": str(action)}

        # Expiry is committed on its own so the abandonment survives the
        # failed action
        expired = await self._mutate(
            user_id,
            "expire_recovery",
            lambda: self._expire_recovery(user_id, recovery_id),
            context,
        )
        if expired.is_failure:
            return expired
        if expired.value is not None:
            return Result.failure(RecoveryExpiredError(
                recovery_id,
                self.recovery.window_days,
                user_id=user_id,
                operation="process_recovery_action",
            ))

        async def mutation():
            result = await self.recovery.process_action(user_id, recovery_id, action)
            events = [result.celebration_event] if result.celebration_event else []
            return result, events

        return await self._mutate(user_id, "process_recovery_action", mutation, context)

    async def _expire_recovery(self, user_id: str, recovery_id: str):
        return await self.recovery.expire_if_stale(user_id, recovery_id), []

    async def abandon_recovery(self, user_id: str, recovery_id: str) -> Result[StreakRecovery]:
        async def mutation():
            return await self.recovery.abandon(user_id, recovery_id), []

        return await self._mutate(
            user_id, "abandon_recovery", mutation, {"recovery_id": recovery_id}
        )

    async def get_recoveries(self, user_id: str) -> Result[List[StreakRecovery]]:
        return await self._read(user_id, "get_recoveries", lambda: self.store.get_recoveries(user_id))

    # ==========================================
    # Micro-wins
    # ==========================================

    async def generate_micro_wins(
        self, user_id: str, limit: Optional[int] = None
    ) -> Result[List[MicroWinOpportunity]]:
        limit = DEFAULT_MICRO_WIN_LIMIT if limit is None else limit
        return await self._read(
            user_id, "generate_micro_wins", lambda: self.micro_wins.generate(user_id, limit)
        )

    async def detect_and_award_micro_wins(
        self,
        user_id: str,
        action: Any,
        context_data: Optional[Dict[str, str]] = None,
    ) -> Result[List[MicroWinResult]]:
        async def mutation():
            return await self.micro_wins.detect_and_award(user_id, action, context_data)

        return await self._mutate(
            user_id, "detect_and_award_micro_wins", mutation, {"action": str(action)}
        )

    # ==========================================
    # Achievements
    # ==========================================

    async def unlock_achievement(self, user_id: str, achievement_type: Any) -> Result[Achievement]:
        async def mutation():
            before = await self.ledger.get_profile(user_id)
            achievement, is_new = await self.achievements.unlock_if_new(user_id, achievement_type)
            if not is_new:
                return achievement, []
            level_up = await self.ledger.level_up_since(user_id, before.level)
            return achievement, self._side_effect_events([], [achievement], level_up)

        return await self._mutate(
            user_id, "unlock_achievement", mutation, {"achievement_type": str(achievement_type)}
        )

    async def get_achievements(self, user_id: str) -> Result[List[Achievement]]:
        return await self._read(
            user_id, "get_achievements", lambda: self.achievements.get_achievements(user_id)
        )
