"""
Streak Tracking System

One streak per (user, streak type), advanced by activity dates.

Transitions (days = activity date - last activity date):
- No streak yet: created at 1
- days <= 0: no change (same-day or out-of-order activity)
- days == 1: extended, best count follows, recovery attempts reset
- days > 1: broken, restarts at 1, recovery attempts incremented

Risk is always classified against the clock's today, never the activity
date, and is recomputed on every read so it cannot go stale overnight.

Milestones celebrated: 3, 7, 14, 21, 30, 60, 90, 180, 365 days
"""

import logging
from datetime import date
from typing import Dict, List, Optional

from north_gamification.config import AUTO_START_RECOVERY
from north_gamification.exceptions import EntityNotFoundError
from north_gamification.gamification.catalog import (
    STREAK_RECOMMENDED_ACTIONS,
    get_streak_display_name,
)
from north_gamification.gamification.celebrations import celebrate_streak
from north_gamification.gamification.store import GamificationStore
from north_gamification.models import (
    RecoveryStatus,
    Streak,
    StreakMilestone,
    StreakRiskAnalysis,
    StreakRiskLevel,
    StreakStatistics,
    StreakType,
    StreakUpdateResult,
)
from north_gamification.monitoring import track_streak_update
from north_gamification.utils.datetime_helpers import Clock, IdFactory, days_between, new_id, now_utc

logger = logging.getLogger(__name__)

CELEBRATION_MILESTONES = (3, 7, 14, 21, 30, 60, 90, 180, 365)

URGENCY_BASE_SCORES: Dict[StreakRiskLevel, int] = {
    StreakRiskLevel.SAFE: 1,
    StreakRiskLevel.LOW_RISK: 3,
    StreakRiskLevel.MEDIUM_RISK: 6,
    StreakRiskLevel.HIGH_RISK: 9,
    StreakRiskLevel.BROKEN: 10,
}


def classify_risk(last_activity_date: date, today: date) -> StreakRiskLevel:
    """
    Risk tier from days since last activity

    <=1 day is safe, 2 is low, 3 is medium, anything longer is high.
    """
    days = days_between(last_activity_date, today)
    if days <= 1:
        return StreakRiskLevel.SAFE
    if days == 2:
        return StreakRiskLevel.LOW_RISK
    if days == 3:
        return StreakRiskLevel.MEDIUM_RISK
    return StreakRiskLevel.HIGH_RISK


def calculate_urgency_score(risk_level: StreakRiskLevel, current_count: int) -> int:
    """
    Reminder priority in [1, 10]

    Longer streaks are more urgent to keep: x2 from 30 days, x1.5 from 7.
    """
    base_score = URGENCY_BASE_SCORES[risk_level]

    if current_count >= 30:
        multiplier = 2.0
    elif current_count >= 7:
        multiplier = 1.5
    else:
        multiplier = 1.0

    return max(1, min(10, int(base_score * multiplier)))


def is_milestone(count: int) -> bool:
    return count in CELEBRATION_MILESTONES


def generate_reminder_message(streak: Streak, risk_level: StreakRiskLevel) -> str:
    name = get_streak_display_name(streak.type)
    count = streak.current_count

    if risk_level == StreakRiskLevel.LOW_RISK:
        return f"Your {count}-day {name} streak is going strong! Keep it up! 🔥"
    if risk_level == StreakRiskLevel.MEDIUM_RISK:
        return (
            f"Don't let your {count}-day {name} streak slip away! "
            f"A quick action can keep it alive. 💪"
        )
    if risk_level == StreakRiskLevel.HIGH_RISK:
        return (
            f"Your {count}-day {name} streak needs attention! "
            f"Take action now to keep your momentum. ⚡"
        )
    return f"Keep up your great {name} habits! 🌟"


class StreakEngine:
    """
    Advances, resets and risk-scores streaks.

    Collaborators:
        reminders: ReminderScheduler used when an update leaves a streak at risk
        recovery: RecoveryWorkflow started automatically when an update breaks
            a streak (only if auto_start_recovery is on)
    """

    def __init__(
        self,
        store: GamificationStore,
        reminders=None,
        recovery=None,
        auto_start_recovery: bool = AUTO_START_RECOVERY,
        clock: Clock = now_utc,
        id_factory: IdFactory = new_id,
    ):
        self.store = store
        self.reminders = reminders
        self.recovery = recovery
        self.auto_start_recovery = auto_start_recovery
        self.clock = clock
        self.id_factory = id_factory
        logger.debug("StreakEngine initialized")

    def today(self) -> date:
        return self.clock().date()

    def with_current_risk(self, streak: Streak, today: Optional[date] = None) -> Streak:
        """Copy of the streak with its risk level classified for today"""
        risk_level = classify_risk(streak.last_activity_date, today or self.today())
        if risk_level == streak.risk_level:
            return streak
        return streak.model_copy(update={"risk_level": risk_level})

    async def update(
        self,
        user_id: str,
        streak_type: StreakType,
        activity_date: Optional[date] = None,
    ) -> StreakUpdateResult:
        """
        Record activity for a streak type

        Args:
            user_id: User identifier
            streak_type: Streak to advance
            activity_date: Day of the activity (defaults to today)

        Returns:
            StreakUpdateResult with the saved streak and anything it triggered
        """
        now = self.clock()
        today = now.date()
        activity_date = activity_date or today

        existing = await self.store.get_streak(user_id, streak_type)
        was_extended = False
        was_broken = False
        previous_best = 0

        if existing is None:
            streak = Streak(
                id=self.id_factory(),
                type=streak_type,
                current_count=1,
                best_count=1,
                last_activity_date=activity_date,
            )
            was_extended = True
            outcome = "created"
        else:
            previous_best = existing.best_count
            days = days_between(existing.last_activity_date, activity_date)

            if days <= 0:
                streak = existing
                outcome = "unchanged"
            elif days == 1:
                current_count = existing.current_count + 1
                streak = existing.model_copy(update={
                    "current_count": current_count,
                    "best_count": max(existing.best_count, current_count),
                    "last_activity_date": activity_date,
                    "is_active": True,
                    "recovery_attempts": 0,
                })
                was_extended = True
                outcome = "extended"
            else:
                streak = existing.model_copy(update={
                    "current_count": 1,
                    "last_activity_date": activity_date,
                    "is_active": True,
                    "recovery_attempts": existing.recovery_attempts + 1,
                })
                was_broken = True
                outcome = "broken"

        streak = self.with_current_risk(streak, today)

        reminder = None
        if streak.risk_level != StreakRiskLevel.SAFE and self.reminders is not None:
            reminder = await self.reminders.schedule_for_risk(user_id, streak)
            if reminder is not None:
                streak = streak.model_copy(update={"last_reminder_sent": now})

        await self.store.save_streak(user_id, streak)

        celebration = None
        if was_extended and is_milestone(streak.current_count):
            celebration = celebrate_streak(
                streak.type,
                streak.current_count,
                is_new_record=streak.current_count > previous_best,
                timestamp=now,
            )

        recovery = None
        if was_broken and self.auto_start_recovery and self.recovery is not None:
            recovery = await self.recovery.initiate(user_id, streak.id)

        track_streak_update(streak_type.value, outcome)
        if outcome == "broken":
            logger.info(
                f"{streak_type.value} streak broken for user {user_id} "
                f"(best {streak.best_count}, attempts {streak.recovery_attempts})"
            )
        elif outcome != "unchanged":
            logger.info(f"{streak_type.value} streak {outcome} for user {user_id}: {streak.current_count} days")

        return StreakUpdateResult(
            streak=streak,
            was_extended=was_extended,
            was_broken=was_broken,
            new_risk_level=streak.risk_level,
            previous_best_count=previous_best,
            celebration_event=celebration,
            reminder_scheduled=reminder,
            recovery_started=recovery,
        )

    async def get_streaks(self, user_id: str) -> List[Streak]:
        """All of the user's streaks with risk classified for today"""
        today = self.today()
        return [self.with_current_risk(s, today) for s in await self.store.get_streaks(user_id)]

    async def get_active_streaks(self, user_id: str) -> List[Streak]:
        return [s for s in await self.get_streaks(user_id) if s.is_active]

    async def get_streak(self, user_id: str, streak_id: str) -> Streak:
        streak = await self.store.get_streak_by_id(user_id, streak_id)
        if streak is None:
            raise EntityNotFoundError(
                f"Streak {streak_id} not found",
                record_type="Streak",
                record_id=streak_id,
                user_id=user_id,
                operation="get_streak",
            )
        return self.with_current_risk(streak)

    async def analyze_streak_risks(self, user_id: str) -> List[StreakRiskAnalysis]:
        """Risk analysis for every active streak, most urgent first"""
        today = self.today()
        analyses = []

        for streak in await self.get_active_streaks(user_id):
            days_since = days_between(streak.last_activity_date, today)
            analyses.append(StreakRiskAnalysis(
                streak=streak,
                risk_level=streak.risk_level,
                days_since_last_activity=days_since,
                recommended_actions=list(STREAK_RECOMMENDED_ACTIONS[streak.type]),
                reminder_message=generate_reminder_message(streak, streak.risk_level),
                urgency_score=calculate_urgency_score(streak.risk_level, streak.current_count),
            ))

        analyses.sort(key=lambda a: a.urgency_score, reverse=True)
        return analyses

    async def get_streak_statistics(self, user_id: str) -> StreakStatistics:
        now = self.clock()
        today = now.date()
        all_streaks = await self.get_streaks(user_id)
        active_streaks = [s for s in all_streaks if s.is_active]
        recoveries = await self.store.get_recoveries(user_id)

        total_streak_days = sum(s.best_count for s in all_streaks)
        average_length = total_streak_days / len(all_streaks) if all_streaks else 0.0

        streaks_by_type: Dict[StreakType, List[Streak]] = {}
        risk_distribution: Dict[StreakRiskLevel, int] = {}
        for streak in active_streaks:
            streaks_by_type.setdefault(streak.type, []).append(streak)
            risk_distribution[streak.risk_level] = risk_distribution.get(streak.risk_level, 0) + 1

        successful = sum(1 for r in recoveries if r.status == RecoveryStatus.COMPLETED)
        recovery_success_rate = successful / len(recoveries) if recoveries else 0.0

        # Streaks last touched N days ago, index 0 = today
        weekly_trend = [
            sum(1 for s in active_streaks if days_between(s.last_activity_date, today) == day)
            for day in range(7)
        ]

        milestones = [
            StreakMilestone(
                streak_type=s.type,
                count=s.best_count,
                achieved_at=now,
                is_personal_record=True,
            )
            for s in all_streaks
            if is_milestone(s.best_count)
        ][:5]

        return StreakStatistics(
            total_active_streaks=len(active_streaks),
            longest_current_streak=max(active_streaks, key=lambda s: s.current_count, default=None),
            longest_ever_streak=max(all_streaks, key=lambda s: s.best_count, default=None),
            total_streak_days=total_streak_days,
            average_streak_length=average_length,
            streaks_by_type=streaks_by_type,
            risk_distribution=risk_distribution,
            recovery_success_rate=recovery_success_rate,
            weekly_streak_trend=weekly_trend,
            monthly_milestones=milestones,
        )
