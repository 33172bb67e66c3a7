"""
Achievement Registry

Idempotent unlock-or-fetch of achievements, one per (user, type).
Unlocking the same type again returns the original record (same id and
unlocked_at), and its points are only ever credited once.

Triggers:
- Action: first LINK_ACCOUNT, first UPDATE_GOAL, 50 CATEGORIZE_TRANSACTION
- Streak: any streak at 7 / 30 days, DAILY_CHECK_IN at 30 days
"""

import logging
from typing import Any, List, Tuple

from north_gamification.exceptions import ValidationError
from north_gamification.gamification.catalog import (
    ACHIEVEMENT_DEFINITIONS,
    ACTION_ACHIEVEMENTS,
    ACTION_COUNT_ACHIEVEMENTS,
    STREAK_ACHIEVEMENTS,
)
from north_gamification.gamification.store import GamificationStore
from north_gamification.models import Achievement, AchievementType, UserAction
from north_gamification.monitoring import track_achievement_unlocked
from north_gamification.utils.datetime_helpers import Clock, IdFactory, new_id, now_utc

logger = logging.getLogger(__name__)


def resolve_achievement_type(achievement_type: Any) -> AchievementType:
    if isinstance(achievement_type, AchievementType):
        return achievement_type
    try:
        return AchievementType(achievement_type)
    except ValueError:
        raise ValidationError(
            f"Unknown achievement type: {achievement_type!r}",
            field="achievement_type",
            value=str(achievement_type),
        ) from None


class AchievementRegistry:
    """Unlocks achievements and credits their points through the ledger"""

    def __init__(
        self,
        store: GamificationStore,
        ledger,
        clock: Clock = now_utc,
        id_factory: IdFactory = new_id,
    ):
        self.store = store
        self.ledger = ledger
        self.clock = clock
        self.id_factory = id_factory
        logger.debug("AchievementRegistry initialized")

    async def get_achievements(self, user_id: str) -> List[Achievement]:
        """Unlocked achievements, oldest first"""
        achievements = await self.store.get_achievements(user_id)
        return sorted(achievements, key=lambda a: a.unlocked_at)

    async def unlock_if_new(self, user_id: str, achievement_type: Any) -> Tuple[Achievement, bool]:
        """
        Unlock an achievement

        Returns:
            (achievement, newly_unlocked). For an existing unlock the stored
            record comes back untouched and no points are credited.
        """
        achievement_type = resolve_achievement_type(achievement_type)

        existing = await self.store.get_achievement(user_id, achievement_type)
        if existing is not None:
            return existing, False

        definition = ACHIEVEMENT_DEFINITIONS[achievement_type]
        achievement = Achievement(
            id=self.id_factory(),
            achievement_type=achievement_type,
            title=definition.title,
            description=definition.description,
            badge_icon=definition.badge_icon,
            category=definition.category,
            points_awarded=definition.points_awarded,
            unlocked_at=self.clock(),
        )
        await self.store.save_achievement(user_id, achievement)

        # Credit only; no streak updates or further triggers
        await self.ledger.credit(
            user_id,
            definition.points_awarded,
            UserAction.COMPLETE_MICRO_TASK,
            description=f"Achievement unlocked: {definition.title}",
        )

        track_achievement_unlocked(achievement_type.value)
        logger.info(
            f"User {user_id} unlocked {achievement_type.value} "
            f"(+{definition.points_awarded} points)"
        )
        return achievement, True

    async def unlock(self, user_id: str, achievement_type: Any) -> Achievement:
        achievement, _ = await self.unlock_if_new(user_id, achievement_type)
        return achievement

    async def check_action_triggers(self, user_id: str, action: UserAction) -> List[Achievement]:
        """Newly unlocked achievements for an action that was just awarded"""
        unlocked = []

        achievement_type = ACTION_ACHIEVEMENTS.get(action)
        if achievement_type is not None:
            achievement, is_new = await self.unlock_if_new(user_id, achievement_type)
            if is_new:
                unlocked.append(achievement)

        for trigger_action, threshold, achievement_type in ACTION_COUNT_ACHIEVEMENTS:
            if trigger_action != action:
                continue
            if await self.store.get_achievement(user_id, achievement_type) is not None:
                continue
            if await self.store.count_points_history(user_id, action) >= threshold:
                achievement, is_new = await self.unlock_if_new(user_id, achievement_type)
                if is_new:
                    unlocked.append(achievement)

        return unlocked

    async def check_streak_triggers(self, user_id: str) -> List[Achievement]:
        """Newly unlocked achievements for the user's current streak counts"""
        streaks = await self.store.get_streaks(user_id)
        unlocked = []

        for streak_type, threshold, achievement_type in STREAK_ACHIEVEMENTS:
            qualifies = any(
                s.current_count >= threshold
                for s in streaks
                if streak_type is None or s.type == streak_type
            )
            if not qualifies:
                continue
            achievement, is_new = await self.unlock_if_new(user_id, achievement_type)
            if is_new:
                unlocked.append(achievement)

        return unlocked
