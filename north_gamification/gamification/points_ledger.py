"""
Points and Leveling System

Credits points for user actions, keeps each profile's level in step with its
total, and drives the follow-up work a single action triggers (streaks and
achievements).

Leveling Curve:
- level(points) = floor(sqrt(points / 100)) + 1
- Level L starts at 100 * (L - 1)^2 points
  (0 -> 1, 100 -> 2, 400 -> 3, 900 -> 4, 1600 -> 5, ...)

Totals saturate at MAX_POINTS instead of wrapping, and never drop below 0.
"""

import logging
import math
from typing import Any, List, Optional, Tuple

from north_gamification.exceptions import ValidationError
from north_gamification.gamification.catalog import (
    ACTION_POINTS,
    ACTION_STREAK_TYPES,
    LEVEL_FEATURES,
    LEVEL_UP_MESSAGES,
    resolve_action,
)
from north_gamification.gamification.celebrations import (
    celebrate_achievement,
    celebrate_level_up,
    celebrate_points_awarded,
)
from north_gamification.gamification.store import GamificationStore
from north_gamification.models import (
    GamificationProfile,
    LevelUpResult,
    PointsHistoryEntry,
    PointsResult,
    UserAction,
)
from north_gamification.monitoring import track_points_awarded
from north_gamification.utils.datetime_helpers import Clock, IdFactory, new_id, now_utc

logger = logging.getLogger(__name__)

MAX_POINTS = 2**31 - 1
POINTS_PER_LEVEL_UNIT = 100


def get_level_from_points(points: int) -> int:
    """Level for a points total (level 1 at 0 points)"""
    if points < 0:
        raise ValidationError("Points cannot be negative", field="points", value=points)
    return math.isqrt(points // POINTS_PER_LEVEL_UNIT) + 1


def get_points_required_for_level(level: int) -> int:
    """Total points at which a level starts"""
    if level < 1:
        raise ValidationError("Level must be >= 1", field="level", value=level)
    return POINTS_PER_LEVEL_UNIT * (level - 1) ** 2


def get_points_required_for_next_level(level: int) -> int:
    """Total points at which the level after `level` starts"""
    if level < 1:
        raise ValidationError("Level must be >= 1", field="level", value=level)
    return POINTS_PER_LEVEL_UNIT * level ** 2


def clamp_points(total: int) -> int:
    return max(0, min(MAX_POINTS, total))


def build_level_up(old_level: int, new_level: int, total_points: int) -> Optional[LevelUpResult]:
    """
    Describe a level change, or None if the level did not go up

    Features are collected for every level crossed, so a jump from 1 to 3
    unlocks both the level 2 and level 3 features.
    """
    if new_level <= old_level:
        return None

    unlocked_features: List[str] = []
    for level in range(old_level + 1, new_level + 1):
        unlocked_features.extend(LEVEL_FEATURES.get(level, ()))

    return LevelUpResult(
        old_level=old_level,
        new_level=new_level,
        points_required=get_points_required_for_level(new_level),
        total_points=total_points,
        unlocked_features=unlocked_features,
        celebration_message=LEVEL_UP_MESSAGES.get(
            new_level, f"🎊 Level {new_level}! Keep up the amazing work!"
        ),
    )


class PointsLedger:
    """
    Owns GamificationProfile and the append-only points history.

    `streaks` and `achievements` are optional collaborators; when attached,
    award() advances the streaks registered for the action and evaluates
    achievement triggers.
    """

    def __init__(
        self,
        store: GamificationStore,
        streaks=None,
        clock: Clock = now_utc,
        id_factory: IdFactory = new_id,
    ):
        self.store = store
        self.streaks = streaks
        # Set after construction; the registry credits its points through us
        self.achievements = None
        self.clock = clock
        self.id_factory = id_factory
        logger.debug("PointsLedger initialized")

    async def get_profile(self, user_id: str) -> GamificationProfile:
        """Stored profile, or the level 1 / 0 points default for new users"""
        profile = await self.store.get_profile(user_id)
        if profile is None:
            return GamificationProfile(user_id=user_id, last_activity=self.clock())
        return profile

    async def get_points_history(
        self, user_id: str, limit: Optional[int] = None
    ) -> List[PointsHistoryEntry]:
        if limit is not None and limit < 0:
            raise ValidationError("Limit cannot be negative", field="limit", value=limit)
        return await self.store.get_points_history(user_id, limit)

    async def credit(
        self,
        user_id: str,
        points: int,
        action: UserAction,
        description: Optional[str] = None,
    ) -> Tuple[GamificationProfile, GamificationProfile, PointsHistoryEntry]:
        """
        Apply a points delta and append its history entry

        No streaks or achievements are touched. The entry records the delta
        actually applied after clamping, so history always sums to the
        profile total. Returns the profile before and after the credit, plus
        the new history entry.
        """
        now = self.clock()
        before = await self.store.get_profile(user_id)
        if before is None:
            before = GamificationProfile(user_id=user_id, last_activity=now)

        total_points = clamp_points(before.total_points + points)
        applied = total_points - before.total_points
        after = before.model_copy(update={
            "total_points": total_points,
            "level": get_level_from_points(total_points),
            "last_activity": now,
        })

        entry = PointsHistoryEntry(
            id=self.id_factory(),
            points=applied,
            action=action,
            description=description,
            earned_at=now,
        )

        await self.store.save_profile(user_id, after)
        await self.store.add_points_history(user_id, entry)

        track_points_awarded(action.value, applied, leveled_up=after.level > before.level)
        if applied != points:
            logger.warning(
                f"Credit of {points} points for user {user_id} clamped to {applied}"
            )
        logger.info(
            f"Credited {applied} points to user {user_id} for {action.value} "
            f"(total {before.total_points} -> {total_points}, level {after.level})"
        )
        return before, after, entry

    async def level_up_since(self, user_id: str, old_level: int) -> Optional[LevelUpResult]:
        """
        Level-up from `old_level` to the current profile level, if any

        For operations that credit points without going through award(),
        such as micro-wins and direct achievement unlocks.
        """
        current = await self.get_profile(user_id)
        level_up = build_level_up(old_level, current.level, current.total_points)
        if level_up is not None:
            logger.info(f"User {user_id} leveled up: {old_level} -> {current.level}")
        return level_up

    async def award(
        self,
        user_id: str,
        action: Any,
        points: Optional[int] = None,
        description: Optional[str] = None,
    ) -> PointsResult:
        """
        Award points for a user action

        Args:
            user_id: User identifier
            action: UserAction (or its name)
            points: Explicit amount; defaults to the action's table value
            description: Optional history description

        Returns:
            PointsResult with the final profile state, including points from
            any achievements the action unlocked

        Raises:
            UnknownActionError: action is not in the points table
        """
        action = resolve_action(action)
        if points is None:
            points = ACTION_POINTS[action]

        before, after, entry = await self.credit(user_id, points, action, description)
        celebrations = [
            celebrate_points_awarded(entry.points, action, after.total_points, entry.earned_at)
        ]

        # Streaks registered for this action
        streak_updates = []
        if self.streaks is not None:
            activity_date = entry.earned_at.date()
            for streak_type in ACTION_STREAK_TYPES[action]:
                update = await self.streaks.update(user_id, streak_type, activity_date)
                streak_updates.append(update)
                if update.celebration_event is not None:
                    celebrations.append(update.celebration_event)

        # Achievement triggers (idempotent, so re-evaluated on every award)
        new_achievements = []
        if self.achievements is not None:
            new_achievements.extend(
                await self.achievements.check_action_triggers(user_id, action)
            )
            if streak_updates:
                new_achievements.extend(
                    await self.achievements.check_streak_triggers(user_id)
                )
            for achievement in new_achievements:
                celebrations.append(celebrate_achievement(achievement, entry.earned_at))

        achievement_points = sum(a.points_awarded for a in new_achievements)
        final = await self.store.get_profile(user_id) if new_achievements else after

        level_up = build_level_up(before.level, final.level, final.total_points)
        if level_up is not None:
            celebrations.append(celebrate_level_up(level_up, entry.earned_at))
            logger.info(f"User {user_id} leveled up: {before.level} -> {final.level}")

        return PointsResult(
            points_awarded=entry.points,
            achievement_points=achievement_points,
            total_points=final.total_points,
            old_level=before.level,
            new_level=final.level,
            leveled_up=level_up is not None,
            level_up=level_up,
            history_entry=entry,
            new_achievements=new_achievements,
            streak_updates=streak_updates,
            celebrations=celebrations,
        )
