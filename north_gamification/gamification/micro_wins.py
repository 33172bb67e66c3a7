"""
Micro-Win Generator

Suggests small, quick actions from the user's current state, and detects the
micro-wins earned by a completed action.

Suggestion sources (in order):
1. Maintenance: one per active streak that is not safe (easy)
2. Habit building: actions used < 3 times in the last 20 history entries,
   at most 2 (medium)
3. Exploration: static "Discover new insights" fallback (medium)
4. Recovery: one per open recovery (hard)

Suggestions are deduplicated by action type (first wins), then ranked:
+10 personalized, +15 tied to a streak, +20 tied to a recovery,
plus easy +5 / medium +3 / hard +1.
"""

import logging
import random
from typing import Any, Dict, List, Optional, Tuple

from north_gamification.exceptions import ValidationError
from north_gamification.gamification.catalog import (
    ACTION_STREAK_TYPES,
    MICRO_WIN_POINTS,
    STREAK_TYPE_ACTIONS,
    get_action_description,
    get_streak_display_name,
    resolve_action,
)
from north_gamification.gamification.celebrations import (
    celebrate_achievement,
    celebrate_level_up,
    celebrate_micro_win,
)
from north_gamification.gamification.store import GamificationStore
from north_gamification.models import (
    CelebrationEvent,
    MicroWinDifficulty,
    MicroWinOpportunity,
    MicroWinResult,
    PointsHistoryEntry,
    Streak,
    StreakRecovery,
    StreakRiskLevel,
    UserAction,
)
from north_gamification.utils.datetime_helpers import Clock, IdFactory, new_id, now_utc

logger = logging.getLogger(__name__)

HABIT_HISTORY_WINDOW = 20
HABIT_USAGE_THRESHOLD = 3
MAX_HABIT_WINS = 2

BULK_CATEGORIZE_THRESHOLD = 5
SIGNIFICANT_SAVINGS_AMOUNT = 50.0

DIFFICULTY_PRIORITY = {
    MicroWinDifficulty.EASY: 5,
    MicroWinDifficulty.MEDIUM: 3,
    MicroWinDifficulty.HARD: 1,
}


def calculate_priority(micro_win: MicroWinOpportunity) -> int:
    priority = 0
    if micro_win.is_personalized:
        priority += 10
    if "streakId" in micro_win.context_data:
        priority += 15
    if "recoveryId" in micro_win.context_data:
        priority += 20
    return priority + DIFFICULTY_PRIORITY[micro_win.difficulty]


def rank_micro_wins(candidates: List[MicroWinOpportunity], limit: int) -> List[MicroWinOpportunity]:
    """Dedupe by action type keeping the first, then stable sort by priority"""
    seen = set()
    unique = []
    for micro_win in candidates:
        if micro_win.action_type in seen:
            continue
        seen.add(micro_win.action_type)
        unique.append(micro_win)

    unique.sort(key=calculate_priority, reverse=True)
    return unique[:limit]


def maintenance_micro_wins(active_streaks: List[Streak]) -> List[MicroWinOpportunity]:
    return [
        MicroWinOpportunity(
            id=f"maintain_{streak.id}",
            title=f"Maintain {get_streak_display_name(streak.type)} streak",
            description=f"Keep your {streak.current_count}-day streak alive!",
            points_awarded=MICRO_WIN_POINTS[MicroWinDifficulty.EASY],
            action_type=STREAK_TYPE_ACTIONS[streak.type],
            difficulty=MicroWinDifficulty.EASY,
            estimated_time_minutes=2,
            is_personalized=True,
            context_data={
                "streakId": streak.id,
                "streakCount": str(streak.current_count),
                "riskLevel": streak.risk_level.value,
            },
        )
        for streak in active_streaks
        if streak.risk_level != StreakRiskLevel.SAFE
    ]


def habit_micro_wins(
    recent_history: List[PointsHistoryEntry],
    rng: Optional[random.Random] = None,
) -> List[MicroWinOpportunity]:
    counts: Dict[UserAction, int] = {}
    for entry in recent_history:
        counts[entry.action] = counts.get(entry.action, 0) + 1

    underused = [a for a in UserAction if counts.get(a, 0) < HABIT_USAGE_THRESHOLD]
    if rng is not None:
        rng.shuffle(underused)

    return [
        MicroWinOpportunity(
            id=f"habit_{action.value}",
            title=f"Build {get_action_description(action)} habit",
            description=f"Try {get_action_description(action)} to build a positive routine",
            points_awarded=MICRO_WIN_POINTS[MicroWinDifficulty.MEDIUM],
            action_type=action,
            difficulty=MicroWinDifficulty.MEDIUM,
            estimated_time_minutes=5,
            is_personalized=True,
        )
        for action in underused[:MAX_HABIT_WINS]
    ]


def exploration_micro_wins() -> List[MicroWinOpportunity]:
    return [
        MicroWinOpportunity(
            id="explore_insights",
            title="Discover new insights",
            description="Explore your spending patterns and trends",
            points_awarded=MICRO_WIN_POINTS[MicroWinDifficulty.MEDIUM],
            action_type=UserAction.REVIEW_INSIGHTS,
            difficulty=MicroWinDifficulty.MEDIUM,
            estimated_time_minutes=3,
        )
    ]


def recovery_micro_wins(open_recoveries: List[StreakRecovery]) -> List[MicroWinOpportunity]:
    wins = []
    for recovery in open_recoveries:
        name = get_streak_display_name(recovery.streak_type)
        wins.append(MicroWinOpportunity(
            id=f"recovery_{recovery.id}",
            title=f"Recover {name} streak",
            description=f"Get back on track with your {name} habits",
            points_awarded=MICRO_WIN_POINTS[MicroWinDifficulty.HARD],
            action_type=STREAK_TYPE_ACTIONS[recovery.streak_type],
            difficulty=MicroWinDifficulty.HARD,
            estimated_time_minutes=10,
            is_personalized=True,
            context_data={
                "recoveryId": recovery.id,
                "originalCount": str(recovery.original_count),
            },
        ))
    return wins


def _parse_int(value: Optional[str], default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _parse_float(value: Optional[str]) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class MicroWinGenerator:
    """Builds ranked suggestion lists and awards detected micro-wins"""

    def __init__(
        self,
        store: GamificationStore,
        streaks,
        ledger,
        rng: Optional[random.Random] = None,
        clock: Clock = now_utc,
        id_factory: IdFactory = new_id,
    ):
        self.store = store
        self.streaks = streaks
        self.ledger = ledger
        self.rng = rng
        self.clock = clock
        self.id_factory = id_factory

    async def generate(self, user_id: str, limit: int) -> List[MicroWinOpportunity]:
        """
        Ranked suggestions for a user; nothing is persisted

        Raises:
            ValidationError: limit is negative
        """
        if limit < 0:
            raise ValidationError("Limit cannot be negative", field="limit", value=limit)

        active_streaks = await self.streaks.get_active_streaks(user_id)
        recent_history = await self.store.get_points_history(user_id, HABIT_HISTORY_WINDOW)
        open_recoveries = [r for r in await self.store.get_recoveries(user_id) if r.is_open]

        candidates = [
            *maintenance_micro_wins(active_streaks),
            *habit_micro_wins(recent_history, self.rng),
            *exploration_micro_wins(),
            *recovery_micro_wins(open_recoveries),
        ]
        ranked = rank_micro_wins(candidates, limit)
        logger.debug(f"Generated {len(ranked)} of {len(candidates)} micro-wins for user {user_id}")
        return ranked

    def detect(self, action: UserAction, context_data: Dict[str, str]) -> List[MicroWinOpportunity]:
        """Micro-wins earned by completing an action"""
        description = get_action_description(action)
        wins = [
            MicroWinOpportunity(
                id=f"action_{action.value}_{self.id_factory()}",
                title=f"Completed {description}",
                description="Great job staying on top of your finances!",
                points_awarded=MICRO_WIN_POINTS[MicroWinDifficulty.EASY],
                action_type=action,
                difficulty=MicroWinDifficulty.EASY,
                estimated_time_minutes=1,
            )
        ]

        if action == UserAction.CATEGORIZE_TRANSACTION:
            count = _parse_int(context_data.get("transactionCount"), 1)
            if count >= BULK_CATEGORIZE_THRESHOLD:
                wins.append(MicroWinOpportunity(
                    id=f"bulk_categorize_{self.id_factory()}",
                    title="Bulk Organizer",
                    description=f"Categorized {count} transactions in one go!",
                    points_awarded=MICRO_WIN_POINTS[MicroWinDifficulty.MEDIUM],
                    action_type=action,
                    difficulty=MicroWinDifficulty.MEDIUM,
                    estimated_time_minutes=5,
                ))
        elif action == UserAction.MAKE_SAVINGS_CONTRIBUTION:
            amount = _parse_float(context_data.get("amount"))
            if amount is not None and amount >= SIGNIFICANT_SAVINGS_AMOUNT:
                wins.append(MicroWinOpportunity(
                    id=f"significant_savings_{self.id_factory()}",
                    title="Significant Saver",
                    description="Made a meaningful contribution to your future!",
                    points_awarded=MICRO_WIN_POINTS[MicroWinDifficulty.HARD],
                    action_type=action,
                    difficulty=MicroWinDifficulty.HARD,
                    estimated_time_minutes=1,
                ))

        return wins

    async def detect_and_award(
        self,
        user_id: str,
        action: Any,
        context_data: Optional[Dict[str, str]] = None,
    ) -> Tuple[List[MicroWinResult], List[CelebrationEvent]]:
        """
        Detect the micro-wins for a completed action and credit their points

        The action's streaks are advanced once, then streak achievements are
        checked. Streaks, new achievements and any level-up are reported on
        every result.

        Returns:
            (results, celebrations): celebrations in order are streak
            milestones, achievements, micro-wins, then the level-up
        """
        action = resolve_action(action)
        context_data = context_data or {}
        now = self.clock()
        before = await self.ledger.get_profile(user_id)

        streaks_affected = []
        streak_celebrations = []
        for streak_type in ACTION_STREAK_TYPES[action]:
            update = await self.streaks.update(user_id, streak_type, now.date())
            streaks_affected.append(update.streak)
            if update.celebration_event is not None:
                streak_celebrations.append(update.celebration_event)

        new_achievements = []
        achievements = self.ledger.achievements
        if achievements is not None and streaks_affected:
            new_achievements = await achievements.check_streak_triggers(user_id)

        credited = []
        for micro_win in self.detect(action, context_data):
            points = MICRO_WIN_POINTS[micro_win.difficulty]
            await self.ledger.credit(
                user_id,
                points,
                UserAction.COMPLETE_MICRO_TASK,
                description=f"Micro-win: {micro_win.title}",
            )
            credited.append((micro_win, points))

        level_up = await self.ledger.level_up_since(user_id, before.level)

        results = [
            MicroWinResult(
                micro_win=micro_win,
                points_awarded=points,
                celebration_event=celebrate_micro_win(micro_win.title, points, now),
                streaks_affected=streaks_affected,
                new_achievements=new_achievements,
                level_up=level_up,
            )
            for micro_win, points in credited
        ]

        celebrations = list(streak_celebrations)
        celebrations.extend(celebrate_achievement(a, now) for a in new_achievements)
        celebrations.extend(r.celebration_event for r in results)
        if level_up is not None:
            celebrations.append(celebrate_level_up(level_up, now))

        logger.info(
            f"User {user_id} earned {len(results)} micro-wins for {action.value} "
            f"(+{sum(r.points_awarded for r in results)} points)"
        )
        return results, celebrations
