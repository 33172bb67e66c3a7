"""
Gamification Store

The engine reads and writes per-user state through GamificationStore. Real
deployments back it with a database; InMemoryGamificationStore keeps
everything in process memory and is what the tests and the demo use.

Contract:
- read-your-writes per user
- transaction(user_id) makes every write inside the block all-or-nothing
"""

import copy
import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional

from north_gamification.models import (
    Achievement,
    AchievementType,
    GamificationProfile,
    PointsHistoryEntry,
    Streak,
    StreakRecovery,
    StreakReminder,
    StreakType,
    UserAction,
)

logger = logging.getLogger(__name__)


class GamificationStore(ABC):
    """Persistence collaborator, keyed by user id"""

    # Profile
    @abstractmethod
    async def get_profile(self, user_id: str) -> Optional[GamificationProfile]: ...

    @abstractmethod
    async def save_profile(self, user_id: str, profile: GamificationProfile) -> None: ...

    # Points history
    @abstractmethod
    async def add_points_history(self, user_id: str, entry: PointsHistoryEntry) -> None: ...

    @abstractmethod
    async def get_points_history(
        self, user_id: str, limit: Optional[int] = None
    ) -> List[PointsHistoryEntry]:
        """Newest first"""

    @abstractmethod
    async def count_points_history(self, user_id: str, action: Optional[UserAction] = None) -> int: ...

    # Streaks
    @abstractmethod
    async def get_streak(self, user_id: str, streak_type: StreakType) -> Optional[Streak]: ...

    @abstractmethod
    async def get_streak_by_id(self, user_id: str, streak_id: str) -> Optional[Streak]: ...

    @abstractmethod
    async def get_streaks(self, user_id: str) -> List[Streak]: ...

    @abstractmethod
    async def save_streak(self, user_id: str, streak: Streak) -> None: ...

    # Achievements
    @abstractmethod
    async def get_achievement(
        self, user_id: str, achievement_type: AchievementType
    ) -> Optional[Achievement]: ...

    @abstractmethod
    async def get_achievements(self, user_id: str) -> List[Achievement]: ...

    @abstractmethod
    async def save_achievement(self, user_id: str, achievement: Achievement) -> None: ...

    # Recoveries
    @abstractmethod
    async def get_recovery(self, user_id: str, recovery_id: str) -> Optional[StreakRecovery]: ...

    @abstractmethod
    async def get_recoveries(self, user_id: str) -> List[StreakRecovery]: ...

    @abstractmethod
    async def save_recovery(self, user_id: str, recovery: StreakRecovery) -> None: ...

    # Reminders
    @abstractmethod
    async def save_reminder(self, user_id: str, reminder: StreakReminder) -> None: ...

    @abstractmethod
    async def get_reminders(self, user_id: str) -> List[StreakReminder]: ...

    @abstractmethod
    async def get_reminder(self, user_id: str, reminder_id: str) -> Optional[StreakReminder]: ...

    @abstractmethod
    async def mark_reminder_read(self, user_id: str, reminder_id: str) -> Optional[StreakReminder]:
        """Returns the updated reminder, or None if it does not exist"""

    @abstractmethod
    def transaction(self, user_id: str):
        """Async context manager; writes inside it are applied atomically"""


class InMemoryGamificationStore(GamificationStore):
    """Dict-backed store. State is lost when the process exits."""

    def __init__(self):
        self._profiles: Dict[str, GamificationProfile] = {}
        self._points_history: Dict[str, List[PointsHistoryEntry]] = {}
        self._streaks: Dict[str, Dict[StreakType, Streak]] = {}
        self._achievements: Dict[str, Dict[AchievementType, Achievement]] = {}
        self._recoveries: Dict[str, Dict[str, StreakRecovery]] = {}
        self._reminders: Dict[str, Dict[str, StreakReminder]] = {}
        self._transaction_depth: Dict[str, int] = {}
        logger.debug("InMemoryGamificationStore initialized")

    def _tables(self):
        return (
            self._profiles,
            self._points_history,
            self._streaks,
            self._achievements,
            self._recoveries,
            self._reminders,
        )

    # Profile

    async def get_profile(self, user_id: str) -> Optional[GamificationProfile]:
        return self._profiles.get(user_id)

    async def save_profile(self, user_id: str, profile: GamificationProfile) -> None:
        self._profiles[user_id] = profile

    # Points history

    async def add_points_history(self, user_id: str, entry: PointsHistoryEntry) -> None:
        self._points_history.setdefault(user_id, []).append(entry)

    async def get_points_history(
        self, user_id: str, limit: Optional[int] = None
    ) -> List[PointsHistoryEntry]:
        entries = list(reversed(self._points_history.get(user_id, [])))
        return entries if limit is None else entries[:limit]

    async def count_points_history(self, user_id: str, action: Optional[UserAction] = None) -> int:
        entries = self._points_history.get(user_id, [])
        if action is None:
            return len(entries)
        return sum(1 for entry in entries if entry.action == action)

    # Streaks

    async def get_streak(self, user_id: str, streak_type: StreakType) -> Optional[Streak]:
        return self._streaks.get(user_id, {}).get(streak_type)

    async def get_streak_by_id(self, user_id: str, streak_id: str) -> Optional[Streak]:
        for streak in self._streaks.get(user_id, {}).values():
            if streak.id == streak_id:
                return streak
        return None

    async def get_streaks(self, user_id: str) -> List[Streak]:
        return list(self._streaks.get(user_id, {}).values())

    async def save_streak(self, user_id: str, streak: Streak) -> None:
        self._streaks.setdefault(user_id, {})[streak.type] = streak

    # Achievements

    async def get_achievement(
        self, user_id: str, achievement_type: AchievementType
    ) -> Optional[Achievement]:
        return self._achievements.get(user_id, {}).get(achievement_type)

    async def get_achievements(self, user_id: str) -> List[Achievement]:
        return list(self._achievements.get(user_id, {}).values())

    async def save_achievement(self, user_id: str, achievement: Achievement) -> None:
        self._achievements.setdefault(user_id, {})[achievement.achievement_type] = achievement

    # Recoveries

    async def get_recovery(self, user_id: str, recovery_id: str) -> Optional[StreakRecovery]:
        return self._recoveries.get(user_id, {}).get(recovery_id)

    async def get_recoveries(self, user_id: str) -> List[StreakRecovery]:
        return list(self._recoveries.get(user_id, {}).values())

    async def save_recovery(self, user_id: str, recovery: StreakRecovery) -> None:
        self._recoveries.setdefault(user_id, {})[recovery.id] = recovery

    # Reminders

    async def save_reminder(self, user_id: str, reminder: StreakReminder) -> None:
        self._reminders.setdefault(user_id, {})[reminder.id] = reminder

    async def get_reminders(self, user_id: str) -> List[StreakReminder]:
        return list(self._reminders.get(user_id, {}).values())

    async def get_reminder(self, user_id: str, reminder_id: str) -> Optional[StreakReminder]:
        return self._reminders.get(user_id, {}).get(reminder_id)

    async def mark_reminder_read(self, user_id: str, reminder_id: str) -> Optional[StreakReminder]:
        reminder = self._reminders.get(user_id, {}).get(reminder_id)
        if reminder is None:
            return None
        updated = reminder.model_copy(update={"is_read": True})
        self._reminders[user_id][reminder_id] = updated
        return updated

    # Transactions

    @asynccontextmanager
    async def transaction(self, user_id: str) -> AsyncIterator[None]:
        """
        Snapshot the user's rows and restore them if the block raises.

        Nested transactions for the same user join the outermost one.
        """
        depth = self._transaction_depth.get(user_id, 0)
        self._transaction_depth[user_id] = depth + 1

        snapshot = None
        if depth == 0:
            # Models are frozen, so copying the containers is enough
            snapshot = [copy.copy(table.get(user_id)) for table in self._tables()]

        try:
            yield
        except BaseException:
            if snapshot is not None:
                for table, rows in zip(self._tables(), snapshot):
                    if rows is None:
                        table.pop(user_id, None)
                    else:
                        table[user_id] = rows
                logger.info(f"Rolled back gamification writes for user {user_id}")
            raise
        finally:
            if depth == 0:
                self._transaction_depth.pop(user_id, None)
            else:
                self._transaction_depth[user_id] = depth
