"""
Gamification core

Points and levels, multi-type streaks with risk scoring and recovery,
micro-win suggestions, achievements and celebration descriptors.
"""

from north_gamification.gamification.achievement_system import AchievementRegistry
from north_gamification.gamification.celebrations import celebrate
from north_gamification.gamification.engine import GamificationEngine
from north_gamification.gamification.micro_wins import MicroWinGenerator
from north_gamification.gamification.points_ledger import (
    MAX_POINTS,
    PointsLedger,
    get_level_from_points,
    get_points_required_for_level,
    get_points_required_for_next_level,
)
from north_gamification.gamification.recovery import RecoveryWorkflow
from north_gamification.gamification.reminders import ReminderScheduler
from north_gamification.gamification.sinks import (
    CelebrationSink,
    CollectingCelebrationSink,
    CollectingReminderSink,
    ReminderSink,
)
from north_gamification.gamification.store import GamificationStore, InMemoryGamificationStore
from north_gamification.gamification.streak_system import (
    StreakEngine,
    calculate_urgency_score,
    classify_risk,
)

__all__ = [
    # Engine
    "GamificationEngine",

    # Components
    "PointsLedger",
    "StreakEngine",
    "RecoveryWorkflow",
    "ReminderScheduler",
    "MicroWinGenerator",
    "AchievementRegistry",

    # Pure helpers
    "MAX_POINTS",
    "get_level_from_points",
    "get_points_required_for_level",
    "get_points_required_for_next_level",
    "classify_risk",
    "calculate_urgency_score",
    "celebrate",

    # Collaborators
    "GamificationStore",
    "InMemoryGamificationStore",
    "ReminderSink",
    "CelebrationSink",
    "CollectingReminderSink",
    "CollectingCelebrationSink",
]
