"""Domain models for the gamification engine"""
from north_gamification.models.actions import UserAction
from north_gamification.models.achievement import (
    Achievement,
    AchievementCategory,
    AchievementDefinition,
    AchievementType,
)
from north_gamification.models.celebration import (
    AnimationType,
    CelebrationEvent,
    CelebrationIntensity,
    CelebrationType,
    HapticType,
    SoundType,
)
from north_gamification.models.micro_win import (
    MicroWinDifficulty,
    MicroWinOpportunity,
    MicroWinResult,
)
from north_gamification.models.level import LevelUpResult
from north_gamification.models.points import (
    GamificationProfile,
    PointsHistoryEntry,
    PointsResult,
)
from north_gamification.models.result import Result
from north_gamification.models.streak import (
    RecoveryAction,
    RecoveryActionResult,
    RecoveryStatus,
    ReminderType,
    Streak,
    StreakMilestone,
    StreakRecovery,
    StreakReminder,
    StreakRiskAnalysis,
    StreakRiskLevel,
    StreakStatistics,
    StreakType,
    StreakUpdateResult,
)

__all__ = [
    "Achievement",
    "AchievementCategory",
    "AchievementDefinition",
    "AchievementType",
    "AnimationType",
    "CelebrationEvent",
    "CelebrationIntensity",
    "CelebrationType",
    "GamificationProfile",
    "HapticType",
    "LevelUpResult",
    "MicroWinDifficulty",
    "MicroWinOpportunity",
    "MicroWinResult",
    "PointsHistoryEntry",
    "PointsResult",
    "RecoveryAction",
    "RecoveryActionResult",
    "RecoveryStatus",
    "ReminderType",
    "Result",
    "SoundType",
    "Streak",
    "StreakMilestone",
    "StreakRecovery",
    "StreakReminder",
    "StreakRiskAnalysis",
    "StreakRiskLevel",
    "StreakStatistics",
    "StreakType",
    "StreakUpdateResult",
    "UserAction",
]
