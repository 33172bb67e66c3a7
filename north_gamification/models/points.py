"""Points, level and profile models"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime

from north_gamification.models.actions import UserAction
from north_gamification.models.achievement import Achievement
from north_gamification.models.celebration import CelebrationEvent
from north_gamification.models.level import LevelUpResult
from north_gamification.models.streak import StreakUpdateResult


class GamificationProfile(BaseModel):
    """Per-user points and level (level always derived from total points)"""
    model_config = ConfigDict(frozen=True)

    user_id: str
    level: int = Field(default=1, ge=1)
    total_points: int = Field(default=0, ge=0)
    last_activity: datetime


class PointsHistoryEntry(BaseModel):
    """Append-only record of a single points credit"""
    model_config = ConfigDict(frozen=True)

    id: str
    points: int
    action: UserAction
    description: Optional[str] = None
    earned_at: datetime


class PointsResult(BaseModel):
    """Outcome of a single award, including everything it triggered"""
    model_config = ConfigDict(frozen=True)

    points_awarded: int
    achievement_points: int = 0
    total_points: int
    old_level: int
    new_level: int
    leveled_up: bool
    level_up: Optional[LevelUpResult] = None
    history_entry: PointsHistoryEntry
    new_achievements: list[Achievement] = Field(default_factory=list)
    streak_updates: list[StreakUpdateResult] = Field(default_factory=list)
    celebrations: list[CelebrationEvent] = Field(default_factory=list)

    @property
    def unlocked_features(self) -> list[str]:
        return self.level_up.unlocked_features if self.level_up else []

    @property
    def updated_streaks(self):
        return [update.streak for update in self.streak_updates]
