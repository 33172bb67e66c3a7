"""Micro-win models"""
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime

from north_gamification.models.achievement import Achievement
from north_gamification.models.actions import UserAction
from north_gamification.models.celebration import CelebrationEvent
from north_gamification.models.level import LevelUpResult
from north_gamification.models.streak import Streak


class MicroWinDifficulty(str, Enum):
    EASY = "EASY"       # 1-2 minutes, simple action
    MEDIUM = "MEDIUM"   # 3-5 minutes, requires some thought
    HARD = "HARD"       # 5+ minutes, more complex task


class MicroWinOpportunity(BaseModel):
    """Small suggested action, generated fresh per query"""
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str
    points_awarded: int
    action_type: UserAction
    difficulty: MicroWinDifficulty
    estimated_time_minutes: int
    expires_at: Optional[datetime] = None
    is_personalized: bool = False
    context_data: dict[str, str] = Field(default_factory=dict)


class MicroWinResult(BaseModel):
    """Micro-win detected for a completed action"""
    model_config = ConfigDict(frozen=True)

    micro_win: MicroWinOpportunity
    points_awarded: int
    celebration_event: CelebrationEvent
    streaks_affected: list[Streak] = Field(default_factory=list)
    # The fields below describe the whole detect-and-award call and are
    # shared by every result it returns
    new_achievements: list[Achievement] = Field(default_factory=list)
    level_up: Optional[LevelUpResult] = None
