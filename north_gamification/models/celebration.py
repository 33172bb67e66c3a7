"""Celebration descriptors handed to the renderer"""
from enum import Enum
from typing import Any
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime


class CelebrationType(str, Enum):
    POINTS_AWARDED = "POINTS_AWARDED"
    LEVEL_UP = "LEVEL_UP"
    ACHIEVEMENT_UNLOCKED = "ACHIEVEMENT_UNLOCKED"
    STREAK_MILESTONE = "STREAK_MILESTONE"
    MICRO_WIN = "MICRO_WIN"


class CelebrationIntensity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class AnimationType(str, Enum):
    GENTLE_BOUNCE = "GENTLE_BOUNCE"
    STAR_TWINKLE = "STAR_TWINKLE"
    FLAME_FLICKER = "FLAME_FLICKER"
    BADGE_REVEAL = "BADGE_REVEAL"
    RECORD_BADGE_REVEAL = "RECORD_BADGE_REVEAL"
    CONFETTI = "CONFETTI"


class SoundType(str, Enum):
    GENTLE_CHIME = "GENTLE_CHIME"
    MICRO_WIN_CHIME = "MICRO_WIN_CHIME"
    STREAK_CHIME = "STREAK_CHIME"
    ACHIEVEMENT_CHIME = "ACHIEVEMENT_CHIME"
    LEVEL_UP_FANFARE = "LEVEL_UP_FANFARE"


class HapticType(str, Enum):
    GENTLE_TAP = "GENTLE_TAP"
    SUCCESS_PATTERN = "SUCCESS_PATTERN"
    ACHIEVEMENT_PATTERN = "ACHIEVEMENT_PATTERN"
    CELEBRATION_PATTERN = "CELEBRATION_PATTERN"


class CelebrationEvent(BaseModel):
    """Declarative feedback for a gamification moment (never persisted)"""
    model_config = ConfigDict(frozen=True)

    type: CelebrationType
    title: str
    message: str
    intensity: CelebrationIntensity
    duration_ms: int
    animations: list[AnimationType]
    sounds: list[SoundType]
    haptic_feedback: list[HapticType]
    timestamp: datetime
    additional_data: dict[str, Any] = Field(default_factory=dict)
