"""
Celebration Mapper

Maps gamification moments to declarative CelebrationEvent descriptors. The
renderer decides how to play them; nothing here performs I/O, reads a clock
or keeps state, so the same arguments always produce an equal descriptor.

Intensity tiers:
- LOW: 1000 ms (points, micro-wins, short streaks)
- MEDIUM: 2000 ms (streaks of 7+ days)
- HIGH: 3000 ms (level-ups, achievements, streaks of 30+ days)
"""

from datetime import datetime
from typing import Any, Callable, Dict, Optional

from north_gamification.gamification.catalog import get_action_description, get_streak_display_name
from north_gamification.models import (
    Achievement,
    AnimationType,
    CelebrationEvent,
    CelebrationIntensity,
    CelebrationType,
    HapticType,
    LevelUpResult,
    SoundType,
    StreakType,
    UserAction,
)


DURATION_MS = {
    CelebrationIntensity.LOW: 1000,
    CelebrationIntensity.MEDIUM: 2000,
    CelebrationIntensity.HIGH: 3000,
}

# Signature animation/sound per kind, then extras by intensity
_KIND_ANIMATIONS = {
    CelebrationType.POINTS_AWARDED: AnimationType.GENTLE_BOUNCE,
    CelebrationType.LEVEL_UP: AnimationType.CONFETTI,
    CelebrationType.ACHIEVEMENT_UNLOCKED: AnimationType.BADGE_REVEAL,
    CelebrationType.STREAK_MILESTONE: AnimationType.FLAME_FLICKER,
    CelebrationType.MICRO_WIN: AnimationType.STAR_TWINKLE,
}

_INTENSITY_ANIMATIONS = {
    CelebrationIntensity.LOW: (),
    CelebrationIntensity.MEDIUM: (AnimationType.STAR_TWINKLE,),
    CelebrationIntensity.HIGH: (AnimationType.STAR_TWINKLE, AnimationType.CONFETTI),
}

_KIND_SOUNDS = {
    CelebrationType.POINTS_AWARDED: SoundType.GENTLE_CHIME,
    CelebrationType.LEVEL_UP: SoundType.LEVEL_UP_FANFARE,
    CelebrationType.ACHIEVEMENT_UNLOCKED: SoundType.ACHIEVEMENT_CHIME,
    CelebrationType.STREAK_MILESTONE: SoundType.STREAK_CHIME,
    CelebrationType.MICRO_WIN: SoundType.MICRO_WIN_CHIME,
}

_INTENSITY_HAPTICS = {
    CelebrationIntensity.LOW: HapticType.GENTLE_TAP,
    CelebrationIntensity.MEDIUM: HapticType.SUCCESS_PATTERN,
    CelebrationIntensity.HIGH: HapticType.CELEBRATION_PATTERN,
}


def streak_intensity(streak_count: int) -> CelebrationIntensity:
    if streak_count >= 30:
        return CelebrationIntensity.HIGH
    if streak_count >= 7:
        return CelebrationIntensity.MEDIUM
    return CelebrationIntensity.LOW


def _build_event(
    kind: CelebrationType,
    title: str,
    message: str,
    intensity: CelebrationIntensity,
    timestamp: datetime,
    is_new_record: bool = False,
    additional_data: Optional[Dict[str, Any]] = None,
) -> CelebrationEvent:
    animations = [_KIND_ANIMATIONS[kind]]
    for extra in _INTENSITY_ANIMATIONS[intensity]:
        if extra not in animations:
            animations.append(extra)

    sounds = [_KIND_SOUNDS[kind]]
    haptics = [_INTENSITY_HAPTICS[intensity]]

    if kind == CelebrationType.ACHIEVEMENT_UNLOCKED:
        haptics = [HapticType.ACHIEVEMENT_PATTERN]

    if is_new_record:
        animations.append(AnimationType.RECORD_BADGE_REVEAL)
        if SoundType.LEVEL_UP_FANFARE not in sounds:
            sounds.append(SoundType.LEVEL_UP_FANFARE)

    return CelebrationEvent(
        type=kind,
        title=title,
        message=message,
        intensity=intensity,
        duration_ms=DURATION_MS[intensity],
        animations=animations,
        sounds=sounds,
        haptic_feedback=haptics,
        timestamp=timestamp,
        additional_data=additional_data or {},
    )


def celebrate_points_awarded(
    points_awarded: int,
    action: UserAction,
    total_points: int,
    timestamp: datetime,
) -> CelebrationEvent:
    return _build_event(
        CelebrationType.POINTS_AWARDED,
        title=f"+{points_awarded} points!",
        message=f"Nice {get_action_description(action)}! You now have {total_points} points.",
        intensity=CelebrationIntensity.LOW,
        timestamp=timestamp,
        additional_data={
            "points_awarded": points_awarded,
            "action": action.value,
            "total_points": total_points,
        },
    )


def celebrate_level_up(level_up: LevelUpResult, timestamp: datetime) -> CelebrationEvent:
    return _build_event(
        CelebrationType.LEVEL_UP,
        title="Level Up!",
        message=level_up.celebration_message,
        intensity=CelebrationIntensity.HIGH,
        timestamp=timestamp,
        additional_data={
            "old_level": level_up.old_level,
            "new_level": level_up.new_level,
            "unlocked_features": list(level_up.unlocked_features),
        },
    )


def celebrate_achievement(achievement: Achievement, timestamp: datetime) -> CelebrationEvent:
    return _build_event(
        CelebrationType.ACHIEVEMENT_UNLOCKED,
        title="Achievement Unlocked!",
        message=f"{achievement.badge_icon} {achievement.title}: {achievement.description}",
        intensity=CelebrationIntensity.HIGH,
        timestamp=timestamp,
        additional_data={
            "achievement_type": achievement.achievement_type.value,
            "points_awarded": achievement.points_awarded,
        },
    )


def celebrate_streak(
    streak_type: StreakType,
    streak_count: int,
    is_new_record: bool,
    timestamp: datetime,
) -> CelebrationEvent:
    days = "day" if streak_count == 1 else "days"
    return _build_event(
        CelebrationType.STREAK_MILESTONE,
        title="New Record!" if is_new_record else "Streak Continues!",
        message=f"{streak_count} {days} of {get_streak_display_name(streak_type)}",
        intensity=streak_intensity(streak_count),
        timestamp=timestamp,
        is_new_record=is_new_record,
        additional_data={
            "streak_type": streak_type.value,
            "streak_count": streak_count,
            "is_new_record": is_new_record,
        },
    )


def celebrate_micro_win(title: str, points_awarded: int, timestamp: datetime) -> CelebrationEvent:
    return _build_event(
        CelebrationType.MICRO_WIN,
        title="Micro Win!",
        message=title,
        intensity=CelebrationIntensity.LOW,
        timestamp=timestamp,
        additional_data={"points_awarded": points_awarded},
    )


_CELEBRATORS: Dict[CelebrationType, Callable[..., CelebrationEvent]] = {
    CelebrationType.POINTS_AWARDED: celebrate_points_awarded,
    CelebrationType.LEVEL_UP: celebrate_level_up,
    CelebrationType.ACHIEVEMENT_UNLOCKED: celebrate_achievement,
    CelebrationType.STREAK_MILESTONE: celebrate_streak,
    CelebrationType.MICRO_WIN: celebrate_micro_win,
}


def celebrate(kind: CelebrationType, **params: Any) -> CelebrationEvent:
    """
    Dispatch to the mapper for an event kind

    Example:
        celebrate(
            CelebrationType.STREAK_MILESTONE,
            streak_type=StreakType.DAILY_CHECK_IN,
            streak_count=7,
            is_new_record=True,
            timestamp=now,
        )
    """
    return _CELEBRATORS[CelebrationType(kind)](**params)
