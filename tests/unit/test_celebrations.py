"""Unit tests for Celebration Mapper (north_gamification/gamification/celebrations.py)"""
import pytest

from north_gamification.gamification.celebrations import (
    DURATION_MS,
    celebrate,
    celebrate_achievement,
    celebrate_level_up,
    celebrate_micro_win,
    celebrate_points_awarded,
    celebrate_streak,
    streak_intensity,
)
from north_gamification.models import (
    Achievement,
    AchievementCategory,
    AchievementType,
    AnimationType,
    CelebrationIntensity,
    CelebrationType,
    HapticType,
    LevelUpResult,
    SoundType,
    StreakType,
    UserAction,
)


@pytest.fixture
def achievement(start_time):
    return Achievement(
        id="ach-1",
        achievement_type=AchievementType.FIRST_ACCOUNT_LINKED,
        title="Connected",
        description="Linked your first bank account",
        badge_icon="🔗",
        category=AchievementCategory.ENGAGEMENT,
        points_awarded=100,
        unlocked_at=start_time,
    )


# ============================================================================
# Intensity Tests
# ============================================================================

@pytest.mark.parametrize("count,expected", [
    (1, CelebrationIntensity.LOW),
    (6, CelebrationIntensity.LOW),
    (7, CelebrationIntensity.MEDIUM),
    (29, CelebrationIntensity.MEDIUM),
    (30, CelebrationIntensity.HIGH),
    (365, CelebrationIntensity.HIGH),
])
def test_streak_intensity(count, expected):
    """Test streak intensity tiers"""
    assert streak_intensity(count) == expected


def test_duration_follows_intensity(start_time):
    """Test duration is 1000/2000/3000 ms by intensity"""
    assert celebrate_streak(StreakType.DAILY_CHECK_IN, 3, False, start_time).duration_ms == 1000
    assert celebrate_streak(StreakType.DAILY_CHECK_IN, 7, False, start_time).duration_ms == 2000
    assert celebrate_streak(StreakType.DAILY_CHECK_IN, 30, False, start_time).duration_ms == 3000
    assert DURATION_MS[CelebrationIntensity.HIGH] == 3000


# ============================================================================
# Mapper Tests
# ============================================================================

def test_points_awarded_event(start_time):
    """Test points celebrations are low intensity with a gentle chime"""
    event = celebrate_points_awarded(15, UserAction.UPDATE_GOAL, 215, start_time)

    assert event.type == CelebrationType.POINTS_AWARDED
    assert event.title == "+15 points!"
    assert "215 points" in event.message
    assert event.intensity == CelebrationIntensity.LOW
    assert event.animations == [AnimationType.GENTLE_BOUNCE]
    assert event.sounds == [SoundType.GENTLE_CHIME]
    assert event.haptic_feedback == [HapticType.GENTLE_TAP]
    assert event.timestamp == start_time


def test_level_up_event(start_time):
    """Test level-ups are high intensity with confetti and fanfare"""
    level_up = LevelUpResult(
        old_level=1,
        new_level=2,
        points_required=100,
        total_points=105,
        unlocked_features=["Advanced Goal Tracking"],
        celebration_message="Welcome to Level 2!",
    )

    event = celebrate_level_up(level_up, start_time)

    assert event.type == CelebrationType.LEVEL_UP
    assert event.intensity == CelebrationIntensity.HIGH
    assert event.message == "Welcome to Level 2!"
    assert event.animations == [AnimationType.CONFETTI, AnimationType.STAR_TWINKLE]
    assert event.sounds == [SoundType.LEVEL_UP_FANFARE]
    assert event.additional_data["unlocked_features"] == ["Advanced Goal Tracking"]


def test_achievement_event(achievement, start_time):
    """Test achievements use the badge reveal and achievement haptics"""
    event = celebrate_achievement(achievement, start_time)

    assert event.type == CelebrationType.ACHIEVEMENT_UNLOCKED
    assert event.title == "Achievement Unlocked!"
    assert "Connected" in event.message
    assert event.intensity == CelebrationIntensity.HIGH
    assert event.animations[0] == AnimationType.BADGE_REVEAL
    assert event.haptic_feedback == [HapticType.ACHIEVEMENT_PATTERN]
    assert event.additional_data["achievement_type"] == "FIRST_ACCOUNT_LINKED"


def test_streak_event_new_record(start_time):
    """Test record streaks add the record badge and fanfare"""
    event = celebrate_streak(StreakType.DAILY_CHECK_IN, 7, True, start_time)

    assert event.title == "New Record!"
    assert event.message == "7 days of daily check-in"
    assert event.intensity == CelebrationIntensity.MEDIUM
    assert event.animations == [
        AnimationType.FLAME_FLICKER,
        AnimationType.STAR_TWINKLE,
        AnimationType.RECORD_BADGE_REVEAL,
    ]
    assert event.sounds == [SoundType.STREAK_CHIME, SoundType.LEVEL_UP_FANFARE]
    assert event.haptic_feedback == [HapticType.SUCCESS_PATTERN]


def test_streak_event_continuing(start_time):
    """Test non-record streaks keep the plain streak presentation"""
    event = celebrate_streak(StreakType.SAVINGS_CONTRIBUTION, 1, False, start_time)

    assert event.title == "Streak Continues!"
    assert event.message == "1 day of savings"
    assert AnimationType.RECORD_BADGE_REVEAL not in event.animations
    assert event.sounds == [SoundType.STREAK_CHIME]


def test_micro_win_event(start_time):
    """Test micro-wins are low intensity with the micro-win chime"""
    event = celebrate_micro_win("Bulk Organizer", 10, start_time)

    assert event.type == CelebrationType.MICRO_WIN
    assert event.title == "Micro Win!"
    assert event.message == "Bulk Organizer"
    assert event.animations == [AnimationType.STAR_TWINKLE]
    assert event.sounds == [SoundType.MICRO_WIN_CHIME]
    assert event.additional_data == {"points_awarded": 10}


def test_no_duplicate_animations(start_time):
    """Test intensity extras never repeat the signature animation"""
    level_up = LevelUpResult(
        old_level=9,
        new_level=10,
        points_required=8100,
        total_points=8100,
        celebration_message="Level 10!",
    )
    event = celebrate_level_up(level_up, start_time)

    assert len(event.animations) == len(set(event.animations))


# ============================================================================
# Purity & Dispatch Tests
# ============================================================================

def test_mapping_is_deterministic(start_time):
    """Test equal inputs give equal descriptors"""
    first = celebrate_streak(StreakType.GOAL_PROGRESS, 14, True, start_time)
    second = celebrate_streak(StreakType.GOAL_PROGRESS, 14, True, start_time)

    assert first == second


def test_celebrate_dispatch(start_time):
    """Test the dispatcher routes to the matching mapper"""
    event = celebrate(
        CelebrationType.STREAK_MILESTONE,
        streak_type=StreakType.DAILY_CHECK_IN,
        streak_count=30,
        is_new_record=False,
        timestamp=start_time,
    )

    assert event == celebrate_streak(StreakType.DAILY_CHECK_IN, 30, False, start_time)


def test_celebrate_dispatch_by_name(start_time):
    """Test the kind may be given by name"""
    event = celebrate("MICRO_WIN", title="Completed balance check", points_awarded=5, timestamp=start_time)

    assert event.type == CelebrationType.MICRO_WIN


def test_celebrate_unknown_kind(start_time):
    """Test unknown kinds are rejected"""
    with pytest.raises(ValueError):
        celebrate("FIREWORKS", timestamp=start_time)
