"""Streak, recovery and reminder models"""
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator
from datetime import date, datetime

from north_gamification.models.achievement import Achievement
from north_gamification.models.actions import UserAction
from north_gamification.models.celebration import CelebrationEvent
from north_gamification.models.level import LevelUpResult


class StreakType(str, Enum):
    """Habits tracked as consecutive-day streaks"""
    DAILY_CHECK_IN = "DAILY_CHECK_IN"
    UNDER_BUDGET = "UNDER_BUDGET"
    GOAL_PROGRESS = "GOAL_PROGRESS"
    TRANSACTION_CATEGORIZATION = "TRANSACTION_CATEGORIZATION"
    SAVINGS_CONTRIBUTION = "SAVINGS_CONTRIBUTION"
    WEEKLY_BUDGET_ADHERENCE = "WEEKLY_BUDGET_ADHERENCE"
    DAILY_SAVINGS = "DAILY_SAVINGS"
    WEEKLY_GOAL_PROGRESS = "WEEKLY_GOAL_PROGRESS"
    MICRO_WIN_COMPLETION = "MICRO_WIN_COMPLETION"
    FINANCIAL_HEALTH_CHECK = "FINANCIAL_HEALTH_CHECK"


class StreakRiskLevel(str, Enum):
    SAFE = "SAFE"                  # Streak is healthy, no risk
    LOW_RISK = "LOW_RISK"          # Gentle reminder might help
    MEDIUM_RISK = "MEDIUM_RISK"    # More prominent reminder needed
    HIGH_RISK = "HIGH_RISK"        # Urgent reminder
    BROKEN = "BROKEN"


class ReminderType(str, Enum):
    GENTLE_NUDGE = "GENTLE_NUDGE"
    MOTIVATION_BOOST = "MOTIVATION_BOOST"
    STREAK_RISK_ALERT = "STREAK_RISK_ALERT"
    RECOVERY_SUPPORT = "RECOVERY_SUPPORT"


class RecoveryStatus(str, Enum):
    INITIATED = "INITIATED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    ABANDONED = "ABANDONED"


class Streak(BaseModel):
    """One streak per (user, streak type)"""
    model_config = ConfigDict(frozen=True)

    id: str
    type: StreakType
    current_count: int = Field(ge=0)
    best_count: int = Field(ge=0)
    last_activity_date: date
    is_active: bool = True
    risk_level: StreakRiskLevel = StreakRiskLevel.SAFE
    recovery_attempts: int = Field(default=0, ge=0)
    last_reminder_sent: Optional[datetime] = None

    @model_validator(mode="after")
    def validate_best_count(self) -> "Streak":
        """Best count can never trail the current count"""
        if self.best_count < self.current_count:
            raise ValueError(
                f"best_count ({self.best_count}) must be >= current_count ({self.current_count})"
            )
        return self


class StreakReminder(BaseModel):
    """Reminder request consumed by the notification layer"""
    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    streak_id: str
    streak_type: StreakType
    reminder_type: ReminderType
    message: str
    scheduled_for: datetime
    sent_at: Optional[datetime] = None
    is_read: bool = False


class RecoveryAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    action_type: UserAction
    completed_at: datetime
    points_awarded: int
    description: str


class StreakRecovery(BaseModel):
    """Bounded process for restoring a broken streak"""
    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    original_streak_id: str
    streak_type: StreakType
    broken_at: datetime
    recovery_started: datetime
    recovery_completed: Optional[datetime] = None
    abandoned_at: Optional[datetime] = None
    original_count: int = Field(ge=0)
    recovery_actions: list[RecoveryAction] = Field(default_factory=list)
    status: RecoveryStatus = RecoveryStatus.INITIATED
    is_successful: bool = False

    @property
    def is_open(self) -> bool:
        return self.status in (RecoveryStatus.INITIATED, RecoveryStatus.IN_PROGRESS)


class StreakUpdateResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    streak: Streak
    was_extended: bool
    was_broken: bool
    new_risk_level: StreakRiskLevel
    previous_best_count: int = 0
    celebration_event: Optional[CelebrationEvent] = None
    reminder_scheduled: Optional[StreakReminder] = None
    recovery_started: Optional[StreakRecovery] = None
    # Set by GamificationEngine.update_streak; awards report these on PointsResult
    new_achievements: list[Achievement] = Field(default_factory=list)
    level_up: Optional[LevelUpResult] = None


class StreakRiskAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    streak: Streak
    risk_level: StreakRiskLevel
    days_since_last_activity: int
    recommended_actions: list[str]
    reminder_message: str
    urgency_score: int = Field(ge=1, le=10)


class RecoveryActionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    recovery: StreakRecovery
    action_processed: RecoveryAction
    is_recovery_complete: bool
    new_streak_started: Optional[Streak] = None
    celebration_event: Optional[CelebrationEvent] = None


class StreakMilestone(BaseModel):
    model_config = ConfigDict(frozen=True)

    streak_type: StreakType
    count: int
    achieved_at: datetime
    is_personal_record: bool


class StreakStatistics(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_active_streaks: int
    longest_current_streak: Optional[Streak] = None
    longest_ever_streak: Optional[Streak] = None
    total_streak_days: int
    average_streak_length: float
    streaks_by_type: dict[StreakType, list[Streak]]
    risk_distribution: dict[StreakRiskLevel, int]
    recovery_success_rate: float
    weekly_streak_trend: list[int]  # Last 7 days, index 0 = today
    monthly_milestones: list[StreakMilestone]
