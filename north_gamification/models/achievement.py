"""Achievement models for gamification"""
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime


class AchievementType(str, Enum):
    """Achievements a user can unlock (one record per user and type)"""
    FIRST_GOAL_CREATED = "FIRST_GOAL_CREATED"
    FIRST_ACCOUNT_LINKED = "FIRST_ACCOUNT_LINKED"
    SAVINGS_MILESTONE_100 = "SAVINGS_MILESTONE_100"
    SAVINGS_MILESTONE_500 = "SAVINGS_MILESTONE_500"
    SAVINGS_MILESTONE_1000 = "SAVINGS_MILESTONE_1000"
    BUDGET_ADHERENCE_WEEK = "BUDGET_ADHERENCE_WEEK"
    BUDGET_ADHERENCE_MONTH = "BUDGET_ADHERENCE_MONTH"
    TRANSACTION_CATEGORIZER = "TRANSACTION_CATEGORIZER"
    GOAL_ACHIEVER = "GOAL_ACHIEVER"
    STREAK_MASTER_7 = "STREAK_MASTER_7"
    STREAK_MASTER_30 = "STREAK_MASTER_30"
    FINANCIAL_HEALTH_CHAMPION = "FINANCIAL_HEALTH_CHAMPION"
    MICRO_WIN_COLLECTOR = "MICRO_WIN_COLLECTOR"
    ENGAGEMENT_SUPERSTAR = "ENGAGEMENT_SUPERSTAR"


class AchievementCategory(str, Enum):
    """Achievement categories"""
    SAVINGS = "SAVINGS"
    BUDGETING = "BUDGETING"
    GOAL_ACHIEVEMENT = "GOAL_ACHIEVEMENT"
    ENGAGEMENT = "ENGAGEMENT"
    FINANCIAL_HEALTH = "FINANCIAL_HEALTH"


class AchievementDefinition(BaseModel):
    """Static achievement metadata"""
    model_config = ConfigDict(frozen=True)

    title: str
    description: str
    badge_icon: str
    category: AchievementCategory
    points_awarded: int = Field(ge=0)


class Achievement(BaseModel):
    """User's unlocked achievement"""
    model_config = ConfigDict(frozen=True)

    id: str
    achievement_type: AchievementType
    title: str
    description: str
    badge_icon: str
    category: AchievementCategory
    points_awarded: int = Field(ge=0)
    unlocked_at: datetime
