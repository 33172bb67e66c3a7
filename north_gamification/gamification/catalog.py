"""
Static gamification tables

Every enum-keyed table here must cover every member of its enum; the test
suite checks this. Tables are read-only mappings built once at import time.

Action points:
- Balance check: 5
- Categorize transaction: 10
- Goal update: 15
- Link account: 50
- Micro task: 20
- Review insights: 10
- Set budget: 25
- Savings contribution: 30
"""

from types import MappingProxyType
from typing import Any, Mapping, Optional

from north_gamification.exceptions import UnknownActionError
from north_gamification.models import (
    AchievementCategory,
    AchievementDefinition,
    AchievementType,
    MicroWinDifficulty,
    StreakType,
    UserAction,
)


ACTION_POINTS: Mapping[UserAction, int] = MappingProxyType({
    UserAction.CHECK_BALANCE: 5,
    UserAction.CATEGORIZE_TRANSACTION: 10,
    UserAction.UPDATE_GOAL: 15,
    UserAction.LINK_ACCOUNT: 50,
    UserAction.COMPLETE_MICRO_TASK: 20,
    UserAction.REVIEW_INSIGHTS: 10,
    UserAction.SET_BUDGET: 25,
    UserAction.MAKE_SAVINGS_CONTRIBUTION: 30,
})

ACTION_DESCRIPTIONS: Mapping[UserAction, str] = MappingProxyType({
    UserAction.CHECK_BALANCE: "balance check",
    UserAction.CATEGORIZE_TRANSACTION: "transaction categorization",
    UserAction.UPDATE_GOAL: "goal update",
    UserAction.LINK_ACCOUNT: "account linking",
    UserAction.COMPLETE_MICRO_TASK: "micro-task completion",
    UserAction.REVIEW_INSIGHTS: "insights review",
    UserAction.SET_BUDGET: "budget setting",
    UserAction.MAKE_SAVINGS_CONTRIBUTION: "savings contribution",
})

# Streaks advanced by each action (empty tuple = no streak)
ACTION_STREAK_TYPES: Mapping[UserAction, tuple[StreakType, ...]] = MappingProxyType({
    UserAction.CHECK_BALANCE: (StreakType.DAILY_CHECK_IN,),
    UserAction.CATEGORIZE_TRANSACTION: (StreakType.TRANSACTION_CATEGORIZATION,),
    UserAction.UPDATE_GOAL: (StreakType.GOAL_PROGRESS,),
    UserAction.LINK_ACCOUNT: (),
    UserAction.COMPLETE_MICRO_TASK: (StreakType.MICRO_WIN_COMPLETION,),
    UserAction.REVIEW_INSIGHTS: (StreakType.FINANCIAL_HEALTH_CHECK,),
    UserAction.SET_BUDGET: (StreakType.UNDER_BUDGET,),
    UserAction.MAKE_SAVINGS_CONTRIBUTION: (
        StreakType.SAVINGS_CONTRIBUTION,
        StreakType.DAILY_SAVINGS,
    ),
})

# Action that keeps each streak alive
STREAK_TYPE_ACTIONS: Mapping[StreakType, UserAction] = MappingProxyType({
    StreakType.DAILY_CHECK_IN: UserAction.CHECK_BALANCE,
    StreakType.UNDER_BUDGET: UserAction.SET_BUDGET,
    StreakType.WEEKLY_BUDGET_ADHERENCE: UserAction.SET_BUDGET,
    StreakType.GOAL_PROGRESS: UserAction.UPDATE_GOAL,
    StreakType.WEEKLY_GOAL_PROGRESS: UserAction.UPDATE_GOAL,
    StreakType.TRANSACTION_CATEGORIZATION: UserAction.CATEGORIZE_TRANSACTION,
    StreakType.SAVINGS_CONTRIBUTION: UserAction.MAKE_SAVINGS_CONTRIBUTION,
    StreakType.DAILY_SAVINGS: UserAction.MAKE_SAVINGS_CONTRIBUTION,
    StreakType.MICRO_WIN_COMPLETION: UserAction.COMPLETE_MICRO_TASK,
    StreakType.FINANCIAL_HEALTH_CHECK: UserAction.REVIEW_INSIGHTS,
})

STREAK_DISPLAY_NAMES: Mapping[StreakType, str] = MappingProxyType({
    StreakType.DAILY_CHECK_IN: "daily check-in",
    StreakType.UNDER_BUDGET: "budget adherence",
    StreakType.GOAL_PROGRESS: "goal progress",
    StreakType.TRANSACTION_CATEGORIZATION: "transaction organizing",
    StreakType.SAVINGS_CONTRIBUTION: "savings",
    StreakType.WEEKLY_BUDGET_ADHERENCE: "weekly budget",
    StreakType.DAILY_SAVINGS: "daily savings",
    StreakType.WEEKLY_GOAL_PROGRESS: "weekly goal progress",
    StreakType.MICRO_WIN_COMPLETION: "micro-win completion",
    StreakType.FINANCIAL_HEALTH_CHECK: "financial health check",
})

STREAK_RECOMMENDED_ACTIONS: Mapping[StreakType, tuple[str, ...]] = MappingProxyType({
    StreakType.DAILY_CHECK_IN: (
        "Check your account balance",
        "Review today's transactions",
        "Open the app for a quick look",
    ),
    StreakType.UNDER_BUDGET: (
        "Review your spending for today",
        "Check your budget progress",
        "Consider a small saving instead of a purchase",
    ),
    StreakType.GOAL_PROGRESS: (
        "Make a small contribution to your goal",
        "Review your goal timeline",
        "Update your goal progress",
    ),
    StreakType.TRANSACTION_CATEGORIZATION: (
        "Categorize recent transactions",
        "Review uncategorized expenses",
        "Clean up your transaction history",
    ),
    StreakType.SAVINGS_CONTRIBUTION: (
        "Make a small savings contribution",
        "Transfer money to savings",
        "Set up an automatic transfer",
    ),
    StreakType.WEEKLY_BUDGET_ADHERENCE: (
        "Compare this week's spending to your budget",
        "Adjust a category that is running hot",
    ),
    StreakType.DAILY_SAVINGS: (
        "Move a few dollars into savings",
        "Round up today's purchases into savings",
    ),
    StreakType.WEEKLY_GOAL_PROGRESS: (
        "Log this week's goal contribution",
        "Review how close you are to your goal",
    ),
    StreakType.MICRO_WIN_COMPLETION: (
        "Complete one quick micro-task",
        "Pick the easiest suggestion on your list",
    ),
    StreakType.FINANCIAL_HEALTH_CHECK: (
        "Review your latest insights",
        "Check your financial health summary",
    ),
})

# Features unlocked on reaching a level (levels not listed unlock nothing)
LEVEL_FEATURES: Mapping[int, tuple[str, ...]] = MappingProxyType({
    2: ("Advanced Goal Tracking",),
    3: ("Spending Insights",),
    5: ("Custom Categories",),
    10: ("Premium Analytics",),
})

LEVEL_UP_MESSAGES: Mapping[int, str] = MappingProxyType({
    2: "🎉 Welcome to Level 2! You're getting the hang of this!",
    3: "🚀 Level 3 achieved! Your financial journey is taking off!",
    5: "⭐ Level 5! You're becoming a financial superstar!",
    10: "👑 Level 10! You're a true financial champion!",
})

MICRO_WIN_POINTS: Mapping[MicroWinDifficulty, int] = MappingProxyType({
    MicroWinDifficulty.EASY: 5,
    MicroWinDifficulty.MEDIUM: 10,
    MicroWinDifficulty.HARD: 20,
})

ACHIEVEMENT_DEFINITIONS: Mapping[AchievementType, AchievementDefinition] = MappingProxyType({
    AchievementType.FIRST_GOAL_CREATED: AchievementDefinition(
        title="Goal Setter",
        description="Created your first financial goal",
        badge_icon="🎯",
        category=AchievementCategory.GOAL_ACHIEVEMENT,
        points_awarded=50,
    ),
    AchievementType.FIRST_ACCOUNT_LINKED: AchievementDefinition(
        title="Connected",
        description="Linked your first bank account",
        badge_icon="🔗",
        category=AchievementCategory.ENGAGEMENT,
        points_awarded=100,
    ),
    AchievementType.SAVINGS_MILESTONE_100: AchievementDefinition(
        title="Saver",
        description="Saved your first $100",
        badge_icon="💰",
        category=AchievementCategory.SAVINGS,
        points_awarded=75,
    ),
    AchievementType.SAVINGS_MILESTONE_500: AchievementDefinition(
        title="Super Saver",
        description="Saved $500 towards your goals",
        badge_icon="💎",
        category=AchievementCategory.SAVINGS,
        points_awarded=150,
    ),
    AchievementType.SAVINGS_MILESTONE_1000: AchievementDefinition(
        title="Savings Champion",
        description="Reached $1,000 in savings",
        badge_icon="👑",
        category=AchievementCategory.SAVINGS,
        points_awarded=250,
    ),
    AchievementType.BUDGET_ADHERENCE_WEEK: AchievementDefinition(
        title="Budget Keeper",
        description="Stayed under budget for a full week",
        badge_icon="📊",
        category=AchievementCategory.BUDGETING,
        points_awarded=100,
    ),
    AchievementType.BUDGET_ADHERENCE_MONTH: AchievementDefinition(
        title="Budget Master",
        description="Stayed under budget for a full month",
        badge_icon="🏆",
        category=AchievementCategory.BUDGETING,
        points_awarded=300,
    ),
    AchievementType.TRANSACTION_CATEGORIZER: AchievementDefinition(
        title="Organizer",
        description="Categorized 50 transactions",
        badge_icon="📋",
        category=AchievementCategory.ENGAGEMENT,
        points_awarded=125,
    ),
    AchievementType.GOAL_ACHIEVER: AchievementDefinition(
        title="Goal Crusher",
        description="Achieved your first financial goal",
        badge_icon="🎉",
        category=AchievementCategory.GOAL_ACHIEVEMENT,
        points_awarded=500,
    ),
    AchievementType.STREAK_MASTER_7: AchievementDefinition(
        title="Streak Starter",
        description="Maintained a 7-day streak",
        badge_icon="🔥",
        category=AchievementCategory.ENGAGEMENT,
        points_awarded=100,
    ),
    AchievementType.STREAK_MASTER_30: AchievementDefinition(
        title="Streak Legend",
        description="Maintained a 30-day streak",
        badge_icon="⚡",
        category=AchievementCategory.ENGAGEMENT,
        points_awarded=400,
    ),
    AchievementType.FINANCIAL_HEALTH_CHAMPION: AchievementDefinition(
        title="Health Champion",
        description="Improved your financial health score",
        badge_icon="💪",
        category=AchievementCategory.FINANCIAL_HEALTH,
        points_awarded=200,
    ),
    AchievementType.MICRO_WIN_COLLECTOR: AchievementDefinition(
        title="Micro Win Master",
        description="Completed 25 micro-wins",
        badge_icon="⭐",
        category=AchievementCategory.ENGAGEMENT,
        points_awarded=150,
    ),
    AchievementType.ENGAGEMENT_SUPERSTAR: AchievementDefinition(
        title="Engagement Superstar",
        description="Used the app for 30 consecutive days",
        badge_icon="🌟",
        category=AchievementCategory.ENGAGEMENT,
        points_awarded=350,
    ),
})

# Unlocked the first time the action is awarded
ACTION_ACHIEVEMENTS: Mapping[UserAction, AchievementType] = MappingProxyType({
    UserAction.LINK_ACCOUNT: AchievementType.FIRST_ACCOUNT_LINKED,
    UserAction.UPDATE_GOAL: AchievementType.FIRST_GOAL_CREATED,
})

# (action, lifetime count) thresholds
ACTION_COUNT_ACHIEVEMENTS: tuple[tuple[UserAction, int, AchievementType], ...] = (
    (UserAction.CATEGORIZE_TRANSACTION, 50, AchievementType.TRANSACTION_CATEGORIZER),
)

# (streak type or None for any, current count) thresholds
STREAK_ACHIEVEMENTS: tuple[tuple[Optional[StreakType], int, AchievementType], ...] = (
    (None, 7, AchievementType.STREAK_MASTER_7),
    (None, 30, AchievementType.STREAK_MASTER_30),
    (StreakType.DAILY_CHECK_IN, 30, AchievementType.ENGAGEMENT_SUPERSTAR),
)


def get_action_points(action: UserAction) -> int:
    return ACTION_POINTS[action]


def get_streak_display_name(streak_type: StreakType) -> str:
    return STREAK_DISPLAY_NAMES[streak_type]


def get_action_description(action: UserAction) -> str:
    return ACTION_DESCRIPTIONS[action]


def resolve_action(action: Any) -> UserAction:
    """Accept a UserAction or its name; anything else is an unknown action"""
    if isinstance(action, UserAction):
        return action
    try:
        return UserAction(action)
    except ValueError:
        raise UnknownActionError(action) from None
