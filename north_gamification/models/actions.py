"""User actions that earn points"""
from enum import Enum


class UserAction(str, Enum):
    """Actions a user can take in the app"""
    CHECK_BALANCE = "CHECK_BALANCE"
    CATEGORIZE_TRANSACTION = "CATEGORIZE_TRANSACTION"
    UPDATE_GOAL = "UPDATE_GOAL"
    LINK_ACCOUNT = "LINK_ACCOUNT"
    COMPLETE_MICRO_TASK = "COMPLETE_MICRO_TASK"
    REVIEW_INSIGHTS = "REVIEW_INSIGHTS"
    SET_BUDGET = "SET_BUDGET"
    MAKE_SAVINGS_CONTRIBUTION = "MAKE_SAVINGS_CONTRIBUTION"
