"""Monitoring infrastructure for the gamification engine"""
from north_gamification.monitoring.prometheus_metrics import (
    metrics,
    track_operation,
    track_points_awarded,
    track_streak_update,
    track_recovery,
    track_reminder_scheduled,
    track_achievement_unlocked,
)

__all__ = [
    "metrics",
    "track_operation",
    "track_points_awarded",
    "track_streak_update",
    "track_recovery",
    "track_reminder_scheduled",
    "track_achievement_unlocked",
]
