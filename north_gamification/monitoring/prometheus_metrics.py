"""Prometheus metrics definitions and helpers"""
import logging
import time
from contextlib import contextmanager

from prometheus_client import Counter, Histogram

from north_gamification.config import ENABLE_PROMETHEUS

logger = logging.getLogger(__name__)


class GamificationMetrics:
    """Container for all gamification engine metrics"""

    def __init__(self, enabled: bool = ENABLE_PROMETHEUS):
        if not enabled:
            logger.info("Prometheus metrics disabled")
            self._enabled = False
            return

        # Engine operation metrics
        self.operations_total = Counter(
            'gamification_operations_total',
            'Total gamification engine operations',
            ['operation', 'status']
        )

        self.operation_duration_seconds = Histogram(
            'gamification_operation_duration_seconds',
            'Gamification engine operation latency',
            ['operation'],
            buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0]
        )

        self.errors_total = Counter(
            'gamification_errors_total',
            'Total gamification engine errors',
            ['operation', 'error_type']
        )

        # Points metrics
        self.points_awarded_total = Counter(
            'gamification_points_awarded_total',
            'Total points credited',
            ['action']
        )

        self.level_ups_total = Counter(
            'gamification_level_ups_total',
            'Total level-ups'
        )

        # Streak metrics
        self.streak_updates_total = Counter(
            'gamification_streak_updates_total',
            'Total streak updates',
            ['streak_type', 'outcome']
        )

        self.recoveries_total = Counter(
            'gamification_recoveries_total',
            'Total streak recovery transitions',
            ['outcome']
        )

        self.reminders_scheduled_total = Counter(
            'gamification_reminders_scheduled_total',
            'Total streak reminders scheduled',
            ['reminder_type']
        )

        # Achievement metrics
        self.achievements_unlocked_total = Counter(
            'gamification_achievements_unlocked_total',
            'Total achievements unlocked',
            ['achievement_type']
        )

        self._enabled = True
        logger.info("Prometheus metrics initialized")

    @property
    def enabled(self) -> bool:
        """Check if metrics are enabled"""
        return self._enabled


# Global metrics instance
metrics = GamificationMetrics()


@contextmanager
def track_operation(operation: str):
    """Track engine operation count, latency and errors"""
    if not metrics.enabled:
        yield
        return

    start_time = time.time()
    status = "error"  # Default to error

    try:
        yield
        status = "success"
    except Exception as e:
        metrics.errors_total.labels(
            operation=operation,
            error_type=type(e).__name__
        ).inc()
        raise
    finally:
        duration = time.time() - start_time
        metrics.operation_duration_seconds.labels(
            operation=operation
        ).observe(duration)

        metrics.operations_total.labels(
            operation=operation,
            status=status
        ).inc()


def track_points_awarded(action: str, points: int, leveled_up: bool = False):
    """Track points credited for an action (deductions are not counted)"""
    if not metrics.enabled:
        return

    if points > 0:
        metrics.points_awarded_total.labels(action=action).inc(points)
    if leveled_up:
        metrics.level_ups_total.inc()


def track_streak_update(streak_type: str, outcome: str):
    """Track a streak transition (created, extended, broken, unchanged)"""
    if not metrics.enabled:
        return

    metrics.streak_updates_total.labels(
        streak_type=streak_type,
        outcome=outcome
    ).inc()


def track_recovery(outcome: str):
    """Track a recovery transition (started, completed, abandoned, expired)"""
    if not metrics.enabled:
        return

    metrics.recoveries_total.labels(outcome=outcome).inc()


def track_reminder_scheduled(reminder_type: str):
    if not metrics.enabled:
        return

    metrics.reminders_scheduled_total.labels(reminder_type=reminder_type).inc()


def track_achievement_unlocked(achievement_type: str):
    if not metrics.enabled:
        return

    metrics.achievements_unlocked_total.labels(achievement_type=achievement_type).inc()
