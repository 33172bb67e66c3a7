"""Demo entry point: simulates a week of activity against the in-memory store"""
import logging
import asyncio
from datetime import datetime

from north_gamification.config import validate_config, LOG_LEVEL
from north_gamification.gamification import (
    CollectingCelebrationSink,
    CollectingReminderSink,
    GamificationEngine,
    InMemoryGamificationStore,
)
from north_gamification.models import StreakType, UserAction
from north_gamification.utils.datetime_helpers import ManualClock

# Configure logging
logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=getattr(logging, LOG_LEVEL.upper())
)

logger = logging.getLogger(__name__)

DEMO_USER = "demo-user"


async def run_simulation() -> None:
    clock = ManualClock(datetime(2024, 3, 1, 9, 0))
    celebrations = CollectingCelebrationSink()
    reminders = CollectingReminderSink()
    engine = GamificationEngine(
        InMemoryGamificationStore(),
        reminder_sink=reminders,
        celebration_sink=celebrations,
        clock=clock,
    )

    await engine.award_points(DEMO_USER, UserAction.LINK_ACCOUNT)

    # A week of daily check-ins
    for _ in range(7):
        result = await engine.award_points(DEMO_USER, UserAction.CHECK_BALANCE)
        points = result.get_or_raise()
        logger.info(
            f"{clock.today()}: +{points.points_awarded} points, "
            f"total {points.total_points}, level {points.new_level}"
        )
        clock.advance(days=1)

    # Skip three days, then come back: the streak breaks and a recovery opens
    clock.advance(days=3)
    risks = (await engine.analyze_streak_risks(DEMO_USER)).get_or_raise()
    for analysis in risks:
        logger.info(
            f"{analysis.streak.type.value}: {analysis.risk_level.value} "
            f"(urgency {analysis.urgency_score}) - {analysis.reminder_message}"
        )

    update = (await engine.update_streak(DEMO_USER, StreakType.DAILY_CHECK_IN)).get_or_raise()
    if update.recovery_started is not None:
        for action in (UserAction.CHECK_BALANCE, UserAction.CATEGORIZE_TRANSACTION, UserAction.REVIEW_INSIGHTS):
            step = await engine.process_recovery_action(DEMO_USER, update.recovery_started.id, action)
            logger.info(f"Recovery complete: {step.get_or_raise().is_recovery_complete}")

    for suggestion in (await engine.generate_micro_wins(DEMO_USER)).get_or_raise():
        logger.info(f"Suggestion: {suggestion.title} ({suggestion.difficulty.value}, +{suggestion.points_awarded})")

    profile = (await engine.get_profile(DEMO_USER)).get_or_raise()
    achievements = (await engine.get_achievements(DEMO_USER)).get_or_raise()
    logger.info(
        f"Final: level {profile.level}, {profile.total_points} points, "
        f"{len(achievements)} achievements, {len(celebrations.events)} celebrations, "
        f"{len(reminders.reminders)} reminders"
    )


async def main() -> None:
    """Main application entry point"""
    try:
        # Validate configuration
        logger.info("Validating configuration...")
        validate_config()

        logger.info("Running gamification simulation...")
        await run_simulation()

    except KeyboardInterrupt:
        logger.info("Shutting down...")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
    finally:
        logger.info("Simulation complete")


def cli() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    cli()
