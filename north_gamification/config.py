"""Configuration management"""
import os
from dotenv import load_dotenv

from north_gamification.exceptions import ConfigurationError

load_dotenv()

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# Monitoring
ENABLE_PROMETHEUS: bool = os.getenv("ENABLE_PROMETHEUS", "true").lower() == "true"

# Streak recovery
# Days a recovery stays open after it starts. 0 keeps recoveries open until
# they are completed or abandoned explicitly.
RECOVERY_WINDOW_DAYS: int = int(os.getenv("RECOVERY_WINDOW_DAYS", "3"))
AUTO_START_RECOVERY: bool = os.getenv("AUTO_START_RECOVERY", "true").lower() == "true"

# Query defaults
DEFAULT_MICRO_WIN_LIMIT: int = int(os.getenv("DEFAULT_MICRO_WIN_LIMIT", "5"))
POINTS_HISTORY_DEFAULT_LIMIT: int = int(os.getenv("POINTS_HISTORY_DEFAULT_LIMIT", "50"))


# Validation
def validate_config() -> None:
    """Validate configuration values"""
    if LOG_LEVEL.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ConfigurationError(f"Unsupported LOG_LEVEL: {LOG_LEVEL}", config_key="LOG_LEVEL")
    if RECOVERY_WINDOW_DAYS < 0:
        raise ConfigurationError("RECOVERY_WINDOW_DAYS must be >= 0", config_key="RECOVERY_WINDOW_DAYS")
    if DEFAULT_MICRO_WIN_LIMIT < 1:
        raise ConfigurationError("DEFAULT_MICRO_WIN_LIMIT must be >= 1", config_key="DEFAULT_MICRO_WIN_LIMIT")
    if POINTS_HISTORY_DEFAULT_LIMIT < 1:
        raise ConfigurationError(
            "POINTS_HISTORY_DEFAULT_LIMIT must be >= 1",
            config_key="POINTS_HISTORY_DEFAULT_LIMIT"
        )
