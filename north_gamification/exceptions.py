"""
Standardized exception hierarchy for the gamification engine
Provides rich context, consistent logging, and user-friendly error messages
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any
from uuid import uuid4
import logging

logger = logging.getLogger(__name__)


class GamificationError(Exception):
    """
    Base exception for all gamification engine errors

    Provides:
    - Automatic timestamping
    - Request ID for tracing
    - User-friendly messages
    - Structured context
    - Automatic logging

    Example:
        raise GamificationError(
            message="Failed to save streak",
            user_id="user-1",
            operation="update_streak",
            context={"streak_type": "DAILY_CHECK_IN"}
        )
    """

    def __init__(
        self,
        message: str,
        user_id: Optional[str] = None,
        request_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.user_id = user_id
        self.request_id = request_id or str(uuid4())
        self.operation = operation
        self.context = context or {}
        self.cause = cause
        self.user_message = user_message or "Something went wrong. Please try again."
        self.timestamp = datetime.now(timezone.utc)

        # Auto-log on creation
        self._log_error()

    def _log_error(self) -> None:
        """Log error with full context"""
        log_data = {
            "error_type": self.__class__.__name__,
            "error_message": self.message,  # Avoid conflict with logging's 'message' field
            "request_id": self.request_id,
            "user_id": self.user_id,
            "operation": self.operation,
            "error_context": self.context,
            "timestamp": self.timestamp.isoformat()
        }

        if self.cause:
            log_data["cause"] = str(self.cause)
            logger.error(f"{self.__class__.__name__}: {self.message}", extra=log_data, exc_info=self.cause)
        else:
            logger.warning(f"{self.__class__.__name__}: {self.message}", extra=log_data)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for API responses"""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "user_message": self.user_message,
            "request_id": self.request_id,
            "timestamp": self.timestamp.isoformat()
        }


# ==========================================
# Validation Errors (Caller Input)
# ==========================================

class ValidationError(GamificationError):
    """
    Raised when caller input fails validation

    Example:
        raise ValidationError(
            message="Limit must be positive",
            field="limit",
            value=-5,
        )
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs
    ):
        self.field = field
        self.value = value
        super().__init__(
            message=message,
            user_message=f"Invalid {field}: {message}" if field else message,
            context={"field": field, "value": value},
            **kwargs
        )


class UnknownActionError(ValidationError):
    """Action is not present in the points table"""

    def __init__(self, action: Any, **kwargs):
        self.action = action
        super().__init__(
            message=f"Unknown action: {action!r}",
            field="action",
            value=str(action),
            **kwargs
        )


# ==========================================
# Lookup Errors
# ==========================================

class EntityNotFoundError(GamificationError):
    """Requested streak, recovery, reminder or achievement does not exist"""

    def __init__(
        self,
        message: str,
        record_type: Optional[str] = None,
        record_id: Optional[str] = None,
        **kwargs
    ):
        self.record_type = record_type
        self.record_id = record_id
        super().__init__(
            message=message,
            user_message=f"{record_type or 'Record'} not found.",
            context={"record_type": record_type, "record_id": record_id},
            **kwargs
        )


# ==========================================
# Recovery Workflow Errors
# ==========================================

class RecoveryError(GamificationError):
    """Base class for recovery workflow state errors"""

    def __init__(self, message: str, recovery_id: Optional[str] = None, **kwargs):
        self.recovery_id = recovery_id
        super().__init__(message=message, context={"recovery_id": recovery_id}, **kwargs)


class RecoveryAlreadyCompleteError(RecoveryError):
    """Action submitted against a recovery that already succeeded"""

    def __init__(self, recovery_id: str, **kwargs):
        super().__init__(
            message=f"Recovery {recovery_id} is already complete",
            recovery_id=recovery_id,
            user_message="This streak has already been recovered.",
            **kwargs
        )


class RecoveryAbandonedError(RecoveryError):
    """Action submitted against a recovery that was abandoned"""

    def __init__(self, recovery_id: str, message: Optional[str] = None, **kwargs):
        super().__init__(
            message=message or f"Recovery {recovery_id} was abandoned",
            recovery_id=recovery_id,
            user_message="This recovery is no longer active. Start a new streak any time!",
            **kwargs
        )


class RecoveryExpiredError(RecoveryAbandonedError):
    """Recovery window elapsed before the required actions were completed"""

    def __init__(self, recovery_id: str, window_days: int, **kwargs):
        self.window_days = window_days
        super().__init__(
            recovery_id=recovery_id,
            message=f"Recovery {recovery_id} expired after {window_days} days",
            **kwargs
        )


# ==========================================
# Collaborator Errors
# ==========================================

class StoreFailure(GamificationError):
    """Profile/streak/achievement store raised while reading or writing"""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message=message,
            user_message="We couldn't save your progress. Please try again.",
            **kwargs
        )


class ConfigurationError(GamificationError):
    """Engine configuration is invalid"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            user_message="The system is not properly configured. Please contact support.",
            context={"config_key": config_key},
            **kwargs
        )


# ==========================================
# Helper Functions
# ==========================================

def wrap_store_exception(
    error: Exception,
    operation: str,
    user_id: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None
) -> GamificationError:
    """
    Wrap collaborator exceptions into our exception hierarchy

    Engine errors pass through unchanged so callers can still branch on
    UnknownActionError, EntityNotFoundError, etc.

    Example:
        try:
            await store.save_profile(user_id, profile)
        except Exception as e:
            raise wrap_store_exception(e, operation="award_points", user_id=user_id)
    """
    if isinstance(error, GamificationError):
        return error

    return StoreFailure(
        message=f"{operation} failed: {error}",
        user_id=user_id,
        operation=operation,
        context=context,
        cause=error
    )
