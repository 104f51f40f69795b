"""
Standardized exception hierarchy for the progression engine
Provides rich context, consistent logging, and user-friendly error messages
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any
from uuid import uuid4
import logging

logger = logging.getLogger(__name__)


class ProgressionError(Exception):
    """
    Base exception for all progression engine errors

    Provides:
    - Automatic timestamping
    - Request ID for tracing
    - User-friendly messages
    - Structured context
    - Automatic logging

    Every engine operation works on a copy of the caller's state, so when
    one of these is raised the state the caller passed in is unchanged.

    Example:
        raise ProgressionError(
            message="Failed to apply EXP",
            operation="apply_exp_delta",
            context={"level": 3}
        )
    """

    def __init__(
        self,
        message: str,
        request_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.request_id = request_id or str(uuid4())
        self.operation = operation
        self.context = context or {}
        self.cause = cause
        self.user_message = user_message or "An error occurred. Please try again."
        self.timestamp = datetime.now(timezone.utc)

        # Auto-log on creation
        self._log_error()

    def _log_error(self) -> None:
        """Log error with full context"""
        log_data = {
            "error_type": self.__class__.__name__,
            "error_message": self.message,  # Avoid conflict with logging's 'message' field
            "request_id": self.request_id,
            "operation": self.operation,
            "error_context": self.context,
            "timestamp": self.timestamp.isoformat()
        }

        if self.cause:
            log_data["cause"] = str(self.cause)
            logger.error(f"{self.__class__.__name__}: {self.message}", extra=log_data, exc_info=self.cause)
        else:
            logger.error(f"{self.__class__.__name__}: {self.message}", extra=log_data)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for collaborators (UI, storage)"""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "user_message": self.user_message,
            "request_id": self.request_id,
            "timestamp": self.timestamp.isoformat()
        }


# ==========================================
# Level / EXP Errors
# ==========================================

class InvalidLevel(ProgressionError):
    """Raised when a level below 1 is used"""

    def __init__(self, message: str, level: Optional[int] = None, **kwargs):
        self.level = level
        super().__init__(
            message=message,
            user_message="Your level data looks corrupted.",
            context={"level": level},
            **kwargs
        )


class InvalidDelta(ProgressionError):
    """Raised when an EXP delta is NaN or infinite"""

    def __init__(self, message: str, delta: Optional[Any] = None, **kwargs):
        self.delta = delta
        super().__init__(
            message=message,
            user_message="That experience change could not be applied.",
            context={"delta": str(delta)},
            **kwargs
        )


# ==========================================
# Stat Errors
# ==========================================

class InvalidDuration(ProgressionError):
    """
    Raised when an activity duration cannot produce gains

    Example:
        raise InvalidDuration(
            message="Duration must be greater than 0 minutes",
            duration_minutes=0
        )
    """

    def __init__(self, message: str, duration_minutes: Optional[int] = None, **kwargs):
        self.duration_minutes = duration_minutes
        super().__init__(
            message=message,
            user_message=message,
            context={"duration_minutes": duration_minutes},
            **kwargs
        )


class InvalidStatValue(ProgressionError):
    """Raised when a stat change would produce NaN or infinity"""

    def __init__(
        self,
        message: str,
        stat: Optional[str] = None,
        value: Optional[float] = None,
        **kwargs
    ):
        self.stat = stat
        self.value = value
        super().__init__(
            message=message,
            user_message=f"Invalid {stat} value." if stat else "Invalid stat value.",
            context={"stat": stat, "value": value},
            **kwargs
        )


# ==========================================
# Reversal Errors
# ==========================================

class IrreversibleActivity(ProgressionError):
    """Raised when an activity's effect cannot be safely undone"""

    def __init__(
        self,
        message: str,
        activity_type: Optional[str] = None,
        reason: Optional[str] = None,
        **kwargs
    ):
        self.activity_type = activity_type
        self.reason = reason
        super().__init__(
            message=message,
            user_message="Unable to reverse the changes from this activity.",
            context={"activity_type": activity_type, "reason": reason},
            **kwargs
        )
