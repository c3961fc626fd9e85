"""
Structured error handling for cv-template-bot.

Provides custom exception types and error context. Every exception carries a
severity and the recovery strategy the caller is expected to apply; nothing in
this project retries, so the strategy is either "skip", "abort" or "fail the task".
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Dict, Any
from datetime import datetime
from enum import Enum


class ErrorSeverity(Enum):
    """Error severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class RecoveryStrategy(Enum):
    """Error recovery strategies."""
    SKIP = "skip"
    FAIL_TASK = "fail_task"
    ABORT = "abort"
    ASK_USER = "ask_user"


@dataclass
class ErrorContext:
    """
    Context information about an error.

    Captures what is needed to understand where in the workflow it happened.
    """

    error_type: str
    message: str
    timestamp: datetime = field(default_factory=datetime.now)

    # Browser state
    page_url: Optional[str] = None

    # Workflow context
    step: Optional[str] = None
    selector: Optional[str] = None

    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'error_type': self.error_type,
            'message': self.message,
            'timestamp': self.timestamp.isoformat(),
            'page_url': self.page_url,
            'step': self.step,
            'selector': self.selector,
            'metadata': self.metadata,
        }


class BotError(Exception):
    """
    Base exception for all bot errors.

    All custom exceptions should inherit from this.
    """

    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    recovery_strategy: RecoveryStrategy = RecoveryStrategy.FAIL_TASK

    def __init__(
        self,
        message: str,
        context: Optional[ErrorContext] = None,
        **kwargs
    ):
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext(
            error_type=self.__class__.__name__,
            message=message
        )

        # Allow overriding context fields
        for key, value in kwargs.items():
            if hasattr(self.context, key):
                setattr(self.context, key, value)


class InputValidationError(BotError):
    """The input document is missing or has the wrong type."""
    severity = ErrorSeverity.HIGH
    recovery_strategy = RecoveryStrategy.ABORT


class ElementNotFoundError(BotError):
    """Element could not be found on the page."""
    severity = ErrorSeverity.MEDIUM
    recovery_strategy = RecoveryStrategy.FAIL_TASK


class ElementNotInteractableError(BotError):
    """Element exists but cannot be interacted with (no bounding box)."""
    severity = ErrorSeverity.MEDIUM
    recovery_strategy = RecoveryStrategy.FAIL_TASK


class SelectorNotConfiguredError(BotError):
    """A required selector has not been discovered yet."""
    severity = ErrorSeverity.HIGH
    recovery_strategy = RecoveryStrategy.FAIL_TASK


class DownloadError(BotError):
    """The artifact download never arrived or could not be saved."""
    severity = ErrorSeverity.HIGH
    recovery_strategy = RecoveryStrategy.FAIL_TASK


class AuthenticationTimeoutError(BotError):
    """The operator did not log in before the login wait ran out."""
    severity = ErrorSeverity.CRITICAL
    recovery_strategy = RecoveryStrategy.ABORT


class ConfigurationError(BotError):
    """Invalid configuration."""
    severity = ErrorSeverity.CRITICAL
    recovery_strategy = RecoveryStrategy.ABORT
