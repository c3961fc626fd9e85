"""
Public package surface for cv-template-bot.

This module re-exports the primary classes and helpers so consumers can simply:

    from cv_template_bot import RunnerConfig, SessionManager, WorkflowRunner
"""

# Configuration
from bot_config import (
    RunnerConfig,
    SiteConfig,
    ProfileConfig,
    TimingConfig,
)

# Browser provider
from browser_provider import (
    BrowserProvider,
    PersistentContextProvider,
    MockBrowserProvider,
    BrowserConfig,
)

# Components
from selector_table import SelectorTable
from session_manager import SessionManager
from workflow_runner import WorkflowRunner
from capability_probe import CapabilityState
from prompt import DEFAULT_PROMPT, load_prompt

# Results
from task_result import TaskResult

# Errors
from error_handling import (
    BotError,
    InputValidationError,
    ElementNotFoundError,
    ElementNotInteractableError,
    SelectorNotConfiguredError,
    DownloadError,
    AuthenticationTimeoutError,
    ConfigurationError,
    ErrorContext,
    ErrorSeverity,
    RecoveryStrategy,
)

from utils.event_logger import EventLogger, set_event_logger

__version__ = "0.1.0"

__all__ = [
    # Configuration
    "RunnerConfig",
    "SiteConfig",
    "ProfileConfig",
    "TimingConfig",
    # Browser provider
    "BrowserProvider",
    "PersistentContextProvider",
    "MockBrowserProvider",
    "BrowserConfig",
    # Components
    "SelectorTable",
    "SessionManager",
    "WorkflowRunner",
    "CapabilityState",
    "DEFAULT_PROMPT",
    "load_prompt",
    # Results
    "TaskResult",
    # Errors
    "BotError",
    "InputValidationError",
    "ElementNotFoundError",
    "ElementNotInteractableError",
    "SelectorNotConfiguredError",
    "DownloadError",
    "AuthenticationTimeoutError",
    "ConfigurationError",
    "ErrorContext",
    "ErrorSeverity",
    "RecoveryStrategy",
    # Utilities
    "EventLogger",
    "set_event_logger",
]
