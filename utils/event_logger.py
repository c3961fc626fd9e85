"""
Simple, robust event-driven logging system for cv-template-bot.

Design principles:
- Non-blocking: logging errors never break the workflow
- Simple: minimal API surface
- Flexible: easy to customize output via callbacks
"""
from enum import Enum
from typing import Any, Dict, List, Optional, Callable
from dataclasses import dataclass, field
from datetime import datetime
import time


class EventType(str, Enum):
    """All event types that can be logged"""
    # Session events
    SESSION_LAUNCH = "session_launch"
    SESSION_LOGIN_CHECK = "session_login_check"
    SESSION_LOGIN_WAIT = "session_login_wait"
    SESSION_LOGIN_DETECTED = "session_login_detected"
    SESSION_SHUTDOWN = "session_shutdown"

    # Workflow step events
    STEP_START = "step_start"
    STEP_SKIPPED = "step_skipped"
    STEP_FAILED = "step_failed"
    WAITING = "waiting"

    # Outcome events
    DOWNLOAD_SAVED = "download_saved"
    TASK_COMPLETE = "task_complete"

    # System events
    SYSTEM_INFO = "system_info"
    SYSTEM_WARNING = "system_warning"
    SYSTEM_ERROR = "system_error"
    SYSTEM_DEBUG = "system_debug"


@dataclass
class BotEvent:
    """Structured event data"""
    event_type: EventType
    message: str
    timestamp: float = field(default_factory=time.time)
    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, SUCCESS
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "event_type": self.event_type.value,
            "message": self.message,
            "timestamp": self.timestamp,
            "timestamp_iso": datetime.fromtimestamp(self.timestamp).isoformat(),
            "level": self.level,
            "details": self.details
        }


class EventLogger:
    """
    Simple, robust event logger.

    In debug mode: prints directly to console
    In normal mode: only calls callbacks (no prints)
    """

    def __init__(self, debug_mode: bool = True, max_history: int = 1000):
        self.debug_mode = debug_mode
        self._callbacks: List[Callable[[BotEvent], None]] = []
        self._event_history: List[BotEvent] = []
        self._max_history = max_history

    def register_callback(self, callback: Callable[[BotEvent], None]) -> None:
        """Register a callback for all events"""
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    @property
    def history(self) -> List[BotEvent]:
        return list(self._event_history)

    def _safe_emit(self, event: BotEvent) -> None:
        """Safely emit an event - a broken callback never reaches the caller"""
        self._event_history.append(event)
        if len(self._event_history) > self._max_history:
            self._event_history.pop(0)

        if self.debug_mode:
            self._print_event(event)

        for callback in self._callbacks:
            try:
                callback(event)
            except Exception as e:
                if self.debug_mode:
                    print(f"⚠️ Event callback failed: {e}")

    def _print_event(self, event: BotEvent) -> None:
        """Print event in debug mode"""
        level_emoji = {
            "DEBUG": "🔍",
            "INFO": "ℹ️",
            "WARNING": "⚠️",
            "ERROR": "❌",
            "SUCCESS": "✅"
        }
        emoji = level_emoji.get(event.level, "•")
        print(f"{emoji} {event.message}")

        if event.level == "DEBUG":
            return
        for key, value in event.details.items():
            if value is not None and isinstance(value, (str, int, float, bool)):
                print(f"   {key}: {value}")

    def emit(self, event_type: EventType, message: str, level: str = "INFO", **details) -> None:
        """Emit an event"""
        self._safe_emit(BotEvent(event_type=event_type, message=message, level=level, details=details))

    # Session events
    def session_launch(self, profile_dir: str, headless: bool, **details):
        mode = "headless" if headless else "headed"
        self.emit(EventType.SESSION_LAUNCH, f"Launching browser ({mode}) with profile {profile_dir}", "INFO",
                  profile_dir=profile_dir, headless=headless, **details)

    def login_check(self, logged_in: bool, method: str, **details):
        status = "logged in" if logged_in else "not logged in"
        self.emit(EventType.SESSION_LOGIN_CHECK, f"Session is {status} (via {method})", "DEBUG",
                  logged_in=logged_in, method=method, **details)

    def login_wait(self, timeout_s: float, **details):
        self.emit(EventType.SESSION_LOGIN_WAIT,
                  f"Please log in manually in the browser window (paste magic link or sign in). "
                  f"Waiting up to {timeout_s:.0f}s...", "WARNING", **details)

    def login_detected(self, method: str, **details):
        self.emit(EventType.SESSION_LOGIN_DETECTED, f"Login detected ({method})", "SUCCESS", method=method, **details)

    def session_shutdown(self, **details):
        self.emit(EventType.SESSION_SHUTDOWN, "Browser closed, profile saved", "INFO", **details)

    # Workflow events
    def step_start(self, step: str, **details):
        self.emit(EventType.STEP_START, f"Step: {step}", "INFO", step=step, **details)

    def step_skipped(self, step: str, reason: str, **details):
        self.emit(EventType.STEP_SKIPPED, f"Skipping {step}: {reason}", "DEBUG", step=step, reason=reason, **details)

    def step_failed(self, step: str, error: Exception = None, **details):
        msg = f"{step} failed"
        if error:
            msg += f" - {error}"
        self.emit(EventType.STEP_FAILED, msg, "WARNING", step=step, error=str(error) if error else None, **details)

    def waiting(self, what: str, elapsed_s: int, **details):
        self.emit(EventType.WAITING, f"Waiting for {what}... {elapsed_s}s", "INFO", elapsed_s=elapsed_s, **details)

    def download_saved(self, file_name: str, size: int, **details):
        self.emit(EventType.DOWNLOAD_SAVED, f"Downloaded: {file_name} ({size} bytes)", "SUCCESS",
                  file_name=file_name, size=size, **details)

    def task_complete(self, success: bool, error: str = None, **details):
        level = "SUCCESS" if success else "ERROR"
        msg = "Task completed successfully" if success else f"Task failed: {error}"
        self.emit(EventType.TASK_COMPLETE, msg, level, success=success, **details)

    # System events
    def system_info(self, message: str, **details):
        self.emit(EventType.SYSTEM_INFO, message, "INFO", **details)

    def system_warning(self, message: str, **details):
        self.emit(EventType.SYSTEM_WARNING, message, "WARNING", **details)

    def system_error(self, message: str, error: Exception = None, **details):
        msg = message
        if error:
            msg += f" - {str(error)}"
        self.emit(EventType.SYSTEM_ERROR, msg, "ERROR", error=str(error) if error else None, **details)

    def system_debug(self, message: str, **details):
        self.emit(EventType.SYSTEM_DEBUG, message, "DEBUG", **details)


# Global instance
_global_event_logger: Optional[EventLogger] = None

def get_event_logger() -> EventLogger:
    """Get the global event logger instance"""
    global _global_event_logger
    if _global_event_logger is None:
        _global_event_logger = EventLogger(debug_mode=True)
    return _global_event_logger

def set_event_logger(logger: EventLogger) -> None:
    """Set the global event logger instance"""
    global _global_event_logger
    _global_event_logger = logger
