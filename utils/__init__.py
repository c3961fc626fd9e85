"""
Utility modules for cv-template-bot.
"""
from .event_logger import BotEvent, EventLogger, EventType, get_event_logger, set_event_logger

__all__ = ["BotEvent", "EventLogger", "EventType", "get_event_logger", "set_event_logger"]
