"""
Configuration models for cv-template-bot.

This module provides structured, type-safe configuration using Pydantic models.
The configuration is built once at startup (usually from environment variables)
and passed explicitly to every component.

Example:
    >>> from bot_config import RunnerConfig, SiteConfig
    >>> config = RunnerConfig(site=SiteConfig(model_name="Opus 4.6"))
    >>> config = RunnerConfig.from_env()
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, Field

from browser_provider import BrowserConfig
from profiles import DEFAULT_PROFILE, profile_path
from utils.event_logger import get_event_logger

_FALSE_VALUES = {"false", "0", "no", "off"}
_TRUE_VALUES = {"true", "1", "yes", "on"}


class SiteConfig(BaseModel):
    """Target site and conversation options."""

    base_url: str = Field(
        default="https://claude.ai",
        description="Start page used for login checks and new conversations"
    )
    project_url: Optional[str] = Field(
        default=None,
        description="Fixed conversation/project URL; used instead of base_url when set"
    )
    model_name: Optional[str] = Field(
        default=None,
        description="Model to select in the model picker (skipped when None)"
    )
    extended_thinking: bool = Field(
        default=True,
        description="Turn on extended thinking when the toggle is available"
    )

    @property
    def conversation_url(self) -> str:
        return self.project_url or self.base_url


class ProfileConfig(BaseModel):
    """Persistent browser profile location."""

    root_dir: str = Field(
        default="./data/browser-profiles",
        description="Directory holding one sub-directory per named profile"
    )
    name: str = Field(
        default=DEFAULT_PROFILE,
        description="Profile to launch"
    )

    @property
    def path(self) -> Path:
        return profile_path(self.root_dir, self.name)


class TimingConfig(BaseModel):
    """Timeouts and poll intervals, in milliseconds unless stated."""

    response_wait_timeout_ms: int = Field(
        default=300000,
        ge=0,
        description="Maximum time to wait for the reply to finish streaming"
    )
    poll_interval_ms: int = Field(
        default=2000,
        ge=0,
        description="Poll interval while waiting for the reply"
    )
    fallback_wait_ms: int = Field(
        default=60000,
        ge=0,
        description="Fixed wait used when no streaming indicator is configured"
    )
    indicator_appear_timeout_ms: int = Field(
        default=120000,
        ge=1,
        description="How long to wait for the streaming indicator to show up"
    )
    post_stream_settle_ms: int = Field(
        default=5000,
        ge=0,
        description="Pause after the streaming indicator disappears"
    )
    progress_log_every_s: int = Field(
        default=15,
        ge=1,
        description="Log elapsed time this often while waiting"
    )
    element_timeout_ms: int = Field(
        default=15000,
        ge=1,
        description="Timeout for waiting on individual elements"
    )
    download_timeout_ms: int = Field(
        default=30000,
        ge=1,
        description="Timeout for the download event after clicking download"
    )
    login_poll_ms: int = Field(
        default=2500,
        ge=0,
        description="Poll interval while waiting for a manual login"
    )
    login_timeout_ms: int = Field(
        default=5 * 60 * 1000,
        ge=0,
        description="Maximum time to wait for a manual login"
    )
    page_stabilize_ms: int = Field(
        default=3000,
        ge=0,
        description="Settle delay after loading the start page"
    )


class RunnerConfig(BaseModel):
    """
    Main configuration object for cv-template-bot.

    Example:
        >>> config = RunnerConfig(
        ...     browser=BrowserConfig(headless=False),
        ...     profile=ProfileConfig(name="work"),
        ... )
        >>> config.browser_config().user_data_dir
    """

    browser: BrowserConfig = Field(
        default_factory=BrowserConfig,
        description="Browser launch configuration"
    )
    site: SiteConfig = Field(
        default_factory=SiteConfig,
        description="Target site configuration"
    )
    profile: ProfileConfig = Field(
        default_factory=ProfileConfig,
        description="Browser profile configuration"
    )
    timing: TimingConfig = Field(
        default_factory=TimingConfig,
        description="Timeouts and poll intervals"
    )
    results_dir: str = Field(
        default="./data/results",
        description="Directory downloaded artifacts are saved to"
    )
    selectors_file: Optional[str] = Field(
        default=None,
        description="JSON file with selector overrides"
    )
    prompt_file: Optional[str] = Field(
        default=None,
        description="Text file replacing the built-in prompt"
    )
    debug_mode: bool = Field(
        default=True,
        description="Print workflow events to the console"
    )

    def browser_config(self) -> BrowserConfig:
        """Browser configuration with the active profile directory filled in."""
        return self.browser.model_copy(update={"user_data_dir": str(self.profile.path)})

    def with_profile(self, name: str) -> RunnerConfig:
        return self.model_copy(update={"profile": self.profile.model_copy(update={"name": name})})

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> RunnerConfig:
        """
        Build the configuration from environment variables.

        Recognized: BROWSER_HEADLESS, BROWSER_PROFILE_DIR, BROWSER_PROFILE,
        CLAUDE_URL, CLAUDE_PROJECT_URL, CLAUDE_MODEL, EXTENDED_THINKING,
        RESULTS_DIR, RESPONSE_WAIT_TIMEOUT, STREAMING_POLL_INTERVAL,
        SELECTORS_FILE, PROMPT_FILE, BOT_DEBUG.
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        browser = defaults.browser.model_copy(update={
            # Headless unless explicitly disabled
            "headless": _env_bool(env, "BROWSER_HEADLESS", defaults.browser.headless),
        })
        site = SiteConfig(
            base_url=env.get("CLAUDE_URL") or defaults.site.base_url,
            project_url=env.get("CLAUDE_PROJECT_URL") or None,
            model_name=env.get("CLAUDE_MODEL") or None,
            extended_thinking=_env_bool(env, "EXTENDED_THINKING", defaults.site.extended_thinking),
        )
        profile = ProfileConfig(
            root_dir=env.get("BROWSER_PROFILE_DIR") or defaults.profile.root_dir,
            name=env.get("BROWSER_PROFILE") or defaults.profile.name,
        )
        timing = defaults.timing.model_copy(update={
            "response_wait_timeout_ms": _env_int(
                env, "RESPONSE_WAIT_TIMEOUT", defaults.timing.response_wait_timeout_ms),
            "poll_interval_ms": _env_int(
                env, "STREAMING_POLL_INTERVAL", defaults.timing.poll_interval_ms),
        })

        return cls(
            browser=browser,
            site=site,
            profile=profile,
            timing=timing,
            results_dir=env.get("RESULTS_DIR") or defaults.results_dir,
            selectors_file=env.get("SELECTORS_FILE") or None,
            prompt_file=env.get("PROMPT_FILE") or None,
            debug_mode=_env_bool(env, "BOT_DEBUG", defaults.debug_mode),
        )


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _FALSE_VALUES:
        return False
    if value in _TRUE_VALUES:
        return True
    get_event_logger().system_warning(f"Ignoring {name}={raw!r}: expected true/false")
    return default


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        get_event_logger().system_warning(f"Ignoring {name}={raw!r}: not an integer")
        return default
    if value <= 0:
        get_event_logger().system_warning(f"Ignoring {name}={raw!r}: must be positive")
        return default
    return value
