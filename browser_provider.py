"""
Browser Provider Pattern for cv-template-bot.

This module provides an abstraction layer between the session manager and the
browser, so the workflow can run against a real persistent Chromium profile or
against an injected fake page in tests.

Example:
    >>> from browser_provider import PersistentContextProvider, BrowserConfig
    >>> provider = PersistentContextProvider(BrowserConfig(user_data_dir="./data/browser-profiles/default"))
    >>> page = provider.get_page()
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from playwright.sync_api import Page, BrowserContext, Playwright, sync_playwright
from playwright_stealth import Stealth
from pydantic import BaseModel, Field

from error_handling import ConfigurationError


class BrowserConfig(BaseModel):
    """Configuration for browser providers."""

    headless: bool = Field(
        default=True,
        description="Run browser in headless mode"
    )
    viewport_width: int = Field(
        default=1280,
        ge=100,
        description="Browser viewport width"
    )
    viewport_height: int = Field(
        default=900,
        ge=100,
        description="Browser viewport height"
    )
    user_data_dir: Optional[str] = Field(
        default=None,
        description="Profile directory for the persistent context"
    )
    channel: Optional[str] = Field(
        default=None,
        description="Browser channel: None for bundled Chromium, or 'chrome', 'msedge'"
    )
    locale: str = Field(
        default="en-GB",
        description="Locale reported by the browser"
    )
    timezone_id: str = Field(
        default="Europe/London",
        description="Timezone reported by the browser"
    )
    accept_downloads: bool = Field(
        default=True,
        description="Allow the page to download artifacts"
    )

    # Stealth settings
    apply_stealth: bool = Field(
        default=True,
        description="Apply stealth patches to reduce automation fingerprints"
    )

    extra_args: list[str] = Field(
        default_factory=lambda: [
            "--disable-blink-features=AutomationControlled",
            "--disable-infobars",
        ],
        description="Additional browser launch arguments"
    )


class BrowserProvider(ABC):
    """
    Abstract base class for browser providers.

    Implementations must provide a way to get a Playwright Page object
    and handle cleanup.
    """

    def __init__(self, config: BrowserConfig):
        self.config = config
        self._page: Optional[Page] = None

    @abstractmethod
    def get_page(self) -> Page:
        """
        Get or create a Playwright Page object.

        Returns:
            Page: Playwright page ready for automation
        """

    @abstractmethod
    def close(self) -> None:
        """Cleanup resources (close browser, stop playwright, etc.)"""

    def is_ready(self) -> bool:
        return self._page is not None and not self._page.is_closed()


class PersistentContextProvider(BrowserProvider):
    """
    Launches Chromium with a persistent, profile-scoped context.

    Cookies and local storage live in ``user_data_dir`` so the login survives
    across runs. Only one process may use a profile directory at a time.
    """

    def __init__(self, config: BrowserConfig):
        super().__init__(config)
        self._playwright: Optional[Playwright] = None
        self._context: Optional[BrowserContext] = None

    @property
    def context(self) -> Optional[BrowserContext]:
        return self._context

    def get_page(self) -> Page:
        """Launch browser with persistent context and return its page."""
        if self.is_ready():
            return self._page

        if not self.config.user_data_dir:
            raise ConfigurationError("user_data_dir is required for PersistentContextProvider")
        Path(self.config.user_data_dir).mkdir(parents=True, exist_ok=True)

        self._playwright = sync_playwright().start()

        launch_kwargs = dict(
            user_data_dir=self.config.user_data_dir,
            headless=self.config.headless,
            viewport={
                "width": self.config.viewport_width,
                "height": self.config.viewport_height
            },
            accept_downloads=self.config.accept_downloads,
            locale=self.config.locale,
            timezone_id=self.config.timezone_id,
            args=list(self.config.extra_args),
            ignore_default_args=["--enable-automation"],
        )
        if self.config.channel:
            launch_kwargs["channel"] = self.config.channel

        try:
            self._context = self._playwright.chromium.launch_persistent_context(**launch_kwargs)
        except Exception:
            self._playwright.stop()
            self._playwright = None
            raise

        # Reuse the restored tab if the profile opened one
        pages = self._context.pages
        self._page = pages[0] if pages else self._context.new_page()

        if self.config.apply_stealth:
            Stealth().apply_stealth_sync(self._page)

        return self._page

    def close(self) -> None:
        """Close the context (flushing the profile to disk) and stop Playwright."""
        try:
            if self._context:
                self._context.close()
        finally:
            self._context = None
            self._page = None
            if self._playwright:
                self._playwright.stop()
                self._playwright = None


class MockBrowserProvider(BrowserProvider):
    """
    Mock browser provider for testing.

    Returns the injected page object without launching a browser.

    Example:
        >>> provider = MockBrowserProvider(BrowserConfig(), mock_page=fake_page)
        >>> page = provider.get_page()
    """

    def __init__(self, config: BrowserConfig, mock_page=None):
        super().__init__(config)
        self._mock_page = mock_page
        self.closed = False

    def get_page(self):
        if self._mock_page is None:
            raise NotImplementedError(
                "MockBrowserProvider requires a mock_page to be provided. "
                "Use: MockBrowserProvider(config, mock_page=your_mock)"
            )
        self._page = self._mock_page
        return self._mock_page

    def is_ready(self) -> bool:
        return self._page is not None and not self.closed

    def close(self) -> None:
        self.closed = True
