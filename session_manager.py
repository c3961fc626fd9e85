"""
Session Manager - browser profile lifecycle and login detection.

Login state is decided, in order, by:
    1. the URL (a login path always means "not logged in"),
    2. the configured logged-in marker,
    3. the configured login-page marker,
    4. visible text / chat-input heuristics.
Any probe that fails or times out counts as "not found"; detection never raises.
"""
from __future__ import annotations

import re
import time
from typing import Optional
from urllib.parse import urlparse

from playwright.sync_api import Page

from bot_config import RunnerConfig
from browser_provider import BrowserProvider, PersistentContextProvider
from capability_probe import is_visible
from error_handling import AuthenticationTimeoutError
from humanize import random_delay
from selector_table import SelectorTable
from utils.event_logger import EventLogger, get_event_logger

LOGIN_TEXTS = [
    re.compile(r"continue with google", re.I),
    re.compile(r"sign in", re.I),
    re.compile(r"log in", re.I),
    re.compile(r"sign in with google", re.I),
]

APP_ONLY_TEXTS = [
    re.compile(r"new chat", re.I),
    re.compile(r"message claude", re.I),
    re.compile(r"ask claude", re.I),
]

CHAT_INPUT_LIKE = 'textarea, [role="textbox"], [contenteditable="true"]'

# Pause after a login is detected so the app finishes loading
LOGIN_SETTLE_MS = (2000, 2500)


def is_login_url(url: str) -> bool:
    return "/login" in (urlparse(url or "").path or "")


def _text_visible(page: Page, pattern: re.Pattern) -> bool:
    return is_visible(page.get_by_text(pattern))


def is_login_page_heuristic(page: Page) -> bool:
    """True if the URL or visible text says we are on the login page."""
    if is_login_url(page.url):
        return True
    return any(_text_visible(page, pattern) for pattern in LOGIN_TEXTS)


def is_logged_in_heuristic(page: Page) -> bool:
    """True if the chat UI (input box or app-only text) is visible outside the login path."""
    if is_login_url(page.url):
        return False
    if is_visible(page.locator(CHAT_INPUT_LIKE)):
        return True
    return any(_text_visible(page, pattern) for pattern in APP_ONLY_TEXTS)


class SessionManager:
    """
    Owns the persistent browser profile and decides whether we are logged in.

    Usage:
        with SessionManager(config) as session:
            page = session.page
            session.ensure_logged_in(page)
            ...
    """

    def __init__(
        self,
        config: RunnerConfig,
        provider: Optional[BrowserProvider] = None,
        selectors: Optional[SelectorTable] = None,
        logger: Optional[EventLogger] = None,
    ):
        self.config = config
        self.provider = provider or PersistentContextProvider(config.browser_config())
        self.selectors = selectors or SelectorTable()
        self.logger = logger or get_event_logger()
        self.page: Optional[Page] = None

    def __enter__(self) -> SessionManager:
        self.launch()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()

    def launch(self) -> Page:
        """Open (or reuse) the persistent profile and return its page."""
        browser_config = self.provider.config
        self.logger.session_launch(str(browser_config.user_data_dir), browser_config.headless,
                                   profile=self.config.profile.name)
        self.page = self.provider.get_page()
        return self.page

    def shutdown(self) -> None:
        """Close the browsing context; the profile is flushed to disk."""
        self.provider.close()
        self.page = None
        self.logger.session_shutdown(profile=self.config.profile.name)

    def _detect(self, page: Page) -> tuple[bool, str]:
        if is_login_url(page.url):
            return False, "login URL"

        marker = self.selectors.logged_in_marker
        if marker is not None and is_visible(page.locator(marker)):
            return True, "logged-in marker"

        marker = self.selectors.login_page_marker
        if marker is not None and is_visible(page.locator(marker)):
            return False, "login-page marker"

        if is_login_page_heuristic(page):
            return False, "login text"
        if is_logged_in_heuristic(page):
            return True, "URL + chat UI"
        return False, "no chat UI"

    def detect_logged_in(self, page: Page) -> bool:
        """Decide login state from the page as it is now (no navigation)."""
        logged_in, method = self._detect(page)
        self.logger.login_check(logged_in, method, url=page.url)
        return logged_in

    def check_login(self, page: Page) -> bool:
        """Load the start page, let it settle, then detect login state."""
        page.goto(self.config.site.base_url, wait_until="domcontentloaded")
        settle = self.config.timing.page_stabilize_ms
        random_delay(settle, settle + 500)
        return self.detect_logged_in(page)

    def wait_for_manual_login(self, page: Page) -> None:
        """
        Poll until the operator has logged in by hand.

        Works when the magic link is pasted into the same tab: the URL and the
        chat UI are what give the login away.

        Raises:
            AuthenticationTimeoutError: No login within the configured timeout
        """
        timing = self.config.timing
        self.logger.login_wait(timing.login_timeout_ms / 1000)
        start = time.monotonic()

        while (time.monotonic() - start) * 1000 < timing.login_timeout_ms:
            logged_in, method = self._detect(page)
            if logged_in:
                self.logger.login_detected(method)
                random_delay(*LOGIN_SETTLE_MS)
                return
            random_delay(timing.login_poll_ms, timing.login_poll_ms + 500)

        minutes = max(1, round(timing.login_timeout_ms / 60000))
        raise AuthenticationTimeoutError(
            f"Login timeout. Please run again and log in within {minutes} minute"
            f"{'s' if minutes != 1 else ''} (paste magic link in this tab).",
            page_url=page.url,
        )

    def ensure_logged_in(self, page: Page) -> None:
        if not self.check_login(page):
            self.wait_for_manual_login(page)
