"""
Shared pytest fixtures for all tests.

No real browser is launched: ``FakePage`` stands in for a Playwright page and
records what the code under test did to it.
"""
import re
from contextlib import contextmanager
from pathlib import Path
from types import SimpleNamespace
from typing import Optional

import pytest
from playwright.sync_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError

import humanize
from bot_config import ProfileConfig, RunnerConfig, TimingConfig
from utils.event_logger import EventLogger, set_event_logger


class FakeElement:
    def __init__(self, box: Optional[dict]):
        self._box = box

    def bounding_box(self):
        return self._box


class FakeLocator:
    def __init__(self, page: "FakePage", selector: str):
        self.page = page
        self.selector = selector

    @property
    def first(self):
        return self

    def is_visible(self):
        if self.selector in self.page.broken:
            raise PlaywrightError(f"probe failed for {self.selector}")
        return self.page.is_selector_visible(self.selector)

    def get_attribute(self, name):
        return self.page.attributes.get(self.selector, {}).get(name)

    def set_input_files(self, files, timeout=None):
        if not self.page.is_selector_visible(self.selector, count=False) and self.selector not in self.page.present:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {self.selector}")
        self.page.uploaded.append((self.selector, files))

    def scroll_into_view_if_needed(self, timeout=None):
        self.page.scrolled.append(self.selector)


class FakeTextLocator:
    def __init__(self, page: "FakePage", pattern):
        self.page = page
        self.pattern = pattern if isinstance(pattern, re.Pattern) else re.compile(re.escape(pattern), re.I)

    @property
    def first(self):
        return self

    def is_visible(self):
        return any(self.pattern.search(text) for text in self.page.texts)


class FakeMouse:
    def __init__(self, page: "FakePage"):
        self.page = page
        self.moves: list[tuple[float, float]] = []
        self.clicks: list[tuple[float, float]] = []
        self.wheels: list[tuple[int, int]] = []

    def move(self, x, y):
        self.moves.append((x, y))

    def click(self, x, y):
        self.clicks.append((x, y))
        self.page.clicked.append(self.page.last_waited)
        if self.page.download_armed:
            self.page.clicked_while_armed.append(self.page.last_waited)

    def wheel(self, dx, dy):
        self.wheels.append((dx, dy))


class FakeKeyboard:
    def __init__(self):
        self.typed: list[str] = []
        self.inserted: list[str] = []
        self.pressed: list[str] = []

    def type(self, text, delay=None):
        self.typed.append(text)

    def insert_text(self, text):
        self.inserted.append(text)

    def press(self, key):
        self.pressed.append(key)


class FakeDownload:
    def __init__(self, payload: bytes):
        self.payload = payload

    def save_as(self, path):
        Path(path).write_bytes(self.payload)


class FakePage:
    """
    Minimal stand-in for playwright.sync_api.Page.

    Attributes:
        visible: selectors that are currently visible
        present: selectors attached to the DOM but hidden (file inputs)
        texts: visible text snippets for get_by_text()
        attributes: selector -> {attribute: value}
        boxes: selector -> bounding box (None means "no box")
        hide_after: selector -> number of visibility checks before it disappears
        download_payload: bytes delivered by expect_download(), None means timeout
    """

    DEFAULT_BOX = {"x": 100.0, "y": 200.0, "width": 120.0, "height": 40.0}

    def __init__(self, url: str = "https://claude.ai/new"):
        self.url = url
        self.visible: set[str] = set()
        self.present: set[str] = set()
        self.broken: set[str] = set()
        self.texts: list[str] = []
        self.attributes: dict[str, dict] = {}
        self.boxes: dict[str, Optional[dict]] = {}
        self.hide_after: dict[str, int] = {}
        self.download_payload: Optional[bytes] = None

        self.mouse = FakeMouse(self)
        self.keyboard = FakeKeyboard()
        self.gotos: list[str] = []
        self.waited: list[str] = []
        self.wait_timeouts: dict[str, list] = {}
        self.clicked: list[Optional[str]] = []
        self.clicked_while_armed: list[Optional[str]] = []
        self.uploaded: list[tuple] = []
        self.scrolled: list[str] = []
        self.download_armed = False
        self.last_waited: Optional[str] = None
        self.goto_url_after: Optional[str] = None
        self._pointer = {"x": 0, "y": 0}
        self._closed = False

    def show(self, *selectors: str) -> "FakePage":
        self.visible.update(selectors)
        return self

    def is_selector_visible(self, selector: str, count: bool = True) -> bool:
        if selector not in self.visible:
            return False
        if selector in self.hide_after:
            if self.hide_after[selector] <= 0:
                self.visible.discard(selector)
                return False
            if count:
                self.hide_after[selector] -= 1
        return True

    def goto(self, url, wait_until=None):
        self.gotos.append(url)
        self.url = self.goto_url_after or url

    def locator(self, selector):
        return FakeLocator(self, selector)

    def get_by_text(self, pattern, exact=False):
        return FakeTextLocator(self, pattern)

    def wait_for_selector(self, selector, state="visible", timeout=None):
        self.waited.append(selector)
        self.wait_timeouts.setdefault(selector, []).append(timeout)
        self.last_waited = selector
        if not self.is_selector_visible(selector, count=False):
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {selector}")
        return FakeElement(self.boxes.get(selector, dict(self.DEFAULT_BOX)))

    def evaluate(self, script, arg=None):
        if arg is None:
            return dict(self._pointer)
        self._pointer = {"x": arg[0], "y": arg[1]}
        return None

    @contextmanager
    def expect_download(self, timeout=None):
        info = SimpleNamespace(value=None)
        self.download_armed = True
        try:
            yield info
        finally:
            self.download_armed = False
        if self.download_payload is None:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded while waiting for event \"download\"")
        info.value = FakeDownload(self.download_payload)

    def is_closed(self):
        return self._closed


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    """Skip every humanized delay; the list collects the requested seconds."""
    slept = []
    monkeypatch.setattr(humanize.time, "sleep", lambda seconds: slept.append(seconds))
    return slept


@pytest.fixture(autouse=True)
def quiet_logger():
    logger = EventLogger(debug_mode=False)
    set_event_logger(logger)
    yield logger
    set_event_logger(EventLogger(debug_mode=False))


@pytest.fixture
def fake_page():
    return FakePage()


@pytest.fixture
def fast_config(tmp_path):
    """Config whose waits all finish immediately."""
    return RunnerConfig(
        profile=ProfileConfig(root_dir=str(tmp_path / "profiles")),
        timing=TimingConfig(
            fallback_wait_ms=0,
            login_timeout_ms=0,
            response_wait_timeout_ms=10000,
            poll_interval_ms=0,
            post_stream_settle_ms=0,
            page_stabilize_ms=0,
            login_poll_ms=0,
        ),
        results_dir=str(tmp_path / "results"),
        debug_mode=False,
    )


@pytest.fixture
def docx_file(tmp_path):
    path = tmp_path / "cv-template.docx"
    path.write_bytes(b"PK\x03\x04 fake docx")
    return path
