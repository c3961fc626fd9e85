"""
Human behavior simulation: random delays, mouse movement, variable typing speed.

All delays are random within ranges to avoid fixed patterns. Durations are in
milliseconds, matching Playwright's own timeout units.
"""
import random
import time
from typing import Optional

from playwright.sync_api import Page

from error_handling import ElementNotInteractableError


def sample_delay(min_ms: int, max_ms: int) -> int:
    """Pick a delay uniformly from the inclusive range [min_ms, max_ms]."""
    if min_ms > max_ms:
        raise ValueError(f"min_ms ({min_ms}) must not exceed max_ms ({max_ms})")
    return random.randint(int(min_ms), int(max_ms))


def random_delay(min_ms: int, max_ms: int) -> int:
    """
    Sleep for a random duration between min_ms and max_ms (inclusive).

    Returns:
        The number of milliseconds slept
    """
    ms = sample_delay(min_ms, max_ms)
    time.sleep(ms / 1000)
    return ms


def lerp(t: float, a: float, b: float) -> float:
    return a + t * (b - a)


def ease_in_out(t: float) -> float:
    """Quadratic ease in-out, t in [0, 1]."""
    return 2 * t * t if t < 0.5 else 1 - ((-2 * t + 2) ** 2) / 2


class Delays:
    """Pacing for common scenarios."""

    AFTER_NAV = (1500, 4000)
    BETWEEN_ACTIONS = (500, 2000)
    BEFORE_CLICK = (300, 1000)
    AFTER_UPLOAD = (2000, 3000)
    BEFORE_SEND = (500, 1000)
    AFTER_RESPONSE = (2000, 3000)

    @staticmethod
    def after_nav() -> int:
        return random_delay(*Delays.AFTER_NAV)

    @staticmethod
    def between_actions() -> int:
        return random_delay(*Delays.BETWEEN_ACTIONS)

    @staticmethod
    def before_click() -> int:
        return random_delay(*Delays.BEFORE_CLICK)

    @staticmethod
    def after_upload() -> int:
        return random_delay(*Delays.AFTER_UPLOAD)

    @staticmethod
    def before_send() -> int:
        return random_delay(*Delays.BEFORE_SEND)

    @staticmethod
    def after_response() -> int:
        return random_delay(*Delays.AFTER_RESPONSE)


_READ_POINTER_JS = "() => ({ x: window.__lastMouseX || 0, y: window.__lastMouseY || 0 })"
_WRITE_POINTER_JS = "([x, y]) => { window.__lastMouseX = x; window.__lastMouseY = y; }"


def click_point(box: dict, padding_ratio: float = 0.2) -> tuple[float, float]:
    """
    Pick a random point inside a bounding box, keeping away from the edges.

    The padding keeps the point off the border; the randomness keeps it off
    the exact centre, so repeated clicks never land on one fixed spot.
    """
    padding = min(box["width"], box["height"]) * padding_ratio
    x = box["x"] + padding + random.random() * (box["width"] - 2 * padding)
    y = box["y"] + padding + random.random() * (box["height"] - 2 * padding)
    return x, y


def human_click(page: Page, selector: str, steps: int = 4, timeout_ms: int = 15000) -> tuple[float, float]:
    """
    Move the mouse to the element in eased steps with small pauses, then click
    at a randomized point inside it.

    Args:
        page: Playwright page
        selector: Element to click
        steps: Number of movement steps
        timeout_ms: How long to wait for the element to become visible

    Returns:
        The (x, y) point that was clicked

    Raises:
        ElementNotInteractableError: The element has no bounding box
    """
    element = page.wait_for_selector(selector, state="visible", timeout=timeout_ms)
    box = element.bounding_box() if element else None
    if not box:
        raise ElementNotInteractableError(f"No bounding box for selector: {selector}", selector=selector)

    x, y = click_point(box)

    current = page.evaluate(_READ_POINTER_JS) or {}
    start_x = current.get("x") or box["x"] + box["width"] / 2
    start_y = current.get("y") or box["y"] + box["height"] / 2

    for i in range(1, steps + 1):
        t = ease_in_out(i / steps)
        step_x = lerp(t, start_x, x)
        step_y = lerp(t, start_y, y)
        page.mouse.move(step_x, step_y)
        page.evaluate(_WRITE_POINTER_JS, [step_x, step_y])
        random_delay(20, 80)

    random_delay(50, 150)
    page.mouse.click(x, y)
    return x, y


def human_type(
    page: Page,
    selector: str,
    text: str,
    char_delay_min: int = 50,
    char_delay_max: int = 200,
    think_pause_min: int = 300,
    think_pause_max: int = 800,
    think_every_chars: int = 15,
    timeout_ms: int = 15000,
) -> None:
    """Type one character at a time with variable delay and an occasional longer pause."""
    human_click(page, selector, timeout_ms=timeout_ms)
    random_delay(500, 1000)

    for i, char in enumerate(text):
        page.keyboard.type(char, delay=0)
        random_delay(char_delay_min, char_delay_max)
        if i > 0 and i % think_every_chars == 0:
            random_delay(think_pause_min, think_pause_max)


def human_paste(page: Page, selector: str, text: str, timeout_ms: int = 15000) -> None:
    """Insert long text in one go (no OS clipboard involved)."""
    human_click(page, selector, timeout_ms=timeout_ms)
    random_delay(500, 1500)
    page.keyboard.insert_text(text)
    random_delay(500, 1500)


def human_scroll(page: Page, amount: Optional[int] = None) -> int:
    """
    Scroll by amount pixels (positive = down, negative = up).

    If amount is omitted, scrolls 100-400 pixels in a random direction.

    Returns:
        The signed delta that was scrolled
    """
    if amount is None:
        delta = random.randint(100, 400) * random.choice((1, -1))
    else:
        delta = int(amount)
    page.mouse.wheel(0, delta)
    random_delay(500, 1500)
    return delta
