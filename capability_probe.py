"""
Capability probes for optional UI affordances.

Optional steps (model picker, extended thinking) ask a probe whether the
control is usable instead of trying the click and swallowing whatever breaks.
A probe never raises: Playwright errors and timeouts mean "unavailable".
"""
from enum import Enum
from typing import Optional

from playwright.sync_api import Error as PlaywrightError, Locator, Page


class CapabilityState(str, Enum):
    ENABLED = "enabled"
    DISABLED = "disabled"
    UNAVAILABLE = "unavailable"


_TRUTHY_STATES = {"true", "checked", "on", "open", "active"}


def is_visible(locator: Locator) -> bool:
    """Visibility check where any probe failure counts as not visible."""
    try:
        return locator.first.is_visible()
    except PlaywrightError:
        return False


def _attribute(locator: Locator, name: str) -> Optional[str]:
    try:
        return locator.get_attribute(name)
    except PlaywrightError:
        return None


def probe_locator(locator: Optional[Locator]) -> CapabilityState:
    """
    Classify a control as enabled, disabled or unavailable.

    Unavailable: no locator, nothing matched or not visible.
    Disabled: ``disabled``, ``aria-disabled="true"`` or ``data-disabled`` present.
    """
    if locator is None or not is_visible(locator):
        return CapabilityState.UNAVAILABLE

    first = locator.first
    if _attribute(first, "disabled") is not None:
        return CapabilityState.DISABLED
    if (_attribute(first, "aria-disabled") or "").lower() == "true":
        return CapabilityState.DISABLED
    if _attribute(first, "data-disabled") is not None:
        return CapabilityState.DISABLED
    return CapabilityState.ENABLED


def probe_selector(page: Page, selector: Optional[str]) -> CapabilityState:
    if selector is None:
        return CapabilityState.UNAVAILABLE
    return probe_locator(page.locator(selector))


def is_toggle_on(locator: Locator) -> bool:
    """Read a switch/checkbox state from aria-checked, aria-pressed or data-state."""
    first = locator.first
    for name in ("aria-checked", "aria-pressed", "data-state"):
        value = _attribute(first, name)
        if value is not None:
            return value.strip().lower() in _TRUTHY_STATES
    return False
