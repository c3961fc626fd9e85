"""
DOM selectors for the claude.ai UI.

Every entry is either a selector string or None, meaning "not discovered yet".
Consumers must check with ``is_discovered()`` (or ``require()``) before using
an entry; optional steps are skipped and fallbacks used when it is missing.

How to discover selectors:
    1. Run with BROWSER_HEADLESS=false so the browser window opens.
    2. Log in, then open DevTools (F12) once the chat is visible.
    3. Use "Select an element" and click the element you need.
    4. Right-click the node -> Copy -> Copy selector. Prefer stable attributes
       (data-testid, aria-label) over nth-child chains or generated class names.
    5. Put the selector in a JSON file and point SELECTORS_FILE at it:
       {"send_button": "button[aria-label='Send message']"}
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from error_handling import ConfigurationError, SelectorNotConfiguredError

# Placeholder used by older hand-written selector files
LEGACY_PLACEHOLDER = "TO_BE_DISCOVERED"


class SelectorTable(BaseModel):
    """Logical UI element name -> CSS/text selector, or None when undiscovered."""

    model_config = {"extra": "forbid", "validate_assignment": True}

    # Chat input (textarea or contenteditable)
    chat_input: Optional[str] = Field(
        default='[data-testid="chat-input-ssr"]',
        description="Message input surface"
    )
    # Without it the workflow presses Enter instead
    send_button: Optional[str] = Field(
        default=None,
        description="Send message button"
    )
    file_input: Optional[str] = Field(
        default='input[type="file"]',
        description="Hidden file input used for uploads"
    )

    # Model picker at the bottom of the chat card
    model_selector: Optional[str] = Field(
        default=None,
        description="Button that opens the model list"
    )
    model_option: Optional[str] = Field(
        default=None,
        description="The model entry to choose; falls back to matching the model name as text"
    )

    # Extended thinking lives in the tools menu
    tools_menu_button: Optional[str] = Field(
        default=None,
        description="Button that opens the tools/settings menu"
    )
    thinking_toggle: Optional[str] = Field(
        default=None,
        description="Extended thinking switch inside the tools menu"
    )

    streaming_indicator: Optional[str] = Field(
        default=None,
        description="Element visible only while a reply is streaming"
    )
    artifact_download: Optional[str] = Field(
        default='button[aria-label="Download"]',
        description="Download control of the returned artifact"
    )

    # Login state
    logged_in_marker: Optional[str] = Field(
        default='[data-testid="user-menu-button"]',
        description="Element only visible when logged in"
    )
    login_page_marker: Optional[str] = Field(
        default=None,
        description="Element only visible on the login page"
    )

    new_chat_button: Optional[str] = Field(
        default='a[aria-label="New chat"]',
        description="Sidebar link that starts a new conversation"
    )

    @field_validator("*", mode="before")
    @classmethod
    def _normalize_placeholder(cls, value):
        if isinstance(value, str):
            value = value.strip()
            if not value or value == LEGACY_PLACEHOLDER:
                return None
        return value

    def is_discovered(self, name: str) -> bool:
        return self.get(name) is not None

    def get(self, name: str) -> Optional[str]:
        if name not in type(self).model_fields:
            raise KeyError(f"Unknown selector: {name}")
        return getattr(self, name)

    def require(self, name: str, hint: str = "") -> str:
        """Return the selector or raise SelectorNotConfiguredError."""
        value = self.get(name)
        if value is None:
            message = f"{name} selector not set."
            if hint:
                message += f" {hint}"
            raise SelectorNotConfiguredError(message, selector=name)
        return value

    def undiscovered(self) -> list[str]:
        return [name for name in type(self).model_fields if getattr(self, name) is None]

    @classmethod
    def all_undiscovered(cls) -> SelectorTable:
        """A table with every entry missing; every consumer falls back."""
        return cls(**{name: None for name in cls.model_fields})

    @classmethod
    def from_json_file(cls, path: Union[str, Path], base: Optional[SelectorTable] = None) -> SelectorTable:
        """
        Load selector overrides from a JSON object on top of ``base`` (defaults if omitted).

        Raises:
            ConfigurationError: File missing, not a JSON object, or with unknown keys
        """
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Selectors file not found: {path}")
        try:
            overrides = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Selectors file is not valid JSON: {path} ({e})") from e
        if not isinstance(overrides, dict):
            raise ConfigurationError(f"Selectors file must contain a JSON object: {path}")

        unknown = sorted(set(overrides) - set(cls.model_fields))
        if unknown:
            raise ConfigurationError(f"Unknown selectors in {path}: {', '.join(unknown)}")

        merged = (base or cls()).model_dump()
        merged.update(overrides)
        try:
            return cls(**merged)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid selectors in {path}: {e}") from e
