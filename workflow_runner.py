"""
Workflow Runner - one document through the chat UI, start to finish.

Steps (strictly linear, no backtracking):
    1. navigate to the conversation URL
    2. start a new chat (optional)
    3. wait for the input box (best effort)
    4. select the model (optional, best effort)
    5. enable extended thinking (optional, best effort)
    6. upload the document
    7. paste the prompt and send it
    8. wait for the reply to finish streaming
    9. download the returned artifact into the results directory

Optional steps are skipped when their selector is undiscovered and only log
their failures. Everything else failing ends the task with a failed
TaskResult; no exception leaves ``process_file``.
"""
from __future__ import annotations

import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from playwright.sync_api import Error as PlaywrightError, Page, TimeoutError as PlaywrightTimeoutError

from bot_config import RunnerConfig
from capability_probe import CapabilityState, is_toggle_on, is_visible, probe_locator, probe_selector
from error_handling import BotError, DownloadError, ElementNotFoundError
from humanize import Delays, human_click, human_paste, random_delay
from prompt import DEFAULT_PROMPT
from selector_table import SelectorTable
from session_manager import CHAT_INPUT_LIKE
from task_result import TaskResult
from utils.event_logger import EventLogger, get_event_logger

FALLBACK_FILE_INPUT = 'input[type="file"]'

ARTIFACT_HINT = (
    "Inspect the page when Claude returns a file and set artifact_download "
    "in your selectors file (SELECTORS_FILE)."
)

# Failures an optional step logs and moves past
_BEST_EFFORT_ERRORS = (PlaywrightError, BotError)


def result_file_name(suffix: str = ".docx", now: Optional[datetime] = None) -> str:
    """``<UTC ISO timestamp>_result<suffix>`` with ':' and '.' replaced so it is a valid filename."""
    now = now or datetime.now(timezone.utc)
    suffix = suffix if suffix.startswith(".") else f".{suffix}"
    return f"{now.strftime('%Y-%m-%dT%H-%M-%S')}_result{suffix}"


class WorkflowRunner:
    """
    Runs the upload -> prompt -> wait -> download workflow on a logged-in page.

    Example:
        >>> runner = WorkflowRunner(config, selectors)
        >>> result = runner.process_file(page, "cv-template.docx")
        >>> result.success, result.file_path
    """

    def __init__(
        self,
        config: RunnerConfig,
        selectors: Optional[SelectorTable] = None,
        prompt: str = DEFAULT_PROMPT,
        logger: Optional[EventLogger] = None,
    ):
        self.config = config
        self.selectors = selectors or SelectorTable()
        self.prompt = prompt
        self.logger = logger or get_event_logger()

    def process_file(self, page: Page, input_path: Union[str, Path]) -> TaskResult:
        """
        Process one document.

        Returns:
            TaskResult with the saved artifact, or the error that stopped the run
        """
        resolved = Path(input_path).expanduser().resolve()
        if not resolved.is_file():
            result = TaskResult.failure(f"File not found: {resolved}")
            self.logger.task_complete(False, result.error)
            return result

        try:
            result = self._run(page, resolved)
        except BotError as e:
            self.logger.system_error("Workflow stopped", error=e, severity=e.severity.value,
                                     recovery=e.recovery_strategy.value, step=e.context.step)
            result = TaskResult.failure(e.message)
        except Exception as e:
            self.logger.system_error("Workflow stopped", error=e)
            result = TaskResult.failure(str(e) or type(e).__name__)

        self.logger.task_complete(result.success, result.error, file_path=result.file_path)
        return result

    def _run(self, page: Page, input_path: Path) -> TaskResult:
        self._navigate(page)
        self._start_new_chat(page)
        self._wait_for_input(page)
        self._select_model(page)
        self._enable_extended_thinking(page)
        self._upload(page, input_path)
        self._submit_prompt(page)
        self._await_completion(page)
        return self._download(page, input_path)

    @property
    def _input_selector(self) -> str:
        return self.selectors.chat_input or CHAT_INPUT_LIKE

    # Step 1
    def _navigate(self, page: Page) -> None:
        url = self.config.site.conversation_url
        self.logger.step_start("navigate", url=url)
        page.goto(url, wait_until="domcontentloaded")
        Delays.after_nav()

    # Step 2
    def _start_new_chat(self, page: Page) -> None:
        selector = self.selectors.new_chat_button
        if selector is None:
            self.logger.step_skipped("new chat", "new_chat_button not discovered")
            return
        self.logger.step_start("new chat")
        try:
            human_click(page, selector, timeout_ms=self.config.timing.element_timeout_ms)
            Delays.between_actions()
        except _BEST_EFFORT_ERRORS as e:
            self.logger.step_failed("new chat", e)

    # Step 3
    def _wait_for_input(self, page: Page) -> None:
        try:
            page.wait_for_selector(self._input_selector, state="visible",
                                   timeout=self.config.timing.element_timeout_ms)
        except PlaywrightError as e:
            self.logger.step_failed("wait for chat input", e)

    # Step 4
    def _select_model(self, page: Page) -> None:
        model = self.config.site.model_name
        picker = self.selectors.model_selector
        if not model:
            self.logger.step_skipped("model selection", "no model configured")
            return
        if picker is None:
            self.logger.step_skipped("model selection", "model_selector not discovered")
            return

        self.logger.step_start("model selection", model=model)
        try:
            state = probe_selector(page, picker)
            if state is not CapabilityState.ENABLED:
                self.logger.step_skipped("model selection", f"model picker {state.value}")
                return

            Delays.between_actions()
            human_click(page, picker, timeout_ms=self.config.timing.element_timeout_ms)
            random_delay(500, 1000)

            option_selector = self.selectors.model_option or f"text={model}"
            state = probe_locator(page.locator(option_selector))
            if state is not CapabilityState.ENABLED:
                self.logger.step_skipped("model selection", f"option '{model}' {state.value}")
                page.keyboard.press("Escape")
                return

            human_click(page, option_selector, timeout_ms=self.config.timing.element_timeout_ms)
            random_delay(300, 800)
        except _BEST_EFFORT_ERRORS as e:
            self.logger.step_failed("model selection", e)

    # Step 5
    def _enable_extended_thinking(self, page: Page) -> None:
        if not self.config.site.extended_thinking:
            self.logger.step_skipped("extended thinking", "disabled in config")
            return
        menu = self.selectors.tools_menu_button
        toggle_selector = self.selectors.thinking_toggle
        if menu is None or toggle_selector is None:
            self.logger.step_skipped("extended thinking", "tools menu or thinking toggle not discovered")
            return

        self.logger.step_start("extended thinking")
        try:
            state = probe_selector(page, menu)
            if state is not CapabilityState.ENABLED:
                self.logger.step_skipped("extended thinking", f"tools menu {state.value}")
                return

            Delays.between_actions()
            human_click(page, menu, timeout_ms=self.config.timing.element_timeout_ms)
            random_delay(500, 1000)

            toggle = page.locator(toggle_selector)
            state = probe_locator(toggle)
            if state is not CapabilityState.ENABLED:
                self.logger.step_skipped("extended thinking", f"toggle {state.value}")
            elif is_toggle_on(toggle):
                self.logger.step_skipped("extended thinking", "already on")
            else:
                human_click(page, toggle_selector, timeout_ms=self.config.timing.element_timeout_ms)

            random_delay(300, 800)
            page.keyboard.press("Escape")
        except _BEST_EFFORT_ERRORS as e:
            self.logger.step_failed("extended thinking", e)

    # Step 6
    def _upload(self, page: Page, input_path: Path) -> None:
        self.logger.step_start("upload", file=input_path.name)
        Delays.between_actions()
        selector = self.selectors.file_input or FALLBACK_FILE_INPUT
        try:
            page.locator(selector).first.set_input_files(
                str(input_path), timeout=self.config.timing.element_timeout_ms)
        except PlaywrightTimeoutError as e:
            raise ElementNotFoundError(
                f"File input {selector} not found on the page", step="upload", selector=selector
            ) from e
        Delays.after_upload()

    # Step 7
    def _submit_prompt(self, page: Page) -> None:
        self.logger.step_start("send prompt", chars=len(self.prompt))
        Delays.between_actions()
        human_paste(page, self._input_selector, self.prompt, timeout_ms=self.config.timing.element_timeout_ms)
        Delays.before_send()

        if self.selectors.send_button is not None:
            human_click(page, self.selectors.send_button, timeout_ms=self.config.timing.element_timeout_ms)
        else:
            page.keyboard.press("Enter")
        random_delay(500, 1000)

    # Step 8
    def _await_completion(self, page: Page) -> None:
        """
        Wait for the reply to finish.

        With a streaming indicator: wait for it to appear, then until it is gone.
        Without one there is no completion signal, so this only waits a fixed window.
        """
        timing = self.config.timing
        indicator = self.selectors.streaming_indicator
        start = time.monotonic()
        next_report = timing.progress_log_every_s

        if indicator is None:
            limit_s = min(timing.fallback_wait_ms, timing.response_wait_timeout_ms) / 1000
            self.logger.step_start("wait for response", fallback_wait_s=limit_s)
            while time.monotonic() - start < limit_s:
                next_report = self._report_progress(time.monotonic() - start, next_report)
                random_delay(timing.poll_interval_ms, timing.poll_interval_ms + 500)
            return

        self.logger.step_start("wait for response")
        # Part of the overall response budget; Playwright reads 0 as no timeout
        appear_timeout = max(1, min(timing.indicator_appear_timeout_ms, timing.response_wait_timeout_ms))
        try:
            page.wait_for_selector(indicator, state="visible", timeout=appear_timeout)
        except PlaywrightTimeoutError:
            self.logger.system_warning("Streaming indicator never appeared; checking whether the reply is done")

        limit_s = timing.response_wait_timeout_ms / 1000
        while time.monotonic() - start < limit_s:
            if not is_visible(page.locator(indicator)):
                random_delay(timing.post_stream_settle_ms, timing.post_stream_settle_ms + 1000)
                return
            next_report = self._report_progress(time.monotonic() - start, next_report)
            random_delay(timing.poll_interval_ms, timing.poll_interval_ms + 500)

        self.logger.system_warning(f"Reply still streaming after {limit_s:.0f}s; trying the download anyway")

    def _report_progress(self, elapsed_s: float, next_report: int) -> int:
        if elapsed_s >= next_report:
            self.logger.waiting("Claude response", int(elapsed_s))
            every = self.config.timing.progress_log_every_s
            next_report += every * (int((elapsed_s - next_report) // every) + 1)
        return next_report

    # Step 9
    def _download(self, page: Page, input_path: Path) -> TaskResult:
        selector = self.selectors.require("artifact_download", ARTIFACT_HINT)
        timing = self.config.timing

        self.logger.step_start("download")
        Delays.after_response()
        results_dir = Path(self.config.results_dir)
        results_dir.mkdir(parents=True, exist_ok=True)
        out_path = results_dir / result_file_name(input_path.suffix or ".docx")

        try:
            page.wait_for_selector(selector, state="visible", timeout=timing.element_timeout_ms)
        except PlaywrightTimeoutError as e:
            raise ElementNotFoundError(
                f"Download control {selector} never appeared", step="download", selector=selector
            ) from e
        page.locator(selector).first.scroll_into_view_if_needed(timeout=timing.element_timeout_ms)

        # The listener has to be armed before the click or the event can be missed
        try:
            with page.expect_download(timeout=timing.download_timeout_ms) as download_info:
                human_click(page, selector, timeout_ms=timing.element_timeout_ms)
            download = download_info.value
        except PlaywrightTimeoutError as e:
            raise DownloadError(
                f"No download started within {timing.download_timeout_ms / 1000:.0f}s of clicking {selector}",
                selector=selector,
            ) from e

        download.save_as(str(out_path))
        if not out_path.is_file():
            raise DownloadError(f"Download finished but {out_path} was not written", selector=selector)

        size = out_path.stat().st_size
        self.logger.download_saved(out_path.name, size, path=str(out_path))
        return TaskResult.ok(str(out_path), size)
