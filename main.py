#!/usr/bin/env python3
"""
cv-template-bot - Main Entry Point

Uploads a CV template (.docx) to claude.ai with the placeholder-mapping
prompt, waits for the reply and downloads the edited document.

    cv-template-bot [--once] [--profile NAME] path/to/template.docx
    cv-template-bot --list-profiles
    cv-template-bot --reset-profile NAME

Exit codes: 0 on success or informational commands, 1 on invalid input,
a failed task (with --once) or any unhandled error.
"""
import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv
from rich import print as rprint
from rich.console import Console
from rich.markup import escape

from bot_config import RunnerConfig
from error_handling import BotError, ConfigurationError, InputValidationError
from profiles import list_profiles, reset_profile, validate_profile_name
from prompt import load_prompt
from selector_table import SelectorTable
from session_manager import SessionManager
from task_result import TaskResult
from utils.event_logger import EventLogger, set_event_logger
from workflow_runner import WorkflowRunner

EXPECTED_SUFFIX = ".docx"

err_console = Console(stderr=True, soft_wrap=True)


class _ArgumentParser(argparse.ArgumentParser):
    """argparse exits with 2 on bad usage; this tool reports every usage error with 1."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = _ArgumentParser(
        prog="cv-template-bot",
        description="Turn a CV template into a placeholder template via the claude.ai chat UI.",
    )
    parser.add_argument("file", nargs="?", help="CV template to process (.docx)")
    parser.add_argument("--once", action="store_true",
                        help="Close the browser and exit after processing the file")
    parser.add_argument("--profile", metavar="NAME",
                        help="Browser profile to use (default: BROWSER_PROFILE or 'default')")
    parser.add_argument("--list-profiles", action="store_true", help="List saved browser profiles and exit")
    parser.add_argument("--reset-profile", metavar="NAME",
                        help="Delete a saved browser profile (logs it out) and exit")
    parser.add_argument("--watch", metavar="DIR", help="Watch a directory for new templates (not implemented)")
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    return parser.parse_args(argv)


def validate_input(file_arg: Optional[str]) -> Path:
    """
    Resolve and check the input document.

    Raises:
        InputValidationError: No path given, file missing, or not a .docx
    """
    if not file_arg:
        raise InputValidationError(
            "Usage: cv-template-bot [--once] <path-to-template.docx>\n"
            "   Or: cv-template-bot --watch <directory>"
        )
    resolved = Path(file_arg).expanduser().resolve()
    if not resolved.is_file():
        raise InputValidationError(f"File not found: {resolved}")
    if resolved.suffix.lower() != EXPECTED_SUFFIX:
        raise InputValidationError(f"File must be a {EXPECTED_SUFFIX}: {resolved}")
    return resolved


def load_selectors(config: RunnerConfig) -> SelectorTable:
    if config.selectors_file:
        return SelectorTable.from_json_file(config.selectors_file)
    return SelectorTable()


def build_config(args: argparse.Namespace) -> RunnerConfig:
    config = RunnerConfig.from_env()
    if args.profile:
        config = config.with_profile(args.profile)
    # BROWSER_PROFILE is checked here too, before anything resolves the profile dir
    validate_profile_name(config.profile.name)
    if args.headed:
        config = config.model_copy(update={"browser": config.browser.model_copy(update={"headless": False})})
    return config


def show_profiles(config: RunnerConfig) -> int:
    root = config.profile.root_dir
    names = list_profiles(root)
    if not names:
        rprint(f"No browser profiles in {escape(root)}")
        return 0
    rprint(f"[bold]Browser profiles in {escape(root)}:[/bold]")
    for name in names:
        marker = " [green](active)[/green]" if name == config.profile.name else ""
        rprint(f"  • {escape(name)}{marker}")
    return 0


def run_reset_profile(config: RunnerConfig, name: str) -> int:
    if reset_profile(config.profile.root_dir, name):
        rprint(f"✅ Profile '{escape(name)}' deleted. You will need to log in again.")
    else:
        rprint(f"No profile named '{escape(name)}' in {escape(config.profile.root_dir)}")
    return 0


def run_watch(directory: Optional[str]) -> int:
    if not directory or not Path(directory).expanduser().is_dir():
        err_console.print("Usage: cv-template-bot --watch <directory>")
        return 1
    rprint("Watch mode is not implemented yet. Run one file at a time: "
           "cv-template-bot ./path/to/file.docx")
    return 0


def report_result(result: TaskResult) -> None:
    if result.success:
        rprint(f"[green]Success:[/green] {escape(result.file_path)} ({result.file_size} bytes)")
    else:
        err_console.print(f"[red]Failed:[/red] {escape(result.error)}")


def wait_for_operator() -> None:
    """Block until the operator presses Enter (or closes stdin)."""
    try:
        input()
    except (EOFError, KeyboardInterrupt):
        pass


def _shutdown_quietly(session: SessionManager, logger: EventLogger) -> None:
    try:
        session.shutdown()
    except Exception as e:
        logger.system_debug(f"Ignoring error while closing the browser: {e}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv()
    args = parse_args(argv)

    try:
        config = build_config(args)
    except InputValidationError as e:
        err_console.print(escape(e.message))
        return 1

    logger = EventLogger(debug_mode=config.debug_mode)
    set_event_logger(logger)

    if args.list_profiles:
        return show_profiles(config)
    if args.reset_profile:
        try:
            return run_reset_profile(config, args.reset_profile)
        except InputValidationError as e:
            err_console.print(escape(e.message))
            return 1
    if args.watch is not None:
        return run_watch(args.watch)

    try:
        input_path = validate_input(args.file)
        selectors = load_selectors(config)
        prompt = load_prompt(config.prompt_file)
    except (InputValidationError, ConfigurationError) as e:
        err_console.print(escape(e.message))
        return 1

    session = SessionManager(config, selectors=selectors, logger=logger)
    runner = WorkflowRunner(config, selectors=selectors, prompt=prompt, logger=logger)

    try:
        page = session.launch()
        session.ensure_logged_in(page)

        result = runner.process_file(page, input_path)
        report_result(result)

        if args.once:
            session.shutdown()
            return 0 if result.success else 1

        rprint("Browser left open. Press Enter to close it "
               "(run with --once to exit after one file).")
        wait_for_operator()
        session.shutdown()
        return 0
    except BotError as e:
        err_console.print(f"[red]{escape(type(e).__name__)}:[/red] {escape(e.message)}")
        _shutdown_quietly(session, logger)
        return 1
    except Exception as e:
        err_console.print(f"[red]Unexpected error:[/red] {escape(str(e))}")
        _shutdown_quietly(session, logger)
        return 1


if __name__ == "__main__":
    sys.exit(main())
