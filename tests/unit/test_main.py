"""
Tests for the command line entry point.

SessionManager and WorkflowRunner are replaced with fakes so no browser starts.
"""
import pytest

import main
from error_handling import AuthenticationTimeoutError
from session_manager import SessionManager
from task_result import TaskResult

ENV_VARS = [
    "BROWSER_HEADLESS", "BROWSER_PROFILE_DIR", "BROWSER_PROFILE", "CLAUDE_URL",
    "CLAUDE_PROJECT_URL", "CLAUDE_MODEL", "EXTENDED_THINKING", "RESULTS_DIR",
    "RESPONSE_WAIT_TIMEOUT", "STREAMING_POLL_INTERVAL", "SELECTORS_FILE",
    "PROMPT_FILE", "BOT_DEBUG",
]


class FakeSession:
    login_error = None

    def __init__(self, config, selectors=None, logger=None):
        self.config = config
        self.selectors = selectors
        self.page = None
        self.shutdown_calls = 0
        FakeSession.instances.append(self)

    def launch(self):
        self.page = object()
        return self.page

    def ensure_logged_in(self, page):
        if FakeSession.login_error is not None:
            raise FakeSession.login_error

    def shutdown(self):
        self.shutdown_calls += 1


class FakeRunner:
    result = TaskResult.ok("/tmp/results/out.docx", 10)

    def __init__(self, config, selectors=None, prompt=None, logger=None):
        self.prompt = prompt
        self.processed = []
        FakeRunner.instances.append(self)

    def process_file(self, page, input_path):
        self.processed.append(input_path)
        return FakeRunner.result


@pytest.fixture(autouse=True)
def cli_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("BROWSER_PROFILE_DIR", str(tmp_path / "profiles"))
    monkeypatch.setenv("RESULTS_DIR", str(tmp_path / "results"))
    monkeypatch.setenv("BOT_DEBUG", "false")
    monkeypatch.setattr(main, "load_dotenv", lambda *args, **kwargs: False)

    FakeSession.instances = []
    FakeSession.login_error = None
    FakeRunner.instances = []
    FakeRunner.result = TaskResult.ok("/tmp/results/out.docx", 10)
    monkeypatch.setattr(main, "SessionManager", FakeSession)
    monkeypatch.setattr(main, "WorkflowRunner", FakeRunner)
    monkeypatch.setattr(main, "wait_for_operator", lambda: pytest.fail("should not wait for the operator"))
    return tmp_path


class TestInputValidation:

    def test_no_arguments(self, capsys):
        assert main.main([]) == 1
        assert "Usage" in capsys.readouterr().err
        assert FakeSession.instances == []

    def test_missing_file(self, tmp_path, capsys):
        assert main.main([str(tmp_path / "missing.docx")]) == 1
        assert "File not found" in capsys.readouterr().err
        assert FakeSession.instances == []
        assert FakeRunner.instances == []

    def test_wrong_extension(self, tmp_path, capsys):
        path = tmp_path / "cv.pdf"
        path.write_bytes(b"%PDF")
        assert main.main([str(path)]) == 1
        assert "must be a .docx" in capsys.readouterr().err
        assert FakeSession.instances == []

    def test_unknown_flag_exits_with_1(self):
        with pytest.raises(SystemExit) as exc:
            main.main(["--bogus"])
        assert exc.value.code == 1

    def test_invalid_profile_name(self, docx_file):
        assert main.main(["--profile", "../other", str(docx_file)]) == 1
        assert FakeSession.instances == []

    def test_invalid_profile_name_from_environment(self, docx_file, monkeypatch, capsys):
        monkeypatch.setenv("BROWSER_PROFILE", "../escape")
        # The real session resolves the profile directory on construction
        monkeypatch.setattr(main, "SessionManager", SessionManager)
        assert main.main(["--once", str(docx_file)]) == 1
        err = capsys.readouterr().err
        assert "Invalid profile name" in err
        assert "Traceback" not in err
        assert FakeRunner.instances == []

    def test_invalid_profile_name_from_environment_on_list(self, monkeypatch):
        monkeypatch.setenv("BROWSER_PROFILE", "../escape")
        assert main.main(["--list-profiles"]) == 1

    def test_broken_selectors_file(self, docx_file, tmp_path, monkeypatch):
        bad = tmp_path / "selectors.json"
        bad.write_text("{oops")
        monkeypatch.setenv("SELECTORS_FILE", str(bad))
        assert main.main([str(docx_file)]) == 1
        assert FakeSession.instances == []

    def test_missing_prompt_file(self, docx_file, tmp_path, monkeypatch):
        monkeypatch.setenv("PROMPT_FILE", str(tmp_path / "prompt.txt"))
        assert main.main([str(docx_file)]) == 1
        assert FakeSession.instances == []


class TestInfoCommands:

    def test_list_profiles(self, cli_env, capsys):
        (cli_env / "profiles" / "work").mkdir(parents=True)
        (cli_env / "profiles" / "default").mkdir()
        assert main.main(["--list-profiles"]) == 0
        out = capsys.readouterr().out
        assert "work" in out
        assert "default" in out

    def test_list_profiles_when_none(self, capsys):
        assert main.main(["--list-profiles"]) == 0
        assert "No browser profiles" in capsys.readouterr().out

    def test_reset_profile(self, cli_env):
        (cli_env / "profiles" / "work").mkdir(parents=True)
        assert main.main(["--reset-profile", "work"]) == 0
        assert not (cli_env / "profiles" / "work").exists()

    def test_reset_profile_bad_name(self):
        assert main.main(["--reset-profile", ".."]) == 1

    def test_watch_is_a_placeholder(self, tmp_path, capsys):
        assert main.main(["--watch", str(tmp_path)]) == 0
        assert "not implemented" in capsys.readouterr().out
        assert FakeSession.instances == []

    def test_watch_missing_directory(self, tmp_path):
        assert main.main(["--watch", str(tmp_path / "nope")]) == 1


class TestRun:

    def test_once_success(self, docx_file):
        assert main.main(["--once", str(docx_file)]) == 0
        session = FakeSession.instances[0]
        assert session.shutdown_calls == 1
        assert FakeRunner.instances[0].processed == [docx_file.resolve()]

    def test_once_failure(self, docx_file, capsys):
        FakeRunner.result = TaskResult.failure("artifact_download selector not set.")
        assert main.main(["--once", str(docx_file)]) == 1
        assert "artifact_download" in capsys.readouterr().err
        assert FakeSession.instances[0].shutdown_calls == 1

    def test_login_timeout(self, docx_file, capsys):
        FakeSession.login_error = AuthenticationTimeoutError("Login timeout. Please run again and log in.")
        assert main.main(["--once", str(docx_file)]) == 1
        assert "Login timeout" in capsys.readouterr().err
        assert FakeSession.instances[0].shutdown_calls == 1
        assert FakeRunner.instances[0].processed == []

    def test_unexpected_error_still_closes_browser(self, docx_file, monkeypatch):
        def crash(self, page, input_path):
            raise RuntimeError("browser went away")

        monkeypatch.setattr(FakeRunner, "process_file", crash)
        assert main.main([str(docx_file)]) == 1
        assert FakeSession.instances[0].shutdown_calls == 1

    def test_without_once_waits_for_operator(self, docx_file, monkeypatch):
        waited = []
        monkeypatch.setattr(main, "wait_for_operator", lambda: waited.append(True))
        FakeRunner.result = TaskResult.failure("No download started")

        assert main.main([str(docx_file)]) == 0
        assert waited == [True]
        assert FakeSession.instances[0].shutdown_calls == 1

    def test_flags_reach_the_config(self, docx_file, cli_env):
        main.main(["--once", "--headed", "--profile", "work", str(docx_file)])
        config = FakeSession.instances[0].config
        assert config.browser.headless is False
        assert config.profile.name == "work"
        assert config.results_dir == str(cli_env / "results")

    def test_prompt_file_is_used(self, docx_file, tmp_path, monkeypatch):
        prompt = tmp_path / "prompt.txt"
        prompt.write_text("Map the placeholders.")
        monkeypatch.setenv("PROMPT_FILE", str(prompt))
        main.main(["--once", str(docx_file)])
        assert FakeRunner.instances[0].prompt == "Map the placeholders."
