"""Test configuration and fixtures."""

import os
from collections.abc import Callable, Generator

import pytest

from deploybrief_actions.models import CheckRun, ExistingComment, PullRequestSnapshot, RuleConfig

# Set environment variables immediately when this module is imported
# This ensures they're available before any other modules try to load Settings
test_env_vars = {
    "GITHUB_TOKEN": "test_github_token_123",
    "GITHUB_API_URL": "https://api.github.com",
    "GITHUB_SERVER_URL": "https://github.com",
    "GITHUB_REPOSITORY": "octo/widgets",
    "GITHUB_ACTIONS": "false",
    "GITHUB_EVENT_PATH": "",
    "GITHUB_OUTPUT": "",
    "GITHUB_STEP_SUMMARY": "",
    "APP_NAME": "DeployBrief Actions Test",
    "APP_VERSION": "1.0.0-test",
    "LOG_LEVEL": "DEBUG",
    "GITHUB_REQUEST_DELAY": "0",
    "GITHUB_REQUEST_TIMEOUT": "5",
}

for key in [key for key in os.environ if key.startswith("INPUT_")]:
    os.environ.pop(key)

for key, value in test_env_vars.items():
    os.environ[key] = value


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment() -> Generator[None, None, None]:
    """Set up test environment variables."""
    yield

    for key in test_env_vars:
        os.environ.pop(key, None)


@pytest.fixture(autouse=True)
def fresh_settings() -> Generator[None, None, None]:
    """Drop cached settings so per-test environment changes are seen."""
    from deploybrief_actions.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def action_inputs(monkeypatch: pytest.MonkeyPatch) -> Callable[..., None]:
    """Set INPUT_* variables the way the Actions runner does."""

    def _set(**inputs: str) -> None:
        for name, value in inputs.items():
            monkeypatch.setenv(f"INPUT_{name.replace('_', '-').upper()}", value)

    return _set


@pytest.fixture
def output_file(tmp_path, monkeypatch: pytest.MonkeyPatch):
    """Point GITHUB_OUTPUT at a temporary file."""
    path = tmp_path / "github_output"
    path.touch()
    monkeypatch.setenv("GITHUB_OUTPUT", str(path))
    return path


def _parse_outputs(path) -> dict[str, str]:
    outputs = {}
    lines = path.read_text(encoding="utf-8").split("\n")
    index = 0
    while index < len(lines) and lines[index]:
        name, delimiter = lines[index].split("<<", 1)
        index += 1
        value_lines = []
        while lines[index] != delimiter:
            value_lines.append(lines[index])
            index += 1
        outputs[name] = "\n".join(value_lines)
        index += 1
    return outputs


@pytest.fixture
def read_outputs() -> Callable[..., dict[str, str]]:
    """Parse a GITHUB_OUTPUT file written with the heredoc form."""
    return _parse_outputs


@pytest.fixture
def make_snapshot() -> Callable[..., PullRequestSnapshot]:
    def _make(**overrides) -> PullRequestSnapshot:
        values = {
            "number": 42,
            "title": "Add widget export",
            "body": "Fixes #7\n\n![screenshot](https://example.com/shot.png)",
            "labels": {"reviewed"},
            "head_sha": "abc1234def5678",
            "approval_count": 1,
        }
        values.update(overrides)
        return PullRequestSnapshot(**values)

    return _make


@pytest.fixture
def pr_payload() -> dict:
    """Pull request as it appears in a pull_request event payload."""
    return {
        "number": 42,
        "title": "Add widget export",
        "body": "Fixes #7",
        "draft": False,
        "labels": [{"id": 1, "name": "reviewed"}, {"id": 2, "name": "enhancement"}],
        "head": {"sha": "abc1234def5678", "ref": "feature/export"},
        "user": {"login": "octocat", "type": "User"},
    }


@pytest.fixture
def strict_config() -> RuleConfig:
    return RuleConfig(
        required_labels={"reviewed"},
        blocked_labels={"wip"},
        require_description=True,
        require_linked_issue=True,
        require_evidence_attachments=True,
        require_tests=True,
        min_approvals=1,
    )


@pytest.fixture
def passing_checks() -> list[CheckRun]:
    return [CheckRun(name="unit-tests", conclusion="success"), CheckRun(name="lint", conclusion="success")]


@pytest.fixture
def bot_comment() -> Callable[..., ExistingComment]:
    def _make(comment_id: int, body: str, author_is_automation: bool = True) -> ExistingComment:
        return ExistingComment(id=comment_id, body=body, author_is_automation=author_is_automation)

    return _make
