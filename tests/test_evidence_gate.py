"""Integration tests for the evidence gate run."""

import json
from unittest.mock import Mock

import pytest
import requests

from deploybrief_actions.exceptions import CollaboratorError, ConfigurationError
from deploybrief_actions.models import RuleConfig
from deploybrief_actions.services.comment_reconciler import COMMENT_MARKER
from deploybrief_actions.services.evidence_gate import EvidenceGate, failure_message, should_fail


@pytest.fixture
def github_client() -> Mock:
    client = Mock()
    client.get_issue_comments.return_value = []
    client.get_check_runs.return_value = [{"name": "unit-test", "conclusion": "success"}]
    client.get_pull_request_reviews.return_value = []
    client.create_issue_comment.return_value = {"id": 1001}
    return client


class TestExitDecision:
    """Test the terminal signal."""

    @pytest.mark.parametrize(
        ("passed", "fail_on_violation", "expected"),
        [(True, True, False), (True, False, False), (False, False, False), (False, True, True)],
    )
    def test_should_fail(self, passed, fail_on_violation, expected) -> None:
        """Test only a failed verdict with fail-on-violation fails the run."""
        verdict = Mock(passed=passed)

        assert should_fail(verdict, RuleConfig(fail_on_violation=fail_on_violation)) is expected

    def test_failure_message(self) -> None:
        """Test the failure message carries the violation count."""
        assert failure_message(Mock(violation_count=3)) == "Evidence gate validation failed with 3 violation(s)"


class TestEvidenceGate:
    """Test a full evidence gate run against a mocked GitHub."""

    def test_failing_pr_posts_comment_and_fails(self, github_client, pr_payload, output_file, read_outputs) -> None:
        """Test violations are reported through outputs, comment and exit decision."""
        pr_payload["labels"] = [{"name": "wip"}]
        pr_payload["body"] = ""
        config = RuleConfig(required_labels={"reviewed"}, blocked_labels={"wip"}, require_description=True)

        outcome = EvidenceGate(github_client).run("octo", "widgets", config, pr_data=pr_payload)

        assert outcome.failed is True
        assert outcome.comment_id == 1001
        assert outcome.message == "Evidence gate validation failed with 3 violation(s)"

        outputs = read_outputs(output_file)
        assert outputs["validation-result"] == "failed"
        assert outputs["violation-count"] == "3"
        assert [v["rule"] for v in json.loads(outputs["violations"])] == [
            "blocked-labels",
            "required-labels",
            "require-description",
        ]

        owner, repo, number, body = github_client.create_issue_comment.call_args[0]
        assert (owner, repo, number) == ("octo", "widgets", 42)
        assert body.startswith(COMMENT_MARKER)
        github_client.update_issue_comment.assert_not_called()

    def test_passing_pr_updates_existing_comment(self, github_client, pr_payload, output_file, read_outputs) -> None:
        """Test a re-run overwrites the previous status comment."""
        github_client.get_issue_comments.return_value = [
            {"id": 77, "body": f"{COMMENT_MARKER}\nold", "user": {"login": "github-actions[bot]", "type": "Bot"}},
        ]
        config = RuleConfig(required_labels={"reviewed"}, require_tests=True)

        outcome = EvidenceGate(github_client).run("octo", "widgets", config, pr_data=pr_payload)

        assert outcome.failed is False
        assert read_outputs(output_file)["validation-result"] == "passed"
        github_client.update_issue_comment.assert_called_once()
        assert github_client.update_issue_comment.call_args[0][2] == 77
        github_client.create_issue_comment.assert_not_called()

    def test_fail_on_violation_disabled(self, github_client, pr_payload, output_file) -> None:
        """Test violations do not fail the run when fail-on-violation is off."""
        config = RuleConfig(required_labels={"missing"}, fail_on_violation=False)

        outcome = EvidenceGate(github_client).run("octo", "widgets", config, pr_data=pr_payload)

        assert outcome.verdict.passed is False
        assert outcome.failed is False

    def test_comment_failure_does_not_change_verdict(self, github_client, pr_payload, output_file) -> None:
        """Test a failed comment post leaves the verdict and exit decision intact."""
        github_client.create_issue_comment.side_effect = requests.HTTPError("403 Resource not accessible")
        config = RuleConfig(required_labels={"missing"})

        outcome = EvidenceGate(github_client).run("octo", "widgets", config, pr_data=pr_payload)

        assert outcome.comment_id is None
        assert outcome.failed is True

    def test_no_comment_mode(self, github_client, pr_payload, output_file) -> None:
        """Test comment posting can be turned off."""
        outcome = EvidenceGate(github_client).run("octo", "widgets", RuleConfig(), pr_data=pr_payload, post_comment=False)

        assert outcome.failed is False
        github_client.create_issue_comment.assert_not_called()
        github_client.update_issue_comment.assert_not_called()
        github_client.get_issue_comments.assert_not_called()

    def test_summary_written(self, github_client, pr_payload, output_file, tmp_path, monkeypatch) -> None:
        """Test the rendered verdict is appended to the job summary."""
        summary = tmp_path / "summary.md"
        monkeypatch.setenv("GITHUB_STEP_SUMMARY", str(summary))

        EvidenceGate(github_client).run("octo", "widgets", RuleConfig(), pr_data=pr_payload)

        assert "All Checks Passed" in summary.read_text(encoding="utf-8")

    def test_collaborator_failure_aborts_without_outputs(self, github_client, pr_payload, output_file) -> None:
        """Test no partial verdict is emitted when required data is unavailable."""
        github_client.get_check_runs.side_effect = requests.ConnectionError("down")

        with pytest.raises(CollaboratorError):
            EvidenceGate(github_client).run("octo", "widgets", RuleConfig(require_tests=True), pr_data=pr_payload)

        assert output_file.read_text(encoding="utf-8") == ""
        github_client.create_issue_comment.assert_not_called()

    def test_invalid_config_rejected_before_fetching(self, github_client, pr_payload) -> None:
        """Test configuration errors surface before any API call."""
        config = RuleConfig.model_construct(min_approvals=-2)

        with pytest.raises(ConfigurationError):
            EvidenceGate(github_client).run("octo", "widgets", config, pr_data=pr_payload)

        github_client.get_issue_comments.assert_not_called()
