"""Unit tests for release notes generation."""

from datetime import UTC, datetime
from unittest.mock import Mock

import pytest
import requests

from deploybrief_actions.exceptions import ActionError, CollaboratorError
from deploybrief_actions.models import Commit, MergedPullRequest
from deploybrief_actions.services.release_notes import (
    OTHER_CHANGES,
    ReleaseData,
    ReleaseNotesGenerator,
    group_pull_requests_by_label,
    render_release_notes,
    unique_contributors,
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


def pr(number: int, labels: tuple[str, ...] = (), author: str = "ada") -> MergedPullRequest:
    return MergedPullRequest(
        number=number,
        title=f"Change {number}",
        html_url=f"https://github.com/octo/widgets/pull/{number}",
        merged_at="2024-05-01T00:00:00Z",
        labels=labels,
        author=author,
    )


def commit(sha: str, message: str, author: str = "Ada") -> Commit:
    return Commit(sha=sha, message=message, author=author, url=f"https://github.com/octo/widgets/commit/{sha}")


class TestGrouping:
    """Test label grouping."""

    def test_sections_in_priority_order(self) -> None:
        """Test sections follow the fixed priority, PRs newest first."""
        prs = [pr(1, ("docs",)), pr(2, ("bug",)), pr(3, ("Feature",)), pr(4, ("breaking-change",)), pr(5, ("fix",))]

        sections = group_pull_requests_by_label(prs)

        assert [title for title, _ in sections] == [
            "💥 Breaking Changes",
            "✨ Features",
            "🐛 Bug Fixes",
            "📚 Documentation",
        ]
        bug_fixes = dict(sections)["🐛 Bug Fixes"]
        assert bug_fixes[0].startswith("- **[#5]")
        assert bug_fixes[1].startswith("- **[#2]")

    def test_first_recognised_label_wins(self) -> None:
        """Test unknown labels are skipped and the first known one is used."""
        sections = group_pull_requests_by_label([pr(1, ("needs-triage", "security", "bug"))])

        assert [title for title, _ in sections] == ["🔒 Security"]

    def test_unlabelled_goes_to_other(self) -> None:
        """Test PRs without a known label land in Other Changes."""
        sections = group_pull_requests_by_label([pr(1), pr(2, ("chore",))])

        assert sections == [(OTHER_CHANGES, [pr(2, ("chore",)).line, pr(1).line])]


class TestRenderReleaseNotes:
    """Test markdown rendering."""

    def test_contributors_are_unique_and_sorted(self) -> None:
        """Test commit and PR authors are merged, Unknown dropped."""
        commits = [commit("a" * 40, "x", "zoe"), commit("b" * 40, "y", "Unknown")]
        prs = [pr(1, author="ada"), pr(2, author="zoe")]

        assert unique_contributors(commits, prs) == ["ada", "zoe"]

    def test_full_document(self) -> None:
        """Test every section is rendered."""
        data = ReleaseData(
            "v1.1.0",
            "v1.0.0",
            commits=[commit("0123456789abcdef", "Add export\n\nDetails", "ada")],
            pull_requests=[pr(7, ("feature",), "ada")],
        )

        notes = render_release_notes(data, "octo", "widgets", now=NOW)

        assert notes.startswith("# 📋 Release Notes – v1.1.0\n")
        assert "**Previous Release**: v1.0.0" in notes
        assert "**Date**: 2024-06-01" in notes
        assert "**Repository**: [octo/widgets](https://github.com/octo/widgets)" in notes
        assert "- **Pull Requests**: 1" in notes
        assert "- **Contributors**: 1" in notes
        assert "## ✨ Features" in notes
        assert "- [`0123456`](https://github.com/octo/widgets/commit/0123456789abcdef) Add export - ada" in notes
        assert "- @ada" in notes
        assert notes.endswith(f"on {NOW.isoformat()}_\n")

    def test_flat_pull_request_list(self) -> None:
        """Test ungrouped PRs are listed newest first."""
        data = ReleaseData("v2", "v1", pull_requests=[pr(3), pr(9)])

        notes = render_release_notes(data, "octo", "widgets", group_by_label=False, now=NOW)

        assert "## 🔀 Pull Requests (2)" in notes
        assert notes.index("[#9]") < notes.index("[#3]")

    def test_details_can_be_disabled(self) -> None:
        """Test commit and PR sections are optional."""
        data = ReleaseData("v2", "v1", commits=[commit("abcdef123", "x")], pull_requests=[pr(1)])

        notes = render_release_notes(data, "octo", "widgets", include_commit_details=False, include_pr_details=False, now=NOW)

        assert "## 📝 Commits" not in notes
        assert "[#1]" not in notes
        assert "- **Commits**: 1" in notes


class TestReleaseNotesGenerator:
    """Test release data collection."""

    def setup_method(self) -> None:
        """Set up test fixtures."""
        self.client = Mock()
        self.client.list_tags.return_value = [{"name": "v1.1.0"}, {"name": "v1.0.0"}]
        self.client.compare_commits.return_value = {
            "commits": [
                {"sha": "c1", "html_url": "u1", "commit": {"message": "one", "author": {"name": "ada"}}},
                {"sha": "c2", "html_url": "u2", "commit": {"message": "two", "author": {"name": "bob"}}},
            ],
        }
        self.client.get_pull_requests_for_commit.side_effect = lambda owner, repo, sha: {
            "c1": [{"number": 5, "title": "Five", "merged_at": "2024-05-01", "labels": [], "user": {"login": "ada"}}],
            "c2": [
                {"number": 5, "title": "Five", "merged_at": "2024-05-01", "labels": [], "user": {"login": "ada"}},
                {"number": 6, "title": "Open", "merged_at": None, "labels": [], "user": {"login": "bob"}},
            ],
        }[sha]
        self.generator = ReleaseNotesGenerator(self.client)

    def test_resolves_latest_and_previous_tags(self) -> None:
        """Test both tags are discovered when not given."""
        data = self.generator.collect("octo", "widgets")

        assert data.current_tag == "v1.1.0"
        assert data.previous_tag == "v1.0.0"
        self.client.compare_commits.assert_called_once_with("octo", "widgets", "v1.0.0", "v1.1.0")

    def test_merged_prs_deduplicated(self) -> None:
        """Test PRs are merged-only and unique by number."""
        data = self.generator.collect("octo", "widgets", "v1.1.0", "v1.0.0")

        assert [p.number for p in data.pull_requests] == [5]
        assert [c.sha for c in data.commits] == ["c1", "c2"]

    def test_no_previous_tag_means_no_commits(self) -> None:
        """Test the oldest tag has nothing to compare against."""
        data = self.generator.collect("octo", "widgets", tag_name="v1.0.0")

        assert data.previous_tag == ""
        assert data.commits == []
        self.client.compare_commits.assert_not_called()

    def test_repository_without_tags(self) -> None:
        """Test a repository with no tags is an error."""
        self.client.list_tags.return_value = []

        with pytest.raises(ActionError, match="No tags found"):
            self.generator.collect("octo", "widgets")

    def test_api_failure_wrapped(self) -> None:
        """Test HTTP errors become collaborator errors."""
        self.client.compare_commits.side_effect = requests.HTTPError("404")

        with pytest.raises(CollaboratorError):
            self.generator.collect("octo", "widgets", "v1.1.0", "v1.0.0")
