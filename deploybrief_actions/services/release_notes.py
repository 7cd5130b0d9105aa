"""Release notes generation between two tags."""

from collections.abc import Sequence
from datetime import UTC, datetime

import requests

from ..exceptions import ActionError, CollaboratorError
from ..github.client import GitHubAPIClient
from ..models import Commit, MergedPullRequest
from ..models.release import UNKNOWN_AUTHOR
from ..utils import get_logger

logger = get_logger(__name__)

LABEL_CATEGORIES = {
    "feature": "✨ Features",
    "enhancement": "🚀 Enhancements",
    "bug": "🐛 Bug Fixes",
    "bugfix": "🐛 Bug Fixes",
    "fix": "🐛 Bug Fixes",
    "documentation": "📚 Documentation",
    "docs": "📚 Documentation",
    "performance": "⚡ Performance",
    "perf": "⚡ Performance",
    "security": "🔒 Security",
    "dependencies": "📦 Dependencies",
    "deps": "📦 Dependencies",
    "breaking": "💥 Breaking Changes",
    "breaking-change": "💥 Breaking Changes",
}
OTHER_CHANGES = "🔧 Other Changes"
SECTION_ORDER = (
    "💥 Breaking Changes",
    "✨ Features",
    "🚀 Enhancements",
    "🐛 Bug Fixes",
    "🔒 Security",
    "⚡ Performance",
    "📚 Documentation",
    "📦 Dependencies",
    OTHER_CHANGES,
)


class ReleaseData:
    """Everything collected for one release."""

    def __init__(
        self,
        current_tag: str,
        previous_tag: str = "",
        commits: list[Commit] | None = None,
        pull_requests: list[MergedPullRequest] | None = None,
    ) -> None:
        self.current_tag = current_tag
        self.previous_tag = previous_tag
        self.commits = commits or []
        self.pull_requests = pull_requests or []


def section_for(pr: MergedPullRequest) -> str:
    """Section title of the first recognised label, or Other Changes."""
    for label in pr.labels:
        category = LABEL_CATEGORIES.get(label.lower())
        if category:
            return category
    return OTHER_CHANGES


def group_pull_requests_by_label(prs: Sequence[MergedPullRequest]) -> list[tuple[str, list[str]]]:
    """Group pull requests into titled sections, highest priority first."""
    sections: dict[str, list[MergedPullRequest]] = {}
    for pr in prs:
        sections.setdefault(section_for(pr), []).append(pr)

    return [
        (title, [pr.line for pr in sorted(sections[title], key=lambda pr: pr.number, reverse=True)])
        for title in SECTION_ORDER
        if sections.get(title)
    ]


def unique_contributors(commits: Sequence[Commit], prs: Sequence[MergedPullRequest]) -> list[str]:
    """Sorted commit authors and pull request authors."""
    names = {commit.author for commit in commits} | {pr.author for pr in prs}
    return sorted(name for name in names if name and name != UNKNOWN_AUTHOR)


def render_release_notes(
    data: ReleaseData,
    owner: str,
    repo: str,
    include_commit_details: bool = True,
    include_pr_details: bool = True,
    group_by_label: bool = True,
    server_url: str = "https://github.com",
    now: datetime | None = None,
) -> str:
    """Render release notes as markdown."""
    now = now or datetime.now(UTC)
    contributors = unique_contributors(data.commits, data.pull_requests)

    markdown = f"# 📋 Release Notes – {data.current_tag}\n\n"

    markdown += "## 📦 Overview\n\n"
    markdown += f"**Release**: {data.current_tag}\n"
    if data.previous_tag:
        markdown += f"**Previous Release**: {data.previous_tag}\n"
    markdown += f"**Date**: {now.date().isoformat()}\n"
    markdown += f"**Repository**: [{owner}/{repo}]({server_url}/{owner}/{repo})\n\n"

    markdown += "## 📊 Summary\n\n"
    markdown += f"- **Pull Requests**: {len(data.pull_requests)}\n"
    markdown += f"- **Commits**: {len(data.commits)}\n"
    markdown += f"- **Contributors**: {len(contributors)}\n\n"

    if include_pr_details and data.pull_requests:
        if group_by_label:
            for title, items in group_pull_requests_by_label(data.pull_requests):
                markdown += f"## {title}\n\n"
                markdown += "".join(f"{item}\n" for item in items)
                markdown += "\n"
        else:
            markdown += f"## 🔀 Pull Requests ({len(data.pull_requests)})\n\n"
            for pr in sorted(data.pull_requests, key=lambda pr: pr.number, reverse=True):
                markdown += f"{pr.line}\n"
            markdown += "\n"

    if include_commit_details and data.commits:
        markdown += f"## 📝 Commits ({len(data.commits)})\n\n"
        for commit in data.commits:
            markdown += f"- [`{commit.short_sha}`]({commit.url}) {commit.summary} - {commit.author}\n"
        markdown += "\n"

    if contributors:
        markdown += "## 👥 Contributors\n\n"
        markdown += "Thank you to all contributors:\n\n"
        markdown += "".join(f"- @{name}\n" for name in contributors)
        markdown += "\n"

    markdown += "---\n\n"
    markdown += f"_Release notes generated by [DeployBrief](https://deploybrief.com) on {now.isoformat()}_\n"

    return markdown


class ReleaseNotesGenerator:
    """Service collecting commits and merged pull requests between tags."""

    def __init__(self, github_client: GitHubAPIClient | None = None) -> None:
        self.github_client = github_client or GitHubAPIClient()

    def resolve_tags(self, owner: str, repo: str, tag_name: str = "", previous_tag: str = "") -> tuple[str, str]:
        """Fill in the current and previous tags from the repository when not given.

        Raises:
        ------
            ActionError: If no tag is given and the repository has none

        """
        current_tag = tag_name
        if not current_tag:
            logger.info("No tag specified, fetching latest tag...")
            tags = self.github_client.list_tags(owner, repo, per_page=1)
            if not tags:
                msg = "No tags found in repository"
                raise ActionError(msg)
            current_tag = tags[0]["name"]
            logger.info("Using latest tag: %s", current_tag)

        if not previous_tag:
            logger.info("No previous tag specified, fetching previous tag...")
            names = [tag["name"] for tag in self.github_client.list_tags(owner, repo)]
            if current_tag in names and names.index(current_tag) < len(names) - 1:
                previous_tag = names[names.index(current_tag) + 1]
                logger.info("Using previous tag: %s", previous_tag)
            else:
                logger.warning("No previous tag found, comparing against first commit")

        return current_tag, previous_tag

    def collect(
        self,
        owner: str,
        repo: str,
        tag_name: str = "",
        previous_tag: str = "",
        include_pr_details: bool = True,
    ) -> ReleaseData:
        """Collect release data.

        Args:
        ----
            owner: Repository owner
            repo: Repository name
            tag_name: Release tag, latest tag when empty
            previous_tag: Tag to compare against, the one before ``tag_name`` when empty
            include_pr_details: Look up merged pull requests for each commit

        Returns:
        -------
            Release data

        """
        try:
            current_tag, previous_tag = self.resolve_tags(owner, repo, tag_name, previous_tag)
            logger.info("Comparing %s ... %s", previous_tag or "initial commit", current_tag)

            commits = []
            if previous_tag:
                comparison = self.github_client.compare_commits(owner, repo, previous_tag, current_tag)
                commits = [Commit.from_github_data(commit) for commit in comparison.get("commits", [])]
            logger.info("Found %d commits", len(commits))

            pull_requests: list[MergedPullRequest] = []
            if include_pr_details:
                logger.info("Fetching merged pull requests...")
                seen = set()
                for commit in commits:
                    for pr_data in self.github_client.get_pull_requests_for_commit(owner, repo, commit.sha):
                        if pr_data.get("merged_at") and pr_data["number"] not in seen:
                            seen.add(pr_data["number"])
                            pull_requests.append(MergedPullRequest.from_github_data(pr_data))
                logger.info("Found %d merged pull requests", len(pull_requests))
        except requests.RequestException as e:
            raise CollaboratorError("collect release data", e) from e

        return ReleaseData(current_tag, previous_tag, commits, pull_requests)
