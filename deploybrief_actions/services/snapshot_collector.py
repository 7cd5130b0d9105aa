"""Collects everything the rule engine needs for one pull request."""

from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime
from typing import Any

import requests

from ..exceptions import CollaboratorError
from ..github.client import GitHubAPIClient
from ..models import CheckRun, ExistingComment, PullRequestSnapshot, Review, RuleConfig
from ..utils import get_logger

logger = get_logger(__name__)

# Reviews that set a reviewer's standing; COMMENTED and PENDING leave it unchanged
STATE_BEARING_REVIEWS = frozenset({"APPROVED", "CHANGES_REQUESTED", "DISMISSED"})


def count_approvals(reviews: Iterable[Review]) -> int:
    """Count reviewers whose latest state-bearing review is an approval.

    Args:
    ----
        reviews: Review events in any order

    Returns:
    -------
        Number of distinct approving reviewers

    """
    never = datetime.min.replace(tzinfo=UTC)
    ordered = sorted(reviews, key=lambda review: review.submitted_at or never)

    latest: dict[str, str] = {}
    for review in ordered:
        if review.state in STATE_BEARING_REVIEWS:
            latest[review.reviewer] = review.state

    return sum(1 for state in latest.values() if state == "APPROVED")


class CollectedPullRequest:
    """Snapshot plus the collaborator data fetched alongside it."""

    def __init__(
        self,
        snapshot: PullRequestSnapshot,
        check_runs: list[CheckRun] | None = None,
        comments: list[ExistingComment] | None = None,
    ) -> None:
        self.snapshot = snapshot
        self.check_runs = check_runs
        self.comments = comments

    @property
    def comment_bodies(self) -> list[str] | None:
        if self.comments is None:
            return None
        return [comment.body for comment in self.comments]


class SnapshotCollector:
    """Service for collecting pull request data from GitHub."""

    def __init__(self, github_client: GitHubAPIClient | None = None, github_token: str | None = None) -> None:
        """Initialize snapshot collector.

        Args:
        ----
            github_client: Client to use, created from the token when omitted
            github_token: GitHub token

        """
        self.github_client = github_client or GitHubAPIClient(github_token)

    def collect(
        self,
        owner: str,
        repo: str,
        config: RuleConfig,
        pr_number: int | None = None,
        pr_data: dict[str, Any] | None = None,
        need_comments: bool = True,
    ) -> CollectedPullRequest:
        """Collect the snapshot, check runs and comments for a pull request.

        Reads needed by an enabled rule raise ``CollaboratorError`` on failure.
        A failed comment listing is tolerated when no rule needs the comments.

        Args:
        ----
            owner: Repository owner
            repo: Repository name
            config: Rule configuration deciding which reads are required
            pr_number: Pull request number, used when ``pr_data`` is not given
            pr_data: Pull request payload from the triggering event
            need_comments: List existing comments even when no rule needs them

        Returns:
        -------
            Collected pull request data

        """
        if pr_data is None:
            if pr_number is None:
                msg = "Either pr_number or pr_data is required"
                raise ValueError(msg)
            pr_data = self._fetch("fetch pull request", self.github_client.get_pull_request, owner, repo, pr_number)

        number = pr_data["number"]
        approval_count = 0
        if config.min_approvals > 0:
            reviews = self._fetch(
                "fetch pull request reviews", self.github_client.get_pull_request_reviews, owner, repo, number
            )
            approval_count = count_approvals(Review.from_github_data(review) for review in reviews)
            logger.info("PR #%d has %d approval(s)", number, approval_count)

        snapshot = PullRequestSnapshot.from_github_data(pr_data, approval_count=approval_count)

        with ThreadPoolExecutor(max_workers=2) as executor:
            comments_future = None
            if need_comments or config.require_evidence_attachments:
                comments_future = executor.submit(self.github_client.get_issue_comments, owner, repo, number)
            checks_future = None
            if config.require_tests:
                checks_future = executor.submit(self.github_client.get_check_runs, owner, repo, snapshot.head_sha)

            comments = None
            if comments_future is not None:
                comments = self._comments_result(comments_future, required=config.require_evidence_attachments)
            check_runs = None
            if checks_future is not None:
                try:
                    check_runs = [CheckRun.from_github_data(run) for run in checks_future.result()]
                except requests.RequestException as e:
                    raise CollaboratorError("fetch check runs", e) from e
                logger.info("Found %d check runs for %s", len(check_runs), snapshot.head_sha[:7])

        return CollectedPullRequest(snapshot, check_runs=check_runs, comments=comments)

    @staticmethod
    def _comments_result(future: Any, required: bool) -> list[ExistingComment] | None:  # noqa: ANN401
        try:
            comments = [ExistingComment.from_github_data(comment) for comment in future.result()]
        except requests.RequestException as e:
            if required:
                raise CollaboratorError("fetch pull request comments", e) from e
            logger.warning("Could not list PR comments: %s", e)
            return None
        logger.info("Found %d comments", len(comments))
        return comments

    @staticmethod
    def _fetch(operation: str, func: Any, *args: Any) -> Any:  # noqa: ANN401
        try:
            return func(*args)
        except requests.RequestException as e:
            raise CollaboratorError(operation, e) from e
