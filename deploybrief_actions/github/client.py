"""GitHub API client for the DeployBrief actions."""

import threading
import time
from typing import Any
from urllib.parse import urljoin

import requests

from deploybrief_actions.config import get_github_headers, get_settings
from deploybrief_actions.utils import get_logger

logger = get_logger(__name__)


class GitHubAPIClient:
    """GitHub API client with rate limiting and error handling."""

    def __init__(self, access_token: str | None = None, base_url: str | None = None) -> None:
        """Initialize GitHub API client.

        Args:
        ----
            access_token: GitHub token for authentication
            base_url: REST API root, defaults to GITHUB_API_URL

        """
        settings = get_settings()
        self.access_token = access_token or settings.github_token
        self.base_url = (base_url or settings.github_api_url).rstrip("/") + "/"
        self.timeout = settings.github_request_timeout
        self.headers = get_github_headers(self.access_token)
        self._local = threading.local()
        self._lock = threading.Lock()

        if not self.access_token:
            logger.warning("No GitHub token provided, using unauthenticated requests")

        # Rate limiting
        self.rate_limit_remaining = 5000
        self.rate_limit_reset = None
        self.last_request_time = 0

        # Request delay to avoid hitting secondary rate limits
        self.request_delay = settings.github_request_delay

    @property
    def session(self) -> requests.Session:
        """Session for the calling thread; sessions are not shared across threads."""
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            session.headers.update(self.headers)
            self._local.session = session
        return session

    def _check_rate_limit(self) -> None:
        """Check rate limit status and wait if necessary."""
        with self._lock:
            self._wait_for_rate_limit()

    def _wait_for_rate_limit(self) -> None:
        if self.rate_limit_remaining is not None and self.rate_limit_remaining <= 0:
            if self.rate_limit_reset:
                wait_time = self.rate_limit_reset - time.time()
                if wait_time > 0:
                    logger.info("Rate limit exceeded, waiting %.1f seconds", wait_time)
                    time.sleep(wait_time + 1)
            else:
                logger.info("Rate limit exceeded, waiting 60 seconds")
                time.sleep(60)

        # Enforce minimum delay between requests
        time_since_last_request = time.time() - self.last_request_time
        if time_since_last_request < self.request_delay:
            time.sleep(self.request_delay - time_since_last_request)

        self.last_request_time = time.time()

    def _make_request(self, method: str, url: str, **kwargs: Any) -> requests.Response:  # noqa: ANN401
        """Make HTTP request with rate limiting and error handling.

        Args:
        ----
            method: HTTP method (GET, POST, etc.)
            url: Request URL
            **kwargs: Additional request parameters

        Returns:
        -------
            requests.Response: Response object

        Raises:
        ------
            requests.RequestException: If request fails

        """
        self._check_rate_limit()

        if not url.startswith(("http://", "https://")):
            url = urljoin(self.base_url, url.lstrip("/"))

        kwargs.setdefault("timeout", self.timeout)
        logger.debug("Making %s request to %s", method, url)

        try:
            response = self.session.request(method, url, **kwargs)

            with self._lock:
                if "X-RateLimit-Remaining" in response.headers:
                    self.rate_limit_remaining = int(response.headers["X-RateLimit-Remaining"])

                if "X-RateLimit-Reset" in response.headers:
                    self.rate_limit_reset = int(response.headers["X-RateLimit-Reset"])

            if response.status_code == 403 and "rate limit" in response.text.lower():
                logger.warning("Rate limit exceeded")
                self._check_rate_limit()
                response = self.session.request(method, url, **kwargs)

            response.raise_for_status()

            return response

        except requests.RequestException:
            logger.exception("%s %s failed", method, url)
            raise

    def _get_paginated_results(self, url: str, params: dict | None = None) -> list[dict]:
        """Get all results from paginated endpoint.

        Args:
        ----
            url: API endpoint URL
            params: Query parameters

        Returns:
        -------
            List of all results

        """
        all_results = []
        page = 1
        per_page = 100

        while True:
            request_params = params.copy() if params else {}
            request_params.update({
                "page": page,
                "per_page": per_page,
            })

            response = self._make_request("GET", url, params=request_params)
            results = response.json()

            if not results:
                break

            all_results.extend(results)

            # Fewer results than requested means this was the last page
            if len(results) < per_page:
                break

            page += 1

        return all_results

    def get_pull_request(self, owner: str, repo: str, pr_number: int) -> dict:
        """Get a single pull request.

        Args:
        ----
            owner: Repository owner
            repo: Repository name
            pr_number: Pull request number

        Returns:
        -------
            Pull request dictionary

        """
        url = f"/repos/{owner}/{repo}/pulls/{pr_number}"

        response = self._make_request("GET", url)
        return response.json()

    def get_pull_request_reviews(self, owner: str, repo: str, pr_number: int) -> list[dict]:
        """Get submitted reviews for a pull request, oldest first."""
        url = f"/repos/{owner}/{repo}/pulls/{pr_number}/reviews"

        return self._get_paginated_results(url)

    def get_check_runs(self, owner: str, repo: str, ref: str) -> list[dict]:
        """Get check runs for a commit.

        Args:
        ----
            owner: Repository owner
            repo: Repository name
            ref: Commit SHA, branch or tag

        Returns:
        -------
            List of check run dictionaries

        """
        url = f"/repos/{owner}/{repo}/commits/{ref}/check-runs"

        response = self._make_request("GET", url, params={"per_page": 100})
        return response.json().get("check_runs", [])

    def get_issue_comments(self, owner: str, repo: str, issue_number: int) -> list[dict]:
        """Get issue comments for a pull request (treated as issue).

        Args:
        ----
            owner: Repository owner
            repo: Repository name
            issue_number: Issue/PR number

        Returns:
        -------
            List of issue comment dictionaries

        """
        url = f"/repos/{owner}/{repo}/issues/{issue_number}/comments"

        return self._get_paginated_results(url)

    def create_issue_comment(self, owner: str, repo: str, issue_number: int, body: str) -> dict:
        """Create a comment on an issue or pull request.

        Returns
        -------
            Created comment dictionary

        """
        url = f"/repos/{owner}/{repo}/issues/{issue_number}/comments"

        response = self._make_request("POST", url, json={"body": body})
        return response.json()

    def update_issue_comment(self, owner: str, repo: str, comment_id: int, body: str) -> dict:
        """Replace the body of an existing issue comment.

        Returns
        -------
            Updated comment dictionary

        """
        url = f"/repos/{owner}/{repo}/issues/comments/{comment_id}"

        response = self._make_request("PATCH", url, json={"body": body})
        return response.json()

    def list_tags(self, owner: str, repo: str, per_page: int = 100) -> list[dict]:
        """List repository tags, newest first (single page)."""
        url = f"/repos/{owner}/{repo}/tags"

        response = self._make_request("GET", url, params={"per_page": per_page})
        return response.json()

    def compare_commits(self, owner: str, repo: str, base: str, head: str) -> dict:
        """Compare two refs.

        Args:
        ----
            owner: Repository owner
            repo: Repository name
            base: Base ref (older tag)
            head: Head ref (newer tag)

        Returns:
        -------
            Comparison dictionary including ``commits``

        """
        url = f"/repos/{owner}/{repo}/compare/{base}...{head}"

        response = self._make_request("GET", url)
        return response.json()

    def get_pull_requests_for_commit(self, owner: str, repo: str, commit_sha: str) -> list[dict]:
        """Get pull requests associated with a commit."""
        url = f"/repos/{owner}/{repo}/commits/{commit_sha}/pulls"

        response = self._make_request("GET", url)
        return response.json()
