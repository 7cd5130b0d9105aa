"""GitHub REST API access."""

from .client import GitHubAPIClient

__all__ = ["GitHubAPIClient"]
