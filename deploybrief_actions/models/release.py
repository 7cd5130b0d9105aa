"""Release notes data models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

UNKNOWN_AUTHOR = "Unknown"


class Commit(BaseModel):
    """Commit between two release tags."""

    model_config = ConfigDict(frozen=True)

    sha: str
    message: str
    author: str = UNKNOWN_AUTHOR
    date: str = ""
    url: str = ""

    @property
    def short_sha(self) -> str:
        return self.sha[:7]

    @property
    def summary(self) -> str:
        return self.message.split("\n")[0]

    @classmethod
    def from_github_data(cls, github_data: dict[str, Any]) -> "Commit":
        """Create commit from a compare API entry."""
        author = github_data.get("commit", {}).get("author") or {}
        return cls(
            sha=github_data["sha"],
            message=github_data.get("commit", {}).get("message", ""),
            author=author.get("name") or UNKNOWN_AUTHOR,
            date=author.get("date") or "",
            url=github_data.get("html_url", ""),
        )


class MergedPullRequest(BaseModel):
    """Merged pull request included in a release."""

    model_config = ConfigDict(frozen=True)

    number: int
    title: str
    html_url: str = ""
    merged_at: str | None = None
    labels: tuple[str, ...] = ()
    author: str = UNKNOWN_AUTHOR

    @field_validator("labels", mode="before")
    @classmethod
    def _label_names(cls, value: Any) -> tuple[str, ...]:  # noqa: ANN401
        return tuple(label.get("name") or "" if isinstance(label, dict) else label for label in value or ())

    @property
    def line(self) -> str:
        return f"- **[#{self.number}]({self.html_url})** {self.title} by @{self.author}"

    @classmethod
    def from_github_data(cls, github_data: dict[str, Any]) -> "MergedPullRequest":
        """Create pull request from GitHub API data."""
        user = github_data.get("user") or {}
        return cls(
            number=github_data["number"],
            title=github_data.get("title") or "",
            html_url=github_data.get("html_url", ""),
            merged_at=github_data.get("merged_at"),
            labels=github_data.get("labels") or [],
            author=user.get("login") or UNKNOWN_AUTHOR,
        )
