"""Pull request snapshot model."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PullRequestSnapshot(BaseModel):
    """Read-only view of a pull request for one evidence gate evaluation."""

    model_config = ConfigDict(frozen=True)

    number: int
    title: str = ""
    body: str = ""
    labels: frozenset[str] = frozenset()
    head_sha: str = ""
    approval_count: int = Field(0, ge=0)
    draft: bool = False

    @field_validator("body", "title", mode="before")
    @classmethod
    def _none_as_empty(cls, value: str | None) -> str:
        return value or ""

    @field_validator("labels", mode="before")
    @classmethod
    def _normalize_labels(cls, value: Any) -> frozenset[str]:  # noqa: ANN401
        """Label objects from the REST API and plain names both become names."""
        if value is None:
            return frozenset()
        names = set()
        for label in value:
            name = label.get("name") if isinstance(label, dict) else label
            if name:
                names.add(name)
        return frozenset(names)

    def __repr__(self) -> str:
        return f"<PullRequestSnapshot(number={self.number}, title='{self.title[:50]}')>"

    @classmethod
    def from_github_data(cls, github_data: dict[str, Any], approval_count: int = 0) -> "PullRequestSnapshot":
        """Create snapshot from GitHub API or event payload data."""
        return cls(
            number=github_data["number"],
            title=github_data.get("title"),
            body=github_data.get("body"),
            labels=github_data.get("labels") or [],
            head_sha=(github_data.get("head") or {}).get("sha", ""),
            approval_count=approval_count,
            draft=bool(github_data.get("draft", False)),
        )
