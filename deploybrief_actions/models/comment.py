"""Pull request comment model."""

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

BOT_USER_TYPE = "Bot"


class ExistingComment(BaseModel):
    """Issue comment already present on a pull request."""

    model_config = ConfigDict(frozen=True)

    id: int
    author_is_automation: bool = False
    body: str = ""

    @field_validator("body", mode="before")
    @classmethod
    def _none_as_empty(cls, value: str | None) -> str:
        return value or ""

    @classmethod
    def from_github_data(cls, github_data: dict[str, Any]) -> "ExistingComment":
        """Create comment from GitHub API data."""
        user = github_data.get("user") or {}
        return cls(
            id=github_data["id"],
            author_is_automation=user.get("type") == BOT_USER_TYPE,
            body=github_data.get("body"),
        )
