"""Pull request review model."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class Review(BaseModel):
    """A single submitted review event."""

    model_config = ConfigDict(frozen=True)

    reviewer: str
    state: str
    submitted_at: datetime | None = None

    @field_validator("state", mode="before")
    @classmethod
    def _upper_state(cls, value: str) -> str:
        return (value or "").upper()

    @classmethod
    def from_github_data(cls, github_data: dict[str, Any]) -> "Review":
        """Create review from GitHub API data."""
        user = github_data.get("user") or {}
        return cls(
            reviewer=user.get("login", "ghost"),
            state=github_data.get("state"),
            submitted_at=github_data.get("submitted_at"),
        )
