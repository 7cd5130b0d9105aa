"""Check run model."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class CheckConclusion(str, Enum):
    """Conclusions GitHub documents for a check run. Others may appear."""

    SUCCESS = "success"
    FAILURE = "failure"
    NEUTRAL = "neutral"
    CANCELLED = "cancelled"
    SKIPPED = "skipped"
    TIMED_OUT = "timed_out"
    ACTION_REQUIRED = "action_required"
    STALE = "stale"


FAILING_CONCLUSIONS = frozenset({CheckConclusion.FAILURE.value, CheckConclusion.CANCELLED.value})


class CheckRun(BaseModel):
    """CI result for the pull request head commit. A ``None`` conclusion means still running.

    Unrecognised conclusions such as ``startup_failure`` are kept as given and
    never count as failing.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    conclusion: str | None = None

    @property
    def is_test(self) -> bool:
        return "test" in self.name.lower()

    @property
    def is_failing(self) -> bool:
        return self.conclusion in FAILING_CONCLUSIONS

    @classmethod
    def from_github_data(cls, github_data: dict[str, Any]) -> "CheckRun":
        """Create check run from GitHub API data."""
        return cls(name=github_data["name"], conclusion=github_data.get("conclusion"))
