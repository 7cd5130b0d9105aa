"""Evidence gate rule configuration model."""

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RuleConfig(BaseModel):
    """Declarative rule configuration for one evidence gate run."""

    model_config = ConfigDict(frozen=True)

    required_labels: frozenset[str] = frozenset()
    blocked_labels: frozenset[str] = frozenset()
    require_description: bool = False
    require_linked_issue: bool = False
    require_evidence_attachments: bool = False
    require_tests: bool = False
    min_approvals: int = Field(0, ge=0)
    fail_on_violation: bool = True

    @field_validator("required_labels", "blocked_labels", mode="before")
    @classmethod
    def _parse_labels(cls, value: object) -> frozenset[str]:
        """Accept a comma-separated string or an iterable of label names."""
        if value is None:
            return frozenset()
        if isinstance(value, str):
            value = value.split(",")
        if not isinstance(value, Iterable):
            msg = f"expected a label list, got {type(value).__name__}"
            raise ValueError(msg)

        labels = set()
        for label in value:
            if not isinstance(label, str):
                msg = f"label names must be strings, got {label!r}"
                raise ValueError(msg)
            if label.strip():
                labels.add(label.strip())
        return frozenset(labels)
