"""Violation and verdict models produced by the rule engine."""

import json
from enum import Enum

from pydantic import BaseModel, ConfigDict, computed_field


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class RuleId(str, Enum):
    """Rule identifiers, declared in canonical reporting order."""

    BLOCKED_LABELS = "blocked-labels"
    REQUIRED_LABELS = "required-labels"
    REQUIRE_DESCRIPTION = "require-description"
    REQUIRE_LINKED_ISSUE = "require-linked-issue"
    REQUIRE_EVIDENCE_ATTACHMENTS = "require-evidence-attachments"
    REQUIRE_TESTS = "require-tests"
    MIN_APPROVALS = "min-approvals"

    @property
    def order(self) -> int:
        return list(RuleId).index(self)


class Violation(BaseModel):
    """One reported rule failure."""

    model_config = ConfigDict(frozen=True)

    rule: RuleId
    message: str
    severity: Severity = Severity.ERROR

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR


class Verdict(BaseModel):
    """Aggregate decision for one evaluation."""

    model_config = ConfigDict(frozen=True)

    violations: tuple[Violation, ...] = ()

    @computed_field
    @property
    def passed(self) -> bool:
        return not any(violation.is_error for violation in self.violations)

    @property
    def errors(self) -> list[Violation]:
        return [violation for violation in self.violations if violation.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[Violation]:
        return [violation for violation in self.violations if violation.severity is Severity.WARNING]

    @property
    def violation_count(self) -> int:
        return len(self.violations)

    @property
    def result(self) -> str:
        return "passed" if self.passed else "failed"

    def to_outputs(self) -> dict[str, str]:
        """Serialize to the action's output values."""
        return {
            "validation-result": self.result,
            "violations": json.dumps([violation.model_dump(mode="json") for violation in self.violations]),
            "violation-count": str(self.violation_count),
        }
