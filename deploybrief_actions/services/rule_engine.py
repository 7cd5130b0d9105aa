"""Evidence gate rule engine.

Each rule is a plain function of the snapshot, the rule configuration and the
optional collaborator data. Rules never depend on one another; the engine
collects whatever they report and sorts it into the canonical order declared
by ``RuleId`` before building the verdict.
"""

import re
from collections.abc import Callable, Sequence

from ..exceptions import ConfigurationError
from ..models import CheckRun, PullRequestSnapshot, RuleConfig, RuleId, Severity, Verdict, Violation
from ..utils import get_logger

logger = get_logger(__name__)

# "fixes #12", "Closes #3" or a bare "#123" anywhere in the text
ISSUE_REFERENCE_PATTERN = re.compile(r"(close[sd]?|fix(es|ed)?|resolve[sd]?)\s+#\d+|#\d+", re.IGNORECASE)
MARKDOWN_IMAGE_PATTERN = re.compile(r"!\[.*?\]\(.*?\)")
HTML_ATTACHMENT_PATTERN = re.compile(r"<img|<a.*?href.*?download", re.IGNORECASE)

LINKED_ISSUE_GUIDANCE = 'PR is not linked to an issue (use "fixes #123" or "#123" in description)'
MISSING_EVIDENCE_GUIDANCE = (
    "No evidence attachments found. Please attach screenshots, documents, "
    "or other evidence in the PR description or comments"
)


class RuleContext:
    """Inputs shared by every rule in one evaluation."""

    def __init__(
        self,
        snapshot: PullRequestSnapshot,
        config: RuleConfig,
        check_runs: Sequence[CheckRun] | None = None,
        comments: Sequence[str] | None = None,
    ) -> None:
        self.snapshot = snapshot
        self.config = config
        self.check_runs = check_runs
        self.comments = comments


Rule = Callable[[RuleContext], list[Violation]]


def _format_labels(labels: set[str] | frozenset[str]) -> str:
    return ", ".join(sorted(labels))


def _is_blank(text: str) -> bool:
    # str.strip() leaves the BOM alone; JavaScript-style trim removes it
    return not text.replace("\ufeff", " ").strip()


def check_required_labels(ctx: RuleContext) -> list[Violation]:
    missing = ctx.config.required_labels - ctx.snapshot.labels
    if missing:
        return [Violation(rule=RuleId.REQUIRED_LABELS, message=f"Missing required labels: {_format_labels(missing)}")]
    if ctx.config.required_labels:
        logger.info("✓ All required labels present: %s", _format_labels(ctx.config.required_labels))
    return []


def check_blocked_labels(ctx: RuleContext) -> list[Violation]:
    present = ctx.config.blocked_labels & ctx.snapshot.labels
    if present:
        return [Violation(rule=RuleId.BLOCKED_LABELS, message=f"PR has blocking labels: {_format_labels(present)}")]
    if ctx.config.blocked_labels:
        logger.info("✓ No blocking labels found")
    return []


def check_description(ctx: RuleContext) -> list[Violation]:
    if not ctx.config.require_description:
        return []
    if _is_blank(ctx.snapshot.body):
        return [Violation(rule=RuleId.REQUIRE_DESCRIPTION, message="PR description is empty")]
    logger.info("✓ PR has description (%d characters)", len(ctx.snapshot.body))
    return []


def has_issue_reference(text: str) -> bool:
    """Return True if the text links an issue, e.g. ``Fixes #42`` or ``#42``."""
    return ISSUE_REFERENCE_PATTERN.search(text) is not None


def check_linked_issue(ctx: RuleContext) -> list[Violation]:
    if not ctx.config.require_linked_issue:
        return []
    if not has_issue_reference(ctx.snapshot.body):
        return [Violation(rule=RuleId.REQUIRE_LINKED_ISSUE, message=LINKED_ISSUE_GUIDANCE)]
    logger.info("✓ PR is linked to an issue")
    return []


def has_evidence(text: str) -> bool:
    """Return True if the text embeds an image or a downloadable attachment."""
    return bool(MARKDOWN_IMAGE_PATTERN.search(text) or HTML_ATTACHMENT_PATTERN.search(text))


def check_evidence_attachments(ctx: RuleContext) -> list[Violation]:
    if not ctx.config.require_evidence_attachments:
        return []
    texts = [ctx.snapshot.body, *(ctx.comments or ())]
    if not any(has_evidence(text) for text in texts):
        return [Violation(rule=RuleId.REQUIRE_EVIDENCE_ATTACHMENTS, message=MISSING_EVIDENCE_GUIDANCE)]
    logger.info("✓ Evidence attachments found")
    return []


def check_tests(ctx: RuleContext) -> list[Violation]:
    if not ctx.config.require_tests:
        return []
    if ctx.check_runs is None:
        logger.info("Check runs not supplied, skipping %s", RuleId.REQUIRE_TESTS.value)
        return []

    test_checks = [run for run in ctx.check_runs if run.is_test]
    if not test_checks:
        return [Violation(rule=RuleId.REQUIRE_TESTS, message="No test checks found", severity=Severity.WARNING)]

    failed = [run for run in test_checks if run.is_failing]
    if failed:
        return [Violation(rule=RuleId.REQUIRE_TESTS, message=f"{len(failed)} test check(s) failed")]

    logger.info("✓ No failed test checks among %d", len(test_checks))
    return []


def check_min_approvals(ctx: RuleContext) -> list[Violation]:
    current, required = ctx.snapshot.approval_count, ctx.config.min_approvals
    if current < required:
        return [Violation(rule=RuleId.MIN_APPROVALS, message=f"Insufficient approvals: {current}/{required}")]
    if required:
        logger.info("✓ PR has %d/%d approvals", current, required)
    return []


DEFAULT_RULES: tuple[Rule, ...] = (
    check_required_labels,
    check_blocked_labels,
    check_description,
    check_linked_issue,
    check_evidence_attachments,
    check_tests,
    check_min_approvals,
)


class RuleEngine:
    """Evaluates a pull request snapshot against a rule configuration."""

    def __init__(self, rules: Sequence[Rule] = DEFAULT_RULES) -> None:
        self.rules = tuple(rules)

    @staticmethod
    def validate_config(config: RuleConfig) -> None:
        """Reject configuration that bypassed model validation.

        Raises:
        ------
            ConfigurationError: If the configuration cannot be evaluated

        """
        if config.min_approvals < 0:
            msg = f"min_approvals must be >= 0, got {config.min_approvals}"
            raise ConfigurationError(msg, input_name="min-approvals")

    def evaluate(
        self,
        snapshot: PullRequestSnapshot,
        config: RuleConfig,
        check_runs: Sequence[CheckRun] | None = None,
        comments: Sequence[str] | None = None,
    ) -> Verdict:
        """Evaluate every rule and build the verdict.

        Args:
        ----
            snapshot: Pull request under evaluation
            config: Rule configuration
            check_runs: Check runs for the head commit; ``None`` skips the tests rule
            comments: Existing comment bodies searched for evidence

        Returns:
        -------
            Verdict with violations in canonical order

        """
        self.validate_config(config)
        logger.info("Validating PR #%d: %s", snapshot.number, snapshot.title)

        ctx = RuleContext(snapshot, config, check_runs, comments)
        violations = [violation for rule in self.rules for violation in rule(ctx)]
        violations.sort(key=lambda violation: violation.rule.order)

        verdict = Verdict(violations=tuple(violations))
        log_verdict(verdict)
        return verdict


def log_verdict(verdict: Verdict) -> None:
    """Log a human-readable summary of the verdict."""
    if not verdict.violations:
        logger.info("✅ All validation checks passed!")
        return

    logger.info("⚠️ Found %d violation(s):", verdict.violation_count)
    for violation in verdict.violations:
        icon = "❌" if violation.is_error else "⚠️"
        logger.info("%s [%s] %s", icon, violation.rule.value, violation.message)


def evaluate(
    snapshot: PullRequestSnapshot,
    config: RuleConfig,
    check_runs: Sequence[CheckRun] | None = None,
    comments: Sequence[str] | None = None,
) -> Verdict:
    """Evaluate with the default rule set."""
    return RuleEngine().evaluate(snapshot, config, check_runs, comments)
