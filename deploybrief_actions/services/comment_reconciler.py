"""Idempotent status comment for evidence gate verdicts."""

from collections.abc import Callable, Sequence

from ..models import ExistingComment, Verdict, Violation
from ..utils import get_logger

logger = get_logger(__name__)

COMMENT_MARKER = "<!-- deploybrief-evidence-gate -->"
COMMENT_TITLE = "## 🛡️ Evidence Gate Validation"
FOOTER_LINK = "[DeployBrief Evidence Gate](https://deploybrief.com)"


def _violation_lines(violations: Sequence[Violation]) -> str:
    return "".join(f"- **{violation.rule.value}**: {violation.message}\n" for violation in violations)


def render_comment_body(verdict: Verdict, marker: str = COMMENT_MARKER) -> str:
    """Render a verdict as the markdown status comment."""
    body = f"{marker}\n{COMMENT_TITLE}\n\n"

    if verdict.passed:
        body += "### ✅ All Checks Passed\n\n"
        body += "This pull request meets all required evidence and quality standards.\n\n"
        if verdict.warnings:
            body += "#### ⚠️ Warnings\n\n"
            body += _violation_lines(verdict.warnings)
            body += "\n"
        body += "---\n"
        body += f"_Validation performed by {FOOTER_LINK}_\n"
        return body

    body += "### ❌ Validation Failed\n\n"
    body += f"Found {verdict.violation_count} violation(s) that must be resolved:\n\n"

    if verdict.errors:
        body += "#### ❌ Errors\n\n"
        body += _violation_lines(verdict.errors)
        body += "\n"

    if verdict.warnings:
        body += "#### ⚠️ Warnings\n\n"
        body += _violation_lines(verdict.warnings)
        body += "\n"

    body += "---\n"
    body += f"_Please resolve these issues before merging. Validation performed by {FOOTER_LINK}_\n"
    return body


class CommentReconciler:
    """Keeps exactly one live status comment per pull request."""

    def __init__(self, marker: str = COMMENT_MARKER) -> None:
        self.marker = marker

    def find_status_comment(self, existing_comments: Sequence[ExistingComment]) -> ExistingComment | None:
        """Return the most recent status comment left by automation, if any."""
        matches = [
            comment
            for comment in existing_comments
            if comment.author_is_automation and self.marker in comment.body
        ]
        return matches[-1] if matches else None

    def reconcile(
        self,
        pr_number: int,
        verdict: Verdict,
        existing_comments: Sequence[ExistingComment],
        post: Callable[[str], int],
        update: Callable[[int, str], None],
    ) -> int | None:
        """Create or update the status comment for a verdict.

        Args:
        ----
            pr_number: Pull request the comment belongs to
            verdict: Verdict to render
            existing_comments: Comments currently on the pull request, oldest first
            post: Creates a comment and returns its id
            update: Replaces the body of the comment with the given id

        Returns:
        -------
            Id of the comment written, or None if writing failed

        """
        body = render_comment_body(verdict, self.marker)
        existing = self.find_status_comment(existing_comments)

        try:
            if existing is not None:
                update(existing.id, body)
                logger.info("Updated status comment %d on PR #%d", existing.id, pr_number)
                return existing.id

            comment_id = post(body)
            logger.info("Posted status comment %s on PR #%d", comment_id, pr_number)
            return comment_id
        except Exception as e:
            # The verdict stands regardless of whether feedback could be written
            logger.warning("Failed to post PR comment: %s", e)
            return None
