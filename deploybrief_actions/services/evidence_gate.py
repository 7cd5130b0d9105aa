"""Evidence gate action: collect, evaluate, give feedback, decide."""

from typing import Any

from ..github.client import GitHubAPIClient
from ..models import RuleConfig, Verdict
from ..utils import append_summary, get_logger, set_outputs
from .comment_reconciler import CommentReconciler, render_comment_body
from .rule_engine import RuleEngine
from .snapshot_collector import SnapshotCollector

logger = get_logger(__name__)


def should_fail(verdict: Verdict, config: RuleConfig) -> bool:
    """Whether the run must be reported as failed."""
    return not verdict.passed and config.fail_on_violation


def failure_message(verdict: Verdict) -> str:
    return f"Evidence gate validation failed with {verdict.violation_count} violation(s)"


class GateOutcome:
    """Result of one evidence gate run."""

    def __init__(self, verdict: Verdict, failed: bool, comment_id: int | None = None) -> None:
        self.verdict = verdict
        self.failed = failed
        self.comment_id = comment_id

    @property
    def message(self) -> str:
        return failure_message(self.verdict) if self.failed else "Evidence gate validation passed"


class EvidenceGate:
    """Runs the evidence gate for one pull request."""

    def __init__(
        self,
        github_client: GitHubAPIClient | None = None,
        engine: RuleEngine | None = None,
        reconciler: CommentReconciler | None = None,
    ) -> None:
        self.github_client = github_client or GitHubAPIClient()
        self.collector = SnapshotCollector(self.github_client)
        self.engine = engine or RuleEngine()
        self.reconciler = reconciler or CommentReconciler()

    def run(
        self,
        owner: str,
        repo: str,
        config: RuleConfig,
        pr_data: dict[str, Any] | None = None,
        pr_number: int | None = None,
        post_comment: bool = True,
    ) -> GateOutcome:
        """Validate a pull request and report the result.

        Args:
        ----
            owner: Repository owner
            repo: Repository name
            config: Rule configuration
            pr_data: Pull request payload from the triggering event
            pr_number: Pull request number, fetched when no payload is given
            post_comment: Create or update the status comment

        Returns:
        -------
            Outcome holding the verdict and the exit decision

        Raises:
        ------
            ConfigurationError: If the configuration is malformed
            CollaboratorError: If data needed by an enabled rule cannot be fetched

        """
        logger.info("🛡️ DeployBrief Evidence Gate")
        self.engine.validate_config(config)

        collected = self.collector.collect(
            owner, repo, config, pr_number=pr_number, pr_data=pr_data, need_comments=post_comment
        )
        snapshot = collected.snapshot
        verdict = self.engine.evaluate(snapshot, config, collected.check_runs, collected.comment_bodies)

        set_outputs(verdict.to_outputs())
        append_summary(render_comment_body(verdict))

        comment_id = None
        if not post_comment:
            logger.info("Comment posting disabled, skipping status comment")
        elif collected.comments is None:
            logger.warning("Existing comments unavailable, skipping status comment")
        else:
            comment_id = self.reconciler.reconcile(
                snapshot.number,
                verdict,
                collected.comments,
                post=lambda body: self.github_client.create_issue_comment(owner, repo, snapshot.number, body)["id"],
                update=lambda comment_id, body: self.github_client.update_issue_comment(
                    owner, repo, comment_id, body
                ),
            )

        return GateOutcome(verdict, failed=should_fail(verdict, config), comment_id=comment_id)
