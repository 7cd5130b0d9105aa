"""
Data models for the DeployBrief actions
"""

from .check_run import CheckConclusion, CheckRun
from .comment import ExistingComment
from .pull_request import PullRequestSnapshot
from .release import Commit, MergedPullRequest
from .review import Review
from .rule_config import RuleConfig
from .verdict import RuleId, Severity, Verdict, Violation

__all__ = [
    "CheckConclusion",
    "CheckRun",
    "Commit",
    "ExistingComment",
    "MergedPullRequest",
    "PullRequestSnapshot",
    "Review",
    "RuleConfig",
    "RuleId",
    "Severity",
    "Verdict",
    "Violation",
]
