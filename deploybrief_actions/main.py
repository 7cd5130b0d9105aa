"""Command line entry point for the DeployBrief actions."""

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path

from deploybrief_actions import __version__
from deploybrief_actions.config import Settings, get_boolean_input, get_input, get_settings, load_rule_config
from deploybrief_actions.exceptions import ActionError, ConfigurationError
from deploybrief_actions.github.client import GitHubAPIClient
from deploybrief_actions.services.evidence_gate import EvidenceGate
from deploybrief_actions.services.release_notes import ReleaseNotesGenerator, render_release_notes
from deploybrief_actions.services.wiki_publisher import (
    DEFAULT_COMMIT_MESSAGE,
    DEFAULT_GIT_USER_EMAIL,
    DEFAULT_GIT_USER_NAME,
    WikiPublisher,
)
from deploybrief_actions.utils import get_logger, load_event, set_outputs

logger = get_logger(__name__)


def _require_token(settings: Settings) -> str:
    if not settings.github_token:
        msg = "Input required and not supplied: github-token"
        raise ConfigurationError(msg, input_name="github-token")
    return settings.github_token


def run_evidence_gate(args: argparse.Namespace, settings: Settings) -> int:
    """Validate the pull request that triggered the workflow."""
    config = load_rule_config()
    client = GitHubAPIClient(_require_token(settings), settings.github_api_url)

    pr_data = None
    if args.pr_number is None:
        pr_data = load_event(args.event_path).get("pull_request")
        if not pr_data:
            logger.warning("This action should be run on pull_request events")
            return 0

    outcome = EvidenceGate(client).run(
        settings.repository_owner,
        settings.repository_name,
        config,
        pr_data=pr_data,
        pr_number=args.pr_number,
        post_comment=not args.no_comment,
    )

    if outcome.failed:
        logger.error(outcome.message)
        return 1
    return 0


def run_release_notes(args: argparse.Namespace, settings: Settings) -> int:
    """Generate release notes between two tags."""
    owner, repo = settings.repository_owner, settings.repository_name
    include_commit_details = get_boolean_input("include-commit-details", default=True)
    include_pr_details = get_boolean_input("include-pr-details", default=True)
    group_by_label = get_boolean_input("group-by-label", default=True)
    output_file = args.output_file or get_input("output-file", default="release-notes.md")

    logger.info("🚀 DeployBrief Release Notes Generator")
    logger.info("Repository: %s/%s", owner, repo)

    generator = ReleaseNotesGenerator(GitHubAPIClient(_require_token(settings), settings.github_api_url))
    data = generator.collect(
        owner,
        repo,
        tag_name=args.tag_name or get_input("tag-name"),
        previous_tag=args.previous_tag or get_input("previous-tag"),
        include_pr_details=include_pr_details,
    )
    release_notes = render_release_notes(
        data,
        owner,
        repo,
        include_commit_details=include_commit_details,
        include_pr_details=include_pr_details,
        group_by_label=group_by_label,
        server_url=settings.github_server_url,
    )

    output_path = Path(output_file).resolve()
    output_path.write_text(release_notes, encoding="utf-8")
    logger.info("✓ Release notes written to: %s", output_path)

    set_outputs({
        "release-notes": release_notes,
        "release-notes-file": str(output_path),
        "pr-count": len(data.pull_requests),
        "commit-count": len(data.commits),
    })
    logger.info("✓ Release notes generated successfully")
    return 0


def run_publish_wiki(args: argparse.Namespace, settings: Settings) -> int:
    """Publish a file to the repository wiki."""
    source_file = args.source_file or get_input("source-file", required=True)
    wiki_page = args.wiki_page or get_input("wiki-page", required=True)

    logger.info("📚 DeployBrief Wiki Publisher")
    logger.info("Repository: %s", settings.github_repository)
    logger.info("Wiki Page: %s", wiki_page)

    publisher = WikiPublisher(
        settings.repository_owner,
        settings.repository_name,
        _require_token(settings),
        server_url=settings.github_server_url,
        git_user_name=get_input("git-user-name", default=DEFAULT_GIT_USER_NAME),
        git_user_email=get_input("git-user-email", default=DEFAULT_GIT_USER_EMAIL),
    )
    result = publisher.publish(
        source_file,
        wiki_page,
        commit_message=get_input("commit-message", default=DEFAULT_COMMIT_MESSAGE),
        skip_if_no_changes=get_boolean_input("skip-if-no-changes", default=True),
    )
    set_outputs(result.to_outputs())
    return 0


COMMANDS = {
    "evidence-gate": run_evidence_gate,
    "release-notes": run_release_notes,
    "publish-wiki": run_publish_wiki,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="deploybrief-actions",
        description="DeployBrief GitHub Actions. Inputs are read from INPUT_* variables; flags override them.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    gate = subparsers.add_parser("evidence-gate", help="Validate pull request evidence")
    gate.add_argument("--pr-number", type=int, help="Validate this PR instead of the event payload's")
    gate.add_argument("--event-path", help="Event payload file (defaults to GITHUB_EVENT_PATH)")
    gate.add_argument("--no-comment", action="store_true", help="Do not create or update the status comment")

    notes = subparsers.add_parser("release-notes", help="Generate release notes")
    notes.add_argument("--tag-name")
    notes.add_argument("--previous-tag")
    notes.add_argument("--output-file")

    wiki = subparsers.add_parser("publish-wiki", help="Publish a file to the wiki")
    wiki.add_argument("--source-file")
    wiki.add_argument("--wiki-page")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run one action and return its exit code."""
    args = build_parser().parse_args(argv)

    try:
        return COMMANDS[args.command](args, get_settings())
    except ActionError as e:
        logger.error(str(e))
        return 1
    except Exception:
        logger.exception("An unknown error occurred")
        return 1


if __name__ == "__main__":
    sys.exit(main())
