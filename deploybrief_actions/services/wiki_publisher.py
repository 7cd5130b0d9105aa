"""Publish a markdown file to the repository wiki."""

import shutil
import subprocess
import tempfile
from pathlib import Path
from urllib.parse import urlsplit

from ..exceptions import CollaboratorError, ConfigurationError
from ..utils import LoggerMixin

DEFAULT_COMMIT_MESSAGE = "Update wiki from workflow"
DEFAULT_GIT_USER_NAME = "github-actions[bot]"
DEFAULT_GIT_USER_EMAIL = "github-actions[bot]@users.noreply.github.com"
WIKI_BRANCH = "master"


class PublishResult:
    """Outcome of a wiki publish."""

    def __init__(self, wiki_url: str, wiki_page: str, changes_made: bool) -> None:
        self.wiki_url = wiki_url
        self.wiki_page = wiki_page
        self.changes_made = changes_made

    def to_outputs(self) -> dict[str, str]:
        return {
            "wiki-url": self.wiki_url,
            "wiki-page-path": self.wiki_page,
            "changes-made": "true" if self.changes_made else "false",
        }


class WikiPublisher(LoggerMixin):
    """Clones the wiki, writes one page and pushes it back."""

    def __init__(
        self,
        owner: str,
        repo: str,
        token: str,
        server_url: str = "https://github.com",
        git_user_name: str = DEFAULT_GIT_USER_NAME,
        git_user_email: str = DEFAULT_GIT_USER_EMAIL,
    ) -> None:
        self.owner = owner
        self.repo = repo
        self.token = token
        self.server_url = server_url.rstrip("/")
        self.git_user_name = git_user_name
        self.git_user_email = git_user_email

    @property
    def clone_url(self) -> str:
        parts = urlsplit(self.server_url)
        return f"{parts.scheme}://x-access-token:{self.token}@{parts.netloc}/{self.owner}/{self.repo}.wiki.git"

    def page_url(self, wiki_page: str) -> str:
        return f"{self.server_url}/{self.owner}/{self.repo}/wiki/{wiki_page}"

    def _redact(self, text: str) -> str:
        return text.replace(self.token, "***") if self.token else text

    def _git(self, *args: str, cwd: Path | None = None, check: bool = True) -> subprocess.CompletedProcess:
        """Run a git command; the token is scrubbed from any error raised."""
        command = ["git", *args]
        self.logger.debug("Running %s", self._redact(" ".join(command)))
        try:
            return subprocess.run(command, cwd=cwd, check=check, capture_output=True, text=True)
        except subprocess.CalledProcessError as e:
            stderr = self._redact((e.stderr or "").strip())
            raise CollaboratorError(f"run git {args[0]}", RuntimeError(stderr or f"exit code {e.returncode}")) from None

    def publish(
        self,
        source_file: str | Path,
        wiki_page: str,
        commit_message: str = DEFAULT_COMMIT_MESSAGE,
        skip_if_no_changes: bool = True,
    ) -> PublishResult:
        """Publish ``source_file`` as ``<wiki_page>.md``.

        Args:
        ----
            source_file: Markdown file to publish
            wiki_page: Wiki page name without extension
            commit_message: Commit message for the wiki repository
            skip_if_no_changes: Stop before writing when the page is already identical

        Returns:
        -------
            Publish result

        Raises:
        ------
            ConfigurationError: If the source file does not exist
            CollaboratorError: If a git command fails

        """
        source_path = Path(source_file)
        if not source_path.exists():
            msg = f"Source file not found: {source_file}"
            raise ConfigurationError(msg, input_name="source-file")

        source_content = source_path.read_text(encoding="utf-8")
        self.logger.info("✓ Source content loaded (%d bytes)", len(source_content))

        unchanged = PublishResult(self.page_url(wiki_page), wiki_page, changes_made=False)
        temp_dir = Path(tempfile.mkdtemp(prefix="wiki-"))
        try:
            self.logger.info("Cloning wiki repository...")
            self._git("clone", self.clone_url, str(temp_dir))
            self._git("config", "user.name", self.git_user_name, cwd=temp_dir)
            self._git("config", "user.email", self.git_user_email, cwd=temp_dir)

            page_path = temp_dir / f"{wiki_page}.md"
            if skip_if_no_changes and page_path.exists() and page_path.read_text(encoding="utf-8") == source_content:
                self.logger.info("✓ Content unchanged - skipping update")
                return unchanged

            page_path.write_text(source_content, encoding="utf-8")
            self._git("add", page_path.name, cwd=temp_dir)

            # exit code 1 means the index differs from HEAD
            if self._git("diff", "--staged", "--quiet", cwd=temp_dir, check=False).returncode == 0:
                self.logger.info("✓ No changes to commit")
                return unchanged

            self._git("commit", "-m", commit_message, cwd=temp_dir)
            self._git("push", "origin", WIKI_BRANCH, cwd=temp_dir)
            self.logger.info("✓ Wiki page published: %s", self.page_url(wiki_page))
            return PublishResult(self.page_url(wiki_page), wiki_page, changes_made=True)
        finally:
            shutil.rmtree(temp_dir, ignore_errors=True)
