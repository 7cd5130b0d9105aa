"""
Application configuration management
"""

import os
from functools import lru_cache

from pydantic import AliasChoices, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError
from .models.rule_config import RuleConfig

TRUE_VALUES = ("true", "True", "TRUE")
FALSE_VALUES = ("false", "False", "FALSE")


class Settings(BaseSettings):
    """Runtime settings provided by the GitHub Actions runner"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # GitHub API Configuration
    github_token: str | None = Field(
        None, validation_alias=AliasChoices("INPUT_GITHUB-TOKEN", "GITHUB_TOKEN")
    )
    github_api_url: str = Field("https://api.github.com", validation_alias="GITHUB_API_URL")
    github_server_url: str = Field("https://github.com", validation_alias="GITHUB_SERVER_URL")
    github_repository: str | None = Field(None, validation_alias="GITHUB_REPOSITORY")

    # Runner files
    github_actions: bool = Field(False, validation_alias="GITHUB_ACTIONS")
    github_event_path: str | None = Field(None, validation_alias="GITHUB_EVENT_PATH")
    github_output: str | None = Field(None, validation_alias="GITHUB_OUTPUT")
    github_step_summary: str | None = Field(None, validation_alias="GITHUB_STEP_SUMMARY")

    # Application Configuration
    app_name: str = Field("DeployBrief Actions", validation_alias="APP_NAME")
    app_version: str = Field("1.0.0", validation_alias="APP_VERSION")

    # Logging Configuration
    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")
    log_format: str = Field("%(asctime)s - %(name)s - %(levelname)s - %(message)s", validation_alias="LOG_FORMAT")

    # Request Configuration
    github_request_delay: float = Field(0.1, validation_alias="GITHUB_REQUEST_DELAY")
    github_request_timeout: float = Field(30.0, validation_alias="GITHUB_REQUEST_TIMEOUT")

    @property
    def repository_owner(self) -> str:
        return self._split_repository()[0]

    @property
    def repository_name(self) -> str:
        return self._split_repository()[1]

    def _split_repository(self) -> tuple[str, str]:
        if not self.github_repository or "/" not in self.github_repository:
            msg = f"GITHUB_REPOSITORY must be 'owner/repo', got {self.github_repository!r}"
            raise ConfigurationError(msg)
        owner, repo = self.github_repository.split("/", 1)
        return owner, repo


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


def get_github_headers(token: str | None = None) -> dict:
    """Get GitHub API headers with authentication"""
    settings = get_settings()
    headers = {
        "Accept": "application/vnd.github+json",
        "User-Agent": f"{settings.app_name.replace(' ', '-')}/{settings.app_version}",
    }
    token = token or settings.github_token
    if token:
        headers["Authorization"] = f"token {token}"
    return headers


def _input_env_name(name: str) -> str:
    return f"INPUT_{name.replace(' ', '_').upper()}"


def get_input(name: str, required: bool = False, default: str = "") -> str:
    """
    Read an action input the way the Actions runner exposes it

    Args:
        name: Input name as declared in action.yml (e.g. "require-labels")
        required: Raise when the input is missing or empty
        default: Value used when the input is not set

    Returns:
        The trimmed input value

    Raises:
        ConfigurationError: If a required input is missing
    """
    value = os.environ.get(_input_env_name(name), "").strip()
    if required and not value:
        raise ConfigurationError(f"Input required and not supplied: {name}", input_name=name)
    return value or default


def get_boolean_input(name: str, default: bool = False) -> bool:
    """
    Read a boolean action input (YAML 1.2 core schema spellings only)

    Raises:
        ConfigurationError: If the value is not a recognised boolean
    """
    value = get_input(name)
    if not value:
        return default
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    msg = (
        f"Input does not meet YAML 1.2 \"Core Schema\" specification: {name}\n"
        "Support boolean input list: `true | True | TRUE | false | False | FALSE`"
    )
    raise ConfigurationError(msg, input_name=name)


def get_list_input(name: str) -> list[str]:
    """Read a comma-separated action input as a list of trimmed, non-empty items"""
    return [item.strip() for item in get_input(name).split(",") if item.strip()]


def get_int_input(name: str, default: int = 0) -> int:
    """Read an integer action input"""
    value = get_input(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ConfigurationError(f"Input {name} must be an integer, got {value!r}", input_name=name) from e


def build_rule_config(**values) -> RuleConfig:
    """
    Build a validated rule configuration

    Raises:
        ConfigurationError: If any value is malformed
    """
    try:
        return RuleConfig(**values)
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'config'}: {error['msg']}" for error in e.errors()
        )
        raise ConfigurationError(f"Invalid rule configuration: {details}") from e


def load_rule_config() -> RuleConfig:
    """Load the evidence gate rule configuration from action inputs"""
    return build_rule_config(
        required_labels=get_list_input("require-labels"),
        blocked_labels=get_list_input("blocked-labels"),
        require_description=get_boolean_input("require-description"),
        require_linked_issue=get_boolean_input("require-linked-issue"),
        require_evidence_attachments=get_boolean_input("require-evidence-attachments"),
        require_tests=get_boolean_input("require-tests"),
        min_approvals=get_int_input("min-approvals"),
        fail_on_violation=get_boolean_input("fail-on-violation", default=True),
    )
