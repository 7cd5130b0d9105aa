"""Exceptions raised by the DeployBrief actions."""


class ActionError(Exception):
    """Base exception for all action failures."""


class ConfigurationError(ActionError):
    """Raised when action inputs or rule configuration are malformed."""

    def __init__(self, message: str, input_name: str | None = None) -> None:
        super().__init__(message)
        self.input_name = input_name


class CollaboratorError(ActionError):
    """Raised when a required read from GitHub (or git) fails."""

    def __init__(self, operation: str, cause: Exception | None = None) -> None:
        message = f"Failed to {operation}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.operation = operation
        self.cause = cause
