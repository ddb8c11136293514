"""Error taxonomy shared by the core and the CLI.

Every error is a ``click.ClickException`` so that anything escaping a
command is printed as ``Error: <message>`` with a non-zero exit code.
"""

import click


class SlackCliError(click.ClickException):
    """Base class for all slack-cli errors."""

    code = "SLACK_CLI_ERROR"


class ConfigurationError(SlackCliError):
    """Missing, unreadable or inconsistent profile configuration."""

    code = "CONFIGURATION_ERROR"


class ValidationError(SlackCliError):
    """User input that fails a format or range check."""

    code = "VALIDATION_ERROR"


class FileError(SlackCliError):
    """Local I/O failure reading message content."""

    code = "FILE_ERROR"


class CryptoError(SlackCliError):
    """Malformed or undecryptable token envelope."""

    code = "CRYPTO_ERROR"


class ApiError(SlackCliError):
    """A Slack Web API call failed.

    ``error`` holds the Slack error code when the API returned one
    (e.g. ``channel_not_found``); ``rate_limited`` is set for 429s.
    """

    code = "API_ERROR"

    def __init__(self, message: str, error: str = "", rate_limited: bool = False) -> None:
        super().__init__(message)
        self.error = error
        self.rate_limited = rate_limited


class ChannelNotFoundError(SlackCliError):
    """A channel name could not be resolved to an ID."""

    code = "CHANNEL_NOT_FOUND"

    def __init__(self, message: str, query: str = "", suggestions: list[str] | None = None) -> None:
        super().__init__(message)
        self.query = query
        self.suggestions = suggestions or []
