"""Helpers for building Slack API responses and errors in tests."""

from unittest.mock import MagicMock

from slack_sdk.errors import SlackApiError


def slack_error(error: str, status_code: int = 200) -> SlackApiError:
    """A SlackApiError shaped like the ones slack_sdk raises."""
    return SlackApiError(
        message=error,
        response=MagicMock(status_code=status_code, data={"ok": False, "error": error}),
    )


def page(channels: list[dict], cursor: str = "") -> dict:
    """One conversations.list page; an empty cursor marks the last page."""
    return {"channels": channels, "response_metadata": {"next_cursor": cursor}}
