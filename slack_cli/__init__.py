"""Slack CLI — send, schedule, read history and track unread messages from the terminal."""

__version__ = "0.1.0"
