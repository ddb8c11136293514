"""Shared fixtures. AsyncWebClient is mocked throughout to avoid real API calls."""

from unittest.mock import AsyncMock

import pytest

from slack_cli.client import SlackClient
from slack_cli.crypto import TokenCipher
from slack_cli.gateway import RateLimitedGateway


@pytest.fixture(scope="session")
def cipher():
    """One cipher per session; key derivation is slow on purpose."""
    return TokenCipher()


@pytest.fixture()
def tmp_config(tmp_path, monkeypatch):
    """Redirect config to a temp directory so tests don't touch real config."""
    config_dir = tmp_path / ".slack-cli"
    config_file = config_dir / "config.json"
    monkeypatch.setattr("slack_cli.profiles.CONFIG_DIR", config_dir)
    monkeypatch.setattr("slack_cli.profiles.CONFIG_FILE", config_file)
    return config_file


@pytest.fixture()
def web_client():
    """A mocked AsyncWebClient; every method is awaitable."""
    return AsyncMock()


@pytest.fixture()
def sleep():
    return AsyncMock()


@pytest.fixture()
def gateway(web_client, sleep):
    return RateLimitedGateway(web_client, sleep=sleep)


@pytest.fixture()
def slack_client(gateway):
    return SlackClient(gateway)
