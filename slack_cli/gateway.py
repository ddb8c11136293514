"""Single choke point for every Slack Web API call.

All calls share one ``asyncio.Semaphore`` so at most
``MAX_CONCURRENT_REQUESTS`` are in flight. A rate-limit rejection
triggers one cooldown sleep and is then raised as ``ApiError`` with
``rate_limited=True``; the gateway never re-issues a call itself.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import aiohttp
from slack_sdk.errors import SlackApiError, SlackClientError
from slack_sdk.web.async_client import AsyncWebClient

from slack_cli.errors import ApiError

logger = logging.getLogger(__name__)

MAX_CONCURRENT_REQUESTS = 3
RATE_LIMIT_COOLDOWN_SECONDS = 5.0
REQUEST_TIMEOUT_SECONDS = 30

Sleep = Callable[[float], Awaitable[Any]]


def build_web_client(token: str) -> AsyncWebClient:
    """AsyncWebClient with built-in retries off and an explicit timeout."""
    return AsyncWebClient(token=token, timeout=REQUEST_TIMEOUT_SECONDS, retry_handlers=[])


def _error_code(exc: SlackApiError) -> str:
    data = getattr(exc.response, "data", None)
    if isinstance(data, dict):
        return str(data.get("error", ""))
    return ""


def is_rate_limited(exc: SlackApiError) -> bool:
    """Whether a SlackApiError is a rate-limit rejection (HTTP 429 / ``ratelimited``)."""
    status = getattr(exc.response, "status_code", None)
    return (
        status == 429
        or _error_code(exc) == "ratelimited"
        or "rate limit" in str(exc).lower()
    )


class RateLimitedGateway:
    def __init__(
        self,
        client: AsyncWebClient,
        max_concurrent: int = MAX_CONCURRENT_REQUESTS,
        cooldown: float = RATE_LIMIT_COOLDOWN_SECONDS,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.client = client
        self.cooldown = cooldown
        self._sleep = sleep
        self._gate = asyncio.Semaphore(max_concurrent)

    async def call(self, method: str, **kwargs: Any) -> Any:
        """Invoke ``client.<method>(**kwargs)`` through the gate.

        Returns the raw response (dict-like). Raises ApiError on failure.
        """
        logger.debug("Slack API %s %s", method, _redact(kwargs))
        try:
            async with self._gate:
                return await getattr(self.client, method)(**kwargs)
        except SlackApiError as exc:
            error = _error_code(exc)
            if is_rate_limited(exc):
                logger.debug("Rate limited on %s, cooling down %.1fs", method, self.cooldown)
                # Slot is released before the cooldown so other calls keep moving
                await self._sleep(self.cooldown)
                raise ApiError(
                    f"Slack API rate limit exceeded ({method})",
                    error=error or "ratelimited",
                    rate_limited=True,
                ) from exc
            raise ApiError(f"API Error: {error or exc}", error=error) from exc
        except (SlackClientError, aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise ApiError(f"API Error: {exc}") from exc

    async def delay(self, seconds: float) -> None:
        await self._sleep(seconds)


def _redact(kwargs: dict) -> dict:
    # Message bodies can be long and private
    return {k: ("…" if k == "text" else v) for k, v in kwargs.items()}
