"""User mentions (``<@U12345>``) and display-name lookup."""

import asyncio
import logging
import re
from collections.abc import Iterable

from slack_cli.errors import ApiError
from slack_cli.gateway import RateLimitedGateway
from slack_cli.models import Message

logger = logging.getLogger(__name__)

USER_MENTION_PATTERN = re.compile(r"<@([A-Z0-9]+)>")


def extract_mentioned_user_ids(text: str) -> list[str]:
    """User IDs mentioned in ``text``, in order of appearance, duplicates kept."""
    return USER_MENTION_PATTERN.findall(text or "")


def collect_all_user_ids(messages: Iterable[Message]) -> list[str]:
    """Every author and mentioned user across ``messages``, de-duplicated.

    Order is first appearance.
    """
    seen: dict[str, None] = {}
    for msg in messages:
        if msg.user:
            seen.setdefault(msg.user)
        for user_id in extract_mentioned_user_ids(msg.text or ""):
            seen.setdefault(user_id)
    return list(seen)


def display_name_from_user(user: dict, user_id: str) -> str:
    profile = user.get("profile") or {}
    return (
        profile.get("display_name")
        or user.get("real_name")
        or user.get("name")
        or user_id
    )


class MentionResolver:
    def __init__(self, gateway: RateLimitedGateway) -> None:
        self.gateway = gateway

    async def _lookup(self, user_id: str) -> str:
        try:
            resp = await self.gateway.call("users_info", user=user_id)
        except ApiError:
            logger.debug("Failed to resolve user %s", user_id)
            return user_id
        return display_name_from_user(resp.get("user") or {}, user_id)

    async def resolve_display_names(self, user_ids: Iterable[str]) -> dict[str, str]:
        """Map each user ID to a display name, one users.info call per ID.

        A failed lookup maps the ID to itself instead of failing the batch.
        """
        unique = list(dict.fromkeys(user_ids))
        names = await asyncio.gather(*(self._lookup(uid) for uid in unique))
        return dict(zip(unique, names))
