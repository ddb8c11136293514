"""Posting, scheduling and reading channel messages."""

import logging

from slack_cli.catalog import ChannelCatalog
from slack_cli.gateway import RateLimitedGateway
from slack_cli.mentions import MentionResolver, collect_all_user_ids
from slack_cli.models import HistoryResult, Message, ScheduledMessage, ScheduleResult, SendResult
from slack_cli.resolver import ChannelNameResolver

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 20
DEFAULT_SCHEDULED_LIMIT = 50


class MessageGateway:
    def __init__(
        self,
        gateway: RateLimitedGateway,
        catalog: ChannelCatalog,
        resolver: ChannelNameResolver,
        mentions: MentionResolver,
    ) -> None:
        self.gateway = gateway
        self.catalog = catalog
        self.resolver = resolver
        self.mentions = mentions

    async def resolve_channel(self, channel: str) -> str:
        return await self.resolver.resolve_to_id(channel, self.catalog.list_member_channels)

    async def send(self, channel_id: str, text: str, thread_ts: str | None = None) -> SendResult:
        """Post ``text``; a ``thread_ts`` makes it a threaded reply.

        ``thread_ts`` must already be validated by the caller.
        """
        kwargs: dict = {"channel": channel_id, "text": text}
        if thread_ts:
            kwargs["thread_ts"] = thread_ts
        resp = await self.gateway.call("chat_postMessage", **kwargs)
        return SendResult(
            ok=bool(resp.get("ok", True)),
            ts=resp.get("ts", ""),
            channel=resp.get("channel") or channel_id,
        )

    async def schedule(
        self, channel_id: str, text: str, post_at: int, thread_ts: str | None = None
    ) -> ScheduleResult:
        """Schedule ``text`` for ``post_at`` (epoch seconds, future, caller-checked)."""
        kwargs: dict = {"channel": channel_id, "text": text, "post_at": post_at}
        if thread_ts:
            kwargs["thread_ts"] = thread_ts
        resp = await self.gateway.call("chat_scheduleMessage", **kwargs)
        return ScheduleResult(
            id=resp.get("scheduled_message_id", ""),
            post_at=int(resp.get("post_at") or post_at),
            channel=resp.get("channel") or channel_id,
        )

    async def list_scheduled(
        self, channel: str | None = None, limit: int = DEFAULT_SCHEDULED_LIMIT
    ) -> list[ScheduledMessage]:
        kwargs: dict = {"limit": limit}
        if channel:
            kwargs["channel"] = await self.resolve_channel(channel)
        resp = await self.gateway.call("chat_scheduledMessages_list", **kwargs)
        return [ScheduledMessage.from_api(m) for m in resp.get("scheduled_messages") or []]

    async def fetch_messages(
        self, channel_id: str, limit: int, oldest: str | None = None
    ) -> list[Message]:
        """One conversations.history page, newest first as the API returns it."""
        kwargs: dict = {"channel": channel_id, "limit": limit}
        if oldest:
            kwargs["oldest"] = oldest
            kwargs["inclusive"] = False
        resp = await self.gateway.call("conversations_history", **kwargs)
        return [Message.from_api(m) for m in resp.get("messages") or []]

    async def get_history(
        self, channel: str, limit: int = DEFAULT_HISTORY_LIMIT, oldest: str | None = None
    ) -> HistoryResult:
        """Messages for a channel name or ID plus a user-ID → display-name map
        covering every author and every mentioned user."""
        channel_id = await self.resolve_channel(channel)
        messages = await self.fetch_messages(channel_id, limit, oldest)
        users = await self.mentions.resolve_display_names(collect_all_user_ids(messages))
        return HistoryResult(messages=messages, users=users)
