"""Unread-message reconciliation against per-channel last-read watermarks.

Nothing is cached: every call re-reads channel metadata and history.

Counts are capped at ``UNREAD_FETCH_LIMIT``. A channel with a larger
backlog reports the cap, not its true count.

Watermark boundary: history is requested with ``oldest=<watermark>`` and
``inclusive=False``, and anything not strictly newer than the watermark
is dropped locally as well, so the last-read message is never counted.
"""

import logging
import time

from slack_cli.catalog import ChannelCatalog
from slack_cli.errors import ApiError
from slack_cli.gateway import RateLimitedGateway
from slack_cli.mentions import MentionResolver, collect_all_user_ids
from slack_cli.messages import MessageGateway
from slack_cli.models import (
    Channel,
    Message,
    UnreadCount,
    UnreadResult,
    is_unset_watermark,
    timestamp_key,
)
from slack_cli.resolver import ChannelNameResolver

logger = logging.getLogger(__name__)

UNREAD_FETCH_LIMIT = 100
CHANNEL_SCAN_DELAY_SECONDS = 0.1


def now_ts() -> str:
    return f"{time.time():.6f}"


def checked_watermark(last_read: str | None) -> str | None:
    """``last_read`` if it is a usable watermark, None when unset.

    Raises ApiError when the server sent something that is not a timestamp.
    """
    if is_unset_watermark(last_read):
        return None
    try:
        timestamp_key(last_read)
    except ValueError as exc:
        raise ApiError(f"Invalid last_read value: {last_read!r}", error="invalid_last_read") from exc
    return last_read


def newer_than(messages: list[Message], watermark: str) -> list[Message]:
    mark = timestamp_key(watermark)
    return [m for m in messages if m.sort_key > mark]


class UnreadReconciler:
    def __init__(
        self,
        gateway: RateLimitedGateway,
        catalog: ChannelCatalog,
        resolver: ChannelNameResolver,
        messages: MessageGateway,
        mentions: MentionResolver,
    ) -> None:
        self.gateway = gateway
        self.catalog = catalog
        self.resolver = resolver
        self.messages = messages
        self.mentions = mentions

    async def _unread_messages(self, channel_id: str, last_read: str | None) -> list[Message]:
        if is_unset_watermark(last_read):
            # Never read: everything is unread, up to the cap
            return await self.messages.fetch_messages(channel_id, UNREAD_FETCH_LIMIT)
        fetched = await self.messages.fetch_messages(channel_id, UNREAD_FETCH_LIMIT, oldest=last_read)
        return newer_than(fetched, last_read)

    async def compute_unread_for_channel(self, channel_id: str) -> UnreadCount:
        info = await self.catalog.get_info(channel_id)
        last_read = checked_watermark(info.last_read)

        latest = await self.messages.fetch_messages(channel_id, 1)
        if not latest:
            return UnreadCount(count=0, last_read=last_read)
        if last_read is None:
            unread = await self._unread_messages(channel_id, None)
            return UnreadCount(count=len(unread), last_read=None)
        if latest[0].sort_key <= timestamp_key(last_read):
            return UnreadCount(count=0, last_read=last_read)
        unread = await self._unread_messages(channel_id, last_read)
        return UnreadCount(count=len(unread), last_read=last_read)

    async def compute_unread_across_all_channels(self) -> list[Channel]:
        """Every member channel with at least one unread message.

        Channels are checked one at a time with a short pause between
        them. A channel that fails (rate limit included) is skipped.
        """
        channels = await self.catalog.list_member_channels()
        with_unread: list[Channel] = []
        for index, channel in enumerate(channels):
            if index:
                await self.gateway.delay(CHANNEL_SCAN_DELAY_SECONDS)
            try:
                result = await self.compute_unread_for_channel(channel.id)
            except (ApiError, ValueError) as exc:
                logger.warning("Skipping %s: %s", channel.id, exc)
                continue
            if result.count > 0:
                with_unread.append(channel.with_unread(result.count, result.last_read))
        return with_unread

    async def get_channel_unread(self, channel: str) -> UnreadResult:
        """Unread messages of one channel (name or ID) with author names."""
        channel_id = await self.messages.resolve_channel(channel)
        info = await self.catalog.get_info(channel_id)
        last_read = checked_watermark(info.last_read)

        unread = await self._unread_messages(channel_id, last_read)
        users = await self.mentions.resolve_display_names(collect_all_user_ids(unread))
        return UnreadResult(
            channel=info.with_unread(len(unread), last_read),
            messages=unread,
            users=users,
        )

    async def mark_as_read(self, channel_id: str, ts: str | None = None) -> None:
        """Move the channel's watermark to ``ts`` (now when omitted)."""
        await self.gateway.call("conversations_mark", channel=channel_id, ts=ts or now_ts())
