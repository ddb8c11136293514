"""Operations the CLI calls, wired from one token.

``SlackClient.from_token`` builds a single web client and a single
rate-limited gateway and hands that gateway to every operation group.
"""

from slack_sdk.web.async_client import AsyncWebClient

from slack_cli.catalog import ChannelCatalog
from slack_cli.gateway import RateLimitedGateway, build_web_client
from slack_cli.mentions import MentionResolver
from slack_cli.messages import DEFAULT_HISTORY_LIMIT, DEFAULT_SCHEDULED_LIMIT, MessageGateway
from slack_cli.models import (
    Channel,
    HistoryResult,
    ScheduledMessage,
    ScheduleResult,
    SendResult,
    UnreadResult,
)
from slack_cli.resolver import ChannelNameResolver
from slack_cli.unread import UnreadReconciler


class SlackClient:
    def __init__(self, gateway: RateLimitedGateway) -> None:
        self.gateway = gateway
        self.resolver = ChannelNameResolver()
        self.catalog = ChannelCatalog(gateway)
        self.mentions = MentionResolver(gateway)
        self.messages = MessageGateway(gateway, self.catalog, self.resolver, self.mentions)
        self.unread = UnreadReconciler(
            gateway, self.catalog, self.resolver, self.messages, self.mentions
        )

    @classmethod
    def from_token(cls, token: str) -> "SlackClient":
        return cls(RateLimitedGateway(build_web_client(token)))

    @classmethod
    def from_web_client(cls, client: AsyncWebClient, **gateway_kwargs) -> "SlackClient":
        return cls(RateLimitedGateway(client, **gateway_kwargs))

    async def send_message(self, channel: str, text: str, thread_ts: str | None = None) -> SendResult:
        channel_id = await self.messages.resolve_channel(channel)
        return await self.messages.send(channel_id, text, thread_ts)

    async def schedule_message(
        self, channel: str, text: str, post_at: int, thread_ts: str | None = None
    ) -> ScheduleResult:
        channel_id = await self.messages.resolve_channel(channel)
        return await self.messages.schedule(channel_id, text, post_at, thread_ts)

    async def list_channels(
        self, types: str, exclude_archived: bool = True, limit: int = 1000
    ) -> list[Channel]:
        return await self.catalog.list_all(types, exclude_archived, limit)

    async def list_scheduled_messages(
        self, channel: str | None = None, limit: int = DEFAULT_SCHEDULED_LIMIT
    ) -> list[ScheduledMessage]:
        return await self.messages.list_scheduled(channel, limit)

    async def get_history(
        self, channel: str, limit: int = DEFAULT_HISTORY_LIMIT, oldest: str | None = None
    ) -> HistoryResult:
        return await self.messages.get_history(channel, limit, oldest)

    async def list_unread_channels(self) -> list[Channel]:
        return await self.unread.compute_unread_across_all_channels()

    async def get_channel_unread(self, channel: str) -> UnreadResult:
        return await self.unread.get_channel_unread(channel)

    async def mark_as_read(self, channel: str) -> None:
        channel_id = await self.messages.resolve_channel(channel)
        await self.unread.mark_as_read(channel_id)
