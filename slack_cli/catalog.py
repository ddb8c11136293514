"""Channel listing with cursor pagination."""

import logging

from slack_cli.gateway import RateLimitedGateway
from slack_cli.models import Channel

logger = logging.getLogger(__name__)

ALL_CHANNEL_TYPES = "public_channel,private_channel,mpim,im"
CHANNEL_TYPE_FILTERS = {
    "public": "public_channel",
    "private": "private_channel",
    "im": "im",
    "mpim": "mpim",
    "all": ALL_CHANNEL_TYPES,
}
CHANNELS_PAGE_SIZE = 1000
# Stop following cursors past this many pages
MAX_PAGES = 1000


def channel_types_for(type_filter: str) -> str:
    """Map a CLI type filter (public/private/im/mpim/all) to API ``types``."""
    return CHANNEL_TYPE_FILTERS.get(type_filter, CHANNEL_TYPE_FILTERS["public"])


class ChannelCatalog:
    def __init__(self, gateway: RateLimitedGateway) -> None:
        self.gateway = gateway

    async def list_all(
        self,
        types: str = ALL_CHANNEL_TYPES,
        exclude_archived: bool = True,
        limit: int = CHANNELS_PAGE_SIZE,
    ) -> list[Channel]:
        """Fetch every page of conversations.list, in page order.

        ``limit`` is a per-page size hint. An empty or absent
        ``next_cursor`` ends the walk.
        """
        channels: list[Channel] = []
        cursor = None
        for page in range(1, MAX_PAGES + 1):
            kwargs: dict = {
                "types": types,
                "exclude_archived": exclude_archived,
                "limit": limit,
            }
            if cursor:
                kwargs["cursor"] = cursor
            resp = await self.gateway.call("conversations_list", **kwargs)
            channels.extend(Channel.from_api(ch) for ch in resp.get("channels") or [])
            cursor = (resp.get("response_metadata") or {}).get("next_cursor")
            if not cursor:
                logger.debug("Listed %d channels in %d page(s)", len(channels), page)
                return channels
        logger.warning("Stopped channel pagination after %d pages", MAX_PAGES)
        return channels

    async def list_member_channels(self) -> list[Channel]:
        """All non-archived conversations of every type, ignoring caller filters."""
        return await self.list_all(types=ALL_CHANNEL_TYPES, exclude_archived=True)

    async def get_info(self, channel_id: str) -> Channel:
        resp = await self.gateway.call("conversations_info", channel=channel_id)
        return Channel.from_api(resp["channel"])
