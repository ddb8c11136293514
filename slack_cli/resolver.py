"""Channel name → ID resolution with "did you mean" suggestions."""

import logging
import re
from collections.abc import Awaitable, Callable, Sequence

from slack_cli.errors import ChannelNotFoundError
from slack_cli.models import Channel

logger = logging.getLogger(__name__)

# C = public channel, D = direct message, G = private/group
CHANNEL_ID_PATTERN = re.compile(r"^[CDG][A-Z0-9]+$")
MAX_SUGGESTIONS = 5

FetchChannels = Callable[[], Awaitable[Sequence[Channel]]]


class ChannelNameResolver:
    def is_channel_id(self, identifier: str) -> bool:
        return bool(CHANNEL_ID_PATTERN.match(identifier))

    def find_channel(self, name: str, channels: Sequence[Channel]) -> Channel | None:
        """Return the first channel matching ``name``.

        Rules are tried in order over the whole list; a later rule is only
        consulted when no channel satisfied an earlier one:
        exact name, name without a leading ``#``, case-insensitive name,
        then ``name_normalized``.
        """
        stripped = name.removeprefix("#")
        lowered = name.lower()
        rules: list[Callable[[Channel], bool]] = [
            lambda c: c.name == name,
            lambda c: c.name == stripped,
            lambda c: bool(c.name) and c.name.lower() == lowered,
            lambda c: c.name_normalized is not None and c.name_normalized == name,
        ]
        for rule in rules:
            for channel in channels:
                if rule(channel):
                    return channel
        return None

    def similar_channels(
        self, name: str, channels: Sequence[Channel], limit: int = MAX_SUGGESTIONS
    ) -> list[str]:
        """Names containing ``name`` (case-insensitive), in catalog order."""
        needle = name.lower()
        return [c.name for c in channels if c.name and needle in c.name.lower()][:limit]

    def not_found_error(self, name: str, channels: Sequence[Channel]) -> ChannelNotFoundError:
        suggestions = self.similar_channels(name, channels)
        if suggestions:
            message = (
                f"Channel '{name}' not found. "
                f"Did you mean one of these? {', '.join(suggestions)}"
            )
        else:
            message = f"Channel '{name}' not found. Make sure you are a member of this channel."
        return ChannelNotFoundError(message, query=name, suggestions=suggestions)

    async def resolve_to_id(self, identifier: str, fetch_all_channels: FetchChannels) -> str:
        """Resolve a channel name or ID to an ID.

        ID-shaped identifiers are returned as-is without fetching anything.
        """
        if self.is_channel_id(identifier):
            return identifier

        channels = await fetch_all_channels()
        channel = self.find_channel(identifier, channels)
        if channel is None:
            raise self.not_found_error(identifier, channels)
        logger.debug("Resolved channel %s -> %s", identifier, channel.id)
        return channel.id
