"""Typed views over Slack API payloads.

Defaults for optional fields are applied once here, in the ``from_api``
factories, so callers never need ``x.get(...) or default`` chains.
"""

from dataclasses import asdict, dataclass, field

# Returned by conversations.info for conversations that were never read
UNSET_WATERMARK = "0000000000.000000"


def timestamp_key(ts: str) -> tuple[int, int]:
    """Split a ``"<secs>.<micros>"`` timestamp into a sortable int pair.

    The fractional part is right-padded to six digits so ``"1.5"`` and
    ``"1.500000"`` compare equal. Raises ValueError on malformed input.
    """
    secs, _, frac = ts.partition(".")
    if not secs.isdigit() or (frac and not frac.isdigit()):
        raise ValueError(f"Invalid Slack timestamp: {ts!r}")
    return int(secs), int(frac.ljust(6, "0")[:6] or "0")


def is_unset_watermark(last_read: str | None) -> bool:
    """True when a channel has no usable last-read marker."""
    if not last_read:
        return True
    try:
        return timestamp_key(last_read) == (0, 0)
    except ValueError:
        return False


@dataclass
class Channel:
    id: str
    name: str = ""
    is_private: bool = False
    created: int = 0
    num_members: int = 0
    purpose: str = ""
    topic: str = ""
    is_channel: bool = False
    is_group: bool = False
    is_im: bool = False
    is_mpim: bool = False
    is_member: bool = False
    is_archived: bool = False
    name_normalized: str | None = None
    user: str | None = None
    unread_count: int | None = None
    unread_count_display: int | None = None
    last_read: str | None = None

    @classmethod
    def from_api(cls, data: dict) -> "Channel":
        return cls(
            id=data["id"],
            name=data.get("name") or "",
            is_private=bool(data.get("is_private")),
            created=int(data.get("created") or 0),
            num_members=int(data.get("num_members") or 0),
            purpose=(data.get("purpose") or {}).get("value") or "",
            topic=(data.get("topic") or {}).get("value") or "",
            is_channel=bool(data.get("is_channel")),
            is_group=bool(data.get("is_group")),
            is_im=bool(data.get("is_im")),
            is_mpim=bool(data.get("is_mpim")),
            is_member=bool(data.get("is_member")),
            is_archived=bool(data.get("is_archived")),
            name_normalized=data.get("name_normalized"),
            user=data.get("user"),
            unread_count=data.get("unread_count"),
            unread_count_display=data.get("unread_count_display"),
            last_read=data.get("last_read"),
        )

    @property
    def type_label(self) -> str:
        if self.is_im:
            return "DM"
        if self.is_mpim:
            return "Group DM"
        if self.is_private or self.is_group:
            return "Private"
        return "Public"

    @property
    def display_name(self) -> str:
        """``#name`` for named conversations, the peer user ID for DMs."""
        if self.name:
            return self.name if self.name.startswith("#") else f"#{self.name}"
        return self.user or self.id

    def with_unread(self, count: int, last_read: str | None) -> "Channel":
        data = asdict(self)
        data.update(unread_count=count, unread_count_display=count, last_read=last_read)
        return Channel(**data)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Message:
    ts: str
    user: str | None = None
    bot_id: str | None = None
    text: str | None = None
    thread_ts: str | None = None
    reply_count: int = 0
    type: str = "message"

    @classmethod
    def from_api(cls, data: dict) -> "Message":
        return cls(
            ts=data.get("ts") or "0",
            user=data.get("user"),
            bot_id=data.get("bot_id"),
            text=data.get("text"),
            thread_ts=data.get("thread_ts"),
            reply_count=int(data.get("reply_count") or 0),
            type=data.get("type") or "message",
        )

    @property
    def sort_key(self) -> tuple[int, int]:
        return timestamp_key(self.ts)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ScheduledMessage:
    id: str
    channel_id: str
    post_at: int
    date_created: int = 0
    text: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "ScheduledMessage":
        return cls(
            id=data["id"],
            channel_id=data.get("channel_id") or "",
            post_at=int(data.get("post_at") or 0),
            date_created=int(data.get("date_created") or 0),
            text=data.get("text") or "",
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Profile:
    token: str
    updated_at: str = ""

    @classmethod
    def from_store(cls, data: dict) -> "Profile":
        return cls(token=data.get("token", ""), updated_at=data.get("updatedAt", ""))

    def to_store(self) -> dict:
        return {"token": self.token, "updatedAt": self.updated_at}


@dataclass
class SendResult:
    ok: bool
    ts: str
    channel: str


@dataclass
class ScheduleResult:
    id: str
    post_at: int
    channel: str


@dataclass
class UnreadCount:
    count: int
    last_read: str | None


@dataclass
class HistoryResult:
    messages: list[Message] = field(default_factory=list)
    users: dict[str, str] = field(default_factory=dict)


@dataclass
class UnreadResult:
    channel: Channel
    messages: list[Message] = field(default_factory=list)
    users: dict[str, str] = field(default_factory=dict)
