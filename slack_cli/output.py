"""Rendering of core results as table, simple or JSON output."""

import json
from datetime import datetime, timezone
from enum import Enum

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from slack_cli.models import Channel, HistoryResult, Message, ScheduledMessage, UnreadResult

PURPOSE_WIDTH = 60


class OutputFormat(str, Enum):
    TABLE = "table"
    SIMPLE = "simple"
    JSON = "json"


FORMAT_CHOICES = [f.value for f in OutputFormat]


def format_ts(ts: str) -> str:
    """Convert a Slack timestamp to ``YYYY-MM-DD HH:MM`` (UTC)."""
    try:
        epoch = float(ts.split(".")[0])
        dt = datetime.fromtimestamp(epoch, tz=timezone.utc)
        return dt.strftime("%Y-%m-%d %H:%M")
    except (ValueError, IndexError, OverflowError, OSError):
        return ts


def format_date(epoch: int) -> str:
    return datetime.fromtimestamp(epoch, tz=timezone.utc).strftime("%Y-%m-%d")


def _truncate(value: str, width: int) -> str:
    if len(value) > width:
        return value[: width - 1] + "…"
    return value


def _print_json(console: Console, payload) -> None:
    # Bypass rich markup so JSON stays machine-readable
    console.out(json.dumps(payload, indent=2), highlight=False)


def render_channels(console: Console, channels: list[Channel], fmt: OutputFormat) -> None:
    if not channels:
        console.print("No channels found")
        return
    if fmt is OutputFormat.JSON:
        _print_json(console, [
            {
                "id": ch.id,
                "name": ch.name or "unnamed",
                "type": ch.type_label,
                "members": ch.num_members,
                "created": format_date(ch.created) + "T00:00:00Z",
                "purpose": ch.purpose,
            }
            for ch in channels
        ])
        return
    if fmt is OutputFormat.SIMPLE:
        for ch in channels:
            console.out(ch.name or ch.id, highlight=False)
        return

    table = Table(title="Channels")
    table.add_column("Name", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Members", justify="right")
    table.add_column("Created")
    table.add_column("Purpose")
    for ch in channels:
        table.add_row(
            ch.name or ch.id,
            ch.type_label,
            str(ch.num_members),
            format_date(ch.created),
            _truncate(ch.purpose, PURPOSE_WIDTH),
        )
    console.print(table)


def _author(msg: Message, users: dict[str, str]) -> str:
    if msg.user:
        return users.get(msg.user, msg.user)
    if msg.bot_id:
        return "bot"
    return "unknown"


def render_messages(console: Console, messages: list[Message], users: dict[str, str]) -> None:
    """Print messages oldest first (the API returns newest first)."""
    for msg in reversed(messages):
        line = Text()
        line.append(f"[{format_ts(msg.ts)}] ", style="dim")
        line.append(f"{_author(msg, users)}: ", style="bold")
        line.append(msg.text or "(no text)")
        # Indicate threaded messages
        if msg.thread_ts and msg.reply_count:
            line.append(f" [{msg.reply_count} replies]", style="yellow")
        console.print(line)


def render_history(console: Console, channel: str, result: HistoryResult) -> None:
    if not result.messages:
        console.print("[yellow]No messages found in the specified channel.[/]")
        return
    console.print(f"[bold]Message history for {escape(channel)}[/]")
    render_messages(console, result.messages, result.users)
    console.print(f"[green]Displayed {len(result.messages)} message(s)[/]")


def render_unread_channels(
    console: Console, channels: list[Channel], fmt: OutputFormat, count_only: bool = False
) -> None:
    if not channels:
        console.print("[green]No unread messages[/]")
        return
    if count_only:
        total = 0
        for ch in channels:
            count = ch.unread_count or 0
            total += count
            console.out(f"{ch.display_name}: {count}", highlight=False)
        console.print(f"[bold]Total: {total} unread messages[/]")
        return
    if fmt is OutputFormat.JSON:
        _print_json(console, [
            {"channel": ch.display_name, "channelId": ch.id, "unreadCount": ch.unread_count or 0}
            for ch in channels
        ])
        return
    if fmt is OutputFormat.SIMPLE:
        for ch in channels:
            console.out(f"{ch.display_name} ({ch.unread_count or 0})", highlight=False)
        return

    table = Table(title="Unread")
    table.add_column("Channel", style="cyan")
    table.add_column("Unread", justify="right")
    table.add_column("Last Read")
    for ch in channels:
        last_read = format_ts(ch.last_read) if ch.last_read else "Never"
        table.add_row(ch.display_name, str(ch.unread_count or 0), last_read)
    console.print(table)


def render_channel_unread(console: Console, result: UnreadResult, count_only: bool = False) -> None:
    count = result.channel.unread_count or 0
    console.print(f"[bold]{escape(result.channel.display_name)}: {count} unread messages[/]")
    if not count_only and result.messages:
        render_messages(console, result.messages, result.users)


def render_scheduled(console: Console, messages: list[ScheduledMessage], fmt: OutputFormat) -> None:
    if not messages:
        console.print("No scheduled messages found")
        return
    if fmt is OutputFormat.JSON:
        _print_json(console, [m.to_dict() for m in messages])
        return
    if fmt is OutputFormat.SIMPLE:
        for m in messages:
            console.out(f"{format_ts(str(m.post_at))} {m.channel_id} {m.id} {m.text}", highlight=False)
        return

    table = Table(title="Scheduled messages")
    table.add_column("ID", style="cyan")
    table.add_column("Channel")
    table.add_column("Post At")
    table.add_column("Text")
    for m in messages:
        table.add_row(m.id, m.channel_id, format_ts(str(m.post_at)), _truncate(m.text, PURPOSE_WIDTH))
    console.print(table)
