"""slack-cli — send, schedule, read and track unread Slack messages from the terminal.

Tokens live encrypted in ``~/.slack-cli/config.json`` under named profiles.
"""

import asyncio
import logging
import time

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from slack_cli.catalog import CHANNEL_TYPE_FILTERS, channel_types_for
from slack_cli.client import SlackClient
from slack_cli.errors import ValidationError
from slack_cli.output import (
    FORMAT_CHOICES,
    OutputFormat,
    render_channel_unread,
    render_channels,
    render_history,
    render_scheduled,
    render_unread_channels,
)
from slack_cli.profiles import ProfileStore, mask_token
from slack_cli.validators import (
    read_message_file,
    resolve_post_at,
    since_to_oldest,
    validate_message_count,
    validate_thread_ts,
)

logger = logging.getLogger(__name__)

console = Console()


def get_store() -> ProfileStore:
    return ProfileStore()


def get_client(profile: str | None = None) -> SlackClient:
    """Build a SlackClient from the stored token of ``profile`` (current if None)."""
    token = get_store().get_token(profile)
    return SlackClient.from_token(token)


def _run(coro):
    return asyncio.run(coro)


# -- CLI group ----------------------------------------------------------------


@click.group()
@click.option("--debug", is_flag=True, default=False, help="Enable debug logging.")
@click.option(
    "-p",
    "--profile",
    default=None,
    help="Profile to use (defaults to the current profile).",
)
@click.pass_context
def cli(ctx: click.Context, debug: bool, profile: str | None) -> None:
    """Slack CLI — send and read Slack messages from your terminal."""
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")
    ctx.ensure_object(dict)
    ctx.obj["profile"] = profile


# -- config -------------------------------------------------------------------


@cli.group()
def config() -> None:
    """Manage API tokens and profiles."""


@config.command("set")
@click.option("--token", required=True, help="Slack API token.")
@click.pass_context
def config_set(ctx: click.Context, token: str) -> None:
    """Save an API token (encrypted) for the selected profile."""
    name = get_store().set_token(token, ctx.obj["profile"])
    console.print(f'[green]Token saved successfully for profile "{name}"[/]')


@config.command("get")
@click.pass_context
def config_get(ctx: click.Context) -> None:
    """Show the selected profile's configuration."""
    store = get_store()
    name = ctx.obj["profile"] or store.get_current()
    if name not in store.list_profile_names():
        console.print(
            f'[yellow]No configuration found for profile "{name}". '
            f'Use "slack-cli config set --token <token>" to set up.[/]'
        )
        return
    profile = store.get_profile(name)
    console.print(f"[bold]Profile:[/] {name}")
    console.print(f"  Token: [cyan]{mask_token(profile.token)}[/]")
    console.print(f"  Updated: [dim]{profile.updated_at}[/]")


@config.command("profiles")
def config_profiles() -> None:
    """List all saved profiles."""
    profiles = get_store().list_profiles()
    if not profiles:
        raise click.ClickException(
            'No profiles found. Use "slack-cli config set --token <token>" to create one.'
        )

    table = Table(title="Profiles")
    table.add_column("Name", style="cyan")
    table.add_column("Token")
    table.add_column("Current")
    for name, profile, is_current in profiles:
        table.add_row(name, mask_token(profile.token), "yes" if is_current else "")
    console.print(table)


@config.command("use")
@click.argument("name")
def config_use(name: str) -> None:
    """Switch the current profile."""
    get_store().set_current(name)
    console.print(f'[green]Switched to profile "{name}"[/]')


@config.command("clear")
@click.pass_context
def config_clear(ctx: click.Context) -> None:
    """Delete the selected profile."""
    store = get_store()
    name = ctx.obj["profile"] or store.get_current()
    store.delete_profile(name)
    console.print(f'[green]Profile "{name}" cleared successfully[/]')


# -- send ---------------------------------------------------------------------


@cli.command()
@click.option("-c", "--channel", required=True, help="Target channel name or ID.")
@click.option("-m", "--message", default=None, help="Message to send.")
@click.option("-f", "--file", "file_path", default=None, help="File containing the message.")
@click.option("--thread", "thread_ts", default=None, help="Reply in thread (message timestamp).")
@click.option("--at", default=None, help="Schedule at epoch seconds or ISO 8601 time.")
@click.option("--after", default=None, help="Schedule after N minutes.")
@click.pass_context
def send(
    ctx: click.Context,
    channel: str,
    message: str | None,
    file_path: str | None,
    thread_ts: str | None,
    at: str | None,
    after: str | None,
) -> None:
    """Send a message to a channel, now or scheduled."""
    if not message and not file_path:
        raise ValidationError("You must specify either --message or --file")
    if message and file_path:
        raise ValidationError("Cannot use both --message and --file")
    if at and after:
        raise ValidationError("Cannot use both --at and --after")
    if thread_ts:
        validate_thread_ts(thread_ts)

    text = read_message_file(file_path) if file_path else message
    client = get_client(ctx.obj["profile"])

    if at or after:
        post_at = resolve_post_at(at, after)
        if post_at is None:
            raise ValidationError("Invalid schedule time. Use epoch seconds, ISO 8601 or positive minutes.")
        if post_at <= int(time.time()):
            raise ValidationError("Schedule time must be in the future.")
        scheduled = _run(client.schedule_message(channel, text, post_at, thread_ts))
        console.print(f"[green]Message scheduled[/] (id={scheduled.id}, post_at={scheduled.post_at})")
        return

    sent = _run(client.send_message(channel, text, thread_ts))
    console.print(f"[green]Message sent[/] (ts={sent.ts})")


# -- scheduled ----------------------------------------------------------------


@cli.command()
@click.option("-c", "--channel", default=None, help="Filter by channel name or ID.")
@click.option("--limit", default=50, type=click.IntRange(min=1), help="Maximum messages to list.")
@click.option("--format", "fmt", type=click.Choice(FORMAT_CHOICES), default="table")
@click.pass_context
def scheduled(ctx: click.Context, channel: str | None, limit: int, fmt: str) -> None:
    """List scheduled messages."""
    client = get_client(ctx.obj["profile"])
    messages = _run(client.list_scheduled_messages(channel, limit))
    render_scheduled(console, messages, OutputFormat(fmt))


# -- channels -----------------------------------------------------------------


@cli.command()
@click.option(
    "--type",
    "channel_type",
    type=click.Choice(list(CHANNEL_TYPE_FILTERS)),
    default="public",
    help="Channel type to list.",
)
@click.option("--include-archived", is_flag=True, default=False, help="Include archived channels.")
@click.option("--limit", default=100, type=click.IntRange(min=1), help="Page size hint.")
@click.option("--format", "fmt", type=click.Choice(FORMAT_CHOICES), default="table")
@click.pass_context
def channels(
    ctx: click.Context, channel_type: str, include_archived: bool, limit: int, fmt: str
) -> None:
    """List channels."""
    client = get_client(ctx.obj["profile"])
    result = _run(
        client.list_channels(channel_types_for(channel_type), not include_archived, limit)
    )
    render_channels(console, result, OutputFormat(fmt))


# -- history ------------------------------------------------------------------


@cli.command()
@click.option("-c", "--channel", required=True, help="Channel name or ID.")
@click.option("-n", "--number", default=10, type=int, help="Number of messages (1-1000).")
@click.option("--since", default=None, help="Only messages since YYYY-MM-DD HH:MM:SS.")
@click.pass_context
def history(ctx: click.Context, channel: str, number: int, since: str | None) -> None:
    """Show recent messages of a channel."""
    validate_message_count(number)
    oldest = since_to_oldest(since) if since else None
    client = get_client(ctx.obj["profile"])
    result = _run(client.get_history(channel, number, oldest))
    render_history(console, channel, result)


# -- unread -------------------------------------------------------------------


@cli.command()
@click.option("-c", "--channel", default=None, help="Show unread for one channel.")
@click.option("--count-only", is_flag=True, default=False, help="Show only counts.")
@click.option("--limit", default=50, type=click.IntRange(min=1), help="Maximum channels to show.")
@click.option("--format", "fmt", type=click.Choice(FORMAT_CHOICES), default="table")
@click.option("--mark", is_flag=True, default=False, help="Mark the channel as read afterwards.")
@click.pass_context
def unread(
    ctx: click.Context,
    channel: str | None,
    count_only: bool,
    limit: int,
    fmt: str,
    mark: bool,
) -> None:
    """Show unread messages across channels, or for one channel."""
    if mark and not channel:
        raise ValidationError("--mark requires --channel")
    client = get_client(ctx.obj["profile"])

    if channel:

        async def fetch_and_mark():
            found = await client.get_channel_unread(channel)
            if mark:
                await client.mark_as_read(found.channel.id)
            return found

        result = _run(fetch_and_mark())
        render_channel_unread(console, result, count_only)
        if mark:
            console.print(f"[green]Marked {escape(result.channel.display_name)} as read[/]")
        return

    result = _run(client.list_unread_channels())
    render_unread_channels(console, result[:limit], OutputFormat(fmt), count_only)


if __name__ == "__main__":
    cli()
