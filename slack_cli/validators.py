"""Checks and conversions for user-supplied option values."""

import re
import time
from datetime import datetime
from pathlib import Path

from slack_cli.errors import FileError, ValidationError

THREAD_TS_PATTERN = re.compile(r"^\d{10}\.\d{6}$")
MIN_MESSAGE_COUNT = 1
MAX_MESSAGE_COUNT = 1000


def validate_thread_ts(ts: str) -> str:
    if not THREAD_TS_PATTERN.match(ts):
        raise ValidationError(
            "Invalid thread timestamp format. Expected format: 1234567890.123456"
        )
    return ts


def validate_message_count(count: int) -> int:
    if not MIN_MESSAGE_COUNT <= count <= MAX_MESSAGE_COUNT:
        raise ValidationError(
            f"Message count must be between {MIN_MESSAGE_COUNT} and {MAX_MESSAGE_COUNT}"
        )
    return count


def _parse_datetime(value: str) -> datetime | None:
    try:
        # Naive values are local time, like the rest of the terminal
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None


def parse_scheduled_timestamp(value: str) -> int | None:
    """Epoch seconds from an all-digit string or an ISO 8601 date/time."""
    trimmed = value.strip()
    if trimmed.isdigit():
        return int(trimmed)
    parsed = _parse_datetime(trimmed)
    if parsed is None:
        return None
    return int(parsed.timestamp())


def resolve_post_at(
    at: str | None, after_minutes: str | int | None, now: float | None = None
) -> int | None:
    """Resolve ``--at`` / ``--after`` into epoch seconds. ``at`` wins."""
    if at:
        return parse_scheduled_timestamp(at)
    if after_minutes is None or after_minutes == "":
        return None
    try:
        minutes = int(after_minutes)
    except ValueError:
        return None
    if minutes <= 0:
        return None
    now = time.time() if now is None else now
    return int(now) + minutes * 60


def since_to_oldest(since: str) -> str:
    """Convert a ``--since`` date into the ``oldest`` epoch-seconds filter."""
    parsed = _parse_datetime(since)
    if parsed is None:
        raise ValidationError("Invalid date format. Use YYYY-MM-DD HH:MM:SS")
    return str(int(parsed.timestamp()))


def read_message_file(path: str | Path) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise FileError(f"Error reading file {path}: {exc}") from exc
