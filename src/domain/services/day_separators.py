"""Day separator labels for a chat view."""

from collections.abc import Sequence
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Optional

from domain.entities.chat import ChatMessage


def local_date(moment: datetime, tz: tzinfo) -> date:
    """Calendar date of ``moment`` in ``tz``. Naive timestamps are UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(tz).date()


def day_label(day: date, today: date) -> str:
    if day == today:
        return "Today"
    if day == today - timedelta(days=1):
        return "Yesterday"
    return f"{day.month}/{day.day}"


def with_day_separators(
    messages: Sequence[ChatMessage],
    tz: tzinfo,
    now: Optional[datetime] = None,
) -> list[tuple[Optional[str], ChatMessage]]:
    """Pair each message with a separator label, or None when it shares the
    calendar day of the message before it."""
    today = local_date(now or datetime.now(timezone.utc), tz)
    result: list[tuple[Optional[str], ChatMessage]] = []
    previous: Optional[date] = None
    for message in messages:
        day = local_date(message.created_at, tz)
        result.append((day_label(day, today) if day != previous else None, message))
        previous = day
    return result
