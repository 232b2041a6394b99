"""Unit tests for day separator labels."""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from domain.services.day_separators import day_label, local_date, with_day_separators
from tests.unit.conftest import make_chat_message

TOKYO = ZoneInfo("Asia/Tokyo")
NOW = datetime(2026, 5, 10, 3, 0, tzinfo=timezone.utc)  # 12:00 in Tokyo


class TestDayLabel:
    def test_today_and_yesterday(self):
        today = date(2026, 5, 10)
        assert day_label(date(2026, 5, 10), today) == "Today"
        assert day_label(date(2026, 5, 9), today) == "Yesterday"

    def test_older_days_use_month_and_day(self):
        assert day_label(date(2026, 1, 3), date(2026, 5, 10)) == "1/3"


class TestLocalDate:
    def test_naive_timestamps_are_utc(self):
        # 20:00 UTC is already the next day in Tokyo
        assert local_date(datetime(2026, 5, 9, 20, 0), TOKYO) == date(2026, 5, 10)

    def test_aware_timestamps_are_converted(self):
        moment = datetime(2026, 5, 9, 20, 0, tzinfo=timezone.utc)
        assert local_date(moment, timezone.utc) == date(2026, 5, 9)


class TestWithDaySeparators:
    def test_label_only_on_day_change(self):
        messages = [
            make_chat_message(content="a", created_at=datetime(2026, 5, 8, 1, 0)),
            make_chat_message(content="b", created_at=datetime(2026, 5, 8, 2, 0)),
            make_chat_message(content="c", created_at=datetime(2026, 5, 9, 1, 0)),
            make_chat_message(content="d", created_at=datetime(2026, 5, 10, 1, 0)),
        ]

        labelled = with_day_separators(messages, TOKYO, now=NOW)

        assert [label for label, _ in labelled] == ["5/8", None, "Yesterday", "Today"]
        assert [m.content for _, m in labelled] == ["a", "b", "c", "d"]

    def test_time_zone_moves_day_boundary(self):
        messages = [
            make_chat_message(content="late", created_at=datetime(2026, 5, 9, 14, 0)),
            make_chat_message(content="later", created_at=datetime(2026, 5, 9, 16, 0)),
        ]

        utc_labels = [label for label, _ in with_day_separators(messages, timezone.utc, now=NOW)]
        tokyo_labels = [label for label, _ in with_day_separators(messages, TOKYO, now=NOW)]

        assert utc_labels == ["Yesterday", None]
        assert tokyo_labels == ["Yesterday", "Today"]

    def test_empty(self):
        assert with_day_separators([], TOKYO, now=NOW) == []
