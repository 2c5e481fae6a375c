"""
Property-based tests for WHOIS date parsing.
"""

from datetime import datetime, timezone

from hypothesis import given, settings
from hypothesis import strategies as st

from domain_intel.date_parser import DateParser


def whole_second_datetimes() -> st.SearchStrategy[datetime]:
    """Naive datetimes without sub-second precision in a realistic range."""
    return st.datetimes(
        min_value=datetime(1985, 1, 1),
        max_value=datetime(2099, 12, 31, 23, 59, 59),
    ).map(lambda dt: dt.replace(microsecond=0))


# (layout used to render, whether the layout keeps the time of day)
RENDER_LAYOUTS = [
    ("%Y-%m-%dT%H:%M:%S+00:00", True),
    ("%Y-%m-%dT%H:%M:%SZ", True),
    ("%Y-%m-%dT%H:%M:%S", True),
    ("%Y-%m-%d %H:%M:%S", True),
    ("%Y-%m-%d", False),
    ("%d-%b-%Y", False),
    ("%B %d %Y", False),
    ("%Y/%m/%d", False),
]


class TestDateParserRoundTripProperty:
    """
    Every supported layout parses back to the timestamp it was rendered from.
    """

    @given(moment=whole_second_datetimes(), layout=st.sampled_from(RENDER_LAYOUTS))
    @settings(max_examples=200)
    def test_supported_layouts_round_trip(self, moment: datetime, layout: tuple) -> None:
        """
        *For any* timestamp and supported layout, rendering then parsing SHALL
        yield the original timestamp (in UTC, truncated to the layout's precision).
        """
        fmt, keeps_time = layout
        expected = moment if keeps_time else moment.replace(hour=0, minute=0, second=0)
        expected = expected.replace(tzinfo=timezone.utc)

        parsed = DateParser().parse(moment.strftime(fmt))

        assert parsed == expected
        assert parsed.tzinfo is not None

    def test_rfc3339_utc(self) -> None:
        parsed = DateParser().parse("2024-03-15T10:00:00Z")

        assert parsed == datetime(2024, 3, 15, 10, 0, 0, tzinfo=timezone.utc)

    def test_rfc3339_with_offset_keeps_instant(self) -> None:
        parsed = DateParser().parse("2024-03-15T12:00:00+02:00")

        assert parsed == datetime(2024, 3, 15, 10, 0, 0, tzinfo=timezone.utc)

    def test_rfc3339_with_fraction(self) -> None:
        parsed = DateParser().parse("2024-03-15T10:00:00.5Z")

        assert parsed == datetime(2024, 3, 15, 10, 0, 0, 500000, tzinfo=timezone.utc)

    def test_day_month_year(self) -> None:
        assert DateParser().parse("15-Mar-2024") == datetime(2024, 3, 15, tzinfo=timezone.utc)

    def test_single_digit_day(self) -> None:
        assert DateParser().parse("5-Mar-2024") == datetime(2024, 3, 5, tzinfo=timezone.utc)

    def test_month_name_layout(self) -> None:
        assert DateParser().parse("March 15 2024") == datetime(2024, 3, 15, tzinfo=timezone.utc)

    def test_surrounding_whitespace_is_ignored(self) -> None:
        assert DateParser().parse("  2024/03/15 \t") == datetime(2024, 3, 15, tzinfo=timezone.utc)


class TestDateParserNoMatchProperty:
    """
    Unrecognized input yields None, never a sentinel date.
    """

    @given(text=st.text(alphabet="abcdefghijklmnopqrstuvwxyz !?", max_size=40))
    @settings(max_examples=100)
    def test_letters_only_never_parse(self, text: str) -> None:
        """*For any* text without digits, the parser SHALL return None."""
        assert DateParser().parse(text) is None

    def test_not_a_date(self) -> None:
        assert DateParser().parse("not a date") is None

    def test_empty_input(self) -> None:
        assert DateParser().parse("") is None

    def test_impossible_date(self) -> None:
        assert DateParser().parse("2024-02-30") is None

    def test_unsupported_layout(self) -> None:
        assert DateParser().parse("15.03.2024") is None
