"""
Date parsing for WHOIS free text.

Registries publish dates in many layouts. The parser tries a fixed,
ordered list of known layouts and reports no match as None, never as a
sentinel date.
"""

from datetime import datetime, timezone
from typing import Optional


# Order matters: the first layout that parses wins
DATE_LAYOUTS = (
    "%Y-%m-%dT%H:%M:%S%z",      # RFC 3339 with offset (also accepts a literal Z)
    "%Y-%m-%dT%H:%M:%S.%f%z",   # RFC 3339 with fractional seconds
    "%Y-%m-%dT%H:%M:%SZ",       # RFC 3339 UTC
    "%Y-%m-%dT%H:%M:%S",        # RFC 3339 without offset
    "%Y-%m-%d %H:%M:%S",        # SQL datetime
    "%Y-%m-%d",                 # date only
    "%d-%b-%Y",                 # 15-Mar-2024 and 5-Mar-2024
    "%B %d %Y",                 # March 15 2024
    "%Y/%m/%d",                 # 2024/03/15
)


class DateParser:
    """Parses heterogeneous WHOIS date strings into aware UTC datetimes."""

    def __init__(self, layouts: tuple[str, ...] = DATE_LAYOUTS) -> None:
        self._layouts = layouts

    def parse(self, text: str) -> Optional[datetime]:
        """
        Parse a date string.

        Args:
            text: Raw date text from a WHOIS response

        Returns:
            Timezone-aware datetime, or None if no layout matches. Layouts
            without an offset are interpreted as UTC.
        """
        if not text:
            return None

        value = text.strip()
        for layout in self._layouts:
            try:
                parsed = datetime.strptime(value, layout)
            except ValueError:
                continue
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed

        return None
