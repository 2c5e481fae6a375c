"""
WHOIS response parser.

WHOIS responses have no grammar; every registry formats them differently.
This module mines the common "Label: value" lines with a declarative rule
table. Parsing is best effort and never raises: fields that cannot be
matched stay unset.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from .date_parser import DateParser
from .models import WhoisRecord


COMMENT_PREFIXES = ("%", "#")


@dataclass(frozen=True)
class FieldRule:
    """
    Extraction rule for one record field.

    Attributes:
        field: WhoisRecord attribute the value is stored in
        label: Pattern searched in the text left of the first colon
        multi_valued: Append every match instead of keeping the last one
        is_date: Run the value through DateParser; unparseable values are dropped
        transform: Normalization applied to the value before storing
    """

    field: str
    label: re.Pattern
    multi_valued: bool = False
    is_date: bool = False
    transform: Callable[[str], str] = str.strip


def _label(pattern: str) -> re.Pattern:
    return re.compile(pattern, re.IGNORECASE)


def _lower(value: str) -> str:
    return value.strip().lower()


FIELD_RULES: tuple[FieldRule, ...] = (
    FieldRule("registrar", _label(r"registrar$")),
    FieldRule("creation_date", _label(r"creation date|created|registered"), is_date=True),
    FieldRule("expiration_date", _label(r"expir"), is_date=True),
    FieldRule("updated_date", _label(r"updated|modified"), is_date=True),
    FieldRule("name_servers", _label(r"^(name ?server|nserver)"), multi_valued=True, transform=_lower),
    FieldRule("status", _label(r"^(domain )?status$"), multi_valued=True),
    FieldRule("registrant_org", _label(r"registrant.*organi[sz]ation")),
    FieldRule("registrant_email", _label(r"registrant.*e-?mail")),
    FieldRule("admin_email", _label(r"admin.*e-?mail")),
    FieldRule("tech_email", _label(r"tech.*e-?mail")),
)


def remove_duplicates(values: list[str]) -> list[str]:
    """Remove duplicates while keeping the first occurrence order."""
    seen: set[str] = set()
    result = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


class WhoisTextParser:
    """Extracts a WhoisRecord from a raw WHOIS response."""

    def __init__(
        self,
        rules: tuple[FieldRule, ...] = FIELD_RULES,
        date_parser: Optional[DateParser] = None,
    ) -> None:
        self._rules = rules
        self._date_parser = date_parser or DateParser()

    def parse(
        self,
        domain: str,
        raw_text: str,
        server: str,
        query_time: Optional[datetime] = None,
    ) -> WhoisRecord:
        """
        Parse a raw WHOIS response.

        Args:
            domain: Queried domain (canonical form)
            raw_text: Full response text
            server: WHOIS server that produced the response
            query_time: Time of the query (defaults to now, UTC)

        Returns:
            WhoisRecord with every field that could be extracted
        """
        single: dict[str, object] = {}
        multi: dict[str, list[str]] = {
            rule.field: [] for rule in self._rules if rule.multi_valued
        }

        for line in (raw_text or "").splitlines():
            line = line.strip()
            if not line or line.startswith(COMMENT_PREFIXES):
                continue

            label, sep, value = line.partition(":")
            if not sep:
                continue
            label = label.strip()

            for rule in self._rules:
                if not rule.label.search(label):
                    continue

                text = rule.transform(value)
                if not text:
                    continue

                if rule.multi_valued:
                    multi[rule.field].append(text)
                elif rule.is_date:
                    parsed = self._date_parser.parse(text)
                    if parsed is not None:
                        single[rule.field] = parsed
                else:
                    single[rule.field] = text

        return WhoisRecord(
            domain=domain,
            whois_server=server,
            query_time=query_time or datetime.now(timezone.utc),
            raw_data=raw_text or "",
            name_servers=tuple(remove_duplicates(multi.get("name_servers", []))),
            status=tuple(remove_duplicates(multi.get("status", []))),
            **single,
        )
