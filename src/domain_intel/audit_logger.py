"""
Audit Logger module for the domain intelligence package.

Every WHOIS attempt, certificate probe and failed request is recorded as a
structured LogEntry. Entries are written as JSON lines, as human-readable
text, or both, and values under secret-looking keys never reach the stream.
"""

import json
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Optional, TextIO

from domain_intel.enums import LogLevel


LEVEL_ORDER = {
    LogLevel.DEBUG: 0,
    LogLevel.INFO: 1,
    LogLevel.WARN: 2,
    LogLevel.ERROR: 3,
}

OUTPUT_FORMATS = ("json", "text", "both")


@dataclass
class LogEntry:
    """Represents a single log entry with all metadata."""

    timestamp: str
    level: LogLevel
    component: str
    message: str
    data: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "level": self.level.value,
            "component": self.component,
            "message": self.message,
            "data": self.data,
        }


def _dump(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, default=str)


class AuditLogger:
    """
    Structured logger shared by the WHOIS client, the certificate probe and
    the lookup service.

    The logger is optional everywhere: components receive None when logging
    is disabled and skip their log calls.
    """

    # Substrings marking a key as secret (matched case-insensitively)
    SENSITIVE_KEYS = frozenset({
        'token', 'secret', 'password', 'api_key', 'auth', 'authorization',
        'credential', 'credentials', 'private_key', 'access_token',
    })

    MASK_VALUE = "***MASKED***"

    def __init__(
        self,
        output_format: str = "both",
        output_stream: Optional[TextIO] = None,
        min_level: LogLevel = LogLevel.DEBUG,
    ):
        """
        Initialize the audit logger.

        Args:
            output_format: 'json', 'text', or 'both'
            output_stream: Destination stream (defaults to sys.stderr)
            min_level: Entries below this level are dropped
        """
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(f"Invalid output_format: {output_format}")

        self._output_format = output_format
        self._output_stream = output_stream or sys.stderr
        self._min_level = min_level
        self._entries: list[LogEntry] = []

        formatters: list[Callable[[LogEntry], str]] = []
        if output_format in ("json", "both"):
            formatters.append(self.format_json)
        if output_format in ("text", "both"):
            formatters.append(self.format_text)
        self._formatters = formatters

    @classmethod
    def from_config(cls, level: str, output_format: str, output_stream: Optional[TextIO] = None) -> "AuditLogger":
        """Create a logger from LoggingConfig values."""
        try:
            min_level = LogLevel(level.lower())
        except ValueError:
            raise ValueError(f"Invalid log level: {level}")
        return cls(output_format=output_format, output_stream=output_stream, min_level=min_level)

    @property
    def output_format(self) -> str:
        return self._output_format

    @property
    def entries(self) -> list[LogEntry]:
        """Copy of every entry emitted so far."""
        return list(self._entries)

    def is_enabled_for(self, level: LogLevel) -> bool:
        return LEVEL_ORDER[level] >= LEVEL_ORDER[self._min_level]

    def log(
        self,
        level: LogLevel,
        component: str,
        message: str,
        data: Optional[dict] = None,
    ) -> Optional[LogEntry]:
        """
        Record and emit one entry.

        Args:
            level: Severity
            component: Emitting component ('whois_client', 'certificate_probe', 'service')
            message: Human-readable message
            data: Structured context; secret values are masked before storage

        Returns:
            The stored LogEntry, or None if the level is filtered out
        """
        if not self.is_enabled_for(level):
            return None

        entry = LogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            level=level,
            component=component,
            message=message,
            data=self.mask_sensitive_data(data or {}),
        )
        self._entries.append(entry)

        for formatter in self._formatters:
            self._output_stream.write(formatter(entry) + "\n")
        self._output_stream.flush()

        return entry

    def log_error(
        self,
        component: str,
        message: str,
        error: Optional[BaseException] = None,
        level: LogLevel = LogLevel.ERROR,
        additional_data: Optional[dict] = None,
    ) -> Optional[LogEntry]:
        """
        Log a failure together with the exception that caused it.

        The entry data gains error_message and error_type, plus error_code
        for DomainIntelError subclasses. Recoverable failures such as a
        single WHOIS server attempt pass level=LogLevel.WARN.
        """
        data = dict(additional_data or {})

        if error is not None:
            data["error_message"] = str(error)
            data["error_type"] = type(error).__name__
            code = getattr(error, "code", None)
            if code is not None:
                data["error_code"] = code

        return self.log(level, component, message, data)

    def _is_sensitive(self, key: str) -> bool:
        key_lower = key.lower()
        return any(marker in key_lower for marker in self.SENSITIVE_KEYS)

    def mask_sensitive_data(self, data: Any) -> Any:
        """
        Return a copy of data with secret values replaced by MASK_VALUE.

        Dictionaries are walked recursively, including dictionaries nested
        in lists.
        """
        if isinstance(data, list):
            return [self.mask_sensitive_data(item) for item in data]
        if not isinstance(data, dict):
            return data

        return {
            key: self.MASK_VALUE if self._is_sensitive(key) else self.mask_sensitive_data(value)
            for key, value in data.items()
        }

    def format_json(self, entry: LogEntry) -> str:
        """Format a log entry as a single JSON line."""
        return _dump(entry.to_dict())

    def format_text(self, entry: LogEntry) -> str:
        """Format: [TIMESTAMP] LEVEL [COMPONENT] MESSAGE {data}"""
        line = f"[{entry.timestamp}] {entry.level.value.upper()} [{entry.component}] {entry.message}"
        if entry.data:
            line += " " + _dump(entry.data)
        return line

    def clear_entries(self) -> None:
        self._entries.clear()
