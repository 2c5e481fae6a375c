"""
WHOIS Client module.

This module provides a WHOIS client speaking the plain-text port 43
protocol. Candidate servers for the domain's TLD are tried strictly in
order; the first non-empty response is parsed into a WhoisRecord.
"""

import asyncio
import socket
import time
from datetime import datetime, timezone
from typing import Optional

from .audit_logger import AuditLogger
from .domain_validator import DomainValidator
from .enums import LogLevel, WHOISErrorCode
from .exceptions import WhoisLookupError
from .models import WhoisRecord
from .tld_registry import WhoisServerRegistry
from .whois_parser import WhoisTextParser


COMPONENT = "whois_client"

WHOIS_PORT = 43


class _AttemptFailed(Exception):
    """Internal marker tying a socket failure to the step that failed."""

    def __init__(self, code: WHOISErrorCode, cause: BaseException) -> None:
        self.code = code
        self.cause = cause
        super().__init__(str(cause))


class WhoisClient:
    """
    WHOIS client with server fallback.

    Each attempt opens its own TCP connection, writes the domain followed by
    CRLF and reads until the server closes the connection. A failed attempt
    (connect, write, read, timeout or empty body) moves on to the next
    candidate; only the last failure is raised once all candidates are
    exhausted.
    """

    def __init__(
        self,
        registry: Optional[WhoisServerRegistry] = None,
        parser: Optional[WhoisTextParser] = None,
        validator: Optional[DomainValidator] = None,
        connect_timeout: float = 10.0,
        operation_timeout: float = 15.0,
        port: int = WHOIS_PORT,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the WHOIS client.

        Args:
            registry: Candidate server lookup (built-in table if omitted)
            parser: Response parser
            validator: Domain normalizer
            connect_timeout: TCP connect timeout in seconds
            operation_timeout: Deadline for connect+write+read of one attempt
            port: WHOIS port
            logger: Optional audit logger
        """
        self._registry = registry or WhoisServerRegistry()
        self._parser = parser or WhoisTextParser()
        self._validator = validator or DomainValidator()
        self._connect_timeout = connect_timeout
        self._operation_timeout = operation_timeout
        self._port = port
        self._logger = logger

    async def lookup(self, domain: str) -> WhoisRecord:
        """
        Look up WHOIS data for a domain.

        Args:
            domain: Domain to query; trimmed and lowercased before use

        Returns:
            WhoisRecord parsed from the first server that answered

        Raises:
            ValidationError: If the domain is empty or malformed
            WhoisLookupError: If every candidate server failed (last error only)
        """
        canonical = self._validator.validate(domain).raise_for_error()
        servers = self._registry.servers_for(canonical)

        last_error: Optional[WhoisLookupError] = None
        for server in servers:
            started = time.monotonic()
            try:
                raw_response = await self._query_server(canonical, server)
            except _AttemptFailed as e:
                last_error = WhoisLookupError(
                    domain=canonical,
                    server=server,
                    cause=e.cause,
                    code=e.code.value,
                )
                self._log_failure(last_error)
                continue

            self._log(
                LogLevel.INFO,
                "WHOIS server answered",
                {
                    "domain": canonical,
                    "server": server,
                    "response_bytes": len(raw_response),
                    "duration_ms": round((time.monotonic() - started) * 1000, 1),
                },
            )
            return self._parser.parse(
                canonical,
                raw_response,
                server,
                query_time=datetime.now(timezone.utc),
            )

        # servers_for never returns an empty list, so last_error is set here
        raise last_error

    async def _query_server(self, domain: str, server: str) -> str:
        """
        Run one attempt against one server.

        Returns:
            Non-empty raw response text

        Raises:
            _AttemptFailed: On connect, write, read, timeout or empty body
        """
        loop = asyncio.get_running_loop()
        try:
            raw_response = await asyncio.wait_for(
                loop.run_in_executor(None, self._execute_whois_query, domain, server),
                timeout=self._operation_timeout,
            )
        except asyncio.TimeoutError as e:
            raise _AttemptFailed(
                WHOISErrorCode.TIMEOUT,
                TimeoutError(f"no response within {self._operation_timeout}s"),
            ) from e
        except OSError as e:
            raise _AttemptFailed(WHOISErrorCode.CONNECTION_FAILED, e) from e

        if not raw_response.strip():
            raise _AttemptFailed(
                WHOISErrorCode.EMPTY_RESPONSE,
                ValueError("empty response from server"),
            )

        return raw_response

    def _execute_whois_query(self, domain: str, server: str) -> str:
        """
        Execute the actual WHOIS query via a blocking socket.

        The socket timeout shrinks with every read so the whole exchange
        stays inside the operation deadline.
        """
        deadline = time.monotonic() + self._operation_timeout

        try:
            sock = socket.create_connection(
                (server, self._port),
                timeout=min(self._connect_timeout, self._operation_timeout),
            )
        except socket.timeout as e:
            raise _AttemptFailed(WHOISErrorCode.TIMEOUT, e) from e
        except OSError as e:
            raise _AttemptFailed(WHOISErrorCode.CONNECTION_FAILED, e) from e

        with sock:
            try:
                sock.settimeout(_remaining(deadline))
                sock.sendall(f"{domain}\r\n".encode("utf-8"))
            except socket.timeout as e:
                raise _AttemptFailed(WHOISErrorCode.TIMEOUT, e) from e
            except OSError as e:
                raise _AttemptFailed(WHOISErrorCode.WRITE_FAILED, e) from e

            response_parts: list[bytes] = []
            try:
                while True:
                    sock.settimeout(_remaining(deadline))
                    data = sock.recv(4096)
                    if not data:
                        break
                    response_parts.append(data)
            except socket.timeout as e:
                raise _AttemptFailed(WHOISErrorCode.TIMEOUT, e) from e
            except OSError as e:
                raise _AttemptFailed(WHOISErrorCode.READ_FAILED, e) from e

        return b"".join(response_parts).decode("utf-8", errors="replace")

    def _log_failure(self, error: WhoisLookupError) -> None:
        if self._logger:
            self._logger.log_error(
                COMPONENT,
                "WHOIS server attempt failed",
                error=error,
                level=LogLevel.WARN,
                additional_data={"domain": error.domain, "server": error.server},
            )

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, COMPONENT, message, data)


def _remaining(deadline: float) -> float:
    remaining = deadline - time.monotonic()
    if remaining <= 0:
        raise socket.timeout("operation deadline exceeded")
    return remaining
