"""
Property-based tests for the WHOIS client.

Network attempts are replaced by overriding the blocking query method, so
fallback ordering and error mapping can be checked without real servers.
"""

import asyncio
import io
import time

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from domain_intel.audit_logger import AuditLogger
from domain_intel.enums import LogLevel, WHOISErrorCode
from domain_intel.exceptions import ValidationError, WhoisLookupError
from domain_intel.tld_registry import WhoisServerRegistry
from domain_intel.whois_client import WhoisClient


SAMPLE_RESPONSE = (
    "Domain Name: EXAMPLE.TEST\n"
    "Registrar: Example Registrar LLC\n"
    "Creation Date: 2001-02-03T04:05:06Z\n"
    "Name Server: NS1.EXAMPLE.TEST\n"
)


class ScriptedWhoisClient(WhoisClient):
    """
    WhoisClient whose per-server answers are scripted.

    Each entry in `answers` is either response text or an exception instance
    to raise for that server.
    """

    def __init__(self, answers: dict, **kwargs) -> None:
        super().__init__(**kwargs)
        self.answers = answers
        self.calls: list[tuple[str, str]] = []

    def _execute_whois_query(self, domain: str, server: str) -> str:
        self.calls.append((domain, server))
        answer = self.answers[server]
        if isinstance(answer, BaseException):
            raise answer
        return answer


def make_registry(servers: list[str]) -> WhoisServerRegistry:
    return WhoisServerRegistry(custom_servers={"test": servers})


class TestServerFallbackProperty:
    """
    Candidates are tried in order and the first usable answer wins.
    """

    def test_first_success_after_failures(self) -> None:
        servers = ["s1.test", "s2.test", "s3.test", "s4.test"]
        client = ScriptedWhoisClient(
            answers={
                "s1.test": ConnectionRefusedError("refused"),
                "s2.test": "   \r\n",
                "s3.test": SAMPLE_RESPONSE,
                "s4.test": SAMPLE_RESPONSE,
            },
            registry=make_registry(servers),
        )

        record = asyncio.run(client.lookup("example.test"))

        assert record.whois_server == "s3.test"
        assert record.registrar == "Example Registrar LLC"
        assert [server for _, server in client.calls] == ["s1.test", "s2.test", "s3.test"]

    @given(
        failures=st.integers(min_value=0, max_value=4),
        total=st.integers(min_value=1, max_value=5),
    )
    @settings(max_examples=100)
    def test_servers_tried_in_order_until_success(self, failures: int, total: int) -> None:
        """
        *For any* candidate list where the first k servers fail, the client SHALL
        query exactly servers 1..k+1 in order and report server k+1.
        """
        servers = [f"s{i}.test" for i in range(total)]
        answers = {}
        for index, server in enumerate(servers):
            answers[server] = ConnectionResetError("reset") if index < failures else SAMPLE_RESPONSE
        client = ScriptedWhoisClient(answers=answers, registry=make_registry(servers))

        if failures >= total:
            with pytest.raises(WhoisLookupError) as exc_info:
                asyncio.run(client.lookup("example.test"))
            assert exc_info.value.server == servers[-1]
            assert [server for _, server in client.calls] == servers
        else:
            record = asyncio.run(client.lookup("example.test"))
            assert record.whois_server == servers[failures]
            assert [server for _, server in client.calls] == servers[: failures + 1]

    def test_query_uses_canonical_domain(self) -> None:
        client = ScriptedWhoisClient(
            answers={"s1.test": SAMPLE_RESPONSE},
            registry=make_registry(["s1.test"]),
        )

        record = asyncio.run(client.lookup("  Example.TEST "))

        assert client.calls == [("example.test", "s1.test")]
        assert record.domain == "example.test"


class TestLastErrorProperty:
    """
    When every candidate fails, only the last server's error reaches the caller.
    """

    def test_all_servers_fail(self) -> None:
        client = ScriptedWhoisClient(
            answers={
                "s1.test": "",
                "s2.test": ConnectionRefusedError("connection refused"),
            },
            registry=make_registry(["s1.test", "s2.test"]),
        )

        with pytest.raises(WhoisLookupError) as exc_info:
            asyncio.run(client.lookup("example.test"))

        error = exc_info.value
        assert error.server == "s2.test"
        assert error.domain == "example.test"
        assert error.code == WHOISErrorCode.CONNECTION_FAILED.value
        assert "whois lookup failed for example.test via s2.test" in str(error)
        assert "connection refused" in str(error)

    def test_empty_responses_only(self) -> None:
        client = ScriptedWhoisClient(
            answers={"s1.test": "", "s2.test": "\n\n"},
            registry=make_registry(["s1.test", "s2.test"]),
        )

        with pytest.raises(WhoisLookupError) as exc_info:
            asyncio.run(client.lookup("example.test"))

        assert exc_info.value.code == WHOISErrorCode.EMPTY_RESPONSE.value
        assert exc_info.value.server == "s2.test"

    def test_slow_server_times_out(self) -> None:
        class SlowClient(WhoisClient):
            def _execute_whois_query(self, domain: str, server: str) -> str:
                time.sleep(0.5)
                return SAMPLE_RESPONSE

        client = SlowClient(
            registry=make_registry(["slow.test"]),
            operation_timeout=0.05,
        )

        with pytest.raises(WhoisLookupError) as exc_info:
            asyncio.run(client.lookup("example.test"))

        assert exc_info.value.code == WHOISErrorCode.TIMEOUT.value

    def test_failures_are_logged_as_warnings(self) -> None:
        logger = AuditLogger(output_format="json", output_stream=io.StringIO())
        client = ScriptedWhoisClient(
            answers={"s1.test": ConnectionRefusedError("refused"), "s2.test": SAMPLE_RESPONSE},
            registry=make_registry(["s1.test", "s2.test"]),
            logger=logger,
        )

        asyncio.run(client.lookup("example.test"))

        levels = [(entry.level, entry.data.get("server")) for entry in logger.entries]
        assert (LogLevel.WARN, "s1.test") in levels
        assert (LogLevel.INFO, "s2.test") in levels


class TestInputRejectionProperty:
    """
    Invalid input is rejected before any server is contacted.
    """

    @pytest.mark.parametrize("domain", ["", "   ", "localhost", "bad domain.com"])
    def test_invalid_domain_makes_no_calls(self, domain: str) -> None:
        client = ScriptedWhoisClient(answers={}, registry=make_registry(["s1.test"]))

        with pytest.raises(ValidationError):
            asyncio.run(client.lookup(domain))

        assert client.calls == []


class TestWireProtocol:
    """
    The client speaks the port 43 protocol: domain plus CRLF, read until close.
    """

    def test_lookup_against_local_server(self) -> None:
        received: list[bytes] = []

        async def handle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
            received.append(await reader.readline())
            writer.write(SAMPLE_RESPONSE.encode("utf-8"))
            await writer.drain()
            writer.close()
            await writer.wait_closed()

        async def scenario():
            server = await asyncio.start_server(handle, "127.0.0.1", 0)
            port = server.sockets[0].getsockname()[1]
            client = WhoisClient(
                registry=make_registry(["127.0.0.1"]),
                port=port,
                connect_timeout=2.0,
                operation_timeout=5.0,
            )
            async with server:
                return await client.lookup("example.test")

        record = asyncio.run(scenario())

        assert received == [b"example.test\r\n"]
        assert record.whois_server == "127.0.0.1"
        assert record.registrar == "Example Registrar LLC"
        assert record.name_servers == ("ns1.example.test",)
        assert record.raw_data == SAMPLE_RESPONSE

    def test_refused_connection_is_reported(self) -> None:
        async def scenario():
            # Bind then close to obtain a port nothing listens on
            server = await asyncio.start_server(lambda r, w: None, "127.0.0.1", 0)
            port = server.sockets[0].getsockname()[1]
            server.close()
            await server.wait_closed()
            client = WhoisClient(
                registry=make_registry(["127.0.0.1"]),
                port=port,
                connect_timeout=2.0,
                operation_timeout=5.0,
            )
            return await client.lookup("example.test")

        with pytest.raises(WhoisLookupError) as exc_info:
            asyncio.run(scenario())

        assert exc_info.value.code == WHOISErrorCode.CONNECTION_FAILED.value
