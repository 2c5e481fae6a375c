"""
Lookup orchestration for the domain intelligence package.

The service composes the WHOIS client and the certificate probe, applies a
request-level timeout around each call and always returns a well-formed
response body: the record on success, or the queried name plus an "error"
field on failure. Errors are never surfaced as exceptions to the caller.
"""

import asyncio
from datetime import datetime, timezone
from typing import Optional

from .audit_logger import AuditLogger
from .certificate_probe import CertificateProbe
from .certificate_validator import CertificateValidator
from .config import SystemConfig
from .enums import LogLevel
from .exceptions import DomainIntelError
from .tld_registry import WhoisServerRegistry
from .whois_client import WhoisClient


COMPONENT = "service"


def error_body(name: str, message: str) -> dict:
    """Response body for a failed lookup."""
    return {
        "domain": name,
        "query_time": datetime.now(timezone.utc).isoformat(),
        "error": message,
    }


class LookupService:
    """
    Entry point for WHOIS and certificate lookups.

    Collaborators are constructed by the caller and injected, so every
    request shares the same immutable registry and clients.
    """

    def __init__(
        self,
        whois_client: WhoisClient,
        certificate_probe: CertificateProbe,
        whois_request_timeout: float = 30.0,
        ssl_request_timeout: float = 20.0,
        default_tls_port: int = 443,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the lookup service.

        Args:
            whois_client: Client used for WHOIS lookups
            certificate_probe: Probe used for certificate checks
            whois_request_timeout: Envelope around the whole WHOIS fallback sequence
            ssl_request_timeout: Envelope around one certificate probe
            default_tls_port: Port probed when none is given
            logger: Optional audit logger
        """
        self._whois_client = whois_client
        self._certificate_probe = certificate_probe
        self._whois_request_timeout = whois_request_timeout
        self._ssl_request_timeout = ssl_request_timeout
        self._default_tls_port = default_tls_port
        self._logger = logger

    async def whois_lookup(self, domain: str, include_raw: bool = False) -> dict:
        """
        Look up WHOIS data and render the response body.

        Args:
            domain: Domain to query
            include_raw: Include the raw server response in the body

        Returns:
            Record dictionary, or an error body with an "error" field
        """
        try:
            record = await asyncio.wait_for(
                self._whois_client.lookup(domain),
                timeout=self._whois_request_timeout,
            )
        except asyncio.TimeoutError:
            return self._failed(
                domain,
                f"whois lookup for {domain} timed out after {self._whois_request_timeout}s",
            )
        except DomainIntelError as e:
            return self._failed(domain, str(e), e)

        return record.to_dict(include_raw=include_raw)

    async def ssl_check(self, host: str, port: Optional[int] = None) -> dict:
        """
        Probe a host's certificate and render the response body.

        Args:
            host: Host name or IP address
            port: Port to probe (service default when omitted)

        Returns:
            Record dictionary, or an error body with an "error" field
        """
        target_port = port if port is not None else self._default_tls_port
        try:
            record = await asyncio.wait_for(
                self._certificate_probe.probe(host, target_port),
                timeout=self._ssl_request_timeout,
            )
        except asyncio.TimeoutError:
            return self._failed(
                host,
                f"SSL check for {host} timed out after {self._ssl_request_timeout}s",
            )
        except DomainIntelError as e:
            return self._failed(host, str(e), e)

        return record.to_dict()

    def _failed(self, name: str, message: str, error: Optional[DomainIntelError] = None) -> dict:
        if self._logger:
            self._logger.log(
                LogLevel.ERROR,
                COMPONENT,
                "Lookup failed",
                {
                    "name": name,
                    "error_message": message,
                    "error_code": error.code if error else "timeout",
                },
            )
        return error_body(name, message)


def create_service(
    config: Optional[SystemConfig] = None,
    logger: Optional[AuditLogger] = None,
) -> LookupService:
    """
    Build the full collaborator graph from configuration.

    Args:
        config: System configuration (defaults to built-in defaults)
        logger: Optional audit logger shared by all components

    Returns:
        Ready-to-use LookupService
    """
    config = config or SystemConfig()

    registry = WhoisServerRegistry(
        custom_servers=config.whois.servers,
        default_servers=config.whois.default_servers,
    )
    whois_client = WhoisClient(
        registry=registry,
        connect_timeout=config.whois.connect_timeout,
        operation_timeout=config.whois.operation_timeout,
        port=config.whois.port,
        logger=logger,
    )
    certificate_probe = CertificateProbe(
        validator=CertificateValidator(),
        connect_timeout=config.tls.connect_timeout,
        logger=logger,
    )

    return LookupService(
        whois_client=whois_client,
        certificate_probe=certificate_probe,
        whois_request_timeout=config.service.whois_request_timeout,
        ssl_request_timeout=config.service.ssl_request_timeout,
        default_tls_port=config.tls.default_port,
        logger=logger,
    )
