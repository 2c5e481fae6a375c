"""
Exception classes for the domain intelligence package.

All exceptions inherit from DomainIntelError and provide structured
error information with codes, messages, and optional details.
"""

from typing import Optional


class DomainIntelError(Exception):
    """Base exception for all domain intelligence errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(DomainIntelError):
    """Raised when a domain, host or port is rejected before any I/O."""

    pass


class ConfigError(DomainIntelError):
    """Raised when a configuration file cannot be read or parsed."""

    pass


class WhoisLookupError(DomainIntelError):
    """
    Raised when a WHOIS server could not deliver a response.

    One instance is produced per failed server attempt; only the error of
    the last attempted server reaches the caller.
    """

    def __init__(
        self,
        domain: str,
        server: str,
        cause: BaseException,
        code: str,
    ) -> None:
        self.domain = domain
        self.server = server
        self.cause = cause
        super().__init__(
            code=code,
            message=f"whois lookup failed for {domain} via {server}: {cause}",
            details={"domain": domain, "server": server},
        )


class CertificateProbeError(DomainIntelError):
    """Raised when the TLS handshake fails or no certificate is presented."""

    def __init__(
        self,
        host: str,
        port: int,
        cause: BaseException,
        code: str,
    ) -> None:
        self.host = host
        self.port = port
        self.cause = cause
        super().__init__(
            code=code,
            message=f"SSL check failed for {host}: {cause}",
            details={"host": host, "port": port},
        )
