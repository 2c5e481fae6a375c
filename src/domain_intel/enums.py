"""
Enumeration types for the domain intelligence package.

These enums provide type-safe constants for status codes, error codes,
and configuration options throughout the system.
"""

from enum import Enum


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class DomainValidationErrorCode(Enum):
    """Error codes for domain validation failures."""

    EMPTY_INPUT = "empty_input"
    FORBIDDEN_CHARS = "forbidden_chars"
    IDNA_ERROR = "idna_error"
    MISSING_TLD = "missing_tld"
    INVALID_PORT = "invalid_port"


class WHOISErrorCode(Enum):
    """Error codes for a single WHOIS server attempt."""

    CONNECTION_FAILED = "connection_failed"
    WRITE_FAILED = "write_failed"
    READ_FAILED = "read_failed"
    EMPTY_RESPONSE = "empty_response"
    TIMEOUT = "timeout"


class ProbeErrorCode(Enum):
    """Error codes for TLS certificate probing."""

    HANDSHAKE_FAILED = "handshake_failed"
    NO_CERTIFICATE = "no_certificate"
    DECODE_FAILED = "decode_failed"


class KeyAlgorithm(Enum):
    """Public key algorithms with a known key size."""

    RSA = "RSA"
    ECDSA = "ECDSA"
    ED25519 = "Ed25519"
    UNKNOWN = "Unknown"
