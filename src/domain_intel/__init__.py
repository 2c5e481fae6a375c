"""
Domain Intel - WHOIS lookups and TLS certificate inspection.

This package provides a WHOIS client with per-TLD server fallback and
free-text record parsing, and a TLS certificate probe that reports on a
certificate regardless of whether it would pass trust validation.
"""

__version__ = "0.1.0"
__author__ = "Domain Intel Team"

from domain_intel.exceptions import (
    DomainIntelError,
    ValidationError,
    ConfigError,
    WhoisLookupError,
    CertificateProbeError,
)
from domain_intel.enums import (
    LogLevel,
    DomainValidationErrorCode,
    WHOISErrorCode,
    ProbeErrorCode,
    KeyAlgorithm,
)
from domain_intel.domain_validator import (
    DomainValidator,
    DomainValidationResult,
    DomainValidationError,
)
from domain_intel.config import (
    WhoisConfig,
    TLSConfig,
    ServiceConfig,
    LoggingConfig,
    SystemConfig,
    load_config_from_env,
    load_config_from_file,
    save_config_to_file,
)
from domain_intel.models import (
    WhoisRecord,
    CertificateRecord,
    ChainEntry,
)
from domain_intel.date_parser import DateParser
from domain_intel.whois_parser import (
    WhoisTextParser,
    FieldRule,
    FIELD_RULES,
)
from domain_intel.tld_registry import (
    WhoisServerRegistry,
    DEFAULT_SERVERS,
)
from domain_intel.whois_client import WhoisClient
from domain_intel.tls_context import create_tls_context
from domain_intel.certificate_validator import (
    CertificateValidator,
    matches_domain,
)
from domain_intel.certificate_probe import (
    CertificateProbe,
    build_certificate_record,
)
from domain_intel.audit_logger import (
    AuditLogger,
    LogEntry,
)
from domain_intel.orchestrator import (
    LookupService,
    create_service,
)

__all__ = [
    # Exceptions
    "DomainIntelError",
    "ValidationError",
    "ConfigError",
    "WhoisLookupError",
    "CertificateProbeError",
    # Enums
    "LogLevel",
    "DomainValidationErrorCode",
    "WHOISErrorCode",
    "ProbeErrorCode",
    "KeyAlgorithm",
    # Domain Validator
    "DomainValidator",
    "DomainValidationResult",
    "DomainValidationError",
    # Configuration
    "WhoisConfig",
    "TLSConfig",
    "ServiceConfig",
    "LoggingConfig",
    "SystemConfig",
    "load_config_from_env",
    "load_config_from_file",
    "save_config_to_file",
    # Models
    "WhoisRecord",
    "CertificateRecord",
    "ChainEntry",
    # WHOIS
    "DateParser",
    "WhoisTextParser",
    "FieldRule",
    "FIELD_RULES",
    "WhoisServerRegistry",
    "DEFAULT_SERVERS",
    "WhoisClient",
    # TLS
    "create_tls_context",
    "CertificateValidator",
    "matches_domain",
    "CertificateProbe",
    "build_certificate_record",
    # Audit Logger
    "AuditLogger",
    "LogEntry",
    # Orchestration
    "LookupService",
    "create_service",
]
