"""
Data models for the domain intelligence package.

Records are built fresh for every lookup and are immutable once returned.
Each record can render itself as a JSON-ready dictionary.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass(frozen=True)
class WhoisRecord:
    """Structured result of a WHOIS lookup."""

    domain: str
    whois_server: str
    query_time: datetime
    raw_data: str = ""
    registrar: Optional[str] = None
    creation_date: Optional[datetime] = None  # None means unknown
    expiration_date: Optional[datetime] = None
    updated_date: Optional[datetime] = None
    name_servers: tuple[str, ...] = ()
    status: tuple[str, ...] = ()
    registrant_org: Optional[str] = None
    registrant_email: Optional[str] = None
    admin_email: Optional[str] = None
    tech_email: Optional[str] = None

    def to_dict(self, include_raw: bool = False) -> dict:
        """Convert record to dictionary for serialization."""
        data = {
            "domain": self.domain,
            "registrar": self.registrar,
            "creation_date": _isoformat(self.creation_date),
            "expiration_date": _isoformat(self.expiration_date),
            "updated_date": _isoformat(self.updated_date),
            "name_servers": list(self.name_servers),
            "status": list(self.status),
            "registrant_org": self.registrant_org,
            "registrant_email": self.registrant_email,
            "admin_email": self.admin_email,
            "tech_email": self.tech_email,
            "whois_server": self.whois_server,
            "query_time": _isoformat(self.query_time),
        }
        if include_raw:
            data["raw_data"] = self.raw_data
        return data


@dataclass(frozen=True)
class ChainEntry:
    """One certificate as presented by the peer."""

    subject: str
    issuer: str
    not_before: datetime
    not_after: datetime
    is_ca: bool
    key_usage: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        """Convert entry to dictionary for serialization."""
        return {
            "subject": self.subject,
            "issuer": self.issuer,
            "not_before": _isoformat(self.not_before),
            "not_after": _isoformat(self.not_after),
            "is_ca": self.is_ca,
            "key_usage": list(self.key_usage),
        }


@dataclass(frozen=True)
class CertificateRecord:
    """Metadata of the certificate served on host:port."""

    host: str
    port: int
    is_valid: bool
    issuer: str
    subject: str
    serial_number: str
    not_before: datetime
    not_after: datetime
    days_until_expiry: int  # negative once expired
    signature_algorithm: str
    public_key_algorithm: str
    key_size: int
    version: int
    is_self_signed: bool
    is_wildcard: bool
    tls_version: str
    cipher_suite: str
    query_time: datetime
    subject_alt_names: tuple[str, ...] = ()
    certificate_chain: tuple[ChainEntry, ...] = ()
    validation_errors: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        """Convert record to dictionary for serialization."""
        return {
            "domain": self.host,
            "port": self.port,
            "is_valid": self.is_valid,
            "issuer": self.issuer,
            "subject": self.subject,
            "serial_number": self.serial_number,
            "not_before": _isoformat(self.not_before),
            "not_after": _isoformat(self.not_after),
            "days_until_expiry": self.days_until_expiry,
            "subject_alt_names": list(self.subject_alt_names),
            "signature_algorithm": self.signature_algorithm,
            "public_key_algorithm": self.public_key_algorithm,
            "key_size": self.key_size,
            "version": self.version,
            "is_self_signed": self.is_self_signed,
            "is_wildcard": self.is_wildcard,
            "certificate_chain": [entry.to_dict() for entry in self.certificate_chain],
            "tls_version": self.tls_version,
            "cipher_suite": self.cipher_suite,
            "validation_errors": list(self.validation_errors),
            "query_time": _isoformat(self.query_time),
        }
