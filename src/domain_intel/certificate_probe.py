"""
TLS certificate probe.

Opens a TLS session to host:port with verification explicitly skipped,
collects the certificates the peer presents and turns the leaf into a
CertificateRecord. Trust problems are reported by CertificateValidator as
advisory messages rather than aborting the probe.
"""

import asyncio
import ipaddress
import socket
import ssl
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

import idna
from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa
from cryptography.x509.oid import SignatureAlgorithmOID

from .audit_logger import AuditLogger
from .certificate_validator import CertificateValidator, get_dns_names
from .enums import DomainValidationErrorCode, KeyAlgorithm, LogLevel, ProbeErrorCode
from .exceptions import CertificateProbeError, ValidationError
from .models import CertificateRecord, ChainEntry
from .tls_context import create_tls_context


COMPONENT = "certificate_probe"

DEFAULT_TLS_PORT = 443

TLS_VERSION_NAMES = {
    "TLSv1": "TLS 1.0",
    "TLSv1.1": "TLS 1.1",
    "TLSv1.2": "TLS 1.2",
    "TLSv1.3": "TLS 1.3",
}

SIGNATURE_ALGORITHM_NAMES = {
    SignatureAlgorithmOID.RSA_WITH_MD5: "MD5-RSA",
    SignatureAlgorithmOID.RSA_WITH_SHA1: "SHA1-RSA",
    SignatureAlgorithmOID.RSA_WITH_SHA224: "SHA224-RSA",
    SignatureAlgorithmOID.RSA_WITH_SHA256: "SHA256-RSA",
    SignatureAlgorithmOID.RSA_WITH_SHA384: "SHA384-RSA",
    SignatureAlgorithmOID.RSA_WITH_SHA512: "SHA512-RSA",
    SignatureAlgorithmOID.RSASSA_PSS: "RSA-PSS",
    SignatureAlgorithmOID.ECDSA_WITH_SHA1: "ECDSA-SHA1",
    SignatureAlgorithmOID.ECDSA_WITH_SHA224: "ECDSA-SHA224",
    SignatureAlgorithmOID.ECDSA_WITH_SHA256: "ECDSA-SHA256",
    SignatureAlgorithmOID.ECDSA_WITH_SHA384: "ECDSA-SHA384",
    SignatureAlgorithmOID.ECDSA_WITH_SHA512: "ECDSA-SHA512",
    SignatureAlgorithmOID.ED25519: "Ed25519",
    SignatureAlgorithmOID.ED448: "Ed448",
}

# Label per KeyUsage attribute, in the conventional bit order
KEY_USAGE_LABELS = (
    ("digital_signature", "Digital Signature"),
    ("content_commitment", "Content Commitment"),
    ("key_encipherment", "Key Encipherment"),
    ("data_encipherment", "Data Encipherment"),
    ("key_agreement", "Key Agreement"),
    ("key_cert_sign", "Certificate Signing"),
    ("crl_sign", "CRL Signing"),
)


def classify_public_key(public_key: object) -> KeyAlgorithm:
    """Map a public key object onto the closed set of known algorithms."""
    if isinstance(public_key, rsa.RSAPublicKey):
        return KeyAlgorithm.RSA
    if isinstance(public_key, ec.EllipticCurvePublicKey):
        return KeyAlgorithm.ECDSA
    if isinstance(public_key, ed25519.Ed25519PublicKey):
        return KeyAlgorithm.ED25519
    return KeyAlgorithm.UNKNOWN


KEY_SIZE_BY_ALGORITHM: dict[KeyAlgorithm, Callable[[object], int]] = {
    KeyAlgorithm.RSA: lambda key: key.key_size,
    KeyAlgorithm.ECDSA: lambda key: key.curve.key_size,
    KeyAlgorithm.ED25519: lambda key: 256,
    KeyAlgorithm.UNKNOWN: lambda key: 0,
}


def get_key_size(public_key: object) -> int:
    """Return the key size in bits, or 0 for unknown key types."""
    return KEY_SIZE_BY_ALGORITHM[classify_public_key(public_key)](public_key)


def get_signature_algorithm(cert: x509.Certificate) -> str:
    oid = cert.signature_algorithm_oid
    return SIGNATURE_ALGORITHM_NAMES.get(oid, oid.dotted_string)


def get_key_usage(cert: x509.Certificate) -> list[str]:
    """Return the labels of all key usage bits set on the certificate."""
    try:
        usage = cert.extensions.get_extension_for_class(x509.KeyUsage).value
    except x509.ExtensionNotFound:
        return []
    return [label for attr, label in KEY_USAGE_LABELS if getattr(usage, attr)]


def is_ca(cert: x509.Certificate) -> bool:
    try:
        constraints = cert.extensions.get_extension_for_class(x509.BasicConstraints).value
    except x509.ExtensionNotFound:
        return False
    return constraints.ca


def get_tls_version_name(version: Optional[str]) -> str:
    if not version:
        return "Unknown"
    return TLS_VERSION_NAMES.get(version, f"Unknown ({version})")


def validate_host(raw_host: str) -> str:
    """
    Trim and lowercase a probe target, rejecting names that cannot be resolved.

    IP literals pass unchanged. Host names must encode under IDNA, which
    rules out empty labels and labels longer than 63 characters.

    Raises:
        ValidationError: If the host is empty or not a valid host name
    """
    host = (raw_host or "").strip().lower()
    if not host:
        raise ValidationError(
            code=DomainValidationErrorCode.EMPTY_INPUT.value,
            message="host cannot be empty",
            details={"raw_input": raw_host},
        )

    try:
        ipaddress.ip_address(host)
        return host
    except ValueError:
        pass

    try:
        idna.encode(host, uts46=True)
    except idna.IDNAError as e:
        raise ValidationError(
            code=DomainValidationErrorCode.IDNA_ERROR.value,
            message=f"invalid host: {host}",
            details={"host": host, "idna_error": str(e)},
        ) from e
    return host


def build_chain_entry(cert: x509.Certificate) -> ChainEntry:
    return ChainEntry(
        subject=cert.subject.rfc4514_string(),
        issuer=cert.issuer.rfc4514_string(),
        not_before=cert.not_valid_before_utc,
        not_after=cert.not_valid_after_utc,
        is_ca=is_ca(cert),
        key_usage=tuple(get_key_usage(cert)),
    )


def build_certificate_record(
    host: str,
    port: int,
    chain: list[x509.Certificate],
    tls_version: str,
    cipher_suite: str,
    validator: Optional[CertificateValidator] = None,
    now: Optional[datetime] = None,
) -> CertificateRecord:
    """
    Assemble a CertificateRecord from the certificates a peer presented.

    Args:
        host: Probed host, also used for the domain-match check
        port: Probed port
        chain: Peer certificates, leaf first
        tls_version: Negotiated protocol name (e.g. 'TLS 1.3')
        cipher_suite: Negotiated cipher suite name
        validator: Validator producing the advisory messages
        now: Reference time (defaults to now, UTC)

    Returns:
        Populated CertificateRecord
    """
    now = now or datetime.now(timezone.utc)
    validator = validator or CertificateValidator()
    leaf = chain[0]

    not_before = leaf.not_valid_before_utc
    not_after = leaf.not_valid_after_utc
    # timedelta.days is floored, so a partially elapsed day counts as gone
    days_until_expiry = (not_after - now).days

    public_key = leaf.public_key()
    key_algorithm = classify_public_key(public_key)
    dns_names = get_dns_names(leaf)
    issuer = leaf.issuer.rfc4514_string()
    subject = leaf.subject.rfc4514_string()

    return CertificateRecord(
        host=host,
        port=port,
        is_valid=days_until_expiry > 0 and now > not_before,
        issuer=issuer,
        subject=subject,
        serial_number=str(leaf.serial_number),
        not_before=not_before,
        not_after=not_after,
        days_until_expiry=days_until_expiry,
        subject_alt_names=tuple(dns_names),
        signature_algorithm=get_signature_algorithm(leaf),
        public_key_algorithm=key_algorithm.value,
        key_size=get_key_size(public_key),
        version=leaf.version.value + 1,
        is_self_signed=issuer == subject,
        is_wildcard=any(name.startswith("*.") for name in dns_names),
        certificate_chain=tuple(build_chain_entry(cert) for cert in chain),
        tls_version=tls_version,
        cipher_suite=cipher_suite,
        validation_errors=tuple(validator.validate(leaf, host, now=now)),
        query_time=now,
    )


@dataclass
class TLSHandshakeResult:
    """Raw material collected from one TLS session."""

    chain_der: list[bytes]
    tls_version: str
    cipher_suite: str


class CertificateProbe:
    """
    Reads and describes the certificate served on host:port.

    Only the certificates the peer actually sends are reported; no chain
    building or fetching of missing intermediates is attempted.
    """

    def __init__(
        self,
        validator: Optional[CertificateValidator] = None,
        connect_timeout: float = 10.0,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the probe.

        Args:
            validator: Validator for the advisory checks
            connect_timeout: Timeout for the TCP connect and TLS handshake
            logger: Optional audit logger
        """
        self._validator = validator or CertificateValidator()
        self._connect_timeout = connect_timeout
        self._logger = logger

    async def probe(self, host: str, port: int = DEFAULT_TLS_PORT) -> CertificateRecord:
        """
        Probe a host and describe its certificate.

        Args:
            host: Host name or IP address; trimmed and lowercased
            port: TCP port (defaults to 443)

        Returns:
            CertificateRecord, including validation messages

        Raises:
            ValidationError: If the host is empty or malformed, or the port is out of range
            CertificateProbeError: If the handshake fails or no certificate is sent
        """
        host = validate_host(host)
        if not 0 < port <= 65535:
            raise ValidationError(
                code=DomainValidationErrorCode.INVALID_PORT.value,
                message=f"Invalid port number: {port}",
                details={"port": port},
            )

        loop = asyncio.get_running_loop()
        try:
            handshake = await loop.run_in_executor(None, self._handshake, host, port)
        except (OSError, ssl.SSLError, UnicodeError) as e:
            error = CertificateProbeError(host, port, e, ProbeErrorCode.HANDSHAKE_FAILED.value)
            self._log_failure(error)
            raise error from e

        if not handshake.chain_der:
            error = CertificateProbeError(
                host,
                port,
                ValueError("no certificates found"),
                ProbeErrorCode.NO_CERTIFICATE.value,
            )
            self._log_failure(error)
            raise error

        try:
            chain = [x509.load_der_x509_certificate(der) for der in handshake.chain_der]
        except ValueError as e:
            error = CertificateProbeError(host, port, e, ProbeErrorCode.DECODE_FAILED.value)
            self._log_failure(error)
            raise error from e

        record = build_certificate_record(
            host=host,
            port=port,
            chain=chain,
            tls_version=handshake.tls_version,
            cipher_suite=handshake.cipher_suite,
            validator=self._validator,
        )

        if self._logger:
            self._logger.log(
                LogLevel.INFO,
                COMPONENT,
                "Certificate retrieved",
                {
                    "host": host,
                    "port": port,
                    "chain_length": len(record.certificate_chain),
                    "days_until_expiry": record.days_until_expiry,
                    "validation_errors": list(record.validation_errors),
                },
            )
        return record

    def _handshake(self, host: str, port: int) -> TLSHandshakeResult:
        """Perform the blocking TCP connect and TLS handshake."""
        ctx = create_tls_context(skip_verification=True)

        with socket.create_connection((host, port), timeout=self._connect_timeout) as sock:
            with ctx.wrap_socket(sock, server_hostname=host) as ssock:
                cipher = ssock.cipher()
                return TLSHandshakeResult(
                    chain_der=_peer_chain(ssock),
                    tls_version=get_tls_version_name(ssock.version()),
                    cipher_suite=cipher[0] if cipher else "Unknown",
                )

    def _log_failure(self, error: CertificateProbeError) -> None:
        if self._logger:
            self._logger.log_error(
                COMPONENT,
                "Certificate probe failed",
                error=error,
                additional_data={"host": error.host, "port": error.port},
            )


def _peer_chain(ssock: ssl.SSLSocket) -> list[bytes]:
    """
    Return the DER certificates the peer presented, leaf first.

    Python 3.13 exposes the unverified peer chain on the socket. Python 3.10
    to 3.12 only expose it on the underlying SSL object, as certificate
    objects that are converted to DER here.
    """
    get_unverified_chain = getattr(ssock, "get_unverified_chain", None)
    if get_unverified_chain is not None:
        chain = get_unverified_chain()
        if chain:
            return list(chain)

    sslobj = getattr(ssock, "_sslobj", None)
    get_raw_chain = getattr(sslobj, "get_unverified_chain", None)
    if get_raw_chain is not None:
        chain = get_raw_chain()
        if chain:
            return [cert.public_bytes(ssl._ssl.ENCODING_DER) for cert in chain]

    leaf = ssock.getpeercert(binary_form=True)
    return [leaf] if leaf else []
