"""
Logical certificate validation.

The probe never lets the TLS layer reject a certificate. These checks run
afterwards and report problems as advisory messages instead of failures.
"""

from datetime import datetime, timezone
from typing import Optional

from cryptography import x509
from cryptography.x509.oid import AuthorityInformationAccessOID, NameOID


EXPIRED = "certificate has expired"
NOT_YET_VALID = "certificate is not yet valid"
DOMAIN_MISMATCH = "certificate does not match domain"
NO_REVOCATION_INFO = "no revocation checking mechanism available"


def get_common_name(cert: x509.Certificate) -> Optional[str]:
    """Return the subject common name, if present."""
    attributes = cert.subject.get_attributes_for_oid(NameOID.COMMON_NAME)
    if not attributes:
        return None
    value = attributes[0].value
    return value.decode("utf-8", errors="replace") if isinstance(value, bytes) else value


def get_dns_names(cert: x509.Certificate) -> list[str]:
    """Return the DNS entries of the subject alternative name extension."""
    try:
        san = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName)
    except x509.ExtensionNotFound:
        return []
    return san.value.get_values_for_type(x509.DNSName)


def get_crl_distribution_points(cert: x509.Certificate) -> list[str]:
    """Return the URIs of all CRL distribution points."""
    try:
        ext = cert.extensions.get_extension_for_class(x509.CRLDistributionPoints)
    except x509.ExtensionNotFound:
        return []

    uris = []
    for point in ext.value:
        for name in point.full_name or []:
            if isinstance(name, x509.UniformResourceIdentifier):
                uris.append(name.value)
    return uris


def get_ocsp_servers(cert: x509.Certificate) -> list[str]:
    """Return the OCSP responder URIs from authority information access."""
    try:
        ext = cert.extensions.get_extension_for_class(x509.AuthorityInformationAccess)
    except x509.ExtensionNotFound:
        return []

    return [
        desc.access_location.value
        for desc in ext.value
        if desc.access_method == AuthorityInformationAccessOID.OCSP
        and isinstance(desc.access_location, x509.UniformResourceIdentifier)
    ]


def wildcard_matches(pattern: str, domain: str) -> bool:
    """
    Match a single name against a domain, honoring "*." wildcards.

    A wildcard "*.base" matches "base" itself as well as any name ending
    with ".base".
    """
    pattern = pattern.lower()
    domain = domain.lower()

    if pattern == domain:
        return True

    if pattern.startswith("*."):
        base = pattern[2:]
        return domain == base or domain.endswith("." + base)

    return False


def matches_domain(common_name: Optional[str], dns_names: list[str], domain: str) -> bool:
    """Check the common name and every SAN against the queried domain."""
    if common_name and common_name.lower() == domain.lower():
        return True

    return any(wildcard_matches(name, domain) for name in dns_names)


class CertificateValidator:
    """
    Checks a certificate for expiry, validity start, name match and
    revocation information. Every check runs; none short-circuits.
    """

    def validate(
        self,
        cert: x509.Certificate,
        domain: str,
        now: Optional[datetime] = None,
    ) -> list[str]:
        """
        Validate a certificate against a domain.

        Args:
            cert: Leaf certificate
            domain: Queried domain or host
            now: Reference time (defaults to now, UTC)

        Returns:
            List of validation-error messages; empty when no issue was found
        """
        now = now or datetime.now(timezone.utc)
        errors = []

        if now > cert.not_valid_after_utc:
            errors.append(EXPIRED)

        if now < cert.not_valid_before_utc:
            errors.append(NOT_YET_VALID)

        if not matches_domain(get_common_name(cert), get_dns_names(cert), domain):
            errors.append(DOMAIN_MISMATCH)

        if not get_crl_distribution_points(cert) and not get_ocsp_servers(cert):
            errors.append(NO_REVOCATION_INFO)

        return errors
