"""
Certificate factory for tests.

Builds real X.509 certificates in-process with cryptography so the probe
and validator can be exercised without a network.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, ed448, ed25519, rsa
from cryptography.x509.oid import AuthorityInformationAccessOID, NameOID


# Key generation is slow for RSA, so keys are shared across tests
EC_KEY = ec.generate_private_key(ec.SECP256R1())
EC384_KEY = ec.generate_private_key(ec.SECP384R1())
RSA_KEY = rsa.generate_private_key(public_exponent=65537, key_size=2048)
ED25519_KEY = ed25519.Ed25519PrivateKey.generate()
ED448_KEY = ed448.Ed448PrivateKey.generate()
CA_KEY = ec.generate_private_key(ec.SECP256R1())


def utc_now() -> datetime:
    """Current UTC time truncated to whole seconds (certificate precision)."""
    return datetime.now(timezone.utc).replace(microsecond=0)


def make_name(common_name: str, organization: Optional[str] = None) -> x509.Name:
    attributes = [x509.NameAttribute(NameOID.COMMON_NAME, common_name)]
    if organization:
        attributes.append(x509.NameAttribute(NameOID.ORGANIZATION_NAME, organization))
    return x509.Name(attributes)


def make_certificate(
    common_name: str = "example.com",
    sans: Sequence[str] = (),
    not_before: Optional[datetime] = None,
    not_after: Optional[datetime] = None,
    key=None,
    issuer_name: Optional[x509.Name] = None,
    issuer_key=None,
    is_ca: bool = False,
    crl_uri: Optional[str] = None,
    ocsp_uri: Optional[str] = None,
    serial_number: int = 1000,
) -> x509.Certificate:
    """
    Build a certificate; self-signed unless issuer_name/issuer_key are given.
    """
    now = utc_now()
    key = key or EC_KEY
    subject = make_name(common_name)
    issuer = issuer_name or subject
    signing_key = issuer_key or key

    builder = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(key.public_key())
        .serial_number(serial_number)
        .not_valid_before(not_before or now - timedelta(days=30))
        .not_valid_after(not_after or now + timedelta(days=90))
        .add_extension(x509.BasicConstraints(ca=is_ca, path_length=None), critical=True)
        .add_extension(
            x509.KeyUsage(
                digital_signature=True,
                content_commitment=False,
                key_encipherment=not is_ca,
                data_encipherment=False,
                key_agreement=False,
                key_cert_sign=is_ca,
                crl_sign=is_ca,
                encipher_only=False,
                decipher_only=False,
            ),
            critical=True,
        )
    )

    if sans:
        builder = builder.add_extension(
            x509.SubjectAlternativeName([x509.DNSName(name) for name in sans]),
            critical=False,
        )

    if crl_uri:
        builder = builder.add_extension(
            x509.CRLDistributionPoints([
                x509.DistributionPoint(
                    full_name=[x509.UniformResourceIdentifier(crl_uri)],
                    relative_name=None,
                    reasons=None,
                    crl_issuer=None,
                )
            ]),
            critical=False,
        )

    if ocsp_uri:
        builder = builder.add_extension(
            x509.AuthorityInformationAccess([
                x509.AccessDescription(
                    AuthorityInformationAccessOID.OCSP,
                    x509.UniformResourceIdentifier(ocsp_uri),
                )
            ]),
            critical=False,
        )

    if isinstance(signing_key, (ed25519.Ed25519PrivateKey, ed448.Ed448PrivateKey)):
        return builder.sign(signing_key, None)
    return builder.sign(signing_key, hashes.SHA256())


def make_chain(host: str = "example.com", sans: Sequence[str] = ("example.com",)) -> list[x509.Certificate]:
    """Leaf issued by an intermediate CA, leaf first."""
    ca_name = make_name("Test Intermediate CA")
    ca_cert = make_certificate(
        common_name="Test Intermediate CA",
        key=CA_KEY,
        is_ca=True,
        serial_number=1,
    )
    leaf = make_certificate(
        common_name=host,
        sans=sans,
        issuer_name=ca_name,
        issuer_key=CA_KEY,
        crl_uri="http://crl.test.example/ca.crl",
        ocsp_uri="http://ocsp.test.example",
    )
    return [leaf, ca_cert]
