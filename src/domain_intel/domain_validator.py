"""
Domain validation and normalization module.

Normalizes user-supplied domains into the canonical form sent to WHOIS
servers: trimmed, lowercase and IDNA-encoded when the input contains
international characters.
"""

import re
from dataclasses import dataclass, field
from typing import Optional

import idna

from domain_intel.enums import DomainValidationErrorCode
from domain_intel.exceptions import ValidationError


# Control characters, whitespace and symbols never valid in a host name
# (RFC 1035, RFC 5891)
FORBIDDEN_CHARS_PATTERN = re.compile(
    r'[\x00-\x1f\x7f'
    r'\s'
    r'!@#$%^&*()+=\[\]{}|\\:;"\'<>,?/`~]'
)


@dataclass
class DomainValidationError:
    """Why a domain was rejected."""

    code: DomainValidationErrorCode
    message: str
    details: dict = field(default_factory=dict)


@dataclass
class DomainValidationResult:
    """Outcome of DomainValidator.validate()."""

    valid: bool
    canonical_domain: Optional[str]
    error: Optional[DomainValidationError]

    @classmethod
    def accepted(cls, canonical: str) -> "DomainValidationResult":
        return cls(valid=True, canonical_domain=canonical, error=None)

    @classmethod
    def rejected(
        cls,
        code: DomainValidationErrorCode,
        message: str,
        **details,
    ) -> "DomainValidationResult":
        return cls(
            valid=False,
            canonical_domain=None,
            error=DomainValidationError(code=code, message=message, details=details),
        )

    def raise_for_error(self) -> str:
        """Return the canonical domain or raise the validation failure."""
        if self.valid and self.canonical_domain:
            return self.canonical_domain

        error = self.error or DomainValidationError(
            code=DomainValidationErrorCode.EMPTY_INPUT,
            message="domain cannot be empty",
        )
        raise ValidationError(
            code=error.code.value,
            message=error.message,
            details=error.details,
        )


class DomainValidator:
    """
    Turns raw user input into a canonical domain.

    Checks run in order and the first failure wins: empty input, forbidden
    characters, IDNA encoding, presence of a top-level label.
    """

    def validate(self, raw_domain: str) -> DomainValidationResult:
        """
        Validate and normalize a domain string.

        Args:
            raw_domain: Domain as typed by the user

        Returns:
            DomainValidationResult holding either the canonical domain or the error
        """
        domain = (raw_domain or "").strip()
        if not domain:
            return DomainValidationResult.rejected(
                DomainValidationErrorCode.EMPTY_INPUT,
                "domain cannot be empty",
                raw_input=raw_domain,
            )

        forbidden = FORBIDDEN_CHARS_PATTERN.findall(domain)
        if forbidden:
            return DomainValidationResult.rejected(
                DomainValidationErrorCode.FORBIDDEN_CHARS,
                "Domain contains forbidden characters",
                raw_input=raw_domain,
                forbidden_chars=forbidden,
            )

        try:
            canonical = self.normalize_to_canonical(domain)
        except ValidationError as e:
            return DomainValidationResult.rejected(
                DomainValidationErrorCode.IDNA_ERROR,
                e.message,
                **e.details,
            )

        if extract_tld(canonical) is None:
            return DomainValidationResult.rejected(
                DomainValidationErrorCode.MISSING_TLD,
                f"invalid domain format: {canonical}",
                raw_input=raw_domain,
                canonical=canonical,
            )

        return DomainValidationResult.accepted(canonical)

    def normalize_to_canonical(self, domain: str) -> str:
        """
        Lowercase a domain and IDNA-encode it if it contains non-ASCII characters.

        Raises:
            ValidationError: If IDNA encoding fails
        """
        lowered = domain.strip().lower()
        if lowered.isascii():
            return lowered

        try:
            return idna.encode(lowered, uts46=True).decode("ascii")
        except idna.IDNAError as e:
            raise ValidationError(
                code=DomainValidationErrorCode.IDNA_ERROR.value,
                message=f"IDNA encoding failed: {e}",
                details={"domain": domain, "idna_error": str(e)},
            )


def extract_tld(domain: str) -> Optional[str]:
    """
    Extract the top-level label (text after the last dot) of a domain.

    Returns:
        Lowercase TLD, or None when the domain has no dot or ends with one
    """
    _, dot, tld = (domain or "").rpartition(".")
    if not dot or not tld:
        return None
    return tld.lower()
