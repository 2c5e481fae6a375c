"""
TLD Registry - candidate WHOIS servers per top-level domain.

Each TLD maps to an ordered list of WHOIS servers that are tried in turn
until one answers. TLDs without an entry fall back to DEFAULT_SERVERS.
"""

from typing import Optional

from .domain_validator import extract_tld
from .enums import DomainValidationErrorCode
from .exceptions import ValidationError


# Tried in order for any TLD without its own entry
DEFAULT_SERVERS = ["whois.iana.org", "whois.internic.net"]

# ============================================================================
# GENERIC TLDs (gTLDs)
# ============================================================================
GENERIC_SERVERS = {
    "com": ["whois.verisign-grs.com", "whois.markmonitor.com"],
    "net": ["whois.verisign-grs.com"],
    "org": ["whois.pir.org"],
    "info": ["whois.afilias.net"],
    "biz": ["whois.neulevel.biz"],
    "name": ["whois.nic.name"],
    "mobi": ["whois.afilias.net"],
    "pro": ["whois.afilias.net"],
}

# ============================================================================
# NEW gTLDs
# ============================================================================
NEW_GENERIC_SERVERS = {
    "io": ["whois.nic.io"],
    "co": ["whois.nic.co"],
    "app": ["whois.nic.google"],
    "dev": ["whois.nic.google"],
    "ai": ["whois.nic.ai"],
    "xyz": ["whois.nic.xyz"],
    "online": ["whois.centralnic.com"],
    "site": ["whois.centralnic.com"],
    "tech": ["whois.centralnic.com"],
    "shop": ["whois.nic.shop"],
    "top": ["whois.nic.top"],
    "cloud": ["whois.nic.cloud"],
}

# ============================================================================
# COUNTRY CODE TLDs
# ============================================================================
COUNTRY_SERVERS = {
    "de": ["whois.denic.de"],
    "eu": ["whois.eu"],
    "at": ["whois.nic.at"],
    "ch": ["whois.nic.ch"],
    "nl": ["whois.sidn.nl"],
    "fr": ["whois.nic.fr"],
    "it": ["whois.nic.it"],
    "pl": ["whois.dns.pl"],
    "se": ["whois.iis.se"],
    "uk": ["whois.nic.uk"],
    "us": ["whois.nic.us"],
    "ca": ["whois.cira.ca"],
    "br": ["whois.registro.br"],
    "jp": ["whois.jprs.jp"],
    "au": ["whois.auda.org.au"],
}

# ============================================================================
# COMBINE ALL TLDs
# ============================================================================
DEFAULT_TLD_SERVERS: dict[str, list[str]] = {
    **GENERIC_SERVERS,
    **NEW_GENERIC_SERVERS,
    **COUNTRY_SERVERS,
}


class WhoisServerRegistry:
    """
    Lookup of candidate WHOIS servers for a domain.

    The registry is built once by the composing layer and never mutated
    afterwards, so a single instance can serve concurrent lookups.
    """

    def __init__(
        self,
        custom_servers: Optional[dict[str, list[str]]] = None,
        default_servers: Optional[list[str]] = None,
    ) -> None:
        """
        Initialize the registry.

        Args:
            custom_servers: Optional per-TLD server lists overriding built-in entries
            default_servers: Optional replacement for the default fallback list
        """
        self._servers = {tld: list(hosts) for tld, hosts in DEFAULT_TLD_SERVERS.items()}
        if custom_servers:
            for tld, hosts in custom_servers.items():
                if hosts:
                    self._servers[tld.lower()] = list(hosts)

        self._default_servers = list(default_servers or DEFAULT_SERVERS)

    @property
    def default_servers(self) -> list[str]:
        """Servers used for TLDs without an entry."""
        return list(self._default_servers)

    def servers_for(self, domain: str) -> list[str]:
        """
        Return the ordered candidate servers for a domain.

        Args:
            domain: Domain name (e.g., 'example.com')

        Raises:
            ValidationError: If the domain has no top-level label
        """
        tld = extract_tld(domain.strip())
        if tld is None:
            raise ValidationError(
                code=DomainValidationErrorCode.MISSING_TLD.value,
                message=f"invalid domain format: {domain}",
                details={"domain": domain},
            )

        return list(self._servers.get(tld, self._default_servers))

    def has_tld(self, tld: str) -> bool:
        """Check if a TLD has its own server list."""
        return tld.lower() in self._servers
