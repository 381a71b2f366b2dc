"""Certificate request assembly."""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from .domains import WILDCARD_PREFIX, DomainEntry


def to_validation_names(entries: Sequence[DomainEntry]) -> List[str]:
    """
    Expand domain entries into the names the certificate must cover.

    Each wildcard form follows its base domain. Order is preserved and
    nothing is deduplicated.
    """
    names = []
    for entry in entries:
        names.append(entry.name)
        if entry.include_wildcard:
            names.append(f"{WILDCARD_PREFIX}{entry.name}")
    return names


@dataclass(frozen=True)
class CertificateRequest:
    """Everything the certificate authority client needs for one issuance."""

    domains: Tuple[DomainEntry, ...]
    credentials_path: str

    @property
    def primary_domain(self) -> str:
        return self.domains[0].name

    @property
    def validation_names(self) -> List[str]:
        return to_validation_names(self.domains)


class CertificateRequestBuilder:
    """Turns a collected domain list into a certificate request."""

    def build(self, domains: Sequence[DomainEntry], credentials_path: str) -> CertificateRequest:
        """
        Build an immutable certificate request.

        Args:
            domains: Domains in input order, primary domain first
            credentials_path: DNS provider credential file for the client

        Returns:
            CertificateRequest: The request
        """
        if not domains:
            raise ValueError("A certificate request needs at least one domain")
        return CertificateRequest(domains=tuple(domains), credentials_path=credentials_path)
