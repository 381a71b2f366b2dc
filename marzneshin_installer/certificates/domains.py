"""Domain collection for certificate requests."""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

import click

from ..utils.prompts import ask_text, ask_yes_no, collect_until_done

logger = logging.getLogger(__name__)

WILDCARD_PREFIX = "*."


@dataclass(frozen=True)
class DomainEntry:
    """One domain and whether its wildcard form is requested too."""

    name: str
    include_wildcard: bool = False

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Domain name cannot be empty")

    @classmethod
    def parse(cls, value: str) -> "DomainEntry":
        """
        Build an entry from a command-line value.

        ``*.example.com`` means ``example.com`` including all subdomains.
        """
        value = value.strip()
        if value.startswith(WILDCARD_PREFIX):
            return cls(value[len(WILDCARD_PREFIX):], include_wildcard=True)
        return cls(value)

    def describe(self) -> str:
        if self.include_wildcard:
            return f"{self.name} (including all subdomains)"
        return self.name


class DomainCollector:
    """Accumulates the ordered domain list for one certificate."""

    def __init__(
        self,
        ask: Optional[Callable[[str], str]] = None,
        confirm: Optional[Callable[[str], bool]] = None,
    ):
        """
        Initialize domain collector.

        Args:
            ask: Prompt returning free text (empty allowed)
            confirm: Prompt returning a yes/no answer
        """
        self.ask = ask or ask_text
        self.confirm = confirm or ask_yes_no

    def collect(self) -> List[DomainEntry]:
        """
        Ask the operator for domains.

        The first domain is required. Later prompts end on an empty answer
        or ``done``. Duplicates are kept as entered.

        Returns:
            List[DomainEntry]: Domains in input order, primary domain first
        """
        domains = collect_until_done(self._ask_domain, follow_up=self._ask_wildcard, minimum=1)
        self.summarize(domains)
        return domains

    def _ask_domain(self, number: int) -> str:
        if number == 1:
            return self.ask("Enter your first domain (e.g., example.com)")
        return self.ask(f"Enter domain #{number} (press Enter or type 'done' to finish)")

    def _ask_wildcard(self, name: str) -> DomainEntry:
        include = self.confirm(f"Do you want to include all subdomains for {name}?")
        return DomainEntry(name, include_wildcard=include)

    @staticmethod
    def from_values(values: Iterable[str]) -> List[DomainEntry]:
        """Build the domain list without prompting."""
        domains = [DomainEntry.parse(value) for value in values if value.strip()]
        if not domains:
            raise ValueError("At least one domain is required")
        return domains

    @staticmethod
    def summarize(domains: List[DomainEntry]) -> None:
        click.echo("Certificate will be generated for the following domains:")
        for entry in domains:
            click.echo(f"  - {entry.describe()}")
        logger.debug("Collected %d domain(s)", len(domains))
