"""Destination planning for issued certificates."""

import logging
import os
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

import click

from ..utils.prompts import ask_text, ask_yes_no, collect_until_done

logger = logging.getLogger(__name__)

CERT_EXTENSION = ".pem"
DEFAULT_CERT_FILENAME = "cert.pem"
DEFAULT_KEY_FILENAME = "key.pem"
DEFAULT_DIRECTORIES = ("/var/lib/marzneshin/certs", "/var/lib/marznode/certs")


def normalize_filename(filename: str) -> str:
    """Append the certificate extension unless already present."""
    filename = filename.strip()
    if filename.endswith(CERT_EXTENSION):
        return filename
    return f"{filename}{CERT_EXTENSION}"


def normalize_directory(directory: str) -> str:
    """Strip a trailing path separator."""
    directory = directory.strip()
    if len(directory) > 1:
        directory = directory.rstrip("/") or "/"
    return directory


@dataclass(frozen=True)
class DistributionTarget:
    """One directory receiving the certificate/key pair."""

    directory: str
    cert_filename: str
    key_filename: str

    @property
    def cert_path(self) -> str:
        return os.path.join(self.directory, self.cert_filename)

    @property
    def key_path(self) -> str:
        return os.path.join(self.directory, self.key_filename)


@dataclass(frozen=True)
class DistributionPlan:
    """Filenames and ordered destination directories for one run."""

    cert_filename: str
    key_filename: str
    directories: Tuple[str, ...]
    fell_back_to_defaults: bool = False

    def targets(self) -> List[DistributionTarget]:
        return [DistributionTarget(d, self.cert_filename, self.key_filename) for d in self.directories]


class DistributionPlanner:
    """Chooses certificate filenames and destination directories."""

    def __init__(
        self,
        default_cert_filename: str = DEFAULT_CERT_FILENAME,
        default_key_filename: str = DEFAULT_KEY_FILENAME,
        default_directories: Sequence[str] = DEFAULT_DIRECTORIES,
        ask: Optional[Callable[[str], str]] = None,
        confirm: Optional[Callable[[str], bool]] = None,
    ):
        self.default_cert_filename = default_cert_filename
        self.default_key_filename = default_key_filename
        self.default_directories = tuple(default_directories)
        self.ask = ask or ask_text
        self.confirm = confirm or ask_yes_no

    def plan(
        self,
        use_defaults: bool,
        custom_filenames: Optional[Tuple[str, str]] = None,
        custom_directories: Optional[Sequence[str]] = None,
    ) -> DistributionPlan:
        """
        Resolve filenames and directories.

        Args:
            use_defaults: Use the default filenames and directories
            custom_filenames: Optional (certificate, key) filenames
            custom_directories: Optional destination directories

        Returns:
            DistributionPlan: The resolved plan; never without directories
        """
        if use_defaults or not custom_filenames:
            cert_filename, key_filename = self.default_cert_filename, self.default_key_filename
        else:
            cert_filename, key_filename = (normalize_filename(name) for name in custom_filenames)

        if use_defaults:
            return DistributionPlan(cert_filename, key_filename, self.default_directories)

        directories = tuple(normalize_directory(d) for d in (custom_directories or ()) if d.strip())
        if not directories:
            logger.warning("No paths provided. Using default paths.")
            return DistributionPlan(cert_filename, key_filename, self.default_directories, fell_back_to_defaults=True)

        return DistributionPlan(cert_filename, key_filename, directories)

    def prompt_plan(self) -> DistributionPlan:
        """Ask the operator for filenames and directories."""
        click.echo("Default certificate filenames are:")
        click.echo(f"  - Certificate file: {self.default_cert_filename}")
        click.echo(f"  - Key file: {self.default_key_filename}")

        custom_filenames = None
        if not self.confirm("Would you like to use these default certificate filenames?"):
            custom_filenames = (
                self._ask_filename("Enter name for certificate file (with .pem extension)"),
                self._ask_filename("Enter name for key file (with .pem extension)"),
            )
            for name in custom_filenames:
                if not name.endswith(CERT_EXTENSION):
                    click.echo(f"Added {CERT_EXTENSION} extension: {normalize_filename(name)}")

        click.echo("Default certificate paths are:")
        for directory in self.default_directories:
            click.echo(f"  - {directory}")

        if self.confirm("Would you like to use these default certificate paths?"):
            if custom_filenames is None:
                return self.plan(use_defaults=True)
            return self.plan(
                use_defaults=False,
                custom_filenames=custom_filenames,
                custom_directories=self.default_directories,
            )

        directories = collect_until_done(
            lambda number: self.ask("Enter path to store certificates (press Enter or type 'done' to finish)")
        )
        plan = self.plan(use_defaults=False, custom_filenames=custom_filenames, custom_directories=directories)
        if plan.fell_back_to_defaults:
            click.secho("! No paths provided. Using default paths.", fg="yellow")
        return plan

    def _ask_filename(self, text: str) -> str:
        while True:
            name = self.ask(text).strip()
            if name:
                return name
