"""Certificate issuance through certbot and its DNS plugin."""

import logging
import os
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..utils.errors import IssuanceFailedError, InstallerEnvironmentError, create_error_suggestions
from ..utils.process import CommandResult, command_exists, run_command
from .request import CertificateRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssuedCertificate:
    """Location of a freshly issued certificate in certbot's live directory."""

    primary_domain: str
    cert_source_path: str
    key_source_path: str


class CertbotIssuer:
    """Runs certbot non-interactively with DNS-01 validation."""

    def __init__(
        self,
        config_dir: str = "/etc/letsencrypt",
        dns_provider: str = "cloudflare",
        email: Optional[str] = None,
        staging: bool = False,
        runner: Callable[..., CommandResult] = run_command,
    ):
        """
        Initialize certbot issuer.

        Args:
            config_dir: certbot configuration root holding the live/ directory
            dns_provider: certbot DNS plugin name (e.g. cloudflare)
            email: Registration email; without one the account is registered anonymously
            staging: Use the Let's Encrypt staging environment
            runner: Callable executing external commands
        """
        self.config_dir = config_dir
        self.dns_provider = dns_provider
        self.email = email
        self.staging = staging
        self.runner = runner

    @property
    def plugin_package(self) -> str:
        return f"python3-certbot-dns-{self.dns_provider}"

    def is_client_installed(self) -> bool:
        """Check if certbot is available."""
        return command_exists("certbot")

    def install_client(self) -> None:
        """
        Install certbot together with the DNS plugin package.

        Raises:
            InstallerEnvironmentError: If the package manager fails
        """
        logger.info("Installing Certbot and %s DNS plugin...", self.dns_provider)

        result = self.runner(["apt", "install", "-y", self.plugin_package])
        if not result.ok:
            raise InstallerEnvironmentError("Certbot installation failed", details=result.reason)

        logger.info("Certbot and %s plugin installed successfully", self.dns_provider)

    def live_paths(self, primary_domain: str) -> IssuedCertificate:
        """Return certbot's live certificate and key paths for a domain."""
        live_dir = os.path.join(self.config_dir, "live", primary_domain)
        return IssuedCertificate(
            primary_domain=primary_domain,
            cert_source_path=os.path.join(live_dir, "fullchain.pem"),
            key_source_path=os.path.join(live_dir, "privkey.pem"),
        )

    def build_command(self, request: CertificateRequest) -> List[str]:
        """
        Build the certbot command line for a request.

        Validation names are passed as repeated ``-d`` arguments in request
        order, so the first one names the certificate lineage.
        """
        cmd = ["certbot", "certonly", "--non-interactive", "--agree-tos"]

        for name in request.validation_names:
            cmd.extend(["-d", name])

        cmd.extend(
            [
                "--cert-name",
                request.primary_domain,
                f"--dns-{self.dns_provider}",
                f"--dns-{self.dns_provider}-credentials",
                request.credentials_path,
            ]
        )

        if self.email:
            cmd.extend(["--email", self.email])
        else:
            cmd.append("--register-unsafely-without-email")

        if self.staging:
            cmd.append("--staging")

        return cmd

    def issue(self, request: CertificateRequest) -> IssuedCertificate:
        """
        Obtain a certificate covering every validation name in the request.

        Args:
            request: Certificate request

        Returns:
            IssuedCertificate: Live paths of the certificate and key

        Raises:
            IssuanceFailedError: If certbot fails or leaves no certificate behind
        """
        cmd = self.build_command(request)
        logger.info("Running Certbot with command: %s", " ".join(cmd))

        result = self.runner(cmd)
        if not result.ok:
            raise IssuanceFailedError(
                "SSL certificate generation failed",
                details=result.reason,
                suggestions=create_error_suggestions("certbot_failed"),
            )

        issued = self.live_paths(request.primary_domain)

        for path in (issued.cert_source_path, issued.key_source_path):
            if not os.path.isfile(path):
                raise IssuanceFailedError(
                    "Certbot reported success but the certificate is missing",
                    details=f"Expected file not found: {path}",
                )

        logger.info("SSL certificate generated successfully for %s", request.primary_domain)
        return issued
