"""Copying issued certificates into service directories."""

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional

from ..utils.errors import DeployError
from ..utils.files import WORLD_READABLE, FileManager
from .distribution import DistributionPlan, DistributionTarget
from .issuer import IssuedCertificate

logger = logging.getLogger(__name__)

# Directories containing this fragment belong to the panel itself
PRIMARY_SERVICE_FRAGMENT = "/var/lib/marzneshin"


@dataclass
class DeploymentResult:
    """Outcome of copying one certificate to every planned directory."""

    targets: List[DistributionTarget] = field(default_factory=list)
    errors: List[DeployError] = field(default_factory=list)
    primary_service_target: Optional[DistributionTarget] = None

    @property
    def succeeded(self) -> bool:
        return bool(self.targets) and not self.errors

    @property
    def partial(self) -> bool:
        return bool(self.targets) and bool(self.errors)


class CertificateDeployer:
    """Idempotently replaces certificate and key files in each destination."""

    def __init__(self, primary_service_fragment: str = PRIMARY_SERVICE_FRAGMENT):
        self.primary_service_fragment = primary_service_fragment
        self.file_manager = FileManager()

    def deploy(self, source: IssuedCertificate, plan: DistributionPlan) -> DeploymentResult:
        """
        Copy the certificate and key into every planned directory.

        Directories are handled one at a time. A failing directory is
        recorded and the remaining ones are still attempted.

        Args:
            source: Issued certificate in certbot's live directory
            plan: Filenames and destination directories

        Returns:
            DeploymentResult: Successful targets, per-directory errors and the
            panel's own target if one was deployed
        """
        result = DeploymentResult()

        for target in plan.targets():
            try:
                self.deploy_target(source, target)
            except DeployError as e:
                logger.error("%s: %s", e.message, e.details)
                result.errors.append(e)
            else:
                result.targets.append(target)

        result.primary_service_target = self.find_primary_service_target(result.targets)
        return result

    def deploy_target(self, source: IssuedCertificate, target: DistributionTarget) -> None:
        """
        Replace the certificate and key in one directory.

        Raises:
            DeployError: If the directory cannot be created or a copy fails
        """
        try:
            os.makedirs(target.directory, exist_ok=True)
            self.file_manager.replace_file(source.cert_source_path, target.cert_path, WORLD_READABLE)
            self.file_manager.replace_file(source.key_source_path, target.key_path, WORLD_READABLE)
        except OSError as e:
            raise DeployError(
                f"Failed to copy certificates to {target.directory}",
                directory=target.directory,
                details=str(e),
            ) from e

        logger.info("Certificates copied to %s", target.directory)

    def find_primary_service_target(self, targets: List[DistributionTarget]) -> Optional[DistributionTarget]:
        """
        Return the first target inside the panel's certificate directory.

        Only successfully deployed targets are passed in, so a panel directory
        whose copy failed leaves the panel's TLS settings unwired.
        """
        for target in targets:
            if self.primary_service_fragment in target.directory:
                return target
        return None
