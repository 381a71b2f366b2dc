"""Certificate issuance and distribution for Marzneshin deployments."""

from .credentials import CredentialRecord, CredentialStore
from .deployer import CertificateDeployer, DeploymentResult
from .distribution import DistributionPlan, DistributionPlanner, DistributionTarget
from .domains import DomainCollector, DomainEntry
from .inspector import CertificateInspector
from .issuer import CertbotIssuer, IssuedCertificate
from .request import CertificateRequest, CertificateRequestBuilder, to_validation_names

__all__ = [
    "CertbotIssuer",
    "CertificateDeployer",
    "CertificateInspector",
    "CertificateRequest",
    "CertificateRequestBuilder",
    "CredentialRecord",
    "CredentialStore",
    "DeploymentResult",
    "DistributionPlan",
    "DistributionPlanner",
    "DistributionTarget",
    "DomainCollector",
    "DomainEntry",
    "IssuedCertificate",
    "to_validation_names",
]
