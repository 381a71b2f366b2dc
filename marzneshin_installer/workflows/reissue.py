"""Certificate (re)issue flow: prerequisites, issuance, deployment, service reload."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import click

from ..certificates.credentials import CredentialStore
from ..certificates.deployer import CertificateDeployer, DeploymentResult
from ..certificates.distribution import DistributionPlan, DistributionPlanner
from ..certificates.domains import DomainCollector, DomainEntry
from ..certificates.inspector import CertificateInspector
from ..certificates.issuer import CertbotIssuer, IssuedCertificate
from ..certificates.request import CertificateRequestBuilder
from ..config.manager import ConfigManager
from ..panel.service import PanelService
from ..utils.errors import InstallerError, ServiceReloadError
from ..utils.prompts import ask_yes_no

logger = logging.getLogger(__name__)

# Hook run before the service reload, e.g. to write TLS settings
ServiceConfigurator = Callable[[DeploymentResult], Any]


class ReissueState(Enum):
    """Steps of the reissue flow."""

    CHECKING_PREREQS = "checking-prereqs"
    ISSUING = "issuing"
    DEPLOYING = "deploying"
    NOTIFYING_SERVICE = "notifying-service"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ReissueOutcome:
    """What a completed run produced."""

    domains: List[DomainEntry]
    issued: IssuedCertificate
    plan: DistributionPlan
    deployment: DeploymentResult
    service_restarted: Optional[bool] = None
    reload_error: Optional[ServiceReloadError] = None
    config_error: Optional[InstallerError] = None
    certificate_info: Dict[str, Any] = field(default_factory=dict)


def ask_token() -> str:
    click.echo("Please provide your Cloudflare API token")
    return click.prompt("Cloudflare API Token", hide_input=True)


class ReissueCoordinator:
    """Drives one certificate issuance from prerequisites to service reload."""

    def __init__(
        self,
        credential_store: CredentialStore,
        issuer: CertbotIssuer,
        deployer: CertificateDeployer,
        service: PanelService,
        collector: Optional[DomainCollector] = None,
        planner: Optional[DistributionPlanner] = None,
        config_manager: Optional[ConfigManager] = None,
        inspector: Optional[CertificateInspector] = None,
        token_prompt: Callable[[], str] = ask_token,
        confirm: Callable[[str], bool] = ask_yes_no,
    ):
        self.credential_store = credential_store
        self.issuer = issuer
        self.deployer = deployer
        self.service = service
        self.collector = collector or DomainCollector()
        self.planner = planner or DistributionPlanner()
        self.builder = CertificateRequestBuilder()
        self.config_manager = config_manager
        self.inspector = inspector
        self.token_prompt = token_prompt
        self.confirm = confirm

        self.state = ReissueState.CHECKING_PREREQS
        self.history: List[ReissueState] = []

    @classmethod
    def from_settings(cls, config_manager: ConfigManager, **kwargs) -> "ReissueCoordinator":
        """Create a coordinator wired from installer settings."""
        settings = config_manager.load_settings()
        letsencrypt = settings["letsencrypt"]
        distribution = settings["distribution"]
        panel = settings["panel"]

        planner_args = {
            "default_cert_filename": distribution["cert_filename"],
            "default_key_filename": distribution["key_filename"],
            "default_directories": distribution["directories"],
        }
        deployer_args = {}
        if distribution.get("primary_service_fragment"):
            deployer_args["primary_service_fragment"] = distribution["primary_service_fragment"]

        return cls(
            credential_store=CredentialStore(letsencrypt["credentials_file"], provider=letsencrypt["dns_provider"]),
            issuer=CertbotIssuer(
                config_dir=letsencrypt["config_dir"],
                dns_provider=letsencrypt["dns_provider"],
                email=letsencrypt.get("email"),
                staging=letsencrypt.get("staging", False),
            ),
            deployer=CertificateDeployer(**deployer_args),
            service=PanelService(command=panel.get("command", "marzneshin"), **_installer_url(panel)),
            planner=DistributionPlanner(**planner_args),
            config_manager=config_manager,
            inspector=CertificateInspector(),
            **kwargs,
        )

    def _transition(self, state: ReissueState) -> None:
        logger.debug("Reissue state: %s -> %s", self.state.value, state.value)
        self.history.append(state)
        self.state = state

    def run(
        self,
        domains: Optional[List[DomainEntry]] = None,
        plan: Optional[DistributionPlan] = None,
        reuse_previous: Optional[bool] = None,
        refresh_credentials: bool = False,
        configure_service: Optional[ServiceConfigurator] = None,
    ) -> ReissueOutcome:
        """
        Issue a certificate, deploy it and reload the panel.

        Args:
            domains: Domains to certify; collected interactively when omitted
            plan: Distribution plan; recorded or collected when omitted
            reuse_previous: Reuse recorded filenames/directories (None asks)
            refresh_credentials: Ask for a new DNS token even if one is stored
            configure_service: Hook called with the deployment before the reload

        Returns:
            ReissueOutcome: Result of the run

        Raises:
            InstallerError: If prerequisites or issuance fail
        """
        self.history = []
        self._transition(ReissueState.CHECKING_PREREQS)

        try:
            self.check_prerequisites(refresh_credentials)

            self._transition(ReissueState.ISSUING)
            domains = domains or self.collector.collect()
            issued = self.issue(domains)

            self._transition(ReissueState.DEPLOYING)
            plan = plan or self.resolve_plan(reuse_previous)
            deployment = self.deploy(domains, issued, plan)

            outcome = ReissueOutcome(domains=domains, issued=issued, plan=plan, deployment=deployment)
            outcome.certificate_info = self.describe(issued)

            self._transition(ReissueState.NOTIFYING_SERVICE)
            if configure_service is not None:
                self.configure_service(configure_service, outcome)
            self.notify_service(outcome)
        except InstallerError:
            self._transition(ReissueState.FAILED)
            raise

        self._transition(ReissueState.DONE)
        return outcome

    def check_prerequisites(self, refresh_credentials: bool = False) -> None:
        """Make sure certbot and the credential file are in place."""
        if not self.issuer.is_client_installed():
            logger.error("Certbot is not installed. Installing it now...")
            self.issuer.install_client()

        if refresh_credentials or not self.credential_store.exists():
            if not refresh_credentials:
                logger.error("API credentials file not found")
            self.credential_store.ensure(self.token_prompt())

    def issue(self, domains: List[DomainEntry]) -> IssuedCertificate:
        request = self.builder.build(domains, self.credential_store.path)
        return self.issuer.issue(request)

    def resolve_plan(self, reuse_previous: Optional[bool] = None) -> DistributionPlan:
        """Use the recorded distribution choices or ask for new ones."""
        state = self.config_manager.load_state() if self.config_manager else None

        if state and reuse_previous is not False:
            recorded = DistributionPlan(
                cert_filename=state["cert_filename"],
                key_filename=state["key_filename"],
                directories=tuple(state["directories"]),
            )
            if reuse_previous or self._confirm_reuse(recorded):
                return recorded

        return self.planner.prompt_plan()

    def _confirm_reuse(self, plan: DistributionPlan) -> bool:
        click.echo("Previously used certificate locations:")
        for target in plan.targets():
            click.echo(f"  - {target.cert_path}")
            click.echo(f"  - {target.key_path}")
        return self.confirm("Reuse these certificate locations?")

    def deploy(self, domains: List[DomainEntry], issued: IssuedCertificate, plan: DistributionPlan) -> DeploymentResult:
        deployment = self.deployer.deploy(issued, plan)

        if deployment.targets and self.config_manager is not None:
            try:
                self.config_manager.save_state(domains, plan)
            except OSError as e:
                logger.warning("Could not record deployment choices: %s", e)

        return deployment

    def describe(self, issued: IssuedCertificate) -> Dict[str, Any]:
        if self.inspector is None:
            return {}
        try:
            info = self.inspector.inspect(issued.cert_source_path, issued.key_source_path)
        except InstallerError as e:
            logger.warning("Could not inspect issued certificate: %s", e.message)
            return {}
        logger.info(
            "Certificate covers %s, expires in %s days",
            ", ".join(info["san_names"]),
            info["expires_in_days"],
        )
        return info

    def configure_service(self, configure: ServiceConfigurator, outcome: ReissueOutcome) -> None:
        """Run the configuration hook. Failures are recorded so the restart still happens."""
        try:
            configure(outcome.deployment)
        except InstallerError as e:
            outcome.config_error = e
            logger.warning("Service configuration failed: %s", e.message)

    def notify_service(self, outcome: ReissueOutcome) -> None:
        """Restart the panel if it is installed. Failures are reported, not raised."""
        if not self.service.is_installed():
            logger.warning("Marzneshin command not found. No restart performed.")
            return

        result = self.service.restart()
        outcome.service_restarted = result.ok

        if result.ok:
            logger.info("Marzneshin restarted successfully")
        else:
            outcome.reload_error = ServiceReloadError("Failed to restart Marzneshin", details=result.reason)
            logger.warning("Failed to restart Marzneshin: %s", result.reason)


def _installer_url(panel: Dict[str, Any]) -> Dict[str, str]:
    if panel.get("installer_url"):
        return {"installer_url": panel["installer_url"]}
    return {}
