"""Full panel installation and configuration flow."""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

import click

from ..certificates.deployer import DeploymentResult
from ..panel.env_file import DEFAULT_DASHBOARD_PATH, DEFAULT_PORT, PanelEnvFile, normalize_dashboard_path
from ..system.host import HostPreparer
from .reissue import ReissueCoordinator, ReissueOutcome

logger = logging.getLogger(__name__)


@dataclass
class InstallSummary:
    """Values shown to the operator once installation completes."""

    primary_domain: str
    port: int
    dashboard_path: str
    tls_enabled: bool
    outcome: ReissueOutcome

    @property
    def panel_url(self) -> str:
        scheme = "https" if self.tls_enabled else "http"
        return f"{scheme}://{self.primary_domain}:{self.port}/{self.dashboard_path}/"


def ask_port(default: int = DEFAULT_PORT) -> int:
    return click.prompt("Enter new port for Marzneshin", default=default, type=click.IntRange(1, 65535))


def ask_dashboard_path(default: str = DEFAULT_DASHBOARD_PATH) -> str:
    return click.prompt("Enter new dashboard path", default=default)


class InstallWorkflow:
    """Installs the panel on a fresh host and wires its certificates."""

    def __init__(
        self,
        host: HostPreparer,
        coordinator: ReissueCoordinator,
        env_file: PanelEnvFile,
        database: str = "mariadb",
        default_port: int = DEFAULT_PORT,
        default_dashboard_path: str = DEFAULT_DASHBOARD_PATH,
        port_prompt: Callable[[int], int] = ask_port,
        path_prompt: Callable[[str], str] = ask_dashboard_path,
    ):
        self.host = host
        self.coordinator = coordinator
        self.env_file = env_file
        self.database = database
        self.default_port = default_port
        self.default_dashboard_path = default_dashboard_path
        self.port_prompt = port_prompt
        self.path_prompt = path_prompt

        self._port: Optional[int] = None
        self._dashboard_path: Optional[str] = None
        self._tls_enabled = False

    def run(self) -> InstallSummary:
        """
        Prepare the host, install the panel, issue certificates and configure TLS.

        Returns:
            InstallSummary: Panel access details
        """
        self.host.require_root()
        os_info = self.host.detect_os()
        self.host.update_system(os_info)
        self.host.ensure_docker()

        service = self.coordinator.service
        if service.is_installed():
            logger.info("Marzneshin is already installed")
        else:
            service.install(self.database)

        outcome = self.coordinator.run(refresh_credentials=True, configure_service=self.configure_panel)

        return InstallSummary(
            primary_domain=outcome.domains[0].name,
            port=self._port,
            dashboard_path=self._dashboard_path,
            tls_enabled=self._tls_enabled,
            outcome=outcome,
        )

    def configure_panel(self, deployment: DeploymentResult) -> None:
        """Ask for port and dashboard path and write them, plus TLS when possible."""
        self._port = self.port_prompt(self.default_port)
        self._dashboard_path = normalize_dashboard_path(self.path_prompt(self.default_dashboard_path))
        self._tls_enabled = self.env_file.configure(
            port=self._port,
            dashboard_path=self._dashboard_path,
            tls_target=deployment.primary_service_target,
        )
