"""Control of the Marzneshin panel service."""

import logging
from typing import Callable

from ..utils.errors import InstallerEnvironmentError, create_error_suggestions
from ..utils.process import CommandResult, command_exists, run_command

logger = logging.getLogger(__name__)

DEFAULT_INSTALLER_URL = "https://github.com/marzneshin/Marzneshin/raw/master/script.sh"


class PanelService:
    """Wraps the ``marzneshin`` management command."""

    def __init__(
        self,
        command: str = "marzneshin",
        installer_url: str = DEFAULT_INSTALLER_URL,
        runner: Callable[..., CommandResult] = run_command,
    ):
        self.command = command
        self.installer_url = installer_url
        self.runner = runner

    def is_installed(self) -> bool:
        """Check whether the management command is on PATH."""
        return command_exists(self.command)

    def install(self, database: str = "mariadb") -> None:
        """
        Run the upstream installer script with the operator's terminal attached.

        Raises:
            InstallerEnvironmentError: If the panel command is missing afterwards
        """
        logger.info("Running Marzneshin installation script...")
        logger.info("Press Ctrl+C when you see 'Uvicorn running on http://0.0.0.0:8000'")

        script = f'bash -c "$(curl -sL {self.installer_url})" @ install --database {database}'
        try:
            self.runner(["bash", "-c", script], capture=False)
        except KeyboardInterrupt:
            # The upstream script tails the panel logs until interrupted
            logger.info("Installer interrupted, checking installation")

        if not self.is_installed():
            raise InstallerEnvironmentError(
                "Marzneshin installation may have failed. Please check the logs above.",
                suggestions=create_error_suggestions("panel_missing"),
            )

        logger.info("Marzneshin installed successfully")

    def restart(self) -> CommandResult:
        """Restart the panel and report the outcome."""
        logger.info("Restarting Marzneshin...")
        return self.runner([self.command, "restart"])
