"""Host preparation: privileges, OS detection, packages and Docker."""

import logging
import os
import platform
from dataclasses import dataclass
from typing import Callable, Dict

import docker
from docker.errors import DockerException

from ..utils.errors import (
    InstallerEnvironmentError,
    PrivilegeError,
    create_error_suggestions,
)
from ..utils.process import CommandResult, command_exists, run_command

logger = logging.getLogger(__name__)

OS_RELEASE_PATH = "/etc/os-release"
SUPPORTED_OS = ("ubuntu", "debian")
DOCKER_INSTALL_SCRIPT = "https://get.docker.com"


@dataclass(frozen=True)
class OSInfo:
    """Detected operating system."""

    name: str
    version: str
    arch: str

    @property
    def supported(self) -> bool:
        return self.name in SUPPORTED_OS


def parse_os_release(content: str) -> Dict[str, str]:
    """Parse os-release ``KEY=value`` lines, dropping quotes."""
    values = {}
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        values[key.strip()] = value.strip().strip("\"'")
    return values


class HostPreparer:
    """Prepares the host before the panel is installed."""

    def __init__(
        self,
        os_release_path: str = OS_RELEASE_PATH,
        runner: Callable[..., CommandResult] = run_command,
    ):
        self.os_release_path = os_release_path
        self.runner = runner

    def require_root(self) -> None:
        """
        Raises:
            PrivilegeError: If the installer is not running as root
        """
        if os.geteuid() != 0:
            raise PrivilegeError(
                "Please run this script as root or with sudo.",
                suggestions=create_error_suggestions("not_root"),
            )

    def detect_os(self) -> OSInfo:
        """
        Detect the operating system and architecture.

        Raises:
            InstallerEnvironmentError: If the OS cannot be detected at all
        """
        if not os.path.isfile(self.os_release_path):
            raise InstallerEnvironmentError("Unable to detect OS. This installer supports Ubuntu and Debian.")

        with open(self.os_release_path, encoding="utf-8") as f:
            values = parse_os_release(f.read())

        info = OSInfo(
            name=values.get("ID", "unknown").lower(),
            version=values.get("VERSION_ID", ""),
            arch=platform.machine(),
        )
        logger.info("Detected OS: %s %s", info.name, info.version)
        logger.info("Detected architecture: %s", info.arch)

        if not info.supported:
            logger.warning(
                "This installer is primarily tested on Ubuntu and Debian. Results may vary on %s.",
                info.name,
            )

        return info

    def update_system(self, os_info: OSInfo) -> None:
        """
        Update and upgrade system packages on apt-based systems.

        Raises:
            InstallerEnvironmentError: If apt fails
        """
        if not os_info.supported:
            logger.warning("Unsupported OS. Skipping update and upgrade.")
            return

        for action in ("update", "upgrade"):
            logger.info("Running apt %s...", action)
            result = self.runner(["apt", action, "-y"], capture=False)
            if not result.ok:
                raise InstallerEnvironmentError(f"System {action} failed", details=result.reason)
            logger.info("System %s completed", action)

    def ensure_docker(self) -> None:
        """
        Install Docker if missing, start the service and check the daemon.

        Raises:
            InstallerEnvironmentError: If installation fails or the daemon is unreachable
        """
        if command_exists("docker"):
            logger.info("Docker is already installed")
        else:
            logger.info("Installing Docker...")
            result = self.runner(["sh", "-c", f"curl -fsSL {DOCKER_INSTALL_SCRIPT} | sh"], capture=False)
            if not result.ok:
                raise InstallerEnvironmentError("Docker installation failed", details=result.reason)
            logger.info("Docker installed successfully")

        logger.info("Ensuring Docker service is running...")
        self.runner(["systemctl", "enable", "docker"])
        self.runner(["systemctl", "start", "docker"])

        try:
            client = docker.from_env()
            client.ping()
        except DockerException as e:
            raise InstallerEnvironmentError(
                "Cannot connect to Docker daemon",
                details=str(e),
                suggestions=create_error_suggestions("docker_unavailable"),
            ) from e

        logger.info("Docker service is active")
