"""Editing of the panel's .env configuration file."""

import logging
import os
import re
from typing import List, Optional

from ..certificates.distribution import DistributionTarget
from ..utils.errors import PanelConfigError, create_error_suggestions
from ..utils.files import FileManager

logger = logging.getLogger(__name__)

PORT_KEY = "UVICORN_PORT"
DASHBOARD_PATH_KEY = "DASHBOARD_PATH"
SSL_CERTFILE_KEY = "UVICORN_SSL_CERTFILE"
SSL_KEYFILE_KEY = "UVICORN_SSL_KEYFILE"

DEFAULT_PORT = 8000
DEFAULT_DASHBOARD_PATH = "dashboard"


def normalize_dashboard_path(path: Optional[str], default: str = DEFAULT_DASHBOARD_PATH) -> str:
    """Strip surrounding slashes; fall back to the default when empty."""
    path = (path or "").strip().strip("/")
    return path or default


class PanelEnvFile:
    """Key-value settings file read by the panel (``KEY = value`` lines)."""

    def __init__(self, path: str = "/etc/opt/marzneshin/.env"):
        self.path = path
        self.file_manager = FileManager()
        self.lines: List[str] = []

    def load(self) -> "PanelEnvFile":
        if not os.path.isfile(self.path):
            raise PanelConfigError(
                f"Panel configuration file not found: {self.path}",
                suggestions=create_error_suggestions("panel_missing"),
            )
        with open(self.path, encoding="utf-8") as f:
            self.lines = f.read().splitlines()
        return self

    def get(self, key: str) -> Optional[str]:
        """Return the unquoted value of an active key."""
        pattern = re.compile(rf"^{re.escape(key)}\s*=\s*(.*)$")
        for line in self.lines:
            match = pattern.match(line)
            if match:
                return match.group(1).strip().strip('"')
        return None

    def set(self, key: str, value: str) -> None:
        """
        Set a key, uncommenting it if it is only present as a comment.

        An active line wins over a commented one; a missing key is appended.
        """
        new_line = f"{key} = {value}"
        active = re.compile(rf"^{re.escape(key)}\b")
        commented = re.compile(rf"^#\s*{re.escape(key)}\b")

        for pattern in (active, commented):
            for index, line in enumerate(self.lines):
                if pattern.match(line):
                    self.lines[index] = new_line
                    return

        self.lines.append(new_line)

    def save(self) -> None:
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("\n".join(self.lines) + "\n")

    def configure(
        self,
        port: int = DEFAULT_PORT,
        dashboard_path: str = DEFAULT_DASHBOARD_PATH,
        tls_target: Optional[DistributionTarget] = None,
    ) -> bool:
        """
        Apply port, dashboard path and, when available, TLS settings.

        A ``.bak`` copy of the original file is written first.

        Args:
            port: Port the panel listens on
            dashboard_path: Dashboard URL path without slashes
            tls_target: Deployed certificate belonging to the panel, if any

        Returns:
            bool: True if TLS was configured
        """
        self.load()

        try:
            self.file_manager.backup_file(self.path)
        except OSError as e:
            raise PanelConfigError(f"Failed to back up {self.path}", details=str(e)) from e

        self.set(PORT_KEY, str(port))
        logger.info("Port updated to %s", port)

        dashboard_path = normalize_dashboard_path(dashboard_path)
        self.set(DASHBOARD_PATH_KEY, f'"/{dashboard_path}/"')
        logger.info("Dashboard path updated to /%s/", dashboard_path)

        if tls_target is not None:
            self.set(SSL_CERTFILE_KEY, f'"{tls_target.cert_path}"')
            self.set(SSL_KEYFILE_KEY, f'"{tls_target.key_path}"')
            logger.info("SSL configuration updated")
        else:
            logger.warning("No valid Marzneshin certificate path found. SSL not configured.")

        try:
            self.save()
        except OSError as e:
            raise PanelConfigError(f"Failed to write {self.path}", details=str(e)) from e

        return tls_target is not None
