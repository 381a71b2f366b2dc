"""Marzneshin panel service and configuration."""

from .env_file import PanelEnvFile, normalize_dashboard_path
from .service import PanelService

__all__ = ["PanelEnvFile", "PanelService", "normalize_dashboard_path"]
