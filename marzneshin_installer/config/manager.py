"""Configuration management for the Marzneshin installer."""

import copy
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import yaml
from jinja2 import Environment, FileSystemLoader

from marzneshin_installer import __version__
from marzneshin_installer.certificates.distribution import DEFAULT_DIRECTORIES, DistributionPlan
from marzneshin_installer.certificates.domains import DomainEntry
from marzneshin_installer.utils.files import FileManager

from .validator import ConfigValidationError, ConfigValidator

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "/etc/marzneshin-installer/config.yml"
DEFAULT_STATE_PATH = "/etc/marzneshin-installer/state.yml"


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge override into a copy of base, recursing into nested mappings."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigManager:
    """Manages installer settings and the record of the last deployment."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration manager.

        Args:
            config_path: Optional custom settings path (defaults to /etc/marzneshin-installer/config.yml)
        """
        self.config_path = config_path or DEFAULT_CONFIG_PATH
        self.validator = ConfigValidator()
        self.file_manager = FileManager()
        self._settings = None

        templates_dir = os.path.join(os.path.dirname(__file__), "..", "templates")
        self.jinja_env = Environment(loader=FileSystemLoader(templates_dir), trim_blocks=True, lstrip_blocks=True)

    def render_default_config(self, template_vars: Optional[Dict[str, Any]] = None) -> str:
        """
        Render the default settings file.

        Args:
            template_vars: Variables overriding the template defaults

        Returns:
            str: Settings file content
        """
        variables = {
            "version": __version__,
            "letsencrypt_dir": "/etc/letsencrypt",
            "dns_provider": "cloudflare",
            "email": None,
            "directories": list(DEFAULT_DIRECTORIES),
            "database": "mariadb",
            "state_file": DEFAULT_STATE_PATH,
        }
        variables.update(template_vars or {})

        template = self.jinja_env.get_template("config.yml.j2")
        return template.render(**variables)

    def default_settings(self) -> Dict[str, Any]:
        """Return the settings used when no file overrides them."""
        return yaml.safe_load(self.render_default_config())

    def load_settings(self, validate: bool = True) -> Dict[str, Any]:
        """
        Load effective settings.

        Values from the settings file are merged over the defaults.

        Args:
            validate: Whether to validate the merged settings

        Returns:
            Dict[str, Any]: Effective settings

        Raises:
            ConfigValidationError: If validation fails or the YAML is malformed
        """
        if self._settings is not None:
            return self._settings

        settings = self.default_settings()

        if os.path.exists(self.config_path):
            try:
                with open(self.config_path, encoding="utf-8") as f:
                    overrides = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigValidationError([f"Invalid YAML in {self.config_path}: {e}"])

            if not isinstance(overrides, dict):
                raise ConfigValidationError([f"{self.config_path} must contain a mapping"])

            settings = deep_merge(settings, overrides)
            logger.debug("Loaded settings from %s", self.config_path)

        if validate:
            errors = self.validator.validate_settings(settings)
            if errors:
                raise ConfigValidationError(errors)

        self._settings = settings
        return settings

    def write_default_config(self, force: bool = False, template_vars: Optional[Dict[str, Any]] = None) -> str:
        """
        Write the default settings file.

        Args:
            force: Overwrite an existing file
            template_vars: Variables for template rendering

        Returns:
            str: Path to the settings file
        """
        if os.path.exists(self.config_path) and not force:
            raise FileExistsError(f"Settings file already exists: {self.config_path}")

        directory = os.path.dirname(self.config_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(self.config_path, "w", encoding="utf-8") as f:
            f.write(self.render_default_config(template_vars))

        self._settings = None
        return self.config_path

    @property
    def state_path(self) -> str:
        return self.load_settings().get("state_file") or DEFAULT_STATE_PATH

    def load_state(self) -> Optional[Dict[str, Any]]:
        """
        Load the choices recorded by the last deployment.

        Returns:
            Optional[Dict[str, Any]]: Recorded state, or None if absent or unusable
        """
        path = self.state_path
        if not os.path.exists(path):
            return None

        try:
            with open(path, encoding="utf-8") as f:
                state = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Ignoring unreadable state file %s: %s", path, e)
            return None

        errors = self.validator.validate_state(state)
        if errors:
            logger.warning("Ignoring invalid state file %s: %s", path, "; ".join(errors))
            return None

        return state

    def save_state(self, domains: List[DomainEntry], plan: DistributionPlan) -> str:
        """
        Record the domains and distribution choices of a deployment.

        Args:
            domains: Domains of the issued certificate
            plan: Distribution plan that was deployed

        Returns:
            str: Path to the state file
        """
        state = {
            "domains": [{"name": d.name, "include_wildcard": d.include_wildcard} for d in domains],
            "cert_filename": plan.cert_filename,
            "key_filename": plan.key_filename,
            "directories": list(plan.directories),
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }

        path = self.state_path
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        self.file_manager.write_private_file(path, yaml.safe_dump(state, default_flow_style=False, sort_keys=False))
        return path

    def clear_cache(self) -> None:
        """Forget loaded settings."""
        self._settings = None
