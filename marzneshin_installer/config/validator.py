"""Configuration validation for the Marzneshin installer."""

from typing import Any, Dict, List

import jsonschema

from ..utils.errors import ConfigurationError
from .schemas import SETTINGS_SCHEMA, STATE_SCHEMA


class ConfigValidationError(ConfigurationError):
    """Raised when configuration validation fails."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__(
            f"Configuration validation failed: {'; '.join(errors)}",
            suggestions=["Run 'marzneshin-installer config init' to write a fresh settings file"],
        )


class ConfigValidator:
    """Validates installer settings and recorded state."""

    def validate_settings(self, config: Dict[str, Any]) -> List[str]:
        """
        Validate installer settings.

        Args:
            config: Settings dictionary to validate

        Returns:
            List[str]: List of validation errors (empty if valid)
        """
        errors = self._validate_schema(config, SETTINGS_SCHEMA)

        distribution = config.get("distribution") or {}
        cert_filename = distribution.get("cert_filename")
        if cert_filename and cert_filename == distribution.get("key_filename"):
            errors.append("Certificate and key filenames must differ")

        return errors

    def validate_state(self, state: Dict[str, Any]) -> List[str]:
        """
        Validate a recorded deployment state.

        Args:
            state: State dictionary to validate

        Returns:
            List[str]: List of validation errors (empty if valid)
        """
        return self._validate_schema(state, STATE_SCHEMA)

    def _validate_schema(self, data: Any, schema: Dict[str, Any]) -> List[str]:
        validator = jsonschema.Draft7Validator(schema)
        errors = []
        for error in sorted(validator.iter_errors(data), key=lambda e: [str(part) for part in e.path]):
            location = ".".join(str(part) for part in error.path)
            if location:
                errors.append(f"{location}: {error.message}")
            else:
                errors.append(f"Schema validation failed: {error.message}")
        return errors
