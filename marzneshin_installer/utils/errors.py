"""Error handling utilities for the Marzneshin installer."""

import sys
import traceback
from typing import List, Optional, Tuple

import click


class InstallerError(Exception):
    """Base exception for installer errors."""

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        suggestions: Optional[list] = None,
    ):
        self.message = message
        self.details = details
        self.suggestions = suggestions or []
        super().__init__(message)


class ConfigurationError(InstallerError):
    """Raised when installer settings are invalid or missing."""

    pass


class PrivilegeError(InstallerError):
    """Raised when the installer lacks the rights to change the system."""

    pass


class InstallerEnvironmentError(InstallerError):
    """Raised when the host operating system cannot be handled."""

    pass


class CredentialWriteError(InstallerError):
    """Raised when the DNS provider credential file cannot be written."""

    pass


class IssuanceFailedError(InstallerError):
    """Raised when the certificate authority client does not produce a certificate."""

    pass


class DeployError(InstallerError):
    """Raised when certificates cannot be copied into one destination directory."""

    def __init__(
        self,
        message: str,
        directory: str,
        details: Optional[str] = None,
        suggestions: Optional[list] = None,
    ):
        self.directory = directory
        super().__init__(message, details=details, suggestions=suggestions)


class ServiceReloadError(InstallerError):
    """Raised when the panel service fails to restart."""

    pass


class PanelConfigError(InstallerError):
    """Raised when the panel configuration file cannot be updated."""

    pass


class ErrorHandler:
    """Prints errors as labeled operator messages."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def handle_error(self, error: Exception, context: Optional[str] = None) -> None:
        """
        Print an error with its context, details and suggestions.

        Args:
            error: Exception to report
            context: Flow that was running, e.g. "SSL certificate update"
        """
        message, details, suggestions = self.describe(error)

        click.secho(f"✗ {message}", fg="red", err=True)
        if context:
            click.echo(f"Context: {context}", err=True)
        if details:
            click.echo(f"Details: {details}", err=True)
        if suggestions:
            click.echo("\nSuggestions:", err=True)
            for suggestion in suggestions:
                click.echo(f"  • {suggestion}", err=True)

        if self.verbose and error.__traceback__ is not None:
            click.echo("\nFull traceback:", err=True)
            traceback.print_exception(type(error), error, error.__traceback__)

    @staticmethod
    def describe(error: Exception) -> Tuple[str, Optional[str], List[str]]:
        """Return message, details and suggestions for any exception."""
        if isinstance(error, InstallerError):
            return error.message, error.details, error.suggestions

        if isinstance(error, FileNotFoundError):
            return f"File not found: {error}", None, [
                "Check that the file path is correct",
                "Ensure the file exists and is readable",
            ]
        if isinstance(error, PermissionError):
            return f"Permission denied: {error}", None, [
                "Check file/directory permissions",
                "Run the installer as root or with sudo",
            ]
        return f"{type(error).__name__}: {error}", None, []

    def exit_with_error(self, error: Exception, context: Optional[str] = None, exit_code: int = 1) -> None:
        """Report the error and exit with the given status."""
        self.handle_error(error, context)
        sys.exit(exit_code)


def create_error_suggestions(error_type: str, **kwargs) -> list:
    """
    Create contextual error suggestions based on error type and context.

    Args:
        error_type: Type of error
        **kwargs: Additional context information (``path`` is used where relevant)

    Returns:
        list: List of suggestion strings
    """
    path = kwargs.get("path", "the target path")

    suggestions = {
        "not_root": [
            "Run the installer as root",
            "Or prefix the command with sudo",
        ],
        "certbot_failed": [
            "Check that the Cloudflare API token can edit DNS for every domain",
            "Make sure each domain's DNS zone is hosted on Cloudflare",
            "Inspect /var/log/letsencrypt/letsencrypt.log for details",
        ],
        "credentials_unwritable": [
            f"Check that {path} is writable",
            "Run the installer as root",
        ],
        "panel_missing": [
            "Install the panel first with the 'install' command",
            "Check that the marzneshin command is on PATH",
        ],
        "docker_unavailable": [
            "Start the Docker daemon with 'systemctl start docker'",
            "Check that Docker is installed and accessible",
        ],
    }

    return suggestions.get(error_type, [])
