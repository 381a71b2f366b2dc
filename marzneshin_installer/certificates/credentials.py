"""DNS provider credential file management."""

import logging
import os
from dataclasses import dataclass

from ..utils.errors import CredentialWriteError, create_error_suggestions
from ..utils.files import FileManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CredentialRecord:
    """The credential file written for the DNS plugin."""

    provider_token_path: str
    token: str


class CredentialStore:
    """Manages the DNS provider API credential file used for DNS-01 validation."""

    def __init__(self, path: str, provider: str = "cloudflare"):
        """
        Initialize credential store.

        Args:
            path: Credential file path (e.g. /etc/letsencrypt/cloudflare.ini)
            provider: DNS provider name used in the token key
        """
        self.path = path
        self.provider = provider
        self.file_manager = FileManager()

    @property
    def token_key(self) -> str:
        return f"dns_{self.provider}_api_token"

    def exists(self) -> bool:
        """Check whether the credential file is present."""
        return os.path.isfile(self.path)

    def render(self, token: str) -> str:
        return f"{self.token_key} = {token}\n"

    def ensure(self, token: str) -> CredentialRecord:
        """
        Write the credential file, replacing any previous token.

        Args:
            token: DNS provider API token

        Returns:
            CredentialRecord: The written record

        Raises:
            CredentialWriteError: If the directory or file cannot be written
        """
        token = token.strip()
        if not token:
            raise CredentialWriteError("DNS provider API token cannot be empty")

        directory = os.path.dirname(self.path)

        try:
            if directory:
                os.makedirs(directory, exist_ok=True)
            self.file_manager.write_private_file(self.path, self.render(token))
        except OSError as e:
            raise CredentialWriteError(
                f"Failed to write credential file {self.path}",
                details=str(e),
                suggestions=create_error_suggestions("credentials_unwritable", path=self.path),
            ) from e

        logger.info("%s API token saved to %s", self.provider.capitalize(), self.path)
        return CredentialRecord(provider_token_path=self.path, token=token)
