"""Inspection of issued and deployed certificates."""

import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from cryptography import x509
from cryptography.hazmat.primitives import serialization

from ..utils.errors import InstallerError

# Certificates closer than this to expiry are flagged
EXPIRY_WARNING_DAYS = 30


class CertificateInspector:
    """Reads PEM certificate/key pairs and reports on them."""

    def inspect(self, cert_path: str, key_path: Optional[str] = None) -> Dict[str, Any]:
        """
        Describe a certificate and optionally check its private key.

        Args:
            cert_path: Path to PEM certificate (first certificate in a chain is used)
            key_path: Optional path to the matching PEM private key

        Returns:
            Dict[str, Any]: subject, san_names, not_valid_after, expires_in_days,
            status and, when a key is given, key_matches
        """
        if not os.path.exists(cert_path):
            raise InstallerError(f"Certificate file not found: {cert_path}")

        with open(cert_path, "rb") as f:
            cert_data = f.read()

        try:
            cert = x509.load_pem_x509_certificate(cert_data)
        except ValueError as e:
            raise InstallerError(f"Invalid certificate format in {cert_path}", details=str(e)) from e

        try:
            san_ext = cert.extensions.get_extension_for_oid(x509.oid.ExtensionOID.SUBJECT_ALTERNATIVE_NAME)
            san_names = san_ext.value.get_values_for_type(x509.DNSName)
        except x509.ExtensionNotFound:
            san_names = []

        expires_at = cert.not_valid_after_utc
        expires_in_days = (expires_at - datetime.now(timezone.utc)).days

        status = "valid"
        if expires_in_days < 0:
            status = "expired"
        elif expires_in_days < EXPIRY_WARNING_DAYS:
            status = "expiring_soon"

        info = {
            "subject": cert.subject.rfc4514_string(),
            "issuer": cert.issuer.rfc4514_string(),
            "san_names": san_names,
            "not_valid_after": expires_at.isoformat(),
            "expires_in_days": expires_in_days,
            "status": status,
        }

        if key_path:
            info["key_matches"] = self._key_matches(cert, key_path)

        return info

    def _key_matches(self, cert: x509.Certificate, key_path: str) -> bool:
        if not os.path.exists(key_path):
            raise InstallerError(f"Private key file not found: {key_path}")

        with open(key_path, "rb") as f:
            key_data = f.read()

        try:
            private_key = serialization.load_pem_private_key(key_data, password=None)
        except (ValueError, TypeError) as e:
            raise InstallerError(f"Invalid private key format in {key_path}", details=str(e)) from e

        public_format = serialization.PublicFormat.SubjectPublicKeyInfo
        cert_public = cert.public_key().public_bytes(serialization.Encoding.DER, public_format)
        key_public = private_key.public_key().public_bytes(serialization.Encoding.DER, public_format)

        return cert_public == key_public
