"""Pytest configuration and shared fixtures."""

import os
import shutil
import tempfile
from datetime import datetime, timedelta, timezone

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from marzneshin_installer.utils.process import CommandResult


def write_self_signed_certificate(directory, names, validity_days=90):
    """Write fullchain.pem/privkey.pem for the given DNS names into directory."""
    os.makedirs(directory, exist_ok=True)

    private_key = ec.generate_private_key(ec.SECP256R1())
    subject = issuer = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, names[0])])
    now = datetime.now(timezone.utc)

    cert = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=validity_days))
        .add_extension(x509.SubjectAlternativeName([x509.DNSName(name) for name in names]), critical=False)
        .sign(private_key, hashes.SHA256())
    )

    cert_path = os.path.join(directory, "fullchain.pem")
    key_path = os.path.join(directory, "privkey.pem")

    with open(cert_path, "wb") as f:
        f.write(cert.public_bytes(serialization.Encoding.PEM))
    with open(key_path, "wb") as f:
        f.write(
            private_key.private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.PKCS8,
                encryption_algorithm=serialization.NoEncryption(),
            )
        )

    return cert_path, key_path


class FakeRunner:
    """Records commands and answers them without starting processes."""

    def __init__(self, returncode=0, stderr="", on_run=None):
        self.returncode = returncode
        self.stderr = stderr
        self.on_run = on_run
        self.commands = []

    def __call__(self, command, capture=True, input_text=None):
        self.commands.append(command)
        if self.on_run is not None:
            self.on_run(command)
        return CommandResult(command, self.returncode, stderr=self.stderr)


class FakeCertbot(FakeRunner):
    """Runner that writes a live certificate when certbot succeeds."""

    def __init__(self, config_dir, returncode=0, stderr=""):
        super().__init__(returncode=returncode, stderr=stderr)
        self.config_dir = config_dir

    def __call__(self, command, capture=True, input_text=None):
        result = super().__call__(command, capture, input_text)
        if result.ok and command[:2] == ["certbot", "certonly"]:
            names = [command[i + 1] for i, arg in enumerate(command) if arg == "-d"]
            cert_name = command[command.index("--cert-name") + 1]
            write_self_signed_certificate(os.path.join(self.config_dir, "live", cert_name), names)
        return result


def scripted(answers):
    """Prompt stand-in returning the given answers in order."""
    iterator = iter(answers)
    return lambda *args, **kwargs: next(iterator)


@pytest.fixture
def temp_directory():
    """Create a temporary directory for testing."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def live_certificate(temp_directory):
    """A certificate in a certbot-like live directory for example.com."""
    live_dir = os.path.join(temp_directory, "letsencrypt", "live", "example.com")
    return write_self_signed_certificate(live_dir, ["example.com", "*.example.com"])


@pytest.fixture
def settings_file(temp_directory):
    """Settings file pointing every path into the temporary directory."""
    config_path = os.path.join(temp_directory, "config.yml")
    with open(config_path, "w", encoding="utf-8") as f:
        f.write(
            f"""
letsencrypt:
  config_dir: {temp_directory}/letsencrypt
  credentials_file: {temp_directory}/letsencrypt/cloudflare.ini
distribution:
  directories:
    - {temp_directory}/var/lib/marzneshin/certs
    - {temp_directory}/var/lib/marznode/certs
  primary_service_fragment: /var/lib/marzneshin
panel:
  env_file: {temp_directory}/marzneshin.env
state_file: {temp_directory}/state.yml
"""
        )
    return config_path


@pytest.fixture(autouse=True)
def isolate_filesystem(temp_directory, monkeypatch):
    """Isolate filesystem operations to temporary directory."""
    monkeypatch.chdir(temp_directory)
    return temp_directory
