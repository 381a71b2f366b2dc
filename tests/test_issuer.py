"""Tests for certbot issuance."""

import os

import pytest

from conftest import FakeCertbot, FakeRunner
from marzneshin_installer.certificates.domains import DomainEntry
from marzneshin_installer.certificates.issuer import CertbotIssuer
from marzneshin_installer.certificates.request import CertificateRequestBuilder
from marzneshin_installer.utils.errors import InstallerEnvironmentError, IssuanceFailedError


def make_request(*entries):
    return CertificateRequestBuilder().build(list(entries), "/etc/letsencrypt/cloudflare.ini")


class TestCertbotCommand:
    """Test certbot command line assembly."""

    def test_validation_names_as_repeated_d_arguments(self):
        issuer = CertbotIssuer()
        request = make_request(DomainEntry("a.com", False), DomainEntry("b.com", True))

        cmd = issuer.build_command(request)

        names = [cmd[i + 1] for i, arg in enumerate(cmd) if arg == "-d"]
        assert names == ["a.com", "b.com", "*.b.com"]

    def test_dns_plugin_and_non_interactive(self):
        cmd = CertbotIssuer().build_command(make_request(DomainEntry("a.com")))

        assert cmd[:2] == ["certbot", "certonly"]
        assert "--non-interactive" in cmd
        assert "--dns-cloudflare" in cmd
        assert cmd[cmd.index("--dns-cloudflare-credentials") + 1] == "/etc/letsencrypt/cloudflare.ini"
        assert cmd[cmd.index("--cert-name") + 1] == "a.com"

    def test_email_registration(self):
        with_email = CertbotIssuer(email="admin@a.com").build_command(make_request(DomainEntry("a.com")))
        without_email = CertbotIssuer().build_command(make_request(DomainEntry("a.com")))

        assert with_email[with_email.index("--email") + 1] == "admin@a.com"
        assert "--register-unsafely-without-email" in without_email
        assert "--register-unsafely-without-email" not in with_email

    def test_staging_flag(self):
        cmd = CertbotIssuer(staging=True).build_command(make_request(DomainEntry("a.com")))

        assert "--staging" in cmd


class TestCertbotIssuer:
    """Test issuance outcomes."""

    def test_live_paths(self):
        issued = CertbotIssuer(config_dir="/etc/letsencrypt").live_paths("example.com")

        assert issued.cert_source_path == "/etc/letsencrypt/live/example.com/fullchain.pem"
        assert issued.key_source_path == "/etc/letsencrypt/live/example.com/privkey.pem"

    def test_issue_success(self, temp_directory):
        config_dir = os.path.join(temp_directory, "letsencrypt")
        issuer = CertbotIssuer(config_dir=config_dir, runner=FakeCertbot(config_dir))

        issued = issuer.issue(make_request(DomainEntry("example.com", True)))

        assert issued.primary_domain == "example.com"
        assert os.path.isfile(issued.cert_source_path)
        assert os.path.isfile(issued.key_source_path)

    def test_primary_domain_is_first_entry(self, temp_directory):
        config_dir = os.path.join(temp_directory, "letsencrypt")
        issuer = CertbotIssuer(config_dir=config_dir, runner=FakeCertbot(config_dir))

        issued = issuer.issue(make_request(DomainEntry("first.com"), DomainEntry("second.com", True)))

        assert issued.primary_domain == "first.com"
        assert "/live/first.com/" in issued.cert_source_path

    def test_issue_failure_carries_reason(self, temp_directory):
        runner = FakeRunner(returncode=1, stderr="DNS problem: NXDOMAIN")
        issuer = CertbotIssuer(config_dir=temp_directory, runner=runner)

        with pytest.raises(IssuanceFailedError) as exc_info:
            issuer.issue(make_request(DomainEntry("example.com")))

        assert "NXDOMAIN" in exc_info.value.details

    def test_success_without_files_is_failure(self, temp_directory):
        issuer = CertbotIssuer(config_dir=temp_directory, runner=FakeRunner())

        with pytest.raises(IssuanceFailedError) as exc_info:
            issuer.issue(make_request(DomainEntry("example.com")))

        assert "fullchain.pem" in exc_info.value.details

    def test_install_client(self):
        runner = FakeRunner()

        CertbotIssuer(runner=runner).install_client()

        assert runner.commands == [["apt", "install", "-y", "python3-certbot-dns-cloudflare"]]

    def test_install_client_failure(self):
        runner = FakeRunner(returncode=100, stderr="E: Unable to locate package")

        with pytest.raises(InstallerEnvironmentError):
            CertbotIssuer(runner=runner).install_client()
