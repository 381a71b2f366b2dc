"""Tests for panel service control and its .env file."""

import os
from unittest.mock import patch

import pytest

from conftest import FakeRunner
from marzneshin_installer.certificates.distribution import DistributionTarget
from marzneshin_installer.panel import PanelEnvFile, PanelService, normalize_dashboard_path
from marzneshin_installer.utils.errors import InstallerEnvironmentError, PanelConfigError

ENV_CONTENT = """\
# Marzneshin settings
UVICORN_HOST = "0.0.0.0"
UVICORN_PORT = 8000
# DASHBOARD_PATH = "/dashboard/"
# UVICORN_SSL_CERTFILE = "/var/lib/marzneshin/certs/example.com/fullchain.pem"
# UVICORN_SSL_KEYFILE = "/var/lib/marzneshin/certs/example.com/key.pem"
SQLALCHEMY_DATABASE_URL = "sqlite:///db.sqlite3"
"""


@pytest.fixture
def env_path(temp_directory):
    path = os.path.join(temp_directory, ".env")
    with open(path, "w") as f:
        f.write(ENV_CONTENT)
    return path


def read_lines(path):
    with open(path) as f:
        return f.read().splitlines()


class TestDashboardPath:
    """Test dashboard path normalization."""

    def test_slashes_stripped(self):
        assert normalize_dashboard_path("/secret/") == "secret"

    def test_empty_uses_default(self):
        assert normalize_dashboard_path("") == "dashboard"
        assert normalize_dashboard_path("/") == "dashboard"
        assert normalize_dashboard_path(None) == "dashboard"


class TestPanelEnvFile:
    """Test .env editing."""

    def test_configure_with_tls(self, env_path):
        target = DistributionTarget("/var/lib/marzneshin/certs", "cert.pem", "key.pem")

        enabled = PanelEnvFile(env_path).configure(port=8443, dashboard_path="/panel/", tls_target=target)

        lines = read_lines(env_path)
        assert enabled is True
        assert "UVICORN_PORT = 8443" in lines
        assert 'DASHBOARD_PATH = "/panel/"' in lines
        assert 'UVICORN_SSL_CERTFILE = "/var/lib/marzneshin/certs/cert.pem"' in lines
        assert 'UVICORN_SSL_KEYFILE = "/var/lib/marzneshin/certs/key.pem"' in lines
        assert not any(line.startswith("#") and "UVICORN_SSL" in line for line in lines)

    def test_configure_keeps_other_lines(self, env_path):
        PanelEnvFile(env_path).configure(port=9000, dashboard_path="dashboard")

        lines = read_lines(env_path)
        assert lines[0] == "# Marzneshin settings"
        assert 'UVICORN_HOST = "0.0.0.0"' in lines
        assert 'SQLALCHEMY_DATABASE_URL = "sqlite:///db.sqlite3"' in lines
        assert len(lines) == len(ENV_CONTENT.splitlines())

    def test_configure_without_tls(self, env_path):
        enabled = PanelEnvFile(env_path).configure(port=8000, dashboard_path="dashboard", tls_target=None)

        lines = read_lines(env_path)
        assert enabled is False
        assert any(line.startswith("# UVICORN_SSL_CERTFILE") for line in lines)
        assert PanelEnvFile(env_path).load().get("UVICORN_SSL_CERTFILE") is None

    def test_backup_written(self, env_path):
        PanelEnvFile(env_path).configure(port=8001)

        with open(env_path + ".bak") as f:
            assert f.read() == ENV_CONTENT

    def test_missing_key_appended(self, temp_directory):
        path = os.path.join(temp_directory, ".env")
        with open(path, "w") as f:
            f.write("UVICORN_HOST = 0.0.0.0\n")

        PanelEnvFile(path).configure(port=8000, dashboard_path="dash")

        assert read_lines(path)[-2:] == ["UVICORN_PORT = 8000", 'DASHBOARD_PATH = "/dash/"']

    def test_active_line_preferred(self, temp_directory):
        path = os.path.join(temp_directory, ".env")
        with open(path, "w") as f:
            f.write("# UVICORN_PORT = 1\nUVICORN_PORT = 2\n")

        env = PanelEnvFile(path).load()
        env.set("UVICORN_PORT", "3")

        assert env.lines == ["# UVICORN_PORT = 1", "UVICORN_PORT = 3"]

    def test_get_unquotes(self, env_path):
        env = PanelEnvFile(env_path).load()

        assert env.get("UVICORN_HOST") == "0.0.0.0"
        assert env.get("DASHBOARD_PATH") is None

    def test_missing_file(self, temp_directory):
        with pytest.raises(PanelConfigError):
            PanelEnvFile(os.path.join(temp_directory, "missing.env")).configure()


class TestPanelService:
    """Test the panel management command wrapper."""

    def test_restart(self):
        runner = FakeRunner()

        result = PanelService(runner=runner).restart()

        assert result.ok
        assert runner.commands == [["marzneshin", "restart"]]

    def test_restart_failure_reported(self):
        result = PanelService(runner=FakeRunner(returncode=1, stderr="unit failed")).restart()

        assert not result.ok
        assert result.reason == "unit failed"

    @patch("marzneshin_installer.panel.service.command_exists", return_value=True)
    def test_install(self, mock_exists):
        runner = FakeRunner()

        PanelService(runner=runner).install("sqlite")

        command = runner.commands[0]
        assert command[:2] == ["bash", "-c"]
        assert "install --database sqlite" in command[2]
        assert "curl -sL https://" in command[2]

    @patch("marzneshin_installer.panel.service.command_exists", return_value=True)
    def test_install_interrupted(self, mock_exists):
        def interrupt(command):
            raise KeyboardInterrupt

        PanelService(runner=FakeRunner(on_run=interrupt)).install()

    @patch("marzneshin_installer.panel.service.command_exists", return_value=False)
    def test_install_failed(self, mock_exists):
        with pytest.raises(InstallerEnvironmentError):
            PanelService(runner=FakeRunner()).install()

    @patch("marzneshin_installer.panel.service.command_exists", return_value=False)
    def test_not_installed(self, mock_exists):
        assert not PanelService().is_installed()
        mock_exists.assert_called_once_with("marzneshin")
