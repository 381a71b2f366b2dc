"""Tests for distribution planning."""

from conftest import scripted
from marzneshin_installer.certificates.distribution import (
    DEFAULT_DIRECTORIES,
    DistributionPlanner,
    normalize_directory,
    normalize_filename,
)


class TestNormalization:
    """Test filename and directory normalization."""

    def test_filename_gets_extension(self):
        assert normalize_filename("mycert") == "mycert.pem"

    def test_filename_normalization_is_idempotent(self):
        once = normalize_filename("mykey")

        assert normalize_filename(once) == once
        assert normalize_filename("cert.pem") == "cert.pem"

    def test_directory_trailing_slash_removed(self):
        assert normalize_directory("/opt/certs/") == "/opt/certs"
        assert normalize_directory("/opt/certs") == "/opt/certs"
        assert normalize_directory("/") == "/"


class TestDistributionPlanner:
    """Test planning outcomes."""

    def setup_method(self):
        self.planner = DistributionPlanner()

    def test_defaults(self):
        plan = self.planner.plan(use_defaults=True)

        assert plan.cert_filename == "cert.pem"
        assert plan.key_filename == "key.pem"
        assert plan.directories == DEFAULT_DIRECTORIES
        assert not plan.fell_back_to_defaults

    def test_defaults_ignore_custom_values(self):
        plan = self.planner.plan(use_defaults=True, custom_filenames=("a", "b"), custom_directories=["/x"])

        assert plan.cert_filename == "cert.pem"
        assert plan.directories == DEFAULT_DIRECTORIES

    def test_custom_filenames_normalized(self):
        plan = self.planner.plan(use_defaults=False, custom_filenames=("mycert", "mykey"), custom_directories=["/x"])

        assert (plan.cert_filename, plan.key_filename) == ("mycert.pem", "mykey.pem")

    def test_custom_directories_keep_order(self):
        plan = self.planner.plan(use_defaults=False, custom_directories=["/b/", "/a", "/c"])

        assert plan.directories == ("/b", "/a", "/c")
        assert plan.cert_filename == "cert.pem"

    def test_empty_custom_directories_fall_back(self):
        plan = self.planner.plan(use_defaults=False, custom_filenames=("c", "k"), custom_directories=[])

        assert plan.directories == DEFAULT_DIRECTORIES
        assert len(plan.directories) == 2
        assert plan.fell_back_to_defaults

    def test_targets_share_filenames(self):
        plan = self.planner.plan(use_defaults=False, custom_filenames=("c", "k"), custom_directories=["/a", "/b"])

        targets = plan.targets()

        assert [t.directory for t in targets] == ["/a", "/b"]
        assert all(t.cert_filename == "c.pem" and t.key_filename == "k.pem" for t in targets)
        assert targets[0].cert_path == "/a/c.pem"
        assert targets[1].key_path == "/b/k.pem"


class TestPromptPlan:
    """Test the interactive planning dialogue."""

    def test_accept_all_defaults(self):
        planner = DistributionPlanner(ask=scripted([]), confirm=scripted([True, True]))

        plan = planner.prompt_plan()

        assert plan.directories == DEFAULT_DIRECTORIES
        assert plan.cert_filename == "cert.pem"

    def test_custom_filenames_default_paths(self):
        planner = DistributionPlanner(ask=scripted(["mycert", "mykey"]), confirm=scripted([False, True]))

        plan = planner.prompt_plan()

        assert (plan.cert_filename, plan.key_filename) == ("mycert.pem", "mykey.pem")
        assert plan.directories == DEFAULT_DIRECTORIES

    def test_custom_paths_until_done(self):
        planner = DistributionPlanner(ask=scripted(["/srv/a/", "/srv/b", "done"]), confirm=scripted([True, False]))

        plan = planner.prompt_plan()

        assert plan.directories == ("/srv/a", "/srv/b")

    def test_no_custom_paths_falls_back(self):
        planner = DistributionPlanner(ask=scripted([""]), confirm=scripted([True, False]))

        plan = planner.prompt_plan()

        assert plan.directories == DEFAULT_DIRECTORIES
        assert plan.fell_back_to_defaults

    def test_empty_filename_asked_again(self):
        planner = DistributionPlanner(ask=scripted(["", "c", "k.pem"]), confirm=scripted([False, True]))

        plan = planner.prompt_plan()

        assert (plan.cert_filename, plan.key_filename) == ("c.pem", "k.pem")
