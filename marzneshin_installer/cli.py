"""Main CLI entry point for the Marzneshin installer.

This module provides the command-line interface that installs the Marzneshin
panel and keeps its TLS certificates up to date. Run without a subcommand it
shows the interactive management menu; the subcommands expose the same flows
for scripted use.

The CLI is built using Click.
"""

import os
import time
from typing import Optional, Tuple

import click
import yaml

from marzneshin_installer import __version__
from marzneshin_installer.utils.errors import (
    ErrorHandler,
    InstallerEnvironmentError,
    PrivilegeError,
)
from marzneshin_installer.utils.logging import setup_logging

MENU_WIDTH = 62
# Seconds an invalid-choice message stays visible before the menu is redrawn
INVALID_CHOICE_DELAY = 2


@click.group(invoke_without_command=True, context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--log-file", help="Log to file in addition to console")
@click.option("--config", "config_path", help="Path to installer settings file")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, log_file: Optional[str], config_path: Optional[str]) -> None:
    """Marzneshin installer - panel setup and SSL certificate management.

    Without a command, the interactive management menu is shown.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config_path
    ctx.obj["error_handler"] = ErrorHandler(verbose=verbose)

    setup_logging(verbose=verbose, log_file=log_file)

    if ctx.invoked_subcommand is None:
        _run_menu(ctx)


def _display_menu() -> None:
    click.clear()
    border = "═" * MENU_WIDTH
    click.secho(f"╔{border}╗", fg="cyan", bold=True)
    click.secho(f"║{'MARZNESHIN MANAGEMENT TOOL'.center(MENU_WIDTH)}║", fg="cyan", bold=True)
    click.secho(f"╚{border}╝", fg="cyan", bold=True)
    click.echo()
    click.echo(f"  {click.style('1)', fg='yellow', bold=True)} Install & Configure Marzneshin")
    click.echo(f"  {click.style('2)', fg='yellow', bold=True)} Update SSL Certificates")
    click.echo(f"  {click.style('0)', fg='yellow', bold=True)} Exit")
    click.echo()


def _run_menu(ctx: click.Context) -> None:
    error_handler = ctx.obj["error_handler"]

    try:
        _require_root()
    except PrivilegeError as e:
        error_handler.exit_with_error(e)

    while True:
        _display_menu()
        choice = click.prompt("Enter your choice (0-2)", default="", show_default=False).strip()

        if choice == "0":
            click.secho("Thank you for using the Marzneshin Management Tool!", fg="green", bold=True)
            ctx.exit(0)
        elif choice == "1":
            click.secho("===== Installing & Configuring Marzneshin =====", fg="green", bold=True)
            _guarded(ctx, _run_install, "Marzneshin installation")
        elif choice == "2":
            click.secho("===== Updating SSL Certificates =====", fg="green", bold=True)
            _guarded(ctx, _run_reissue, "SSL certificate update")
        else:
            click.secho("Invalid option. Please try again.", fg="red")
            time.sleep(INVALID_CHOICE_DELAY)
            continue

        click.pause(info="Press Enter to return to the main menu...")


def _guarded(ctx: click.Context, flow, context: str) -> None:
    """Run a menu flow; setup failures exit, other errors return to the menu."""
    error_handler = ctx.obj["error_handler"]
    try:
        flow(ctx)
    except (PrivilegeError, InstallerEnvironmentError) as e:
        error_handler.exit_with_error(e, context)
    except Exception as e:
        error_handler.handle_error(e, context)


def _require_root() -> None:
    from marzneshin_installer.system import HostPreparer

    HostPreparer().require_root()


def _config_manager(ctx: click.Context):
    from marzneshin_installer.config import ConfigManager

    return ConfigManager(ctx.obj["config_path"])


def _build_coordinator(ctx: click.Context):
    from marzneshin_installer.workflows import ReissueCoordinator

    return ReissueCoordinator.from_settings(_config_manager(ctx))


def _run_reissue(ctx: click.Context, domains: Tuple[str, ...] = (), assume_yes: bool = False) -> None:
    from marzneshin_installer.certificates import DomainCollector

    coordinator = _build_coordinator(ctx)

    domain_entries = DomainCollector.from_values(domains) if domains else None
    if domain_entries:
        DomainCollector.summarize(domain_entries)

    outcome = coordinator.run(domains=domain_entries, reuse_previous=True if assume_yes else None)

    _print_deployment(outcome.deployment)
    _print_certificate_info(outcome.certificate_info)

    if outcome.reload_error is not None:
        ctx.obj["error_handler"].handle_error(outcome.reload_error, "Panel restart")

    if outcome.deployment.targets:
        click.secho("✓ SSL certificates have been successfully updated!", fg="green")
    else:
        click.secho("✗ Certificates were issued but could not be copied anywhere", fg="red", err=True)


def _run_install(ctx: click.Context) -> None:
    from marzneshin_installer.panel import PanelEnvFile
    from marzneshin_installer.system import HostPreparer
    from marzneshin_installer.workflows import InstallWorkflow

    config_manager = _config_manager(ctx)
    panel = config_manager.load_settings()["panel"]
    coordinator = _build_coordinator(ctx)

    workflow = InstallWorkflow(
        host=HostPreparer(),
        coordinator=coordinator,
        env_file=PanelEnvFile(panel["env_file"]),
        database=panel.get("database", "mariadb"),
        default_port=panel.get("default_port", 8000),
        default_dashboard_path=panel.get("default_dashboard_path", "dashboard"),
    )
    summary = workflow.run()

    _print_deployment(summary.outcome.deployment)
    if summary.outcome.config_error is not None:
        ctx.obj["error_handler"].handle_error(summary.outcome.config_error, "Panel configuration")
    if summary.outcome.reload_error is not None:
        ctx.obj["error_handler"].handle_error(summary.outcome.reload_error, "Panel restart")

    click.echo()
    click.secho("===== Installation Complete =====", fg="magenta", bold=True)
    if summary.outcome.config_error is None:
        click.secho("Marzneshin has been successfully installed and configured!", fg="green", bold=True)
    else:
        click.secho("Marzneshin has been installed, but its settings were not updated.", fg="yellow", bold=True)
    click.echo("\nPanel Information:")
    click.echo(f"  Port: {summary.port}")
    click.echo(f"  Dashboard Path: /{summary.dashboard_path}/")
    if summary.tls_enabled:
        click.echo(f"  SSL: {click.style('Enabled', fg='green')}")
    else:
        click.echo(f"  SSL: {click.style('Not configured', fg='red')}")
    click.echo("\nTo create an admin user, run:")
    click.echo("  marzneshin cli admin create --sudo")
    click.echo("\nTo access your panel:")
    click.echo(f"  {summary.panel_url}")


def _print_deployment(deployment) -> None:
    if deployment.targets:
        click.echo("\nCertificates were copied to:")
        for target in deployment.targets:
            click.echo(f"  - {target.cert_path}")
            click.echo(f"  - {target.key_path}")

    for error in deployment.errors:
        click.secho(f"✗ {error.message}: {error.details}", fg="red", err=True)


def _print_certificate_info(info) -> None:
    if not info:
        return
    click.echo(f"\nCertificate names: {', '.join(info['san_names'])}")
    click.echo(f"Expires: {info['not_valid_after']} ({info['expires_in_days']} days)")


@cli.command()
@click.pass_context
def install(ctx: click.Context) -> None:
    """Install and configure Marzneshin with SSL certificates.

    Prepares the host (system update, Docker), runs the panel installer,
    issues a certificate through Cloudflare DNS validation, copies it to the
    panel and node directories and enables TLS in the panel configuration.
    """
    try:
        _run_install(ctx)
    except Exception as e:
        ctx.obj["error_handler"].exit_with_error(e, "Marzneshin installation")


@cli.command()
@click.option(
    "--domain",
    "-d",
    "domains",
    multiple=True,
    help="Domain to include; '*.example.com' adds example.com with all subdomains (repeatable)",
)
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Reuse recorded certificate locations without asking")
@click.pass_context
def renew(ctx: click.Context, domains: Tuple[str, ...], assume_yes: bool) -> None:
    """Issue fresh certificates and redeploy them.

    Makes sure certbot and the DNS credentials exist, reissues the
    certificate, copies it to every destination and restarts the panel.
    """
    try:
        _require_root()
        _run_reissue(ctx, domains=domains, assume_yes=assume_yes)
    except Exception as e:
        ctx.obj["error_handler"].exit_with_error(e, "SSL certificate update")


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the certificates deployed by the last run."""
    try:
        from marzneshin_installer.certificates import CertificateInspector, DistributionPlan

        state = _config_manager(ctx).load_state()
        if not state:
            click.echo("No recorded deployment found.")
            return

        names = ", ".join(d["name"] + (" (+ subdomains)" if d["include_wildcard"] else "") for d in state["domains"])
        click.echo(f"Domains: {names}")

        plan = DistributionPlan(state["cert_filename"], state["key_filename"], tuple(state["directories"]))
        inspector = CertificateInspector()

        for target in plan.targets():
            if not os.path.exists(target.cert_path):
                click.secho(f"✗ {target.cert_path}: missing", fg="red")
                continue
            info = inspector.inspect(target.cert_path, target.key_path if os.path.exists(target.key_path) else None)
            marker = "✓" if info["status"] == "valid" and info.get("key_matches", True) else "!"
            click.echo(f"{marker} {target.cert_path}: {info['status']}, expires in {info['expires_in_days']} days")
            if info.get("key_matches") is False:
                click.secho(f"  Key {target.key_path} does not match the certificate", fg="yellow")

    except Exception as e:
        ctx.obj["error_handler"].exit_with_error(e, "Certificate status")


@cli.group(name="config")
@click.pass_context
def config_group(ctx: click.Context) -> None:
    """Manage installer settings."""
    pass


@config_group.command(name="init")
@click.option("--force", is_flag=True, help="Overwrite an existing settings file")
@click.option("--email", help="Let's Encrypt registration email")
@click.pass_context
def config_init(ctx: click.Context, force: bool, email: Optional[str]) -> None:
    """Write the default settings file."""
    try:
        template_vars = {"email": email} if email else None
        path = _config_manager(ctx).write_default_config(force=force, template_vars=template_vars)
        click.echo(f"✓ Settings written to {path}")
    except FileExistsError as e:
        click.echo(f"✗ {e} (use --force to overwrite)", err=True)
        ctx.exit(1)
    except Exception as e:
        ctx.obj["error_handler"].exit_with_error(e, "Settings initialization")


@config_group.command(name="show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Print the effective settings."""
    try:
        settings = _config_manager(ctx).load_settings()
        click.echo(yaml.safe_dump(settings, default_flow_style=False, sort_keys=False), nl=False)
    except Exception as e:
        ctx.obj["error_handler"].exit_with_error(e, "Settings display")


if __name__ == "__main__":
    cli(obj={})
