"""Main CLI entry point."""

import sys
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from mountwarden.config.models import AgentConfig
from mountwarden.config.parser import Config, ConfigValidationError
from mountwarden.credentials.resolver import EnvironmentStore, SecretResolver, SecretsManagerStore
from mountwarden.platform import BasePlatform, UnsupportedPlatformError, get_platform
from mountwarden.reconcile.models import MountStatus, ReconcileReport
from mountwarden.reconcile.reconciler import MountReconciler
from mountwarden.utils.errors import MountError, error_handler
from mountwarden.utils.logging import get_logger, prune_logs, setup_logging
from mountwarden.utils.run_log import write_run_log

console = Console()
logger = get_logger(__name__)

EXIT_OK = 0
EXIT_MOUNT_FAILED = 1
EXIT_CONFIG_ERROR = 2

STATUS_STYLES = {
    MountStatus.SKIPPED: "[dim]already mounted[/dim]",
    MountStatus.MOUNTED: "[green]mounted[/green]",
    MountStatus.FAILED: "[red]failed[/red]",
}

config_option = click.option(
    '--config', 'config_path',
    default='mountwarden.yaml',
    envvar='MOUNTWARDEN_CONFIG',
    show_default=True,
    help='Path to configuration file'
)


@click.group()
@click.option('--log-level', default=None, type=click.Choice(['debug', 'info', 'warning', 'error']),
              help='Console log level (overrides the configuration file)')
@click.pass_context
def cli(ctx, log_level):
    """Keep network drive mappings in their configured state."""
    ctx.ensure_object(dict)
    ctx.obj['log_level'] = log_level

    setup_logging(log_level or 'warning')


def load_config(config_path: str) -> Config:
    """Load and validate configuration file."""
    try:
        config = Config(config_path)
        config.load()
        return config
    except FileNotFoundError:
        console.print(f"[red]Error:[/red] Configuration file not found: {config_path}")
        sys.exit(EXIT_CONFIG_ERROR)
    except ConfigValidationError as e:
        console.print("[red]Configuration validation failed:[/red]\n")
        console.print(str(e), markup=False)
        logger.debug(f"Error details: {e.to_dict()}")
        sys.exit(EXIT_CONFIG_ERROR)


def create_platform() -> BasePlatform:
    """Create the OS collaborator, exiting when the OS is unsupported."""
    try:
        platform = get_platform()
    except UnsupportedPlatformError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(EXIT_CONFIG_ERROR)
    logger.debug(f"Using {platform.get_platform_name()} drive mapping backend")
    return platform


def create_reconciler(platform: BasePlatform, agent: AgentConfig) -> MountReconciler:
    """Create mount reconciler with its secret stores."""
    resolver = SecretResolver(
        environment=EnvironmentStore(),
        secrets_manager=SecretsManagerStore(
            profile=agent.secrets.aws.profile,
            region=agent.secrets.aws.region
        )
    )
    return MountReconciler(platform=platform, resolver=resolver)


def _print_report(report: ReconcileReport) -> None:
    table = Table(title="Reconciliation")
    table.add_column("Drive", style="cyan")
    table.add_column("Remote path")
    table.add_column("Result")
    table.add_column("Reason")

    for outcome in report.outcomes:
        table.add_row(
            outcome.drive_letter,
            outcome.remote_path,
            STATUS_STYLES[outcome.status],
            outcome.reason or "",
        )

    console.print(table)


@cli.command()
@config_option
@click.option('--quiet', is_flag=True, help='Do not print the result table')
@click.pass_context
def run(ctx, config_path: str, quiet: bool):
    """Run one reconciliation pass over all configured mounts."""
    cfg = load_config(config_path)
    agent = cfg.agent

    setup_logging(ctx.obj.get('log_level') or agent.logging.level, agent.logging.directory)
    for path in prune_logs(agent.logging.directory, agent.logging.retention_days):
        logger.debug(f"Pruned old log file {path}")

    platform = create_platform()
    reconciler = create_reconciler(platform, agent)

    report = reconciler.reconcile(cfg.mounts)
    write_run_log(report, config_path=str(cfg.config_path))

    if not quiet:
        _print_report(report)

    sys.exit(EXIT_MOUNT_FAILED if report.has_failures() else EXIT_OK)


@cli.command()
@config_option
def status(config_path: str):
    """Show whether each configured mount is correctly established."""
    cfg = load_config(config_path)
    platform = create_platform()
    reconciler = create_reconciler(platform, cfg.agent)

    table = Table(title="Mount status")
    table.add_column("Drive", style="cyan")
    table.add_column("Expected")
    table.add_column("Bound to")
    table.add_column("State")

    all_mounted = True
    for spec in cfg.mounts:
        try:
            observation, result = reconciler.inspect_mount(spec)
        except MountError as e:
            error_handler.log_error(e)
            table.add_row(spec.drive_letter, spec.remote_path, "", f"[red]error:[/red] {e.message}")
            all_mounted = False
            continue

        if observation is None:
            bound = ""
        elif observation.is_network:
            bound = observation.provider_name or ""
        else:
            bound = observation.drive_type_name
        state = "[green]mounted[/green]" if result.is_mounted else f"[yellow]{result.reason}[/yellow]"
        all_mounted = all_mounted and result.is_mounted
        table.add_row(spec.drive_letter, spec.remote_path, bound, state)

    console.print(table)
    sys.exit(EXIT_OK if all_mounted else EXIT_MOUNT_FAILED)


@cli.command()
@config_option
def validate(config_path: str):
    """Validate configuration file without touching any mapping."""
    cfg = load_config(config_path)

    table = Table(title="Configured mounts")
    table.add_column("Drive", style="cyan")
    table.add_column("Remote path")
    table.add_column("User")
    table.add_column("Secret source")

    for spec in cfg.mounts:
        user: Optional[str] = spec.credential.user_name if spec.credential else None
        source = spec.credential.secret.kind if spec.credential else ""
        table.add_row(spec.drive_letter, spec.remote_path, user or "", source)

    console.print(Panel.fit(
        f"[green]Configuration is valid[/green]\n\n"
        f"File: {cfg.config_path}\n"
        f"Mounts: {len(cfg.mounts)}\n"
        f"Log directory: {cfg.agent.logging.directory}",
        title="Validation",
        border_style="green"
    ))
    console.print(table)


def main():
    """Console script entry point."""
    cli(obj={})


if __name__ == '__main__':
    main()
