"""Command-line interface for AutoRip."""

import asyncio
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__
from .config import AutoRipConfig, create_sample_config, load_config
from .core.workflow import AutoRipWorkflow
from .drive.control import DriveControl
from .error_handling import (
    AutoRipError,
    ConfigurationError,
    ExecutableNotFoundError,
    graceful_exit,
    handle_error,
    is_fatal,
)
from .rip.orchestrator import RunReport

console = Console()

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "autorip" / "config.toml"


def setup_logging(
    *,
    verbose: bool = False,
    config: AutoRipConfig | None = None,
) -> None:
    """Set up logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO

    cleanup_logging()

    datefmt = "[%X]"
    if config and config.log_time_format == "12hr":
        datefmt = "[%I:%M:%S %p]"

    show_path = level == logging.DEBUG
    handlers: list[logging.Handler] = [
        RichHandler(console=console, rich_tracebacks=True, show_path=show_path),
    ]

    if config and config.file_log_enabled:
        try:
            config.log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(config.log_dir / "autorip.log")
        except OSError as e:
            console.print(f"[yellow]File logging disabled: {e}[/yellow]")
        else:
            file_handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                ),
            )
            handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt=datefmt,
        handlers=handlers,
        force=True,
    )


def cleanup_logging() -> None:
    """Clean up logging handlers to prevent ResourceWarnings."""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        if isinstance(handler, logging.FileHandler):
            handler.close()
            root_logger.removeHandler(handler)


@click.group()
@click.version_option(__version__, prog_name="autorip")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Configuration file path",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx: click.Context, config: Path | None, verbose: bool) -> None:
    """AutoRip - Rip every inserted DVD and Blu-ray disc with MakeMKV."""
    try:
        ctx.ensure_object(dict)
        loaded_config = load_config(config)
        ctx.obj["config"] = loaded_config
        ctx.obj["verbose"] = verbose

        setup_logging(verbose=verbose, config=loaded_config)
    except (OSError, ValueError) as e:
        config_error = ConfigurationError(
            f"Failed to load configuration: {e}",
            config_path=config,
            solution="Run 'autorip config validate' to check your configuration file",
        )
        console.print(f"[red]Configuration Error:[/red] {config_error}")
        sys.exit(1)


def show_report(report: RunReport) -> None:
    """Print the result of a run as a table."""
    if not report.total:
        console.print("[yellow]No discs found to rip[/yellow]")
        return

    table = Table(title="Rip Results")
    table.add_column("Title")
    table.add_column("Result")
    for title in report.succeeded:
        table.add_row(title, "[green]Ripped[/green]")
    for title in report.failed:
        table.add_row(title, "[red]Failed[/red]")
    console.print(table)


@cli.command()
@click.option("--yes", "-y", is_flag=True, help="Run a single batch without prompting")
@click.pass_context
def rip(ctx: click.Context, yes: bool) -> None:
    """Rip all inserted discs."""
    config: AutoRipConfig = ctx.obj["config"]
    workflow = AutoRipWorkflow(config)

    while True:
        try:
            report = asyncio.run(workflow.run())
        except AutoRipError as e:
            e.display_to_user()
            graceful_exit(1 if is_fatal(e) else 0)
        except Exception as e:
            handle_error(e)
            graceful_exit(1)

        show_report(report)

        if yes or not config.repeat_mode:
            break
        if not click.confirm("Rip another batch of discs?", default=True):
            break

    console.print("Exiting...")


@cli.command()
@click.pass_context
def load(ctx: click.Context) -> None:
    """Close all drive trays."""
    config: AutoRipConfig = ctx.obj["config"]
    console.print("Loading all drives...")
    asyncio.run(DriveControl().load_with_wait(config.load_delay))
    console.print("[green]Load operation completed.[/green]")


@cli.command()
def eject() -> None:
    """Open all drive trays."""
    console.print("Ejecting all drives...")
    asyncio.run(DriveControl().eject_all())
    console.print("[green]Eject operation completed.[/green]")


@cli.group("config")
def config_cmd() -> None:
    """Configuration management commands."""


@config_cmd.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show current configuration."""
    config: AutoRipConfig = ctx.obj["config"]

    table = Table()
    table.add_column("Setting")
    table.add_column("Value")

    table.add_row("Rips Directory", str(config.movie_rips_dir))
    table.add_row("Log Directory", str(config.log_dir))
    table.add_row("MakeMKV Directory", str(config.makemkv_dir or "Search PATH"))
    table.add_row("Transcript Logs", "Enabled" if config.file_log_enabled else "Disabled")
    table.add_row("Load Drives", "Yes" if config.auto_load_drives else "No")
    table.add_row("Eject Drives", "Yes" if config.auto_eject_drives else "No")
    table.add_row("Mount Wait", f"{config.mount_wait_timeout}s (every {config.mount_poll_interval}s)")
    table.add_row("Ripping Mode", config.ripping_mode)
    table.add_row("Titles", "All" if config.rip_all_titles else "Longest")
    table.add_row("Fake Date", config.fake_date or "Not configured")

    console.print(table)


@config_cmd.command("validate")
@click.pass_context
def config_validate(ctx: click.Context) -> None:
    """Validate current configuration."""
    config: AutoRipConfig = ctx.obj["config"]

    console.print("[bold]Configuration Validation[/bold]")

    errors = []

    dirs = [("Rips", config.movie_rips_dir)]
    if config.file_log_enabled:
        dirs.append(("Log", config.log_dir))

    for name, path in dirs:
        try:
            path.mkdir(parents=True, exist_ok=True)
            console.print(f"[green]✓[/green] {name} directory: {path}")
        except OSError as e:
            console.print(f"[red]✗[/red] {name} directory: {e}")
            errors.append(f"{name} directory: {e}")

    try:
        console.print(f"[green]✓[/green] MakeMKV: {config.makemkv_con}")
    except ExecutableNotFoundError as e:
        console.print(f"[red]✗[/red] {e.message}")
        errors.append(e.message)

    if errors:
        console.print(f"\n[red]Found {len(errors)} configuration errors[/red]")
        sys.exit(1)
    else:
        console.print("\n[green]Configuration is valid[/green]")


@config_cmd.command("init")
@click.option(
    "--path",
    "-p",
    type=click.Path(path_type=Path),
    default=DEFAULT_CONFIG_PATH,
    help="Path for the configuration file",
)
def config_init(path: Path) -> None:
    """Create a sample configuration file."""
    try:
        create_sample_config(path)
        console.print(f"[green]Created sample configuration at {path}[/green]")
        console.print("Please edit the configuration file with your settings.")
    except OSError as e:
        console.print(f"[red]Error creating configuration: {e}[/red]")
        sys.exit(1)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
