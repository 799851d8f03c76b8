"""
Command Line Interface

Author: mirrorkeep Project
License: MIT
"""

from typing import Optional

import typer

from .config.config_loader import ConfigLoader
from .config.schema import Config
from .core.errors import ScanError, SetupError
from .core.orchestrator import SyncOrchestrator
from .service import SyncService
from .utils.logger import setup_logging

app = typer.Typer(help="Incremental backup mirroring with tombstones for deleted files.")

ConfigOption = typer.Option(
    None,
    "--config",
    "-c",
    help="Path to config.yaml (defaults to $CONFIG_PATH or /etc/mirrorkeep/config.yaml).",
)


def _load(config_path: Optional[str]) -> Config:
    try:
        config = ConfigLoader(config_path).load()
    except ValueError as exc:
        typer.echo(f"Invalid configuration: {exc}", err=True)
        raise typer.Exit(code=2)

    setup_logging(
        log_level=config.app.log_level,
        log_to_file=config.app.log_to_file,
        log_file_path=config.app.log_file_path,
        log_rotation_size=config.app.log_rotation_size,
        log_retention_count=config.app.log_retention_count,
        json_format=config.app.json_logs,
    )
    return config


@app.command()
def run(config_path: Optional[str] = ConfigOption) -> None:
    """Run sync cycles on the configured schedule until interrupted."""
    config = _load(config_path)
    service = SyncService(config)
    try:
        service.run_forever()
    except SetupError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)


@app.command()
def once(config_path: Optional[str] = ConfigOption) -> None:
    """Run a single sync cycle. Exits with 1 if any file failed."""
    config = _load(config_path)
    orchestrator = SyncOrchestrator.from_config(config.sync)
    try:
        report = orchestrator.sync()
    except (SetupError, ScanError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)

    typer.echo(report.summary())
    for error in report.errors:
        typer.echo(f"  {error}", err=True)
    raise typer.Exit(code=1 if report.has_errors else 0)


@app.command()
def plan(config_path: Optional[str] = ConfigOption) -> None:
    """Show what the next cycle would do without changing anything."""
    config = _load(config_path)
    orchestrator = SyncOrchestrator.from_config(config.sync)
    try:
        orchestrator.check_layout()
        pending = orchestrator.plan()
    except (SetupError, ScanError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)

    for action in pending:
        typer.echo(str(action))
    if pending.is_empty:
        typer.echo("Backup is in sync.")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
