"""Helpers shared by the CLI commands."""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from ledgrid.exceptions import format_error_for_display
from ledgrid.models import AppConfig

logger = logging.getLogger(__name__)


def load_app_config(ctx: click.Context) -> AppConfig:
    """Load the config file selected by --config-file (or the default)."""
    path: Optional[Path] = (ctx.obj or {}).get("config_path")
    try:
        return AppConfig.load_or_default(path)
    except Exception as e:
        exit_with_error(ctx, e)


def exit_with_error(ctx: click.Context, error: Exception) -> None:
    """Show a clean error message and exit with status 1."""
    logger.exception("Command failed")

    # Format error message (handles both custom and standard exceptions)
    user_message, recovery_hint = format_error_for_display(error)

    click.echo("\n" + "=" * 70, err=True)
    click.echo(f"ERROR: {user_message}", err=True)
    click.echo("=" * 70, err=True)

    if recovery_hint:
        click.echo(f"\n{recovery_hint}", err=True)

    log_path = (ctx.obj or {}).get("log_path")
    if log_path:
        click.echo(f"\nFor details, check the log file: {log_path}", err=True)

    sys.exit(1)
