"""Configuration command.

Commands:
    - config                          # Display configuration
    - config --set key=value ...      # Update and save configuration
    - config --reset                  # Restore defaults
"""

from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError

from ledgrid.exceptions import wrap_pydantic_error
from ledgrid.models import AppConfig

from .common import exit_with_error, load_app_config


def parse_assignment(text: str) -> tuple[str, str]:
    """Split 'key=value' into its parts."""
    key, sep, value = text.partition("=")
    key = key.strip()
    if not sep or not key:
        raise click.BadParameter(f"expected key=value, got '{text}'", param_hint="--set")
    if key not in AppConfig.model_fields:
        valid = ", ".join(sorted(AppConfig.model_fields))
        raise click.BadParameter(f"unknown setting '{key}'. Valid settings: {valid}", param_hint="--set")
    return key, value.strip()


def apply_settings(config: AppConfig, assignments: dict[str, Any], source: str) -> AppConfig:
    """
    Return a validated copy of config with the assignments applied.

    Raises:
        ConfigValidationError: If a value is invalid
    """
    data = config.model_dump(mode="json")
    data.update(assignments)
    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        raise wrap_pydantic_error(e, source) from e


@click.command(name="config")
@click.pass_context
@click.option(
    "--set",
    "-s",
    "assignments",
    multiple=True,
    metavar="KEY=VALUE",
    help="Change a setting (repeatable), e.g. --set transport=artnet",
)
@click.option("--reset", is_flag=True, help="Restore every setting to its default")
def config(ctx, assignments: tuple[str, ...], reset: bool):
    """Show or edit ledgrid settings."""
    path: Path = (ctx.obj or {}).get("config_path") or AppConfig.default_path()
    current = AppConfig() if reset else load_app_config(ctx)

    if assignments:
        updates = dict(parse_assignment(a) for a in assignments)
        try:
            current = apply_settings(current, updates, str(path))
        except Exception as e:
            exit_with_error(ctx, e)

    if assignments or reset:
        try:
            current.save(path)
        except Exception as e:
            exit_with_error(ctx, e)
        click.echo(f"Saved configuration to {path}\n")

    click.echo(f"Configuration ({path}):\n")
    for name, value in current.model_dump(mode="json").items():
        click.echo(f"  {name}: {value}")
