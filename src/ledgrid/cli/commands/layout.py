"""Layout inspection commands."""

import click

from ledgrid.grid import is_flipped
from ledgrid.layout import list_layouts, load_layout, resolve_layout_path
from ledgrid.models import LayoutDescriptor
from ledgrid.utils import PydanticPersistence

from .common import exit_with_error, load_app_config


@click.group(name="layout")
def layout_group():
    """Layout file commands."""
    pass


@layout_group.command(name="show")
@click.pass_context
@click.argument("path", type=str)
def show_layout(ctx, path: str):
    """Print the panels and geometry of a layout (file path or name)."""
    config = load_app_config(ctx)
    try:
        layout = load_layout(path, config)
    except Exception as e:
        exit_with_error(ctx, e)

    click.echo(str(layout))
    if not layout.panels:
        click.echo("  No panels defined.")
        return

    for index, panel in enumerate(layout.panels):
        flip = " [mirrored]" if is_flipped(panel, config.flip_panel_id) else ""
        click.echo(f"  [{index}] {panel}{flip}")


@layout_group.command(name="list")
@click.pass_context
def list_layout_files(ctx):
    """List layout files in the configured layouts directory."""
    config = load_app_config(ctx)
    paths = list_layouts(config)

    if not paths:
        click.echo(f"No layouts found in {config.layouts_dir}")
        return

    click.echo(f"Layouts in {config.layouts_dir}:\n")
    for path in paths:
        click.echo(f"  {path.stem}")


@layout_group.command(name="validate")
@click.pass_context
@click.argument("path", type=str)
def validate_layout(ctx, path: str):
    """Check a layout file without touching any device."""
    config = load_app_config(ctx)
    try:
        resolved = resolve_layout_path(path, config)
    except FileNotFoundError as e:
        exit_with_error(ctx, e)

    is_valid, message = PydanticPersistence.validate_json(resolved, LayoutDescriptor)
    if is_valid:
        click.echo(f"[OK] {resolved} is a valid layout")
    else:
        click.echo(f"[FAIL] {resolved}: {message}")
        ctx.exit(1)
