"""Commands that drive the panels of a layout."""

import logging
import time
from typing import Optional

import click

from ledgrid.grid import GridState
from ledgrid.layout import load_layout
from ledgrid.models import Color, TransportKind

from .common import exit_with_error, load_app_config

logger = logging.getLogger(__name__)

# One color per panel, rotated every frame
PATTERN_COLORS = (
    Color(r=255, g=0, b=0),
    Color(r=0, g=255, b=0),
    Color(r=0, g=0, b=255),
    Color(r=255, g=255, b=0),
    Color(r=0, g=255, b=255),
    Color(r=255, g=0, b=255),
    Color(r=255, g=255, b=255),
)


def fill_panels(grid: GridState, frame_number: int) -> None:
    """Fill every panel with its pattern color for the given frame."""
    for index, panel in enumerate(grid.panels):
        color = PATTERN_COLORS[(index + frame_number) % len(PATTERN_COLORS)]
        for x in range(panel.grid_size):
            for y in range(panel.grid_size):
                grid.set_panel_color(index, x, y, color)


@click.command(name="test-pattern")
@click.pass_context
@click.argument("path", type=str)
@click.option(
    "--transport",
    "-t",
    type=click.Choice([k.value for k in TransportKind], case_sensitive=False),
    default=None,
    help="Transport to use (default: from config)",
)
@click.option("--frames", "-n", type=click.IntRange(min=1), default=1, help="Frames to send")
@click.option("--fps", type=click.FloatRange(min=0, min_open=True), default=30.0, help="Frames per second")
def test_pattern(ctx, path: str, transport: Optional[str], frames: int, fps: float):
    """Light every panel of a layout in its own color."""
    config = load_app_config(ctx)
    if transport is not None:
        config = config.model_copy(update={"transport": TransportKind(transport.lower())})

    try:
        layout = load_layout(path, config)
        grid = GridState(layout, config)
    except Exception as e:
        exit_with_error(ctx, e)

    click.echo(
        f"Sending {frames} frame(s) to {grid.panel_count} panel(s) "
        f"via {config.transport.value} at {fps:g} fps"
    )

    failed_frames = 0
    with grid:
        try:
            for frame_number in range(frames):
                fill_panels(grid, frame_number)
                results = grid.dispatch_results()
                if not all(results):
                    failed_frames += 1
                    for panel, result in zip(grid.panels, results):
                        if not result:
                            click.echo(f"  [FAIL] {panel.id}: {result}", err=True)
                if frame_number < frames - 1:
                    time.sleep(1.0 / fps)
        except KeyboardInterrupt:
            logger.info("Test pattern interrupted by user")
            click.echo("\nInterrupted", err=True)

    if failed_frames:
        click.echo(f"[FAIL] {failed_frames} of {frames} frame(s) had send errors")
        ctx.exit(1)
    click.echo("[OK] Test pattern sent")


@click.command(name="off")
@click.pass_context
@click.argument("path", type=str)
@click.option(
    "--transport",
    "-t",
    type=click.Choice([k.value for k in TransportKind], case_sensitive=False),
    default=None,
    help="Transport to use (default: from config)",
)
def off(ctx, path: str, transport: Optional[str]):
    """Black out or power off every panel of a layout."""
    config = load_app_config(ctx)
    if transport is not None:
        config = config.model_copy(update={"transport": TransportKind(transport.lower())})

    try:
        layout = load_layout(path, config)
        grid = GridState(layout, config)
    except Exception as e:
        exit_with_error(ctx, e)

    with grid:
        ok = grid.turn_off_all()

    if not ok:
        click.echo("[FAIL] Some panels did not turn off (see log)")
        ctx.exit(1)
    click.echo(f"[OK] Turned off {grid.panel_count} panel(s)")
