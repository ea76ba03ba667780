"""Main CLI entry point."""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

import click

from ledgrid import __version__

from .commands import config, discover, layout_group, off, test_pattern

logger = logging.getLogger(__name__)

DEFAULT_LOG_DIR = Path.home() / ".ledgrid" / "logs"


def setup_logging(verbose: int, debug: bool, log_file: Optional[Path], log_level: str) -> Path:
    """
    Configure logging for the application.

    Args:
        verbose: Verbosity count (0 = WARNING, 1 = INFO, 2+ = DEBUG)
        debug: If True, enable debug mode with file logging
        log_file: Custom log file path (optional)
        log_level: Log level for file logging (DEBUG/INFO/WARNING/ERROR)

    Returns:
        Path of the log file
    """
    # Determine log level based on flags
    if debug:
        level = logging.DEBUG
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    # Override with explicit log level if provided
    if log_file:
        level = getattr(logging, log_level.upper())

    # Determine log file path
    if debug and not log_file:
        log_path = Path.cwd() / "ledgrid-debug.log"
    elif log_file:
        log_path = log_file
    else:
        DEFAULT_LOG_DIR.mkdir(parents=True, exist_ok=True)
        log_path = DEFAULT_LOG_DIR / "ledgrid.log"

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Rotating file handler (keeps last 5 files, max 10MB each)
    file_handler = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Replace handlers left by an earlier invocation in the same process
    for handler in list(root_logger.handlers):
        if getattr(handler, "_ledgrid", False):
            root_logger.removeHandler(handler)
            handler.close()

    file_handler._ledgrid = True
    root_logger.addHandler(file_handler)

    # Mirror to stderr when asked to be verbose
    if verbose or debug:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
        console_handler._ledgrid = True
        root_logger.addHandler(console_handler)

    logger.info(f"Logging configured: level={logging.getLevelName(level)}, file={log_path}")
    return log_path


@click.group()
@click.pass_context
@click.version_option(version=__version__, prog_name="ledgrid")
@click.option(
    '--config-file',
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help='Config file path (default: ~/.ledgrid/config.json)'
)
@click.option(
    '-v', '--verbose',
    count=True,
    help='Increase verbosity (-v: INFO, -vv: DEBUG)'
)
@click.option(
    '--debug',
    is_flag=True,
    help='Enable debug mode (DEBUG level, logs to ./ledgrid-debug.log)'
)
@click.option(
    '--log-file',
    type=click.Path(path_type=Path),
    default=None,
    help='Custom log file path'
)
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    default='INFO',
    help='Log level for file logging (default: INFO)'
)
def cli(
    ctx,
    config_file: Optional[Path],
    verbose: int,
    debug: bool,
    log_file: Optional[Path],
    log_level: str
):
    """
    ledgrid - drive networked LED matrix panels.

    Panels are described by a JSON layout file and reached over DDP,
    Art-Net or the JSON REST API.

    \b
    Examples:
      # Find devices on the local network
      ledgrid discover

    \b
      # Show the panels of a layout
      ledgrid layout show living_room.json

    \b
      # Light every panel in its own color for 5 seconds
      ledgrid test-pattern living_room.json --frames 150 --fps 30

    \b
      # Black out every panel
      ledgrid off living_room.json

    \b
      # Switch the default transport
      ledgrid config --set transport=artnet
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_file
    ctx.obj["log_path"] = setup_logging(verbose, debug, log_file, log_level)


# Register commands
cli.add_command(discover)
cli.add_command(layout_group)
cli.add_command(test_pattern)
cli.add_command(off)
cli.add_command(config)

if __name__ == "__main__":
    cli()
