"""Device discovery command."""

import logging
from typing import Optional

import click

from ledgrid.discovery import DeviceDiscovery, validate_subnet
from ledgrid.exceptions import SubnetDetectionError

from .common import exit_with_error, load_app_config

logger = logging.getLogger(__name__)


@click.command(name="discover")
@click.pass_context
@click.option(
    "--subnet",
    type=str,
    default=None,
    help="Subnet prefix to scan, e.g. 192.168.1 (default: detected)",
)
@click.option(
    "--power/--no-power",
    default=False,
    help="Also read each device's power state",
)
def discover(ctx, subnet: Optional[str], power: bool):
    """
    Scan the local /24 subnet for LED controllers.

    Every address is asked for /json/info; the scan stops after the
    configured time budget.
    """
    config = load_app_config(ctx)

    if subnet is not None:
        try:
            subnet = validate_subnet(subnet)
        except SubnetDetectionError as e:
            exit_with_error(ctx, e)

    click.echo(f"Scanning {subnet + '.x' if subnet else 'local subnet'}...")
    devices = DeviceDiscovery(config).scan(subnet, check_power=power)

    if not devices:
        click.echo("No devices found.")
        return

    click.echo(f"\nFound {len(devices)} device(s):\n")
    for device in devices:
        click.echo(f"  {device}")
