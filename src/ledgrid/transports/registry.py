"""Transport registry.

Maps a TransportKind (from config) to a factory that builds the client for
one panel. A factory takes the panel descriptor, the panel's index in the
layout, the application config and a logger.
"""

import logging
from typing import Callable, Optional

from ledgrid.models import AppConfig, PanelDescriptor, TransportKind

from .artnet import LightingControlClient
from .ddp import PixelStreamClient
from .protocols import DeviceTransport
from .rest import RestControlClient

TransportFactory = Callable[[PanelDescriptor, int, AppConfig, logging.Logger], DeviceTransport]

# Registry of transport factories
TRANSPORTS: dict[TransportKind, TransportFactory] = {}


def register_transport(kind: TransportKind, factory: TransportFactory) -> None:
    """
    Register a transport factory.

    Args:
        kind: Transport kind (matches AppConfig.transport)
        factory: Callable building a DeviceTransport for one panel
    """
    TRANSPORTS[kind] = factory


def get_transport_factory(kind: TransportKind) -> Optional[TransportFactory]:
    """Get the factory registered for a transport kind, or None."""
    return TRANSPORTS.get(kind)


def create_transport(
    kind: TransportKind,
    panel: PanelDescriptor,
    index: int,
    config: AppConfig,
    logger: Optional[logging.Logger] = None,
) -> DeviceTransport:
    """
    Build the transport for one panel.

    Raises:
        ValueError: If no factory is registered for kind
    """
    factory = get_transport_factory(kind)
    if factory is None:
        raise ValueError(f"No transport registered for '{kind.value}'")
    return factory(panel, index, config, logger or logging.getLogger(__name__))


def _ddp(panel: PanelDescriptor, index: int, config: AppConfig, logger: logging.Logger):
    return PixelStreamClient(
        panel.device_address,
        port=config.ddp_port,
        name=panel.id,
        led_count=panel.led_count,
        logger=logger,
    )


def _artnet(panel: PanelDescriptor, index: int, config: AppConfig, logger: logging.Logger):
    return LightingControlClient(
        panel.device_address,
        led_count=panel.led_count,
        universe=index,
        channel_order=panel.channel_order,
        port=config.artnet_port,
        min_interval=config.artnet_min_interval,
        logger=logger,
    )


def _rest(panel: PanelDescriptor, index: int, config: AppConfig, logger: logging.Logger):
    return RestControlClient(
        panel.device_address,
        led_count=panel.led_count,
        payload_format=config.rest_payload_format,
        min_interval=config.rest_min_interval,
        timeout=config.rest_timeout,
        logger=logger,
    )


def _register_builtin_transports() -> None:
    """Register built-in transports. Called on module import."""
    register_transport(TransportKind.DDP, _ddp)
    register_transport(TransportKind.ARTNET, _artnet)
    register_transport(TransportKind.REST, _rest)


_register_builtin_transports()
