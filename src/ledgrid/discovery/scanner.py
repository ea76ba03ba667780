"""
Parallel discovery of LED controllers on the local /24 subnet.

Every host ``<subnet>.1`` to ``<subnet>.254`` is probed with
``GET /json/info`` on a thread pool. Hosts answering 200 with a JSON body
are reported as DiscoveredDevice records. The whole scan is bounded by a
time budget; probes still running when it expires are abandoned and
their hosts are simply missing from the result.
"""

import concurrent.futures
import ipaddress
import logging
import socket
import threading
from typing import Optional

import psutil
import requests

from ledgrid.exceptions import SubnetDetectionError
from ledgrid.models import AppConfig, DiscoveredDevice

from .power import fetch_power_state

INFO_PATH = "/json/info"

# Interface name prefixes for bridges, containers and VPN tunnels
VIRTUAL_INTERFACE_PREFIXES = (
    "lo",
    "docker",
    "veth",
    "virbr",
    "br-",
    "vmnet",
    "vboxnet",
    "tun",
    "tap",
    "utun",
    "zt",
    "tailscale",
    "wg",
)


def detect_local_subnet() -> str:
    """
    Find the first three octets of the local IPv4 network.

    Uses the first interface that is up, not loopback, not virtual and
    has an IPv4 address.

    Returns:
        Subnet prefix such as "192.168.1"

    Raises:
        SubnetDetectionError: If no interface qualifies
    """
    try:
        addresses = psutil.net_if_addrs()
        stats = psutil.net_if_stats()
    except OSError as e:
        raise SubnetDetectionError(f"Could not read network interfaces: {e}") from e

    for name, addrs in addresses.items():
        stat = stats.get(name)
        if stat is None or not stat.isup:
            continue
        if name.lower().startswith(VIRTUAL_INTERFACE_PREFIXES):
            continue
        for addr in addrs:
            if addr.family != socket.AF_INET:
                continue
            ip = ipaddress.IPv4Address(addr.address)
            if ip.is_loopback or ip.is_link_local:
                continue
            return ".".join(addr.address.split(".")[:3])

    raise SubnetDetectionError("No active non-loopback IPv4 interface found")


def validate_subnet(subnet: str) -> str:
    """
    Check a subnet prefix of the form "A.B.C".

    Raises:
        SubnetDetectionError: If the prefix is malformed
    """
    parts = subnet.strip().rstrip(".").split(".")
    if len(parts) != 3 or not all(p.isdigit() and 0 <= int(p) <= 255 for p in parts):
        raise SubnetDetectionError(f"'{subnet}' is not a subnet prefix like 192.168.1")
    return ".".join(str(int(p)) for p in parts)


class DeviceDiscovery:
    """Scans a /24 subnet for devices exposing the JSON info endpoint."""

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Args:
            config: Worker count, timeouts and time budget (defaults to AppConfig())
            session: HTTP session used for probes (one is created if omitted)
            logger: Logger to use (defaults to this module's logger)
        """
        config = config or AppConfig()
        self.workers = config.discovery_workers
        self.timeout = (config.discovery_connect_timeout, config.discovery_read_timeout)
        self.budget = config.discovery_budget
        self._session = session or requests.Session()
        self._owns_session = session is None
        self._log = logger or logging.getLogger(__name__)

    def probe(self, address: str) -> Optional[DiscoveredDevice]:
        """
        Ask one host for its info document.

        Returns:
            DiscoveredDevice, or None if the host did not answer 200 with JSON
        """
        try:
            response = self._session.get(f"http://{address}{INFO_PATH}", timeout=self.timeout)
        except requests.RequestException:
            return None

        if response.status_code != 200:
            return None

        try:
            info = response.json()
        except ValueError:
            self._log.debug(f"Ignoring {address}: info response is not JSON")
            return None
        if not isinstance(info, dict):
            return None

        return DiscoveredDevice.from_info(address, info)

    def scan(
        self, subnet: Optional[str] = None, check_power: bool = False
    ) -> list[DiscoveredDevice]:
        """
        Probe every host of a /24 subnet.

        Args:
            subnet: Prefix such as "192.168.1"; detected from the local
                interfaces when omitted
            check_power: Also read each device's power flag from /json/state

        Returns:
            Devices found within the time budget, sorted by last octet.
            Empty if no subnet could be determined.
        """
        if subnet is None:
            try:
                subnet = detect_local_subnet()
            except SubnetDetectionError as e:
                self._log.error(f"Could not determine local subnet: {e.detail}")
                return []
        else:
            subnet = validate_subnet(subnet)

        self._log.info(f"Scanning {subnet}.1-254 for devices")

        found: list[DiscoveredDevice] = []
        lock = threading.Lock()

        def probe_host(host: int) -> None:
            device = self.probe(f"{subnet}.{host}")
            if device is not None:
                if check_power:
                    device.is_powered_on = fetch_power_state(self._session, device.address)
                with lock:
                    found.append(device)
                self._log.info(f"Found device: {device}")

        executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=self.workers, thread_name_prefix="ledgrid-discovery"
        )
        try:
            futures = [executor.submit(probe_host, host) for host in range(1, 255)]
            done, pending = concurrent.futures.wait(futures, timeout=self.budget)
            if pending:
                self._log.warning(
                    f"Discovery budget of {self.budget}s exceeded; "
                    f"{len(pending)} probe(s) abandoned"
                )
            for future in done:
                error = future.exception()
                if error is not None:
                    self._log.debug(f"Probe failed: {error}")
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
            if self._owns_session:
                self._session.close()

        with lock:
            devices = sorted(found, key=lambda d: _last_octet(d.address))

        self._log.info(f"Discovery finished: {len(devices)} device(s) on {subnet}.x")
        return devices


def _last_octet(address: str) -> int:
    try:
        return int(address.rsplit(".", 1)[-1])
    except ValueError:
        return 0
