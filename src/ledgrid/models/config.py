"""Application configuration model."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_serializer

from ledgrid.utils.persistence import PydanticPersistence

from .enums import RestPayloadFormat, TransportKind

DEFAULT_CONFIG_DIR = Path.home() / ".ledgrid"


class AppConfig(BaseModel):
    """Application configuration and settings."""

    # Paths
    layouts_dir: Path = Field(
        default_factory=lambda: DEFAULT_CONFIG_DIR / "layouts",
        description="Directory searched for layout files given by name",
    )

    # Transport selection
    transport: TransportKind = Field(
        default=TransportKind.DDP, description="Protocol used to reach every panel"
    )
    ddp_port: int = Field(default=4048, ge=1, le=65535, description="DDP UDP port")
    artnet_port: int = Field(default=5568, ge=1, le=65535, description="Art-Net UDP port")

    # Frame-rate gating (seconds between sends)
    artnet_min_interval: float = Field(
        default=0.008, ge=0, description="Minimum time between Art-Net frames (~120 FPS)"
    )
    rest_min_interval: float = Field(
        default=0.016, ge=0, description="Minimum time between REST frames (~60 FPS)"
    )

    # REST transport
    rest_payload_format: RestPayloadFormat = Field(
        default=RestPayloadFormat.HEX, description="Per-LED color encoding for REST frames"
    )
    rest_timeout: float = Field(default=0.5, gt=0, description="HTTP timeout for REST frames")

    # Panel wiring
    flip_panel_id: Optional[str] = Field(
        default="Grid01",
        description=(
            "Id of a panel wired mirrored left-to-right (matched case-insensitively). "
            "None disables the correction."
        ),
    )

    # Discovery
    discovery_workers: int = Field(default=64, ge=1, description="Concurrent discovery probes")
    discovery_connect_timeout: float = Field(default=0.4, gt=0, description="Probe connect timeout")
    discovery_read_timeout: float = Field(default=0.8, gt=0, description="Probe read timeout")
    discovery_budget: float = Field(default=25.0, gt=0, description="Overall scan time limit")

    # Power state polling
    power_poll_interval: float = Field(
        default=10.0, gt=0, description="How often to refresh device power states (seconds)"
    )

    @field_serializer("layouts_dir")
    def serialize_path(self, path: Path) -> str:
        """Serialize Path to string."""
        return str(path)

    @staticmethod
    def default_path() -> Path:
        return DEFAULT_CONFIG_DIR / "config.json"

    @classmethod
    def load_or_default(cls, path: Path | None = None) -> "AppConfig":
        """
        Load config from file or return default.

        Args:
            path: Path to config file. If None, uses ~/.ledgrid/config.json.

        Raises:
            ConfigFileInvalidError: If config file has invalid JSON syntax
            ConfigValidationError: If config values fail validation
        """
        if path is None:
            path = cls.default_path()

        return PydanticPersistence.load_json_or_default(path, cls)

    def save(self, path: Path | None = None) -> None:
        """Save config to file."""
        if path is None:
            path = self.default_path()

        PydanticPersistence.save_json(self, path)
