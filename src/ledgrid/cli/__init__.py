"""Command-line interface for ledgrid."""

from .main import cli, setup_logging

__all__ = ["cli", "setup_logging"]
