"""Allow running ledgrid as ``python -m ledgrid``."""

from ledgrid.cli.main import cli

if __name__ == "__main__":
    cli()
