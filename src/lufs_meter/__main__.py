"""``python -m lufs_meter`` runs the same Typer app as the ``lufs-meter`` script."""

from __future__ import annotations

import sys

from lufs_meter import cli


def run() -> int:
    cli.main()
    return 0


if __name__ == "__main__":
    sys.exit(run())
