"""Entry point for `python -m kubeguide`.

Usage:
    python -m kubeguide kinds
    python -m kubeguide get v1/pods my-pod -n default
"""

from __future__ import annotations

from kubeguide.cli import cli

cli()
