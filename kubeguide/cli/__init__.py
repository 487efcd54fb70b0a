"""kubeguide command-line interface.

Exposes:
    cli -- Click group entry point (registered as ``kubeguide`` script).
"""

from kubeguide.cli.main import cli

__all__ = ["cli"]
