"""kubegraph command-line interface.

Exposes:
    cli -- Click group entry point (registered as ``kubegraph`` script).
"""

from kubegraph.cli.main import cli

__all__ = ["cli"]
