"""Command-line interface for mdcite.

Built with Click and Rich.
"""

from mdcite.cli.main import cli, main

__all__ = ["cli", "main"]
