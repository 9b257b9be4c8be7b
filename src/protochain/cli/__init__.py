"""
CLI module for protochain.

Provides the command-line interface using Click.
"""

from protochain.cli.main import cli, main

__all__ = ["main", "cli"]
