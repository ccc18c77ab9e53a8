"""
CLI module for initforge.

Provides the command-line interface using Click.
"""

from initforge.cli.main import cli, main

__all__ = ["main", "cli"]
