"""CLI module for dilemma.

This module provides the ``dilemma`` command-line interface.
"""

from dilemma.cli.main import cli

__all__ = ["cli"]
