"""CLI module for truenas-updater.

This module provides the command-line interface components including
argument parsing and run orchestration.
"""

from .parser import CLIParser
from .runner import CLIRunner

__all__ = ["CLIParser", "CLIRunner"]
