"""Utilities for the Marzneshin installer."""

from .files import FileManager
from .logging import setup_logging
from .process import CommandResult, command_exists, run_command

__all__ = ["FileManager", "setup_logging", "CommandResult", "command_exists", "run_command"]
