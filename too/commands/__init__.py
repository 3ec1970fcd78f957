"""Command table, option records and the dispatcher that executes them."""

from .dispatcher import Dispatcher
from .registry import CommandDef, CommandTable, build_command_table

__all__ = ["CommandDef", "CommandTable", "Dispatcher", "build_command_table"]
