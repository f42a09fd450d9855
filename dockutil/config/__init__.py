"""Command-line argument parsing."""
from dockutil.config.run_parser import FlagMode, FlagSpec, ParseResult, parse_args, parse_run_args

__all__ = ['FlagMode', 'FlagSpec', 'ParseResult', 'parse_args', 'parse_run_args']
