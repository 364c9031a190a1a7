"""
CLI command modules.
"""

from prizepool_cli.commands import simulate, tree

__all__ = ["simulate", "tree"]
