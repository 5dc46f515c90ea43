"""
CLI command modules.
"""

from pitchpool_cli.commands import consensus, lock_time, preview, serve, simulate

__all__ = ["consensus", "lock_time", "preview", "serve", "simulate"]
