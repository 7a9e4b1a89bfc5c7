"""
CLI command modules.
"""

from sumtree_cli.commands import build, config_cmd, prove, verify

__all__ = ["build", "config_cmd", "prove", "verify"]
