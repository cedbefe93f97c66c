"""
CLI command modules.
"""

from ordmerkle_cli.commands import root, prove, verify, show

__all__ = ["root", "prove", "verify", "show"]
