"""
CLI Show Command

Draw the tree built from an items file.

Usage:
    ordmerkle show items.txt [--digest-chars 8]
"""

from __future__ import annotations

from argparse import Namespace

from ordmerkle_cli.items import build_tree


# Exit codes
EXIT_SUCCESS = 0


def show_cmd(args: Namespace) -> int:
    """Execute the show command."""
    tree = build_tree(args.items, args.item_format, args.hash_algorithm)
    print(tree.render(digest_chars=args.digest_chars))
    return EXIT_SUCCESS
