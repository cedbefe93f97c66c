"""
CLI Root Command

Compute the root digest of an items file.

Usage:
    ordmerkle root items.txt [--json]
"""

from __future__ import annotations

import json
import logging
from argparse import Namespace

from ordmerkle.crypto.hashing import to_hex
from ordmerkle_cli.items import build_tree

logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0


def root_cmd(args: Namespace) -> int:
    """
    Execute the root command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    tree = build_tree(args.items, args.item_format, args.hash_algorithm)
    root = tree.root_digest()

    summary = {
        "hash_algorithm": tree.adapter.name,
        "leaf_count": len(tree),
        "height": tree.height,
        "root": to_hex(root),
    }

    if args.json:
        print(json.dumps(summary, indent=2))
    else:
        print(f"root:      {summary['root']}")
        print(f"leaves:    {summary['leaf_count']}")
        print(f"height:    {summary['height']}")
        print(f"algorithm: {summary['hash_algorithm']}")

    logger.info(f"Root over {len(tree)} leaves computed")
    return EXIT_SUCCESS
