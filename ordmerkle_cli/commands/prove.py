"""
CLI Prove Command

Generate an inclusion proof document for one item of an items file.

Usage:
    ordmerkle prove items.txt --index 3 [--out proof.json]
    ordmerkle prove items.txt --item "gamma"
"""

from __future__ import annotations

import logging
from argparse import Namespace
from pathlib import Path

from ordmerkle.schemas.proof import ProofDocument
from ordmerkle_cli.items import build_tree, parse_item

logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0


def prove_cmd(args: Namespace) -> int:
    """
    Execute the prove command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    tree = build_tree(args.items, args.item_format, args.hash_algorithm)

    if args.index is not None:
        proof = tree.proof_for_index(args.index)
    else:
        proof = tree.proof_for_item(parse_item(args.item, args.item_format))

    document = ProofDocument.from_proof(proof, tree.root_digest(), tree.adapter.name)
    text = document.to_json()

    if args.out:
        Path(args.out).write_text(text + "\n", encoding="utf-8")
        logger.info(f"Proof for leaf {proof.leaf_index} written to {args.out}")
    else:
        print(text)

    return EXIT_SUCCESS
