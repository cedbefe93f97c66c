"""
CLI Verify Command

Verify a proof document offline.

Usage:
    ordmerkle verify proof.json [--root 0x...] [--json]

Without --root the document's own root field is used, which only shows the
proof is internally consistent. Pass a trusted root to check membership.
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from pathlib import Path

from ordmerkle.crypto.hashing import from_hex
from ordmerkle.schemas.proof import ProofDocument

logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def verify_cmd(args: Namespace) -> int:
    """
    Execute the verify command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    proof_path = Path(args.proof)
    if not proof_path.exists():
        print(f"Error: Proof not found: {proof_path}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    document = ProofDocument.from_json(proof_path.read_text(encoding="utf-8"))

    expected_root = None
    if args.root:
        try:
            expected_root = from_hex(args.root)
        except ValueError as e:
            print(f"Error: Invalid --root: {e}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR

    ok = document.verify(expected_root=expected_root)

    summary = {
        "proof": str(proof_path),
        "leaf_index": document.leaf_index,
        "leaf_count": document.leaf_count,
        "root": args.root or document.root,
        "trusted_root": expected_root is not None,
        "valid": ok,
    }

    if args.json:
        print(json.dumps(summary, indent=2))
    else:
        status = "✓ valid" if ok else "✗ INVALID"
        print(f"{status}: leaf {document.leaf_index} of {document.leaf_count}")
        print(f"root: {summary['root']}")
        if expected_root is None:
            print("note: checked against the document's own root (use --root for a trusted root)")

    if ok:
        logger.info("Verification passed")
        return EXIT_SUCCESS
    logger.warning("Verification failed")
    return EXIT_VERIFICATION_FAILED
