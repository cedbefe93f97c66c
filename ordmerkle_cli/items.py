"""
Item file loading for the CLI.

Formats:
    lines  One item per line, as a UTF-8 string (trailing newline stripped)
    jsonl  One JSON value per line; blank lines are skipped
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from ordmerkle import MerkleTree

logger = logging.getLogger(__name__)


class ItemFileError(Exception):
    """Raised when an item file cannot be read or parsed."""


def parse_item(raw: str, item_format: str) -> Any:
    """Parse a single item given on the command line."""
    if item_format == "jsonl":
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise ItemFileError(f"Item is not valid JSON: {e}") from e
    return raw


def load_items(path: str | Path, item_format: str = "lines") -> list[Any]:
    """Read items from a file in the given format."""
    path = Path(path)
    if not path.exists():
        raise ItemFileError(f"Items file not found: {path}")

    text = path.read_text(encoding="utf-8")
    items: list[Any] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        if item_format == "jsonl":
            if not line.strip():
                continue
            try:
                items.append(json.loads(line))
            except json.JSONDecodeError as e:
                raise ItemFileError(f"{path}:{lineno}: invalid JSON: {e}") from e
        else:
            items.append(line)

    logger.info(f"Loaded {len(items)} items from {path}")
    return items


def build_tree(path: str | Path, item_format: str, hash_algorithm: str) -> MerkleTree:
    """Load items and bulk insert them into a new tree."""
    tree = MerkleTree(hash_algorithm)
    tree.bulk_insert(load_items(path, item_format))
    return tree
