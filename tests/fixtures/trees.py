"""
Tree factories shared by tests.
"""

import hashlib
from typing import Any, Iterable

from ordmerkle import MerkleTree


def make_tree(items: Iterable[Any] = range(7), hasher=hashlib.sha256, bulk: bool = True) -> MerkleTree:
    """Build a tree over `items`, either in one bulk insert or one by one."""
    tree = MerkleTree(hasher)
    if bulk:
        tree.bulk_insert(items)
    else:
        for item in items:
            tree.insert(item)
    return tree


def make_items(count: int, prefix: str = "item") -> list[str]:
    return [f"{prefix}-{i}" for i in range(count)]
