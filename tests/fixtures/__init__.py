"""
Test fixtures package.

Organized into:
- hashers.py: hasher factories with predictable behavior
- trees.py: tree and item factories

Usage:
    from fixtures import make_tree, TaggingHasher

    def test_something():
        tree = make_tree(range(5), hasher=TaggingHasher)
"""

from .hashers import (
    TaggingHasher,
    ZeroWidthHasher,
    BrokenHasher,
    tag,
)
from .trees import (
    make_tree,
    make_items,
)

__all__ = [
    # Hashers
    "TaggingHasher",
    "ZeroWidthHasher",
    "BrokenHasher",
    "tag",
    # Trees
    "make_tree",
    "make_items",
]
