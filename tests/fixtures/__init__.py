"""
Test fixtures package.

Factory functions for schemes, trees, proofs and tampered proofs.

Usage:
    from fixtures import make_tree, tamper_sibling_digest

    def test_something():
        tree = make_tree([5, 3, 7, 1])
        bad = tamper_sibling_digest(tree.prove(0), level=1)
"""

from .common import (
    flip_bit,
    make_leaves,
    make_scheme,
    make_tree,
    replace_step,
    tamper_sibling_amount,
    tamper_sibling_digest,
)

__all__ = [
    "flip_bit",
    "make_leaves",
    "make_scheme",
    "make_tree",
    "replace_step",
    "tamper_sibling_amount",
    "tamper_sibling_digest",
]
