"""
Sumtree CLI - build Merkle sum tree commitments and check allotment proofs.
"""

__version__ = "0.1.0"
