"""
Core hashing utilities.
"""
from .hashing import (
    sha256,
    hash_canonical,
    to_hex,
)

__all__ = [
    "sha256",
    "hash_canonical",
    "to_hex",
]
