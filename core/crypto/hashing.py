"""
Hashing Utilities

SHA-256 over raw bytes and over canonical JSON, with 0x-prefixed hex
encoding. Used to derive deterministic transaction receipt hashes.
"""
from __future__ import annotations

import hashlib
from typing import Any

from core.schemas.canonical import dumps_canonical


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash of raw bytes.

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(data).digest()


def hash_canonical(obj: Any) -> bytes:
    """
    Hash an object by its canonical JSON form.

    Rule: sha256(dumps_canonical(obj).encode("utf-8"))
    """
    return sha256(dumps_canonical(obj).encode("utf-8"))


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()
