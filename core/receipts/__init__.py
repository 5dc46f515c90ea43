"""
Core Receipts Module

Settlement receipts produced by the wallet collaborator.
"""

from .models import TransactionReceipt

__all__ = [
    "TransactionReceipt",
]
