"""
Wallet Collaborator

The engine never moves funds itself. It asks a wallet for a staker's
available balance and hands it a settlement to execute; the wallet returns
an opaque receipt or raises WalletError.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol

from core.receipts.models import TransactionReceipt


class WalletError(Exception):
    """Settlement failed inside the wallet (funds, network, timeout)."""

    def __init__(
        self,
        message: str,
        owner: Optional[str] = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.owner = owner
        self.retryable = retryable


class Wallet(Protocol):
    """
    Protocol for the wallet/settlement layer.

    Implementations must treat settle() as atomic: either the receipt is
    returned and funds moved, or WalletError is raised and nothing moved.
    """

    def balance_of(self, owner: str) -> Decimal:
        """Available balance for an account."""
        ...

    def settle(self, source: str, amount: Decimal, memo: str) -> TransactionReceipt:
        """Transfer amount from source into the pool contract."""
        ...
