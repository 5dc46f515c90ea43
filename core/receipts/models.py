"""
Receipt Models

Settlement receipts returned by the wallet collaborator. The engine treats
them as opaque: it stores them on the stake and hands them back to callers,
but never inspects them to make decisions.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TransactionReceipt(BaseModel):
    """
    Proof that the wallet settled a transfer.

    ``tx_hash`` is derived from the canonical request, so a replayed
    request with the same nonce yields the same hash.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    tx_hash: str = Field(
        ...,
        description="Transaction hash (0x-prefixed)",
        min_length=3,
    )
    ledger: int = Field(
        ...,
        description="Ledger sequence the transaction landed in",
        ge=0,
    )
    fee: str = Field(
        ...,
        description="Network fee, human readable",
    )
    source: str = Field(
        ...,
        description="Paying account",
    )
    destination: str = Field(
        ...,
        description="Receiving account (the pool contract)",
    )
    amount: Decimal = Field(
        ...,
        description="Amount transferred",
        ge=0,
    )
    memo: str = Field(
        default="",
        description="Free-text memo attached to the transfer",
    )
    timestamp: datetime = Field(
        ...,
        description="When the settlement completed",
    )
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Wallet-specific extras",
    )
