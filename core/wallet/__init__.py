"""
Wallet Module

Wallet collaborator protocol and the in-memory simulated wallet.
"""

from .base import Wallet, WalletError
from .simulated import FailureStrategy, NeverFail, SeededFailure, SimulatedWallet

__all__ = [
    "Wallet",
    "WalletError",
    "FailureStrategy",
    "NeverFail",
    "SeededFailure",
    "SimulatedWallet",
]
