"""Wallet snapshot aggregation and mutating commands."""

from bsvwallet.services.wallet.actions import ActionDispatcher
from bsvwallet.services.wallet.aggregator import WalletDataAggregator

__all__ = ["ActionDispatcher", "WalletDataAggregator"]
