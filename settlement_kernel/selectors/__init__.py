"""Read-only query selectors."""

from settlement_kernel.selectors.balance_aggregator import BalanceAggregator
from settlement_kernel.selectors.base import BaseSelector
from settlement_kernel.selectors.ledger_selector import LedgerSelector

__all__ = ["BalanceAggregator", "BaseSelector", "LedgerSelector"]
