"""
Finance aggregation source -- the revenue/expense collaborator.

The ledger does not own orders, deposits or expenses.  It asks a source for
the period totals and takes the answer as given.
"""

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal

from settlement_kernel.domain.dtos import PeriodTotals
from settlement_kernel.domain.money import to_decimal


class FinanceAggregationSource(ABC):
    """
    Supplies revenue and expense totals for a business and period.

    Contract:
        Implementations raise DependencyError subclasses for failures they
        understand; anything else is wrapped by ProfitCalculationEngine.
    """

    @abstractmethod
    def get_revenue_and_expenses(
        self,
        business_id: str,
        period_start: date,
        period_end: date,
    ) -> PeriodTotals:
        ...


class FixedTotalsSource(FinanceAggregationSource):
    """Returns configured totals regardless of period.  For tests and demos."""

    def __init__(
        self,
        total_revenue: Decimal | int | str = 0,
        total_expenses: Decimal | int | str = 0,
    ):
        self.set_totals(total_revenue, total_expenses)
        self.calls: list[tuple[str, date, date]] = []

    def set_totals(
        self,
        total_revenue: Decimal | int | str,
        total_expenses: Decimal | int | str,
    ) -> None:
        self._totals = PeriodTotals(
            total_revenue=to_decimal(total_revenue),
            total_expenses=to_decimal(total_expenses),
        )

    def get_revenue_and_expenses(
        self,
        business_id: str,
        period_start: date,
        period_end: date,
    ) -> PeriodTotals:
        self.calls.append((business_id, period_start, period_end))
        return self._totals
