"""Weekly and lifetime aggregates over stored transactions."""
from datetime import date
from typing import Dict, List, Optional

from finance_behavior.models.queries import DateRangeQuery
from finance_behavior.models.summary import OverallSummary, WeeklySummary
from finance_behavior.models.transaction import Transaction, TransactionType
from finance_behavior.storage.base import TransactionStore
from finance_behavior.utils.dates import month_start, previous_month_bounds

# Sums are rounded to cents so they do not depend on addition order.
MONEY_PLACES = 2


def _money(value: float) -> float:
    return round(value, MONEY_PLACES)


def calculate_trend(current: float, previous: float) -> float:
    """Percentage change from ``previous`` to ``current``."""
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return (current - previous) / previous * 100


class TransactionAggregator:
    """Computes read-only aggregates; never writes to the store."""

    def __init__(self, transaction_store: TransactionStore, small_transaction_threshold: float = 10.0):
        self.transaction_store = transaction_store
        self.small_transaction_threshold = small_transaction_threshold

    def get_weekly_summary(self, query: DateRangeQuery) -> WeeklySummary:
        """
        Aggregate the user's expenses dated within the query range.

        Args:
            query: User and inclusive calendar-day range

        Returns:
            WeeklySummary; all zeros when nothing matches
        """
        expenses = self.transaction_store.get_transactions(query, type=TransactionType.EXPENSE)
        return self.summarize_expenses(expenses)

    def summarize_expenses(self, expenses: List[Transaction]) -> WeeklySummary:
        if not expenses:
            return WeeklySummary()

        small = [tx for tx in expenses if tx.amount < self.small_transaction_threshold]

        category_totals: Dict[str, float] = {}
        for tx in expenses:
            # Uncategorised rows only count toward the overall total.
            if tx.category_name is None:
                continue
            category_totals[tx.category_name] = category_totals.get(tx.category_name, 0.0) + tx.amount

        return WeeklySummary(
            total_expenses=_money(sum(tx.amount for tx in expenses)),
            transaction_count=len(expenses),
            small_transaction_count=len(small),
            small_transaction_total=_money(sum(tx.amount for tx in small)),
            category_totals={name: _money(total) for name, total in sorted(category_totals.items())},
        )

    def get_overall_summary(self, user_id: int, today: date) -> OverallSummary:
        """Lifetime income/expense totals and this month against last month."""
        transactions = self.transaction_store.get_user_transactions(user_id)
        if not transactions:
            return OverallSummary()

        this_month_start = month_start(today)
        last_month_start, last_month_end = previous_month_bounds(today)

        def total(tx_type: TransactionType, start: Optional[date] = None, end: Optional[date] = None) -> float:
            return _money(sum(
                tx.amount for tx in transactions
                if tx.type == tx_type
                and (start is None or tx.date >= start)
                and (end is None or tx.date <= end)
            ))

        income = total(TransactionType.INCOME)
        expenses = total(TransactionType.EXPENSE)
        income_this_month = total(TransactionType.INCOME, this_month_start)
        income_last_month = total(TransactionType.INCOME, last_month_start, last_month_end)
        expenses_this_month = total(TransactionType.EXPENSE, this_month_start)
        expenses_last_month = total(TransactionType.EXPENSE, last_month_start, last_month_end)

        net_this_month = _money(income_this_month - expenses_this_month)
        net_last_month = _money(income_last_month - expenses_last_month)

        return OverallSummary(
            total_income=income,
            total_expenses=expenses,
            net_balance=_money(income - expenses),
            transaction_count=len(transactions),
            income_this_month=income_this_month,
            expenses_this_month=expenses_this_month,
            net_balance_this_month=net_this_month,
            income_trend=calculate_trend(income_this_month, income_last_month),
            expense_trend=calculate_trend(expenses_this_month, expenses_last_month),
            net_balance_trend=calculate_trend(net_this_month, net_last_month),
        )
