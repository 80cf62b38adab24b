"""Aggregate models derived from stored transactions."""
from typing import Dict

from pydantic import BaseModel, Field


class WeeklySummary(BaseModel):
    """Expense aggregates for one user over a date range. Never persisted."""

    total_expenses: float = 0.0
    transaction_count: int = 0
    small_transaction_count: int = 0
    small_transaction_total: float = 0.0
    category_totals: Dict[str, float] = Field(
        default_factory=dict, description="Category name to summed amount (categorised rows only)"
    )


class OverallSummary(BaseModel):
    """Lifetime totals plus month-over-month trends, in percent."""

    total_income: float = 0.0
    total_expenses: float = 0.0
    net_balance: float = 0.0
    transaction_count: int = 0
    income_this_month: float = 0.0
    expenses_this_month: float = 0.0
    net_balance_this_month: float = 0.0
    income_trend: float = 0.0
    expense_trend: float = 0.0
    net_balance_trend: float = 0.0
