"""Tests for weekly and overall transaction aggregates."""
from datetime import date

import pytest

from finance_behavior.models.queries import DateRangeQuery
from finance_behavior.models.summary import WeeklySummary
from finance_behavior.models.transaction import CategoryCreate, TransactionCreate, TransactionType
from finance_behavior.services.aggregation import TransactionAggregator, calculate_trend
from finance_behavior.storage.memory import InMemoryTransactionStore

WEEK = DateRangeQuery.of(1, date(2024, 6, 10), date(2024, 6, 16))


@pytest.fixture
def aggregator(transaction_store):
    return TransactionAggregator(transaction_store, small_transaction_threshold=10.0)


def test_single_coffee_expense(aggregator, add_transaction):
    """One 7.50 Coffee expense on a Wednesday."""
    add_transaction(7.50, date(2024, 6, 12), "Coffee")

    summary = aggregator.get_weekly_summary(WEEK)

    assert summary.total_expenses == 7.50
    assert summary.transaction_count == 1
    assert summary.small_transaction_count == 1
    assert summary.small_transaction_total == 7.50
    assert summary.category_totals == {"Coffee": 7.50}


def test_rent_added_to_same_week(aggregator, add_transaction):
    """A 50.00 Rent expense adds to totals but is not small."""
    add_transaction(7.50, date(2024, 6, 12), "Coffee")
    add_transaction(50.00, date(2024, 6, 12), "Rent")

    summary = aggregator.get_weekly_summary(WEEK)

    assert summary.total_expenses == 57.50
    assert summary.transaction_count == 2
    assert summary.small_transaction_count == 1
    assert summary.small_transaction_total == 7.50
    assert summary.category_totals == {"Coffee": 7.50, "Rent": 50.00}


def test_empty_week_is_all_zeros(aggregator):
    assert aggregator.get_weekly_summary(WEEK) == WeeklySummary()


def test_threshold_amount_is_not_small(aggregator, add_transaction):
    """Exactly 10.00 is excluded from the small-transaction figures."""
    add_transaction(10.00, date(2024, 6, 11), "Coffee")
    add_transaction(9.99, date(2024, 6, 11), "Coffee")

    summary = aggregator.get_weekly_summary(WEEK)

    assert summary.small_transaction_count == 1
    assert summary.small_transaction_total == 9.99


def test_uncategorised_counts_toward_total_only(aggregator, add_transaction):
    add_transaction(20.00, date(2024, 6, 13))
    add_transaction(5.00, date(2024, 6, 13), "Groceries")

    summary = aggregator.get_weekly_summary(WEEK)

    assert summary.total_expenses == 25.00
    assert summary.transaction_count == 2
    assert summary.category_totals == {"Groceries": 5.00}
    assert sum(summary.category_totals.values()) < summary.total_expenses


def test_category_totals_equal_total_when_all_categorised(aggregator, add_transaction):
    add_transaction(12.00, date(2024, 6, 10), "Groceries")
    add_transaction(3.00, date(2024, 6, 16), "Coffee")

    summary = aggregator.get_weekly_summary(WEEK)

    assert sum(summary.category_totals.values()) == summary.total_expenses


def test_only_expenses_in_range_for_user(aggregator, add_transaction):
    """Range ends are inclusive; income, other users and outside days are ignored."""
    add_transaction(1.00, date(2024, 6, 10), "Coffee")
    add_transaction(2.00, date(2024, 6, 16), "Coffee")
    add_transaction(100.00, date(2024, 6, 9), "Coffee")
    add_transaction(100.00, date(2024, 6, 17), "Coffee")
    add_transaction(100.00, date(2024, 6, 12), "Salary", type=TransactionType.INCOME)
    add_transaction(100.00, date(2024, 6, 12), "Coffee", user_id=2)

    summary = aggregator.get_weekly_summary(WEEK)

    assert summary.total_expenses == 3.00
    assert summary.transaction_count == 2


def test_categories_with_same_name_are_merged(transaction_store, categories, aggregator):
    """Totals are keyed by category name, so a user's own 'Coffee' joins the default one."""
    own = transaction_store.add_category(
        CategoryCreate(user_id=1, name="Coffee", type=TransactionType.EXPENSE)
    )
    transaction_store.add_transactions([
        TransactionCreate(user_id=1, category_id=own.id, type="expense", amount=4.0, date=date(2024, 6, 12)),
        TransactionCreate(
            user_id=1, category_id=categories["Coffee"].id, type="expense", amount=6.0, date=date(2024, 6, 12)
        ),
    ])

    assert aggregator.get_weekly_summary(WEEK).category_totals == {"Coffee": 10.0}


def test_total_does_not_depend_on_insertion_order():
    amounts = [0.1, 0.2, 0.3, 19.99, 0.7, 42.42]
    totals = []
    for ordering in (amounts, list(reversed(amounts))):
        store = InMemoryTransactionStore()
        store.add_transactions([
            TransactionCreate(user_id=1, type="expense", amount=amount, date=date(2024, 6, 12))
            for amount in ordering
        ])
        totals.append(TransactionAggregator(store).get_weekly_summary(WEEK))

    assert totals[0] == totals[1]
    assert totals[0].total_expenses == 63.71


def test_custom_small_threshold(transaction_store, add_transaction):
    add_transaction(15.00, date(2024, 6, 12), "Coffee")

    summary = TransactionAggregator(transaction_store, small_transaction_threshold=20.0).get_weekly_summary(WEEK)

    assert summary.small_transaction_count == 1


def test_overall_summary_with_trends(aggregator, add_transaction):
    add_transaction(1000.00, date(2024, 6, 1), "Salary", type=TransactionType.INCOME)
    add_transaction(200.00, date(2024, 6, 5), "Rent")
    add_transaction(500.00, date(2024, 5, 1), "Salary", type=TransactionType.INCOME)
    add_transaction(400.00, date(2024, 5, 10), "Rent")

    summary = aggregator.get_overall_summary(1, today=date(2024, 6, 20))

    assert summary.total_income == 1500.00
    assert summary.total_expenses == 600.00
    assert summary.net_balance == 900.00
    assert summary.transaction_count == 4
    assert summary.income_this_month == 1000.00
    assert summary.expenses_this_month == 200.00
    assert summary.net_balance_this_month == 800.00
    assert summary.income_trend == 100.0
    assert summary.expense_trend == -50.0
    assert summary.net_balance_trend == 700.0


def test_overall_summary_without_transactions(aggregator):
    summary = aggregator.get_overall_summary(1, today=date(2024, 6, 20))
    assert summary.transaction_count == 0
    assert summary.income_trend == 0.0


@pytest.mark.parametrize(
    "current, previous, expected",
    [(5.0, 0.0, 100.0), (0.0, 0.0, 0.0), (-5.0, 0.0, 0.0), (150.0, 100.0, 50.0), (50.0, 100.0, -50.0)],
)
def test_calculate_trend(current, previous, expected):
    assert calculate_trend(current, previous) == expected
