"""Shared fixtures: in-memory stores, categories and a transaction helper."""
from datetime import date, datetime, timezone

import pytest

from finance_behavior.config import Settings
from finance_behavior.models.transaction import CategoryCreate, TransactionCreate, TransactionType
from finance_behavior.storage.memory import InMemoryFeedbackHistoryStore, InMemoryTransactionStore

USER_ID = 1
OTHER_USER_ID = 2

# Fixed times so freshness checks do not depend on the wall clock.
BEFORE_EVALUATION = datetime(2024, 6, 12, 8, 0, tzinfo=timezone.utc)
EVALUATION_TIME = datetime(2024, 6, 12, 12, 0, tzinfo=timezone.utc)
AFTER_EVALUATION = datetime(2024, 6, 12, 13, 0, tzinfo=timezone.utc)


@pytest.fixture
def settings():
    """Settings isolated from any local .env file."""
    return Settings(storage_backend="memory", _env_file=None)


@pytest.fixture
def transaction_store():
    return InMemoryTransactionStore()


@pytest.fixture
def feedback_store():
    return InMemoryFeedbackHistoryStore()


@pytest.fixture
def categories(transaction_store):
    """Shared default categories keyed by name."""
    created = {}
    for name, tx_type in [
        ("Coffee", TransactionType.EXPENSE),
        ("Rent", TransactionType.EXPENSE),
        ("Groceries", TransactionType.EXPENSE),
        ("Salary", TransactionType.INCOME),
    ]:
        created[name] = transaction_store.add_category(
            CategoryCreate(name=name, type=tx_type, is_default=True)
        )
    return created


@pytest.fixture
def add_transaction(transaction_store, categories):
    """Add one transaction; category is given by name."""

    def _add(
        amount,
        day,
        category=None,
        type=TransactionType.EXPENSE,
        user_id=USER_ID,
        updated_at=BEFORE_EVALUATION,
        description="",
    ):
        return transaction_store.add_transactions([
            TransactionCreate(
                user_id=user_id,
                category_id=categories[category].id if category else None,
                type=type,
                amount=amount,
                date=day,
                description=description,
                updated_at=updated_at,
            )
        ])[0]

    return _add


@pytest.fixture
def wednesday():
    return date(2024, 6, 12)
