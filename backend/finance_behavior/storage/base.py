"""Storage ports the services depend on."""
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import List, Optional

from finance_behavior.errors import InvalidInputError
from finance_behavior.models.feedback import FeedbackCreate, FeedbackRecord
from finance_behavior.models.queries import CategoryLookup, DateRangeQuery
from finance_behavior.models.transaction import (
    Category,
    CategoryCreate,
    Transaction,
    TransactionCreate,
    TransactionType,
)


class TransactionStore(ABC):
    """Transactions and the categories they are filed under."""

    @abstractmethod
    def add_category(self, category: CategoryCreate) -> Category:
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        pass

    @abstractmethod
    def find_category(self, lookup: CategoryLookup) -> Optional[Category]:
        """
        Find a category by name and type.

        A user's own category wins over a shared default with the same name.
        """
        pass

    @abstractmethod
    def add_transactions(self, transactions: List[TransactionCreate]) -> List[Transaction]:
        """
        Add transactions, all or nothing.

        Raises:
            InvalidInputError: If a category is unknown, belongs to another user
                or classifies the other transaction type
        """
        pass

    @abstractmethod
    def get_transactions(
        self,
        query: DateRangeQuery,
        type: Optional[TransactionType] = None,
    ) -> List[Transaction]:
        """Transactions dated within the query range, oldest first."""
        pass

    @abstractmethod
    def get_user_transactions(
        self,
        user_id: int,
        type: Optional[TransactionType] = None,
    ) -> List[Transaction]:
        pass

    @abstractmethod
    def get_last_update_timestamp(self, query: DateRangeQuery) -> Optional[datetime]:
        """Latest ``updated_at`` among the user's transactions dated within the range."""
        pass


class FeedbackHistoryStore(ABC):
    """Feedback generated per user and week, plus when each week was last evaluated."""

    @abstractmethod
    def get_by_user_and_date(self, user_id: int, week_start: date) -> List[FeedbackRecord]:
        """All feedback for the exact week-start key, in insertion order."""
        pass

    @abstractmethod
    def get_last_evaluated_at(self, user_id: int, week_start: date) -> Optional[datetime]:
        pass

    @abstractmethod
    def store_evaluation(
        self,
        user_id: int,
        week_start: date,
        records: List[FeedbackCreate],
        evaluated_at: datetime,
    ) -> List[FeedbackRecord]:
        """
        Replace the week's feedback with ``records`` and stamp the evaluation time.

        Records are upserted on (user_id, rule_id, week_start); rules absent from
        ``records`` lose their entry for the week. Runs as one unit.

        Returns:
            The week's stored feedback after the write, in insertion order
        """
        pass

    @abstractmethod
    def get_recent(self, user_id: int, limit: int = 50) -> List[FeedbackRecord]:
        """Latest feedback across all weeks, newest first."""
        pass


def check_transaction_category(tx: TransactionCreate, category: Optional[Category]) -> None:
    """Validate the category a new transaction points at."""
    if tx.category_id is None:
        return
    if category is None:
        raise InvalidInputError(f"Unknown category {tx.category_id}")
    if category.user_id is not None and category.user_id != tx.user_id:
        raise InvalidInputError(f"Category {category.id} does not belong to user {tx.user_id}")
    if category.type != tx.type:
        raise InvalidInputError(
            f"Category '{category.name}' is for {category.type.value} transactions, "
            f"not {tx.type.value}"
        )
