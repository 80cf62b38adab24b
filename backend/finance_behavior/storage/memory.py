"""In-memory stores for tests and local runs without a database file."""
import itertools
import threading
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple

from finance_behavior.models.feedback import FeedbackCreate, FeedbackRecord
from finance_behavior.models.queries import CategoryLookup, DateRangeQuery
from finance_behavior.models.transaction import (
    Category,
    CategoryCreate,
    Transaction,
    TransactionCreate,
    TransactionType,
)
from finance_behavior.storage.base import (
    FeedbackHistoryStore,
    TransactionStore,
    check_transaction_category,
)
from finance_behavior.utils.dates import to_utc, utcnow


class InMemoryTransactionStore(TransactionStore):
    """Dict-backed transaction store with the same semantics as the SQLite one."""

    def __init__(self):
        self._lock = threading.Lock()
        self._categories: Dict[int, Category] = {}
        self._transactions: List[Transaction] = []
        self._category_ids = itertools.count(1)
        self._transaction_ids = itertools.count(1)

    def _resolve(self, tx: Transaction) -> Transaction:
        category = self._categories.get(tx.category_id) if tx.category_id is not None else None
        return tx.model_copy(update={"category_name": category.name if category else None})

    def add_category(self, category: CategoryCreate) -> Category:
        with self._lock:
            stored = Category(id=next(self._category_ids), **category.model_dump())
            self._categories[stored.id] = stored
            return stored

    def get_category(self, category_id: int) -> Optional[Category]:
        with self._lock:
            return self._categories.get(category_id)

    def find_category(self, lookup: CategoryLookup) -> Optional[Category]:
        with self._lock:
            candidates = [
                c for c in self._categories.values()
                if c.name == lookup.name
                and c.type == lookup.type
                and (c.user_id is None or (lookup.user_id is not None and c.user_id == lookup.user_id))
            ]
        candidates.sort(key=lambda c: (c.user_id is None, c.id))
        return candidates[0] if candidates else None

    def add_transactions(self, transactions: List[TransactionCreate]) -> List[Transaction]:
        with self._lock:
            for tx in transactions:
                category = self._categories.get(tx.category_id) if tx.category_id is not None else None
                check_transaction_category(tx, category)

            now = utcnow()
            added = []
            for tx in transactions:
                stored = Transaction(
                    id=next(self._transaction_ids),
                    user_id=tx.user_id,
                    category_id=tx.category_id,
                    type=tx.type,
                    amount=tx.amount,
                    date=tx.date,
                    description=tx.description,
                    created_at=now,
                    updated_at=to_utc(tx.updated_at or now),
                )
                self._transactions.append(stored)
                added.append(self._resolve(stored))
            return added

    def _select(
        self,
        user_id: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
        type: Optional[TransactionType] = None,
    ) -> List[Transaction]:
        with self._lock:
            rows = [
                self._resolve(tx) for tx in self._transactions
                if tx.user_id == user_id
                and (start is None or tx.date >= start)
                and (end is None or tx.date <= end)
                and (type is None or tx.type == type)
            ]
        rows.sort(key=lambda tx: (tx.date, tx.id))
        return rows

    def get_transactions(
        self,
        query: DateRangeQuery,
        type: Optional[TransactionType] = None,
    ) -> List[Transaction]:
        return self._select(query.user_id, query.start_date, query.end_date, type)

    def get_user_transactions(
        self,
        user_id: int,
        type: Optional[TransactionType] = None,
    ) -> List[Transaction]:
        return self._select(user_id, type=type)

    def get_last_update_timestamp(self, query: DateRangeQuery) -> Optional[datetime]:
        rows = self._select(query.user_id, query.start_date, query.end_date)
        if not rows:
            return None
        return max(tx.updated_at for tx in rows)


class InMemoryFeedbackHistoryStore(FeedbackHistoryStore):
    """Dict-backed feedback history."""

    def __init__(self):
        self._lock = threading.Lock()
        self._records: Dict[Tuple[int, str, date], FeedbackRecord] = {}
        self._evaluations: Dict[Tuple[int, date], datetime] = {}
        self._ids = itertools.count(1)

    def get_by_user_and_date(self, user_id: int, week_start: date) -> List[FeedbackRecord]:
        with self._lock:
            rows = [
                r for (uid, _, week), r in self._records.items()
                if uid == user_id and week == week_start
            ]
        return sorted(rows, key=lambda r: r.id)

    def get_last_evaluated_at(self, user_id: int, week_start: date) -> Optional[datetime]:
        with self._lock:
            return self._evaluations.get((user_id, week_start))

    def store_evaluation(
        self,
        user_id: int,
        week_start: date,
        records: List[FeedbackCreate],
        evaluated_at: datetime,
    ) -> List[FeedbackRecord]:
        stamp = to_utc(evaluated_at)
        with self._lock:
            kept = set()
            for record in records:
                key = (user_id, record.rule_id, week_start)
                existing = self._records.get(key)
                self._records[key] = FeedbackRecord(
                    id=existing.id if existing else next(self._ids),
                    created_at=stamp,
                    **record.model_dump(exclude={"user_id", "week_start"}),
                    user_id=user_id,
                    week_start=week_start,
                )
                kept.add(record.rule_id)

            stale = [
                key for key in self._records
                if key[0] == user_id and key[2] == week_start and key[1] not in kept
            ]
            for key in stale:
                del self._records[key]

            self._evaluations[(user_id, week_start)] = stamp

        return self.get_by_user_and_date(user_id, week_start)

    def get_recent(self, user_id: int, limit: int = 50) -> List[FeedbackRecord]:
        with self._lock:
            rows = [r for (uid, _, _), r in self._records.items() if uid == user_id]
        rows.sort(key=lambda r: r.id)
        rows.sort(key=lambda r: r.week_start, reverse=True)
        return rows[:limit]
