"""Database storage layer using SQLite."""
import json
import logging
import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import date, datetime
from typing import List, Optional

from finance_behavior.errors import InvalidInputError, StorageUnavailableError
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

logger = logging.getLogger(__name__)


def _ts(value: datetime) -> str:
    # Fixed-width UTC text so MAX() and ORDER BY compare chronologically.
    return to_utc(value).isoformat(timespec="microseconds")


class _SQLiteStore(ABC):
    """Connection handling shared by the SQLite stores."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._init_db()

    @abstractmethod
    def _init_db(self):
        """Create the tables this store owns."""
        pass

    @contextmanager
    def _get_conn(self):
        """Get database connection, translating driver failures."""
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            logger.error("Cannot open database", extra={"db_path": self.db_path, "error": str(e)})
            raise StorageUnavailableError(f"Cannot open database at {self.db_path}") from e
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA foreign_keys = ON")
            yield conn
        except sqlite3.IntegrityError as e:
            raise InvalidInputError(f"Constraint violated: {e}") from e
        except sqlite3.DatabaseError as e:
            logger.error("Database error", extra={"db_path": self.db_path, "error": str(e)})
            raise StorageUnavailableError(f"Database error: {e}") from e
        finally:
            conn.close()


class SQLiteTransactionStore(_SQLiteStore, TransactionStore):
    """Storage for transactions and categories."""

    def __init__(self, db_path: str = "finance_behavior.db"):
        super().__init__(db_path)

    def _init_db(self):
        """Initialize database tables."""
        with self._get_conn() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS categories (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id INTEGER,
                    name TEXT NOT NULL,
                    type TEXT NOT NULL CHECK (type IN ('income', 'expense')),
                    color TEXT NOT NULL,
                    icon TEXT NOT NULL,
                    is_default INTEGER NOT NULL DEFAULT 0
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS transactions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id INTEGER NOT NULL,
                    category_id INTEGER REFERENCES categories(id) ON DELETE SET NULL,
                    type TEXT NOT NULL CHECK (type IN ('income', 'expense')),
                    amount REAL NOT NULL CHECK (amount >= 0),
                    date TEXT NOT NULL,
                    description TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_transactions_user_date
                ON transactions(user_id, date)
            """)
            conn.commit()

    def _row_to_category(self, row: sqlite3.Row) -> Category:
        return Category(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            type=row["type"],
            color=row["color"],
            icon=row["icon"],
            is_default=bool(row["is_default"]),
        )

    def _row_to_transaction(self, row: sqlite3.Row) -> Transaction:
        return Transaction(
            id=row["id"],
            user_id=row["user_id"],
            category_id=row["category_id"],
            category_name=row["category_name"],
            type=row["type"],
            amount=row["amount"],
            date=date.fromisoformat(row["date"]),
            description=row["description"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def add_category(self, category: CategoryCreate) -> Category:
        with self._get_conn() as conn:
            cursor = conn.execute("""
                INSERT INTO categories (user_id, name, type, color, icon, is_default)
                VALUES (?, ?, ?, ?, ?, ?)
            """, (
                category.user_id,
                category.name,
                category.type.value,
                category.color,
                category.icon,
                int(category.is_default),
            ))
            conn.commit()
            return Category(id=cursor.lastrowid, **category.model_dump())

    def get_category(self, category_id: int) -> Optional[Category]:
        with self._get_conn() as conn:
            row = conn.execute("SELECT * FROM categories WHERE id = ?", (category_id,)).fetchone()
            return self._row_to_category(row) if row else None

    def find_category(self, lookup: CategoryLookup) -> Optional[Category]:
        with self._get_conn() as conn:
            row = conn.execute("""
                SELECT * FROM categories
                WHERE name = ? AND type = ? AND (user_id = ? OR user_id IS NULL)
                ORDER BY user_id IS NULL, id
                LIMIT 1
            """, (lookup.name, lookup.type.value, lookup.user_id)).fetchone()
            return self._row_to_category(row) if row else None

    def add_transactions(self, transactions: List[TransactionCreate]) -> List[Transaction]:
        """Add transactions to the database."""
        for tx in transactions:
            category = self.get_category(tx.category_id) if tx.category_id is not None else None
            check_transaction_category(tx, category)

        now = utcnow()
        ids = []
        with self._get_conn() as conn:
            with conn:
                for tx in transactions:
                    cursor = conn.execute("""
                        INSERT INTO transactions
                        (user_id, category_id, type, amount, date, description, created_at, updated_at)
                        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """, (
                        tx.user_id,
                        tx.category_id,
                        tx.type.value,
                        tx.amount,
                        tx.date.isoformat(),
                        tx.description,
                        _ts(now),
                        _ts(tx.updated_at or now),
                    ))
                    ids.append(cursor.lastrowid)
            if not ids:
                return []
            placeholders = ", ".join("?" for _ in ids)
            rows = conn.execute(f"""
                SELECT t.*, c.name AS category_name
                FROM transactions t
                LEFT JOIN categories c ON t.category_id = c.id
                WHERE t.id IN ({placeholders})
                ORDER BY t.id
            """, ids).fetchall()
            return [self._row_to_transaction(row) for row in rows]

    def get_transactions(
        self,
        query: DateRangeQuery,
        type: Optional[TransactionType] = None,
    ) -> List[Transaction]:
        """Get transactions for a user within date range."""
        sql = """
            SELECT t.*, c.name AS category_name
            FROM transactions t
            LEFT JOIN categories c ON t.category_id = c.id
            WHERE t.user_id = ? AND t.date >= ? AND t.date <= ?
        """
        params = [query.user_id, query.start_date.isoformat(), query.end_date.isoformat()]

        if type is not None:
            sql += " AND t.type = ?"
            params.append(type.value)

        sql += " ORDER BY t.date ASC, t.id ASC"

        with self._get_conn() as conn:
            rows = conn.execute(sql, params).fetchall()
            return [self._row_to_transaction(row) for row in rows]

    def get_user_transactions(
        self,
        user_id: int,
        type: Optional[TransactionType] = None,
    ) -> List[Transaction]:
        sql = """
            SELECT t.*, c.name AS category_name
            FROM transactions t
            LEFT JOIN categories c ON t.category_id = c.id
            WHERE t.user_id = ?
        """
        params = [user_id]
        if type is not None:
            sql += " AND t.type = ?"
            params.append(type.value)
        sql += " ORDER BY t.date ASC, t.id ASC"

        with self._get_conn() as conn:
            rows = conn.execute(sql, params).fetchall()
            return [self._row_to_transaction(row) for row in rows]

    def get_last_update_timestamp(self, query: DateRangeQuery) -> Optional[datetime]:
        with self._get_conn() as conn:
            row = conn.execute("""
                SELECT MAX(updated_at) AS last_update FROM transactions
                WHERE user_id = ? AND date >= ? AND date <= ?
            """, (
                query.user_id,
                query.start_date.isoformat(),
                query.end_date.isoformat(),
            )).fetchone()
            if row is None or row["last_update"] is None:
                return None
            return datetime.fromisoformat(row["last_update"])


class SQLiteFeedbackHistoryStore(_SQLiteStore, FeedbackHistoryStore):
    """Storage for generated feedback and per-week evaluation stamps."""

    def __init__(self, db_path: str = "finance_behavior.db"):
        super().__init__(db_path)

    def _init_db(self):
        """Initialize database tables."""
        with self._get_conn() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS feedback_history (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id INTEGER NOT NULL,
                    rule_id TEXT NOT NULL,
                    level TEXT NOT NULL,
                    title TEXT NOT NULL,
                    message TEXT NOT NULL,
                    data TEXT NOT NULL,
                    week_start TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    UNIQUE (user_id, rule_id, week_start)
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS rule_evaluations (
                    user_id INTEGER NOT NULL,
                    week_start TEXT NOT NULL,
                    evaluated_at TEXT NOT NULL,
                    PRIMARY KEY (user_id, week_start)
                )
            """)
            conn.commit()

    def _row_to_record(self, row: sqlite3.Row) -> FeedbackRecord:
        return FeedbackRecord(
            id=row["id"],
            user_id=row["user_id"],
            rule_id=row["rule_id"],
            level=row["level"],
            title=row["title"],
            message=row["message"],
            data=json.loads(row["data"]),
            week_start=date.fromisoformat(row["week_start"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def get_by_user_and_date(self, user_id: int, week_start: date) -> List[FeedbackRecord]:
        with self._get_conn() as conn:
            rows = conn.execute("""
                SELECT * FROM feedback_history
                WHERE user_id = ? AND week_start = ?
                ORDER BY id ASC
            """, (user_id, week_start.isoformat())).fetchall()
            return [self._row_to_record(row) for row in rows]

    def get_last_evaluated_at(self, user_id: int, week_start: date) -> Optional[datetime]:
        with self._get_conn() as conn:
            row = conn.execute("""
                SELECT evaluated_at FROM rule_evaluations
                WHERE user_id = ? AND week_start = ?
            """, (user_id, week_start.isoformat())).fetchone()
            return datetime.fromisoformat(row["evaluated_at"]) if row else None

    def store_evaluation(
        self,
        user_id: int,
        week_start: date,
        records: List[FeedbackCreate],
        evaluated_at: datetime,
    ) -> List[FeedbackRecord]:
        week_key = week_start.isoformat()
        stamp = _ts(evaluated_at)

        with self._get_conn() as conn:
            with conn:
                for record in records:
                    conn.execute("""
                        INSERT INTO feedback_history
                        (user_id, rule_id, level, title, message, data, week_start, created_at)
                        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                        ON CONFLICT (user_id, rule_id, week_start) DO UPDATE SET
                            level = excluded.level,
                            title = excluded.title,
                            message = excluded.message,
                            data = excluded.data,
                            created_at = excluded.created_at
                    """, (
                        user_id,
                        record.rule_id,
                        record.level,
                        record.title,
                        record.message,
                        json.dumps(record.data, default=str),
                        week_key,
                        stamp,
                    ))

                kept = [record.rule_id for record in records]
                if kept:
                    placeholders = ", ".join("?" for _ in kept)
                    conn.execute(f"""
                        DELETE FROM feedback_history
                        WHERE user_id = ? AND week_start = ? AND rule_id NOT IN ({placeholders})
                    """, [user_id, week_key, *kept])
                else:
                    conn.execute("""
                        DELETE FROM feedback_history WHERE user_id = ? AND week_start = ?
                    """, (user_id, week_key))

                conn.execute("""
                    INSERT INTO rule_evaluations (user_id, week_start, evaluated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT (user_id, week_start) DO UPDATE SET evaluated_at = excluded.evaluated_at
                """, (user_id, week_key, stamp))

        return self.get_by_user_and_date(user_id, week_start)

    def get_recent(self, user_id: int, limit: int = 50) -> List[FeedbackRecord]:
        with self._get_conn() as conn:
            rows = conn.execute("""
                SELECT * FROM feedback_history
                WHERE user_id = ?
                ORDER BY week_start DESC, id ASC
                LIMIT ?
            """, (user_id, limit)).fetchall()
            return [self._row_to_record(row) for row in rows]
