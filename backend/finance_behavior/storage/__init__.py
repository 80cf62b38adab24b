"""Storage ports and their adapters."""
from typing import Tuple

from finance_behavior.config import Settings
from finance_behavior.storage.base import FeedbackHistoryStore, TransactionStore
from finance_behavior.storage.database import SQLiteFeedbackHistoryStore, SQLiteTransactionStore
from finance_behavior.storage.memory import InMemoryFeedbackHistoryStore, InMemoryTransactionStore


def build_stores(settings: Settings) -> Tuple[TransactionStore, FeedbackHistoryStore]:
    """Create the store pair selected by ``settings.storage_backend``."""
    backend = settings.storage_backend.lower()
    if backend == "memory":
        return InMemoryTransactionStore(), InMemoryFeedbackHistoryStore()
    if backend == "sqlite":
        return (
            SQLiteTransactionStore(settings.database_path),
            SQLiteFeedbackHistoryStore(settings.database_path),
        )
    raise ValueError(f"Unknown storage backend: {settings.storage_backend}")


__all__ = [
    "FeedbackHistoryStore",
    "TransactionStore",
    "SQLiteFeedbackHistoryStore",
    "SQLiteTransactionStore",
    "InMemoryFeedbackHistoryStore",
    "InMemoryTransactionStore",
    "build_stores",
]
