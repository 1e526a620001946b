# Infrastructure Adapters Package
from .memory_store import InMemoryReviewStore
from .sqlite_store import SqliteReviewStore

__all__ = ["InMemoryReviewStore", "SqliteReviewStore"]
