"""SQLite-backed persistence adapters for domain repository ports."""

from .sqlite_posting_repository import SQLitePostingRepository

__all__ = ["SQLitePostingRepository"]
