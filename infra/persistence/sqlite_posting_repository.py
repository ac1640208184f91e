from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import Sequence

from domain.models import ApplicationMethod, Platform, Posting

from ._datetime import dt_to_iso, iso_to_dt


class SQLitePostingRepository:
    """
    SQLite-backed implementation of ``PostingRepositoryPort``.

    Postings are keyed by ``(platform, platform_id)``; the composite primary
    key makes a second ``add`` for the same listing fail with
    ``sqlite3.IntegrityError``. Timestamps are stored as UTC ISO strings so
    that lexical comparison matches chronological order.
    """

    _SCHEMA_SQL = """\
    CREATE TABLE IF NOT EXISTS postings (
        platform           TEXT NOT NULL,
        platform_id        TEXT NOT NULL,
        title              TEXT NOT NULL,
        company            TEXT NOT NULL,
        url                TEXT NOT NULL,
        location           TEXT NOT NULL DEFAULT '',
        description        TEXT NOT NULL DEFAULT '',
        contact_email      TEXT NOT NULL DEFAULT '',
        has_inline_apply   INTEGER NOT NULL DEFAULT 0,
        posted_at          TEXT,
        scraped_at         TEXT,
        applied            INTEGER NOT NULL DEFAULT 0,
        applied_at         TEXT,
        application_method TEXT NOT NULL DEFAULT 'none',
        notes              TEXT,
        PRIMARY KEY (platform, platform_id)
    );

    CREATE INDEX IF NOT EXISTS idx_postings_applied_at ON postings (applied, applied_at);
    """

    _COLUMNS = (
        "platform, platform_id, title, company, url, location, description, "
        "contact_email, has_inline_apply, posted_at, scraped_at, applied, "
        "applied_at, application_method, notes"
    )

    def __init__(self, db_path: str = ":memory:") -> None:
        self._conn = sqlite3.connect(db_path)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(self._SCHEMA_SQL)

    def __enter__(self) -> "SQLitePostingRepository":
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.close()

    def add(self, posting: Posting) -> None:
        self._conn.execute(
            f"INSERT INTO postings ({self._COLUMNS}) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            self._posting_to_row(posting),
        )
        self._conn.commit()

    def update(self, posting: Posting) -> None:
        self._conn.execute(
            "UPDATE postings SET "
            "title=?, company=?, url=?, location=?, description=?, contact_email=?, "
            "has_inline_apply=?, posted_at=?, scraped_at=?, applied=?, applied_at=?, "
            "application_method=?, notes=? "
            "WHERE platform=? AND platform_id=?",
            self._posting_to_row(posting)[2:] + (posting.platform.value, posting.platform_id),
        )
        self._conn.commit()

    def get(self, platform_id: str, platform: Platform) -> Posting | None:
        row = self._conn.execute(
            f"SELECT {self._COLUMNS} FROM postings WHERE platform = ? AND platform_id = ?",
            (platform.value, platform_id),
        ).fetchone()
        if row is None:
            return None
        return self._row_to_posting(row)

    def list_applied(self) -> Sequence[Posting]:
        rows = self._conn.execute(
            f"SELECT {self._COLUMNS} FROM postings WHERE applied = 1 "
            "ORDER BY applied_at DESC",
        ).fetchall()
        return [self._row_to_posting(r) for r in rows]

    def list_applied_since(self, cutoff: datetime) -> Sequence[Posting]:
        rows = self._conn.execute(
            f"SELECT {self._COLUMNS} FROM postings "
            "WHERE applied = 1 AND applied_at >= ? "
            "ORDER BY applied_at DESC",
            (dt_to_iso(cutoff),),
        ).fetchall()
        return [self._row_to_posting(r) for r in rows]

    def close(self) -> None:
        self._conn.close()

    # -- helpers ------------------------------------------------------------

    @staticmethod
    def _posting_to_row(p: Posting) -> tuple[object, ...]:
        return (
            p.platform.value,
            p.platform_id,
            p.title,
            p.company,
            p.url,
            p.location,
            p.description,
            p.contact_email,
            int(p.has_inline_apply),
            dt_to_iso(p.posted_at),
            dt_to_iso(p.scraped_at),
            int(p.applied),
            dt_to_iso(p.applied_at),
            p.application_method.value,
            p.notes,
        )

    @staticmethod
    def _row_to_posting(row: tuple[object, ...]) -> Posting:
        return Posting(
            platform=Platform(row[0]),
            platform_id=str(row[1]),
            title=str(row[2]),
            company=str(row[3]),
            url=str(row[4]),
            location=str(row[5] or ""),
            description=str(row[6] or ""),
            contact_email=str(row[7] or ""),
            has_inline_apply=bool(row[8]),
            posted_at=iso_to_dt(row[9]),  # type: ignore[arg-type]
            scraped_at=iso_to_dt(row[10]),  # type: ignore[arg-type]
            applied=bool(row[11]),
            applied_at=iso_to_dt(row[12]),  # type: ignore[arg-type]
            application_method=ApplicationMethod(row[13]),
            notes=str(row[14]) if row[14] is not None else None,
        )
