from __future__ import annotations

import os
import sqlite3
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from domain.models import ApplicationMethod, Platform, Posting
from domain.ports import PostingRepositoryPort
from domain.services import DedupStore
from infra.persistence import SQLitePostingRepository
from test.mocks import FixedClock

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def repo(tmp_path: str) -> SQLitePostingRepository:
    db = os.path.join(tmp_path, "postings.db")
    r = SQLitePostingRepository(db_path=db)
    yield r
    r.close()


def _make_posting(**overrides: object) -> Posting:
    defaults: dict = dict(
        platform=Platform.LINKEDIN,
        platform_id="3901",
        title="Python Developer",
        company="Acme Inc",
        url="https://www.linkedin.com/jobs/view/3901",
        location="Istanbul",
        description="Mail us at jobs@acme.com",
        contact_email="jobs@acme.com",
        has_inline_apply=True,
        scraped_at=NOW,
    )
    defaults.update(overrides)
    return Posting(**defaults)


# -- protocol conformance --------------------------------------------------

def test_conforms_to_posting_repository_port(repo: SQLitePostingRepository) -> None:
    assert isinstance(repo, PostingRepositoryPort)


# -- CRUD ------------------------------------------------------------------

def test_add_and_get_round_trip(repo: SQLitePostingRepository) -> None:
    posting = _make_posting()
    repo.add(posting)

    assert repo.get("3901", Platform.LINKEDIN) == posting


def test_get_missing_returns_none(repo: SQLitePostingRepository) -> None:
    assert repo.get("nope", Platform.KARIYER) is None


def test_duplicate_key_is_rejected(repo: SQLitePostingRepository) -> None:
    repo.add(_make_posting())

    with pytest.raises(sqlite3.IntegrityError):
        repo.add(_make_posting(title="Other title"))


def test_same_id_on_two_platforms(repo: SQLitePostingRepository) -> None:
    repo.add(_make_posting())
    repo.add(_make_posting(platform=Platform.KARIYER, url="https://www.kariyer.net/is-ilani/ilan/3901"))

    assert repo.get("3901", Platform.KARIYER).url.startswith("https://www.kariyer.net")  # type: ignore[union-attr]
    assert repo.get("3901", Platform.LINKEDIN).url.startswith("https://www.linkedin.com")  # type: ignore[union-attr]


def test_update_bookkeeping(repo: SQLitePostingRepository) -> None:
    repo.add(_make_posting())
    updated = replace(
        _make_posting(),
        applied=True,
        applied_at=NOW,
        application_method=ApplicationMethod.INLINE_APPLY,
        notes="applied in 3 steps",
    )
    repo.update(updated)

    assert repo.get("3901", Platform.LINKEDIN) == updated


def test_timestamps_normalized_to_utc(repo: SQLitePostingRepository) -> None:
    istanbul = timezone(timedelta(hours=3))
    repo.add(_make_posting(applied=True, applied_at=datetime(2025, 6, 1, 15, 0, tzinfo=istanbul)))

    stored = repo.get("3901", Platform.LINKEDIN)

    assert stored is not None
    assert stored.applied_at == NOW
    assert stored.applied_at.utcoffset() == timedelta(0)  # type: ignore[union-attr]


def test_list_applied_and_since(repo: SQLitePostingRepository) -> None:
    repo.add(_make_posting(platform_id="1", applied=True, applied_at=NOW - timedelta(days=10)))
    repo.add(_make_posting(platform_id="2", applied=True, applied_at=NOW - timedelta(days=1)))
    repo.add(_make_posting(platform_id="3"))

    assert {p.platform_id for p in repo.list_applied()} == {"1", "2"}
    assert [p.platform_id for p in repo.list_applied_since(NOW - timedelta(days=7))] == ["2"]


def test_dedup_store_over_sqlite(repo: SQLitePostingRepository) -> None:
    store = DedupStore(repo, FixedClock(NOW))
    posting = _make_posting()

    assert store.save(posting) is True
    assert store.save(posting) is False
    store.mark_applied(replace(posting, application_method=ApplicationMethod.EMAIL))

    assert store.filter_unapplied([posting]) == []
    stored = store.find_by_key("3901", Platform.LINKEDIN)
    assert stored is not None and stored.application_method is ApplicationMethod.EMAIL


def test_data_survives_reopen(tmp_path: str) -> None:
    db = os.path.join(tmp_path, "persist.db")
    with SQLitePostingRepository(db_path=db) as first:
        first.add(_make_posting(applied=True, applied_at=NOW))

    with SQLitePostingRepository(db_path=db) as second:
        assert [p.platform_id for p in second.list_applied()] == ["3901"]
