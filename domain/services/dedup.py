from __future__ import annotations

from dataclasses import replace
from datetime import timedelta, timezone
from typing import Sequence

from domain.models import Platform, Posting
from domain.ports import ClockPort, PostingRepositoryPort


class DedupStore:
    """
    At-most-once bookkeeping over the posting store.

    Every write goes through a lookup on the composite key first, so the
    store never sees a duplicate insert. ``applied_at`` is first-write-wins:
    marking an already-applied posting again leaves it untouched.
    """

    def __init__(self, repo: PostingRepositoryPort, clock: ClockPort) -> None:
        self._repo = repo
        self._clock = clock

    def filter_unapplied(self, candidates: Sequence[Posting]) -> list[Posting]:
        applied_keys = {p.key for p in self._repo.list_applied()}
        return [p for p in candidates if p.key not in applied_keys]

    def mark_applied(self, posting: Posting) -> Posting:
        existing = self._repo.get(posting.platform_id, posting.platform)
        if existing is not None and existing.applied:
            return existing

        now = self._clock.now().astimezone(timezone.utc)
        if existing is None:
            applied = replace(posting, applied=True, applied_at=now)
            self._repo.add(applied)
            return applied

        applied = replace(
            existing,
            applied=True,
            applied_at=now,
            application_method=posting.application_method,
            notes=posting.notes if posting.notes is not None else existing.notes,
        )
        self._repo.update(applied)
        return applied

    def save(self, posting: Posting) -> bool:
        """Insert ``posting`` if its key is unknown; return whether a row was written."""
        if self._repo.get(posting.platform_id, posting.platform) is not None:
            return False
        self._repo.add(posting)
        return True

    def find_by_key(self, platform_id: str, platform: Platform | str) -> Posting | None:
        return self._repo.get(platform_id, Platform(platform))

    def annotate(self, posting: Posting, note: str) -> Posting:
        """Record an error note against the posting without touching its applied state."""
        existing = self._repo.get(posting.platform_id, posting.platform)
        if existing is None:
            annotated = replace(posting, notes=note)
            self._repo.add(annotated)
            return annotated
        annotated = replace(existing, notes=note)
        self._repo.update(annotated)
        return annotated

    def recent_applications(self, days: int = 7) -> list[Posting]:
        cutoff = self._clock.now().astimezone(timezone.utc) - timedelta(days=days)
        return list(self._repo.list_applied_since(cutoff))
