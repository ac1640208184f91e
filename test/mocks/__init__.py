"""
Reusable fakes and in-memory implementations for tests.
"""

from .fake_collaborators import FakeOutbound, ScriptedApplier, StaticSearch
from .fake_page import FakePage
from .fake_posting_repository import InMemoryPostingRepository
from .fake_runtime import (
    FixedClock,
    InMemoryLogger,
    RecordingSleeper,
    SequentialIdGenerator,
)
from .fake_user_interaction import FakeUserInteraction

__all__ = [
    "FakePage",
    "FakeUserInteraction",
    "FakeOutbound",
    "StaticSearch",
    "ScriptedApplier",
    "InMemoryPostingRepository",
    "FixedClock",
    "SequentialIdGenerator",
    "InMemoryLogger",
    "RecordingSleeper",
]
