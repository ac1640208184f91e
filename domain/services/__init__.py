"""
Domain services.

These services orchestrate higher-level workflows while depending only on
domain models and ports so that infrastructure and UI layers can remain thin.
"""

from .pacing import PacingPolicy  # noqa: F401
from .challenge import CHALLENGE_SIGNATURES, ChallengeGate, ChallengeState
from .actions import PageActions
from .dedup import DedupStore
from .platforms import (
    KARIYER,
    LINKEDIN,
    PLATFORM_PROFILES,
    LoadMoreStrategy,
    PlatformProfile,
    profile_for,
    resolve_platform,
)
from .extraction import PostingExtractor, extract_contact_email
from .discovery import DiscoveryEngine
from .answers import AnswerResolution, AnswerResolver, AnswerSource
from .application import ApplicationStateMachine
from .search import JobSearchService
from .orchestrator import Orchestrator, unique_by_key

__all__ = [
    "PacingPolicy",
    "CHALLENGE_SIGNATURES",
    "ChallengeGate",
    "ChallengeState",
    "PageActions",
    "DedupStore",
    "KARIYER",
    "LINKEDIN",
    "PLATFORM_PROFILES",
    "LoadMoreStrategy",
    "PlatformProfile",
    "profile_for",
    "resolve_platform",
    "PostingExtractor",
    "extract_contact_email",
    "DiscoveryEngine",
    "AnswerResolution",
    "AnswerResolver",
    "AnswerSource",
    "ApplicationStateMachine",
    "JobSearchService",
    "Orchestrator",
    "unique_by_key",
]
