from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Sequence


class Platform(str, Enum):
    """External job-listing sources the bot knows how to search."""

    LINKEDIN = "LinkedIn"
    KARIYER = "Kariyer.net"


class ApplicationMethod(str, Enum):
    """How an application was (or will be) delivered for a posting."""

    NONE = "none"
    EMAIL = "email"
    INLINE_APPLY = "inline_apply"


class EmailMode(str, Enum):
    DRAFT = "draft"
    SEND = "send"


class EmailProvider(str, Enum):
    GMAIL = "gmail"
    OUTLOOK = "outlook"
    OTHER = "other"


class FieldKind(str, Enum):
    TEXT = "text"
    TEXTAREA = "textarea"
    SELECT = "select"


@dataclass(frozen=True)
class Posting:
    """
    A normalized job listing keyed by ``(platform_id, platform)``.

    Once ``applied`` is true only the bookkeeping fields (``applied_at``,
    ``application_method``, ``notes``) may change.
    """

    platform: Platform
    platform_id: str
    title: str
    company: str
    url: str
    location: str = ""
    description: str = ""
    contact_email: str = ""
    has_inline_apply: bool = False
    posted_at: datetime | None = None
    scraped_at: datetime | None = None
    applied: bool = False
    applied_at: datetime | None = None
    application_method: ApplicationMethod = ApplicationMethod.NONE
    notes: str | None = None

    @property
    def key(self) -> tuple[str, Platform]:
        return (self.platform_id, self.platform)


@dataclass(frozen=True)
class TemplateQuestion:
    """
    Catalogue entry describing a question commonly found on apply forms.

    ``keywords`` are matched case-insensitively against the question text
    rendered on the page; ``options`` lists the accepted choices for
    ``select`` and ``boolean`` questions.
    """

    key: str
    question: str
    type: str = "text"
    options: Sequence[str] = field(default_factory=tuple)
    keywords: Sequence[str] = field(default_factory=tuple)


@dataclass(frozen=True)
class UserConfiguration:
    """Per-run user choices: where to search, for what, and how to answer."""

    platforms: Sequence[str]
    job_titles: Sequence[str]
    cv_file_path: str = ""
    email_mode: EmailMode = EmailMode.DRAFT
    show_browser: bool = False
    template_answers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Freeze internal mapping to uphold dataclass immutability expectations.
        object.__setattr__(
            self, "template_answers", MappingProxyType(dict(self.template_answers))
        )

    def answer(self, key: str, default: str | None = None) -> str | None:
        return self.template_answers.get(key, default)


@dataclass(frozen=True)
class AppConfig:
    """Application-level settings loaded from config.json."""

    linkedin_email: str = ""
    linkedin_password: str = ""
    kariyer_email: str = ""
    kariyer_password: str = ""
    delay_between_actions_ms: int = 2000
    max_jobs_per_session: int = 50
    search_location: str = "Turkey"
    drafts_dir: str = "drafts"


@dataclass(frozen=True)
class EmailConfig:
    smtp_server: str = ""
    smtp_port: int = 587
    email: str = ""
    password: str = ""
    sender_name: str = ""
    use_starttls: bool = True
    provider: EmailProvider = EmailProvider.GMAIL


@dataclass(frozen=True)
class FormField:
    """A single fillable control detected inside a question group."""

    selector: str
    label: str
    kind: FieldKind = FieldKind.TEXT
    options: Sequence[str] = field(default_factory=tuple)


@dataclass
class DiscoverySession:
    """Ephemeral state of one (platform, title) identifier collection."""

    target: int
    seen: dict[str, None] = field(default_factory=dict)
    stagnant_rounds: int = 0
    rounds: int = 0

    @property
    def identifiers(self) -> list[str]:
        return list(self.seen)

    def absorb(self, identifiers: Sequence[str]) -> int:
        """Add identifiers in order until ``target`` is reached; return how many were new."""
        added = 0
        for identifier in identifiers:
            if len(self.seen) >= self.target:
                break
            if identifier not in self.seen:
                self.seen[identifier] = None
                added += 1
        return added


class AttemptState(str, Enum):
    START = "start"
    LOCATING = "locating"
    STEPPING = "stepping"
    SUCCESS = "success"
    ABANDONED = "abandoned"


@dataclass
class ApplicationAttempt:
    """Ephemeral bookkeeping for one inline-apply run."""

    max_steps: int
    state: AttemptState = AttemptState.START
    step: int = 0
    iterations: int = 0
    last_signature: str = ""

    @property
    def terminal(self) -> bool:
        return self.state in (AttemptState.SUCCESS, AttemptState.ABANDONED)


@dataclass(frozen=True)
class ApplyOutcome:
    applied: bool
    reason: str | None = None
    steps: int = 0


class DispatchStatus(str, Enum):
    """Per-posting result of one dispatch."""

    EMAILED = "emailed"
    APPLIED_INLINE = "applied-inline"
    SKIPPED_NO_CHANNEL = "skipped-no-channel"
    FAILED = "failed"


@dataclass(frozen=True)
class DispatchResult:
    posting: Posting
    status: DispatchStatus
    reason: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status in (DispatchStatus.EMAILED, DispatchStatus.APPLIED_INLINE)


@dataclass(frozen=True)
class RunSummary:
    """What one orchestrated run discovered and how each posting ended."""

    run_id: str
    discovered: int
    pending: int
    results: Sequence[DispatchResult] = field(default_factory=tuple)

    def count(self, status: DispatchStatus) -> int:
        return sum(1 for r in self.results if r.status is status)


@dataclass(frozen=True)
class FreeTextQuestionResponse:
    """Structured response to a free-text question asked to the user."""

    question_id: str
    text: str


__all__ = [
    "Platform",
    "ApplicationMethod",
    "EmailMode",
    "EmailProvider",
    "FieldKind",
    "Posting",
    "TemplateQuestion",
    "UserConfiguration",
    "AppConfig",
    "EmailConfig",
    "FormField",
    "DiscoverySession",
    "AttemptState",
    "ApplicationAttempt",
    "ApplyOutcome",
    "DispatchStatus",
    "DispatchResult",
    "RunSummary",
    "FreeTextQuestionResponse",
]
