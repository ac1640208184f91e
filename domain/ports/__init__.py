from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from typing import Any, Protocol, Sequence, runtime_checkable

from domain.models import (
    FormField,
    FreeTextQuestionResponse,
    Platform,
    Posting,
    UserConfiguration,
)


@runtime_checkable
class PageAutomationPort(Protocol):
    """
    Low-level page primitives over a single browsing session.

    Presence checks (``is_visible``, ``is_checked``) resolve a timeout to
    ``False``. Actions (``click``, ``type_text`` and friends) raise when the
    expected element cannot be driven. The concrete implementation wraps
    Playwright.
    """

    async def goto(self, url: str, *, timeout_ms: int = 30_000) -> None:
        ...

    async def is_visible(self, selector: str, *, timeout_ms: int = 5_000) -> bool:
        ...

    async def get_text(self, selector: str) -> str:
        ...

    async def click(self, selector: str) -> None:
        ...

    async def type_text(self, selector: str, text: str) -> None:
        ...

    async def clear(self, selector: str) -> None:
        ...

    async def upload_file(self, selector: str, path: str) -> None:
        ...

    async def select_option(self, selector: str, value: str) -> None:
        ...

    async def is_checked(self, selector: str) -> bool:
        ...

    async def get_attribute_values(self, selector: str, attribute: str) -> list[str]:
        """Read ``attribute`` from every element matching ``selector``, skipping empty values."""
        ...

    async def scroll_list_after(self, header_selector: str, item_selector: str) -> None:
        """
        Scroll the container following ``header_selector`` by the summed
        height of its rendered ``item_selector`` children, or by one
        container height when none are rendered.
        """
        ...

    async def current_url(self) -> str:
        ...

    async def list_form_fields(self, group_selector: str) -> list[FormField]:
        ...


@runtime_checkable
class PostingRepositoryPort(Protocol):
    """Store and query postings keyed by ``(platform, platform_id)``.

    ``add`` must reject a second row with the same key.
    """

    @abstractmethod
    def add(self, posting: Posting) -> None:
        ...

    @abstractmethod
    def update(self, posting: Posting) -> None:
        ...

    @abstractmethod
    def get(self, platform_id: str, platform: Platform) -> Posting | None:
        ...

    @abstractmethod
    def list_applied(self) -> Sequence[Posting]:
        ...

    @abstractmethod
    def list_applied_since(self, cutoff: datetime) -> Sequence[Posting]:
        ...


@runtime_checkable
class OutboundMessagePort(Protocol):
    """Compose and deliver (or draft) an application message.

    Returns ``False`` on failure and never raises.
    """

    async def send_application(
        self,
        posting: Posting,
        configuration: UserConfiguration,
    ) -> bool:
        ...


@runtime_checkable
class UserInteractionPort(Protocol):
    """
    Blocking human interaction used for challenge screens and login
    verification.
    """

    async def send_info(self, message: str) -> None:
        ...

    async def ask_free_text(
        self,
        question_id: str,
        prompt: str,
    ) -> FreeTextQuestionResponse:
        ...


@runtime_checkable
class ClockPort(Protocol):
    """Time source for deterministic and easily testable code."""

    def now(self) -> datetime:
        ...


@runtime_checkable
class IdGeneratorPort(Protocol):
    def new_run_id(self) -> str:
        ...


@runtime_checkable
class LoggerPort(Protocol):
    """Structured, testable logging abstraction."""

    def debug(self, message: str, **fields: Any) -> None:
        ...

    def info(self, message: str, **fields: Any) -> None:
        ...

    def warning(self, message: str, **fields: Any) -> None:
        ...

    def error(self, message: str, **fields: Any) -> None:
        ...


__all__ = [
    "PageAutomationPort",
    "PostingRepositoryPort",
    "OutboundMessagePort",
    "UserInteractionPort",
    "ClockPort",
    "IdGeneratorPort",
    "LoggerPort",
]
