"""
Domain layer package.

This package contains pure business logic models and ports that are
independent of any specific infrastructure or frameworks.
"""

from .models import (  # noqa: F401
    ApplicationMethod,
    ApplyOutcome,
    AppConfig,
    DispatchResult,
    DispatchStatus,
    EmailConfig,
    EmailMode,
    FormField,
    FreeTextQuestionResponse,
    Platform,
    Posting,
    RunSummary,
    TemplateQuestion,
    UserConfiguration,
)
from .ports import (  # noqa: F401
    ClockPort,
    IdGeneratorPort,
    LoggerPort,
    OutboundMessagePort,
    PageAutomationPort,
    PostingRepositoryPort,
    UserInteractionPort,
)

__all__ = [
    # Models
    "Platform",
    "Posting",
    "ApplicationMethod",
    "ApplyOutcome",
    "AppConfig",
    "EmailConfig",
    "EmailMode",
    "FormField",
    "FreeTextQuestionResponse",
    "TemplateQuestion",
    "UserConfiguration",
    "DispatchStatus",
    "DispatchResult",
    "RunSummary",
    # Ports
    "PageAutomationPort",
    "PostingRepositoryPort",
    "OutboundMessagePort",
    "UserInteractionPort",
    "ClockPort",
    "IdGeneratorPort",
    "LoggerPort",
]
