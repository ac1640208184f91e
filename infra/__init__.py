"""Infrastructure adapters: concrete implementations of domain ports."""

from .browser import PlaywrightPageAutomation
from .config import ConfigValidationError, FileSystemConfigProvider
from .interaction import ConsoleUserInteraction
from .messaging import EmailOutbound
from .persistence import SQLitePostingRepository
from .runtime import StructuredLogger, SystemClock, UuidIdGenerator

__all__ = [
    "PlaywrightPageAutomation",
    "ConfigValidationError",
    "FileSystemConfigProvider",
    "ConsoleUserInteraction",
    "EmailOutbound",
    "SQLitePostingRepository",
    "SystemClock",
    "UuidIdGenerator",
    "StructuredLogger",
]
