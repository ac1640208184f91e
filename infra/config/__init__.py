from .filesystem_config_provider import (
    ConfigValidationError,
    FileSystemConfigProvider,
    provider_defaults,
)

__all__ = ["ConfigValidationError", "FileSystemConfigProvider", "provider_defaults"]
