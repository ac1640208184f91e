from .playwright_page import PlaywrightPageAutomation

__all__ = ["PlaywrightPageAutomation"]
