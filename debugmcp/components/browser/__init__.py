"""Browser automation components."""

from .browser_automation import BROWSER_LIBRARY_AVAILABLE, BrowserAutomation
from .selector_resolver import Resolution, SelectorResolver

__all__ = [
    "BROWSER_LIBRARY_AVAILABLE",
    "BrowserAutomation",
    "Resolution",
    "SelectorResolver",
]
