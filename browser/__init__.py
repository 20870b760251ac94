"""Browser automation package."""

from .base import ActionExecutionError, BrowserSession, Locator, Snapshot
from .controller import BrowserController, ViewportSize

__all__ = [
    "ActionExecutionError",
    "BrowserController",
    "BrowserSession",
    "Locator",
    "Snapshot",
    "ViewportSize",
]
