"""Browser session interface consumed by the agent."""

from dataclasses import dataclass, field
from typing import Protocol

REF_SIGIL = "@"


class ActionExecutionError(RuntimeError):
    """Raised when a browser action cannot be carried out."""


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Element tree of the current page."""

    tree: str
    refs: frozenset[str] = field(default_factory=frozenset)


class Locator(Protocol):
    async def click(self) -> None: ...

    async def fill(self, value: str) -> None: ...

    async def press_sequentially(self, text: str) -> None: ...


class BrowserSession(Protocol):
    """Capabilities the agent needs from a live browser session.

    Targets passed to ``resolve`` are either reference tokens handed out by the
    most recent snapshot (``@e1``, ``@e2``, ...) or raw CSS selectors.
    """

    async def get_snapshot(self, interactive: bool = True) -> Snapshot: ...

    def resolve(self, target: str) -> Locator: ...

    async def send_key(self, key: str) -> None: ...

    async def scroll_by(self, delta_x: int, delta_y: int) -> None: ...

    async def wait_timeout(self, ms: float) -> None: ...

    async def wait_for_selector(self, selector: str) -> None: ...


def is_ref(target: str) -> bool:
    """Return True if target looks like a snapshot reference token."""
    return target.startswith(REF_SIGIL) and target[1:2].isalpha() and target[2:].isdigit()
