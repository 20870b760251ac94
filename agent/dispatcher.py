"""Executes model-requested actions against the browser and reports them as text."""

import logging
from dataclasses import dataclass

from pydantic import ValidationError

from browser.base import BrowserSession
from llm_caller import ToolCall

from .actions import (
    DEFAULT_SCROLL_AMOUNT,
    Action,
    ClickAction,
    DoneAction,
    FillAction,
    PressAction,
    ScrollAction,
    SnapshotAction,
    TypeAction,
    WaitAction,
    parse_action,
)
from .errors import InvalidArgumentsError, UnknownActionError

logger = logging.getLogger(__name__)

_MAX_ERROR_CHARS = 300

_SCROLL_DIRECTIONS: dict[str, tuple[int, int]] = {
    "up": (0, -1),
    "down": (0, 1),
    "left": (-1, 0),
    "right": (1, 0),
}


@dataclass(frozen=True, slots=True)
class Observation:
    """Textual result of one tool call, matched to it by call_id."""

    call_id: str
    text: str


def _error_text(error: Exception) -> str:
    """First line of the error message, truncated. Playwright appends multi-line call logs."""
    message = str(error).strip()
    message = message.splitlines()[0] if message else type(error).__name__
    if len(message) > _MAX_ERROR_CHARS:
        message = message[: _MAX_ERROR_CHARS - 3] + "..."
    return f"Error: {message}"


def _number(value: float) -> str:
    """Render 500.0 as "500" and 250.5 as "250.5"."""
    return str(int(value)) if float(value).is_integer() else str(value)


def _validation_text(name: str, error: ValidationError) -> str:
    details = "; ".join(
        f"{'.'.join(str(loc) for loc in item['loc']) or 'arguments'}: {item['msg']}" for item in error.errors()
    )
    return f"Error: invalid arguments for {name}: {details}"


class ActionDispatcher:
    """Runs one action at a time against a borrowed browser session. Never raises."""

    __slots__ = ("_browser",)

    def __init__(self, browser: BrowserSession) -> None:
        self._browser = browser

    async def dispatch(self, call: ToolCall) -> Observation:
        try:
            action = parse_action(call)
        except UnknownActionError:
            logger.warning("Unknown tool requested: %s", call.name)
            return Observation(call.id, f"Unknown tool: {call.name}")
        except InvalidArgumentsError as e:
            logger.warning("Rejected arguments for %s: %s", call.name, e.details)
            return Observation(call.id, f"Error: {e}")
        except ValidationError as e:
            logger.warning("Invalid arguments for %s: %s", call.name, e)
            return Observation(call.id, _validation_text(call.name, e))

        try:
            text = await self.execute(action)
        except Exception as e:
            logger.warning("Action %s failed: %s", call.name, e)
            return Observation(call.id, _error_text(e))
        return Observation(call.id, text)

    async def execute(self, action: Action) -> str:
        """Execute a typed action and return its confirmation text. Errors propagate."""
        browser = self._browser
        match action:
            case SnapshotAction():
                snapshot = await browser.get_snapshot(interactive=not action.full_page)
                return snapshot.tree
            case ClickAction():
                await browser.resolve(action.target).click()
                return f"Clicked {action.target}"
            case FillAction():
                await browser.resolve(action.target).fill(action.value)
                return f'Filled {action.target} with "{action.value}"'
            case TypeAction():
                await browser.resolve(action.target).press_sequentially(action.text)
                return f'Typed "{action.text}" into {action.target}'
            case PressAction():
                await browser.send_key(action.key)
                return f"Pressed {action.key}"
            case ScrollAction():
                amount = action.amount or DEFAULT_SCROLL_AMOUNT
                sign_x, sign_y = _SCROLL_DIRECTIONS[action.direction]
                await browser.scroll_by(round(sign_x * amount), round(sign_y * amount))
                return f"Scrolled {action.direction} {_number(amount)}px"
            case WaitAction():
                if action.ms:
                    await browser.wait_timeout(action.ms)
                    return f"Waited {_number(action.ms)}ms"
                if action.selector:
                    await browser.wait_for_selector(action.selector)
                    return f"Element {action.selector} appeared"
                return "No wait condition specified"
            case DoneAction():
                # intercepted by the agent loop before dispatch
                return "Done signal received"
        raise TypeError(f"Unhandled action type: {type(action).__name__}")
