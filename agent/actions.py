"""Pydantic action models and the tool catalogue derived from them."""

import inspect
from typing import Annotated, Any, Literal

import jsonschema
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from llm_caller import ToolCall, ToolSpec

from .errors import InvalidArgumentsError, UnknownActionError

_TARGET_DESCRIPTION = "Element ref from the latest snapshot (e.g. @e3) or a CSS selector"

DEFAULT_SCROLL_AMOUNT = 500


class SnapshotAction(BaseModel):
    """Get the elements of the current page with refs (@e1, @e2, ...). Take a new snapshot whenever the page changes."""

    model_config = ConfigDict(populate_by_name=True)

    action: Literal["snapshot"] = "snapshot"
    full_page: bool = Field(
        default=False,
        alias="fullPage",
        description="Also include non-interactive text such as headings and paragraphs (default: false)",
    )


class ClickAction(BaseModel):
    """Click an element by ref or CSS selector."""

    action: Literal["click"] = "click"
    target: str = Field(description=_TARGET_DESCRIPTION)


class FillAction(BaseModel):
    """Clear an input field and fill it with a new value."""

    action: Literal["fill"] = "fill"
    target: str = Field(description=_TARGET_DESCRIPTION)
    value: str = Field(description="Value to fill")


class TypeAction(BaseModel):
    """Type text into an element key by key, appending to its current content."""

    action: Literal["type"] = "type"
    target: str = Field(description=_TARGET_DESCRIPTION)
    text: str = Field(description="Text to type")


class PressAction(BaseModel):
    """Press a key or key chord on the page."""

    action: Literal["press"] = "press"
    key: str = Field(description="Key to press (e.g. Enter, Tab, Escape, Control+a)")


class ScrollAction(BaseModel):
    """Scroll the page viewport."""

    action: Literal["scroll"] = "scroll"
    direction: Literal["up", "down", "left", "right"] = Field(description="Scroll direction")
    amount: float = Field(
        default=DEFAULT_SCROLL_AMOUNT, ge=0, description=f"Pixels to scroll (default: {DEFAULT_SCROLL_AMOUNT})"
    )


class WaitAction(BaseModel):
    """Wait for a fixed time or until an element matching a CSS selector appears."""

    action: Literal["wait"] = "wait"
    ms: float = Field(default=0, ge=0, description="Milliseconds to wait")
    selector: str = Field(default="", description="CSS selector to wait for")


class DoneAction(BaseModel):
    """Finish the task. Call this once the task is complete or cannot be completed."""

    action: Literal["done"] = "done"
    success: bool = Field(description="Whether the task was accomplished")
    summary: str = Field(description="Brief summary of the outcome for the caller")


Action = Annotated[
    SnapshotAction | ClickAction | FillAction | TypeAction | PressAction | ScrollAction | WaitAction | DoneAction,
    Field(discriminator="action"),
]

ACTION_MODELS: tuple[type[BaseModel], ...] = (
    SnapshotAction,
    ClickAction,
    FillAction,
    TypeAction,
    PressAction,
    ScrollAction,
    WaitAction,
    DoneAction,
)

ACTION_NAMES: frozenset[str] = frozenset(model.model_fields["action"].default for model in ACTION_MODELS)

_action_adapter: TypeAdapter[Any] = TypeAdapter(Action)


def _tool_spec(model: type[BaseModel]) -> ToolSpec:
    schema = model.model_json_schema()
    schema.pop("title", None)
    schema.pop("description", None)
    schema["properties"].pop("action")
    schema["required"] = [name for name in schema.get("required", []) if name != "action"]
    return ToolSpec(
        name=model.model_fields["action"].default,
        description=inspect.cleandoc(model.__doc__ or ""),
        parameters=schema,
    )


def build_tool_catalogue() -> list[ToolSpec]:
    """Return the tools advertised to the model, one per action, in a fixed order."""
    return [_tool_spec(model) for model in ACTION_MODELS]


_validators: dict[str, jsonschema.Draft202012Validator] = {
    tool.name: jsonschema.Draft202012Validator(tool.parameters) for tool in build_tool_catalogue()
}


def _schema_problems(call: ToolCall) -> str:
    """Schema violations of the call's arguments, joined into one line. Empty when valid."""
    problems = sorted(
        f"{'.'.join(str(part) for part in error.absolute_path) or 'arguments'}: {error.message}"
        for error in _validators[call.name].iter_errors(call.arguments)
    )
    return "; ".join(problems)


def parse_action(call: ToolCall) -> Action:
    """Turn a model tool call into a typed action.

    Raises:
        UnknownActionError: If the tool name is not in the catalogue
        InvalidArgumentsError: If the arguments could not be decoded or violate the tool schema
        pydantic.ValidationError: If the arguments do not fit the action model
    """
    if call.name not in ACTION_NAMES:
        raise UnknownActionError(call.name)
    if call.decode_error is not None:
        raise InvalidArgumentsError(call.name, f"arguments {call.decode_error}")
    problems = _schema_problems(call)
    if problems:
        raise InvalidArgumentsError(call.name, problems)
    return _action_adapter.validate_python({**call.arguments, "action": call.name})
