"""Core agent loop: model turn -> dispatch requested actions -> feed observations back."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from pydantic import ValidationError

from browser.base import BrowserSession
from llm_caller import (
    ConversationMessage,
    LlmCaller,
    MessageRole,
    ModelInvocationError,
    TextContent,
    ToolCall,
    ToolResult,
    UsageStats,
    get_llm_caller_for_spec,
)

from .actions import DoneAction, build_tool_catalogue, parse_action
from .config import AgentConfig
from .dispatcher import ActionDispatcher
from .errors import ConfigurationError, InvalidArgumentsError, UnknownActionError
from .prompts import build_system_prompt

logger = logging.getLogger(__name__)

_FALLBACK_SUMMARY = "Completed"
_LOG_PREVIEW_CHARS = 200


@dataclass(frozen=True, slots=True)
class AgentResult:
    """Result of an agent run."""

    success: bool
    summary: str
    turns: int


@dataclass(slots=True)
class RunState:
    """Progress of one instruction, kept outside the loop so it survives cancellation."""

    turns: int = 0
    usage: UsageStats = field(default_factory=UsageStats)


def _find_done(calls: tuple[ToolCall, ...]) -> DoneAction | None:
    """Return the first well-formed done action in a batch, if any."""
    for call in calls:
        if call.name != "done":
            continue
        try:
            action = parse_action(call)
        except (UnknownActionError, InvalidArgumentsError, ValidationError):
            continue
        if isinstance(action, DoneAction):
            return action
    return None


def _preview(text: str) -> str:
    text = text.replace("\n", " ")
    return text if len(text) <= _LOG_PREVIEW_CHARS else text[:_LOG_PREVIEW_CHARS] + "..."


async def run_agent(
    llm: LlmCaller,
    browser: BrowserSession,
    instruction: str,
    max_turns: int,
    state: RunState | None = None,
) -> AgentResult:
    """Run the bounded tool-calling loop for one instruction.

    Assumes the browser is already on the starting page. A done action takes
    precedence over every other action in the same response; those are skipped.

    Args:
        llm: LLM caller instance
        browser: Browser session, borrowed for the duration of the run
        instruction: Task to accomplish
        max_turns: Maximum number of model invocations
        state: Progress holder, updated in place

    Returns:
        AgentResult with success status, summary and number of model invocations

    Raises:
        ModelInvocationError: If the model service fails
    """
    state = state if state is not None else RunState()
    system_prompt = build_system_prompt(max_turns)
    tools = build_tool_catalogue()
    dispatcher = ActionDispatcher(browser)
    conversation: list[ConversationMessage] = [ConversationMessage(role=MessageRole.USER, content=instruction)]

    while True:
        if state.turns >= max_turns:
            logger.warning("Turn budget of %d exhausted without a final answer", max_turns)
            return AgentResult(
                success=False,
                summary=f"Turn budget exceeded: no result after {max_turns} turn{'' if max_turns == 1 else 's'}",
                turns=state.turns,
            )

        state.turns += 1
        logger.info("Turn %d/%d: calling LLM...", state.turns, max_turns)
        model_turn, turn_usage = await llm.call_llm(system_prompt, conversation, tools)
        state.usage += turn_usage

        if model_turn.text:
            logger.info("  model: %s", _preview(model_turn.text))

        if not model_turn.tool_calls:
            summary = (model_turn.text or "").strip() or _FALLBACK_SUMMARY
            logger.info("Model answered without actions, finishing")
            return AgentResult(success=True, summary=summary, turns=state.turns)

        done = _find_done(model_turn.tool_calls)
        if done is not None:
            skipped = len(model_turn.tool_calls) - 1
            if skipped:
                logger.info("Done requested, skipping %d other action(s) in the same turn", skipped)
            logger.info("Task finished (success=%s): %s", done.success, done.summary)
            return AgentResult(success=done.success, summary=done.summary, turns=state.turns)

        results: list[ToolResult] = []
        for call in model_turn.tool_calls:
            logger.info("  action: %s %s", call.name, call.arguments)
            observation = await dispatcher.dispatch(call)
            logger.info("  -> %s", _preview(observation.text))
            results.append(ToolResult(call_id=observation.call_id, name=call.name, text=observation.text))

        model_parts: list[TextContent | ToolCall] = [TextContent(model_turn.text)] if model_turn.text else []
        model_parts.extend(model_turn.tool_calls)
        conversation.append(ConversationMessage(role=MessageRole.ASSISTANT, content=model_parts))
        conversation.append(ConversationMessage(role=MessageRole.USER, content=results))


class BrowserAgent:
    """Runs natural-language instructions against a browser session.

    Only the final AgentResult is returned; element trees and the model
    conversation stay inside a single ``execute`` call.
    """

    __slots__ = ("_browser", "_defaults", "_resolve_llm")

    def __init__(
        self,
        browser: BrowserSession,
        defaults: AgentConfig | None = None,
        resolve_llm: Callable[[str], LlmCaller] = get_llm_caller_for_spec,
    ) -> None:
        self._browser = browser
        self._defaults = defaults if defaults is not None else AgentConfig.from_env()
        self._resolve_llm = resolve_llm

    @property
    def defaults(self) -> AgentConfig:
        return self._defaults

    async def execute(
        self,
        instruction: str,
        *,
        model: str | None = None,
        max_turns: int | None = None,
        timeout_ms: int | None = None,
    ) -> AgentResult:
        """Carry out one instruction.

        Every failure except a configuration error resolves to a result with
        ``success=False``.

        Raises:
            ConfigurationError: If the instruction is empty, an override is invalid or
                the model spec cannot be parsed
        """
        if not isinstance(instruction, str) or not instruction.strip():
            raise ConfigurationError("instruction must be a non-empty string")

        config = self._defaults.with_overrides(model=model, max_turns=max_turns, timeout_ms=timeout_ms)
        try:
            llm = self._resolve_llm(config.model)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        logger.info(
            "Executing instruction with %s (max_turns=%d, timeout=%dms)",
            config.model, config.max_turns, config.timeout_ms,
        )
        state = RunState()
        try:
            result = await asyncio.wait_for(
                run_agent(llm, self._browser, instruction.strip(), config.max_turns, state),
                timeout=config.timeout_ms / 1000,
            )
        except asyncio.TimeoutError:
            logger.warning("Instruction timed out after %d ms", config.timeout_ms)
            result = AgentResult(success=False, summary=f"Timed out after {config.timeout_ms}ms", turns=state.turns)
        except ModelInvocationError as e:
            result = AgentResult(success=False, summary=f"Error: {e}", turns=state.turns)

        logger.info(
            "Instruction finished: success=%s turns=%d tokens=%d in / %d out",
            result.success, result.turns, state.usage.input_tokens, state.usage.output_tokens,
        )
        return result
