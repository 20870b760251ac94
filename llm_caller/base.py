"""Base abstraction for tool-calling LLM callers."""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

LlmProvider = Literal["anthropic_vertex", "openai", "google_vertex"]

logger = logging.getLogger(__name__)


class ModelInvocationError(Exception):
    """The model service could not be reached or returned an unusable response."""


@dataclass(slots=True)
class UsageStats:
    """Token usage statistics from an LLM call."""

    input_tokens: int = 0
    output_tokens: int = 0
    cache_read_tokens: int = 0
    cache_creation_tokens: int = 0

    def __iadd__(self, other: "UsageStats") -> "UsageStats":
        self.input_tokens += other.input_tokens
        self.output_tokens += other.output_tokens
        self.cache_read_tokens += other.cache_read_tokens
        self.cache_creation_tokens += other.cache_creation_tokens
        return self


class MessageRole(str, Enum):
    """Role in conversation message."""

    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True, slots=True)
class ToolSpec:
    """A tool advertised to the model: name, description and JSON schema of its arguments."""

    name: str
    description: str
    parameters: dict[str, Any]


@dataclass(frozen=True, slots=True)
class TextContent:
    """Text content part in a message."""

    text: str


@dataclass(frozen=True, slots=True)
class ToolCall:
    """A tool invocation requested by the model. Also stored as a part of assistant messages.

    ``decode_error`` is set when the provider returned arguments that are not a
    JSON object; ``arguments`` is then empty. ``signature`` is an opaque
    provider token that has to be sent back with the call (Gemini thought
    signatures).
    """

    id: str
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)
    decode_error: str | None = None
    signature: bytes | None = None


@dataclass(frozen=True, slots=True)
class ToolResult:
    """Outcome of a tool call, sent back to the model in a user message."""

    call_id: str
    name: str
    text: str


ContentPart = TextContent | ToolCall | ToolResult
MessageContent = str | list[ContentPart]


@dataclass(frozen=True, slots=True)
class ConversationMessage:
    """Single message in conversation history."""

    role: MessageRole
    content: MessageContent


@dataclass(frozen=True, slots=True)
class RawToolCall:
    """Tool call as returned by a provider, before argument validation.

    ``arguments`` is a JSON string for providers that encode it (OpenAI) and a
    dict for providers that decode it themselves.
    """

    id: str
    name: str
    arguments: str | dict[str, Any]
    signature: bytes | None = None


@dataclass(frozen=True, slots=True)
class LlmResult:
    """Result from a single LLM API call."""

    text: str | None
    tool_calls: list[RawToolCall]
    usage: UsageStats


@dataclass(frozen=True, slots=True)
class ModelTurn:
    """One model response: free text, requested tool calls in order, or both."""

    text: str | None
    tool_calls: tuple[ToolCall, ...] = ()


class LlmCaller(ABC):
    """Base abstract class for LLM callers."""

    __slots__ = ()

    TEMPERATURE = 1.0
    MAX_TOKENS = 4096

    @property
    @abstractmethod
    def provider(self) -> LlmProvider:
        """Get the LLM provider name."""
        ...

    @property
    @abstractmethod
    def model(self) -> str:
        """Get the model identifier."""
        ...

    @abstractmethod
    async def _do_api_call(
        self,
        system_prompt: str,
        messages: list[dict[str, Any]],
        tools: list[ToolSpec],
    ) -> LlmResult:
        """Make the actual API call to the LLM provider.

        Args:
            system_prompt: System prompt for the LLM
            messages: List of message dicts in provider-specific format
            tools: Tool catalogue to advertise, in order

        Returns:
            LlmResult with text content, raw tool calls and usage stats
        """
        ...

    @abstractmethod
    def _convert_messages(self, conversation_history: list[ConversationMessage]) -> list[dict[str, Any]]:
        """Convert conversation history to provider-specific message format."""
        ...


    @staticmethod
    def _decode_tool_call(raw: RawToolCall) -> ToolCall:
        """Decode the arguments of one raw tool call.

        Undecodable arguments are kept on the call as ``decode_error`` so the
        agent can report them back to the model as an observation.
        """
        arguments = raw.arguments
        if isinstance(arguments, str):
            try:
                arguments = json.loads(arguments) if arguments.strip() else {}
            except json.JSONDecodeError as e:
                logger.warning("Arguments of '%s' are not valid JSON: %s", raw.name, e)
                return ToolCall(id=raw.id, name=raw.name, decode_error=f"not valid JSON: {e}", signature=raw.signature)
        if not isinstance(arguments, dict):
            logger.warning("Arguments of '%s' are not a JSON object", raw.name)
            return ToolCall(id=raw.id, name=raw.name, decode_error="must be a JSON object", signature=raw.signature)
        return ToolCall(id=raw.id, name=raw.name, arguments=arguments, signature=raw.signature)

    async def call_llm(
        self,
        system_prompt: str,
        conversation_history: list[ConversationMessage],
        tools: list[ToolSpec],
    ) -> tuple[ModelTurn, UsageStats]:
        """Call LLM with a tool catalogue and get its next turn.

        Exactly one API request is made per call. Argument validation is left
        to the consumer of the tool calls.

        Args:
            system_prompt: System instructions
            conversation_history: List of ConversationMessage objects
            tools: Tool catalogue to advertise

        Returns:
            Tuple of ModelTurn (text and/or ordered tool calls) and UsageStats

        Raises:
            ModelInvocationError: On any transport or provider failure
        """
        messages = self._convert_messages(conversation_history)
        try:
            result = await self._do_api_call(system_prompt, messages, tools)
        except Exception as e:
            logger.error("Error calling %s: %s", self.provider, e)
            raise ModelInvocationError(f"{self.provider} call failed: {e}") from e

        calls = tuple(self._decode_tool_call(raw) for raw in result.tool_calls)
        return ModelTurn(text=result.text, tool_calls=calls), result.usage
