"""Anthropic Vertex AI LLM caller implementation."""

import logging
from typing import Any, Literal

from anthropic import AsyncAnthropicVertex
from anthropic.types import MessageParam, TextBlock, ToolParam, ToolUseBlock

from .base import (
    ConversationMessage,
    LlmCaller,
    LlmProvider,
    LlmResult,
    MessageRole,
    RawToolCall,
    TextContent,
    ToolCall,
    ToolResult,
    ToolSpec,
    UsageStats,
)
from .credentials import create_vertex_credentials, vertex_project_and_location

logger = logging.getLogger(__name__)

# Role mapping
_ROLE_TO_ANTHROPIC: dict[MessageRole, Literal["user", "assistant"]] = {
    MessageRole.USER: "user",
    MessageRole.ASSISTANT: "assistant",
}

# Singleton instance of Anthropic client
_anthropic_client: AsyncAnthropicVertex | None = None


def _get_anthropic_client() -> AsyncAnthropicVertex:
    """Get or create Anthropic Vertex AI client singleton."""
    global _anthropic_client

    if _anthropic_client is None:
        project, location = vertex_project_and_location()
        _anthropic_client = AsyncAnthropicVertex(
            region=location,
            project_id=project,
            credentials=create_vertex_credentials(),
        )

    return _anthropic_client


class AnthropicVertexLlmCaller(LlmCaller):
    """LLM caller using Anthropic Vertex AI (Claude)."""

    __slots__ = ("__model",)

    def __init__(self, model: str) -> None:
        self.__model = model

    @property
    def provider(self) -> LlmProvider:
        """Get the LLM provider name."""
        return "anthropic_vertex"

    @property
    def model(self) -> str:
        """Get the model identifier."""
        return self.__model

    def _convert_messages(self, conversation_history: list[ConversationMessage]) -> list[dict[str, Any]]:
        """Convert conversation history to Anthropic content-block format."""
        result: list[dict[str, Any]] = []
        for msg in conversation_history:
            if isinstance(msg.content, str):
                result.append({"role": _ROLE_TO_ANTHROPIC[msg.role], "content": msg.content})
                continue

            blocks: list[dict[str, Any]] = []
            for part in msg.content:
                if isinstance(part, TextContent):
                    blocks.append({"type": "text", "text": part.text})
                elif isinstance(part, ToolCall):
                    blocks.append({"type": "tool_use", "id": part.id, "name": part.name, "input": part.arguments})
                elif isinstance(part, ToolResult):
                    blocks.append({
                        "type": "tool_result",
                        "tool_use_id": part.call_id,
                        "content": part.text,
                        "is_error": part.text.startswith(("Error:", "Unknown tool:")),
                    })
            result.append({"role": _ROLE_TO_ANTHROPIC[msg.role], "content": blocks})
        return result

    async def _do_api_call(
        self,
        system_prompt: str,
        messages: list[dict[str, Any]],
        tools: list[ToolSpec],
    ) -> LlmResult:
        """Make the actual API call to Anthropic Vertex AI."""
        client = _get_anthropic_client()

        anthropic_messages = [MessageParam(role=msg["role"], content=msg["content"]) for msg in messages]  # type: ignore[arg-type]
        request: dict[str, Any] = {}
        if tools:
            request["tools"] = [
                ToolParam(name=tool.name, description=tool.description, input_schema=tool.parameters)
                for tool in tools
            ]

        response = await client.messages.create(
            model=self.__model,
            max_tokens=self.MAX_TOKENS,
            temperature=self.TEMPERATURE,
            system=system_prompt,
            messages=anthropic_messages,
            **request,
        )

        usage = UsageStats(
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            cache_read_tokens=response.usage.cache_read_input_tokens or 0,
            cache_creation_tokens=response.usage.cache_creation_input_tokens or 0,
        )

        texts: list[str] = []
        tool_calls: list[RawToolCall] = []
        for block in response.content:
            if isinstance(block, TextBlock):
                texts.append(block.text)
            elif isinstance(block, ToolUseBlock):
                arguments = block.input if isinstance(block.input, dict) else {}
                tool_calls.append(RawToolCall(id=block.id, name=block.name, arguments=arguments))
            else:
                logger.debug("Ignoring content block of type %s", type(block).__name__)

        return LlmResult(text="\n".join(texts) or None, tool_calls=tool_calls, usage=usage)
