"""OpenAI LLM caller implementation using chat-completions tool calling."""

import json
import logging
import os
from typing import Any

from openai import AsyncOpenAI
from openai.types.chat import ChatCompletionMessageParam, ChatCompletionToolParam

from .base import (
    ConversationMessage,
    LlmCaller,
    LlmProvider,
    LlmResult,
    RawToolCall,
    TextContent,
    ToolCall,
    ToolResult,
    ToolSpec,
    UsageStats,
)

logger = logging.getLogger(__name__)

# Singleton instance of OpenAI client
_openai_client: AsyncOpenAI | None = None


def _get_openai_client() -> AsyncOpenAI:
    """Get or create OpenAI client singleton."""
    global _openai_client

    if _openai_client is None:
        api_key = os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise ValueError("OPENAI_API_KEY environment variable is not set")

        _openai_client = AsyncOpenAI(
            api_key=api_key,
            base_url=os.environ.get("OPENAI_BASE_URL") or None,
            organization=os.environ.get("OPENAI_ORGANIZATION") or None,
        )

    return _openai_client


def _to_openai_tool(tool: ToolSpec) -> ChatCompletionToolParam:
    return {
        "type": "function",
        "function": {
            "name": tool.name,
            "description": tool.description,
            "parameters": tool.parameters,
        },
    }


class OpenAILlmCaller(LlmCaller):
    """LLM caller using OpenAI API (GPT models)."""

    __slots__ = ("__model",)

    def __init__(self, model: str) -> None:
        self.__model = model

    @property
    def provider(self) -> LlmProvider:
        """Get the LLM provider name."""
        return "openai"

    @property
    def model(self) -> str:
        """Get the model identifier."""
        return self.__model

    def _convert_messages(self, conversation_history: list[ConversationMessage]) -> list[dict[str, Any]]:
        """Convert conversation history to OpenAI message format.

        Tool results become separate ``tool`` role messages placed before any
        text in the same user turn, since OpenAI requires them directly after
        the assistant message that requested them.
        """
        result: list[dict[str, Any]] = []
        for msg in conversation_history:
            if isinstance(msg.content, str):
                result.append({"role": msg.role.value, "content": msg.content})
                continue

            texts = [part.text for part in msg.content if isinstance(part, TextContent)]
            calls = [part for part in msg.content if isinstance(part, ToolCall)]
            tool_results = [part for part in msg.content if isinstance(part, ToolResult)]

            if calls:
                result.append({
                    "role": "assistant",
                    "content": "\n".join(texts) or None,
                    "tool_calls": [
                        {
                            "id": call.id,
                            "type": "function",
                            "function": {"name": call.name, "arguments": json.dumps(call.arguments)},
                        }
                        for call in calls
                    ],
                })
                continue

            for tool_result in tool_results:
                result.append({"role": "tool", "tool_call_id": tool_result.call_id, "content": tool_result.text})
            if texts:
                result.append({"role": msg.role.value, "content": "\n".join(texts)})
        return result

    async def _do_api_call(
        self,
        system_prompt: str,
        messages: list[dict[str, Any]],
        tools: list[ToolSpec],
    ) -> LlmResult:
        """Make the actual API call to OpenAI."""
        client = _get_openai_client()

        openai_messages: list[ChatCompletionMessageParam] = [
            {"role": "system", "content": system_prompt},
            *messages,  # type: ignore[list-item]
        ]
        request: dict[str, Any] = {}
        if tools:
            request["tools"] = [_to_openai_tool(tool) for tool in tools]

        response = await client.chat.completions.create(
            model=self.__model,
            max_tokens=self.MAX_TOKENS,
            temperature=self.TEMPERATURE,
            messages=openai_messages,
            **request,
        )

        usage = UsageStats()
        if response.usage:
            usage.input_tokens = response.usage.prompt_tokens
            usage.output_tokens = response.usage.completion_tokens
            details = response.usage.prompt_tokens_details
            if details and details.cached_tokens:
                usage.cache_read_tokens = details.cached_tokens

        if not response.choices:
            return LlmResult(text=None, tool_calls=[], usage=usage)

        message = response.choices[0].message
        tool_calls = [
            RawToolCall(id=call.id, name=call.function.name, arguments=call.function.arguments)
            for call in message.tool_calls or []
            if call.type == "function"
        ]
        return LlmResult(text=message.content, tool_calls=tool_calls, usage=usage)
