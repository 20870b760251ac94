"""Google Vertex AI LLM caller implementation using Gemini function calling."""

import copy
import logging
from typing import Any, Literal

from google import genai
from google.genai.types import (
    Content,
    FunctionCall,
    FunctionDeclaration,
    FunctionResponse,
    GenerateContentConfig,
    Part,
    Tool,
)

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

# Role mapping - Gemini uses "model" for assistant role
_ROLE_TO_GEMINI: dict[MessageRole, Literal["user", "model"]] = {
    MessageRole.USER: "user",
    MessageRole.ASSISTANT: "model",
}

# Prefix for ids assigned locally when Gemini returns a function call without one
_LOCAL_ID_PREFIX = "local_call_"


def _convert_schema_to_gemini(schema: dict[str, Any]) -> dict[str, Any]:
    """Convert a JSON schema into the subset Gemini function declarations accept.

    - type arrays (["string", "null"]) become anyOf
    - additionalProperties is dropped
    """
    return _process_schema_node(copy.deepcopy(schema))


def _process_schema_node(node: Any) -> Any:
    if not isinstance(node, dict):
        return node

    result = {}
    for key, value in node.items():
        if key == "type" and isinstance(value, list):
            result["anyOf"] = [{"type": t} for t in value]
            continue
        if key == "additionalProperties":
            continue

        if isinstance(value, dict):
            result[key] = _process_schema_node(value)
        elif isinstance(value, list):
            result[key] = [_process_schema_node(item) if isinstance(item, dict) else item for item in value]
        else:
            result[key] = value
    return result


# Singleton instance of Gemini client
_gemini_client: genai.Client | None = None


def _get_gemini_client() -> genai.Client:
    """Get or create Gemini Vertex AI client singleton."""
    global _gemini_client

    if _gemini_client is None:
        project, location = vertex_project_and_location()
        _gemini_client = genai.Client(
            vertexai=True,
            project=project,
            location=location,
            credentials=create_vertex_credentials(),
        )

    return _gemini_client


class GoogleVertexLlmCaller(LlmCaller):
    """LLM caller using Google Vertex AI (Gemini models)."""

    __slots__ = ("__model",)

    def __init__(self, model: str) -> None:
        self.__model = model

    @property
    def provider(self) -> LlmProvider:
        """Get the LLM provider name."""
        return "google_vertex"

    @property
    def model(self) -> str:
        """Get the model identifier."""
        return self.__model

    def _convert_messages(self, conversation_history: list[ConversationMessage]) -> list[dict[str, Any]]:
        """Convert conversation history to Gemini part dicts.

        Call ids are sent only when Gemini assigned them; otherwise it pairs
        function responses with calls by name and position. Thought signatures
        are echoed back on the parts that carried them.
        """
        result: list[dict[str, Any]] = []
        for msg in conversation_history:
            if isinstance(msg.content, str):
                result.append({"role": _ROLE_TO_GEMINI[msg.role], "parts": [{"text": msg.content}]})
                continue

            parts: list[dict[str, Any]] = []
            for part in msg.content:
                if isinstance(part, TextContent):
                    parts.append({"text": part.text})
                elif isinstance(part, ToolCall):
                    function_call: dict[str, Any] = {"name": part.name, "args": part.arguments}
                    if not part.id.startswith(_LOCAL_ID_PREFIX):
                        function_call["id"] = part.id
                    gemini_part: dict[str, Any] = {"function_call": function_call}
                    if part.signature is not None:
                        gemini_part["thought_signature"] = part.signature
                    parts.append(gemini_part)
                elif isinstance(part, ToolResult):
                    function_response: dict[str, Any] = {"name": part.name, "response": {"output": part.text}}
                    if not part.call_id.startswith(_LOCAL_ID_PREFIX):
                        function_response["id"] = part.call_id
                    parts.append({"function_response": function_response})
            result.append({"role": _ROLE_TO_GEMINI[msg.role], "parts": parts})
        return result

    async def _do_api_call(
        self,
        system_prompt: str,
        messages: list[dict[str, Any]],
        tools: list[ToolSpec],
    ) -> LlmResult:
        """Make the actual API call to Google Vertex AI (Gemini)."""
        client = _get_gemini_client()

        contents: list[Content] = []
        for msg in messages:
            parts: list[Part] = []
            for part in msg["parts"]:
                if "text" in part:
                    parts.append(Part(text=part["text"]))
                elif "function_call" in part:
                    parts.append(Part(
                        function_call=FunctionCall(**part["function_call"]),
                        thought_signature=part.get("thought_signature"),
                    ))
                elif "function_response" in part:
                    parts.append(Part(function_response=FunctionResponse(**part["function_response"])))
            contents.append(Content(role=msg["role"], parts=parts))

        config_kwargs: dict[str, Any] = {
            "temperature": self.TEMPERATURE,
            "max_output_tokens": self.MAX_TOKENS,
            "system_instruction": system_prompt,
        }
        if tools:
            config_kwargs["tools"] = [
                Tool(
                    function_declarations=[
                        FunctionDeclaration(
                            name=tool.name,
                            description=tool.description,
                            parameters=_convert_schema_to_gemini(tool.parameters),
                        )
                        for tool in tools
                    ]
                )
            ]

        response = await client.aio.models.generate_content(
            model=self.__model,
            contents=contents,  # pyright: ignore[reportArgumentType]
            config=GenerateContentConfig(**config_kwargs),
        )

        usage = UsageStats()
        if response.usage_metadata:
            usage.input_tokens = response.usage_metadata.prompt_token_count or 0
            usage.output_tokens = response.usage_metadata.candidates_token_count or 0
            usage.cache_read_tokens = response.usage_metadata.cached_content_token_count or 0

        if not response.candidates:
            return LlmResult(text=None, tool_calls=[], usage=usage)

        content = response.candidates[0].content
        if not content or not content.parts:
            return LlmResult(text=None, tool_calls=[], usage=usage)

        texts: list[str] = []
        tool_calls: list[RawToolCall] = []
        for part in content.parts:
            if part.function_call:
                call = part.function_call
                tool_calls.append(RawToolCall(
                    id=call.id or f"{_LOCAL_ID_PREFIX}{len(tool_calls) + 1}",
                    name=call.name or "",
                    arguments=dict(call.args or {}),
                    signature=part.thought_signature,
                ))
            elif part.text and not part.thought:
                texts.append(part.text)

        return LlmResult(text="".join(texts) or None, tool_calls=tool_calls, usage=usage)
