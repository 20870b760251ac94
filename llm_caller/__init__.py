"""LLM caller implementations with a common tool-calling interface."""

from .base import (
    ContentPart,
    ConversationMessage,
    LlmCaller,
    LlmProvider,
    LlmResult,
    MessageContent,
    MessageRole,
    ModelInvocationError,
    ModelTurn,
    RawToolCall,
    TextContent,
    ToolCall,
    ToolResult,
    ToolSpec,
    UsageStats,
)
from .factory import DEFAULT_LLM_MODEL, get_llm_caller, get_llm_caller_for_spec, parse_model_spec

__all__ = [
    "DEFAULT_LLM_MODEL",
    "ContentPart",
    "ConversationMessage",
    "LlmCaller",
    "LlmProvider",
    "LlmResult",
    "MessageContent",
    "MessageRole",
    "ModelInvocationError",
    "ModelTurn",
    "RawToolCall",
    "TextContent",
    "ToolCall",
    "ToolResult",
    "ToolSpec",
    "UsageStats",
    "get_llm_caller",
    "get_llm_caller_for_spec",
    "parse_model_spec",
]
