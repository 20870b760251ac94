"""Factory for creating and caching LLM callers based on provider and model."""

from .anthropic_vertex import AnthropicVertexLlmCaller
from .base import LlmCaller, LlmProvider
from .google_vertex import GoogleVertexLlmCaller
from .openai import OpenAILlmCaller

DEFAULT_LLM_MODEL = "anthropic_vertex/claude-sonnet-4-5@20250929"

_SUPPORTED_PROVIDERS: tuple[LlmProvider, ...] = ("anthropic_vertex", "openai", "google_vertex")

# Cache for LLM callers by (provider, model) key
_llm_caller_cache: dict[tuple[str, str], LlmCaller] = {}


def parse_model_spec(model_spec: str) -> tuple[LlmProvider, str]:
    """Parse model specification in format 'provider/model'.

    Args:
        model_spec: Model specification like 'openai/gpt-4o-mini' or 'anthropic_vertex/claude-haiku-4-5@20251001'

    Returns:
        Tuple of (provider, model)

    Raises:
        ValueError: If format is invalid or provider is unsupported
    """
    provider, sep, model = model_spec.partition("/")
    if not sep or not provider or not model:
        raise ValueError(
            f"Invalid model spec format: '{model_spec}'. Expected format: 'provider/model' "
            f"(e.g., 'openai/gpt-4o-mini' or 'anthropic_vertex/claude-haiku-4-5@20251001')"
        )

    if provider not in _SUPPORTED_PROVIDERS:
        raise ValueError(
            f"Unsupported provider: '{provider}'. Supported providers: {', '.join(_SUPPORTED_PROVIDERS)}"
        )

    return provider, model  # type: ignore[return-value]


def get_llm_caller(provider: LlmProvider, model: str) -> LlmCaller:
    """Get or create an LLM caller for the specified provider and model.

    Callers are cached by (provider, model) key to avoid recreating clients.

    Raises:
        ValueError: If provider is unsupported
    """
    cache_key = (provider, model)

    if cache_key not in _llm_caller_cache:
        if provider == "anthropic_vertex":
            caller: LlmCaller = AnthropicVertexLlmCaller(model)
        elif provider == "openai":
            caller = OpenAILlmCaller(model)
        elif provider == "google_vertex":
            caller = GoogleVertexLlmCaller(model)
        else:
            raise ValueError(f"Unsupported provider: {provider}")

        _llm_caller_cache[cache_key] = caller

    return _llm_caller_cache[cache_key]


def get_llm_caller_for_spec(model_spec: str) -> LlmCaller:
    """Parse a 'provider/model' spec and return the cached caller for it."""
    provider, model = parse_model_spec(model_spec)
    return get_llm_caller(provider, model)
