"""Per-instruction agent configuration with process-wide defaults from the environment."""

import dataclasses
import os
from collections.abc import Mapping
from dataclasses import dataclass

from llm_caller.factory import DEFAULT_LLM_MODEL

from .errors import ConfigurationError

ENV_MODEL = "AGENT_BROWSER_MODEL"
ENV_MAX_TURNS = "AGENT_BROWSER_MAX_TURNS"
ENV_TIMEOUT_MS = "AGENT_BROWSER_TIMEOUT"

DEFAULT_MAX_TURNS = 15
DEFAULT_TIMEOUT_MS = 120_000


def _positive_int(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")
    return value


def _int_from_env(environ: Mapping[str, str], key: str, default: int) -> int:
    raw = environ.get(key, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}") from None


@dataclass(frozen=True, slots=True)
class AgentConfig:
    """Settings for one instruction.

    Attributes:
        model: LLM model in provider/model format
        max_turns: Maximum number of model invocations
        timeout_ms: Wall-clock limit for the whole instruction
    """

    model: str = DEFAULT_LLM_MODEL
    max_turns: int = DEFAULT_MAX_TURNS
    timeout_ms: int = DEFAULT_TIMEOUT_MS

    def __post_init__(self) -> None:
        if not isinstance(self.model, str) or not self.model.strip():
            raise ConfigurationError(f"model must be a non-empty string, got {self.model!r}")
        _positive_int("max_turns", self.max_turns)
        _positive_int("timeout_ms", self.timeout_ms)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AgentConfig":
        """Build defaults from AGENT_BROWSER_* variables, falling back to built-in values."""
        environ = os.environ if environ is None else environ
        return cls(
            model=environ.get(ENV_MODEL, "").strip() or DEFAULT_LLM_MODEL,
            max_turns=_int_from_env(environ, ENV_MAX_TURNS, DEFAULT_MAX_TURNS),
            timeout_ms=_int_from_env(environ, ENV_TIMEOUT_MS, DEFAULT_TIMEOUT_MS),
        )

    def with_overrides(
        self,
        model: str | None = None,
        max_turns: int | None = None,
        timeout_ms: int | None = None,
    ) -> "AgentConfig":
        """Return a copy with the given fields replaced; None keeps the current value."""
        overrides = {
            name: value
            for name, value in (("model", model), ("max_turns", max_turns), ("timeout_ms", timeout_ms))
            if value is not None
        }
        return dataclasses.replace(self, **overrides) if overrides else self
