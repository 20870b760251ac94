"""Agent package for LLM-driven browser automation."""

from .config import AgentConfig
from .dispatcher import ActionDispatcher, Observation
from .errors import ConfigurationError, InvalidArgumentsError, UnknownActionError
from .loop import AgentResult, BrowserAgent, run_agent

__all__ = [
    "ActionDispatcher",
    "AgentConfig",
    "AgentResult",
    "BrowserAgent",
    "ConfigurationError",
    "InvalidArgumentsError",
    "Observation",
    "UnknownActionError",
    "run_agent",
]
