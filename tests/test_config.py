"""Unit tests for agent configuration."""

import pytest

from agent import AgentConfig, ConfigurationError
from llm_caller import DEFAULT_LLM_MODEL


@pytest.mark.unit
def test_from_env_defaults():
    config = AgentConfig.from_env({})

    assert config == AgentConfig(model=DEFAULT_LLM_MODEL, max_turns=15, timeout_ms=120_000)


@pytest.mark.unit
def test_from_env_reads_variables():
    config = AgentConfig.from_env({
        "AGENT_BROWSER_MODEL": "openai/gpt-4o",
        "AGENT_BROWSER_MAX_TURNS": "30",
        "AGENT_BROWSER_TIMEOUT": " 60000 ",
    })

    assert config == AgentConfig(model="openai/gpt-4o", max_turns=30, timeout_ms=60_000)


@pytest.mark.unit
def test_from_env_blank_values_fall_back_to_defaults():
    config = AgentConfig.from_env({"AGENT_BROWSER_MODEL": "  ", "AGENT_BROWSER_MAX_TURNS": ""})

    assert config.model == DEFAULT_LLM_MODEL
    assert config.max_turns == 15


@pytest.mark.unit
@pytest.mark.parametrize(
    "environ",
    [
        {"AGENT_BROWSER_MAX_TURNS": "many"},
        {"AGENT_BROWSER_MAX_TURNS": "0"},
        {"AGENT_BROWSER_TIMEOUT": "-1"},
    ],
)
def test_from_env_rejects_invalid_numbers(environ):
    with pytest.raises(ConfigurationError):
        AgentConfig.from_env(environ)


@pytest.mark.unit
def test_with_overrides_replaces_only_given_fields():
    base = AgentConfig(model="openai/gpt-4o-mini", max_turns=10, timeout_ms=1_000)

    assert base.with_overrides() is base
    assert base.with_overrides(max_turns=3) == AgentConfig(model="openai/gpt-4o-mini", max_turns=3, timeout_ms=1_000)
    assert base.with_overrides(model="google_vertex/gemini-2.5-flash").model == "google_vertex/gemini-2.5-flash"


@pytest.mark.unit
@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_turns": 0},
        {"max_turns": True},
        {"timeout_ms": 0},
        {"timeout_ms": 1.5},
        {"model": ""},
    ],
)
def test_invalid_values_raise_configuration_error(kwargs):
    with pytest.raises(ConfigurationError):
        AgentConfig(**kwargs)


@pytest.mark.unit
def test_config_is_immutable():
    config = AgentConfig()

    with pytest.raises(AttributeError):
        config.max_turns = 99  # type: ignore[misc]
