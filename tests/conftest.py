"""Pytest fixtures for unit and integration tests."""

import pytest

from agent import AgentConfig
from fakes import FakeBrowser


@pytest.fixture
def fake_browser():
    """Page exposing one clickable button as @e1 and the #search / #ready selectors."""
    return FakeBrowser()


@pytest.fixture
def config():
    return AgentConfig(model="openai/scripted", max_turns=5, timeout_ms=5_000)


@pytest.fixture
async def live_browser():
    """Provide a real Playwright browser for integration tests."""
    from browser import BrowserController, ViewportSize

    controller = BrowserController(viewport=ViewportSize(width=1280, height=720), headless=True, action_timeout_ms=2_000)
    await controller.start()
    yield controller
    await controller.stop()


@pytest.fixture
def llm():
    """Provide the default LLM caller (Haiku for cost optimization)."""
    from llm_caller import get_llm_caller

    return get_llm_caller("anthropic_vertex", "claude-haiku-4-5@20251001")
