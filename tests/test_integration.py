"""Integration tests against a real Chromium page and, for the agent test, a real LLM.

They are slow and need Playwright browsers (and Vertex credentials for the
agent test), so they are marked with @pytest.mark.integration.

Run with: pytest -m integration
"""

import pytest

from agent import ActionDispatcher, AgentConfig, BrowserAgent
from browser import ActionExecutionError
from llm_caller import ToolCall

FORM_HTML = """
<!DOCTYPE html>
<html>
<head><title>Test Form</title></head>
<body>
    <h1>Simple Test Form</h1>
    <input id="name-input" type="text" placeholder="Enter your name" />
    <button id="submit-btn" onclick="document.getElementById('result').innerText = 'Hello, ' + document.getElementById('name-input').value">Submit</button>
    <p id="result"></p>
    <button style="display: none">Hidden</button>
</body>
</html>
"""


@pytest.fixture
async def form_page(live_browser):
    await live_browser.page.set_content(FORM_HTML)
    return live_browser


@pytest.mark.integration
async def test_snapshot_lists_visible_interactive_elements(form_page):
    snapshot = await form_page.get_snapshot()

    assert snapshot.tree.startswith("Page: Test Form\nURL: ")
    assert '- textbox "Enter your name" [ref=@e1]' in snapshot.tree
    assert '- button "Submit" [ref=@e2]' in snapshot.tree
    assert "Hidden" not in snapshot.tree
    assert "Simple Test Form" not in snapshot.tree
    assert snapshot.refs == frozenset({"@e1", "@e2"})


@pytest.mark.integration
async def test_full_page_snapshot_includes_text(form_page):
    snapshot = await form_page.get_snapshot(interactive=False)

    assert "- h1: Simple Test Form" in snapshot.tree
    assert snapshot.refs == frozenset({"@e1", "@e2"})


@pytest.mark.integration
async def test_snapshot_is_idempotent(form_page):
    first = await form_page.get_snapshot()
    second = await form_page.get_snapshot()

    assert first == second


@pytest.mark.integration
async def test_dispatched_actions_drive_the_page(form_page):
    dispatcher = ActionDispatcher(form_page)

    await dispatcher.dispatch(ToolCall(id="1", name="snapshot"))
    filled = await dispatcher.dispatch(ToolCall(id="2", name="fill", arguments={"target": "@e1", "value": "Alice"}))
    clicked = await dispatcher.dispatch(ToolCall(id="3", name="click", arguments={"target": "@e2"}))

    assert filled.text == 'Filled @e1 with "Alice"'
    assert clicked.text == "Clicked @e2"
    assert await form_page.page.inner_text("#result") == "Hello, Alice"

    snapshot = await form_page.get_snapshot()
    assert 'value="Alice"' in snapshot.tree


@pytest.mark.integration
async def test_css_selector_targets(form_page):
    dispatcher = ActionDispatcher(form_page)

    await dispatcher.dispatch(ToolCall(id="1", name="type", arguments={"target": "#name-input", "text": "Bob"}))
    waited = await dispatcher.dispatch(ToolCall(id="2", name="wait", arguments={"selector": "#submit-btn"}))

    assert waited.text == "Element #submit-btn appeared"
    assert await form_page.page.input_value("#name-input") == "Bob"


@pytest.mark.integration
async def test_unknown_and_malformed_refs(form_page):
    with pytest.raises(ActionExecutionError, match="Unknown ref @e1"):
        form_page.resolve("@e1")

    await form_page.get_snapshot()

    with pytest.raises(ActionExecutionError, match="Unknown ref @e9"):
        form_page.resolve("@e9")
    with pytest.raises(ActionExecutionError, match="Malformed ref"):
        form_page.resolve("@submit")


@pytest.mark.integration
async def test_missing_selector_times_out_as_error_observation(form_page):
    observation = await ActionDispatcher(form_page).dispatch(
        ToolCall(id="1", name="click", arguments={"target": "#does-not-exist"})
    )

    assert observation.text.startswith("Error:")
    assert "\n" not in observation.text


@pytest.mark.integration
async def test_agent_fills_simple_form(form_page, llm):
    """Real model drives the form end to end."""
    agent = BrowserAgent(form_page, AgentConfig(model=f"{llm.provider}/{llm.model}", max_turns=8, timeout_ms=90_000))

    result = await agent.execute("Type 'Alice' in the name field and click the Submit button")

    assert result.success, f"Agent failed: {result.summary}"
    assert 1 <= result.turns <= 8
    assert await form_page.page.inner_text("#result") == "Hello, Alice"
