"""Unit tests for the action dispatcher."""

import pytest

from agent import ActionDispatcher, Observation
from browser.base import ActionExecutionError
from llm_caller import ToolCall


def _call(name, **arguments):
    return ToolCall(id="call-1", name=name, arguments=arguments)


@pytest.fixture
def dispatcher(fake_browser):
    return ActionDispatcher(fake_browser)


@pytest.mark.unit
async def test_snapshot_returns_tree_verbatim(dispatcher, fake_browser):
    observation = await dispatcher.dispatch(_call("snapshot"))

    assert observation == Observation("call-1", 'Page: Test\n- button "Submit" [ref=@e1]')
    assert fake_browser.events == [("snapshot", True)]


@pytest.mark.unit
async def test_full_page_snapshot_includes_text(dispatcher, fake_browser):
    observation = await dispatcher.dispatch(_call("snapshot", fullPage=True))

    assert "- h1: Test page" in observation.text
    assert fake_browser.events == [("snapshot", False)]


@pytest.mark.unit
async def test_snapshot_is_idempotent_on_unchanged_page(dispatcher):
    first = await dispatcher.dispatch(_call("snapshot"))
    second = await dispatcher.dispatch(_call("snapshot"))

    assert first.text == second.text


@pytest.mark.unit
async def test_click(dispatcher, fake_browser):
    observation = await dispatcher.dispatch(_call("click", target="@e1"))

    assert observation.text == "Clicked @e1"
    assert fake_browser.events == [("click", "@e1")]


@pytest.mark.unit
async def test_fill_replaces_and_type_appends(dispatcher, fake_browser):
    filled = await dispatcher.dispatch(_call("fill", target="#search", value="hello"))
    typed = await dispatcher.dispatch(_call("type", target="#search", text=" world"))

    assert filled.text == 'Filled #search with "hello"'
    assert typed.text == 'Typed " world" into #search'
    assert fake_browser.values["#search"] == "hello world"


@pytest.mark.unit
async def test_press(dispatcher, fake_browser):
    observation = await dispatcher.dispatch(_call("press", key="Control+a"))

    assert observation.text == "Pressed Control+a"
    assert fake_browser.events == [("press", "Control+a")]


@pytest.mark.unit
@pytest.mark.parametrize(
    ("direction", "amount", "delta"),
    [
        ("down", None, (0, 500)),
        ("up", 200, (0, -200)),
        ("left", 150, (-150, 0)),
        ("right", 50, (50, 0)),
    ],
)
async def test_scroll_direction_sets_signed_delta(dispatcher, fake_browser, direction, amount, delta):
    arguments = {"direction": direction} if amount is None else {"direction": direction, "amount": amount}

    observation = await dispatcher.dispatch(_call("scroll", **arguments))

    assert observation.text == f"Scrolled {direction} {amount or 500}px"
    assert fake_browser.events == [("scroll", *delta)]


@pytest.mark.unit
async def test_fractional_scroll_is_rounded_to_whole_pixels(dispatcher, fake_browser):
    observation = await dispatcher.dispatch(_call("scroll", direction="down", amount=250.5))

    assert observation.text == "Scrolled down 250.5px"
    assert fake_browser.events == [("scroll", 0, 250)]


@pytest.mark.unit
async def test_zero_scroll_amount_uses_default(dispatcher, fake_browser):
    observation = await dispatcher.dispatch(_call("scroll", direction="up", amount=0))

    assert observation.text == "Scrolled up 500px"
    assert fake_browser.events == [("scroll", 0, -500)]


@pytest.mark.unit
async def test_wait_for_duration(dispatcher, fake_browser):
    observation = await dispatcher.dispatch(_call("wait", ms=250))

    assert observation.text == "Waited 250ms"
    assert fake_browser.events == [("wait", 250)]


@pytest.mark.unit
async def test_wait_for_fractional_duration(dispatcher, fake_browser):
    observation = await dispatcher.dispatch(_call("wait", ms=12.5))

    assert observation.text == "Waited 12.5ms"
    assert fake_browser.events == [("wait", 12.5)]


@pytest.mark.unit
async def test_wait_for_selector(dispatcher, fake_browser):
    observation = await dispatcher.dispatch(_call("wait", selector="#ready"))

    assert observation.text == "Element #ready appeared"
    assert fake_browser.events == [("wait_for", "#ready")]


@pytest.mark.unit
async def test_wait_duration_takes_precedence_over_selector(dispatcher, fake_browser):
    observation = await dispatcher.dispatch(_call("wait", ms=100, selector="#ready"))

    assert observation.text == "Waited 100ms"
    assert fake_browser.events == [("wait", 100)]


@pytest.mark.unit
async def test_wait_without_condition_is_noop(dispatcher, fake_browser):
    observation = await dispatcher.dispatch(_call("wait"))

    assert observation.text == "No wait condition specified"
    assert fake_browser.events == []


@pytest.mark.unit
async def test_unresolvable_ref_becomes_error_observation(dispatcher):
    observation = await dispatcher.dispatch(_call("click", target="@e42"))

    assert observation.text.startswith("Error: Unknown ref @e42")


@pytest.mark.unit
async def test_interaction_timeout_keeps_only_first_line(dispatcher):
    observation = await dispatcher.dispatch(_call("click", target="#missing"))

    assert observation.text == "Error: Timeout 5000ms exceeded."


@pytest.mark.unit
async def test_long_error_messages_are_truncated(fake_browser):
    class ExplodingBrowser(type(fake_browser)):
        async def send_key(self, key):
            raise ActionExecutionError("x" * 1000)

    observation = await ActionDispatcher(ExplodingBrowser()).dispatch(_call("press", key="Enter"))

    assert observation.text.startswith("Error: xxx")
    assert observation.text.endswith("...")
    assert len(observation.text) < 320


@pytest.mark.unit
async def test_unknown_tool(dispatcher, fake_browser):
    observation = await dispatcher.dispatch(_call("navigate", url="https://example.com"))

    assert observation == Observation("call-1", "Unknown tool: navigate")
    assert fake_browser.events == []


@pytest.mark.unit
async def test_invalid_arguments_become_error_observation(dispatcher, fake_browser):
    observation = await dispatcher.dispatch(_call("scroll", direction="sideways"))

    assert observation.text.startswith("Error: invalid arguments for scroll:")
    assert "direction" in observation.text
    assert fake_browser.events == []


@pytest.mark.unit
async def test_undecodable_arguments_become_error_observation(dispatcher, fake_browser):
    call = ToolCall(id="call-7", name="fill", decode_error="not valid JSON: Expecting value")

    observation = await dispatcher.dispatch(call)

    assert observation == Observation("call-7", "Error: invalid arguments for fill: arguments not valid JSON: Expecting value")
    assert fake_browser.events == []


@pytest.mark.unit
async def test_missing_argument_names_the_property(dispatcher):
    observation = await dispatcher.dispatch(_call("click"))

    assert observation.text == "Error: invalid arguments for click: arguments: 'target' is a required property"
