from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeout

from flowcheck.core.exceptions import ElementNotFoundError, NavigationError
from flowcheck.runner.playwright_adapter import PlaywrightSession
from flowcheck.runner.signals import SignalCollector


@pytest.fixture
def mock_page():
    page = MagicMock()
    page.goto = AsyncMock()
    page.click = AsyncMock()
    page.fill = AsyncMock()
    page.wait_for_selector = AsyncMock()
    page.text_content = AsyncMock(return_value="Hello")
    page.screenshot = AsyncMock()
    page.keyboard.press = AsyncMock()
    page.locator.return_value.first.press_sequentially = AsyncMock()
    return page


@pytest.fixture
def session(mock_page):
    return PlaywrightSession(mock_page, nav_timeout_ms=1000, action_timeout_ms=500)


@pytest.mark.asyncio
async def test_navigate_waits_for_network_idle(session, mock_page):
    await session.navigate("http://localhost/")
    mock_page.goto.assert_awaited_once_with("http://localhost/", wait_until="networkidle", timeout=1000)


@pytest.mark.asyncio
async def test_navigate_wraps_errors(session, mock_page):
    mock_page.goto.side_effect = PlaywrightError("net::ERR_CONNECTION_REFUSED")
    with pytest.raises(NavigationError, match="ERR_CONNECTION_REFUSED"):
        await session.navigate("http://localhost/")


@pytest.mark.asyncio
async def test_click_timeout_becomes_element_not_found(session, mock_page):
    mock_page.click.side_effect = PlaywrightTimeout("Timeout 500ms exceeded")
    with pytest.raises(ElementNotFoundError, match="#go"):
        await session.click("#go")
    mock_page.click.assert_awaited_once_with("#go", timeout=500)


@pytest.mark.asyncio
async def test_type_and_fill(session, mock_page):
    await session.fill("#q", "")
    await session.type_text("#q", "abc")
    await session.press_key("Enter")

    mock_page.fill.assert_awaited_once_with("#q", "", timeout=500)
    mock_page.locator.assert_called_with("#q")
    mock_page.locator.return_value.first.press_sequentially.assert_awaited_once_with("abc", timeout=500)
    mock_page.keyboard.press.assert_awaited_once_with("Enter")


@pytest.mark.asyncio
async def test_wait_for_selector_timeout_message(session, mock_page):
    mock_page.wait_for_selector.side_effect = PlaywrightTimeout("Timeout")
    with pytest.raises(ElementNotFoundError, match="Timed out after 200ms waiting for #x to be hidden"):
        await session.wait_for_selector("#x", state="hidden", timeout_ms=200)


@pytest.mark.asyncio
async def test_read_text_and_screenshot(session, mock_page):
    assert await session.read_text("h1") == "Hello"
    await session.screenshot("/tmp/shot.png")
    mock_page.screenshot.assert_awaited_once_with(path="/tmp/shot.png", full_page=True)


def test_events_are_forwarded_as_plain_values(session, mock_page):
    collector = SignalCollector()
    collector.attach(session)

    listeners = {call.args[0]: call.args[1] for call in mock_page.on.call_args_list}
    assert set(listeners) == {"console", "pageerror", "requestfailed", "response"}

    listeners["console"](MagicMock(type="error", text="Uncaught", location={"url": "a.js"}))
    listeners["pageerror"](Exception("boom"))
    listeners["requestfailed"](MagicMock(url="http://x/a", method="GET", failure=None))
    listeners["response"](MagicMock(url="http://x/b", status=502, status_text="Bad Gateway"))

    signals = collector.snapshot()
    assert signals.console_errors[0].text == "Uncaught"
    assert signals.page_errors[0].message == "boom"
    assert signals.request_failures[0].failure == "unknown"
    assert signals.http_errors[0].status == 502
