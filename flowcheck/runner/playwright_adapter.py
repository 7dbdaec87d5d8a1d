import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeout

from flowcheck.core.config import DEFAULT_ACTION_TIMEOUT_MS, DEFAULT_NAV_TIMEOUT_MS
from flowcheck.core.exceptions import ElementNotFoundError, NavigationError, StepActionError
from flowcheck.runner.session import (
    ConsoleHandler,
    ExceptionHandler,
    RequestFailedHandler,
    ResponseHandler,
)

logger = logging.getLogger(__name__)


class PlaywrightSession:
    """Playwright implementation of BrowserSession.

    Features:
    - Navigation waits for network quiescence (networkidle)
    - Playwright errors are wrapped into StepActionError subclasses
    - Page events are forwarded as plain values (no Playwright objects leak out)
    """

    def __init__(
        self,
        page: Page,
        nav_timeout_ms: int | None = None,
        action_timeout_ms: int | None = None,
    ):
        self.page = page
        self.nav_timeout_ms = (
            nav_timeout_ms if nav_timeout_ms is not None else DEFAULT_NAV_TIMEOUT_MS
        )
        self.action_timeout_ms = (
            action_timeout_ms if action_timeout_ms is not None else DEFAULT_ACTION_TIMEOUT_MS
        )

    async def navigate(self, url: str, wait_until: str = "networkidle") -> None:
        logger.info(f"Navigating to {url}")
        try:
            await self.page.goto(url, wait_until=wait_until, timeout=self.nav_timeout_ms)
        except PlaywrightError as e:
            raise NavigationError(f"Navigation to {url} failed: {e}") from e

    async def click(self, selector: str) -> None:
        logger.info(f"Clicking: {selector}")
        try:
            await self.page.click(selector, timeout=self.action_timeout_ms)
        except PlaywrightError as e:
            raise ElementNotFoundError(f"Click failed for {selector}: {e}") from e

    async def fill(self, selector: str, text: str) -> None:
        """Set the field value directly (no per-key events)."""
        try:
            await self.page.fill(selector, text, timeout=self.action_timeout_ms)
        except PlaywrightError as e:
            raise ElementNotFoundError(f"Fill failed for {selector}: {e}") from e

    async def type_text(self, selector: str, text: str) -> None:
        """Type text key by key so input listeners fire."""
        logger.info(f"Typing into {selector}")
        try:
            locator = self.page.locator(selector).first
            await locator.press_sequentially(text, timeout=self.action_timeout_ms)
        except PlaywrightError as e:
            raise ElementNotFoundError(f"Type failed for {selector}: {e}") from e

    async def press_key(self, key: str) -> None:
        try:
            await self.page.keyboard.press(key)
        except PlaywrightError as e:
            raise StepActionError(f"Key press {key} failed: {e}") from e

    async def wait_for_selector(
        self, selector: str, state: str = "visible", timeout_ms: int = 10000
    ) -> None:
        """Wait for an element to reach a lifecycle state."""
        try:
            await self.page.wait_for_selector(selector, state=state, timeout=timeout_ms)
        except PlaywrightTimeout as e:
            raise ElementNotFoundError(
                f"Timed out after {timeout_ms}ms waiting for {selector} to be {state}"
            ) from e
        except PlaywrightError as e:
            raise ElementNotFoundError(f"Wait failed for {selector}: {e}") from e

    async def read_text(self, selector: str) -> str | None:
        """Return the rendered text content of an element."""
        try:
            return await self.page.text_content(selector, timeout=self.action_timeout_ms)
        except PlaywrightError as e:
            raise ElementNotFoundError(f"Reading text failed for {selector}: {e}") from e

    async def screenshot(self, path: str) -> None:
        """Capture a full-page screenshot to a file."""
        await self.page.screenshot(path=path, full_page=True)

    def on_console_message(self, handler: ConsoleHandler) -> None:
        self.page.on("console", lambda msg: handler(msg.type, msg.text, msg.location))

    def on_uncaught_exception(self, handler: ExceptionHandler) -> None:
        self.page.on("pageerror", lambda error: handler(str(error)))

    def on_request_failed(self, handler: RequestFailedHandler) -> None:
        def _forward(request):
            handler(request.url, request.method, request.failure or "unknown")

        self.page.on("requestfailed", _forward)

    def on_response(self, handler: ResponseHandler) -> None:
        self.page.on(
            "response", lambda response: handler(response.url, response.status, response.status_text)
        )


@asynccontextmanager
async def open_playwright_session(
    headless: bool = True,
    slow_mo_ms: int = 0,
    nav_timeout_ms: int | None = None,
    action_timeout_ms: int | None = None,
) -> AsyncIterator[PlaywrightSession]:
    """Launch Chromium and yield a session; the browser is closed on exit."""
    from playwright.async_api import async_playwright

    async with async_playwright() as playwright:
        browser = await playwright.chromium.launch(headless=headless, slow_mo=slow_mo_ms)
        try:
            context = await browser.new_context(
                viewport={"width": 1280, "height": 800},
                ignore_https_errors=True,
            )
            page = await context.new_page()
            yield PlaywrightSession(
                page,
                nav_timeout_ms=nav_timeout_ms,
                action_timeout_ms=action_timeout_ms,
            )
        finally:
            await browser.close()
            logger.info("Browser closed")
