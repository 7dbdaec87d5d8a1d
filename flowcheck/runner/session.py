"""Browser session capability contract used by the runner."""

from collections.abc import Callable
from typing import Any, Protocol

# Event handler signatures. Events are delivered as plain values so that the
# collector does not depend on any particular browser engine.
ConsoleHandler = Callable[[str, str, dict[str, Any] | None], None]  # level, text, location
ExceptionHandler = Callable[[str], None]  # stringified uncaught exception
RequestFailedHandler = Callable[[str, str, str], None]  # url, method, failure reason
ResponseHandler = Callable[[str, int, str], None]  # url, status, status text


class BrowserSession(Protocol):
    """Protocol for browser interaction."""

    async def navigate(self, url: str, wait_until: str = "networkidle") -> None: ...
    async def click(self, selector: str) -> None: ...
    async def fill(self, selector: str, text: str) -> None: ...
    async def type_text(self, selector: str, text: str) -> None: ...
    async def press_key(self, key: str) -> None: ...
    async def wait_for_selector(
        self, selector: str, state: str = "visible", timeout_ms: int = 10000
    ) -> None: ...
    async def read_text(self, selector: str) -> str | None: ...
    async def screenshot(self, path: str) -> None: ...

    def on_console_message(self, handler: ConsoleHandler) -> None: ...
    def on_uncaught_exception(self, handler: ExceptionHandler) -> None: ...
    def on_request_failed(self, handler: RequestFailedHandler) -> None: ...
    def on_response(self, handler: ResponseHandler) -> None: ...
