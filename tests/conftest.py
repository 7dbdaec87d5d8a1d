"""Pytest configuration and fixtures."""

from contextlib import asynccontextmanager

import pytest

from flowcheck.core.exceptions import ElementNotFoundError


class FakeSession:
    """In-memory BrowserSession that records calls and replays events."""

    def __init__(self):
        self.calls = []
        self.failures = {}  # method name -> exception to raise
        self.texts = {}  # selector -> text returned by read_text
        self.handlers = {"console": [], "pageerror": [], "requestfailed": [], "response": []}
        self.closed = False

    async def _record(self, name, *args):
        self.calls.append((name, *args))
        if name in self.failures:
            raise self.failures[name]

    async def navigate(self, url, wait_until="networkidle"):
        await self._record("navigate", url, wait_until)

    async def click(self, selector):
        await self._record("click", selector)

    async def fill(self, selector, text):
        await self._record("fill", selector, text)

    async def type_text(self, selector, text):
        await self._record("type_text", selector, text)

    async def press_key(self, key):
        await self._record("press_key", key)

    async def wait_for_selector(self, selector, state="visible", timeout_ms=10000):
        await self._record("wait_for_selector", selector, state, timeout_ms)

    async def read_text(self, selector):
        await self._record("read_text", selector)
        return self.texts.get(selector)

    async def screenshot(self, path):
        await self._record("screenshot", path)

    def on_console_message(self, handler):
        self.handlers["console"].append(handler)

    def on_uncaught_exception(self, handler):
        self.handlers["pageerror"].append(handler)

    def on_request_failed(self, handler):
        self.handlers["requestfailed"].append(handler)

    def on_response(self, handler):
        self.handlers["response"].append(handler)

    def emit(self, event, *args):
        for handler in self.handlers[event]:
            handler(*args)

    def called(self, name):
        return [c for c in self.calls if c[0] == name]


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def timeout_error():
    return ElementNotFoundError("Timed out after 10000ms waiting for #missing to be visible")


@pytest.fixture
def session_factory(fake_session):
    """Session factory yielding the fake session and marking it closed on exit."""
    opened = []

    @asynccontextmanager
    async def factory(config):
        opened.append(config)
        try:
            yield fake_session
        finally:
            fake_session.closed = True

    factory.opened = opened
    return factory
