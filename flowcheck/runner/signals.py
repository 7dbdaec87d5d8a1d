"""Runtime signal records and the collector that gathers them."""

import logging
from dataclasses import asdict, dataclass, fields
from typing import Any

from pydantic.alias_generators import to_camel

from flowcheck.runner.session import BrowserSession

logger = logging.getLogger(__name__)

HTTP_ERROR_THRESHOLD = 400


@dataclass(frozen=True)
class ConsoleError:
    """Console message logged at error level."""
    text: str
    location: dict[str, Any] | None = None
    type: str = "error"


@dataclass(frozen=True)
class PageError:
    """Uncaught exception thrown in the page."""
    message: str


@dataclass(frozen=True)
class HttpError:
    """Response with a status of 400 or above."""
    url: str
    status: int
    status_text: str = ""


@dataclass(frozen=True)
class RequestFailure:
    """Request that never produced a response."""
    url: str
    method: str
    failure: str = "unknown"


def _record_json(record) -> dict[str, Any]:
    return {to_camel(k): v for k, v in asdict(record).items()}


@dataclass(frozen=True)
class RunSignals:
    """The four per-category signal logs of one run, each in arrival order."""
    console_errors: tuple[ConsoleError, ...] = ()
    page_errors: tuple[PageError, ...] = ()
    http_errors: tuple[HttpError, ...] = ()
    request_failures: tuple[RequestFailure, ...] = ()

    def __post_init__(self):
        for f in fields(self):
            object.__setattr__(self, f.name, tuple(getattr(self, f.name)))

    def counts(self) -> dict[str, int]:
        return {
            "pageErrors": len(self.page_errors),
            "consoleErrors": len(self.console_errors),
            "httpErrors": len(self.http_errors),
            "requestFailures": len(self.request_failures),
        }

    def to_json_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {
            "pageErrors": [_record_json(e) for e in self.page_errors],
            "consoleErrors": [_record_json(e) for e in self.console_errors],
            "httpErrors": [_record_json(e) for e in self.http_errors],
            "requestFailures": [_record_json(e) for e in self.request_failures],
        }


class SignalCollector:
    """Passively records runtime signals from a browser session.

    Handlers only append; nothing is filtered here so that every raw
    occurrence stays auditable. Attach before the first step runs.
    """

    def __init__(self) -> None:
        self._console_errors: list[ConsoleError] = []
        self._page_errors: list[PageError] = []
        self._http_errors: list[HttpError] = []
        self._request_failures: list[RequestFailure] = []
        self._attached = False

    def attach(self, session: BrowserSession) -> None:
        """Install the four event subscriptions on a session."""
        if self._attached:
            raise RuntimeError("SignalCollector is already attached to a session")
        session.on_console_message(self._on_console)
        session.on_uncaught_exception(self._on_page_error)
        session.on_request_failed(self._on_request_failed)
        session.on_response(self._on_response)
        self._attached = True

    def _on_console(self, level: str, text: str, location: dict[str, Any] | None) -> None:
        if level != "error":
            return
        logger.debug(f"Console error: {text}")
        self._console_errors.append(ConsoleError(text=text, location=location, type=level))

    def _on_page_error(self, message: str) -> None:
        logger.debug(f"Page error: {message}")
        self._page_errors.append(PageError(message=message))

    def _on_request_failed(self, url: str, method: str, failure: str) -> None:
        logger.debug(f"Request failed: {method} {url} ({failure})")
        self._request_failures.append(RequestFailure(url=url, method=method, failure=failure))

    def _on_response(self, url: str, status: int, status_text: str) -> None:
        if status < HTTP_ERROR_THRESHOLD:
            return
        logger.debug(f"HTTP {status} from {url}")
        self._http_errors.append(HttpError(url=url, status=status, status_text=status_text))

    def snapshot(self) -> RunSignals:
        """Return an immutable copy of the logs collected so far."""
        return RunSignals(
            console_errors=tuple(self._console_errors),
            page_errors=tuple(self._page_errors),
            http_errors=tuple(self._http_errors),
            request_failures=tuple(self._request_failures),
        )
