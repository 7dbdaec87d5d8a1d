"""Tolerance filtering and verdict computation.

Raw signals are reconciled against a test's ToleranceConfig and the global
override flags:

- http errors are dropped when their status is allowlisted or their URL
  matches an allowlisted pattern
- console errors are dropped when their text matches an allowlisted pattern
- page errors and request failures have no content allowlist; only the
  category toggle or global override neutralizes them

A category is ok when its override is set, its toggle is set, or nothing is
left after filtering. The run succeeds only when every step succeeded and
every category is ok.
"""

import logging
import re
from collections.abc import Callable, Collection, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from flowcheck.core.config import GlobalOverrides
from flowcheck.core.models import ToleranceConfig
from flowcheck.runner.executor import StepOutcome
from flowcheck.runner.signals import HttpError, RunSignals

logger = logging.getLogger(__name__)

Matcher = Callable[[str], bool]


def compile_pattern(pattern: str) -> Matcher:
    """Compile an allowlist entry into a matcher that never raises.

    The entry is tried as a case-insensitive regular expression; if it does
    not compile, a literal substring match is used instead.
    """
    try:
        regex = re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        logger.warning(f"Allowlist pattern {pattern!r} is not a valid regex ({e}); using substring match")
        return lambda text: pattern in text
    return lambda text: regex.search(text) is not None


def compile_patterns(patterns: Iterable[str]) -> list[Matcher]:
    return [compile_pattern(p) for p in patterns]


def matches_any(text: str, matchers: Iterable[Matcher]) -> bool:
    return any(match(text) for match in matchers)


def _http_error_tolerated(
    error: HttpError,
    status_allowlist: Collection[int],
    url_matchers: Sequence[Matcher],
) -> bool:
    if error.status in status_allowlist:
        return True
    return matches_any(error.url, url_matchers)


def filter_signals(raw: RunSignals, tolerance: ToleranceConfig) -> RunSignals:
    """Return the effective signals: raw signals minus allowlisted entries.

    Each category of the result is an order-preserving subset of the input.
    Allowlist patterns are compiled once per call.
    """
    url_matchers = compile_patterns(tolerance.http_url_allowlist)
    console_matchers = compile_patterns(tolerance.console_pattern_allowlist)
    status_allowlist = set(tolerance.http_status_allowlist)

    return RunSignals(
        console_errors=tuple(c for c in raw.console_errors if not matches_any(c.text, console_matchers)),
        page_errors=raw.page_errors,
        http_errors=tuple(
            h for h in raw.http_errors if not _http_error_tolerated(h, status_allowlist, url_matchers)
        ),
        request_failures=raw.request_failures,
    )


@dataclass(frozen=True)
class CategoryStatus:
    """Pass flag per signal category."""
    page_ok: bool
    console_ok: bool
    http_ok: bool
    request_ok: bool

    @property
    def all_ok(self) -> bool:
        return self.page_ok and self.console_ok and self.http_ok and self.request_ok

    def to_json_dict(self) -> dict[str, bool]:
        return {
            "pageOk": self.page_ok,
            "consoleOk": self.console_ok,
            "httpOk": self.http_ok,
            "requestOk": self.request_ok,
        }


@dataclass(frozen=True)
class Evaluation:
    """Filtered signals, per-category status and the overall verdict."""
    raw: RunSignals
    effective: RunSignals
    categories: CategoryStatus
    failed_steps: int
    success: bool

    def to_json_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "failedSteps": self.failed_steps,
            "categories": self.categories.to_json_dict(),
        }


def category_status(
    effective: RunSignals,
    tolerance: ToleranceConfig,
    overrides: GlobalOverrides,
) -> CategoryStatus:
    return CategoryStatus(
        page_ok=overrides.ignore_page_errors or tolerance.page_errors or not effective.page_errors,
        console_ok=overrides.ignore_console_errors
        or tolerance.console_errors
        or not effective.console_errors,
        http_ok=overrides.ignore_http_errors or tolerance.http_errors or not effective.http_errors,
        request_ok=overrides.ignore_request_failures
        or tolerance.request_failures
        or not effective.request_failures,
    )


def evaluate(
    raw: RunSignals,
    tolerance: ToleranceConfig | None = None,
    overrides: GlobalOverrides | None = None,
    outcomes: Sequence[StepOutcome] = (),
) -> Evaluation:
    """Reconcile raw signals and step outcomes into a verdict."""
    tolerance = tolerance or ToleranceConfig()
    overrides = overrides or GlobalOverrides()

    effective = filter_signals(raw, tolerance)
    categories = category_status(effective, tolerance, overrides)
    failed_steps = sum(1 for o in outcomes if not o.success)
    success = failed_steps == 0 and categories.all_ok

    logger.info(
        f"Verdict: {'PASS' if success else 'FAIL'} "
        f"(failed steps={failed_steps}, categories={categories.to_json_dict()})"
    )
    return Evaluation(
        raw=raw,
        effective=effective,
        categories=categories,
        failed_steps=failed_steps,
        success=success,
    )
