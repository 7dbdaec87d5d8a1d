import logging

import pytest

from flowcheck.core.config import GlobalOverrides
from flowcheck.core.models import ClickStep, ToleranceConfig
from flowcheck.runner.executor import StepOutcome
from flowcheck.runner.signals import ConsoleError, HttpError, PageError, RequestFailure, RunSignals
from flowcheck.runner.tolerance import (
    compile_pattern,
    compile_patterns,
    evaluate,
    filter_signals,
    matches_any,
)


def make_signals(**kwargs) -> RunSignals:
    return RunSignals(**kwargs)


@pytest.fixture
def mixed_signals():
    return make_signals(
        console_errors=[
            ConsoleError(text="Invalid login: bad password"),
            ConsoleError(text="TypeError: x is undefined"),
            ConsoleError(text="invalid LOGIN again"),
        ],
        page_errors=[PageError(message="Error: boom")],
        http_errors=[
            HttpError(url="http://app/api/session", status=401, status_text="Unauthorized"),
            HttpError(url="http://app/api/items", status=500, status_text="Server Error"),
            HttpError(url="http://cdn/favicon.ico", status=404, status_text="Not Found"),
        ],
        request_failures=[RequestFailure(url="http://app/ws", method="GET", failure="net::ERR_ABORTED")],
    )


def test_status_allowlist_suppresses_http_error():
    raw = make_signals(http_errors=[HttpError(url="http://app/api/login", status=401, status_text="Unauthorized")])
    result = evaluate(raw, ToleranceConfig(http_status_allowlist=[401]))

    assert result.effective.http_errors == ()
    assert result.categories.http_ok
    assert result.success


def test_console_pattern_suppresses_console_error():
    raw = make_signals(console_errors=[ConsoleError(text="Invalid login: bad password")])
    result = evaluate(raw, ToleranceConfig(console_pattern_allowlist=["Invalid login"]))

    assert result.effective.counts()["consoleErrors"] == 0
    assert result.categories.console_ok


def test_malformed_pattern_falls_back_to_substring():
    raw = make_signals(http_errors=[HttpError(url="http://app/api/items", status=500)])
    result = evaluate(raw, ToleranceConfig(http_url_allowlist=["["]))

    assert len(result.effective.http_errors) == 1
    assert not result.categories.http_ok
    assert not result.success


def test_malformed_pattern_matches_literally():
    match = compile_pattern("items[")
    assert match("http://app/items[0]")
    assert not match("http://app/items")


def test_pattern_is_case_insensitive_regex():
    assert compile_pattern(r"api/v\d+/health")("http://APP/API/V2/HEALTH")
    assert matches_any("favicon.ico", compile_patterns(["nothing", "FAVICON"]))
    assert not matches_any("anything", [])


def test_malformed_pattern_warns_once_per_filter(caplog):
    raw = make_signals(
        http_errors=[HttpError(url=f"http://app/api/{i}", status=500) for i in range(5)],
        console_errors=[ConsoleError(text=f"TypeError {i}") for i in range(5)],
    )
    tolerance = ToleranceConfig(http_url_allowlist=["("], console_pattern_allowlist=["["])

    with caplog.at_level(logging.WARNING, logger="flowcheck.runner.tolerance"):
        effective = filter_signals(raw, tolerance)

    warnings = [r for r in caplog.records if "not a valid regex" in r.getMessage()]
    assert len(warnings) == 2
    assert len(effective.http_errors) == 5
    assert len(effective.console_errors) == 5


def test_page_error_toggle_overrides_count():
    raw = make_signals(page_errors=[PageError(message="Error: boom")])
    result = evaluate(raw, ToleranceConfig(page_errors=True))

    assert len(result.effective.page_errors) == 1
    assert result.categories.page_ok
    assert result.success


def test_page_errors_and_request_failures_are_never_content_filtered(mixed_signals):
    tolerance = ToleranceConfig(
        http_url_allowlist=["boom", "ws"],
        console_pattern_allowlist=["boom", "ERR_ABORTED"],
    )
    effective = filter_signals(mixed_signals, tolerance)

    assert effective.page_errors == mixed_signals.page_errors
    assert effective.request_failures == mixed_signals.request_failures


def test_global_overrides_neutralize_categories(mixed_signals):
    overrides = GlobalOverrides(
        ignore_http_errors=True,
        ignore_console_errors=True,
        ignore_page_errors=True,
        ignore_request_failures=True,
    )
    result = evaluate(mixed_signals, ToleranceConfig(), overrides)

    assert result.categories.all_ok
    assert result.success
    # overrides do not hide anything from the record
    assert result.effective.counts() == mixed_signals.counts()


def test_filter_is_order_preserving_subset(mixed_signals):
    tolerance = ToleranceConfig(http_status_allowlist=[401], console_pattern_allowlist=["invalid login"])
    effective = filter_signals(mixed_signals, tolerance)

    assert [c.text for c in effective.console_errors] == ["TypeError: x is undefined"]
    assert [h.status for h in effective.http_errors] == [500, 404]
    for category in ("console_errors", "http_errors", "page_errors", "request_failures"):
        kept = getattr(effective, category)
        source = getattr(mixed_signals, category)
        positions = [source.index(item) for item in kept]
        assert positions == sorted(positions)


def test_filter_is_idempotent(mixed_signals):
    tolerance = ToleranceConfig(http_url_allowlist=["favicon", "["], console_pattern_allowlist=["TypeError"])
    once = filter_signals(mixed_signals, tolerance)
    twice = filter_signals(once, tolerance)
    assert twice == once


def test_adding_tolerance_never_turns_pass_into_fail(mixed_signals):
    configs = [
        ToleranceConfig(),
        ToleranceConfig(http_status_allowlist=[401, 404, 500]),
        ToleranceConfig(http_status_allowlist=[401, 404, 500], console_pattern_allowlist=["login", "TypeError"]),
        ToleranceConfig(
            http_status_allowlist=[401, 404, 500],
            console_pattern_allowlist=["login", "TypeError"],
            page_errors=True,
        ),
        ToleranceConfig(
            http_status_allowlist=[401, 404, 500],
            console_pattern_allowlist=["login", "TypeError"],
            page_errors=True,
            request_failures=True,
        ),
    ]
    verdicts = [evaluate(mixed_signals, c).success for c in configs]

    assert verdicts == sorted(verdicts)
    assert verdicts[-1] is True


def test_failed_step_fails_run_even_without_signals():
    step = ClickStep(action="click", selector="#go")
    outcomes = [
        StepOutcome(index=0, step=step, success=True),
        StepOutcome(index=1, step=step, success=False, message="timeout"),
    ]
    result = evaluate(RunSignals(), ToleranceConfig(), GlobalOverrides(), outcomes)

    assert result.categories.all_ok
    assert result.failed_steps == 1
    assert not result.success


def test_missing_tolerance_means_nothing_tolerated():
    raw = make_signals(request_failures=[RequestFailure(url="http://app/x", method="POST")])
    result = evaluate(raw)
    assert not result.categories.request_ok
    assert not result.success
