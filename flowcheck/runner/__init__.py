"""Flow execution: step executor, signal collector and tolerance evaluation."""

from flowcheck.runner.executor import StepExecutor, StepOutcome
from flowcheck.runner.flow_runner import FlowRunner
from flowcheck.runner.loader import load_test_definition
from flowcheck.runner.playwright_adapter import PlaywrightSession, open_playwright_session
from flowcheck.runner.report import RunSummary, build_summary, write_reports
from flowcheck.runner.session import BrowserSession
from flowcheck.runner.signals import (
    ConsoleError,
    HttpError,
    PageError,
    RequestFailure,
    RunSignals,
    SignalCollector,
)
from flowcheck.runner.tolerance import (
    CategoryStatus,
    Evaluation,
    compile_pattern,
    compile_patterns,
    evaluate,
    filter_signals,
)

__all__ = [
    # Session
    "BrowserSession",
    "PlaywrightSession",
    "open_playwright_session",
    # Signals
    "SignalCollector",
    "RunSignals",
    "ConsoleError",
    "PageError",
    "HttpError",
    "RequestFailure",
    # Execution
    "StepExecutor",
    "StepOutcome",
    # Tolerance
    "compile_pattern",
    "compile_patterns",
    "filter_signals",
    "evaluate",
    "Evaluation",
    "CategoryStatus",
    # Runner
    "FlowRunner",
    "load_test_definition",
    # Reports
    "RunSummary",
    "build_summary",
    "write_reports",
]
