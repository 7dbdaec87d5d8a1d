import argparse
import asyncio
import logging
import sys
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from datetime import UTC, datetime
from pathlib import Path

from flowcheck.core.config import GlobalOverrides, RunnerConfig
from flowcheck.core.exceptions import ConfigurationError, DefinitionError
from flowcheck.core.models import TestDefinition
from flowcheck.runner.executor import StepExecutor
from flowcheck.runner.loader import load_test_definition
from flowcheck.runner.playwright_adapter import open_playwright_session
from flowcheck.runner.report import RunSummary, build_summary, write_reports
from flowcheck.runner.session import BrowserSession
from flowcheck.runner.signals import SignalCollector
from flowcheck.runner.tolerance import evaluate
from flowcheck.runner.utils import slugify, utc_stamp

logger = logging.getLogger(__name__)

SessionFactory = Callable[[RunnerConfig], AbstractAsyncContextManager[BrowserSession]]


def playwright_session_factory(config: RunnerConfig) -> AbstractAsyncContextManager[BrowserSession]:
    return open_playwright_session(
        headless=config.headless,
        slow_mo_ms=config.slow_mo_ms,
        nav_timeout_ms=config.nav_timeout_ms,
        action_timeout_ms=config.action_timeout_ms,
    )


class FlowRunner:
    """Runs one test definition in one browser session and produces a RunSummary."""

    def __init__(
        self,
        definition: TestDefinition,
        config: RunnerConfig | None = None,
        overrides: GlobalOverrides | None = None,
        session_factory: SessionFactory = playwright_session_factory,
    ):
        self.definition = definition
        self.config = config or RunnerConfig()
        self.overrides = overrides or GlobalOverrides()
        self.session_factory = session_factory
        self.run_dir: Path | None = None

    def resolve_base_url(self) -> str:
        """Run-time override first, then the definition's baseUrl."""
        base_url = self.config.base_url or self.definition.base_url
        if not base_url:
            raise ConfigurationError(
                "No baseUrl provided. Pass --base-url or set baseUrl in the test definition."
            )
        return base_url

    async def run(self) -> RunSummary:
        """Execute the flow and write its reports."""
        base_url = self.resolve_base_url()

        started = datetime.now(UTC)
        self.run_dir = self.config.output_dir / f"{slugify(self.definition.name)}-{utc_stamp(started)}"
        self.run_dir.mkdir(parents=True, exist_ok=True)

        logger.info(f"🚀 Running '{self.definition.name}' against {base_url} ({len(self.definition.steps)} steps)")

        collector = SignalCollector()
        async with self.session_factory(self.config) as session:
            collector.attach(session)
            executor = StepExecutor(
                session,
                base_url,
                self.run_dir,
                default_wait_timeout_ms=self.config.default_wait_timeout_ms,
            )
            outcomes = await executor.execute(self.definition.steps)

        evaluation = evaluate(
            collector.snapshot(),
            self.definition.tolerate,
            self.overrides,
            outcomes,
        )
        summary = build_summary(self.definition, base_url, outcomes, evaluation)
        write_reports(summary, self.run_dir)

        logger.info(f"Flow run complete. Success: {summary.success}")
        return summary


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run a declarative browser user flow")
    parser.add_argument("--test", required=True, help="Path to YAML test file")
    parser.add_argument("--base-url", help="Override baseUrl in the test file")
    parser.add_argument("--out-dir", default="reports", help="Output directory for reports")
    parser.add_argument("--headless", action="store_true", default=True, help="Run headless")
    parser.add_argument("--no-headless", action="store_false", dest="headless")
    parser.add_argument("--slow-mo", type=int, default=0, help="Slow down browser operations (ms)")
    parser.add_argument("--nav-timeout-ms", type=int, default=None)
    parser.add_argument("--action-timeout-ms", type=int, default=None)
    parser.add_argument("--ignore-http-errors", action="store_true", help="Do not fail on HTTP 4xx/5xx responses")
    parser.add_argument("--ignore-console-errors", action="store_true", help="Do not fail on console errors")
    parser.add_argument("--ignore-page-errors", action="store_true", help="Do not fail on uncaught page errors")
    parser.add_argument("--ignore-request-failures", action="store_true", help="Do not fail on network request failures")
    return parser


def main():
    args = build_parser().parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    config_kwargs = {
        "base_url": args.base_url,
        "output_dir": Path(args.out_dir),
        "headless": args.headless,
        "slow_mo_ms": args.slow_mo,
    }
    if args.nav_timeout_ms is not None:
        config_kwargs["nav_timeout_ms"] = args.nav_timeout_ms
    if args.action_timeout_ms is not None:
        config_kwargs["action_timeout_ms"] = args.action_timeout_ms

    overrides = GlobalOverrides.from_env().merge(
        GlobalOverrides(
            ignore_http_errors=args.ignore_http_errors,
            ignore_console_errors=args.ignore_console_errors,
            ignore_page_errors=args.ignore_page_errors,
            ignore_request_failures=args.ignore_request_failures,
        )
    )

    try:
        definition = load_test_definition(Path(args.test))
        runner = FlowRunner(definition, RunnerConfig(**config_kwargs), overrides)
        summary = asyncio.run(runner.run())
    except (ConfigurationError, DefinitionError) as e:
        logger.error(str(e))
        sys.exit(1)

    sys.exit(0 if summary.success else 1)


if __name__ == "__main__":
    main()
