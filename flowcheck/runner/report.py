"""Run summary assembly and report writers."""

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from flowcheck.core.models import TestDefinition
from flowcheck.runner.executor import StepOutcome
from flowcheck.runner.tolerance import Evaluation

logger = logging.getLogger(__name__)

LIKELY_CAUSES = [
    "Selector timeouts usually mean the element never rendered, is hidden behind a condition, or the selector is wrong.",
    "401/403: missing or invalid credentials, an expired token, or CORS.",
    "404: route mismatch or an asset that was not built.",
    "500: backend failure; check the server logs for a stack trace.",
    "Console TypeError/ReferenceError: check component and module imports and client/server boundaries.",
]


@dataclass(frozen=True)
class RunSummary:
    """Complete record of one flow run."""
    test_name: str
    description: str | None
    base_url: str
    timestamp: str
    success: bool
    evaluation: Evaluation
    step_outcomes: tuple[StepOutcome, ...] = ()

    @property
    def failed_steps(self) -> list[StepOutcome]:
        return [o for o in self.step_outcomes if not o.success]

    @property
    def counts(self) -> dict[str, int]:
        """Effective counts, including failed steps."""
        return {"stepErrors": len(self.failed_steps), **self.evaluation.effective.counts()}

    @property
    def raw_counts(self) -> dict[str, int]:
        return self.evaluation.raw.counts()

    def to_json_dict(self) -> dict[str, Any]:
        return {
            "testName": self.test_name,
            "description": self.description,
            "baseUrl": self.base_url,
            "timestamp": self.timestamp,
            "success": self.success,
            "counts": self.counts,
            "rawCounts": self.raw_counts,
            "categories": self.evaluation.categories.to_json_dict(),
            "stepErrors": [o.to_json_dict() for o in self.failed_steps],
            "steps": [o.to_json_dict() for o in self.step_outcomes],
            **self.evaluation.effective.to_json_dict(),
        }


def build_summary(
    definition: TestDefinition,
    base_url: str,
    outcomes: Sequence[StepOutcome],
    evaluation: Evaluation,
    timestamp: str | None = None,
) -> RunSummary:
    """Shape step outcomes and the tolerance evaluation into a RunSummary."""
    return RunSummary(
        test_name=definition.name,
        description=definition.description,
        base_url=base_url,
        timestamp=timestamp or datetime.now(UTC).isoformat(),
        success=evaluation.success,
        evaluation=evaluation,
        step_outcomes=tuple(outcomes),
    )


def render_tldr(summary: RunSummary) -> str:
    c = summary.counts
    lines = [
        f"Test: {summary.test_name}",
        f"Base URL: {summary.base_url}",
        f"When: {summary.timestamp}",
        f"Success: {str(summary.success).lower()}",
        f"Counts: step={c['stepErrors']}, page={c['pageErrors']}, console={c['consoleErrors']}, "
        f"http={c['httpErrors']}, reqFail={c['requestFailures']}",
    ]
    return "\n".join(lines)


def _bullets(items: list[str]) -> str:
    return "\n".join(f"- {item}" for item in items) if items else "(none)"


def render_builder_prompt(summary: RunSummary) -> str:
    """Markdown hand-off describing what failed and where to look."""
    effective = summary.evaluation.effective

    failures = []
    for n, outcome in enumerate(summary.failed_steps, start=1):
        step_json = json.dumps(outcome.to_json_dict()["step"], indent=2)
        block = f"{n}. Step {outcome.number} failed: {outcome.message}\n\n```json\n{step_json}\n```"
        if outcome.screenshot:
            block += f"\nScreenshot: {outcome.screenshot}"
        failures.append(block)
    reproduction = "\n\n".join(failures) or "No step failures; see the runtime signals below."

    lines = [
        "# Fix the failing user flow",
        "",
        "## Context",
        f"- App base URL: {summary.base_url}",
        f"- Flow under test: {summary.test_name}",
        f"- When: {summary.timestamp}",
        f"- Overall result: {'PASS' if summary.success else 'FAIL'}",
        "",
        "## Reproduction Steps & Failures",
        reproduction,
        "",
        "## Runtime Signals",
        "**Page errors**",
        _bullets([e.message for e in effective.page_errors]),
        "",
        "**Console errors**",
        _bullets([e.text for e in effective.console_errors]),
        "",
        "**HTTP 4xx/5xx responses**",
        _bullets([f"{e.status} {e.status_text} ({e.url})" for e in effective.http_errors]),
        "",
        "**Network request failures**",
        _bullets([f"{e.method} {e.url} ({e.failure})" for e in effective.request_failures]),
        "",
        "## Likely Causes",
        _bullets(LIKELY_CAUSES),
        "",
        "## Next Steps",
        "1. Reproduce the failure locally by following the steps above.",
        "2. Inspect the failing component(s) and the related route or API.",
        "3. Add or fix a test that covers this flow.",
        "4. Return the code changes that resolve the errors, with a short root-cause note.",
        "",
    ]
    return "\n".join(lines)


def write_reports(summary: RunSummary, run_dir: Path) -> dict[str, Path]:
    """Write result.json, tldr.txt and builder-prompt.md into run_dir."""
    run_dir.mkdir(parents=True, exist_ok=True)
    paths = {
        "json": run_dir / "result.json",
        "tldr": run_dir / "tldr.txt",
        "prompt": run_dir / "builder-prompt.md",
    }

    with open(paths["json"], "w", encoding="utf-8") as f:
        json.dump(summary.to_json_dict(), f, indent=2)
    paths["tldr"].write_text(render_tldr(summary), encoding="utf-8")
    paths["prompt"].write_text(render_builder_prompt(summary), encoding="utf-8")

    for path in paths.values():
        logger.info(f"📄 Report saved: {path}")
    return paths
