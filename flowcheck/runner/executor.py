import asyncio
import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, assert_never
from urllib.parse import urljoin

from flowcheck.core.config import DEFAULT_WAIT_TIMEOUT_MS
from flowcheck.core.exceptions import ConfigurationError, ExpectationError
from flowcheck.core.models import (
    ClickStep,
    ExpectTextStep,
    ExpectVisibleStep,
    FillStep,
    NavigateStep,
    ScreenshotStep,
    Step,
    TypeStep,
    WaitForSelectorStep,
    WaitStep,
)
from flowcheck.runner.session import BrowserSession
from flowcheck.runner.utils import slugify

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepOutcome:
    """Result of executing a single step."""
    index: int  # 0-based position in the step sequence
    step: Step
    success: bool
    message: str | None = None
    screenshot: str | None = None
    duration_ms: int = 0

    @property
    def number(self) -> int:
        """1-based step number used in reports and file names."""
        return self.index + 1

    def to_json_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "step": self.step.model_dump(mode="json", by_alias=True, exclude_none=True),
            "success": self.success,
            "message": self.message,
            "screenshot": self.screenshot,
            "durationMs": self.duration_ms,
        }


class StepExecutor:
    """Runs a step sequence against a browser session, one step at a time.

    A failing step never stops the run: the failure is recorded, a best-effort
    screenshot is taken, and execution moves on to the next step.
    """

    def __init__(
        self,
        session: BrowserSession,
        base_url: str | None,
        artifacts_dir: Path,
        default_wait_timeout_ms: int = DEFAULT_WAIT_TIMEOUT_MS,
    ):
        """Initialize the executor.

        Args:
            session: Browser session to drive
            base_url: Base URL for relative navigation
            artifacts_dir: Directory for screenshots
            default_wait_timeout_ms: Timeout for selector waits without timeoutMs
        """
        self.session = session
        self.base_url = base_url
        self.artifacts_dir = Path(artifacts_dir)
        self.default_wait_timeout_ms = default_wait_timeout_ms

    async def execute(self, steps: Sequence[Step]) -> list[StepOutcome]:
        """Execute all steps in order and return one outcome per step."""
        outcomes = []
        for index, step in enumerate(steps):
            outcomes.append(await self._run_step(index, step))

        failed = sum(1 for o in outcomes if not o.success)
        logger.info(f"Executed {len(outcomes)} steps, {failed} failed")
        return outcomes

    async def _run_step(self, index: int, step: Step) -> StepOutcome:
        number = index + 1
        logger.info(f"Step {number}: {step.action}")
        start_time = time.monotonic()
        try:
            screenshot = await self._dispatch(number, step)
        except Exception as e:
            message = str(e) or type(e).__name__
            logger.error(f"Step {number} ({step.action}) failed: {message}")
            shot = await self._failure_screenshot(number)
            return StepOutcome(
                index=index,
                step=step,
                success=False,
                message=message,
                screenshot=shot,
                duration_ms=self._elapsed_ms(start_time),
            )

        return StepOutcome(
            index=index,
            step=step,
            success=True,
            screenshot=screenshot,
            duration_ms=self._elapsed_ms(start_time),
        )

    @staticmethod
    def _elapsed_ms(start_time: float) -> int:
        return int((time.monotonic() - start_time) * 1000)

    async def _dispatch(self, number: int, step: Step) -> str | None:
        match step:
            case NavigateStep():
                await self._navigate(number, step)
            case ClickStep():
                await self._click(number, step)
            case TypeStep():
                await self._type(number, step)
            case FillStep():
                await self._fill(number, step)
            case WaitForSelectorStep():
                await self._wait_for_selector(number, step)
            case ExpectVisibleStep():
                await self._expect_visible(number, step)
            case ExpectTextStep():
                await self._expect_text(number, step)
            case WaitStep():
                await self._wait(number, step)
            case ScreenshotStep():
                return await self._screenshot(number, step)
            case _:
                assert_never(step)
        return None

    def _wait_timeout(self, timeout_ms: int | None) -> int:
        # 0 is a valid timeout (no limit), only a missing value gets the default
        return timeout_ms if timeout_ms is not None else self.default_wait_timeout_ms

    async def _failure_screenshot(self, number: int) -> str | None:
        path = self.artifacts_dir / f"error-step-{number}.png"
        try:
            await self.session.screenshot(str(path))
        except Exception as e:
            logger.warning(f"Failure screenshot for step {number} could not be captured: {e}")
            return None
        return str(path)

    def resolve_url(self, step: NavigateStep) -> str:
        """Pick the navigation target: explicit url, then path against base URL."""
        if step.url:
            return step.url
        if not self.base_url:
            raise ConfigurationError("navigate requires url, or path with a base URL")
        if step.path:
            return urljoin(self.base_url, step.path)
        return self.base_url

    async def _navigate(self, number: int, step: NavigateStep) -> None:
        await self.session.navigate(self.resolve_url(step), wait_until="networkidle")

    async def _click(self, number: int, step: ClickStep) -> None:
        await self.session.click(step.selector)

    async def _type(self, number: int, step: TypeStep) -> None:
        await self.session.fill(step.selector, "")
        await self.session.type_text(step.selector, step.text)
        if step.press_enter:
            await self.session.press_key("Enter")

    async def _fill(self, number: int, step: FillStep) -> None:
        await self.session.fill(step.selector, step.text)

    async def _wait_for_selector(self, number: int, step: WaitForSelectorStep) -> None:
        await self.session.wait_for_selector(
            step.selector,
            state=step.state,
            timeout_ms=self._wait_timeout(step.timeout_ms),
        )

    async def _expect_visible(self, number: int, step: ExpectVisibleStep) -> None:
        await self.session.wait_for_selector(
            step.selector,
            state="visible",
            timeout_ms=self._wait_timeout(step.timeout_ms),
        )

    async def _expect_text(self, number: int, step: ExpectTextStep) -> None:
        await self.session.wait_for_selector(
            step.selector,
            state="visible",
            timeout_ms=self._wait_timeout(step.timeout_ms),
        )
        content = await self.session.read_text(step.selector)
        if not content or step.text not in content:
            raise ExpectationError(
                f'Expected text "{step.text}" in {step.selector}, got: {content or "<empty>"}'
            )

    async def _wait(self, number: int, step: WaitStep) -> None:
        logger.info(f"Waiting {step.ms}ms")
        await asyncio.sleep(step.ms / 1000)

    async def _screenshot(self, number: int, step: ScreenshotStep) -> str | None:
        name = f"{number}-{slugify(step.name)}" if step.name else f"{number}-screenshot"
        path = self.artifacts_dir / f"{name}.png"
        try:
            await self.session.screenshot(str(path))
        except Exception as e:
            # Screenshot steps never fail the run
            logger.warning(f"Screenshot step {number} could not be captured: {e}")
            return None
        logger.info(f"Screenshot saved: {path}")
        return str(path)
