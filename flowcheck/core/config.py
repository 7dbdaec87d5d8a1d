"""Run configuration and global override flags."""

import os
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, Field

# Default timeouts (can be overridden per run)
DEFAULT_NAV_TIMEOUT_MS = int(os.environ.get("NAV_TIMEOUT_MS", "30000"))
DEFAULT_ACTION_TIMEOUT_MS = int(os.environ.get("ACTION_TIMEOUT_MS", "30000"))
DEFAULT_WAIT_TIMEOUT_MS = 10000

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in _TRUTHY


class RunnerConfig(BaseModel):
    """Configuration for a single flow run."""

    base_url: str | None = None  # overrides the definition's baseUrl
    output_dir: Path = Path("reports")
    headless: bool = True
    slow_mo_ms: int = 0
    nav_timeout_ms: int = Field(default_factory=lambda: DEFAULT_NAV_TIMEOUT_MS)
    action_timeout_ms: int = Field(default_factory=lambda: DEFAULT_ACTION_TIMEOUT_MS)
    default_wait_timeout_ms: int = DEFAULT_WAIT_TIMEOUT_MS


@dataclass(frozen=True)
class GlobalOverrides:
    """Ad-hoc triage switches that neutralize whole signal categories."""

    ignore_http_errors: bool = False
    ignore_console_errors: bool = False
    ignore_page_errors: bool = False
    ignore_request_failures: bool = False

    @classmethod
    def from_env(cls) -> "GlobalOverrides":
        return cls(
            ignore_http_errors=_env_flag("FLOWCHECK_IGNORE_HTTP_ERRORS"),
            ignore_console_errors=_env_flag("FLOWCHECK_IGNORE_CONSOLE_ERRORS"),
            ignore_page_errors=_env_flag("FLOWCHECK_IGNORE_PAGE_ERRORS"),
            ignore_request_failures=_env_flag("FLOWCHECK_IGNORE_REQUEST_FAILURES"),
        )

    def merge(self, other: "GlobalOverrides") -> "GlobalOverrides":
        """Combine two override sets; a flag set in either stays set."""
        return GlobalOverrides(
            ignore_http_errors=self.ignore_http_errors or other.ignore_http_errors,
            ignore_console_errors=self.ignore_console_errors or other.ignore_console_errors,
            ignore_page_errors=self.ignore_page_errors or other.ignore_page_errors,
            ignore_request_failures=self.ignore_request_failures or other.ignore_request_failures,
        )
