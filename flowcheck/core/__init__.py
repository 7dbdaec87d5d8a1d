"""Core models, configuration and exceptions."""

from flowcheck.core.config import GlobalOverrides, RunnerConfig
from flowcheck.core.exceptions import (
    ConfigurationError,
    DefinitionError,
    ElementNotFoundError,
    ExpectationError,
    FlowCheckError,
    NavigationError,
    StepActionError,
)
from flowcheck.core.models import (
    ClickStep,
    ExpectTextStep,
    ExpectVisibleStep,
    FillStep,
    NavigateStep,
    ScreenshotStep,
    Step,
    TestDefinition,
    ToleranceConfig,
    TypeStep,
    WaitForSelectorStep,
    WaitStep,
)

__all__ = [
    # Config
    "RunnerConfig",
    "GlobalOverrides",
    # Exceptions
    "FlowCheckError",
    "ConfigurationError",
    "DefinitionError",
    "StepActionError",
    "NavigationError",
    "ElementNotFoundError",
    "ExpectationError",
    # Models
    "TestDefinition",
    "ToleranceConfig",
    "Step",
    "NavigateStep",
    "ClickStep",
    "TypeStep",
    "FillStep",
    "WaitForSelectorStep",
    "ExpectVisibleStep",
    "ExpectTextStep",
    "WaitStep",
    "ScreenshotStep",
]
