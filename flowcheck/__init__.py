"""flowcheck - declarative browser user-flow runner with runtime signal checks."""

from flowcheck.core import (
    ConfigurationError,
    DefinitionError,
    FlowCheckError,
    GlobalOverrides,
    RunnerConfig,
    StepActionError,
    TestDefinition,
    ToleranceConfig,
)
from flowcheck.runner import (
    FlowRunner,
    RunSummary,
    SignalCollector,
    StepExecutor,
    StepOutcome,
    evaluate,
    load_test_definition,
)

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Core
    "TestDefinition",
    "ToleranceConfig",
    "RunnerConfig",
    "GlobalOverrides",
    # Exceptions
    "FlowCheckError",
    "ConfigurationError",
    "DefinitionError",
    "StepActionError",
    # Runner
    "FlowRunner",
    "StepExecutor",
    "StepOutcome",
    "SignalCollector",
    "evaluate",
    "RunSummary",
    "load_test_definition",
]
