"""Custom exceptions for flowcheck."""


class FlowCheckError(Exception):
    """Base exception for flowcheck errors."""

    def __init__(
        self,
        message: str,
        type: str = "unknown",
        severity: str = "medium",
        details: dict | None = None,
    ) -> None:
        """Initialize error.

        Args:
            message: Error message
            type: Short machine-readable error kind
            severity: blocker, high, medium or low
            details: Extra context for reports
        """
        super().__init__(message)
        self.type = type
        self.severity = severity
        self.details = details or {}


class ConfigurationError(FlowCheckError):
    """Raised when a run cannot start or a step lacks a usable URL."""

    def __init__(self, message: str) -> None:
        super().__init__(message, type="configuration", severity="blocker")


class DefinitionError(FlowCheckError):
    """Raised when a test definition file cannot be loaded or validated."""

    def __init__(self, path: str, reason: str) -> None:
        """Initialize error.

        Args:
            path: Path of the offending file
            reason: Why loading failed
        """
        self.path = path
        super().__init__(f"Invalid test definition {path}: {reason}", type="definition", severity="blocker")


class StepActionError(FlowCheckError):
    """Raised when a single step does not satisfy its contract."""

    def __init__(self, message: str, type: str = "step_action") -> None:
        super().__init__(message, type=type, severity="high")


class NavigationError(StepActionError):
    """Raised when navigation fails."""

    def __init__(self, message: str) -> None:
        super().__init__(message, type="navigation")


class ElementNotFoundError(StepActionError):
    """Raised when element interaction fails."""

    def __init__(self, message: str) -> None:
        super().__init__(message, type="element_not_found")


class ExpectationError(StepActionError):
    """Raised when an expectation step does not hold."""

    def __init__(self, message: str) -> None:
        super().__init__(message, type="expectation")
