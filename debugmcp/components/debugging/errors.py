"""Error taxonomy of the debug engine.

Every error carries an ``error_type`` name that is echoed to MCP clients so
they can branch on the failure kind without parsing messages.
"""

from typing import Any, Dict, List, Optional, Type


class DebugError(Exception):
    """Base class for all debug engine failures."""

    error_type = "DebugError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SessionNotActive(DebugError):
    """Raised when an operation needs a session and none exists."""

    error_type = "SessionNotActive"

    def __init__(self, message: str = "No debug session is active. Use debug_test first."):
        super().__init__(message)


class UnknownSession(DebugError):
    """Raised when a run names a session other than the active one."""

    error_type = "UnknownSession"

    def __init__(self, test_name: str, active_name: Optional[str] = None):
        message = f'No debug test with name "{test_name}" is prepared. Use debug_test first.'
        if active_name:
            message = f'{message} Active debug test is "{active_name}".'
        super().__init__(message)
        self.test_name = test_name


class NoStepsDefined(DebugError):
    error_type = "NoStepsDefined"

    def __init__(self, test_name: str):
        super().__init__(f'Debug test "{test_name}" has no steps defined.')


class ElementNotFound(DebugError):
    error_type = "ElementNotFound"

    def __init__(self, selector: str, message: Optional[str] = None):
        super().__init__(message or f"Element not found: {selector}")
        self.selector = selector


class AssertionFailure(DebugError):
    error_type = "AssertionFailure"


class UnknownStepType(DebugError):
    error_type = "UnknownStepType"

    def __init__(self, step_type: str):
        super().__init__(f"Unknown step type: {step_type}")
        self.step_type = step_type


class NotPaused(DebugError):
    error_type = "NotPaused"

    def __init__(self, message: str = "Debug session is not paused."):
        super().__init__(message)


class UnsupportedStepType(DebugError):
    error_type = "UnsupportedStepType"

    def __init__(self, step_type: str, reason: str):
        super().__init__(f"Step type '{step_type}' is not supported: {reason}")
        self.step_type = step_type


class InvalidArgument(DebugError):
    """Raised when a tool argument is malformed."""

    error_type = "InvalidArgument"


class InvalidStepRange(DebugError):
    """Raised when a run range does not select any existing step."""

    error_type = "InvalidStepRange"


class InvalidStepSource(DebugError):
    """Raised when a structured step list or a step edit fails validation."""

    error_type = "InvalidStepSource"

    def __init__(self, problems: List[str]):
        super().__init__("Invalid step source: " + "; ".join(problems))
        self.problems = list(problems)


class AutomationError(DebugError):
    """A browser primitive reported a failure other than a missing element."""

    error_type = "AutomationError"


_ERRORS_BY_TYPE: Dict[str, Type[DebugError]] = {
    cls.error_type: cls
    for cls in (AssertionFailure, AutomationError)
}


def error_from_result(result: Dict[str, Any], default_selector: str = "") -> DebugError:
    """Convert a failed automation result back into a typed error.

    Args:
        result: Automation collaborator response with ``success`` False.
        default_selector: Selector to report when the result names none.

    Returns:
        DebugError: ``ElementNotFound`` for missing elements, otherwise the
        class named by ``error_type`` or ``AutomationError``.
    """
    message = result.get("error") or "Automation action failed"
    error_type = result.get("error_type")
    if error_type == ElementNotFound.error_type:
        return ElementNotFound(result.get("selector") or default_selector, message)
    cls = _ERRORS_BY_TYPE.get(error_type or "", AutomationError)
    return cls(message)


def error_payload(
    error: Exception,
    logs: Optional[List[str]] = None,
    screenshots: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """Build the structured tool response for a failed operation."""
    error_type = getattr(error, "error_type", type(error).__name__)
    payload: Dict[str, Any] = {
        "success": False,
        "isError": True,
        "error": str(error),
        "error_type": error_type,
        "logs": list(logs or []),
        "screenshots": list(screenshots or []),
    }
    problems = getattr(error, "problems", None)
    if problems:
        payload["problems"] = list(problems)
    return payload
