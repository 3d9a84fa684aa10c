"""Interactive debugging components."""

from .assertion_evaluator import AssertionEvaluator, AssertionOutcome
from .diagnostics import DiagnosticsSink
from .execution_controller import ExecutionController
from .session_manager import DebugSessionManager
from .step_source import decode_step_source

__all__ = [
    "AssertionEvaluator",
    "AssertionOutcome",
    "DiagnosticsSink",
    "ExecutionController",
    "DebugSessionManager",
    "decode_step_source",
]
