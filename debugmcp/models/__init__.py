"""Data models for the debugmcp package."""

from .step_models import DebugStep, StepStore, STEP_TYPES
from .session_models import DebugSession, RunReport, RunState
from .config_models import DebugConfig

__all__ = [
    'DebugStep',
    'StepStore',
    'STEP_TYPES',
    'DebugSession',
    'RunReport',
    'RunState',
    'DebugConfig'
]
