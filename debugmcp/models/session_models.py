"""Session-related data models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from .step_models import StepStore


class RunState(Enum):
    """Execution states of a debug session."""

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class DebugSession:
    """Mutable container of steps, position, breakpoints and diagnostics."""

    name: str
    steps: StepStore = field(default_factory=StepStore)
    current_index: int = -1
    breakpoints: List[str] = field(default_factory=list)
    paused: bool = False
    active: bool = True
    state: RunState = RunState.IDLE
    logs: List[str] = field(default_factory=list)
    screenshots: List[str] = field(default_factory=list)
    browser_ready: bool = False
    last_error: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)
    last_activity: datetime = field(default_factory=datetime.now)

    def set_breakpoints(self, step_ids: Optional[List[str]]) -> None:
        """Replace the breakpoint set, keeping first-seen order."""
        self.breakpoints = list(dict.fromkeys(step_ids or []))
        self.update_activity()

    def has_breakpoint(self, step_id: str) -> bool:
        return step_id in self.breakpoints

    def reset(self) -> None:
        """Return every field to its empty, idle value."""
        self.steps.clear()
        self.current_index = -1
        self.breakpoints = []
        self.paused = False
        self.active = False
        self.state = RunState.IDLE
        self.logs.clear()
        self.screenshots.clear()
        self.browser_ready = False
        self.last_error = None

    def update_activity(self) -> None:
        """Update the last activity timestamp."""
        self.last_activity = datetime.now()

    @property
    def is_completed(self) -> bool:
        return self.state == RunState.COMPLETED

    @property
    def is_failed(self) -> bool:
        return self.state == RunState.FAILED

    def snapshot(self, include_step_results: bool = True) -> Dict[str, Any]:
        """Serialize the session for ``get_debug_state``."""
        return {
            "test_name": self.name,
            "current_step_index": self.current_index,
            "paused": self.paused,
            "state": self.state.value,
            "breakpoints": list(self.breakpoints),
            "steps": self.steps.to_list(include_results=include_step_results),
            "logs": list(self.logs),
            "screenshots": list(self.screenshots),
        }


@dataclass
class RunReport:
    """Outcome of one call into the execution controller."""

    test_name: str
    current_index: int
    paused: bool
    state: RunState
    logs: List[str] = field(default_factory=list)
    screenshots: List[str] = field(default_factory=list)
    failed_index: Optional[int] = None
    error: Optional[str] = None
    error_type: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.state == RunState.FAILED

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "success": not self.failed,
            "test_name": self.test_name,
            "current_step_index": self.current_index,
            "paused": self.paused,
            "state": self.state.value,
            "logs": list(self.logs),
            "screenshots": list(self.screenshots),
        }
        if self.failed:
            data.update(
                {
                    "isError": True,
                    "failed_step_index": self.failed_index,
                    "error": self.error,
                    "error_type": self.error_type,
                }
            )
        return data
