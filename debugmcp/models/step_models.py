"""Step-related data models."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)

STEP_TYPES = (
    "navigate",
    "click",
    "type",
    "extract",
    "screenshot",
    "wait",
    "assert",
    "execute",
)

STATUS_PENDING = "pending"
STATUS_RUNNING = "running"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"


@dataclass
class DebugStep:
    """Represents a single automation step of a debug session."""
    step_id: str
    step_type: str
    params: Dict[str, Any] = field(default_factory=dict)
    status: str = STATUS_PENDING  # pending, running, completed, failed
    result: Optional[Any] = None
    screenshot_ref: Optional[str] = None
    error: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    def mark_running(self) -> None:
        """Mark the step as currently running."""
        self.status = STATUS_RUNNING
        self.start_time = datetime.now()
        self.end_time = None
        self.error = None

    def mark_completed(self, result: Any = None) -> None:
        """Mark the step as successfully completed."""
        self.status = STATUS_COMPLETED
        self.end_time = datetime.now()
        self.result = result

    def mark_failed(self, error: str) -> None:
        """Mark the step as failed."""
        self.status = STATUS_FAILED
        self.end_time = datetime.now()
        self.error = error

    def reset(self) -> None:
        """Return the step to its never-run state."""
        self.status = STATUS_PENDING
        self.result = None
        self.screenshot_ref = None
        self.error = None
        self.start_time = None
        self.end_time = None

    @property
    def execution_time(self) -> float:
        """Calculate execution time in seconds."""
        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return 0.0

    @property
    def is_pending(self) -> bool:
        return self.status == STATUS_PENDING

    @property
    def is_failed(self) -> bool:
        return self.status == STATUS_FAILED

    def to_dict(self, include_result: bool = True) -> Dict[str, Any]:
        """Serialize the step for tool responses."""
        data: Dict[str, Any] = {
            "id": self.step_id,
            "type": self.step_type,
            "params": dict(self.params),
            "status": self.status,
        }
        if include_result:
            data["result"] = self.result
            data["error"] = self.error
            data["screenshot"] = self.screenshot_ref
            data["execution_time"] = self.execution_time
        return data


class StepStore:
    """Ordered, mutable collection of steps keyed by unique step id.

    Insertion order is execution order. Ids are stable: moving other steps
    around never changes which step an id refers to.
    """

    def __init__(self, steps: Optional[List[DebugStep]] = None):
        self._steps: List[DebugStep] = []
        if steps:
            self.replace_all(steps)

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self) -> Iterator[DebugStep]:
        return iter(self._steps)

    def __getitem__(self, index: int) -> DebugStep:
        return self._steps[index]

    def __bool__(self) -> bool:
        return bool(self._steps)

    @property
    def last_index(self) -> int:
        return len(self._steps) - 1

    def ids(self) -> List[str]:
        return [step.step_id for step in self._steps]

    def index_of(self, step_id: str) -> int:
        """Return the position of ``step_id`` or -1 when it is not stored."""
        for index, step in enumerate(self._steps):
            if step.step_id == step_id:
                return index
        return -1

    def get(self, step_id: str) -> Optional[DebugStep]:
        index = self.index_of(step_id)
        return self._steps[index] if index >= 0 else None

    def replace_all(self, steps: List[DebugStep]) -> None:
        """Replace the whole list; ids must be unique."""
        seen = set()
        for step in steps:
            if step.step_id in seen:
                raise ValueError(f"Duplicate step id: {step.step_id}")
            seen.add(step.step_id)
        self._steps = list(steps)

    def upsert(
        self,
        step_id: str,
        step_type: str,
        params: Dict[str, Any],
        index: Optional[int] = None,
    ) -> Tuple[int, bool]:
        """Update a step in place or insert a new one.

        Args:
            step_id: Identifier of the step to update or create.
            step_type: Step type to store.
            params: Step parameters to store.
            index: Insert position for a new step; ignored for updates and
                when outside ``[0, len]``, in which case the step is appended.

        Returns:
            tuple: (position, created) where created is False for updates.
        """
        existing = self.index_of(step_id)
        if existing >= 0:
            step = self._steps[existing]
            step.step_type = step_type
            step.params = dict(params)
            step.reset()
            logger.debug(f"Updated step {step_id} at index {existing}")
            return existing, False

        step = DebugStep(step_id=step_id, step_type=step_type, params=dict(params))
        if index is not None and 0 <= index <= len(self._steps):
            self._steps.insert(index, step)
            position = index
        else:
            self._steps.append(step)
            position = len(self._steps) - 1
        logger.debug(f"Added step {step_id} at index {position}")
        return position, True

    def reset_range(self, start: int, end: int) -> None:
        """Reset every step in ``[start, end]`` to pending."""
        for step in self._steps[max(0, start):end + 1]:
            step.reset()

    def clear(self) -> None:
        self._steps = []

    def to_list(self, include_results: bool = True) -> List[Dict[str, Any]]:
        return [step.to_dict(include_result=include_results) for step in self._steps]
