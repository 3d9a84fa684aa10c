"""Decoding of structured step lists into debug steps."""

import json
import logging
from pathlib import Path
from typing import Any, List, Union

from debugmcp.components.debugging.errors import InvalidStepSource
from debugmcp.models.step_models import DebugStep
from debugmcp.utils.validation import StepValidator

logger = logging.getLogger(__name__)

StepSource = Union[str, List[Any]]


def decode_step_source(source: StepSource) -> List[DebugStep]:
    """Decode and validate a list of ``{id, type, params}`` records.

    Args:
        source: Either the list itself or its JSON text.

    Returns:
        List[DebugStep]: Pending steps in source order.

    Raises:
        InvalidStepSource: When the source is not a list of valid records or
            repeats a step id. All problems are reported at once.
    """
    records = source
    if isinstance(source, str):
        try:
            records = json.loads(source)
        except json.JSONDecodeError as e:
            raise InvalidStepSource([f"Step source is not valid JSON: {e.msg} (line {e.lineno})"])

    if not isinstance(records, list):
        raise InvalidStepSource(["Step source must be a list of step records"])

    problems: List[str] = []
    seen = set()
    for position, record in enumerate(records):
        problems.extend(StepValidator.validate_record(record, position))
        step_id = record.get("id") if isinstance(record, dict) else None
        if isinstance(step_id, str):
            if step_id in seen:
                problems.append(f"Step {position}: duplicate step id '{step_id}'")
            seen.add(step_id)

    if problems:
        raise InvalidStepSource(problems)

    steps = [
        DebugStep(
            step_id=record["id"],
            step_type=record["type"],
            params=dict(record.get("params") or {}),
        )
        for record in records
    ]
    logger.debug(f"Decoded {len(steps)} steps from step source")
    return steps


def encode_steps(steps: List[DebugStep]) -> str:
    """Serialize steps back to the structured source format."""
    return json.dumps(
        [
            {"id": step.step_id, "type": step.step_type, "params": step.params}
            for step in steps
        ],
        indent=2,
    )


def persist_step_source(steps: List[DebugStep], directory: Path, test_name: str) -> Path:
    """Write the step list to ``<directory>/<test_name>.steps.json``."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{test_name}.steps.json"
    path.write_text(encode_steps(steps), encoding="utf-8")
    return path
