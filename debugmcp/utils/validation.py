"""Validation utilities for the debug MCP server."""

import logging
import re
from numbers import Number
from typing import Any, Dict, List, Optional, Tuple

from debugmcp.models.step_models import STEP_TYPES

logger = logging.getLogger(__name__)

# Parameters each step type cannot run without
REQUIRED_PARAMS: Dict[str, Tuple[str, ...]] = {
    "navigate": ("url",),
    "click": ("selector",),
    "type": ("selector", "text"),
    "extract": ("selector",),
    "screenshot": (),
    "wait": (),
    "assert": ("assertion",),
    "execute": (),
}

_STEP_ID_PATTERN = re.compile(r"^[\w.:-]+$")


class StepValidator:
    """Validates structured step records and step edits."""

    @staticmethod
    def validate_step_id(step_id: Any) -> Tuple[bool, Optional[str]]:
        """Validate a step identifier."""
        if not isinstance(step_id, str) or not step_id.strip():
            return False, "Step id must be a non-empty string"

        if len(step_id) > 128:
            return False, "Step id too long - maximum 128 characters"

        if not _STEP_ID_PATTERN.match(step_id):
            return False, f"Step id '{step_id}' may only contain letters, digits, '_', '-', '.', ':'"

        return True, None

    @staticmethod
    def validate_step_type(step_type: Any) -> Tuple[bool, Optional[str]]:
        """Validate a step type against the supported vocabulary."""
        if step_type not in STEP_TYPES:
            return False, f"Step type must be one of: {', '.join(STEP_TYPES)}"
        return True, None

    @staticmethod
    def validate_params(step_type: str, params: Any) -> List[str]:
        """Validate parameters for a known step type and return any problems."""
        if not isinstance(params, dict):
            return ["Step params must be an object"]

        problems = []
        for name in REQUIRED_PARAMS.get(step_type, ()):
            value = params.get(name)
            if not isinstance(value, str) or (name != "text" and not value.strip()):
                problems.append(f"'{step_type}' step requires string param '{name}'")

        if step_type == "wait" and "ms" in params:
            ms = params["ms"]
            if isinstance(ms, bool) or not isinstance(ms, Number) or ms < 0:
                problems.append("'wait' step param 'ms' must be a non-negative number")

        if step_type == "extract" and "attribute" in params:
            if not isinstance(params["attribute"], str) or not params["attribute"]:
                problems.append("'extract' step param 'attribute' must be a non-empty string")

        for flag in ("clearFirst", "fullPage"):
            if flag in params and not isinstance(params[flag], bool):
                problems.append(f"'{step_type}' step param '{flag}' must be a boolean")

        return problems

    @classmethod
    def validate_record(cls, record: Any, position: int = 0) -> List[str]:
        """Validate one ``{id, type, params}`` record."""
        if not isinstance(record, dict):
            return [f"Step {position}: record must be an object"]

        problems = []
        ok, error = cls.validate_step_id(record.get("id"))
        if not ok:
            problems.append(f"Step {position}: {error}")

        step_type = record.get("type")
        ok, error = cls.validate_step_type(step_type)
        if not ok:
            problems.append(f"Step {position}: {error}")
        else:
            for problem in cls.validate_params(step_type, record.get("params", {})):
                problems.append(f"Step {position}: {problem}")

        unknown = set(record) - {"id", "type", "params"}
        if unknown:
            problems.append(
                f"Step {position}: unexpected fields {', '.join(sorted(unknown))}"
            )

        return problems


class InputValidator:
    """Validates inputs for MCP tools."""

    @staticmethod
    def validate_test_name(test_name: Any) -> Tuple[bool, Optional[str]]:
        """Validate a debug test name; it also names files on disk."""
        if not isinstance(test_name, str) or not test_name.strip():
            return False, "Test name cannot be empty"

        if len(test_name) > 200:
            return False, "Test name too long - maximum 200 characters"

        if re.search(r'[<>:"/\\|?*]', test_name):
            return False, "Test name contains invalid characters"

        return True, None

    @staticmethod
    def validate_breakpoints(break_at: Any) -> Tuple[bool, Optional[str]]:
        """Validate a list of breakpoint step ids."""
        if break_at is None:
            return True, None

        if not isinstance(break_at, list) or not all(isinstance(b, str) for b in break_at):
            return False, "Breakpoints must be a list of step ids"

        return True, None
