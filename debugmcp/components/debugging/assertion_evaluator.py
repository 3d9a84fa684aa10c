"""Evaluation of text assertions against the live page."""

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from debugmcp.components.debugging.errors import error_from_result

logger = logging.getLogger(__name__)

_QUERY_SELECTOR = re.compile(r"""document\.querySelector\(\s*(["'])(.+?)\1\s*\)""")
_TEXT_PROPERTY = re.compile(r"\.(textContent|innerText)\b")
_EXPECTED_LITERAL = re.compile(r"""===?\s*(["'])(.*?)\1""")


@dataclass
class AssertionOutcome:
    passed: bool
    evaluated: bool
    selector: Optional[str] = None
    expected: Optional[str] = None
    actual: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "passed": self.passed,
            "evaluated": self.evaluated,
            "selector": self.selector,
            "expected": self.expected,
            "actual": self.actual,
        }


class AssertionEvaluator:
    """Evaluate ``document.querySelector('X').textContent === 'Y'`` assertions.

    Only that shape is understood. Anything else is logged as a warning and
    treated as passing; the outcome is flagged ``evaluated=False`` so callers
    can tell a real pass from a skipped check.
    """

    def __init__(self, automation: Any, warn: Optional[Callable[[str], Any]] = None):
        self.automation = automation
        self.warn = warn or logger.warning

    @staticmethod
    def parse(assertion: str) -> Optional[Tuple[str, str]]:
        """Return ``(selector, expected)`` or None for unsupported shapes."""
        selector_match = _QUERY_SELECTOR.search(assertion)
        if not selector_match or not _TEXT_PROPERTY.search(assertion[selector_match.end():]):
            return None
        expected_match = _EXPECTED_LITERAL.search(assertion, selector_match.end())
        if not expected_match:
            return None
        return selector_match.group(2), expected_match.group(2)

    async def evaluate(self, assertion: str) -> AssertionOutcome:
        parsed = self.parse(assertion or "")
        if parsed is None:
            self.warn(f"Warning: Couldn't fully evaluate assertion: {assertion}, assuming true")
            return AssertionOutcome(passed=True, evaluated=False)

        selector, expected = parsed
        result = await self.automation.extract(selector, "textContent")
        if not result.get("success"):
            raise error_from_result(result, default_selector=selector)

        actual = (result.get("value") or "").strip()
        return AssertionOutcome(
            passed=actual == expected,
            evaluated=True,
            selector=selector,
            expected=expected,
            actual=actual,
        )
