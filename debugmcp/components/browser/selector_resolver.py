"""Self-healing element lookup."""

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

logger = logging.getLogger(__name__)

# "#name" exactly, no combinators or pseudo classes
_ID_SELECTOR = re.compile(r"^#([A-Za-z_][\w-]*)$")
# Playwright text clause, e.g. button:has-text("Submit") or :has-text('Submit')
_HAS_TEXT_CLAUSE = re.compile(r""":has-text\((["'])(.+?)\1\)""")


@dataclass
class Resolution:
    """Element found for a logical selector."""

    handle: Any
    selector: str
    original: str

    @property
    def healed(self) -> bool:
        return self.selector != self.original


class SelectorResolver:
    """Resolve a selector to a live element, trying bounded fallbacks.

    Candidates, in order: the selector as given, a ``data-testid`` selector
    when the original is an id selector, and a text-equality selector when
    the original carries a ``:has-text(...)`` clause. At most two fallbacks
    are tried and the first match wins.

    Args:
        query: Callable returning an element handle for a selector, or None
            when nothing matches.
    """

    def __init__(self, query: Callable[[str], Optional[Any]]):
        self.query = query

    @staticmethod
    def candidates(selector: str) -> List[str]:
        """Return the selectors to try for ``selector``, primary first."""
        candidates = [selector]

        id_match = _ID_SELECTOR.match(selector)
        if id_match:
            candidates.append(f'[data-testid="{id_match.group(1)}"]')

        text_match = _HAS_TEXT_CLAUSE.search(selector)
        if text_match:
            text = text_match.group(2).replace('"', '\\"')
            candidates.append(f'text="{text}"')

        return candidates

    def resolve(self, selector: str) -> Optional[Resolution]:
        """Find the element for ``selector`` or return None on a clean miss."""
        for candidate in self.candidates(selector):
            handle = self._query(candidate)
            if handle is None:
                continue
            if candidate != selector:
                logger.info(f"Self-healed selector: {selector} -> {candidate}")
            return Resolution(handle=handle, selector=candidate, original=selector)

        logger.debug(f"No element matched selector {selector} or its fallbacks")
        return None

    def _query(self, selector: str) -> Optional[Any]:
        try:
            return self.query(selector)
        except Exception as e:
            # A malformed fallback must not hide the remaining strategies
            logger.debug(f"Selector lookup failed for {selector}: {e}")
            return None
