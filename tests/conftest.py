from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from debugmcp.models.config_models import DebugConfig


class FakeAutomation:
    """Scripted stand-in for the browser automation collaborator."""

    def __init__(self, texts: Optional[Dict[str, str]] = None, missing: Optional[set] = None):
        self.texts = dict(texts or {})
        self.missing = set(missing or ())
        self.calls: List[tuple] = []
        self.page_open = False
        self.close_calls = 0
        self.fail_page = False
        self.fail_screenshots = False

    @property
    def has_page(self) -> bool:
        return self.page_open

    def _not_found(self, selector: str) -> Dict[str, Any]:
        return {
            "success": False,
            "isError": True,
            "error": f"Element not found: {selector}",
            "error_type": "ElementNotFound",
            "selector": selector,
        }

    async def ensure_page(self) -> Dict[str, Any]:
        self.calls.append(("ensure_page",))
        if self.fail_page:
            return {"success": False, "error": "browser failed to launch", "error_type": "AutomationError"}
        self.page_open = True
        return {"success": True, "output": "Browser page opened"}

    async def navigate(self, url: str) -> Dict[str, Any]:
        self.calls.append(("navigate", url))
        return {"success": True, "output": f"Successfully navigated to {url}", "url": url}

    async def click(self, selector: str) -> Dict[str, Any]:
        self.calls.append(("click", selector))
        if selector in self.missing:
            return self._not_found(selector)
        return {"success": True, "output": f"Successfully clicked element: {selector}"}

    async def type(self, selector: str, text: str, clear_first: bool = False) -> Dict[str, Any]:
        self.calls.append(("type", selector, text, clear_first))
        if selector in self.missing:
            return self._not_found(selector)
        return {"success": True, "output": f'Successfully typed "{text}"'}

    async def extract(self, selector: str, attribute: str = "textContent") -> Dict[str, Any]:
        self.calls.append(("extract", selector, attribute))
        if selector in self.missing or selector not in self.texts:
            return self._not_found(selector)
        return {"success": True, "value": self.texts[selector]}

    async def screenshot(self, full_page: bool = False, path: Optional[Path] = None) -> Dict[str, Any]:
        self.calls.append(("screenshot", full_page, str(path)))
        if self.fail_screenshots:
            return {"success": False, "error": "no page", "error_type": "AutomationError"}
        return {"success": True, "path": str(path)}

    async def close(self) -> None:
        self.close_calls += 1
        self.page_open = False

    def actions(self) -> List[tuple]:
        """Calls that act on the page, without page setup and screenshots."""
        return [c for c in self.calls if c[0] not in ("ensure_page", "screenshot")]


@pytest.fixture
def config(tmp_path: Path) -> DebugConfig:
    return DebugConfig(OUTPUT_DIR=str(tmp_path / "output"), DEFAULT_WAIT_MS=0)


@pytest.fixture
def automation() -> FakeAutomation:
    return FakeAutomation(texts={"#title": "Welcome", "#x": "Y"})


def three_steps() -> List[Dict[str, Any]]:
    return [
        {"id": "s1", "type": "navigate", "params": {"url": "https://example.com"}},
        {"id": "s2", "type": "click", "params": {"selector": "#login"}},
        {"id": "s3", "type": "extract", "params": {"selector": "#title"}},
    ]
