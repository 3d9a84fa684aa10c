"""Timestamped log lines and named screenshots for a debug session."""

import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from debugmcp.models.config_models import DebugConfig
from debugmcp.models.session_models import DebugSession

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^\w.-]+")


class DiagnosticsSink:
    """Accumulates diagnostics on a session.

    Log lines and screenshot names are appended to the session synchronously,
    in the order the controller reports them.
    """

    def __init__(self, session: DebugSession, automation: Any, config: Optional[DebugConfig] = None):
        self.session = session
        self.automation = automation
        self.config = config or DebugConfig()

    def log(self, message: str) -> str:
        timestamp = datetime.now(timezone.utc).isoformat()
        entry = f"[{timestamp}] {message}"
        logger.info(entry)
        self.session.logs.append(entry)
        return entry

    def reset_logs(self) -> None:
        self.session.logs.clear()

    def screenshot_path(self, tag: str) -> Path:
        """Return ``<debug dir>/<test>_<tag>_<timestamp>.png``."""
        timestamp = datetime.now().strftime("%Y-%m-%dT%H-%M-%S-%f")
        stem = _UNSAFE_FILENAME_CHARS.sub("_", f"{self.session.name or 'debug'}_{tag}_{timestamp}")
        return self.config.debug_dir / f"{stem}.png"

    def record_screenshot(self, path: Any) -> str:
        name = Path(str(path)).name
        self.session.screenshots.append(name)
        self.log(f"Screenshot captured: {name}")
        return name

    async def take_screenshot(self, tag: str, full_page: bool = True) -> Dict[str, Any]:
        """Capture a screenshot named after ``tag`` and record it on success."""
        result = await self.automation.screenshot(full_page=full_page, path=self.screenshot_path(tag))
        if result.get("success"):
            result["name"] = self.record_screenshot(result.get("path"))
        return result

    async def capture(self, tag: str) -> Optional[str]:
        """Best-effort diagnostic capture; failures are logged, never raised."""
        try:
            result = await self.take_screenshot(tag)
        except Exception as e:
            logger.error(f"Error taking debug screenshot '{tag}': {e}")
            return None
        if not result.get("success"):
            logger.warning(f"Debug screenshot '{tag}' not captured: {result.get('error')}")
            return None
        return result["name"]
