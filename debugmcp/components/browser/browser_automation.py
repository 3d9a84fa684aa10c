"""Browser automation primitives backed by Robot Framework Browser Library."""

import asyncio
import logging
from datetime import timedelta
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from debugmcp.components.browser.selector_resolver import Resolution, SelectorResolver
from debugmcp.models.config_models import DebugConfig

logger = logging.getLogger(__name__)

BROWSER_INSTALL_HINT = (
    "Install via `pip install robotframework-browser` and run `rfbrowser init`."
)

# Check for Browser Library availability
try:
    from Browser import Browser as BrowserLibrary
    from Browser.utils.data_types import SelectionType, SupportedBrowsers
    BROWSER_LIBRARY_AVAILABLE = True
except ImportError:
    BrowserLibrary = None
    SelectionType = None
    SupportedBrowsers = None
    BROWSER_LIBRARY_AVAILABLE = False
    logger.warning(f"Browser Library not available. {BROWSER_INSTALL_HINT}")


def _failure(error: str, error_type: str = "AutomationError", **extra: Any) -> Dict[str, Any]:
    result = {"success": False, "isError": True, "error": error, "error_type": error_type}
    result.update(extra)
    return result


class BrowserAutomation:
    """Automation collaborator: navigate, click, type, extract, screenshot.

    Every primitive is awaited by the caller and returns a dict with
    ``success`` and either the action output or ``error``/``error_type``;
    none of them raise. Element lookups go through the self-healing
    ``SelectorResolver``. The Browser Library instance and its page are
    shared by every caller of this object.
    """

    def __init__(self, config: Optional[DebugConfig] = None):
        self.config = config or DebugConfig()
        self.browser_lib: Optional[Any] = None
        self._browser_launched = False
        self._page_open = False
        self.resolver = SelectorResolver(self._query_element)

    @property
    def has_page(self) -> bool:
        return self.browser_lib is not None and self._page_open

    def _create_library(self) -> Any:
        if not BROWSER_LIBRARY_AVAILABLE:
            raise RuntimeError(f"Browser Library not available. {BROWSER_INSTALL_HINT}")
        return BrowserLibrary(
            timeout=timedelta(milliseconds=self.config.ACTION_TIMEOUT_MS),
            run_on_failure="NONE",
        )

    def _open_page(self) -> None:
        if self.browser_lib is None:
            self.browser_lib = self._create_library()
        lib = self.browser_lib
        lib.new_browser(
            browser=SupportedBrowsers[self.config.BROWSER_TYPE],
            headless=self.config.HEADLESS,
            slowMo=timedelta(milliseconds=self.config.SLOW_MO_MS),
        )
        self._browser_launched = True
        lib.new_context(
            viewport={
                "width": self.config.VIEWPORT_WIDTH,
                "height": self.config.VIEWPORT_HEIGHT,
            }
        )
        lib.new_page("about:blank")
        self._page_open = True

    def _query_element(self, selector: str) -> Optional[str]:
        if self.browser_lib.get_element_count(selector) == 0:
            return None
        return self.browser_lib.get_element(selector)

    async def _call(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        # Browser Library keywords block on the Playwright process
        return await asyncio.to_thread(func, *args, **kwargs)

    async def ensure_page(self) -> Dict[str, Any]:
        """Open a browser, context and blank page unless one is already open."""
        if self.has_page:
            return {"success": True, "output": "Browser page already open"}
        try:
            logger.info(
                f"Launching {self.config.BROWSER_TYPE} browser "
                f"(headless={self.config.HEADLESS})"
            )
            await self._call(self._open_page)
            return {"success": True, "output": "Browser page opened"}
        except Exception as e:
            logger.error(f"Error opening browser page: {e}")
            self._page_open = False
            if self._browser_launched:
                await self.close()
            return _failure(f"Error opening browser page: {e}")

    async def find_element(self, selector: str) -> Optional[Resolution]:
        """Resolve ``selector`` through the self-healing fallback chain."""
        if not self.has_page:
            return None
        return await self._call(self.resolver.resolve, selector)

    async def _resolve(self, selector: str) -> Resolution:
        resolution = await self.find_element(selector)
        if resolution is None:
            raise LookupError(f"Element not found: {selector}")
        return resolution

    def _element_failure(self, selector: str, error: Exception) -> Dict[str, Any]:
        if isinstance(error, LookupError):
            return _failure(str(error), "ElementNotFound", selector=selector)
        return _failure(str(error), selector=selector)

    async def navigate(self, url: str) -> Dict[str, Any]:
        """Navigate the current page to ``url``."""
        try:
            logger.info(f"Navigating to: {url}")
            opened = await self.ensure_page()
            if not opened["success"]:
                return opened
            await self._call(self.browser_lib.go_to, url)
            return {"success": True, "output": f"Successfully navigated to {url}", "url": url}
        except Exception as e:
            logger.error(f"Navigation error: {e}")
            return _failure(f"Error navigating to URL: {e}")

    async def click(self, selector: str) -> Dict[str, Any]:
        """Click the element matched by ``selector``."""
        try:
            logger.info(f"Clicking element: {selector}")
            resolution = await self._resolve(selector)
            await self._call(self.browser_lib.click, resolution.handle)
            return {
                "success": True,
                "output": f"Successfully clicked element: {selector}",
                "selector": resolution.selector,
                "healed": resolution.healed,
            }
        except Exception as e:
            logger.error(f"Click error: {e}")
            return self._element_failure(selector, e)

    async def type(self, selector: str, text: str, clear_first: bool = False) -> Dict[str, Any]:
        """Type ``text`` into the element matched by ``selector``."""
        try:
            logger.info(f'Typing "{text}" into element: {selector}')
            resolution = await self._resolve(selector)
            await self._call(
                self.browser_lib.type_text, resolution.handle, text, clear=clear_first
            )
            return {
                "success": True,
                "output": f'Successfully typed "{text}" into element: {selector}',
                "selector": resolution.selector,
                "healed": resolution.healed,
            }
        except Exception as e:
            logger.error(f"Type error: {e}")
            return self._element_failure(selector, e)

    async def extract(self, selector: str, attribute: str = "textContent") -> Dict[str, Any]:
        """Read ``attribute`` (or the textContent/innerHTML property) of an element."""
        try:
            logger.info(f"Extracting {attribute} from element: {selector}")
            resolution = await self._resolve(selector)
            if attribute in ("textContent", "innerHTML", "innerText"):
                value = await self._call(
                    self.browser_lib.get_property, resolution.handle, attribute
                )
            else:
                value = await self._call(
                    self.browser_lib.get_attribute, resolution.handle, attribute
                )
            return {
                "success": True,
                "output": f"Successfully extracted {attribute} from element: {selector}",
                "value": value,
                "selector": resolution.selector,
                "healed": resolution.healed,
            }
        except Exception as e:
            logger.error(f"Extract error: {e}")
            return self._element_failure(selector, e)

    async def screenshot(self, full_page: bool = False, path: Optional[Path] = None) -> Dict[str, Any]:
        """Capture the current page; ``path`` defaults to ``<OUTPUT_DIR>/screenshot.png``."""
        try:
            logger.info(f"Taking {'full page' if full_page else 'viewport'} screenshot")
            if not self.has_page:
                return _failure("Browser page is not open")
            target = Path(path) if path else Path(self.config.OUTPUT_DIR) / "screenshot.png"
            target.parent.mkdir(parents=True, exist_ok=True)
            # Browser Library appends the image extension itself
            saved = await self._call(
                self.browser_lib.take_screenshot,
                filename=str(target.with_suffix("")),
                fullPage=full_page,
            )
            return {"success": True, "output": "Screenshot captured successfully", "path": saved}
        except Exception as e:
            logger.error(f"Screenshot error: {e}")
            return _failure(f"Error taking screenshot: {e}")

    async def close(self) -> None:
        """Close every browser opened by this collaborator; safe to repeat."""
        if self.browser_lib is None:
            return
        try:
            await self._call(self.browser_lib.close_browser, SelectionType.ALL)
        except Exception as e:
            logger.error(f"Error closing browser: {e}")
        finally:
            self._browser_launched = False
            self._page_open = False
