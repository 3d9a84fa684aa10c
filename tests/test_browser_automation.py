from __future__ import annotations

import asyncio
from types import SimpleNamespace

import pytest

from debugmcp.components.browser import browser_automation
from debugmcp.components.browser.browser_automation import BrowserAutomation


class StubBrowserLibrary:
    """Records Browser Library keyword calls; elements map selectors to handles."""

    def __init__(self, elements=None, fail_on=None):
        self.elements = dict(elements or {})
        self.properties = {}
        self.attributes = {}
        self.fail_on = fail_on
        self.calls = []

    def _record(self, name, *args):
        self.calls.append((name,) + args)
        if name == self.fail_on:
            raise RuntimeError(f"{name} failed")

    def names(self):
        return [c[0] for c in self.calls]

    def new_browser(self, browser, headless, slowMo):
        self._record("new_browser", browser)

    def new_context(self, viewport):
        self._record("new_context")

    def new_page(self, url):
        self._record("new_page", url)

    def go_to(self, url):
        self._record("go_to", url)

    def get_element_count(self, selector):
        self._record("get_element_count", selector)
        return 1 if selector in self.elements else 0

    def get_element(self, selector):
        self._record("get_element", selector)
        return self.elements[selector]

    def click(self, handle):
        self._record("click", handle)

    def type_text(self, handle, text, clear=False):
        self._record("type_text", handle, text, clear)

    def get_property(self, handle, name):
        self._record("get_property", handle, name)
        return self.properties[(handle, name)]

    def get_attribute(self, handle, name):
        self._record("get_attribute", handle, name)
        return self.attributes[(handle, name)]

    def take_screenshot(self, filename, fullPage):
        self._record("take_screenshot", filename, fullPage)
        return f"{filename}.png"

    def close_browser(self, which):
        self._record("close_browser", which)


@pytest.fixture(autouse=True)
def browser_enums(monkeypatch):
    monkeypatch.setattr(browser_automation, "SupportedBrowsers", {"chromium": "chromium"})
    monkeypatch.setattr(browser_automation, "SelectionType", SimpleNamespace(ALL="ALL"))


def _automation(config, lib) -> BrowserAutomation:
    automation = BrowserAutomation(config)
    automation.browser_lib = lib
    return automation


def _opened(config, lib) -> BrowserAutomation:
    automation = _automation(config, lib)
    assert asyncio.run(automation.ensure_page())["success"]
    return automation


def test_navigate_opens_browser_context_and_page_first(config) -> None:
    lib = StubBrowserLibrary()
    automation = _automation(config, lib)

    result = asyncio.run(automation.navigate("https://example.com"))

    assert result["success"] is True
    assert lib.names() == ["new_browser", "new_context", "new_page", "go_to"]
    assert ("new_browser", "chromium") in lib.calls
    assert automation.has_page


def test_ensure_page_reuses_open_page(config) -> None:
    lib = StubBrowserLibrary()
    automation = _opened(config, lib)

    asyncio.run(automation.ensure_page())

    assert lib.names().count("new_browser") == 1


def test_click_heals_id_selector_to_data_testid(config) -> None:
    lib = StubBrowserLibrary(elements={'[data-testid="login"]': "element=7"})
    automation = _opened(config, lib)

    result = asyncio.run(automation.click("#login"))

    assert result["success"] is True
    assert result["healed"] is True
    assert result["selector"] == '[data-testid="login"]'
    assert ("click", "element=7") in lib.calls
    counted = [c[1] for c in lib.calls if c[0] == "get_element_count"]
    assert counted == ["#login", '[data-testid="login"]']


def test_click_on_direct_match_is_not_healed(config) -> None:
    lib = StubBrowserLibrary(elements={"#login": "element=1"})
    automation = _opened(config, lib)

    result = asyncio.run(automation.click("#login"))

    assert result["healed"] is False
    assert ("get_element", "#login") in lib.calls


def test_missing_element_is_reported_as_element_not_found(config) -> None:
    lib = StubBrowserLibrary()
    automation = _opened(config, lib)

    result = asyncio.run(automation.click("#gone"))

    assert result["success"] is False
    assert result["error_type"] == "ElementNotFound"
    assert result["selector"] == "#gone"
    assert "click" not in lib.names()


def test_lookup_without_page_is_element_not_found(config) -> None:
    automation = _automation(config, StubBrowserLibrary(elements={"#a": "element=1"}))

    result = asyncio.run(automation.type("#a", "bob"))

    assert result["error_type"] == "ElementNotFound"


def test_type_passes_clear_flag(config) -> None:
    lib = StubBrowserLibrary(elements={"#user": "element=2"})
    automation = _opened(config, lib)

    result = asyncio.run(automation.type("#user", "bob", clear_first=True))

    assert result["success"] is True
    assert ("type_text", "element=2", "bob", True) in lib.calls


def test_extract_reads_properties_and_attributes(config) -> None:
    lib = StubBrowserLibrary(elements={"#link": "element=3"})
    lib.properties[("element=3", "textContent")] = "Docs"
    lib.attributes[("element=3", "href")] = "/docs"
    automation = _opened(config, lib)

    text = asyncio.run(automation.extract("#link"))
    href = asyncio.run(automation.extract("#link", "href"))

    assert text["value"] == "Docs"
    assert href["value"] == "/docs"
    assert ("get_property", "element=3", "textContent") in lib.calls
    assert ("get_attribute", "element=3", "href") in lib.calls


def test_keyword_errors_become_automation_errors(config) -> None:
    lib = StubBrowserLibrary(elements={"#btn": "element=4"}, fail_on="click")
    automation = _opened(config, lib)

    result = asyncio.run(automation.click("#btn"))

    assert result["success"] is False
    assert result["error_type"] == "AutomationError"


def test_screenshot_strips_suffix_and_creates_directory(config, tmp_path) -> None:
    lib = StubBrowserLibrary()
    automation = _opened(config, lib)
    target = tmp_path / "shots" / "login_final.png"

    result = asyncio.run(automation.screenshot(full_page=True, path=target))

    assert result["success"] is True
    assert result["path"] == str(target)
    assert ("take_screenshot", str(tmp_path / "shots" / "login_final"), True) in lib.calls
    assert target.parent.is_dir()


def test_screenshot_without_page_fails(config) -> None:
    lib = StubBrowserLibrary()
    automation = _automation(config, lib)

    result = asyncio.run(automation.screenshot())

    assert result["success"] is False
    assert "take_screenshot" not in lib.names()


def test_close_is_repeatable(config) -> None:
    lib = StubBrowserLibrary()
    automation = _opened(config, lib)

    asyncio.run(automation.close())
    asyncio.run(automation.close())

    assert lib.names().count("close_browser") == 2
    assert not automation.has_page


def test_close_without_library_is_a_no_op(config) -> None:
    automation = BrowserAutomation(config)
    asyncio.run(automation.close())
    assert not automation.has_page


@pytest.mark.parametrize("failing_keyword", ["new_context", "new_page"])
def test_half_opened_browser_is_released(config, failing_keyword) -> None:
    lib = StubBrowserLibrary(fail_on=failing_keyword)
    automation = _automation(config, lib)

    result = asyncio.run(automation.ensure_page())

    assert result["success"] is False
    assert not automation.has_page
    assert lib.calls.count(("close_browser", "ALL")) == 1

    asyncio.run(automation.close())
    assert lib.calls.count(("close_browser", "ALL")) == 2
