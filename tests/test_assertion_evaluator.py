from __future__ import annotations

import asyncio

import pytest

from debugmcp.components.debugging.assertion_evaluator import AssertionEvaluator
from debugmcp.components.debugging.errors import ElementNotFound

from conftest import FakeAutomation


def test_parse_extracts_selector_and_literal() -> None:
    parsed = AssertionEvaluator.parse("document.querySelector('#x').textContent === 'Y'")
    assert parsed == ("#x", "Y")


def test_parse_accepts_inner_text_and_double_quotes() -> None:
    parsed = AssertionEvaluator.parse('document.querySelector("h1.title").innerText == "Hello"')
    assert parsed == ("h1.title", "Hello")


def test_parse_rejects_other_shapes() -> None:
    assert AssertionEvaluator.parse("window.location.href === 'https://x'") is None
    assert AssertionEvaluator.parse("document.querySelector('#x').value === 'Y'") is None


def test_matching_text_passes() -> None:
    automation = FakeAutomation(texts={"#x": "  Y \n"})
    evaluator = AssertionEvaluator(automation)

    outcome = asyncio.run(evaluator.evaluate("document.querySelector('#x').textContent === 'Y'"))

    assert outcome.passed
    assert outcome.evaluated
    assert outcome.actual == "Y"
    assert automation.calls == [("extract", "#x", "textContent")]


def test_different_text_fails() -> None:
    evaluator = AssertionEvaluator(FakeAutomation(texts={"#x": "Z"}))

    outcome = asyncio.run(evaluator.evaluate("document.querySelector('#x').textContent === 'Y'"))

    assert not outcome.passed
    assert outcome.expected == "Y"
    assert outcome.actual == "Z"


def test_unsupported_shape_passes_with_warning() -> None:
    warnings = []
    automation = FakeAutomation()
    evaluator = AssertionEvaluator(automation, warn=warnings.append)

    outcome = asyncio.run(evaluator.evaluate("document.title.length > 3"))

    assert outcome.passed
    assert not outcome.evaluated
    assert len(warnings) == 1
    assert "assuming true" in warnings[0]
    assert automation.calls == []


def test_missing_element_raises_element_not_found() -> None:
    evaluator = AssertionEvaluator(FakeAutomation())

    with pytest.raises(ElementNotFound):
        asyncio.run(evaluator.evaluate("document.querySelector('#gone').textContent === 'Y'"))
