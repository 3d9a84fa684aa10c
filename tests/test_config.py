from __future__ import annotations

from pathlib import Path

import pytest

from debugmcp.models.config_models import DebugConfig, load_config


def test_defaults_are_valid() -> None:
    config = DebugConfig()

    assert config.validate() == []
    assert config.DEFAULT_WAIT_MS == 1000
    assert config.debug_dir == Path("output") / "debug"


def test_from_env_reads_prefixed_variables(monkeypatch) -> None:
    monkeypatch.setenv("DEBUGMCP_BROWSER", " Firefox ")
    monkeypatch.setenv("DEBUGMCP_HEADLESS", "false")
    monkeypatch.setenv("DEBUGMCP_SLOW_MO", "250")
    monkeypatch.setenv("DEBUGMCP_OUTPUT_DIR", "/tmp/runs")
    monkeypatch.setenv("DEBUGMCP_STATE_SCREENSHOT", "no")

    config = DebugConfig.from_env()

    assert config.BROWSER_TYPE == "firefox"
    assert config.HEADLESS is False
    assert config.SLOW_MO_MS == 250
    assert config.OUTPUT_DIR == "/tmp/runs"
    assert config.CAPTURE_STATE_SCREENSHOT is False


def test_unparseable_env_values_fall_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("DEBUGMCP_ACTION_TIMEOUT", "soon")
    monkeypatch.setenv("DEBUGMCP_HEADLESS", "maybe")

    config = DebugConfig.from_env()

    assert config.ACTION_TIMEOUT_MS == 10000
    assert config.HEADLESS is True


def test_load_config_applies_overrides_after_env(monkeypatch) -> None:
    monkeypatch.setenv("DEBUGMCP_SLOW_MO", "100")

    config = load_config({"SLOW_MO_MS": 5})

    assert config.SLOW_MO_MS == 5


def test_update_rejects_unknown_keys() -> None:
    config = DebugConfig()
    with pytest.raises(ValueError):
        config.update(BROWSER="chromium")


def test_from_dict_ignores_unknown_keys() -> None:
    config = DebugConfig.from_dict({"HEADLESS": False, "debug_dir": "x", "OTHER": 1})

    assert config.HEADLESS is False
    assert "OTHER" not in config.to_dict()


def test_validate_reports_each_problem() -> None:
    config = DebugConfig(BROWSER_TYPE="opera", ACTION_TIMEOUT_MS=0, VIEWPORT_WIDTH=0)

    errors = config.validate()

    assert len(errors) == 3
    assert any("BROWSER_TYPE" in e for e in errors)
