"""Tests for ReportConfig validation and loading."""

import json
from pathlib import Path

import pytest

from closing_core.config import ACTIVATION_LAYOUT, LAYOUT_VERSION, ReportConfig
from closing_core.exceptions import ClosingReportError, ConfigError


def test_defaults() -> None:
    config = ReportConfig()
    assert config.support_rates == (0.10, 0.08, 0.06, 0.04, 0.02)
    assert config.top_n == 5
    assert config.activation_layout is ACTIVATION_LAYOUT
    assert LAYOUT_VERSION == "v1"


def test_from_mapping_converts_lists() -> None:
    config = ReportConfig.from_mapping({"excluded_store_markers": ["창고"], "top_n": 3})
    assert config.excluded_store_markers == ("창고",)
    assert config.top_n == 3


@pytest.mark.parametrize(
    "overrides",
    [
        {"support_rates": []},
        {"support_rates": [0.1, 1.5]},
        {"top_n": -1},
        {"activation_layout": {}},
        {"unknown_setting": 1},
    ],
)
def test_invalid_settings_raise(overrides: dict) -> None:
    with pytest.raises(ConfigError):
        ReportConfig.from_mapping(overrides)


def test_from_json(tmp_path: Path) -> None:
    path = tmp_path / "closing.json"
    path.write_text(json.dumps({"cs_wired_markers": ["VIP"]}), encoding="utf-8")
    assert ReportConfig.from_json(path).cs_wired_markers == ("VIP",)


@pytest.mark.parametrize("content", ["not json", "[1, 2]"])
def test_from_json_rejects_bad_files(tmp_path: Path, content: str) -> None:
    path = tmp_path / "closing.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        ReportConfig.from_json(path)


def test_config_errors_share_base_class(tmp_path: Path) -> None:
    with pytest.raises(ClosingReportError):
        ReportConfig.from_json(tmp_path / "missing.json")
