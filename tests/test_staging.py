"""Tests for the staging layer: normalizer, reference lists and exclusion filter."""

from datetime import date

import pandas as pd
import pytest

from closing_core.config import ACTIVATION_LAYOUT, CUSTOMER_LAYOUT, STORE_LAYOUT, ReportConfig
from closing_core.exceptions import InputContractError
from closing_core.staging.filters import ExclusionRule, apply_rules, filter_activations
from closing_core.staging.normalize import normalize_table
from closing_core.staging.references import (
    excluded_agents_from_targets,
    excluded_stores_from_inventory,
    phone_models,
    sales_targets,
)
from helpers import (
    MODEL,
    TARGET_HEADER,
    activation_row,
    activation_table,
    customer_row,
    inventory_row,
    model_row,
    store_row,
    target_row,
)


@pytest.fixture
def config() -> ReportConfig:
    return ReportConfig()


class TestNormalizer:
    """Positional rows become typed frames; short rows are counted, not raised."""

    def test_activation_fields_extracted_by_position(self) -> None:
        table = normalize_table(
            activation_table(activation_row(agent=" Kim ", fee="#N/A")), ACTIVATION_LAYOUT
        )
        row = table.frame.iloc[0]
        assert row["agent"] == "Kim"
        assert row["code"] == "A1"
        assert row["store_code"] == "StoreX"
        assert row["fee"] == 0.0
        assert row["cs_employee"] == "", "Cells beyond the row end must be blank"
        assert table.header_rows == 3

    def test_short_rows_dropped_and_counted(self) -> None:
        rows = activation_table(activation_row(), ["only", "five", "cells", "in", "row"], [])
        table = normalize_table(rows, ACTIVATION_LAYOUT)
        assert len(table.frame) == 1
        assert table.too_short == 2

    def test_header_rows_skipped(self) -> None:
        table = normalize_table(activation_table(), ACTIVATION_LAYOUT)
        assert table.frame.empty
        assert table.too_short == 0

    def test_empty_table_keeps_columns(self) -> None:
        frame = normalize_table([], STORE_LAYOUT).frame
        assert frame.empty
        assert {"code_name", "store_code", "agent_name", "row_width"} <= set(frame.columns)

    def test_none_table_is_empty(self) -> None:
        assert normalize_table(None, CUSTOMER_LAYOUT).frame.empty

    def test_row_width_recorded(self) -> None:
        short_store = store_row("Kim", "A1", "StoreX")[:15]
        frame = normalize_table([short_store, store_row("Kim", "A1", "StoreY")], STORE_LAYOUT).frame
        assert frame["row_width"].tolist() == [15, 22]
        assert frame["agent_name"].tolist() == ["", "Kim"]

    @pytest.mark.parametrize("bad", ["rows", {"a": 1}, 42])
    def test_wrong_table_type_raises(self, bad: object) -> None:
        with pytest.raises(InputContractError):
            normalize_table(bad, CUSTOMER_LAYOUT)

    def test_wrong_row_type_raises(self) -> None:
        with pytest.raises(InputContractError, match="Row 1"):
            normalize_table([customer_row("Kim", "A1", "S"), "not a row"], CUSTOMER_LAYOUT)


class TestReferences:
    def test_phone_models_only_phone_category(self, config: ReportConfig) -> None:
        rows = [model_row("SM-S928N"), model_row("SM-R960", category="워치"), model_row("")]
        assert phone_models(rows, config) == {"SM-S928N"}

    def test_sales_targets_parse_and_last_row_wins(self, config: ReportConfig) -> None:
        rows = [
            TARGET_HEADER,
            target_row("Kim", "A1", "30"),
            target_row("Lee", "B2", "abc", excluded="Y"),
            target_row("Kim", "A1", "45"),
        ]
        targets = sales_targets(rows, config)
        assert targets.to_dict(orient="records") == [
            {"agent": "Lee", "code": "B2", "target": 0, "excluded": True},
            {"agent": "Kim", "code": "A1", "target": 45, "excluded": False},
        ]

    def test_excluded_agents_from_targets(self, config: ReportConfig) -> None:
        rows = [
            TARGET_HEADER,
            target_row("Kim", "A1", 10),
            target_row("Lee", "B2", 10, excluded="Y"),
            target_row("Lee", "B3", 10, excluded="Y"),
        ]
        assert excluded_agents_from_targets(sales_targets(rows, config)) == ["Lee"]

    def test_empty_targets(self, config: ReportConfig) -> None:
        targets = sales_targets([], config)
        assert targets.empty
        assert excluded_agents_from_targets(targets) == []

    def test_excluded_stores_scan_from_seventh_row(self, config: ReportConfig) -> None:
        header = [["inventory"]] * 6
        rows = header + [
            inventory_row("Kim", "A1", "S1", store_label="본사 사무실"),
            inventory_row("Kim", "A1", "S2", store_label="StoreX"),
            inventory_row("Kim", "A1", "S3", store_label="거래종료 매장"),
            ["", "", "", "", "본점판매"],
        ]
        assert excluded_stores_from_inventory(rows, config) == ["본사 사무실", "거래종료 매장", "본점판매"]

    def test_excluded_store_markers_in_header_rows_ignored(self, config: ReportConfig) -> None:
        rows = [inventory_row("Kim", "A1", "S1", store_label="사무실")]
        assert excluded_stores_from_inventory(rows, config) == []


class TestExclusionFilter:
    TARGET = date(2025, 4, 15)

    def _frame(self, *rows: list) -> pd.DataFrame:
        return normalize_table(activation_table(*rows), ACTIVATION_LAYOUT).frame

    def test_each_rule_counted_once(self, config: ReportConfig) -> None:
        frame = self._frame(
            activation_row(),
            activation_row(activation_date="2025-04-16"),
            activation_row(activation_date="개통일"),
            activation_row(model="SM-R960"),
            activation_row(plan_type="선불 요금제"),
            activation_row(condition="중고"),
            activation_row(type_="중고폰"),
            activation_row(type_="유심단독"),
        )
        result = filter_activations(frame, self.TARGET, {MODEL}, config, too_short=3)

        assert len(result.frame) == 1
        assert result.counts == {
            "too_short": 3,
            "date": 2,
            "model": 1,
            "plan": 1,
            "condition": 1,
            "type": 2,
            "kept": 1,
        }

    def test_row_failing_several_rules_counted_by_first(self, config: ReportConfig) -> None:
        frame = self._frame(activation_row(activation_date="2026-01-01", model="unknown"))
        result = filter_activations(frame, self.TARGET, {MODEL}, config)
        assert result.counts["date"] == 1
        assert result.counts["model"] == 0

    @pytest.mark.parametrize("raw", ["Jan", "April", "now", "today"])
    def test_non_dates_dropped_by_date_rule(self, config: ReportConfig, raw: str) -> None:
        frame = self._frame(activation_row(activation_date=raw))
        result = filter_activations(frame, date(2030, 1, 1), {MODEL}, config)
        assert result.counts["date"] == 1
        assert result.frame.empty

    def test_target_date_inclusive(self, config: ReportConfig) -> None:
        frame = self._frame(activation_row(activation_date="2025-04-15"))
        assert len(filter_activations(frame, self.TARGET, {MODEL}, config).frame) == 1

    def test_empty_frame(self, config: ReportConfig) -> None:
        result = filter_activations(self._frame(), self.TARGET, {MODEL}, config)
        assert result.frame.empty
        assert result.counts["kept"] == 0

    def test_input_frame_not_mutated(self, config: ReportConfig) -> None:
        frame = self._frame(activation_row(), activation_row(model="other"))
        before = frame.copy()
        filter_activations(frame, self.TARGET, {MODEL}, config)
        pd.testing.assert_frame_equal(frame, before)

    def test_custom_rule_chain(self) -> None:
        frame = self._frame(activation_row(agent="Kim"), activation_row(agent="Lee"))
        rules = [ExclusionRule("no_lee", lambda df: df["agent"] != "Lee")]
        result = apply_rules(frame, rules)
        assert result.frame["agent"].tolist() == ["Kim"]
        assert result.counts == {"too_short": 0, "no_lee": 1, "kept": 1}
