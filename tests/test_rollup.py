"""Tests for the rollup aggregator and its derived ratios."""

from datetime import date

import pandas as pd
import pytest

from closing_core.marts.incentives import SupportTables
from closing_core.marts.rollup import (
    ROLLUP_COLUMNS,
    add_derived_metrics,
    aggregate_all,
    aggregate_dimension,
    expected_closing,
)

AS_OF = date(2025, 4, 15)


def _unified(rows: list[dict]) -> pd.DataFrame:
    defaults = {
        "agent": "Kim",
        "department": "Sales",
        "office": "Seoul",
        "code": "A1",
        "performance": 0,
        "fee": 0.0,
        "target": 0,
        "registered_stores": 0,
        "active_stores": 0,
        "devices": 0,
        "sims": 0,
        "support": 0.0,
    }
    return pd.DataFrame([{**defaults, **row} for row in rows])


@pytest.mark.parametrize(
    "performance,as_of,expected",
    [
        (10, date(2025, 4, 15), 20),
        (0, date(2025, 4, 15), 0),
        (7, date(2025, 2, 28), 7),
        (1, date(2025, 1, 2), 16),  # 15.5 rounds up
        (3, date(2025, 1, 31), 3),
    ],
)
def test_expected_closing(performance: int, as_of: date, expected: int) -> None:
    assert expected_closing(performance, as_of) == expected


def test_derived_ratios() -> None:
    frame = _unified(
        [{"performance": 10, "target": 40, "registered_stores": 3, "active_stores": 2, "devices": 5}]
    )
    row = add_derived_metrics(frame, AS_OF).iloc[0]

    assert row["expected_closing"] == 20
    assert row["achievement"] == 50
    assert row["utilization"] == 67
    assert row["rotation"] == 80


def test_zero_denominators_report_zero() -> None:
    row = add_derived_metrics(_unified([{}]), AS_OF).iloc[0]
    assert (row["achievement"], row["utilization"], row["rotation"]) == (0, 0, 0)


def test_ratios_from_group_sums_not_averages() -> None:
    unified = _unified(
        [
            {"office": "Seoul", "performance": 5, "target": 10},
            {"office": "Busan", "performance": 5, "target": 30},
        ]
    )
    view = aggregate_dimension(unified, "code", {}, AS_OF)
    assert view["achievement"].tolist() == [50]


def test_view_columns_and_sort_keys() -> None:
    unified = _unified(
        [
            {"agent": "Kim", "office": "Seoul", "performance": 5, "fee": 900.0},
            {"agent": "Lee", "office": "Busan", "performance": 9, "fee": 100.0},
        ]
    )
    office = aggregate_dimension(unified, "office", {}, AS_OF)
    agent = aggregate_dimension(unified, "agent", {"Lee": 5.0}, AS_OF)

    assert list(office.columns) == ["office"] + ROLLUP_COLUMNS
    assert office["office"].tolist() == ["Busan", "Seoul"]
    assert agent["agent"].tolist() == ["Kim", "Lee"]
    assert agent["support"].tolist() == [0.0, 5.0]


def test_sort_is_stable_on_ties() -> None:
    unified = _unified(
        [
            {"code": "B2", "fee": 100.0},
            {"code": "A1", "fee": 100.0},
            {"code": "C3", "fee": 200.0},
        ]
    )
    view = aggregate_dimension(unified, "code", {}, AS_OF)
    assert view["code"].tolist() == ["C3", "B2", "A1"]


def test_empty_unified_gives_empty_views() -> None:
    views = aggregate_all(_unified([]), SupportTables(combinations=pd.DataFrame()), AS_OF)
    assert set(views) == {"code", "office", "department", "agent"}
    for dimension, view in views.items():
        assert view.empty
        assert list(view.columns) == [dimension] + ROLLUP_COLUMNS


def test_unknown_dimension_raises() -> None:
    with pytest.raises(ValueError, match="Invalid dimension"):
        aggregate_dimension(_unified([{}]), "region", {}, AS_OF)
