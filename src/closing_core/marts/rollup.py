"""Rollup aggregator: the four dimensional views of the closing report.

Unified records are grouped by code, office, department and agent. Raw
counters are summed, then derived ratios are computed from each group's own
sums, so the result does not depend on record order:

- expected_closing: linear month-end projection of performance
- achievement: expected_closing as a percentage of target
- utilization: active stores as a percentage of registered stores
- rotation: expected_closing as a percentage of expected_closing + devices

Every ratio guards its denominator and reports 0 instead of NaN/inf.
"""

from __future__ import annotations

import calendar
import logging
from datetime import date

import pandas as pd

from closing_core.cleaning import round_half_up
from closing_core.marts.incentives import SupportTables

logger = logging.getLogger(__name__)

DIMENSIONS = ("code", "office", "department", "agent")

SUM_COLUMNS = [
    "performance",
    "fee",
    "target",
    "registered_stores",
    "active_stores",
    "devices",
    "sims",
]

# Display order of one rollup row after the dimension column
ROLLUP_COLUMNS = [
    "performance",
    "fee",
    "support",
    "target",
    "achievement",
    "expected_closing",
    "rotation",
    "registered_stores",
    "active_stores",
    "devices",
    "sims",
    "utilization",
]

# Office view ranks by activation volume, the other views by fee
SORT_KEYS = {
    "code": "fee",
    "office": "performance",
    "department": "fee",
    "agent": "fee",
}


def _ratio(numerator: float, denominator: float) -> int:
    if denominator <= 0:
        return 0
    return round_half_up(numerator / denominator * 100)


def expected_closing(performance: float, as_of: date) -> int:
    """Project month-end performance from month-to-date actuals.

    Examples:
        >>> expected_closing(10, date(2025, 4, 15))
        20
    """
    days_in_month = calendar.monthrange(as_of.year, as_of.month)[1]
    return round_half_up(performance / as_of.day * days_in_month)


def add_derived_metrics(frame: pd.DataFrame, as_of: date) -> pd.DataFrame:
    """Return a copy of ``frame`` with the four derived ratios.

    Args:
        frame: Rows carrying performance, target, registered_stores,
            active_stores and devices.
        as_of: Reference date for the month-end projection.

    Returns:
        New DataFrame with expected_closing, achievement, utilization and
        rotation columns (int).
    """
    result = frame.copy()
    closing = [expected_closing(p, as_of) for p in result["performance"]]
    result["expected_closing"] = pd.Series(closing, index=result.index, dtype="int64")
    result["achievement"] = pd.Series(
        [_ratio(c, t) for c, t in zip(closing, result["target"])], index=result.index, dtype="int64"
    )
    result["utilization"] = pd.Series(
        [_ratio(a, r) for a, r in zip(result["active_stores"], result["registered_stores"])],
        index=result.index,
        dtype="int64",
    )
    result["rotation"] = pd.Series(
        [_ratio(c, c + d) for c, d in zip(closing, result["devices"])],
        index=result.index,
        dtype="int64",
    )
    return result


def aggregate_dimension(
    unified: pd.DataFrame,
    dimension: str,
    support: dict[str, float],
    as_of: date,
) -> pd.DataFrame:
    """Roll unified records up to one dimension.

    Args:
        unified: Linked unified records.
        dimension: One of code, office, department, agent.
        support: Support lookup for this dimension (missing keys get 0).
        as_of: Reference date for the month-end projection.

    Returns:
        DataFrame with the dimension column followed by ROLLUP_COLUMNS,
        sorted descending by the dimension's sort key (stable).

    Raises:
        ValueError: If ``dimension`` is unknown.
    """
    if dimension not in DIMENSIONS:
        raise ValueError(f"Invalid dimension '{dimension}'. Must be one of {DIMENSIONS}.")

    columns = [dimension] + ROLLUP_COLUMNS
    if unified.empty:
        return pd.DataFrame(columns=columns)

    grouped = unified.groupby(dimension, sort=False)[SUM_COLUMNS].sum().reset_index()
    grouped = add_derived_metrics(grouped, as_of)
    grouped["support"] = grouped[dimension].map(lambda key: float(support.get(key, 0.0)))

    grouped = grouped.sort_values(SORT_KEYS[dimension], ascending=False, kind="stable")
    logger.debug("%s rollup: %d group(s)", dimension, len(grouped))
    return grouped.reset_index(drop=True)[columns]


def aggregate_all(
    unified: pd.DataFrame,
    support: SupportTables,
    as_of: date,
) -> dict[str, pd.DataFrame]:
    """Build the code, office, department and agent views."""
    return {
        dimension: aggregate_dimension(unified, dimension, support.for_dimension(dimension), as_of)
        for dimension in DIMENSIONS
    }
