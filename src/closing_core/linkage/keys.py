"""Match-key builder: one unified record per agent/department/office/code.

A unified record is the central aggregation unit of the closing report. It is
keyed by the activation row's own agent, department, office and code fields
(never by an external table) and accumulates every counter the rollups need.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

import pandas as pd

logger = logging.getLogger(__name__)

KEY_FIELDS = ["agent", "department", "office", "code"]
KEY_SEPARATOR = "|"

COUNTER_COLUMNS = [
    "performance",
    "fee",
    "target",
    "registered_stores",
    "active_stores",
    "devices",
    "sims",
    "support",
]

UNIFIED_COLUMNS = ["match_key"] + KEY_FIELDS + COUNTER_COLUMNS


def match_key(agent: str, department: str, office: str, code: str) -> str:
    """Build the composite key string.

    Examples:
        >>> match_key("Kim", "Sales", "Seoul", "A1")
        'Kim|Sales|Seoul|A1'
    """
    return KEY_SEPARATOR.join([agent, department, office, code])


def empty_unified() -> pd.DataFrame:
    """Return an empty unified-record frame with the expected dtypes."""
    frame = pd.DataFrame({col: pd.Series(dtype="object") for col in ["match_key"] + KEY_FIELDS})
    for col in COUNTER_COLUMNS:
        frame[col] = pd.Series(dtype="float64" if col in ("fee", "support") else "int64")
    return frame[UNIFIED_COLUMNS]


def build_unified_records(activations: pd.DataFrame, excluded_agents: Iterable[str]) -> pd.DataFrame:
    """Group filtered activation rows into unified records.

    Rows of excluded agents contribute to no record. The first occurrence of
    a key creates its record; ``performance`` counts rows and ``fee`` sums
    fees (sentinel fees were already parsed as 0).

    Args:
        activations: Filtered activation rows.
        excluded_agents: Agents whose rows are ignored.

    Returns:
        DataFrame with one row per ``match_key`` in first-appearance order,
        with all other counters initialised to 0.
    """
    excluded = set(excluded_agents)
    kept = activations[~activations["agent"].isin(excluded)]
    if kept.empty:
        return empty_unified()

    grouped = (
        kept.groupby(KEY_FIELDS, sort=False, dropna=False)
        .agg(performance=("fee", "size"), fee=("fee", "sum"))
        .reset_index()
    )
    grouped["match_key"] = [
        match_key(*values) for values in grouped[KEY_FIELDS].itertuples(index=False, name=None)
    ]
    for col in COUNTER_COLUMNS:
        if col not in grouped.columns:
            grouped[col] = 0
    grouped["fee"] = grouped["fee"].astype("float64")
    grouped["support"] = grouped["support"].astype("float64")

    logger.info(
        "Built %d unified record(s) from %d activation row(s); %d row(s) of excluded agents skipped",
        len(grouped),
        len(kept),
        len(activations) - len(kept),
    )
    return grouped[UNIFIED_COLUMNS]


def apply_targets(unified: pd.DataFrame, targets: pd.DataFrame) -> pd.DataFrame:
    """Add sales targets to every unified record of the same agent and code.

    Excluded target rows are ignored. A single agent/code target applies to
    each department/office combination of that pair.

    Args:
        unified: Unified records.
        targets: Parsed sales targets (agent, code, target, excluded).

    Returns:
        New unified frame with ``target`` filled in.
    """
    result = unified.copy()
    active = targets[~targets["excluded"]]
    if result.empty or active.empty:
        return result

    per_pair = active.groupby(["agent", "code"], sort=False)["target"].sum()
    lookup = per_pair.to_dict()
    result["target"] = [
        int(current) + int(lookup.get((agent, code), 0))
        for current, agent, code in zip(result["target"], result["agent"], result["code"])
    ]
    result["target"] = result["target"].astype("int64")
    return result
