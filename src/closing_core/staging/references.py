"""Staging layer: reference lists derived from the auxiliary tables.

These are small lookups that drive the exclusion filter and the linker:

- the phone-model allow-list (operating-model reference list)
- sales targets per agent/code pair
- agents flagged as excluded in the sales-target table
- stores excluded from inventory counts (office stock, closed accounts,
  head-office sales)
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

import pandas as pd

from closing_core.cleaning import to_int
from closing_core.config import ReportConfig
from closing_core.staging.normalize import normalize_table

logger = logging.getLogger(__name__)

TARGET_COLUMNS = ["agent", "code", "target", "excluded"]


def unique_in_order(values: Any) -> list[str]:
    """Deduplicate values, keeping first-appearance order."""
    return list(dict.fromkeys(values))


def phone_models(operation_model_rows: Any, config: ReportConfig) -> set[str]:
    """Build the phone-model allow-list.

    Only rows whose category equals ``config.phone_category`` contribute;
    watches, tablets and other categories are ignored.

    Args:
        operation_model_rows: Raw operating-model table.
        config: Report configuration.

    Returns:
        Set of model names in the phone category.
    """
    frame = normalize_table(operation_model_rows, config.operation_model_layout).frame
    mask = (frame["category"] == config.phone_category) & (frame["model_name"] != "")
    models = set(frame.loc[mask, "model_name"])
    logger.debug("Phone allow-list holds %d model(s)", len(models))
    return models


def sales_targets(sales_target_rows: Any, config: ReportConfig) -> pd.DataFrame:
    """Parse the sales target table.

    Rows are keyed by ``agent|code``; when a pair appears twice the later row
    wins.

    Args:
        sales_target_rows: Raw sales target table (first row is the header).
        config: Report configuration.

    Returns:
        DataFrame with columns agent, code, target (int), excluded (bool).
    """
    frame = normalize_table(sales_target_rows, config.sales_target_layout).frame
    if frame.empty:
        return pd.DataFrame(
            {
                "agent": pd.Series(dtype="object"),
                "code": pd.Series(dtype="object"),
                "target": pd.Series(dtype="int64"),
                "excluded": pd.Series(dtype="bool"),
            }
        )

    targets = pd.DataFrame(
        {
            "agent": frame["agent"],
            "code": frame["code"],
            "target": frame["target"].map(to_int).astype("int64"),
            "excluded": frame["excluded"] == config.excluded_flag,
        }
    )
    targets = targets.drop_duplicates(subset=["agent", "code"], keep="last")
    return targets.reset_index(drop=True)[TARGET_COLUMNS]


def excluded_agents_from_targets(targets: pd.DataFrame) -> list[str]:
    """List agents flagged as excluded in the sales target table."""
    agents = targets.loc[targets["excluded"] & (targets["agent"] != ""), "agent"]
    return unique_in_order(agents)


def excluded_stores_from_inventory(inventory_rows: Any, config: ReportConfig) -> list[str]:
    """List inventory store labels that must not count as stock.

    Scans the store-label column from ``config.excluded_store_first_row`` on
    and keeps labels containing any of ``config.excluded_store_markers``.

    Args:
        inventory_rows: Raw inventory table.
        config: Report configuration.

    Returns:
        Excluded store labels, deduplicated in first-appearance order.
    """
    position = config.inventory_layout.columns["store_label"]
    label_layout = replace(
        config.inventory_layout,
        name="inventory_store_labels",
        columns={"store_label": position},
        header_rows=config.excluded_store_first_row,
        min_cells=position + 1,
        numeric=(),
    )
    labels = normalize_table(inventory_rows, label_layout).frame["store_label"]
    markers = config.excluded_store_markers
    excluded = [label for label in labels if any(marker in label for marker in markers)]
    return unique_in_order(excluded)
