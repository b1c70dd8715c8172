"""Mapping-failure collector: activations whose store is not registered.

Purely diagnostic. Activation rows whose store code appears nowhere in the
dealer store registry are grouped by store code and agent so an operator can
fix the registry. The rollups are not affected.
"""

from __future__ import annotations

import logging

import pandas as pd

logger = logging.getLogger(__name__)

MAPPING_FAILURE_REASON = "store mapping failed"
MAPPING_FAILURE_COLUMNS = ["store_code", "agent", "reason", "count"]


def find_mapping_failures(activations: pd.DataFrame, stores: pd.DataFrame) -> pd.DataFrame:
    """Collect activation store codes missing from the dealer registry.

    Args:
        activations: Filtered activation rows (agent exclusion not applied).
        stores: Normalized dealer store registry rows.

    Returns:
        DataFrame with store_code, agent, reason, count; one row per
        store_code/agent pair in first-appearance order.
    """
    known = set(stores["store_code"]) if not stores.empty else set()
    missing = activations[(activations["store_code"] != "") & ~activations["store_code"].isin(known)]
    if missing.empty:
        return pd.DataFrame(columns=MAPPING_FAILURE_COLUMNS)

    failures = (
        missing.groupby(["store_code", "agent"], sort=False).size().reset_index(name="count")
    )
    failures["reason"] = MAPPING_FAILURE_REASON
    logger.info(
        "%d activation row(s) across %d store/agent pair(s) have no registry entry",
        int(failures["count"].sum()),
        len(failures),
    )
    return failures[MAPPING_FAILURE_COLUMNS]
