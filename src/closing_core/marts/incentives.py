"""Incentive tier calculator: support amounts for the top agents by fee.

Agents are ranked by their total fee over every agent/code/office/department
combination. The best ``top_n`` agents get the tiered rates of
``ReportConfig.support_rates`` (10/8/6/4/2 % by default) applied to the fee of
each of their combinations; everyone else gets no support. Support is then
summed into one lookup table per rollup dimension.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

import pandas as pd

from closing_core.config import ReportConfig

logger = logging.getLogger(__name__)

COMBINATION_FIELDS = ["agent", "code", "office", "department"]


@dataclass
class SupportTables:
    """Support amounts per rollup dimension.

    Attributes:
        combinations: One row per agent/code/office/department combination
            with fee, rank (0 when unranked), rate and support.
        code: Support summed per code.
        office: Support summed per office.
        department: Support summed per department.
        agent: Support summed per agent.
    """

    combinations: pd.DataFrame
    code: dict[str, float] = field(default_factory=dict)
    office: dict[str, float] = field(default_factory=dict)
    department: dict[str, float] = field(default_factory=dict)
    agent: dict[str, float] = field(default_factory=dict)

    def for_dimension(self, dimension: str) -> dict[str, float]:
        """Return the lookup table for one of code/office/department/agent."""
        return getattr(self, dimension)


def rank_agents(combinations: pd.DataFrame, top_n: int) -> pd.DataFrame:
    """Rank agents by total fee, best first.

    Ties keep first-appearance order (stable sort, no secondary key).

    Returns:
        DataFrame with columns agent, total_fee, rank (1-based) for the top
        ``top_n`` agents.
    """
    totals = (
        combinations.groupby("agent", sort=False)["fee"].sum().reset_index(name="total_fee")
    )
    ranked = totals.sort_values("total_fee", ascending=False, kind="stable").head(top_n)
    ranked = ranked.reset_index(drop=True)
    ranked["rank"] = range(1, len(ranked) + 1)
    return ranked


def calculate_support(
    activations: pd.DataFrame,
    excluded_agents: Iterable[str],
    config: ReportConfig,
) -> SupportTables:
    """Compute tiered support from filtered activation rows.

    Args:
        activations: Filtered activation rows.
        excluded_agents: Agents left out of the ranking entirely.
        config: Report configuration (support_rates, top_n).

    Returns:
        SupportTables with the per-combination detail and the four lookups.
    """
    excluded = set(excluded_agents)
    eligible = activations[(activations["agent"] != "") & ~activations["agent"].isin(excluded)]
    if eligible.empty:
        empty = pd.DataFrame(
            columns=COMBINATION_FIELDS + ["fee", "rank", "rate", "support"]
        )
        return SupportTables(combinations=empty)

    combinations = (
        eligible.groupby(COMBINATION_FIELDS, sort=False)["fee"].sum().reset_index()
    )

    top_n = min(config.top_n, len(config.support_rates))
    ranked = rank_agents(combinations, top_n)
    rank_by_agent = dict(zip(ranked["agent"], ranked["rank"]))

    combinations["rank"] = combinations["agent"].map(rank_by_agent).fillna(0).astype("int64")
    combinations["rate"] = [
        config.support_rates[rank - 1] if rank > 0 else 0.0 for rank in combinations["rank"]
    ]
    combinations["support"] = combinations["fee"] * combinations["rate"]

    tables = SupportTables(combinations=combinations)
    for dimension in ("code", "office", "department", "agent"):
        keyed = combinations[combinations[dimension] != ""]
        sums = keyed.groupby(dimension, sort=False)["support"].sum()
        setattr(tables, dimension, {key: float(value) for key, value in sums.items()})

    logger.info(
        "Support assigned to %d agent(s), total %.2f",
        len(ranked),
        float(combinations["support"].sum()),
    )
    return tables


def apply_support(unified: pd.DataFrame, tables: SupportTables) -> pd.DataFrame:
    """Copy each combination's support onto the matching unified record.

    Returns:
        New unified frame with ``support`` set (0 for unranked agents).
    """
    result = unified.copy()
    if result.empty or tables.combinations.empty:
        result["support"] = 0.0
        return result

    lookup = {
        tuple(values[:4]): float(values[4])
        for values in tables.combinations[COMBINATION_FIELDS + ["support"]].itertuples(
            index=False, name=None
        )
    }
    result["support"] = [
        lookup.get(key, 0.0)
        for key in result[COMBINATION_FIELDS].itertuples(index=False, name=None)
    ]
    result["support"] = result["support"].astype("float64")
    return result
