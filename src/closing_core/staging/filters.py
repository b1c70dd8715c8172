"""Staging layer: exclusion filter over normalized activation rows.

The filter is an ordered chain of predicates. Each row is attributed to the
first predicate it fails, so the per-predicate counts add up to the number of
dropped rows. Counts are kept for operator diagnostics only; they do not feed
any downstream computation.

Agent-level exclusion is not applied here. It depends on the sales-target
table and happens when unified records are created.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date

import pandas as pd

from closing_core.cleaning import to_date
from closing_core.config import ReportConfig

logger = logging.getLogger(__name__)

Predicate = Callable[[pd.DataFrame], pd.Series]


@dataclass(frozen=True)
class ExclusionRule:
    """One named predicate of the exclusion chain.

    Attributes:
        name: Key under which dropped rows are counted.
        keep: Returns a boolean mask, True for rows that pass.
    """

    name: str
    keep: Predicate


@dataclass
class FilterResult:
    """Result of the exclusion filter.

    Attributes:
        frame: Surviving activation rows, original order preserved.
        counts: Dropped rows per rule name, plus ``too_short`` (rows dropped
            by the normalizer) and ``kept``.
    """

    frame: pd.DataFrame
    counts: dict[str, int] = field(default_factory=dict)


def build_rules(target_date: date, models: set[str], config: ReportConfig) -> list[ExclusionRule]:
    """Build the activation exclusion chain for one report.

    Args:
        target_date: Rows activated after this date are excluded.
        models: Phone-model allow-list.
        config: Report configuration (markers).

    Returns:
        Ordered list of rules: date, model, plan, condition, type.
    """

    def _date_ok(df: pd.DataFrame) -> pd.Series:
        parsed = df["activation_date"].map(to_date)
        return parsed.map(lambda d: d is not None and d <= target_date).astype(bool)

    def _model_ok(df: pd.DataFrame) -> pd.Series:
        return df["model"].isin(models)

    def _plan_ok(df: pd.DataFrame) -> pd.Series:
        return ~df["plan_type"].str.contains(config.prepaid_marker, regex=False)

    def _condition_ok(df: pd.DataFrame) -> pd.Series:
        return ~df["condition"].str.contains(config.used_marker, regex=False)

    def _type_ok(df: pd.DataFrame) -> pd.Series:
        used = df["type"].str.contains(config.used_marker, regex=False)
        sim_only = df["type"].str.contains(config.sim_only_marker, regex=False)
        return ~(used | sim_only)

    return [
        ExclusionRule("date", _date_ok),
        ExclusionRule("model", _model_ok),
        ExclusionRule("plan", _plan_ok),
        ExclusionRule("condition", _condition_ok),
        ExclusionRule("type", _type_ok),
    ]


def apply_rules(frame: pd.DataFrame, rules: list[ExclusionRule], too_short: int = 0) -> FilterResult:
    """Run the rule chain over normalized activation rows.

    Args:
        frame: Normalized activation rows.
        rules: Ordered exclusion rules.
        too_short: Rows already dropped by the normalizer, reported as-is.

    Returns:
        FilterResult with surviving rows and per-rule counts.
    """
    remaining = frame
    counts: dict[str, int] = {"too_short": too_short}

    for rule in rules:
        if remaining.empty:
            counts[rule.name] = 0
            continue
        mask = rule.keep(remaining).astype(bool)
        counts[rule.name] = int((~mask).sum())
        remaining = remaining[mask]

    counts["kept"] = len(remaining)
    logger.debug("Exclusion filter counts: %s", counts)

    return FilterResult(frame=remaining.reset_index(drop=True), counts=counts)


def filter_activations(
    frame: pd.DataFrame,
    target_date: date,
    models: set[str],
    config: ReportConfig,
    too_short: int = 0,
) -> FilterResult:
    """Apply the standard exclusion chain to normalized activation rows."""
    result = apply_rules(frame, build_rules(target_date, models, config), too_short=too_short)
    logger.info(
        "Kept %d of %d activation row(s) for %s",
        result.counts["kept"],
        len(frame) + too_short,
        target_date.isoformat(),
    )
    return result
