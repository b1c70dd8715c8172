"""Public API for the closing report.

This module provides the main entry point: ``build_closing_report`` runs the
whole pipeline over in-memory source tables and returns a ClosingReport.

This function:
- does NOT read or write any files,
- does NOT fetch the source tables (that is the data source's job),
- does NOT cache results between calls,
- MAY log progress via the logging module.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from datetime import date, datetime
from typing import Any

import pandas as pd

from closing_core.config import ReportConfig
from closing_core.exceptions import InputContractError
from closing_core.linkage.keys import apply_targets, build_unified_records
from closing_core.linkage.linker import MatchingMismatch, link_records
from closing_core.linkage.names import NameMatcher, names_match
from closing_core.marts.cs_summary import CSSummary, calculate_cs_summary
from closing_core.marts.diagnostics import find_mapping_failures
from closing_core.marts.incentives import SupportTables, apply_support, calculate_support
from closing_core.marts.rollup import add_derived_metrics, aggregate_all
from closing_core.staging.filters import filter_activations
from closing_core.staging.normalize import normalize_table
from closing_core.staging.references import (
    excluded_agents_from_targets,
    excluded_stores_from_inventory,
    phone_models,
    sales_targets,
    unique_in_order,
)

logger = logging.getLogger(__name__)


@dataclass
class SourceTables:
    """The raw source tables of one report, each a list of rows of cells.

    Attributes:
        activations: Wireless activation log.
        stores: Dealer store registry.
        inventory: Device and SIM inventory.
        operation_models: Operating-model reference list (category, model).
        customers: Customer-to-agent bridge table.
        sales_targets: Sales targets and excluded flags per agent/code.
        home_activations: Wired (home) activation log, used by the CS summary.
    """

    activations: list[list[Any]] = field(default_factory=list)
    stores: list[list[Any]] = field(default_factory=list)
    inventory: list[list[Any]] = field(default_factory=list)
    operation_models: list[list[Any]] = field(default_factory=list)
    customers: list[list[Any]] = field(default_factory=list)
    sales_targets: list[list[Any]] = field(default_factory=list)
    home_activations: list[list[Any]] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> SourceTables:
        """Create SourceTables from a mapping of table name to rows.

        Missing tables are treated as empty.

        Raises:
            InputContractError: If ``data`` is not a mapping or names an
                unknown table.
        """
        if not isinstance(data, dict):
            raise InputContractError(f"Source tables must be a mapping, got {type(data).__name__}")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise InputContractError(f"Unknown source tables: {unknown}. Expected: {sorted(known)}")
        return cls(**{name: data[name] if data[name] is not None else [] for name in data})


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _records(frame: pd.DataFrame) -> list[dict[str, Any]]:
    if frame.empty:
        return []
    return frame.rename(columns=_camel).to_dict(orient="records")


@dataclass
class ClosingReport:
    """Result of one closing report computation.

    Attributes:
        date: Target date (ISO format).
        code_data: Rollup by code, sorted by fee.
        office_data: Rollup by office, sorted by performance.
        department_data: Rollup by department, sorted by fee.
        agent_data: Rollup by agent, sorted by fee.
        cs_summary: CS activation summary.
        mapping_failures: Activation store codes missing from the registry.
        excluded_agents: Agents left out of every rollup.
        excluded_stores: Stores left out of inventory counts.
        matching_mismatches: Bridge candidates rejected by the registry.
        unified: The linked unified records behind the rollups.
        filter_counts: Rows dropped per exclusion rule.
        support: Support lookups per dimension.
    """

    date: str
    code_data: pd.DataFrame
    office_data: pd.DataFrame
    department_data: pd.DataFrame
    agent_data: pd.DataFrame
    cs_summary: CSSummary
    mapping_failures: pd.DataFrame
    excluded_agents: list[str]
    excluded_stores: list[str]
    matching_mismatches: list[MatchingMismatch]
    unified: pd.DataFrame
    filter_counts: dict[str, int]
    support: SupportTables

    def to_dict(self) -> dict[str, Any]:
        """Render the report in its wire format (camelCase keys)."""
        return {
            "date": self.date,
            "codeData": _records(self.code_data),
            "officeData": _records(self.office_data),
            "departmentData": _records(self.department_data),
            "agentData": _records(self.agent_data),
            "csSummary": self.cs_summary.to_dict(),
            "mappingFailures": _records(self.mapping_failures),
            "excludedAgents": list(self.excluded_agents),
            "excludedStores": list(self.excluded_stores),
            "matchingMismatches": [m.to_dict() for m in self.matching_mismatches],
        }


def _parse_target_date(value: str | date) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as e:
        raise ValueError(f"Invalid date format: {value!r} (expected YYYY-MM-DD)") from e


def build_closing_report(
    tables: SourceTables,
    target_date: str | date,
    *,
    excluded_agents: list[str] | None = None,
    excluded_stores: list[str] | None = None,
    config: ReportConfig | None = None,
    as_of: str | date | None = None,
    name_matcher: NameMatcher = names_match,
) -> ClosingReport:
    """Build the closing report for one target date.

    Pipeline:
    1. Normalize every table and build the reference lists
    2. Filter activation rows (date, model, plan, condition, type)
    3. Rank agents and compute tiered support
    4. Build unified records, apply targets, link stores and inventory
    5. Roll up by code, office, department and agent
    6. Collect mapping failures and the CS summary

    Args:
        tables: Raw source tables.
        target_date: Report date (YYYY-MM-DD); later activations are excluded.
        excluded_agents: Agents to leave out. Defaults to the agents flagged
            in the sales-target table.
        excluded_stores: Inventory stores to ignore. Defaults to stores whose
            inventory label marks office stock, closed accounts or head-office
            sales.
        config: Report configuration. Defaults to ReportConfig().
        as_of: Reference date for the month-end projection. Defaults to
            ``target_date``.
        name_matcher: Agent-name matching policy used by the linker.

    Returns:
        ClosingReport with the four rollups and the diagnostics.

    Raises:
        ValueError: If ``target_date`` or ``as_of`` is not a valid ISO date.
        InputContractError: If a table is not a list of row sequences.

    Examples:
        >>> tables = SourceTables(activations=rows, operation_models=models)
        >>> report = build_closing_report(tables, "2025-03-15")
        >>> report.to_dict()["agentData"][0]["performance"]
        1
    """
    config = config or ReportConfig()
    report_date = _parse_target_date(target_date)
    reference_date = _parse_target_date(as_of) if as_of is not None else report_date

    logger.info("Building closing report for %s", report_date.isoformat())

    activations = normalize_table(tables.activations, config.activation_layout, config.fee_sentinels)
    stores = normalize_table(tables.stores, config.store_layout).frame
    inventory = normalize_table(tables.inventory, config.inventory_layout).frame
    customers = normalize_table(tables.customers, config.customer_layout).frame
    home = normalize_table(tables.home_activations, config.home_activation_layout).frame

    models = phone_models(tables.operation_models, config)
    targets = sales_targets(tables.sales_targets, config)

    if excluded_agents is None:
        excluded_agents = excluded_agents_from_targets(targets)
    else:
        excluded_agents = unique_in_order(excluded_agents)
    if excluded_stores is None:
        excluded_stores = excluded_stores_from_inventory(tables.inventory, config)
    else:
        excluded_stores = unique_in_order(excluded_stores)

    filtered = filter_activations(
        activations.frame, report_date, models, config, too_short=activations.too_short
    )

    support = calculate_support(filtered.frame, excluded_agents, config)

    unified = build_unified_records(filtered.frame, excluded_agents)
    unified = apply_targets(unified, targets)
    linkage = link_records(
        unified,
        customers,
        stores,
        inventory,
        filtered.frame,
        excluded_agents,
        excluded_stores,
        config,
        name_matcher,
    )
    unified = apply_support(linkage.unified, support)
    unified = add_derived_metrics(unified, reference_date)

    views = aggregate_all(unified, support, reference_date)
    cs_summary = calculate_cs_summary(filtered.frame, home, report_date, config)
    mapping_failures = find_mapping_failures(filtered.frame, stores)

    logger.info(
        "Closing report for %s: %d record(s), %d mismatch(es), %d mapping failure(s)",
        report_date.isoformat(),
        len(unified),
        len(linkage.mismatches),
        len(mapping_failures),
    )

    return ClosingReport(
        date=report_date.isoformat(),
        code_data=views["code"],
        office_data=views["office"],
        department_data=views["department"],
        agent_data=views["agent"],
        cs_summary=cs_summary,
        mapping_failures=mapping_failures,
        excluded_agents=excluded_agents,
        excluded_stores=excluded_stores,
        matching_mismatches=linkage.mismatches,
        unified=unified,
        filter_counts=filtered.counts,
        support=support,
    )
