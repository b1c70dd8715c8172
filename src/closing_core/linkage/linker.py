"""Record linker: store registration and inventory counts per unified record.

Store identifiers are not comparable across the activation log and the dealer
registry, so linkage is two-hop:

1. Bridge hop: customer-mapping rows whose agent (qualifiers removed) and
   code equal the record's agent and code yield candidate store names.
2. Registry hop: a candidate counts as registered when a dealer store row
   carries the same store code and code name and an agent name accepted by
   the NameMatcher.

The same two hops against the inventory table produce device and SIM
counts. Candidates that fail the registry hop while a registry row for the
store exists are reported as MatchingMismatch entries for manual correction.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from closing_core.cleaning import strip_parenthetical
from closing_core.config import ReportConfig
from closing_core.linkage.names import NameMatcher, names_match
from closing_core.staging.normalize import ROW_WIDTH_COLUMN

logger = logging.getLogger(__name__)

StorePair = tuple[str, str]


@dataclass(frozen=True)
class MatchingMismatch:
    """A bridge candidate whose registry row disagrees on agent or code.

    Attributes:
        customer_agent: Agent from the customer-mapping row (qualifiers removed).
        customer_code: Code name from the customer-mapping row.
        customer_store: Store name from the customer-mapping row.
        registry_agent: Agent on the first registry row with that store code.
        registry_code: Code name on that registry row.
        registry_store: Store code on that registry row.
        type: Kind of linkage that failed.
    """

    customer_agent: str
    customer_code: str
    customer_store: str
    registry_agent: str
    registry_code: str
    registry_store: str
    type: str = "store"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "customer": {
                "agent": self.customer_agent,
                "code": self.customer_code,
                "store": self.customer_store,
            },
            "registry": {
                "agent": self.registry_agent,
                "code": self.registry_code,
                "store": self.registry_store,
            },
        }


@dataclass
class LinkageResult:
    """Unified records enriched with linkage counts.

    Attributes:
        unified: New frame with registered_stores, active_stores, devices
            and sims filled in.
        mismatches: Deduplicated mismatches in discovery order.
    """

    unified: pd.DataFrame
    mismatches: list[MatchingMismatch] = field(default_factory=list)


def bridge_candidates(customers: pd.DataFrame) -> dict[StorePair, list[str]]:
    """Index customer-mapping rows by (agent, code).

    Returns:
        Mapping of (agent without qualifiers, code) to unique candidate store
        names in first-appearance order. Rows with a blank store are skipped.
    """
    candidates: dict[StorePair, list[str]] = defaultdict(list)
    for row in customers.itertuples(index=False):
        if not row.store_name:
            continue
        pair = (strip_parenthetical(row.agent_name), row.code_name)
        if row.store_name not in candidates[pair]:
            candidates[pair].append(row.store_name)
    return dict(candidates)


def _active_store_keys(activations: pd.DataFrame) -> set[tuple[str, str, str, str, str]]:
    keys = set()
    for row in activations.itertuples(index=False):
        if not row.code.strip() or not row.agent.strip():
            continue
        keys.add((row.store_code, row.agent, row.department, row.office, row.code))
    return keys


def link_stores(
    unified: pd.DataFrame,
    customers: pd.DataFrame,
    stores: pd.DataFrame,
    activations: pd.DataFrame,
    config: ReportConfig,
    name_matcher: NameMatcher = names_match,
) -> LinkageResult:
    """Count registered and active stores for each unified record.

    Args:
        unified: Unified records.
        customers: Normalized customer-mapping rows.
        stores: Normalized dealer store registry rows.
        activations: Filtered activation rows (agent exclusion not applied).
        config: Report configuration.
        name_matcher: Agent-name matching policy.

    Returns:
        LinkageResult with registered_stores/active_stores set.
    """
    result = unified.copy()
    if result.empty or customers.empty or stores.empty:
        result["registered_stores"] = 0
        result["active_stores"] = 0
        return LinkageResult(unified=result)

    registry = stores[stores[ROW_WIDTH_COLUMN] >= config.registry_min_cells]
    registry_agents: dict[StorePair, list[str]] = defaultdict(list)
    first_registry_row: dict[str, tuple[str, str, str]] = {}
    for row in registry.itertuples(index=False):
        registry_agents[(row.store_code, row.code_name)].append(strip_parenthetical(row.agent_name))
        first_registry_row.setdefault(row.store_code, (row.agent_name, row.code_name, row.store_code))

    candidates = bridge_candidates(customers)
    active_keys = _active_store_keys(activations)

    mismatches: dict[MatchingMismatch, None] = {}
    registered_counts: list[int] = []
    active_counts: list[int] = []

    for record in result.itertuples(index=False):
        registered: list[str] = []
        for store in candidates.get((record.agent, record.code), []):
            agents = registry_agents.get((store, record.code), [])
            if any(name_matcher(store_agent, record.agent) for store_agent in agents):
                registered.append(store)
                continue
            closest = first_registry_row.get(store)
            if closest is not None:
                mismatch = MatchingMismatch(
                    customer_agent=record.agent,
                    customer_code=record.code,
                    customer_store=store,
                    registry_agent=closest[0],
                    registry_code=closest[1],
                    registry_store=closest[2],
                )
                mismatches.setdefault(mismatch, None)

        active = sum(
            1
            for store in registered
            if (store, record.agent, record.department, record.office, record.code) in active_keys
        )
        registered_counts.append(len(registered))
        active_counts.append(active)

    result["registered_stores"] = registered_counts
    result["active_stores"] = active_counts

    logger.info(
        "Linked %d registered store(s) across %d record(s); %d mismatch(es)",
        sum(registered_counts),
        len(result),
        len(mismatches),
    )
    return LinkageResult(unified=result, mismatches=list(mismatches))


def link_inventory(
    unified: pd.DataFrame,
    customers: pd.DataFrame,
    inventory: pd.DataFrame,
    excluded_agents: Iterable[str],
    excluded_stores: Iterable[str],
    config: ReportConfig,
    name_matcher: NameMatcher = names_match,
) -> pd.DataFrame:
    """Count devices and SIMs held by the stores bridged to each record.

    Inventory rows of excluded agents or excluded stores are ignored. An item
    whose type equals ``config.sim_item_type`` is a SIM, anything else is a
    device.

    Returns:
        New unified frame with devices and sims set.
    """
    result = unified.copy()
    if result.empty or customers.empty or inventory.empty:
        result["devices"] = 0
        result["sims"] = 0
        return result

    agents_out = set(excluded_agents)
    stores_out = set(excluded_stores)
    stock: dict[StorePair, list[tuple[str, bool]]] = defaultdict(list)
    for row in inventory.itertuples(index=False):
        agent = strip_parenthetical(row.agent_name)
        if agent in agents_out or row.store_name in stores_out:
            continue
        stock[(row.store_name, row.code_name)].append((agent, row.item_type == config.sim_item_type))

    candidates = bridge_candidates(customers)
    devices: list[int] = []
    sims: list[int] = []
    for record in result.itertuples(index=False):
        device_count = 0
        sim_count = 0
        for store in candidates.get((record.agent, record.code), []):
            for stock_agent, is_sim in stock.get((store, record.code), []):
                if not name_matcher(stock_agent, record.agent):
                    continue
                if is_sim:
                    sim_count += 1
                else:
                    device_count += 1
        devices.append(device_count)
        sims.append(sim_count)

    result["devices"] = devices
    result["sims"] = sims
    logger.debug("Linked %d device(s) and %d SIM(s)", sum(devices), sum(sims))
    return result


def link_records(
    unified: pd.DataFrame,
    customers: pd.DataFrame,
    stores: pd.DataFrame,
    inventory: pd.DataFrame,
    activations: pd.DataFrame,
    excluded_agents: Iterable[str],
    excluded_stores: Iterable[str],
    config: ReportConfig,
    name_matcher: NameMatcher = names_match,
) -> LinkageResult:
    """Run store and inventory linkage in sequence."""
    excluded_agents = list(excluded_agents)
    stores_result = link_stores(unified, customers, stores, activations, config, name_matcher)
    enriched = link_inventory(
        stores_result.unified,
        customers,
        inventory,
        excluded_agents,
        excluded_stores,
        config,
        name_matcher,
    )
    return LinkageResult(unified=enriched, mismatches=stores_result.mismatches)
