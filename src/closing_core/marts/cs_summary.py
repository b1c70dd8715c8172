"""CS activation summary: wireless and wired activations per CS staff member.

Wireless activations come from the filtered activation log, where a CS
column names the customer-service employee credited with the sale. Wired
(home) activations come from a separate log and only count entries whose CS
value carries one of the wired roster markers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any

import pandas as pd

from closing_core.cleaning import to_date
from closing_core.config import ReportConfig

logger = logging.getLogger(__name__)


@dataclass
class CSAgentSummary:
    agent: str
    wireless: int = 0
    wired: int = 0

    @property
    def total(self) -> int:
        return self.wireless + self.wired

    def to_dict(self) -> dict[str, Any]:
        return {
            "agent": self.agent,
            "wireless": self.wireless,
            "wired": self.wired,
            "total": self.total,
        }


@dataclass
class CSSummary:
    """Totals and per-employee breakdown of CS activations.

    Attributes:
        total_wireless: All valid wireless CS activations.
        total_wired: All valid wired CS activations up to the target date.
        agents: Employees with at least one activation, most active first.
    """

    total_wireless: int = 0
    total_wired: int = 0
    agents: list[CSAgentSummary] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.total_wireless + self.total_wired

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalWireless": self.total_wireless,
            "totalWired": self.total_wired,
            "total": self.total,
            "agents": [agent.to_dict() for agent in self.agents],
        }


def _is_cs_value(value: str, config: ReportConfig) -> bool:
    return bool(value) and value not in config.cs_blank_markers


def _is_wired_cs_value(value: str, config: ReportConfig) -> bool:
    return _is_cs_value(value, config) and any(m in value for m in config.cs_wired_markers)


def calculate_cs_summary(
    activations: pd.DataFrame,
    home_activations: pd.DataFrame,
    target_date: date,
    config: ReportConfig,
) -> CSSummary:
    """Count CS-credited activations per employee.

    Args:
        activations: Filtered wireless activation rows.
        home_activations: Normalized wired activation rows.
        target_date: Wired entries received after this date are ignored.
        config: Report configuration (CS markers).

    Returns:
        CSSummary with employees sorted by total descending (stable).
    """
    roster: dict[str, CSAgentSummary] = {}

    wired_employees = [v for v in home_activations["cs_employee"] if _is_wired_cs_value(v, config)]
    wireless_employees = [v for v in activations["cs_employee"] if _is_cs_value(v, config)]
    for employee in wired_employees + wireless_employees:
        roster.setdefault(employee, CSAgentSummary(agent=employee))

    total_wireless = 0
    for employee in wireless_employees:
        total_wireless += 1
        roster[employee].wireless += 1

    total_wired = 0
    for row in home_activations.itertuples(index=False):
        received = to_date(row.receipt_date)
        if received is None or received > target_date:
            continue
        if not _is_wired_cs_value(row.cs_employee, config):
            continue
        total_wired += 1
        roster[row.cs_employee].wired += 1

    agents = sorted(
        (summary for summary in roster.values() if summary.total > 0),
        key=lambda s: s.total,
        reverse=True,
    )
    logger.debug("CS summary: %d wireless, %d wired", total_wireless, total_wired)
    return CSSummary(total_wireless=total_wireless, total_wired=total_wired, agents=agents)
