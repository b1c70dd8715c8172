"""Closing Core - daily closing report engine for a dealer network.

This package turns heterogeneous, positionally-addressed spreadsheet tables
(activation logs, dealer store registry, inventory, customer-to-agent
mappings, sales targets) into a consistent closing report rolled up by code,
office, department and agent.

Module Structure:
    closing_core.staging: Row normalizer, reference lists, exclusion filter
    closing_core.linkage: Match keys, name matching, two-hop record linkage
    closing_core.marts: Incentive tiers, rollups, mapping failures, CS summary
    closing_core.targets: Sales-target editor helpers
    closing_core.config: Positional layouts and ReportConfig

Quick Start:
    >>> from closing_core import SourceTables, build_closing_report
    >>>
    >>> tables = SourceTables.from_mapping(snapshot)
    >>> report = build_closing_report(tables, "2025-03-15")
    >>> report.agent_data.head()
    >>> payload = report.to_dict()  # wire format, camelCase keys

Grain Reference:
    - unified record: agent x department x office x code
    - codeData / officeData / departmentData / agentData: one row per value
"""

__version__ = "0.1.0"

from closing_core.api import ClosingReport, SourceTables, build_closing_report
from closing_core.config import ReportConfig
from closing_core.exceptions import (
    ClosingReportError,
    ConfigError,
    DataQualityError,
    InputContractError,
)

__all__ = [
    "ClosingReport",
    "ClosingReportError",
    "ConfigError",
    "DataQualityError",
    "InputContractError",
    "ReportConfig",
    "SourceTables",
    "__version__",
    "build_closing_report",
]
