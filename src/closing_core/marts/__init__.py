"""Marts layer: report views built from linked unified records.

- incentives: tiered support for the top agents by fee
- rollup: code, office, department and agent views with derived ratios
- diagnostics: activation store codes missing from the registry
- cs_summary: wireless and wired activations per CS staff member
"""

from closing_core.marts.cs_summary import CSSummary, calculate_cs_summary
from closing_core.marts.diagnostics import find_mapping_failures
from closing_core.marts.incentives import SupportTables, apply_support, calculate_support
from closing_core.marts.rollup import DIMENSIONS, aggregate_all, aggregate_dimension

__all__ = [
    "CSSummary",
    "DIMENSIONS",
    "SupportTables",
    "aggregate_all",
    "aggregate_dimension",
    "apply_support",
    "calculate_cs_summary",
    "calculate_support",
    "find_mapping_failures",
]
