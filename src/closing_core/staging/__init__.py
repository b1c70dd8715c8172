"""Staging layer: positional rows to typed, filtered DataFrames.

- normalize: extract fields from positional rows, count short rows
- references: phone allow-list, sales targets, excluded agents and stores
- filters: ordered exclusion chain over activation rows
"""

from closing_core.staging.filters import FilterResult, filter_activations
from closing_core.staging.normalize import NormalizedTable, normalize_table

__all__ = ["FilterResult", "NormalizedTable", "filter_activations", "normalize_table"]
