"""Staging layer: turn positional sheet rows into typed DataFrames.

Every source table arrives as a list of rows, each a list of raw cells, with
fields addressed by position (see ``closing_core.config``). This module
extracts the fields of a TableLayout into a DataFrame with one row per input
row that has enough cells. Short rows are dropped and counted rather than
raising.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Iterable

import pandas as pd

from closing_core.cleaning import DEFAULT_FEE_SENTINELS, parse_fee, to_text
from closing_core.config import TableLayout
from closing_core.exceptions import InputContractError

logger = logging.getLogger(__name__)

ROW_WIDTH_COLUMN = "row_width"


@dataclass
class NormalizedTable:
    """Result of normalizing one source table.

    Attributes:
        frame: One row per kept input row; columns are the layout's fields
            plus ``row_width`` (number of cells in the raw row).
        too_short: Number of data rows dropped for having too few cells.
        header_rows: Number of header rows skipped.
    """

    frame: pd.DataFrame
    too_short: int
    header_rows: int


def validate_table(rows: Any, name: str) -> list[Sequence[Any]]:
    """Check that a table honours the list-of-rows contract.

    Args:
        rows: The raw table. None is accepted as an empty table.
        name: Table name for the error message.

    Returns:
        The rows as a list.

    Raises:
        InputContractError: If the table or one of its rows has the wrong type.
    """
    if rows is None:
        return []
    if isinstance(rows, (str, bytes, Mapping)) or not isinstance(rows, Sequence):
        raise InputContractError(
            f"Table '{name}' must be a list of rows, got {type(rows).__name__}"
        )
    for i, row in enumerate(rows):
        if isinstance(row, (str, bytes, Mapping)) or not isinstance(row, Sequence):
            raise InputContractError(
                f"Row {i} of table '{name}' must be a list of cells, got {type(row).__name__}"
            )
    return list(rows)


def empty_frame(layout: TableLayout) -> pd.DataFrame:
    """Return an empty DataFrame with the layout's columns."""
    columns = list(layout.columns) + [ROW_WIDTH_COLUMN]
    return pd.DataFrame({col: pd.Series(dtype=_dtype_for(layout, col)) for col in columns})


def _dtype_for(layout: TableLayout, column: str) -> str:
    if column == ROW_WIDTH_COLUMN:
        return "int64"
    if column in layout.numeric:
        return "float64"
    return "object"


def _cell(row: Sequence[Any], position: int) -> Any:
    return row[position] if position < len(row) else None


def normalize_table(
    rows: Any,
    layout: TableLayout,
    fee_sentinels: Iterable[str] = DEFAULT_FEE_SENTINELS,
) -> NormalizedTable:
    """Extract the layout's fields from a positional table.

    Args:
        rows: Raw table (list of rows, each a list of cells).
        layout: Positions, header rows and minimum width for this table.
        fee_sentinels: Raw values meaning "not available" for numeric fields.

    Returns:
        NormalizedTable with the typed frame and the too-short count.

    Raises:
        InputContractError: If ``rows`` is not a list of row sequences.

    Examples:
        >>> from closing_core.config import CUSTOMER_LAYOUT
        >>> table = normalize_table([["", "A1", "StoreX", "Kim"], ["x"]], CUSTOMER_LAYOUT)
        >>> table.frame["store_name"].tolist(), table.too_short
        (['StoreX'], 1)
    """
    data_rows = validate_table(rows, layout.name)[layout.header_rows :]
    sentinels = tuple(fee_sentinels)

    records: list[dict[str, Any]] = []
    too_short = 0
    for row in data_rows:
        if len(row) < layout.min_cells:
            too_short += 1
            continue
        record: dict[str, Any] = {}
        for column, position in layout.columns.items():
            raw = _cell(row, position)
            if column in layout.numeric:
                record[column] = parse_fee(raw, sentinels)
            else:
                record[column] = to_text(raw)
        record[ROW_WIDTH_COLUMN] = len(row)
        records.append(record)

    if records:
        frame = pd.DataFrame.from_records(records, columns=list(layout.columns) + [ROW_WIDTH_COLUMN])
    else:
        frame = empty_frame(layout)

    if too_short:
        logger.debug("%s: dropped %d row(s) with fewer than %d cells", layout.name, too_short, layout.min_cells)
    logger.debug("%s: normalized %d row(s)", layout.name, len(frame))

    return NormalizedTable(frame=frame, too_short=too_short, header_rows=layout.header_rows)
