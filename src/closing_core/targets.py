"""Helpers for the sales-target editor.

The target editor lists every agent/code pair seen in the activation log with
its current target, and writes edited targets back as sheet rows. Both
directions use the sales-target layout of ``closing_core.config``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Iterable

from closing_core.config import ReportConfig
from closing_core.staging.normalize import normalize_table
from closing_core.staging.references import sales_targets

logger = logging.getLogger(__name__)

TARGET_SHEET_HEADER = ["담당자명", "코드명", "목표값", "제외여부"]

# Header labels that leak into the data when the activation log is read with
# a single header row
_HEADER_LABELS = {"agent": "담당자", "code": "코드명"}


@dataclass(frozen=True)
class TargetEntry:
    agent: str
    code: str
    target: int = 0
    excluded: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "agent": self.agent,
            "code": self.code,
            "target": self.target,
            "excluded": self.excluded,
        }


def extract_agent_code_combinations(
    activation_rows: Any,
    sales_target_rows: Any,
    config: ReportConfig | None = None,
) -> list[TargetEntry]:
    """List agent/code pairs from the activation log with their current targets.

    The activation log is read with a single header row and no minimum width;
    rows repeating the header labels are skipped.

    Args:
        activation_rows: Raw activation table.
        sales_target_rows: Raw sales target table.
        config: Report configuration.

    Returns:
        One TargetEntry per unique non-blank pair, first-appearance order.
    """
    config = config or ReportConfig()
    layout = config.activation_layout
    pair_layout = replace(
        layout,
        name="activation_pairs",
        columns={"agent": layout.columns["agent"], "code": layout.columns["code"]},
        header_rows=1,
        min_cells=0,
        numeric=(),
    )
    frame = normalize_table(activation_rows, pair_layout).frame
    existing = {
        (row.agent, row.code): row
        for row in sales_targets(sales_target_rows, config).itertuples(index=False)
    }

    entries: dict[tuple[str, str], TargetEntry] = {}
    for agent, code in zip(frame["agent"], frame["code"]):
        if agent == _HEADER_LABELS["agent"] or code == _HEADER_LABELS["code"]:
            continue
        if not agent or not code or (agent, code) in entries:
            continue
        current = existing.get((agent, code))
        entries[(agent, code)] = TargetEntry(
            agent=agent,
            code=code,
            target=int(current.target) if current is not None else 0,
            excluded=bool(current.excluded) if current is not None else False,
        )

    logger.debug("Found %d agent/code combination(s)", len(entries))
    return list(entries.values())


def build_target_sheet_rows(
    targets: Iterable[TargetEntry | dict[str, Any]],
    config: ReportConfig | None = None,
) -> list[list[Any]]:
    """Render targets as sheet rows, header first.

    Args:
        targets: TargetEntry instances or dicts with agent, code, target and
            excluded keys.
        config: Report configuration (excluded flag value).

    Returns:
        Rows ready to be written to the sales-target sheet.

    Examples:
        >>> build_target_sheet_rows([{"agent": "Kim", "code": "A1", "target": 30, "excluded": False}])
        [['담당자명', '코드명', '목표값', '제외여부'], ['Kim', 'A1', 30, 'N']]
    """
    config = config or ReportConfig()
    rows: list[list[Any]] = [list(TARGET_SHEET_HEADER)]
    for target in targets:
        entry = target if isinstance(target, TargetEntry) else TargetEntry(**target)
        rows.append(
            [entry.agent, entry.code, entry.target, config.excluded_flag if entry.excluded else "N"]
        )
    return rows
