"""Tests for the sales-target editor helpers."""

from closing_core.targets import (
    TARGET_SHEET_HEADER,
    TargetEntry,
    build_target_sheet_rows,
    extract_agent_code_combinations,
)
from helpers import TARGET_HEADER, activation_row, activation_table, target_row


def test_combinations_merge_existing_targets() -> None:
    activations = activation_table(
        activation_row(agent="Kim", code="A1"),
        activation_row(agent="담당자", code="코드명"),
        activation_row(agent="Lee", code="B2"),
        activation_row(agent="Kim", code="A1", office="Busan"),
        activation_row(agent="", code="C3"),
    )
    targets = [TARGET_HEADER, target_row("Lee", "B2", "25", excluded="Y")]

    entries = extract_agent_code_combinations(activations, targets)

    assert entries == [
        TargetEntry(agent="Kim", code="A1", target=0, excluded=False),
        TargetEntry(agent="Lee", code="B2", target=25, excluded=True),
    ]


def test_combinations_ignore_width_limits() -> None:
    short = ["", "", "", "", "A1", "", "", "", "Kim"]
    entries = extract_agent_code_combinations([["header"], short], [])
    assert [e.to_dict() for e in entries] == [
        {"agent": "Kim", "code": "A1", "target": 0, "excluded": False}
    ]


def test_sheet_rows_from_entries_and_dicts() -> None:
    rows = build_target_sheet_rows(
        [
            TargetEntry(agent="Kim", code="A1", target=30),
            {"agent": "Lee", "code": "B2", "target": 10, "excluded": True},
        ]
    )
    assert rows == [
        TARGET_SHEET_HEADER,
        ["Kim", "A1", 30, "N"],
        ["Lee", "B2", 10, "Y"],
    ]


def test_sheet_rows_empty_has_header_only() -> None:
    assert build_target_sheet_rows([]) == [TARGET_SHEET_HEADER]
