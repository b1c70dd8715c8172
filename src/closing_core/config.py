"""Unified configuration for Closing Core.

This module holds the positional contract between the engine and its data
source (which cell of which table carries which field) together with the
business constants of the closing report: markers used by the exclusion
filter, the support tiers, and the CS roster markers.

The column layouts are versioned: any change to a position is a breaking
change for the spreadsheet collaborator and must bump ``LAYOUT_VERSION``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

from closing_core.exceptions import ConfigError

LAYOUT_VERSION = "v1"


@dataclass(frozen=True)
class TableLayout:
    """Positional layout of one source table.

    Attributes:
        name: Table name used in logs and diagnostics.
        columns: Mapping of field name to zero-based cell position.
        header_rows: Number of leading header/metadata rows to skip.
        min_cells: Rows with fewer cells are dropped as "too short".
        numeric: Field names parsed as fees (sentinel-aware floats).
    """

    name: str
    columns: dict[str, int]
    header_rows: int = 0
    min_cells: int = 0
    numeric: tuple[str, ...] = ()


ACTIVATION_LAYOUT = TableLayout(
    name="activations",
    columns={
        "fee": 3,  # D
        "code": 4,  # E
        "office": 6,  # G
        "department": 7,  # H
        "agent": 8,  # I
        "activation_date": 9,  # J
        "condition": 12,  # M
        "store_code": 14,  # O
        "type": 16,  # Q
        "plan_type": 19,  # T
        "model": 21,  # V
        "cs_employee": 77,  # BZ
    },
    header_rows=3,
    min_cells=10,
    numeric=("fee",),
)

STORE_LAYOUT = TableLayout(
    name="stores",
    columns={
        "code_name": 7,  # H
        "store_code": 14,  # O
        "agent_name": 21,  # V
    },
    min_cells=15,
)

INVENTORY_LAYOUT = TableLayout(
    name="inventory",
    columns={
        "code_name": 3,  # D
        "store_label": 4,  # E
        "agent_name": 8,  # I
        "item_type": 12,  # M
        "store_name": 21,  # V
    },
    min_cells=9,
)

CUSTOMER_LAYOUT = TableLayout(
    name="customers",
    columns={
        "code_name": 1,  # B
        "store_name": 2,  # C
        "agent_name": 3,  # D
    },
    min_cells=4,
)

SALES_TARGET_LAYOUT = TableLayout(
    name="sales_targets",
    columns={
        "agent": 0,
        "code": 1,
        "target": 2,
        "excluded": 3,
    },
    header_rows=1,
    min_cells=1,
)

OPERATION_MODEL_LAYOUT = TableLayout(
    name="operation_models",
    columns={
        "category": 0,
        "model_name": 2,
    },
    min_cells=1,
)

HOME_ACTIVATION_LAYOUT = TableLayout(
    name="home_activations",
    columns={
        "receipt_date": 90,  # CM
        "cs_employee": 91,  # CN
    },
    header_rows=3,
)


@dataclass(frozen=True)
class ReportConfig:
    """All tunable settings of the closing report engine.

    Attributes:
        activation_layout: Positions in the activation log.
        store_layout: Positions in the dealer store registry.
        inventory_layout: Positions in the inventory table.
        customer_layout: Positions in the customer-to-agent bridge table.
        sales_target_layout: Positions in the sales target table.
        operation_model_layout: Positions in the operating-model reference list.
        home_activation_layout: Positions in the wired (home) activation log.
        fee_sentinels: Raw fee values meaning "not available" (counted as 0).
        phone_category: Operating-model category that populates the allow-list.
        prepaid_marker: Plan-type marker for prepaid plans (excluded).
        used_marker: Condition/type marker for used devices (excluded).
        sim_only_marker: Type marker for SIM-only activations (excluded).
        sim_item_type: Inventory item type counted as a SIM; anything else is a device.
        registry_min_cells: Store rows need this many cells to take part in linkage.
        excluded_flag: Value of the sales-target excluded column meaning "excluded".
        excluded_store_markers: Inventory store labels containing any of these
            are excluded from inventory counts.
        excluded_store_first_row: First inventory row scanned for excluded stores.
        cs_blank_markers: CS column values meaning "no CS staff".
        cs_wired_markers: A wired CS entry must contain one of these.
        support_rates: Bonus rate per rank, best agent first.
        top_n: Number of ranked agents that receive support.
    """

    activation_layout: TableLayout = ACTIVATION_LAYOUT
    store_layout: TableLayout = STORE_LAYOUT
    inventory_layout: TableLayout = INVENTORY_LAYOUT
    customer_layout: TableLayout = CUSTOMER_LAYOUT
    sales_target_layout: TableLayout = SALES_TARGET_LAYOUT
    operation_model_layout: TableLayout = OPERATION_MODEL_LAYOUT
    home_activation_layout: TableLayout = HOME_ACTIVATION_LAYOUT

    fee_sentinels: tuple[str, ...] = ("#N/A", "N/A")
    phone_category: str = "휴대폰"
    prepaid_marker: str = "선불"
    used_marker: str = "중고"
    sim_only_marker: str = "유심"
    sim_item_type: str = "유심"
    registry_min_cells: int = 22
    excluded_flag: str = "Y"
    excluded_store_markers: tuple[str, ...] = ("사무실", "거래종료", "본점판매")
    excluded_store_first_row: int = 6
    cs_blank_markers: tuple[str, ...] = ("N", "NO")
    cs_wired_markers: tuple[str, ...] = ("MIN", "VIP", "등록")
    support_rates: tuple[float, ...] = field(default=(0.10, 0.08, 0.06, 0.04, 0.02))
    top_n: int = 5

    def __post_init__(self) -> None:
        if not self.support_rates:
            raise ConfigError("support_rates must contain at least one rate")
        if any(not 0 <= rate <= 1 for rate in self.support_rates):
            raise ConfigError(f"support_rates must lie in [0, 1], got {self.support_rates}")
        if self.top_n < 0:
            raise ConfigError(f"top_n must be non-negative, got {self.top_n}")

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> ReportConfig:
        """Create a ReportConfig overriding scalar and list settings.

        Layout fields cannot be overridden this way; pass TableLayout
        instances to the constructor instead.

        Args:
            data: Mapping of setting name to value. Lists become tuples.

        Returns:
            ReportConfig instance.

        Raises:
            ConfigError: If an unknown or layout key is given.

        Examples:
            >>> ReportConfig.from_mapping({"top_n": 3}).top_n
            3
        """
        allowed = {f.name for f in fields(cls) if not f.name.endswith("_layout")}
        unknown = sorted(set(data) - allowed)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {unknown}")

        overrides: dict[str, Any] = {}
        for key, value in data.items():
            overrides[key] = tuple(value) if isinstance(value, list) else value
        return replace(cls(), **overrides)

    @classmethod
    def from_json(cls, path: str | Path) -> ReportConfig:
        """Load configuration overrides from a JSON file.

        Args:
            path: Path to a JSON object of settings.

        Returns:
            ReportConfig instance.

        Raises:
            ConfigError: If the file cannot be read or parsed.
        """
        if isinstance(path, str):
            path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Could not load configuration from {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration in {path} must be a JSON object")
        return cls.from_mapping(data)
