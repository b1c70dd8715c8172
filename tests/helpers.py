"""Row builders for positional source tables used across the test suite.

Each builder places values at the positions of the v1 layout so tests read
as field names instead of cell indices.
"""

from typing import Any

PHONE = "휴대폰"
MODEL = "SM-S928N"

ACTIVATION_HEADER = [["closing export"], ["generated"], ["fee", "code", "office"]]


def activation_row(
    agent: str = "Kim",
    code: str = "A1",
    office: str = "Seoul",
    department: str = "Sales",
    fee: Any = "120000",
    activation_date: str = "2025-04-15",
    model: str = MODEL,
    store_code: str = "StoreX",
    plan_type: str = "5G 표준",
    condition: str = "정상",
    type_: str = "신규",
    cs_employee: str = "",
) -> list[Any]:
    row: list[Any] = [""] * (78 if cs_employee else 22)
    row[3] = fee
    row[4] = code
    row[6] = office
    row[7] = department
    row[8] = agent
    row[9] = activation_date
    row[12] = condition
    row[14] = store_code
    row[16] = type_
    row[19] = plan_type
    row[21] = model
    if cs_employee:
        row[77] = cs_employee
    return row


def activation_table(*rows: list[Any]) -> list[list[Any]]:
    return [list(r) for r in ACTIVATION_HEADER] + list(rows)


def store_row(agent_name: str, code_name: str, store_code: str) -> list[Any]:
    row: list[Any] = [""] * 22
    row[7] = code_name
    row[14] = store_code
    row[21] = agent_name
    return row


def inventory_row(
    agent_name: str,
    code_name: str,
    store_name: str,
    item_type: str = "단말기",
    store_label: str = "",
) -> list[Any]:
    row: list[Any] = [""] * 22
    row[3] = code_name
    row[4] = store_label
    row[8] = agent_name
    row[12] = item_type
    row[21] = store_name
    return row


def customer_row(agent_name: str, code_name: str, store_name: str) -> list[Any]:
    return ["", code_name, store_name, agent_name]


TARGET_HEADER = ["담당자명", "코드명", "목표값", "제외여부"]


def target_row(agent: str, code: str, target: Any, excluded: str = "N") -> list[Any]:
    return [agent, code, target, excluded]


def model_row(model: str = MODEL, category: str = PHONE) -> list[Any]:
    return [category, "Samsung", model]


def home_row(cs_employee: str, receipt_date: str) -> list[Any]:
    row: list[Any] = [""] * 92
    row[90] = receipt_date
    row[91] = cs_employee
    return row


def home_table(*rows: list[Any]) -> list[list[Any]]:
    return [["home export"], ["generated"], ["header"]] + list(rows)
