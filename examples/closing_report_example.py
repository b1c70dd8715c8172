"""Simple example: Building a closing report from an in-memory snapshot.

This demonstrates the key usage patterns of build_closing_report: default
exclusions from the sales-target flags, explicit overrides, and a stricter
name-matching policy.
"""

import json

from closing_core import SourceTables, build_closing_report
from closing_core.linkage.names import exact_names_match


def activation(agent, code, office, fee, store_code, model="SM-S928N"):
    row = [""] * 22
    row[3], row[4], row[6], row[7], row[8] = fee, code, office, "Sales", agent
    row[9], row[12], row[14], row[16], row[19], row[21] = (
        "2025-03-10",
        "정상",
        store_code,
        "신규",
        "5G 표준",
        model,
    )
    return row


def store(agent_name, code_name, store_code):
    row = [""] * 22
    row[7], row[14], row[21] = code_name, store_code, agent_name
    return row


snapshot = {
    "activations": [["export"], ["generated"], ["header"]]
    + [
        activation("Kim", "A1", "Seoul", "120000", "StoreX"),
        activation("Kim", "A1", "Seoul", "95000", "StoreX"),
        activation("Lee", "B2", "Busan", "80000", "StoreY"),
        activation("Park", "C3", "Seoul", "#N/A", "StoreZ"),
    ],
    "stores": [store("Kim(Seoul)", "A1", "StoreX"), store("Choi", "B2", "StoreY")],
    "customers": [["", "A1", "StoreX", "Kim(Seoul)"], ["", "B2", "StoreY", "Lee"]],
    "operation_models": [["휴대폰", "Samsung", "SM-S928N"]],
    "sales_targets": [["담당자명", "코드명", "목표값", "제외여부"], ["Kim", "A1", 30, "N"], ["Park", "C3", 0, "Y"]],
}
tables = SourceTables.from_mapping(snapshot)

# Example 1: Default exclusions (agents flagged "Y" in the target sheet)
print("Example 1: Agent view")
print("-" * 60)
report = build_closing_report(tables, "2025-03-15")
print(report.agent_data.to_string(index=False))
print(f"Excluded agents: {report.excluded_agents}\n")

# Example 2: Explicit exclusions override the sheet flags
print("Example 2: Explicit exclusions")
print("-" * 60)
report = build_closing_report(tables, "2025-03-15", excluded_agents=["Lee"])
print(report.agent_data[["agent", "performance", "fee", "support"]].to_string(index=False))
print()

# Example 3: Diagnostics for the data team
print("Example 3: Mismatches and mapping failures")
print("-" * 60)
payload = report.to_dict()
print(json.dumps(payload["matchingMismatches"], ensure_ascii=False, indent=2))
print(json.dumps(payload["mappingFailures"], ensure_ascii=False, indent=2))
print()

# Example 4: Strict name matching (no substring containment)
print("Example 4: Strict name matching")
print("-" * 60)
strict = build_closing_report(tables, "2025-03-15", name_matcher=exact_names_match)
print(strict.code_data[["code", "registered_stores", "active_stores"]].to_string(index=False))
