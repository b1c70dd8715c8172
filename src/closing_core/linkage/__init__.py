"""Linkage layer: unified records and cross-table record linkage.

- names: swappable agent-name matching policy
- keys: match-key builder and sales-target application
- linker: two-hop store and inventory linkage
"""

from closing_core.linkage.keys import build_unified_records, match_key
from closing_core.linkage.linker import LinkageResult, MatchingMismatch, link_records
from closing_core.linkage.names import NameMatcher, exact_names_match, names_match

__all__ = [
    "LinkageResult",
    "MatchingMismatch",
    "NameMatcher",
    "build_unified_records",
    "exact_names_match",
    "link_records",
    "match_key",
    "names_match",
]
