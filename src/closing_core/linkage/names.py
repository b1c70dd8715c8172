"""Agent-name matching across source tables.

No source table guarantees a normalized agent-name format: one sheet may
hold "Kim" while another holds "Kim(Seoul)" or "Kim Minsu". Linkage code
never compares names directly; it calls a NameMatcher so the policy can be
swapped for a stricter or fuzzier one without touching the control flow.
"""

from __future__ import annotations

from typing import Protocol

from closing_core.cleaning import strip_parenthetical


class NameMatcher(Protocol):
    """Protocol for agent-name matching policies.

    Example:
        def exact_match(a: str, b: str) -> bool:
            return a == b

        build_closing_report(tables, "2025-03-15", name_matcher=exact_match)

    """

    def __call__(self, a: str, b: str) -> bool: ...


def names_match(a: str, b: str) -> bool:
    """Symmetric substring containment after removing parenthetical qualifiers.

    Two names match if they are equal or either contains the other. The
    check runs in both directions so either side may be the fuller name.
    An unrelated agent whose name contains another agent's name also
    matches; see DESIGN.md.

    Examples:
        >>> names_match("Kim", "Kim(Seoul)")
        True
        >>> names_match("Kim Minsu", "Kim")
        True
        >>> names_match("Kim", "Lee")
        False
    """
    left = strip_parenthetical(a)
    right = strip_parenthetical(b)
    return left == right or right in left or left in right


def exact_names_match(a: str, b: str) -> bool:
    """Strict policy: names must be equal once qualifiers are removed."""
    return strip_parenthetical(a) == strip_parenthetical(b)
