"""Tag matching utilities.

A goal tracks every transaction whose ``notes`` or ``imported_description``
contains the literal text ``#<tag_pattern>``. Matching is a case-sensitive
substring test, so ``car`` also matches ``#carpool``.
"""
import re
from typing import Optional

TAG_PATTERN_RE = re.compile(r"[A-Za-z0-9_]+")

_WHITESPACE_RE = re.compile(r"\s+")


def is_valid_tag_pattern(value: Optional[str]) -> bool:
    """
    Check that a tag pattern contains only letters, digits and underscores.

    Examples:
        >>> is_valid_tag_pattern("goal_car")
        True
        >>> is_valid_tag_pattern("#car")
        False
    """
    return bool(value) and TAG_PATTERN_RE.fullmatch(value) is not None


def tag_token(tag_pattern: str) -> str:
    """Return the text searched for in transactions, e.g. ``#car``."""
    return f"#{tag_pattern}"


def matches_tag(
    tag_pattern: str,
    notes: Optional[str],
    imported_description: Optional[str],
) -> bool:
    """
    Decide whether a transaction counts toward a goal.

    Args:
        tag_pattern: Goal tag pattern, without the leading ``#``
        notes: Transaction notes
        imported_description: Description from the bank import

    Returns:
        True if either text field contains ``#<tag_pattern>``

    Examples:
        >>> matches_tag("car", "Paycheck #car", None)
        True
        >>> matches_tag("car", None, "ACH #carpool")
        True
        >>> matches_tag("car", "bonus", "")
        False
    """
    token = tag_token(tag_pattern)
    return token in (notes or "") or token in (imported_description or "")


def tag_filter(tag_pattern: str) -> dict:
    """
    Build the MongoDB filter selecting live transactions tagged for a goal.

    The token is escaped so the ``$regex`` acts as a plain substring search.
    Ledger rows without a ``tombstone`` field count as live.
    """
    token = re.escape(tag_token(tag_pattern))
    return {
        "tombstone": {"$ne": True},
        "$or": [
            {"notes": {"$regex": token}},
            {"imported_description": {"$regex": token}},
        ],
    }


def strip_tag(text: str, tag_pattern: str) -> str:
    """
    Remove the goal tag from a description.

    Every occurrence of the token is removed and whitespace is collapsed.
    When nothing is left the original text is returned unchanged.

    Examples:
        >>> strip_tag("Paycheck #car", "car")
        'Paycheck'
        >>> strip_tag("  #car  ", "car")
        '  #car  '
    """
    stripped = text.replace(tag_token(tag_pattern), " ")
    stripped = _WHITESPACE_RE.sub(" ", stripped).strip()
    return stripped or text
