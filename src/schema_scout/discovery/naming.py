"""
Name matching used to pair foreign-key columns with candidate parent tables.

Names are normalized (lower-cased, stripped to alphanumerics, de-pluralized)
and compared with the Sorensen-Dice coefficient over character bigrams.
"""

from __future__ import annotations

import re
from typing import Optional, Set

# <base>_id in any case, or camelCase <base>Id / <base>ID
FK_SUFFIX_RE = re.compile(r"^(?P<base>.+?)(?:_[iI][dD]|(?<=[a-z0-9])I[dD])$")

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")


def normalize_name(name: str) -> str:
    """
    Normalize a table or column name for comparison.

    Examples:
        Categories -> category
        Boxes -> box
        order_items -> orderitem
    """
    text = _NON_ALNUM_RE.sub("", name.lower())
    # Rules are applied in sequence, each to the previous result
    text = re.sub(r"ies$", "y", text)
    text = re.sub(r"(sses|xes|zes|ches|shes)$", lambda m: m.group(1)[:-2], text)
    text = re.sub(r"s$", "", text)
    return text


def bigrams(text: str) -> Set[str]:
    """Return the set of adjacent character pairs; short strings map to themselves."""
    if len(text) < 2:
        return {text}
    return {text[i:i + 2] for i in range(len(text) - 1)}


def dice_similarity(a: str, b: str) -> float:
    """Sorensen-Dice coefficient of the bigram sets of two strings."""
    set_a = bigrams(a)
    set_b = bigrams(b)
    denom = len(set_a) + len(set_b)
    if denom == 0:
        return 0.0
    return 2 * len(set_a & set_b) / denom


def fk_base(column: str) -> Optional[str]:
    """Return the normalized base of a foreign-key-shaped column name, else None."""
    match = FK_SUFFIX_RE.match(column)
    if not match:
        return None
    return normalize_name(match.group("base"))


def is_fk_candidate(column: str, exclude_bare_id: bool = True) -> bool:
    """Whether a column name looks like a foreign key worth verifying."""
    if exclude_bare_id and column.lower() == "id":
        return False
    base = fk_base(column)
    if base is None or base == "":
        return False
    if exclude_bare_id and base == "id":
        return False
    return True
