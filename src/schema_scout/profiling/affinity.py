"""
Affinity inference from observed column values.

Classifies a column's values into one of the four storage affinities and
flags boolean-like and date-like columns. Thresholds are fixed: boolean
tokens must make up 95% of non-empty values, date shapes 80%.
"""

from __future__ import annotations

import logging
import math
import numbers
import re
from typing import Any, Iterable, Optional

import numpy as np
import pandas as pd

from schema_scout.models import Affinity, AffinityResult

logger = logging.getLogger(__name__)


# Value shapes accept ASCII digits only
INT_RE = re.compile(r"^[+-]?\d+$", re.ASCII)
REAL_RE = re.compile(r"^[+-]?(?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?$", re.ASCII)
# ISO-style shape check only, not calendar validation
DATE_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}(?:[ T]\d{2}:\d{2}(?::\d{2})?)?(?:Z|[+-]\d{2}:\d{2})?$",
    re.ASCII,
)

BOOL_TRUE = frozenset({"true", "1", "yes", "y", "t"})
BOOL_FALSE = frozenset({"false", "0", "no", "n", "f"})

BOOLEAN_RATIO = 0.95
DATE_RATIO = 0.8


def is_empty(value: Any) -> bool:
    """True for None, blank strings and pandas/NumPy missing markers."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def normalize_value(value: Any) -> str:
    """Trimmed text form of a non-empty value."""
    if isinstance(value, (bool, np.bool_)):
        return "true" if value else "false"
    if isinstance(value, numbers.Integral):
        return str(int(value))
    if isinstance(value, numbers.Real) and float(value).is_integer():
        return str(int(value))
    return str(value).strip()


def is_boolean_token(text: str) -> bool:
    lower = text.lower()
    return lower in BOOL_TRUE or lower in BOOL_FALSE


def _classify_number(value: Any) -> Optional[str]:
    """Return 'int' or 'real' for native numbers, None for anything else."""
    if isinstance(value, (bool, np.bool_)):
        return None
    if isinstance(value, numbers.Integral):
        return "int"
    if isinstance(value, numbers.Real):
        as_float = float(value)
        if math.isinf(as_float):
            return None
        return "int" if as_float.is_integer() else "real"
    return None


def infer_affinity(values: Iterable[Any]) -> AffinityResult:
    """
    Infer the affinity of a column from its values.

    Rules, evaluated over non-empty values only:
    1. no non-empty values -> TEXT
    2. boolean tokens >= 95% -> INTEGER (boolean, stored as 0/1)
    3. every value integral -> INTEGER
    4. every value integral or decimal -> REAL
    5. date shapes >= 80% -> NUMERIC (date-like)
    6. otherwise TEXT

    Args:
        values: Raw values (strings, native numbers, None)

    Returns:
        AffinityResult
    """
    non_empty = 0
    as_bool = 0
    as_int = 0
    as_real = 0
    as_date = 0

    for value in values:
        if is_empty(value):
            continue
        non_empty += 1

        text = normalize_value(value)
        if is_boolean_token(text):
            as_bool += 1

        number_kind = _classify_number(value)
        if number_kind == "int":
            as_int += 1
            continue
        if number_kind == "real":
            as_real += 1
            continue

        if INT_RE.match(text):
            as_int += 1
        elif REAL_RE.match(text):
            as_real += 1
        if DATE_RE.match(text):
            as_date += 1

    if non_empty == 0:
        return AffinityResult(Affinity.TEXT)

    if as_bool / non_empty >= BOOLEAN_RATIO:
        return AffinityResult(Affinity.INTEGER, is_boolean=True)
    if as_int == non_empty:
        return AffinityResult(Affinity.INTEGER)
    if as_int + as_real == non_empty:
        return AffinityResult(Affinity.REAL)
    if as_date / non_empty >= DATE_RATIO:
        return AffinityResult(Affinity.NUMERIC, is_date_like=True)
    return AffinityResult(Affinity.TEXT)


def map_declared_affinity(declared_type: Optional[str]) -> Affinity:
    """
    Map a declared column type to an affinity.

    Rules (in order):
    - contains "INT" -> INTEGER
    - contains "REAL", "FLOA" or "DOUB" -> REAL
    - contains "NUM", "DATE" or "TIME" -> NUMERIC
    - otherwise TEXT

    Examples:
        map_declared_affinity("bigint")      # INTEGER
        map_declared_affinity("double")      # REAL
        map_declared_affinity("datetime")    # NUMERIC
        map_declared_affinity("varchar(32)") # TEXT
    """
    t = (declared_type or "").upper()
    if "INT" in t:
        return Affinity.INTEGER
    if "REAL" in t or "FLOA" in t or "DOUB" in t:
        return Affinity.REAL
    if "NUM" in t or "DATE" in t or "TIME" in t:
        return Affinity.NUMERIC
    return Affinity.TEXT
