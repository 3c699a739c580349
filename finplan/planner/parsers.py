# backend/finplan/planner/parsers.py
from __future__ import annotations

import math
import re
from datetime import date, datetime
from typing import Any, List


# Leading-number prefixes, matching how the questionnaire front end coerces input
_INT_PREFIX_RE = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PREFIX_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_int(value: Any) -> int:
    """
    Integer coercion used for every currency/count field.
    Handles:
      - 1500, 1500.9 (truncated toward zero)
      - "1500", " 1500 ", "1500abc" (leading digits win)
    Anything else (None, booleans, "", "abc", NaN) is 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return 0
        return int(value)
    if not isinstance(value, str):
        return 0

    m = _INT_PREFIX_RE.match(value)
    if not m:
        return 0
    return int(m.group(1))


def parse_float(value: Any) -> float:
    """
    Float coercion for rate-like fields (mortgage rate, loan rates, APRs),
    so "19.99" stays 19.99 instead of being truncated.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        num = float(value)
    elif isinstance(value, str):
        m = _FLOAT_PREFIX_RE.match(value)
        if not m:
            return 0.0
        try:
            num = float(m.group(1))
        except ValueError:
            return 0.0
    else:
        return 0.0

    if math.isnan(num) or math.isinf(num):
        return 0.0
    return num


def parse_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (bool, int, float)):
        return str(value)
    return ""


def parse_age_list(value: Any) -> List[int]:
    """
    "34, 7, abc, 10" -> [34, 7, 10]. Tokens that are not integers are dropped.
    Lists (as stored by the persistence layer) go through the same filter.
    """
    if isinstance(value, str):
        tokens: List[Any] = value.split(",")
    elif isinstance(value, (list, tuple)):
        tokens = list(value)
    else:
        return []

    ages: List[int] = []
    for token in tokens:
        if isinstance(token, str):
            if not _INT_PREFIX_RE.match(token):
                continue
        elif isinstance(token, bool) or not isinstance(token, (int, float)):
            continue
        elif isinstance(token, float) and (math.isnan(token) or math.isinf(token)):
            continue
        ages.append(parse_int(token))
    return ages


def _as_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def age_from_birth_date(value: Any, today: date | datetime) -> int:
    """Whole years between an ISO birth date and `today`; 0 if unknown."""
    birth = _as_date(value)
    ref = _as_date(today)
    if birth is None or ref is None or birth > ref:
        return 0
    age = ref.year - birth.year
    if (ref.month, ref.day) < (birth.month, birth.day):
        age -= 1
    return age


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def first_present_int(section: Any, keys: List[str]) -> int:
    """
    parse_int of the first key that holds an answer; legacy keys go last.
    An explicit 0 or a negative value in an earlier key still wins.
    """
    if not isinstance(section, dict):
        return 0
    for key in keys:
        raw = section.get(key)
        if not _is_blank(raw):
            return parse_int(raw)
    return 0
