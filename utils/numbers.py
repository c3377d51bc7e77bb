# utils/numbers.py
import math
import re
from typing import Any, Union

Number = Union[int, float]

_CURRENCY_MARKS = re.compile(r"(?i)rp\.?|idr|jpy|¥|\s")
_DOT_THOUSANDS = re.compile(r"^-?\d{1,3}(\.\d{3})+$")


def _clean_text(text: str, thousands_dot: bool) -> str:
    s = _CURRENCY_MARKS.sub("", text)
    if "," in s and "." in s:
        # Indonesian style: 1.250.000,50
        return s.replace(".", "").replace(",", ".")
    if "," in s:
        return s.replace(",", ".")
    if s.count(".") > 1 or (thousands_dot and _DOT_THOUSANDS.match(s)):
        return s.replace(".", "")
    return s


def parse_number(value: Any, default: Number = 0, thousands_dot: bool = False) -> Number:
    """
    Parse-or-default for form values.

    - None, empty string, booleans -> default
    - non-numeric text -> default
    - inf / nan (numeric or text) -> default
    - "Rp 1.250.000", "1,5", "2.75" are accepted

    Ints stay ints so whole-rupiah amounts are stored without a trailing .0.
    """
    if value is None or isinstance(value, bool):
        return default

    if isinstance(value, int):
        return value

    if isinstance(value, float):
        return value if math.isfinite(value) else default

    if isinstance(value, str):
        text = _clean_text(value.strip(), thousands_dot)
    else:
        text = str(value)
    if not text:
        return default

    try:
        parsed = float(text)
    except (TypeError, ValueError):
        return default

    if not math.isfinite(parsed):
        return default
    if parsed.is_integer() and "." not in text and "e" not in text.lower():
        return int(parsed)
    return parsed


def parse_amount(value: Any, default: Number = 0) -> Number:
    """Money field: dots are thousand separators, negatives become 0."""
    n = parse_number(value, default=default, thousands_dot=True)
    if n < 0:
        return 0
    if isinstance(n, float) and n.is_integer():
        return int(n)
    return n


def parse_weight(value: Any, default: Number = 0) -> Number:
    """Weight in kg: a single dot is a decimal point, negatives become 0."""
    n = parse_number(value, default=default)
    return n if n >= 0 else 0


def finite_or_zero(value: Any) -> Number:
    return parse_number(value, default=0)
