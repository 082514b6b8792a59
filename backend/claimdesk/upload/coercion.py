"""
Cell value coercion for imported billing data.

Exports from practice-management systems format money in every way
imaginable: ``$1,234.56``, ``(42.10)``, ``-$7``, ``USD 12``.  These helpers
turn such cells into plain floats/bools and never raise on bad data.
"""

import math
import re
from numbers import Number

_CURRENCY_NOISE = re.compile(r"[,$\s]")
_LEADING_JUNK = re.compile(r"^[^0-9.\-]+")
_NON_NUMERIC = re.compile(r"[^0-9.\-]")
_LEADING_FLOAT = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

TRUE_VALUES = frozenset({"true", "1", "yes", "t"})
FALSE_VALUES = frozenset({"false", "0", "no", "f"})


def _is_number(value) -> bool:
    # bool is an int subclass but is never a money amount
    return isinstance(value, Number) and not isinstance(value, bool)


def _leading_float(text: str) -> float | None:
    """Parse the longest numeric prefix of *text*, like JavaScript's parseFloat."""
    match = _LEADING_FLOAT.match(text)
    if not match:
        return None
    return float(match.group(0))


def parse_currency(value) -> float:
    """Parse a currency-like value into a float, returning 0 on failure.

    The sign is decided once, from the raw text: a value wrapped in
    parentheses or starting with ``-`` is negative.  Minus signs left behind
    by the digit stripping never flip it a second time.
    """
    if _is_number(value):
        try:
            return value if math.isfinite(value) else 0
        except (TypeError, ValueError):
            return 0

    if not isinstance(value, str):
        return 0

    trimmed = value.strip()
    if not trimmed:
        return 0

    is_negative = (trimmed.startswith("(") and trimmed.endswith(")")) or trimmed.startswith("-")

    numeric = _CURRENCY_NOISE.sub("", trimmed)
    numeric = _LEADING_JUNK.sub("", numeric)
    numeric = _NON_NUMERIC.sub("", numeric)
    if not numeric:
        return 0

    parsed = _leading_float(numeric)
    if parsed is None or not math.isfinite(parsed):
        return 0

    return -abs(parsed) if is_negative else parsed


def format_currency(value, fallback: str = "$0.00", accounting: bool = False) -> str:
    """Format a number as US dollars: ``$1,234.56`` / ``-$42.10``.

    With ``accounting`` negatives are wrapped in parentheses: ``($42.10)``.
    """
    if not _is_number(value):
        return fallback
    try:
        if not math.isfinite(value):
            return fallback
    except (TypeError, ValueError):
        return fallback
    text = f"${abs(value):,.2f}"
    if value < 0:
        return f"({text})" if accounting else f"-{text}"
    return text


def _as_number(value) -> float | None:
    if _is_number(value):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def parse_milestone_flag(value) -> bool | None:
    """Interpret a statement-milestone cell as a boolean.

    Returns ``None`` when the value is not unambiguously boolean, e.g. ``"2"``
    or ``"3.5"`` in a column that most likely carries a count or a date.
    """
    if isinstance(value, bool):
        return value

    number = _as_number(value)
    if number is not None:
        if number == 1:
            return True
        if number == 0:
            return False
        return None

    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in TRUE_VALUES:
            return True
        if normalized in FALSE_VALUES:
            return False
    return None
