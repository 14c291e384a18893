"""Helper functions for normalizing and comparing cell values."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Hashable

from recon_xl.utils.dates import parse_date, to_instant
from recon_xl.utils.parse_number import parse_decimal

_TRUE_STRINGS = ("true", "yes", "y", "1")
_FALSE_STRINGS = ("false", "no", "n", "0")


def is_absent(value: Any) -> bool:
    """Return True for values that mean "never set".

    `None`, the empty string and whitespace-only strings are all treated the
    same way, so it does not matter how the source format represents a
    missing value.
    """
    if value is None:
        return True
    return isinstance(value, str) and value.strip() == ""


def clean_value(value: Any) -> Any:
    """Return `None` for absent values and strip surrounding whitespace."""
    if is_absent(value):
        return None
    if isinstance(value, str):
        return value.strip()
    return value


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(
        value, bool
    )


def _parse_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if _is_number(value):
        if value == 1:
            return True
        if value == 0:
            return False
        return None
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    return None


def _as_instant(value: Any):
    parsed = parse_date(value)
    if parsed is None:
        return None
    return to_instant(parsed)


def values_equal(old_value: Any, new_value: Any) -> bool:
    """Compare two field values taking their types into account.

    Rules, in order:
    - absent values (`None`, blank strings) equal each other and nothing
      else;
    - booleans compare with booleans, `0`/`1` and yes/no style strings;
    - if either side is a date, both sides are converted to UTC instants
      (naive values are assumed to be UTC);
    - if either side is a number, both sides are compared as decimals
      (floats rounded to 9 places), so `"5"` equals `5`;
    - strings compare exactly after stripping surrounding whitespace;
    - anything else uses `==`.

    Args:
        old_value: The value stored in the existing record.
        new_value: The value coming from the import.

    Returns:
        True if the values should not be reported as a change.
    """
    old_value = clean_value(old_value)
    new_value = clean_value(new_value)
    if old_value is None or new_value is None:
        return old_value is None and new_value is None

    if isinstance(old_value, bool) or isinstance(new_value, bool):
        old_b = _parse_bool(old_value)
        return old_b is not None and old_b == _parse_bool(new_value)

    if isinstance(old_value, date) or isinstance(new_value, date):
        old_i = _as_instant(old_value)
        return old_i is not None and old_i == _as_instant(new_value)

    if _is_number(old_value) or _is_number(new_value):
        old_d = parse_decimal(old_value)
        return old_d is not None and old_d == parse_decimal(new_value)

    return old_value == new_value


def lookup_key(value: Any) -> Hashable | None:
    """Compute the key used to match primary key values.

    Numbers are reduced to their canonical decimal text so that a number
    stored by a spreadsheet (e.g. `1001.0`) matches the string `"1001"`.

    Returns:
        A hashable key, or `None` when the value is absent.
    """
    value = clean_value(value)
    if value is None:
        return None
    if _is_number(value):
        number = parse_decimal(value)
        if number is None:
            return None
        return format(number, "f")
    if isinstance(value, date):
        instant = _as_instant(value)
        return instant.isoformat() if instant is not None else None
    if isinstance(value, str):
        return value
    return value


def numeric_text(value: Any) -> str | None:
    """Canonical decimal text of a number or of a string holding one.

    Returns:
        The text (`"1001"` for `1001`, `1001.0` and `"1001.0"`), or `None`
        when the value is not numeric.
    """
    if isinstance(value, bool):
        return None
    if not (_is_number(value) or isinstance(value, str)):
        return None
    number = parse_decimal(value)
    if number is None:
        return None
    return format(number, "f")


class KeyIndex:
    """Finds items by primary key value following `values_equal()`.

    Values are first matched by their `lookup_key()`. A number that has no
    exact match is then matched against the numeric strings of the index,
    and a numeric string against the numbers, so `1001` finds `"1001.0"`
    and the other way around. Two strings are never compared as numbers.
    """

    def __init__(self):
        self.exact: dict[Hashable, Any] = {}
        self.numbers: dict[str, Any] = {}
        self.numeric_strings: dict[str, Any] = {}

    def add(self, value: Any, item: Any) -> None:
        key = lookup_key(value)
        if key is None:
            raise ValueError("Can't index an absent key")
        self.exact.setdefault(key, item)
        number = numeric_text(value)
        if number is None:
            return
        if _is_number(value):
            self.numbers.setdefault(number, item)
        else:
            self.numeric_strings.setdefault(number, item)

    def get(self, value: Any) -> Any:
        """Return the item stored for a matching key, or `None`."""
        key = lookup_key(value)
        if key is None:
            return None
        found = self.exact.get(key)
        if found is not None:
            return found
        number = numeric_text(clean_value(value))
        if number is None:
            return None
        if _is_number(value):
            return self.numeric_strings.get(number)
        return self.numbers.get(number)
