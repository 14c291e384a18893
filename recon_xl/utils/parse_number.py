from decimal import Decimal, InvalidOperation
from typing import Any


def parse_decimal(value: Any, places: int = 9) -> Decimal | None:
    """Convert a number (or a numeric string) to a `Decimal`.

    Floats are rounded to `places` decimal places so that values which went
    through a spreadsheet (e.g. `0.1 + 0.2`) compare equal to their exact
    counterparts.

    Args:
        value: The value to convert.
        places: Number of decimal places kept for floats.

    Returns:
        The decimal value or `None` if `value` is not numeric.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        return Decimal(value)
    elif isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        result = Decimal(repr(value))
    elif isinstance(value, str):
        text = value.strip()
        if text == "":
            return None
        try:
            result = Decimal(text)
        except InvalidOperation:
            return None
        if not result.is_finite():
            return None
    else:
        return None
    try:
        return result.quantize(Decimal(1).scaleb(-places)).normalize()
    except InvalidOperation:
        # Too many digits for the context precision; keep it exact.
        return result.normalize()
