# trading_dashboard/codec.py

import math
from typing import Any, Optional

# Characters that appear as grouping separators in formatted numbers
_SEPARATORS = (",", "_", " ")


def parse_numeric(value: Any) -> Optional[float]:
    """
    Decodes a number that may arrive as a formatted string.

    Args:
        value: int, float, or a string such as "4,287.25".

    Returns:
        Optional[float]: The parsed value, or None when the input is missing,
        unparsable, or not finite. None means "unknown", never zero.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        cleaned = value.strip()
        for sep in _SEPARATORS:
            cleaned = cleaned.replace(sep, "")
        if not cleaned:
            return None
        try:
            number = float(cleaned)
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def format_number(value: Any) -> str:
    """Renders a number the way it was entered: 4300.0 -> "4300", 4287.25 -> "4287.25"."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
