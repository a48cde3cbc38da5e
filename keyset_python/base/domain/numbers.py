# (c) Nelen & Schuurmans

import re
from collections.abc import Mapping
from decimal import Decimal
from decimal import InvalidOperation
from typing import Any

from pydantic import BaseModel

__all__ = ["numbers_to_strings", "format_decimal_or_string", "format_decimal"]


# optional sign, no leading zeros, optional fraction: "12", "-0.5", "10.00"
DECIMAL_LITERAL_REGEX = re.compile(r"-?(0|[1-9][0-9]*)(\.[0-9]+)?")


def format_decimal(value: Decimal) -> str:
    """Exact positional notation, integral values without a fraction."""
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def format_decimal_or_string(text: str) -> str:
    if not DECIMAL_LITERAL_REGEX.fullmatch(text):
        return text
    try:
        return format_decimal(Decimal(text))
    except InvalidOperation:
        return text


def _number_to_string(value: float | Decimal) -> Any:
    # repr() is the shortest string that round-trips to the same float
    dec = Decimal(repr(value)) if isinstance(value, float) else value
    if not dec.is_finite():
        return value
    return format_decimal(dec)


def numbers_to_strings(value: Any) -> Any:
    """Render every number in a (nested) JSON-like structure as a string.

    Numbers that travel as JSON numbers are parsed as doubles by most clients,
    which silently rounds e.g. 256-bit token amounts. This transform is applied
    to everything that crosses the wire: response bodies as well as arguments
    of outgoing requests.

    - int, float and Decimal become their exact decimal string.
    - Strings that are a plain decimal literal are rendered the same way, so
      that "10.00" and Decimal("10.00") both end up as "10".
    - Other strings (hashes, addresses, "1e3") are left untouched.
    - Mappings and sequences are transformed recursively into new dicts and
      lists; booleans, None and anything else are returned as is.

    The transform is idempotent.
    """
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="python")
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str):
        return format_decimal_or_string(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, (float, Decimal)):
        return _number_to_string(value)
    if isinstance(value, Mapping):
        return {key: numbers_to_strings(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [numbers_to_strings(item) for item in value]
    return value
