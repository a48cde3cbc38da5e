# (c) Nelen & Schuurmans

import re
from collections.abc import Callable
from collections.abc import Mapping
from collections.abc import Sequence
from typing import Any

from .exceptions import InvalidOrderQueryConfig
from .types import Json

__all__ = ["PageKeyCodec", "infer_key_component"]


# what str() makes of a non-negative int: no sign, no leading zeros
INTEGER_REGEX = re.compile(r"0|[1-9][0-9]*")


def infer_key_component(part: str) -> Any:
    """Default converter: "12" becomes 12, anything else stays a string."""
    if INTEGER_REGEX.fullmatch(part):
        return int(part)
    return part


class PageKeyCodec:
    """Converts between a record and the opaque page key that points at it.

    The key is the record's tie-break attribute values joined by a delimiter,
    for instance "18291023-12" for (block_number, transaction_index). It says
    nothing about the ordering, so a key taken from one order query can be
    used with any other order query of the same entity.

    Args:
        attributes: The tie-break attributes, in key order.
        converters: Optional per-attribute callables that turn a key
            component back into its native type. Attributes without one
            use ``infer_key_component``; give ``str`` for a text attribute
            whose values may look like integers.
        delimiter: Must not occur inside attribute values.
    """

    def __init__(
        self,
        attributes: Sequence[str],
        converters: Mapping[str, Callable[[str], Any]] | None = None,
        delimiter: str = "-",
    ):
        if not attributes:
            raise InvalidOrderQueryConfig("page_key_attributes must be present")
        self.attributes = tuple(attributes)
        self.converters = dict(converters or {})
        self.delimiter = delimiter

    def encode(self, record: Json) -> str:
        return self.delimiter.join(str(record[x]) for x in self.attributes)

    def decode(self, key: str | None) -> Json | None:
        """Returns the tie-break values of a key, or None for an unusable key.

        There is no such thing as an invalid key: absent, blank, truncated or
        otherwise foreign keys all mean "no starting point".
        """
        if not key:
            return None
        parts = key.split(self.delimiter)
        if len(parts) != len(self.attributes) or not all(parts):
            return None
        try:
            return {
                attr: self.converters.get(attr, infer_key_component)(part)
                for (attr, part) in zip(self.attributes, parts)
            }
        except (TypeError, ValueError):
            return None
