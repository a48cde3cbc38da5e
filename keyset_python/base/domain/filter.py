# (c) Nelen & Schuurmans

from typing import Any

from .types import Json
from .value_object import ValueObject

__all__ = ["Filter"]


class Filter(ValueObject):
    field: str
    values: list[Any]

    @classmethod
    def for_values(cls, values: Json) -> list["Filter"]:
        """One equality filter per key, e.g. to find a record by its page key."""
        return [cls(field=field, values=[value]) for field, value in values.items()]
