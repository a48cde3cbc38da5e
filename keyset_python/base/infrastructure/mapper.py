from typing import Any

from ..domain import Json
from ..domain import numbers_to_strings

__all__ = ["Mapper", "NumbersToStringsMapper"]


class Mapper:
    def to_internal(self, external: Any) -> Json:
        return external

    def to_external(self, internal: Json) -> Json:
        return internal


class NumbersToStringsMapper(Mapper):
    """Renders numeric columns (e.g. NUMERIC(78) token amounts) as strings."""

    def __init__(self, *fields: str):
        self.fields = frozenset(fields)

    def to_internal(self, external: Any) -> Json:
        return {
            key: numbers_to_strings(value) if key in self.fields else value
            for key, value in external.items()
        }
