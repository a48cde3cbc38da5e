# (c) Nelen & Schuurmans

import re
from collections.abc import Iterable
from typing import Any
from typing import ClassVar

from fastapi import Query
from pydantic import field_validator

from keyset_python import Filter
from keyset_python import PageRequest
from keyset_python import ValueObject

__all__ = ["PaginationQuery", "parse_param_array"]


HEX_REGEX = re.compile(r"0x([a-f0-9]{2})+", re.IGNORECASE)
FALSY = frozenset({"", "0", "false", "no", "off"})


def parse_param_array(values: Any, limit: int = 100) -> list[str]:
    """Normalize a (list) query parameter: stringify, lowercase hex, dedupe."""
    if values is None:
        return []
    if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
        values = [values]
    result: list[str] = []
    for value in values:
        value = str(value)
        if HEX_REGEX.fullmatch(value):
            value = value.lower()
        if value not in result:
            result.append(value)
    return result[:limit]


class PaginationQuery(ValueObject):
    """Query parameters of a keyset paginated list endpoint.

    Fields added in a subclass are used as filters:

        class TransactionQuery(PaginationQuery):
            from_address: list[str] | None = Query(None)

        @router.get("/transactions")
        async def list_transactions(q: Annotated[TransactionQuery, Query()]):
            return await paginator.paginate(q.as_page_request(), q.filters())
    """

    NON_FILTERS: ClassVar[frozenset[str]] = frozenset(
        {"sort_by", "reverse", "page_key", "max_results"}
    )

    sort_by: str | None = Query(None, description="Name of the ordering")
    reverse: bool = Query(False, description="Traverse the ordering backwards")
    page_key: str | None = Query(None, description="Continue after this page key")
    max_results: int | None = Query(None, description="Page size")

    @field_validator("reverse", mode="before")
    @classmethod
    def validate_reverse(cls, v):
        if isinstance(v, str):
            return v.strip().lower() not in FALSY
        return bool(v)

    def as_page_request(self) -> PageRequest:
        return PageRequest(
            sort_by=self.sort_by,
            reverse=self.reverse,
            page_key=self.page_key,
            max_results=self.max_results,
        )

    def filters(self) -> list[Filter]:
        result: list[Filter] = []
        for name in self.__class__.model_fields:
            if name in self.NON_FILTERS:
                continue
            value = getattr(self, name)
            if value is None:
                continue
            values = value if isinstance(value, list) else [value]
            # typed values (e.g. int columns) are used as is
            if all(isinstance(x, str) for x in values):
                values = parse_param_array(values)
            if values:
                result.append(Filter(field=name, values=values))
        return result
