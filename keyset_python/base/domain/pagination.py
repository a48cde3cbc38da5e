# (c) Nelen & Schuurmans

from collections.abc import Sequence
from typing import Generic
from typing import TypeVar

from pydantic import BaseModel

from .order_query import OrderQuery
from .types import Json
from .value_object import ValueObject

__all__ = ["Page", "PageOptions", "Pagination"]

T = TypeVar("T")


class PageOptions(ValueObject):
    """What a gateway needs to fetch one page.

    ``after`` holds the record the previous page ended with; only records
    strictly after it (under ``order``) are returned.
    """

    limit: int
    order: OrderQuery | None = None
    after: Json | None = None


class Pagination(ValueObject):
    page_key: str | None = None
    has_more: bool = False


class Page(BaseModel, Generic[T]):
    items: Sequence[T]
    pagination: Pagination
    sort_by: str | None = None
