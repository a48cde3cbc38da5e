from collections.abc import Sequence
from typing import Any
from typing import Generic
from typing import TypeVar

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pydantic import model_serializer

from keyset_python import numbers_to_strings
from keyset_python import Page
from keyset_python import Pagination

__all__ = ["PageResponse", "CanonicalJSONResponse"]

T = TypeVar("T")


class PageResponse(BaseModel, Generic[T]):
    """A page as it goes over the wire, numbers rendered as strings.

    The numbers are converted when the model is serialized, so an endpoint may
    return it directly. Plain dicts should be wrapped in a
    CanonicalJSONResponse instead.
    """

    result: Sequence[T]
    pagination: Pagination

    @model_serializer(mode="wrap")
    def serialize_numbers_as_strings(self, handler):
        return numbers_to_strings(handler(self))

    @classmethod
    def from_page(cls, page: Page[T]) -> "PageResponse[T]":
        return cls(result=page.items, pagination=page.pagination)


class CanonicalJSONResponse(JSONResponse):
    """JSON response that has all its numbers rendered as strings.

    Return it from an endpoint directly: FastAPI's own serialization would
    turn Decimals into floats first.
    """

    def render(self, content: Any) -> bytes:
        return super().render(jsonable_encoder(numbers_to_strings(content)))
