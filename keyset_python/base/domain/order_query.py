# (c) Nelen & Schuurmans

import logging
from collections.abc import Callable
from collections.abc import Mapping
from collections.abc import Sequence
from enum import Enum
from typing import Any
from typing import Union

from .exceptions import InvalidOrderQueryConfig
from .page_key import PageKeyCodec
from .value_object import ValueObject

__all__ = [
    "OrderDirection",
    "OrderColumn",
    "OrderQuery",
    "OrderQueryRegistry",
    "REVERSE_SUFFIX",
]

logger = logging.getLogger(__name__)

REVERSE_SUFFIX = "_reverse"


class OrderDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"

    def reverse(self) -> "OrderDirection":
        if self is OrderDirection.ASC:
            return OrderDirection.DESC
        return OrderDirection.ASC


class OrderColumn(ValueObject):
    field: str
    direction: OrderDirection = OrderDirection.DESC

    def reverse(self) -> "OrderColumn":
        return OrderColumn(field=self.field, direction=self.direction.reverse())


# "block_number", ("block_number", "asc") or OrderColumn(...)
ColumnSpec = Union[OrderColumn, tuple[str, str], str]


def to_order_column(spec: ColumnSpec) -> OrderColumn:
    if isinstance(spec, OrderColumn):
        return spec
    if isinstance(spec, str):
        return OrderColumn(field=spec)
    field, direction = spec
    return OrderColumn(field=field, direction=OrderDirection(direction))


class OrderQuery(ValueObject):
    """A named ordering: a total order over the records of one entity."""

    name: str
    columns: tuple[OrderColumn, ...]

    @property
    def is_reverse(self) -> bool:
        return self.name.endswith(REVERSE_SUFFIX)

    def reverse(self) -> "OrderQuery":
        if self.is_reverse:
            name = self.name[: -len(REVERSE_SUFFIX)]
        else:
            name = self.name + REVERSE_SUFFIX
        return OrderQuery(name=name, columns=tuple(x.reverse() for x in self.columns))


class OrderQueryRegistry:
    """The order queries a client may choose from for one entity type.

    Callers pick an ordering by name (``sort_by``). Names are only ever used
    as keys into this registry, so an unknown name can't reach the storage
    layer; it falls back to the default order query instead.

    Every registered order query can also be traversed in reverse; the
    reverse variants are derived and can't be registered themselves.

    Build the registry once during startup, call ``freeze()`` and pass it to
    the components that need it.

    Example:

        transactions = OrderQueryRegistry(
            "transaction",
            page_key_attributes=["block_number", "transaction_index"],
            page_key_types={"block_number": int, "transaction_index": int},
        )
        transactions.register("newest_first", "block_number")
        transactions.freeze()
    """

    def __init__(
        self,
        entity: str,
        page_key_attributes: Sequence[str],
        page_key_types: Mapping[str, Callable[[str], Any]] | None = None,
        default: str = "newest_first",
    ):
        if not page_key_attributes:
            raise InvalidOrderQueryConfig("page_key_attributes must be present")
        self.entity = entity
        self.page_key_attributes = tuple(page_key_attributes)
        self.page_key_codec = PageKeyCodec(
            self.page_key_attributes, converters=page_key_types
        )
        self.default = default
        self._order_queries: dict[str, OrderQuery] = {}
        self._frozen = False

    @property
    def names(self) -> list[str]:
        return list(self._order_queries)

    def register(self, name: str, *columns: ColumnSpec) -> OrderQuery:
        """Register (or re-register) an order query.

        Tie-break attributes that are not among the columns are appended with
        the direction of the last column, which makes the order total.
        """
        if self._frozen:
            raise InvalidOrderQueryConfig(
                f"order queries of {self.entity} can't be changed after startup"
            )
        if not name or not name.strip():
            raise InvalidOrderQueryConfig("an order query needs a name")
        if name.endswith(REVERSE_SUFFIX):
            raise InvalidOrderQueryConfig(
                f"'{name}': reverse order queries are derived, not registered"
            )
        if not columns:
            raise InvalidOrderQueryConfig(f"'{name}' has no columns")
        order_columns = [to_order_column(x) for x in columns]
        fields = [x.field for x in order_columns]
        if len(set(fields)) != len(fields):
            raise InvalidOrderQueryConfig(f"'{name}' has duplicate columns")
        direction = order_columns[-1].direction
        order_columns.extend(
            OrderColumn(field=attr, direction=direction)
            for attr in self.page_key_attributes
            if attr not in fields
        )
        order_query = OrderQuery(name=name, columns=tuple(order_columns))
        self._order_queries[name] = order_query
        return order_query

    def register_many(self, specs: Mapping[str, Sequence[ColumnSpec]]) -> None:
        for name, columns in specs.items():
            self.register(name, *columns)

    def freeze(self) -> "OrderQueryRegistry":
        if self.default not in self._order_queries:
            raise InvalidOrderQueryConfig(
                f"default order query '{self.default}' of {self.entity} is not registered"
            )
        self._frozen = True
        return self

    def is_valid_scope(self, name: str | None) -> bool:
        if not name or not name.strip():
            return False
        return name in self._order_queries

    def resolve(self, name: str | None, reverse: bool = False) -> OrderQuery:
        """Look up the order query a caller asked for, or the default one."""
        if self.is_valid_scope(name):
            order_query = self._order_queries[name]  # type: ignore
        else:
            if name:
                logger.debug(
                    "unknown order query '%s' for %s, using '%s'",
                    name,
                    self.entity,
                    self.default,
                )
            try:
                order_query = self._order_queries[self.default]
            except KeyError:
                raise InvalidOrderQueryConfig(
                    f"default order query '{self.default}' of {self.entity} is not registered"
                ) from None
        return order_query.reverse() if reverse else order_query
