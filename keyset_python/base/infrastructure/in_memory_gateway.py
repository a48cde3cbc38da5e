# (c) Nelen & Schuurmans

from copy import deepcopy
from typing import Any

from keyset_python.base.domain import AlreadyExists
from keyset_python.base.domain import Filter
from keyset_python.base.domain import Gateway
from keyset_python.base.domain import Id
from keyset_python.base.domain import Json
from keyset_python.base.domain import OrderDirection
from keyset_python.base.domain import OrderQuery
from keyset_python.base.domain import PageOptions

__all__ = ["InMemoryGateway"]


def _sort_key(value: Any) -> tuple[bool, Any]:
    # missing values go last in ascending order (like PostgreSQL's NULLS LAST)
    return (value is None, value)


def comes_after(record: Json, after: Json, order: OrderQuery) -> bool:
    """Whether 'record' is strictly behind 'after' in the given order."""
    for column in order.columns:
        a = _sort_key(record.get(column.field))
        b = _sort_key(after.get(column.field))
        if a == b:
            continue
        return a > b if column.direction is OrderDirection.ASC else a < b
    return False


class InMemoryGateway(Gateway):
    """For testing purposes and for small, static datasets.

    Records are stored by their 'key' field (default "id").
    """

    def __init__(self, data: list[Json], key: str = "id"):
        self.key = key
        self.data = {x[key]: deepcopy(x) for x in data}

    def _get_next_id(self) -> int:
        if len(self.data) == 0:
            return 1
        else:
            return max(self.data) + 1

    def _paginate(self, objs: list[Json], params: PageOptions) -> list[Json]:
        if params.order is not None:
            # successive stable sorts, least significant column first
            for column in reversed(params.order.columns):
                objs = sorted(
                    objs,
                    key=lambda x: _sort_key(x.get(column.field)),
                    reverse=column.direction is OrderDirection.DESC,
                )
            if params.after is not None:
                objs = [x for x in objs if comes_after(x, params.after, params.order)]
        return objs[: params.limit]

    async def filter(
        self, filters: list[Filter], params: PageOptions | None = None
    ) -> list[Json]:
        result = []
        for x in self.data.values():
            for filter in filters:
                if x.get(filter.field) not in filter.values:
                    break
            else:
                result.append(deepcopy(x))
        if params is not None:
            result = self._paginate(result, params)
        return result

    async def add(self, item: Json) -> Json:
        item = item.copy()
        id_ = item.pop(self.key, None)
        # autoincrement (like SQL does)
        if id_ is None:
            id_ = self._get_next_id()
        elif id_ in self.data:
            raise AlreadyExists(id_, key=self.key)

        self.data[id_] = {self.key: id_, **item}
        return deepcopy(self.data[id_])

    async def remove(self, id: Id) -> bool:
        if id not in self.data:
            return False
        del self.data[id]
        return True
