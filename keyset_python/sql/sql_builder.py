from sqlalchemy import and_
from sqlalchemy import asc
from sqlalchemy import Column
from sqlalchemy import delete
from sqlalchemy import desc
from sqlalchemy import Executable
from sqlalchemy import func
from sqlalchemy import or_
from sqlalchemy import select
from sqlalchemy import Table
from sqlalchemy import true
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.sql.expression import ColumnElement
from sqlalchemy.sql.expression import false

from keyset_python import Filter
from keyset_python import Id
from keyset_python import InvalidOrderQueryConfig
from keyset_python import Json
from keyset_python import OrderDirection
from keyset_python import OrderQuery
from keyset_python import PageOptions

__all__ = ["SQLBuilder"]


class SQLBuilder:
    def __init__(self, table: Table, key: str = "id"):
        self.table = table
        self.key = key

    def _column(self, field: str) -> Column:
        try:
            return getattr(self.table.c, field)
        except AttributeError:
            raise InvalidOrderQueryConfig(
                f"table {self.table.name} has no column '{field}'"
            ) from None

    def _filter_to_sql(self, filter: Filter) -> ColumnElement:
        try:
            column = getattr(self.table.c, filter.field)
        except AttributeError:
            return false()
        if len(filter.values) == 0:
            return false()
        elif len(filter.values) == 1:
            return column == filter.values[0]
        else:
            return column.in_(filter.values)

    def _order_to_sql(self, order: OrderQuery) -> list[ColumnElement]:
        return [
            asc(self._column(x.field))
            if x.direction is OrderDirection.ASC
            else desc(self._column(x.field))
            for x in order.columns
        ]

    def _seek_to_sql(self, order: OrderQuery, after: Json) -> ColumnElement:
        """Rows strictly after 'after': (a > 1) OR (a = 1 AND b > 2) OR ...

        The comparison flips for descending columns. Ordering columns are
        expected to be NOT NULL.
        """
        clauses = []
        for i, column in enumerate(order.columns):
            sql_column = self._column(column.field)
            value = after[column.field]
            if column.direction is OrderDirection.ASC:
                comparison = sql_column > value
            else:
                comparison = sql_column < value
            equal = [
                self._column(x.field) == after[x.field] for x in order.columns[:i]
            ]
            clauses.append(and_(*equal, comparison))
        return or_(*clauses)

    def _santize_item(self, item: Json) -> Json:
        known = {c.key for c in self.table.c}
        result = {k: item[k] for k in item.keys() if k in known}
        if self.key in result and result[self.key] is None:
            del result[self.key]
        return result

    def select(
        self, filters: list[Filter], params: PageOptions | None = None
    ) -> Executable:
        query = select(self.table).where(*[self._filter_to_sql(x) for x in filters])
        if params is None:
            return query
        if params.order is not None:
            if params.after is not None:
                query = query.where(self._seek_to_sql(params.order, params.after))
            query = query.order_by(*self._order_to_sql(params.order))
        return query.limit(params.limit)

    def insert(self, item: Json) -> Executable:
        return (
            insert(self.table).values(**self._santize_item(item)).returning(self.table)
        )

    def delete(self, id: Id) -> Executable:
        return (
            delete(self.table)
            .where(self._column(self.key) == id)
            .returning(self._column(self.key))
        )

    def count(self, filters: list[Filter]) -> Executable:
        return (
            select(func.count().label("count"))
            .select_from(self.table)
            .where(*[self._filter_to_sql(x) for x in filters])
        )

    def exists(self, filters: list[Filter]) -> Executable:
        return (
            select(true().label("exists"))
            .select_from(self.table)
            .where(*[self._filter_to_sql(x) for x in filters])
            .limit(1)
        )
