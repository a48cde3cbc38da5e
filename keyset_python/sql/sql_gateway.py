# (c) Nelen & Schuurmans

import inject
from sqlalchemy import Table
from sqlalchemy.sql import Executable

from keyset_python import Filter
from keyset_python import Gateway
from keyset_python import Id
from keyset_python import Json
from keyset_python import Mapper
from keyset_python import PageOptions

from .sql_builder import SQLBuilder
from .sql_provider import SQLDatabase
from .sql_provider import SQLProvider

__all__ = ["SQLGateway"]


class SQLGateway(Gateway):
    """Gateway to an (append-mostly) SQL table.

    Usage:

        class TransactionGateway(SQLGateway, table=transaction, key="hash"):
            pass

    The SQLDatabase is taken from 'inject' unless a provider is given.
    """

    table: Table
    key: str
    mapper: Mapper = Mapper()

    def __init__(self, provider_override: SQLProvider | None = None):
        self.provider_override = provider_override
        self.builder = SQLBuilder(self.table, self.key)

    @property
    def provider(self) -> SQLProvider:
        return self.provider_override or inject.instance(SQLDatabase)

    def __init_subclass__(cls, table: Table, key: str = "id") -> None:
        if not hasattr(table.c, key):
            raise ValueError(f"Can't use a SQLGateway without '{key}' column")
        cls.table = table
        cls.key = key
        super().__init_subclass__()

    async def execute(self, query: Executable) -> list[Json]:
        return [self.mapper.to_internal(x) for x in await self.provider.execute(query)]

    async def add(self, item: Json) -> Json:
        (result,) = await self.execute(
            self.builder.insert(self.mapper.to_external(item))
        )
        return result

    async def remove(self, id: Id) -> bool:
        return bool(await self.execute(self.builder.delete(id)))

    async def filter(
        self, filters: list[Filter], params: PageOptions | None = None
    ) -> list[Json]:
        return await self.execute(self.builder.select(filters, params))

    async def count(self, filters: list[Filter]) -> int:
        return (await self.execute(self.builder.count(filters)))[0]["count"]

    async def exists(self, filters: list[Filter]) -> bool:
        return len(await self.execute(self.builder.exists(filters))) > 0
