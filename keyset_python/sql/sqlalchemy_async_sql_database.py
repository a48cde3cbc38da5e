import re
from typing import Any

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.sql import Executable

from keyset_python import AlreadyExists
from keyset_python import Json

from .sql_provider import SQLDatabase

__all__ = ["SQLAlchemyAsyncSQLDatabase"]


UNIQUE_VIOLATION_REGEX = re.compile(
    r"Key \((?P<key>.*?)\)=\((?P<value>.*?)\) already exists"
)


def maybe_raise_already_exists(e: DBAPIError) -> None:
    # https://www.postgresql.org/docs/current/errcodes-appendix.html
    if getattr(e.orig, "pgcode", None) != "23505":  # unique_violation
        return
    match = UNIQUE_VIOLATION_REGEX.search(str(e.orig))
    if match is None:
        raise AlreadyExists() from e
    raise AlreadyExists(match["value"], key=match["key"]) from e


class SQLAlchemyAsyncSQLDatabase(SQLDatabase):
    """PostgreSQL through SQLAlchemy and asyncpg.

    Every query runs in a short transaction of its own. A page is a single
    statement, so it sees the rows that were committed when it ran; pages
    are not a snapshot of the table.
    """

    engine: AsyncEngine

    def __init__(self, url: str, **kwargs):
        self.engine = create_async_engine(f"postgresql+asyncpg://{url}", **kwargs)

    async def dispose(self) -> None:
        await self.engine.dispose()

    async def execute(
        self, query: Executable, bind_params: dict[str, Any] | None = None
    ) -> list[Json]:
        async with self.engine.begin() as connection:
            try:
                result = await connection.execute(query, bind_params)
            except DBAPIError as e:
                maybe_raise_already_exists(e)
                raise
            return [x._asdict() for x in result.fetchall()]
