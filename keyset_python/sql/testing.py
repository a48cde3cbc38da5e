from typing import Any
from unittest import mock

from sqlalchemy.dialects import postgresql
from sqlalchemy.sql import Executable

from keyset_python import Json

from .sql_provider import SQLDatabase

__all__ = ["FakeSQLDatabase", "assert_query_equal"]


class FakeSQLDatabase(SQLDatabase):
    """Records the queries it gets and answers with 'result'.

    Set ``result.return_value`` (or ``result.side_effect`` for several queries)
    to control what the queries return.
    """

    def __init__(self):
        self.queries: list[Executable] = []
        self.result = mock.Mock(return_value=[])

    async def execute(
        self, query: Executable, _: dict[str, Any] | None = None
    ) -> list[Json]:
        self.queries.append(query)
        return self.result()


def assert_query_equal(q: Executable, expected: str):
    """Compare the PostgreSQL rendering of 'q' (on a single line) with 'expected'."""
    assert isinstance(q, Executable)
    compiled = q.compile(
        compile_kwargs={"literal_binds": True},
        dialect=postgresql.dialect(),
    )
    actual = str(compiled).replace("\n", "").replace("  ", " ")
    assert actual == expected
