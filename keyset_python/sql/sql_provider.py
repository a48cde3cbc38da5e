from typing import Any

from sqlalchemy.sql import Executable

from keyset_python import Json

__all__ = ["SQLProvider", "SQLDatabase"]


class SQLProvider:
    async def execute(
        self, query: Executable, bind_params: dict[str, Any] | None = None
    ) -> list[Json]:
        raise NotImplementedError()


class SQLDatabase(SQLProvider):
    """A SQLProvider that owns its connections (and has to release them)."""

    async def dispose(self) -> None:
        pass
