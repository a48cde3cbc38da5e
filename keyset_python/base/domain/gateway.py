# (c) Nelen & Schuurmans

from abc import ABC

from .filter import Filter
from .pagination import PageOptions
from .types import Id
from .types import Json

__all__ = ["Gateway"]


class Gateway(ABC):
    async def filter(
        self, filters: list[Filter], params: PageOptions | None = None
    ) -> list[Json]:
        raise NotImplementedError()

    async def count(self, filters: list[Filter]) -> int:
        return len(await self.filter(filters, params=None))

    async def exists(self, filters: list[Filter]) -> bool:
        return len(await self.filter(filters, params=PageOptions(limit=1))) > 0

    async def get_by(self, filters: list[Filter]) -> Json | None:
        result = await self.filter(filters, params=PageOptions(limit=1))
        return result[0] if result else None

    async def add(self, item: Json) -> Json:
        raise NotImplementedError()

    async def remove(self, id: Id) -> bool:
        raise NotImplementedError()
