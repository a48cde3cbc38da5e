# (c) Nelen & Schuurmans

import logging
from collections.abc import Sequence

from keyset_python.base.domain import Filter
from keyset_python.base.domain import Gateway
from keyset_python.base.domain import Json
from keyset_python.base.domain import OrderQueryRegistry
from keyset_python.base.domain import Page
from keyset_python.base.domain import PageOptions
from keyset_python.base.domain import Pagination
from keyset_python.base.domain import ValueObject

__all__ = ["Paginator", "PageRequest"]

logger = logging.getLogger(__name__)


class PageRequest(ValueObject):
    sort_by: str | None = None
    reverse: bool = False
    page_key: str | None = None
    max_results: int | None = None


class Paginator:
    """Keyset pagination over the records of one gateway.

    A page continues strictly after the record that the page key points at,
    so pages stay stable while records are appended. The page key holds all
    the state; nothing is kept between calls.

    A page key that no longer matches a record (or that was never valid)
    restarts the traversal at the beginning of the collection. Clients that
    poll for new records should be aware of this: they will not get an error
    but the first page again.

    Args:
        gateway: Where the records live.
        registry: The (frozen) order queries of the records.
        results_limit: The maximum page size for unauthorized callers.
        default_limit: The page size if the caller does not ask for one.
    """

    def __init__(
        self,
        gateway: Gateway,
        registry: OrderQueryRegistry,
        results_limit: int = 50,
        default_limit: int = 25,
    ):
        assert results_limit >= 1
        self.gateway = gateway
        self.registry = registry
        self.results_limit = results_limit
        self.default_limit = default_limit

    def resolve_limit(self, max_results: int | None, authorized: bool = False) -> int:
        # only an explicit request of an authorized caller escapes the clamp
        if authorized and max_results is not None:
            return max(max_results, 1)
        limit = self.default_limit if max_results is None else max_results
        return min(max(limit, 1), self.results_limit)

    async def find_starting_item(self, page_key: str | None) -> Json | None:
        key_values = self.registry.page_key_codec.decode(page_key)
        if key_values is None:
            if page_key:
                logger.debug("ignoring unusable page key '%s'", page_key)
            return None
        starting_item = await self.gateway.get_by(Filter.for_values(key_values))
        if starting_item is None:
            logger.debug(
                "page key '%s' does not match any %s, starting from the beginning",
                page_key,
                self.registry.entity,
            )
        return starting_item

    async def paginate(
        self,
        request: PageRequest,
        filters: Sequence[Filter] = (),
        authorized: bool = False,
    ) -> Page[Json]:
        order = self.registry.resolve(request.sort_by, reverse=request.reverse)
        limit = self.resolve_limit(request.max_results, authorized=authorized)
        starting_item = await self.find_starting_item(request.page_key)
        # one extra record tells whether there is a next page
        records = await self.gateway.filter(
            list(filters),
            params=PageOptions(limit=limit + 1, order=order, after=starting_item),
        )
        has_more = len(records) > limit
        if has_more:
            records = records[:limit]
        page_key = self.registry.page_key_codec.encode(records[-1]) if records else None
        return Page(
            items=records,
            pagination=Pagination(page_key=page_key, has_more=has_more),
            sort_by=order.name,
        )
