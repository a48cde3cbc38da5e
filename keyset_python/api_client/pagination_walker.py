from collections.abc import AsyncIterator
from contextlib import aclosing
from typing import Any

from keyset_python import Json
from keyset_python import numbers_to_strings

from .api_provider import ApiProvider
from .exceptions import MalformedResponse

__all__ = ["iterate_pages", "fetch_all", "CURSOR_PAGINATION_PARAM"]


# tells the server that the client follows page keys (and trusts them)
CURSOR_PAGINATION_PARAM = "cursor_pagination"


def parse_page(body: Json | None) -> tuple[list[Any], bool, str | None]:
    if not isinstance(body, dict):
        raise MalformedResponse(body)
    result = body.get("result")
    pagination = body.get("pagination")
    if not isinstance(result, list) or not isinstance(pagination, dict):
        raise MalformedResponse(body)
    has_more = bool(pagination.get("has_more"))
    page_key = pagination.get("page_key")
    if has_more and not page_key:
        # following this would fetch the same page forever
        raise MalformedResponse(body)
    return result, has_more, page_key


async def iterate_pages(
    provider: ApiProvider,
    path: str,
    params: Json | None = None,
    timeout: float = 5.0,
) -> AsyncIterator[list[Any]]:
    """Yield the pages of a paginated endpoint, one request at a time.

    Each request continues at the page key of the previous response. Errors
    (timeouts included) are raised as is and end the iteration.
    """
    query = {**numbers_to_strings(params or {}), CURSOR_PAGINATION_PARAM: "true"}
    while True:
        body = await provider.request("GET", path, params=query, timeout=timeout)
        result, has_more, page_key = parse_page(body)
        yield result
        if not has_more:
            return
        query = {**query, "page_key": page_key}


async def fetch_all(
    provider: ApiProvider,
    path: str,
    params: Json | None = None,
    max_results: int | None = None,
    timeout: float = 5.0,
) -> list[Any]:
    """Fetch all pages of a paginated endpoint into one list.

    'max_results' stops the walk once that many results were collected. Pages
    are added as a whole, so the result may be a bit larger than that.

    Records are not deduplicated; if the dataset changes during the walk a
    record may be skipped or (rarely) appear twice.
    """
    results: list[Any] = []
    async with aclosing(iterate_pages(provider, path, params, timeout)) as pages:
        async for page in pages:
            results.extend(page)
            if max_results is not None and len(results) >= max_results:
                break
    return results
