import asyncio
import logging
import re
from collections.abc import Awaitable
from collections.abc import Callable
from http import HTTPStatus
from urllib.parse import quote
from urllib.parse import urlencode
from urllib.parse import urljoin

from aiohttp import ClientError
from aiohttp import ClientResponse
from aiohttp import ClientSession
from aiohttp import ClientTimeout
from pydantic import AnyHttpUrl

from keyset_python import Json

from .exceptions import ApiException
from .exceptions import Unresponsive

__all__ = ["ApiProvider"]

logger = logging.getLogger(__name__)


def is_success(status: HTTPStatus) -> bool:
    """Returns True on 2xx status"""
    return (int(status) // 100) == 2


def check_exception(status: HTTPStatus, body: Json) -> None:
    if not is_success(status):
        raise ApiException(body, status=status)


JSON_CONTENT_TYPE_REGEX = re.compile(r"^application\/[^+]*[+]?(json);?.*$")


def is_json_content_type(content_type: str | None) -> bool:
    if not content_type:
        return False
    return bool(JSON_CONTENT_TYPE_REGEX.match(content_type))


def join(url: str, path: str, trailing_slash: bool = False) -> str:
    """Results in a full url without trailing slash"""
    assert url.endswith("/")
    assert not path.startswith("/")
    result = urljoin(url, path)
    if trailing_slash and not result.endswith("/"):
        result = result + "/"
    elif not trailing_slash and result.endswith("/"):
        result = result[:-1]
    return result


def add_query_params(url: str, params: Json | None) -> str:
    if params is None:
        return url
    params = {k: v for (k, v) in params.items() if v is not None}
    if not params:
        return url
    return url + "?" + urlencode(params, doseq=True)


class ApiProvider:
    """Basic JSON API provider with bearer tokens and per-request timeouts.

    There is no retry policy: a timeout raises Unresponsive, a non-2xx
    response raises ApiException, and the caller decides what to do.

    Use connect() / disconnect() (e.g. in the application lifespan) to share
    one connection pool between requests; concurrent requests are fine.

    Args:
        url: The url of the API (with trailing slash)
        headers_factory: Coroutine that returns headers (for e.g. authorization)
        trailing_slash: Wether to automatically add or remove trailing slashes.
    """

    def __init__(
        self,
        url: AnyHttpUrl | str,
        headers_factory: Callable[[], Awaitable[dict[str, str]]] | None = None,
        trailing_slash: bool = False,
    ):
        self._url = str(url)
        if not self._url.endswith("/"):
            self._url += "/"
        self._headers_factory = headers_factory
        self._trailing_slash = trailing_slash
        self._session: ClientSession | None = None

    async def connect(self) -> None:
        if self._session is None:
            self._session = ClientSession()

    async def disconnect(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def _request(
        self,
        method: str,
        path: str,
        params: Json | None,
        json: Json | None,
        headers: dict[str, str] | None,
        timeout: float,
    ) -> ClientResponse:
        if self._session is None:
            raise RuntimeError("ApiProvider is not connected, call connect() first")
        url = add_query_params(join(self._url, quote(path), self._trailing_slash), params)
        actual_headers = {}
        if self._headers_factory is not None:
            actual_headers.update(await self._headers_factory())
        if headers:
            actual_headers.update(headers)
        try:
            response = await self._session.request(
                method=method,
                url=url,
                headers=actual_headers,
                timeout=ClientTimeout(total=timeout),
                json=json,
            )
            await response.read()
        except asyncio.TimeoutError:
            logger.warning(f"{method} {url} not responsive after {timeout:g} seconds")
            raise Unresponsive(timeout)
        except ClientError as e:
            logger.warning(f"{method} {url} failed: {e!r}")
            raise ApiException(
                f"Connection error: {e}", status=HTTPStatus.BAD_GATEWAY
            ) from e
        return response

    async def request(
        self,
        method: str,
        path: str,
        params: Json | None = None,
        json: Json | None = None,
        headers: dict[str, str] | None = None,
        timeout: float = 5.0,
    ) -> Json | None:
        response = await self._request(method, path, params, json, headers, timeout)
        status = HTTPStatus(response.status)
        content_type = response.headers.get("Content-Type")
        if status is HTTPStatus.NO_CONTENT:
            return None
        if not is_json_content_type(content_type):
            raise ApiException(
                f"Unexpected content type '{content_type}'", status=status
            )
        try:
            body = await response.json()
        except (ClientError, ValueError) as e:
            raise ApiException(f"Invalid JSON body: {e}", status=status) from e
        check_exception(status, body)
        return body
