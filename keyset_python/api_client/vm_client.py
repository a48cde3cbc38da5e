import json
import logging
import os
from collections.abc import Sequence
from http import HTTPStatus
from typing import Any

import inject
from async_lru import alru_cache
from pydantic import AnyHttpUrl

from keyset_python import Json
from keyset_python import numbers_to_strings
from keyset_python import ValueObject

from .api_provider import ApiProvider
from .batch import batch_call
from .batch import StaticCall
from .exceptions import ApiException
from .exceptions import StaticCallError
from .exceptions import Unresponsive
from .pagination_walker import fetch_all

__all__ = ["VmClient", "VmClientSettings"]

logger = logging.getLogger(__name__)


class VmClientSettings(ValueObject):
    base_url: AnyHttpUrl
    bearer_token: str | None = None
    timeout: float = 5.0

    @classmethod
    def from_env(cls) -> "VmClientSettings":
        return cls(
            base_url=os.environ["FACET_VM_API_BASE_URL"],
            bearer_token=os.environ.get("INTERNAL_API_BEARER_TOKEN") or None,
        )

    def create_provider(self) -> ApiProvider:
        async def headers_factory() -> dict[str, str]:
            if self.bearer_token is None:
                return {}
            return {"Authorization": f"Bearer {self.bearer_token}"}

        return ApiProvider(self.base_url, headers_factory=headers_factory)

    def create_client(self) -> "VmClient":
        return VmClient(self.create_provider(), timeout=self.timeout)


def _error_message(exc: ApiException) -> str:
    body = exc.args[0] if exc.args else None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    if isinstance(body, str) and body:
        return body
    return str(exc)


class VmClient:
    """Client for the VM API (transactions, token state and static calls).

    The ApiProvider is taken from 'inject' unless one is given, e.g.:

        inject.configure(
            lambda binder: binder.bind(
                ApiProvider, VmClientSettings.from_env().create_provider()
            )
        )
    """

    def __init__(
        self, provider_override: ApiProvider | None = None, timeout: float = 5.0
    ):
        self.provider_override = provider_override
        self.timeout = timeout
        self.cached_current_block_number = alru_cache(maxsize=1, ttl=3)(
            self._current_block_number
        )

    @property
    def provider(self) -> ApiProvider:
        return self.provider_override or inject.instance(ApiProvider)

    async def _request(self, path: str, params: Json | None = None) -> Json:
        """GET that reports failures as an {"error": message} body."""
        try:
            body = await self.provider.request(
                "GET", path, params=params, timeout=self.timeout
            )
        except Unresponsive as e:
            return {"error": str(e)}
        except ApiException as e:
            logger.info(f"GET {path} failed: {e}")
            return {"error": _error_message(e)}
        return body or {}

    async def get_transaction(self, tx_hash: str) -> Json | None:
        return (await self._request(f"transactions/{tx_hash}")).get("result")

    async def get_status(self) -> dict[str, int]:
        body = await self._request("status")
        if "error" in body:
            raise ApiException(body["error"], status=HTTPStatus.BAD_GATEWAY)
        return {key: int(value) for (key, value) in body.items()}

    async def _current_block_number(self) -> int:
        return (await self.get_status())["current_block_number"]

    async def get_historical_token_state(self, contract: str, **params: Any) -> Any:
        body = await self._request(
            f"tokens/{contract}/historical_token_state", numbers_to_strings(params)
        )
        return body.get("result")

    async def static_call(self, target: str, function: str, args: Any = None) -> Any:
        body = await self._request(
            f"contracts/{target}/static-call/{function}",
            {"args": json.dumps(numbers_to_strings(args))},
        )
        if body.get("error"):
            raise StaticCallError(str(body["error"]).strip())
        return body.get("result")

    async def batch_static_call(self, calls: Sequence[StaticCall]) -> list[Any]:
        """Static calls in parallel; raises the first StaticCallError."""

        async def call(x: StaticCall) -> Any:
            return await self.static_call(x.target, x.function, x.args)

        return await batch_call(call, calls)

    async def fetch_all(
        self, path: str, params: Json | None = None, max_results: int | None = None
    ) -> list[Any]:
        return await fetch_all(
            self.provider, path, params, max_results=max_results, timeout=self.timeout
        )
