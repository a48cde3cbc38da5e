import json
from decimal import Decimal
from http import HTTPStatus
from unittest import mock

import pytest
from aiohttp import ClientConnectionError
from aiohttp import ClientSession

from keyset_python.api_client import ApiException
from keyset_python.api_client import ApiProvider
from keyset_python.api_client import fetch_all
from keyset_python.api_client import iterate_pages
from keyset_python.api_client import MalformedResponse
from keyset_python.api_client import Unresponsive


def page(result, page_key=None, has_more=False):
    return {
        "result": result,
        "pagination": {"page_key": page_key, "has_more": has_more},
    }


@pytest.fixture
def provider():
    provider = mock.Mock(spec=ApiProvider)
    provider.request = mock.AsyncMock()
    return provider


async def test_single_page(provider):
    provider.request.return_value = page([1, 2], page_key="5-0")

    assert await fetch_all(provider, "transfers") == [1, 2]
    provider.request.assert_awaited_once_with(
        "GET", "transfers", params={"cursor_pagination": "true"}, timeout=5.0
    )


async def test_follows_page_keys(provider):
    provider.request.side_effect = [
        page([1, 2], page_key="9-1", has_more=True),
        page([3, 4], page_key="7-0", has_more=True),
        page([5], page_key="6-3"),
    ]

    assert await fetch_all(provider, "transfers", {"sender": "0xaa"}) == [1, 2, 3, 4, 5]

    assert [x[1]["params"] for x in provider.request.call_args_list] == [
        {"sender": "0xaa", "cursor_pagination": "true"},
        {"sender": "0xaa", "cursor_pagination": "true", "page_key": "9-1"},
        {"sender": "0xaa", "cursor_pagination": "true", "page_key": "7-0"},
    ]


async def test_params_are_canonical(provider):
    provider.request.return_value = page([])

    await fetch_all(
        provider, "transfers", {"min_amount": Decimal("1.50"), "max_results": 50}
    )

    assert provider.request.call_args[1]["params"] == {
        "min_amount": "1.5",
        "max_results": "50",
        "cursor_pagination": "true",
    }


async def test_params_not_mutated(provider):
    provider.request.return_value = page([])
    params = {"sender": "0xaa"}

    await fetch_all(provider, "transfers", params)

    assert params == {"sender": "0xaa"}


async def test_max_results_may_overshoot(provider):
    provider.request.side_effect = [
        page([1, 2, 3], page_key="9-1", has_more=True),
        page([4, 5, 6], page_key="7-0", has_more=True),
        page([7, 8, 9], page_key="6-3", has_more=True),
    ]

    actual = await fetch_all(provider, "transfers", max_results=4)

    assert actual == [1, 2, 3, 4, 5, 6]
    assert provider.request.await_count == 2


async def test_max_results_exact(provider):
    provider.request.side_effect = [
        page([1, 2], page_key="9-1", has_more=True),
        page([3, 4], page_key="7-0", has_more=True),
    ]

    assert await fetch_all(provider, "transfers", max_results=2) == [1, 2]
    assert provider.request.await_count == 1


async def test_timeout_aborts(provider):
    provider.request.side_effect = [
        page([1, 2], page_key="9-1", has_more=True),
        Unresponsive(5.0),
    ]

    with pytest.raises(Unresponsive):
        await fetch_all(provider, "transfers")


async def test_timeout_passed_on(provider):
    provider.request.return_value = page([])

    await fetch_all(provider, "transfers", timeout=1.0)

    assert provider.request.call_args[1]["timeout"] == 1.0


@pytest.mark.parametrize(
    "body",
    [
        None,
        [],
        {"result": [1]},
        {"result": None, "pagination": {"has_more": False}},
        {"result": [1], "pagination": "9-1"},
        {"result": [1], "pagination": {"has_more": True}},
        {"result": [1], "pagination": {"has_more": True, "page_key": ""}},
    ],
)
async def test_malformed_response(provider, body):
    provider.request.return_value = body

    with pytest.raises(MalformedResponse):
        await fetch_all(provider, "transfers")


async def test_iterate_pages(provider):
    provider.request.side_effect = [
        page([1, 2], page_key="9-1", has_more=True),
        page([3], page_key="7-0"),
    ]

    actual = [x async for x in iterate_pages(provider, "transfers")]

    assert actual == [[1, 2], [3]]


async def test_iterate_pages_empty(provider):
    provider.request.return_value = page([])

    actual = [x async for x in iterate_pages(provider, "transfers")]

    assert actual == [[]]


@pytest.fixture
async def http_provider():
    provider = ApiProvider(url="http://testserver/")
    await provider.connect()
    yield provider
    await provider.disconnect()


def http_response(body):
    response = mock.Mock()
    response.status = int(HTTPStatus.OK)
    response.headers = {"Content-Type": "application/json"}
    response.read = mock.AsyncMock()
    if isinstance(body, Exception):
        response.json = mock.AsyncMock(side_effect=body)
    else:
        response.json = mock.AsyncMock(return_value=body)
    return response


async def test_invalid_json_body_aborts(http_provider):
    responses = [
        http_response(page([1, 2], page_key="9-1", has_more=True)),
        http_response(json.JSONDecodeError("Expecting value", "<html>", 0)),
    ]
    with mock.patch.object(
        ClientSession, "request", new=mock.AsyncMock(side_effect=responses)
    ):
        with pytest.raises(ApiException) as e:
            await fetch_all(http_provider, "transfers")

    assert e.value.status is HTTPStatus.OK


async def test_connection_error_aborts(http_provider):
    request = mock.AsyncMock(side_effect=ClientConnectionError("refused"))
    with mock.patch.object(ClientSession, "request", new=request):
        with pytest.raises(ApiException) as e:
            await fetch_all(http_provider, "transfers")

    assert e.value.status is HTTPStatus.BAD_GATEWAY
