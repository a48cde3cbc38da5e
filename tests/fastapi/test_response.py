import json
from decimal import Decimal

from keyset_python import Page
from keyset_python import Pagination
from keyset_python.fastapi import CanonicalJSONResponse
from keyset_python.fastapi import PageResponse


def test_page_response_from_page():
    page = Page(
        items=[{"id": 1}],
        pagination=Pagination(page_key="1-0", has_more=True),
        sort_by="newest_first",
    )

    actual = PageResponse.from_page(page)

    assert actual.result == [{"id": 1}]
    assert actual.pagination == page.pagination


def test_canonical_json_response():
    response = CanonicalJSONResponse(
        {
            "amount": Decimal("1E+30"),
            "fee": 0.1,
            "price": "10.00",
            "hash": "0x00ff",
            "confirmed": True,
            "note": None,
        }
    )

    assert json.loads(response.body) == {
        "amount": "1000000000000000000000000000000",
        "fee": "0.1",
        "price": "10",
        "hash": "0x00ff",
        "confirmed": True,
        "note": None,
    }


def test_canonical_json_response_model():
    response = CanonicalJSONResponse(
        PageResponse(result=[{"value": 2}], pagination=Pagination())
    )

    assert json.loads(response.body) == {
        "result": [{"value": "2"}],
        "pagination": {"page_key": None, "has_more": False},
    }


def test_page_response_serializes_numbers_as_strings():
    response = PageResponse(
        result=[{"id": 1, "amount": Decimal("0.10"), "hash": "0x00ff"}],
        pagination=Pagination(page_key="12-3", has_more=True),
    )

    expected = {
        "result": [{"id": "1", "amount": "0.1", "hash": "0x00ff"}],
        "pagination": {"page_key": "12-3", "has_more": True},
    }
    assert response.model_dump() == expected
    assert response.model_dump(mode="json") == expected
