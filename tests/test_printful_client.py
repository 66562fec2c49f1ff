# tests/test_printful_client.py
import json
from decimal import Decimal

import pytest

from services.exceptions import ProviderFetchError, RetryableProviderError
from services.printful_client import PrintfulClient
from tests.factories import remote_category, remote_product, remote_variant


def make_client(**kwargs):
    options = dict(base_url="https://pf.test", token="t", page_size=2, max_pages=10,
                   max_retries=3, backoff_seconds=0, page_delay=0)
    options.update(kwargs)
    return PrintfulClient(**options)


def listing(ids, total):
    return {"code": 200, "result": [{"id": i, "name": f"P{i}"} for i in ids], "paging": {"total": total}}


class ScriptedSend:
    """Підміна PrintfulClient._send: відповіді/помилки по черзі."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    async def __call__(self, path, params, stage):
        self.calls.append((path, dict(params or {}), stage))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


async def test_list_all_paginates_until_total():
    client = make_client()
    send = ScriptedSend(listing([1, 2], 5), listing([3, 4], 5), listing([5], 5))
    client._send = send

    products = await client.list_all()

    assert [p.id for p in products] == [1, 2, 3, 4, 5]
    assert [c[1]["offset"] for c in send.calls] == [0, 2, 4]
    assert all(c[0] == "/store/products" for c in send.calls)


async def test_list_all_stops_on_total_with_full_pages():
    client = make_client()
    send = ScriptedSend(listing([1, 2], 4), listing([3, 4], 4))
    client._send = send

    products = await client.list_all()

    assert len(products) == 4
    assert len(send.calls) == 2


async def test_list_all_drops_duplicates_keeping_first():
    client = make_client()
    page_one = listing([1, 2], 6)
    page_two = listing([2, 3], 6)
    page_two["result"][0]["name"] = "Duplicate"
    client._send = ScriptedSend(page_one, page_two, listing([4], 6))

    products = await client.list_all()

    assert [p.id for p in products] == [1, 2, 3, 4]
    assert products[1].name == "P2"


async def test_list_all_respects_page_ceiling():
    client = make_client(max_pages=3)
    # Printful "бреше" про total - сторінки ніколи не закінчуються
    send = ScriptedSend(*[listing([i * 2, i * 2 + 1], None) for i in range(10)])
    client._send = send

    products = await client.list_all()

    assert len(send.calls) == 3
    assert len(products) == 6


async def test_transient_errors_are_retried():
    client = make_client()
    send = ScriptedSend(
        RetryableProviderError("HTTP 502", stage="list page 1", status=502),
        RetryableProviderError("HTTP 429", stage="list page 1", status=429),
        listing([1], 1),
    )
    client._send = send

    products = await client.list_all()

    assert [p.id for p in products] == [1]
    assert len(send.calls) == 3


async def test_exhausted_retries_raise_fetch_error_with_stage():
    client = make_client(max_retries=2)
    send = ScriptedSend(
        listing([1, 2], 4),
        RetryableProviderError("HTTP 503", stage="list page 2", status=503),
        RetryableProviderError("HTTP 503", stage="list page 2", status=503),
    )
    client._send = send

    with pytest.raises(ProviderFetchError) as exc_info:
        await client.list_all()

    assert not isinstance(exc_info.value, RetryableProviderError)
    assert exc_info.value.stage == "list page 2"
    assert exc_info.value.status == 503
    assert len(send.calls) == 3


async def test_client_errors_are_not_retried():
    client = make_client()
    send = ScriptedSend(ProviderFetchError("HTTP 404: Not found", stage="detail 9", status=404))
    client._send = send

    with pytest.raises(ProviderFetchError) as exc_info:
        await client.get_detail(9)

    assert exc_info.value.status == 404
    assert len(send.calls) == 1


async def test_get_detail_parses_variants():
    client = make_client()
    detail = remote_product(1, "Shirt", [remote_variant(11, "A1_RED", price="19.5")])
    client._send = ScriptedSend({"code": 200, "result": detail})

    parsed = await client.get_detail(1)

    assert parsed.sync_product.name == "Shirt"
    variant = parsed.primary_variant
    assert variant.retail_price == Decimal("19.50")
    assert variant.product.product_id == 71
    assert len(variant.files) == 2
    assert variant.options[1].value == ["#FFFFFF", "#000000"]


async def test_get_detail_with_malformed_payload():
    client = make_client()
    client._send = ScriptedSend({"code": 200, "result": {"sync_variants": []}})

    with pytest.raises(ProviderFetchError):
        await client.get_detail(1)


async def test_get_category_unwraps_result():
    client = make_client()
    send = ScriptedSend({"code": 200, "result": {"category": remote_category(25, "Hoodies")}})
    client._send = send

    category = await client.get_category(25)

    assert category.title == "Hoodies"
    assert send.calls[0][0] == "/categories/25"


def test_headers_include_token_and_store():
    client = make_client(token="secret", store_id="123")
    headers = client._headers()
    assert headers["Authorization"] == "Bearer secret"
    assert headers["X-PF-Store-Id"] == "123"


class StaticResponse:
    """Відповідь aiohttp з фіксованим статусом і тілом."""

    def __init__(self, status, body):
        self.status = status
        self.body = body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def text(self):
        return self.body

    async def json(self, content_type="application/json"):
        return json.loads(self.body)


class StaticSession:
    def __init__(self, response):
        self.response = response

    def get(self, url, params=None):
        return self.response


@pytest.mark.parametrize("body", ["<html>Bad gateway</html>", "[1, 2]"])
async def test_non_json_body_becomes_fetch_error_with_stage(body):
    client = make_client()
    session = StaticSession(StaticResponse(200, body))

    async def get_session():
        return session

    client._get_session = get_session

    with pytest.raises(ProviderFetchError) as exc_info:
        await client.list_all()

    assert not isinstance(exc_info.value, RetryableProviderError)
    assert exc_info.value.stage == "list page 1"
    assert str(exc_info.value).startswith("[list page 1]")
