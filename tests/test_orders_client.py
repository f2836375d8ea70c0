# -*- coding: utf-8 -*-
import json

import httpx
import pytest

from workorders.models import Order
from workorders.services.orders_client import (
    ApiTimeoutError, OrderNotFoundError, OrdersApiError, OrdersClient,
)

from conftest import BASE_URL


def make_client(handler, settings, token=""):
    return OrdersClient(
        base_url=BASE_URL,
        token=token,
        transport=httpx.MockTransport(handler),
        settings=settings,
    )


async def test_fetch_order_sends_token_and_parses_camel_case(settings):
    seen = {}

    def handler(request: httpx.Request):
        seen["auth"] = request.headers.get("Authorization")
        seen["path"] = request.url.path
        return httpx.Response(200, json={"id": "000001", "govNumber": "А001АА77", "status": "PAYED"})

    order = await make_client(handler, settings, token="secret").fetch_order("000001")

    assert seen == {"auth": "Bearer secret", "path": "/api/orders/000001"}
    assert order.gov_number == "А001АА77"
    assert order.status == "PAYED"


async def test_create_order_omits_id(settings):
    bodies = []

    def handler(request: httpx.Request):
        bodies.append(json.loads(request.content))
        return httpx.Response(201, json={"id": "000002", "customer": "Иванов"})

    created = await make_client(handler, settings).create_order(Order(id="temp", customer="Иванов"))

    assert "id" not in bodies[0]
    assert bodies[0]["customer"] == "Иванов"
    assert created.id == "000002"


async def test_404_raises_not_found(settings):
    def handler(request):
        return httpx.Response(404, json={"detail": "Заказ не найден"})

    with pytest.raises(OrderNotFoundError) as exc:
        await make_client(handler, settings).update_order("000404", Order(id="000404"))

    assert exc.value.status_code == 404
    assert exc.value.message == "Заказ не найден"


async def test_server_error_uses_error_field(settings):
    def handler(request):
        return httpx.Response(500, json={"error": "boom"})

    with pytest.raises(OrdersApiError) as exc:
        await make_client(handler, settings).list_orders()

    assert not isinstance(exc.value, OrderNotFoundError)
    assert exc.value.status_code == 500
    assert exc.value.message == "boom"


async def test_timeout_is_wrapped(settings):
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(ApiTimeoutError):
        await make_client(handler, settings).fetch_order("000001")


async def test_connection_error_is_wrapped(settings):
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(OrdersApiError) as exc:
        await make_client(handler, settings).delete_order("000001")

    assert exc.value.status_code is None


async def test_upload_is_multipart_pdf(settings):
    seen = {}

    def handler(request: httpx.Request):
        seen["type"] = request.headers["Content-Type"]
        seen["body"] = request.content
        return httpx.Response(200, json={"url": "/api/tickets/000001/pdf", "path": "tickets/000001/ticket-000001.pdf"})

    upload = await make_client(handler, settings).upload_ticket_pdf("000001", b"%PDF-1.4 test")

    assert seen["type"].startswith("multipart/form-data")
    assert b'name="file"; filename="ticket-000001.pdf"' in seen["body"]
    assert upload.path == "tickets/000001/ticket-000001.pdf"


async def test_search_services_passes_query(settings):
    def handler(request: httpx.Request):
        assert request.url.params["q"] == "замена"
        return httpx.Response(200, json=["Замена свечей"])

    assert await make_client(handler, settings).search_services(" замена ") == ["Замена свечей"]


async def test_delete_ticket_pdfs_returns_count(settings):
    def handler(request: httpx.Request):
        assert request.method == "DELETE"
        return httpx.Response(200, json={"deleted": 2})

    assert await make_client(handler, settings).delete_ticket_pdfs("000001") == 2
