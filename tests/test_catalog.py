# -*- coding: utf-8 -*-
import json

import httpx

from workorders.models import Order, WorkStatus
from workorders.services.catalog import DEFAULT_SERVICES, SERVICE_CACHE_KEY, ServiceHints
from workorders.services.drafts import InMemoryDraftStore
from workorders.services.order_search import filter_orders, pending_orders
from workorders.services.orders_client import OrdersClient

from conftest import BASE_URL


async def test_hints_from_server_are_cached(client):
    store = InMemoryDraftStore()
    hints = ServiceHints(client, store)

    names = await hints.refresh()

    assert names == DEFAULT_SERVICES
    assert json.loads(store.get(SERVICE_CACHE_KEY)) == names
    assert hints.suggest("ФАР") == ["Ремонт фар", "Замена фар"]
    assert len(hints.suggest("")) == 8


async def test_hints_fall_back_to_cache_then_defaults(settings):
    def handler(request):
        raise httpx.ConnectError("offline", request=request)

    client = OrdersClient(base_url=BASE_URL, transport=httpx.MockTransport(handler), settings=settings)

    cached = InMemoryDraftStore({SERVICE_CACHE_KEY: json.dumps(["Шиномонтаж"])})
    assert await ServiceHints(client, cached).refresh() == ["Шиномонтаж"]

    corrupt = InMemoryDraftStore({SERVICE_CACHE_KEY: "[broken"})
    assert await ServiceHints(client, corrupt).refresh() == DEFAULT_SERVICES


def test_filter_orders_by_text_digits_and_status():
    orders = [
        Order(id="000001", date="01.03.2024", customer="Иванов", phone="8 (900) 111-22-33"),
        Order(id="000002", date="05.03.2024", car="Kia Rio", vin_number="XWE123", status=WorkStatus.PENDING_PAYMENT),
        Order(id="000003", date="02.03.2024", gov_number="А777АА77", status=WorkStatus.PENDING_PAYMENT),
    ]

    assert [o.id for o in filter_orders(orders, "kia")] == ["000002"]
    assert [o.id for o in filter_orders(orders, "900-111")] == ["000001"]
    assert [o.id for o in filter_orders(orders, "а777")] == ["000003"]
    assert [o.id for o in filter_orders(orders, "")] == ["000002", "000003", "000001"]
    assert [o.id for o in pending_orders(orders)] == ["000002", "000003"]
