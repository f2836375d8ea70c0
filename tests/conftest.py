# -*- coding: utf-8 -*-
import httpx
import pytest
from fastapi.testclient import TestClient

from workorders.config import Settings
from workorders.main import create_app
from workorders.models import LineItem
from workorders.services.drafts import DraftCache, InMemoryDraftStore
from workorders.services.lifecycle import OrderLifecycleController
from workorders.services.orders_client import OrdersClient
from workorders.services.tickets import TicketPublisher

BASE_URL = "http://testserver"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        API_URL=BASE_URL,
        DATA_DIR=tmp_path / "data",
        UPLOAD_DIR=tmp_path / "uploads",
        DRAFTS_DIR=tmp_path / "drafts",
        AUTOSAVE_DELAY=None,
        LOAD_TIMEOUT=2.0,
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def api(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def client(app, settings):
    """OrdersClient talking to the in-process app"""
    return OrdersClient(base_url=BASE_URL, transport=httpx.ASGITransport(app=app), settings=settings)


@pytest.fixture
def draft_store():
    return InMemoryDraftStore()


@pytest.fixture
def drafts(draft_store):
    return DraftCache(draft_store)


@pytest.fixture
def controller(client, drafts, settings):
    return OrderLifecycleController(client, drafts, TicketPublisher(client), settings=settings)


def item(item_id: int, title: str, qty: float, price: float) -> LineItem:
    return LineItem(id=item_id, title=title, qty=qty, price=price)
