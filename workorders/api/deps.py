# -*- coding: utf-8 -*-
"""
Request dependencies - stores live on app.state, see main.create_app
"""
from fastapi import Request

from workorders.config import Settings
from workorders.services.order_store import OrderStore
from workorders.services.service_catalog import ServiceCatalog
from workorders.services.ticket_storage import TicketStorage


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_order_store(request: Request) -> OrderStore:
    return request.app.state.orders


def get_service_catalog(request: Request) -> ServiceCatalog:
    return request.app.state.services


def get_ticket_storage(request: Request) -> TicketStorage:
    return request.app.state.tickets
