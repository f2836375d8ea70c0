# -*- coding: utf-8 -*-
"""
Orders API Router
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from workorders.api.deps import get_order_store, get_ticket_storage
from workorders.models import CompanySummary, Order, OrderDraft, RevenueReport, WorkStatus
from workorders.services.order_search import filter_orders, pending_orders
from workorders.services.order_store import OrderStore
from workorders.services.reports import orders_by_company, revenue_summary
from workorders.services.ticket_storage import TicketStorage

router = APIRouter(prefix="/orders", tags=["orders"])

NOT_FOUND = "Заказ не найден"


@router.get("", response_model=List[Order])
async def list_orders(
    q: Optional[str] = Query(None, description="Search by number, customer, car, phone, plate, VIN"),
    status: Optional[WorkStatus] = Query(None, description="Filter by status"),
    store: OrderStore = Depends(get_order_store),
):
    """
    Get list of orders.

    - **q**: Optional text / digits search
    - **status**: Optional status filter
    """
    orders = store.list_orders()
    if q or status:
        return filter_orders(orders, q or "", status)
    return orders


@router.get("/pending", response_model=List[Order])
async def list_pending_orders(store: OrderStore = Depends(get_order_store)):
    """Orders waiting for payment, newest first"""
    return pending_orders(store.list_orders())


@router.get("/reports/revenue", response_model=RevenueReport)
async def revenue_report(
    date_from: Optional[str] = Query(None, description="Range start, dd.mm.YYYY or YYYY-MM-DD"),
    date_to: Optional[str] = Query(None, description="Range end, inclusive"),
    store: OrderStore = Depends(get_order_store),
):
    """
    Revenue of paid orders.

    - **date_from** / **date_to**: Optional inclusive range; open when omitted
    """
    try:
        return revenue_summary(store.list_orders(), date_from, date_to)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/reports/companies", response_model=List[CompanySummary])
async def companies_report(
    q: Optional[str] = Query(None, description="Search by company, customer, car, plate, phone"),
    store: OrderStore = Depends(get_order_store),
    tickets: TicketStorage = Depends(get_ticket_storage),
):
    """Orders grouped by company with their ticket PDFs"""
    return orders_by_company(store.list_orders(), tickets.list_tickets(), q)


@router.get("/{order_id}", response_model=Order)
async def get_order(order_id: str, store: OrderStore = Depends(get_order_store)):
    """Get order by id"""
    order = store.get_order(order_id)
    if not order:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return order


@router.post("", response_model=Order, status_code=201)
async def create_order(payload: OrderDraft, store: OrderStore = Depends(get_order_store)):
    """Create order; the server issues the next zero-padded id"""
    return store.create_order(payload)


@router.put("/{order_id}", response_model=Order)
async def update_order(
    order_id: str,
    payload: OrderDraft,
    store: OrderStore = Depends(get_order_store),
):
    """Update order; fields absent from the payload keep their values"""
    order = store.update_order(order_id, payload)
    if not order:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return order


@router.delete("/{order_id}", status_code=204)
async def delete_order(order_id: str, store: OrderStore = Depends(get_order_store)):
    """Delete order (ticket PDFs are removed via DELETE /api/tickets/{id})"""
    if not store.delete_order(order_id):
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return Response(status_code=204)
