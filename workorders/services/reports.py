# -*- coding: utf-8 -*-
"""
Reports - revenue over paid orders and the per-company view

Both are read-only aggregations over the stored orders. Order totals go
through the same pricing rules as the order page.
"""
import logging
from collections import OrderedDict
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Union

from workorders.models import (
    CompanyOrder,
    CompanySummary,
    MonthlyRevenue,
    Order,
    PaymentMethod,
    RevenueReport,
    ServiceRevenue,
    StoredTicket,
    WorkStatus,
)
from workorders.services.order_search import parse_order_date
from workorders.services.pricing import compute_totals, paid_total, sum_line_items
from workorders.services.ticket_storage import sanitize_ticket_id

logger = logging.getLogger(__name__)

MONTH_NAMES = (
    "январь", "февраль", "март", "апрель", "май", "июнь",
    "июль", "август", "сентябрь", "октябрь", "ноябрь", "декабрь",
)

DateInput = Union[datetime, str, None]


def order_total(order: Order) -> float:
    """Order total after discount"""
    return compute_totals(
        order.services, order.parts, order.discount_percent, order.discount_amount
    ).total


def _range_bound(value: DateInput) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    if not value.strip():
        return None
    parsed = parse_order_date(value.strip())
    if parsed is None:
        raise ValueError(f"Invalid date: {value}")
    return parsed


def _in_range(order: Order, start: Optional[datetime], end: Optional[datetime]) -> bool:
    # orders without a readable date are never filtered out
    date = parse_order_date(order.date)
    if date is None:
        return True
    if start and date < start:
        return False
    if end and date > end:
        return False
    return True


# ==================== Revenue ====================


def revenue_summary(
    orders: Iterable[Order],
    date_from: DateInput = None,
    date_to: DateInput = None,
) -> RevenueReport:
    """
    Revenue of PAYED orders dated within [date_from, date_to].

    Args:
        orders: Stored orders
        date_from: Range start (dd.mm.YYYY, YYYY-MM-DD or datetime), None for open
        date_to: Range end, inclusive

    Returns:
        RevenueReport with monthly split into services / parts and
        revenue per service title

    Raises:
        ValueError: unparsable range bound
    """
    start = _range_bound(date_from)
    end = _range_bound(date_to)

    paid = [
        order for order in orders
        if order.status == WorkStatus.PAYED and _in_range(order, start, end)
    ]

    months: Dict[str, MonthlyRevenue] = {}
    by_title: Dict[str, float] = OrderedDict()
    total = cash = card = 0.0

    for order in paid:
        revenue = order_total(order)
        total += revenue

        for payment in order.payments:
            if payment.method == PaymentMethod.LATER.value:
                continue
            if payment.method == PaymentMethod.CARD.value:
                card += payment.amount
            else:
                cash += payment.amount

        for service in order.services:
            amount = service.qty * service.price
            if amount:
                title = service.title.strip()
                by_title[title] = by_title.get(title, 0.0) + amount

        date = parse_order_date(order.date)
        if date is None:
            continue
        key = date.strftime("%Y-%m")
        if key not in months:
            months[key] = MonthlyRevenue(month=key, label=f"{MONTH_NAMES[date.month - 1]} {date.year}")
        bucket = months[key]
        bucket.revenue += revenue
        bucket.services += sum_line_items(order.services)
        bucket.parts += sum_line_items(order.parts)

    services = [
        ServiceRevenue(title=title, revenue=value)
        for title, value in by_title.items()
        if value > 0
    ]
    services.sort(key=lambda s: s.revenue, reverse=True)

    logger.info(f"Revenue report: {len(paid)} paid orders, total {total}")
    return RevenueReport(
        date_from=start.strftime("%d.%m.%Y") if start else None,
        date_to=end.strftime("%d.%m.%Y") if end else None,
        count=len(paid),
        total=total,
        cash=cash,
        card=card,
        months=[months[key] for key in sorted(months)],
        services=services,
    )


# ==================== Companies ====================


def _company_matches(order: Order, query: str) -> bool:
    haystack = " ".join(
        str(value or "")
        for value in (order.company, order.customer, order.car, order.gov_number, order.phone)
    ).lower()
    return query in haystack


def _order_row(order: Order, tickets: List[StoredTicket]) -> CompanyOrder:
    paid = paid_total(order.payments)
    safe_id = sanitize_ticket_id(order.id)
    related = [t for t in tickets if safe_id and t.ticket_id == safe_id]
    ticket_url = related[0].url if related else order.pdf_url
    return CompanyOrder(
        id=order.id,
        date=order.date,
        customer=order.customer,
        car=order.car,
        status=order.status,
        amount=paid if paid > 0 else order_total(order),
        ticket_url=ticket_url or None,
        tickets=related,
    )


def orders_by_company(
    orders: Iterable[Order],
    tickets: Iterable[StoredTicket] = (),
    query: Optional[str] = None,
) -> List[CompanySummary]:
    """
    Group orders by company name (case-insensitive, blank names skipped).

    Args:
        orders: Stored orders
        tickets: Stored ticket PDFs, attached to their orders
        query: Keep only orders whose company, customer, car, plate or
            phone contains it; companies left without orders are dropped.
            Company counters still cover all of its orders.

    Returns:
        Companies, largest total first
    """
    tickets = list(tickets)
    q = (query or "").strip().lower()
    groups: Dict[str, CompanySummary] = OrderedDict()

    for order in orders:
        name = (order.company or "").strip()
        if not name:
            continue
        key = name.lower()
        if key not in groups:
            groups[key] = CompanySummary(name=name)
        company = groups[key]

        row = _order_row(order, tickets)
        company.order_count += 1
        company.total += row.amount
        if order.status == WorkStatus.PAYED:
            company.payed += 1
        elif order.status in (WorkStatus.IN_PROGRESS, WorkStatus.PENDING_PAYMENT):
            company.in_progress += 1
        if not q or _company_matches(order, q):
            company.orders.append(row)

    companies = [company for company in groups.values() if company.orders]
    companies.sort(key=lambda c: (c.total, c.order_count), reverse=True)
    return companies
