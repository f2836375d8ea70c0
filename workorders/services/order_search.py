# -*- coding: utf-8 -*-
"""
Order list filtering (history and pending payments views)
"""
import re
from datetime import datetime
from typing import Iterable, List, Optional, Union

from workorders.models import Order, WorkStatus
from workorders.services.status import normalize_status


def _digits(value: Optional[str]) -> str:
    return re.sub(r"\D", "", value or "")


def parse_order_date(value: Optional[str]) -> Optional[datetime]:
    """dd.mm.YYYY or ISO date, None if unparsable"""
    if value:
        for fmt in ("%d.%m.%Y", "%Y-%m-%d"):
            try:
                return datetime.strptime(value[:10], fmt)
            except ValueError:
                continue
    return None


def _parse_date(value: Optional[str]) -> datetime:
    # unparsable dates sort last
    return parse_order_date(value) or datetime.min


def matches(order: Order, query: str) -> bool:
    q = query.strip().lower()
    if not q:
        return True
    haystack = " ".join(
        str(value or "")
        for value in (
            order.id,
            order.customer,
            order.company,
            order.car,
            order.phone,
            order.gov_number,
            order.vin_number,
            order.reason,
        )
    ).lower()
    if q in haystack:
        return True
    # "+7 (900) 123" should find "89001234567"
    q_digits = _digits(q)
    if len(q_digits) >= 3:
        return q_digits in _digits(order.phone) or q_digits in _digits(order.id)
    return False


def filter_orders(
    orders: Iterable[Order],
    query: str = "",
    status: Union[WorkStatus, str, None] = None,
) -> List[Order]:
    """Orders matching the text query and, if given, the status; newest first"""
    wanted = normalize_status(status) if status else None
    result = [
        order for order in orders
        if (wanted is None or order.status == wanted) and matches(order, query or "")
    ]
    result.sort(key=lambda o: (_parse_date(o.date), o.id or ""), reverse=True)
    return result


def pending_orders(orders: Iterable[Order]) -> List[Order]:
    """Orders waiting for payment"""
    return filter_orders(orders, status=WorkStatus.PENDING_PAYMENT)
