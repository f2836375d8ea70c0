# -*- coding: utf-8 -*-
"""
Status Resolver - canonical work status of an order

Automatic derivation runs after every field edit, so it must be pure
and idempotent. Explicit transitions (status menu) bypass it.
"""
from typing import Any, Mapping, Union

from pydantic import BaseModel

from workorders.models import Order, OrderDraft, WorkStatus

# Statuses that automatic derivation never downgrades
STICKY_STATUSES = (WorkStatus.PAYED, WorkStatus.PENDING_PAYMENT)

TEXT_CONTENT_FIELDS = (
    "company",
    "customer",
    "phone",
    "car",
    "gov_number",
    "vin_number",
    "reason",
)
LIST_CONTENT_FIELDS = ("services", "parts", "payments")

OrderLike = Union[Order, OrderDraft, Mapping[str, Any]]


def _get(source: OrderLike, field: str) -> Any:
    if isinstance(source, BaseModel):
        return getattr(source, field, None)
    if field in source:
        return source[field]
    # raw JSON drafts use camelCase keys
    head, *rest = field.split("_")
    return source.get(head + "".join(part.capitalize() for part in rest))


def normalize_status(value: Any) -> WorkStatus:
    """Map stored / user value to WorkStatus, unknown -> NEW"""
    if isinstance(value, WorkStatus):
        return value
    try:
        return WorkStatus(str(value))
    except ValueError:
        return WorkStatus.NEW


def has_content(source: OrderLike) -> bool:
    """True if the user has entered anything worth keeping"""
    if source is None:
        return False
    for field in TEXT_CONTENT_FIELDS:
        value = _get(source, field)
        if value is not None and str(value).strip():
            return True
    for field in LIST_CONTENT_FIELDS:
        if _get(source, field):
            return True
    mileage = _get(source, "mileage")
    try:
        return mileage is not None and float(mileage) > 0
    except (TypeError, ValueError):
        return False


def derive_status(order: OrderLike, has_explicit_status: bool = False) -> WorkStatus:
    """
    Resolve the work status of an order.

    Priority:
        1. explicitly set PAYED / PENDING_PAYMENT is preserved
        2. any payment -> PAYED
        3. any content -> IN_PROGRESS
        4. NEW

    Args:
        order: Order, draft or raw dict
        has_explicit_status: status was set by the user through the
            status menu and is returned as is

    Returns:
        WorkStatus
    """
    current = normalize_status(_get(order, "status"))
    if has_explicit_status:
        return current
    if current in STICKY_STATUSES:
        return current
    if _get(order, "payments"):
        return WorkStatus.PAYED
    if has_content(order):
        return WorkStatus.IN_PROGRESS
    return WorkStatus.NEW


def is_manual_status(order: Order) -> bool:
    """Stored non-NEW status that automatic derivation would not produce"""
    return order.status != WorkStatus.NEW and derive_status(order) != order.status


def settle_stored_status(order: Order) -> WorkStatus:
    """
    Server-side status on create / update.

    A stored non-NEW status is kept, including a manual PAYED ->
    IN_PROGRESS correction. A NEW order goes through automatic derivation.
    """
    if order.status != WorkStatus.NEW:
        return order.status
    return derive_status(order)
