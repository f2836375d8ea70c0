# -*- coding: utf-8 -*-
"""
Pricing Calculator - order totals from line items and discount inputs
"""
import math
from typing import Iterable, Optional, Union

from workorders.models import LineItem, Payment, PaymentMethod, Totals

NumberInput = Union[str, int, float, None]


def parse_input_number(value: NumberInput) -> Optional[float]:
    """
    Parse a user-entered number.

    Accepts ',' as decimal separator and ignores spaces (e.g. "2 300,50").
    Returns None for empty or invalid input instead of raising.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = "".join(str(value).split()).replace(",", ".")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if not math.isfinite(number):
        return None
    return number


def sum_line_items(items: Iterable[LineItem]) -> float:
    """Sum of qty * price over rows"""
    return sum((item.qty * item.price for item in items), 0.0)


def compute_totals(
    services: Iterable[LineItem],
    parts: Iterable[LineItem],
    discount_percent_input: NumberInput = None,
    discount_amount_input: NumberInput = None,
) -> Totals:
    """
    Compute order totals.

    The discount applies to services only. A positive amount wins over
    percent; they are never added together. The discount is clamped to
    [0, services_total], so total >= parts_total always holds.
    """
    services_total = sum_line_items(services)
    parts_total = sum_line_items(parts)
    base = services_total

    amount = parse_input_number(discount_amount_input)
    percent = parse_input_number(discount_percent_input)
    if amount is not None and amount > 0:
        chosen = amount
    elif percent is not None and percent > 0:
        chosen = base * percent / 100
    else:
        chosen = 0.0

    discount_value = min(max(chosen, 0.0), max(base, 0.0))
    total = max(services_total - discount_value, 0.0) + parts_total

    return Totals(
        services_total=services_total,
        parts_total=parts_total,
        discount_value=discount_value,
        total=total,
    )


def paid_total(payments: Iterable[Payment]) -> float:
    """Sum of recorded payments, deferred ones excluded"""
    return sum(
        (p.amount for p in payments if p.method != PaymentMethod.LATER.value),
        0.0,
    )


def due_amount(total: float, payments: Iterable[Payment]) -> float:
    """Outstanding balance"""
    return max(total - paid_total(payments), 0.0)
