# -*- coding: utf-8 -*-
import pytest

from workorders.models import Payment
from workorders.services.pricing import (
    compute_totals, due_amount, paid_total, parse_input_number,
)

from conftest import item


@pytest.mark.parametrize("raw, expected", [
    ("10", 10.0),
    ("2 300,50", 2300.5),
    (" 7.5 ", 7.5),
    (15, 15.0),
    ("", None),
    ("abc", None),
    ("inf", None),
    (None, None),
    (True, None),
])
def test_parse_input_number(raw, expected):
    assert parse_input_number(raw) == expected


def test_percent_discount_applies_to_services_only():
    totals = compute_totals([item(1, "Замена свечей", 2, 1000)], [item(2, "Свеча", 1, 300)], "10")

    assert totals.services_total == 2000
    assert totals.parts_total == 300
    assert totals.discount_value == 200
    assert totals.total == 2100


def test_amount_wins_over_percent():
    totals = compute_totals([item(1, "Диагностика", 1, 1000)], [], "50", "100")

    assert totals.discount_value == 100
    assert totals.total == 900


def test_discount_capped_by_services_total():
    totals = compute_totals([item(1, "Ремонт фар", 1, 500)], [item(2, "Лампа", 2, 250)], None, "5000")

    assert totals.discount_value == 500
    assert totals.total == 500


def test_invalid_or_negative_discount_ignored():
    services = [item(1, "Ремонт замка", 1, 800)]

    assert compute_totals(services, [], "abc", "").discount_value == 0
    assert compute_totals(services, [], "-10", "-5").total == 800
    # zero amount falls back to percent
    assert compute_totals(services, [], "25", "0").discount_value == 200


def test_parts_only_order_has_no_discount():
    totals = compute_totals([], [item(1, "Фильтр", 3, 100)], "50")

    assert totals.discount_value == 0
    assert totals.total == 300


def test_paid_total_skips_deferred_payments():
    payments = [
        Payment(id=1, method="cash", amount=500),
        Payment(id=2, method="later", amount=900),
        Payment(id=3, method="card", amount=250),
    ]

    assert paid_total(payments) == 750
    assert due_amount(1000, payments) == 250
    assert due_amount(100, payments) == 0
