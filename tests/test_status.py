# -*- coding: utf-8 -*-
import pytest

from workorders.models import Order, Payment, WorkStatus
from workorders.services.status import (
    derive_status, has_content, is_manual_status, normalize_status, settle_stored_status,
)

from conftest import item


def test_empty_order_is_new():
    assert derive_status(Order(date="01.02.2024")) == WorkStatus.NEW


def test_content_promotes_to_in_progress():
    assert derive_status(Order(customer="Иванов")) == WorkStatus.IN_PROGRESS
    assert derive_status(Order(services=[item(1, "", 1, 0)])) == WorkStatus.IN_PROGRESS
    assert derive_status(Order(mileage=120000)) == WorkStatus.IN_PROGRESS


def test_whitespace_and_zero_mileage_are_not_content():
    assert derive_status(Order(customer="   ", mileage=0)) == WorkStatus.NEW


def test_payments_mean_payed():
    order = Order(customer="Иванов", payments=[Payment(id=1, amount=100)])
    assert derive_status(order) == WorkStatus.PAYED


@pytest.mark.parametrize("status", [WorkStatus.PAYED, WorkStatus.PENDING_PAYMENT])
def test_sticky_statuses_survive_derivation(status):
    # even with everything removed
    assert derive_status(Order(status=status)) == status


def test_derivation_is_idempotent():
    order = Order(car="Lada Vesta")
    order.status = derive_status(order)
    assert derive_status(order) == order.status


def test_explicit_status_is_returned_unchanged():
    order = Order(status=WorkStatus.NEW, customer="Иванов", payments=[Payment(id=1, amount=1)])
    assert derive_status(order, has_explicit_status=True) == WorkStatus.NEW


def test_raw_camel_case_dicts():
    assert has_content({"govNumber": "А123ВС77"})
    assert derive_status({"status": "PAYED"}) == WorkStatus.PAYED
    assert derive_status({"vinNumber": ""}) == WorkStatus.NEW


def test_normalize_status_unknown_is_new():
    assert normalize_status("DONE") == WorkStatus.NEW
    assert normalize_status(None) == WorkStatus.NEW
    assert normalize_status("PENDING_PAYMENT") == WorkStatus.PENDING_PAYMENT


def test_settle_keeps_manual_downgrade():
    order = Order(status=WorkStatus.IN_PROGRESS, payments=[Payment(id=1, amount=100)])
    assert settle_stored_status(order) == WorkStatus.IN_PROGRESS


def test_settle_derives_new_orders():
    assert settle_stored_status(Order(reason="Стук в подвеске")) == WorkStatus.IN_PROGRESS
    assert settle_stored_status(Order()) == WorkStatus.NEW


@pytest.mark.parametrize("status", [WorkStatus.NEW, WorkStatus.IN_PROGRESS])
def test_payments_alone_mean_payed(status):
    order = Order(status=status, payments=[Payment(id=1, method="cash", amount=100)])
    assert not has_content(Order(status=status))
    assert derive_status(order) == WorkStatus.PAYED


def test_payed_kept_after_everything_but_payments_is_cleared():
    order = Order(
        customer="Иванов",
        car="Lada Vesta",
        services=[item(1, "Замена масла", 1, 1200)],
        payments=[Payment(id=1, amount=1200)],
    )
    order.status = derive_status(order)
    cleared = Order(status=order.status, payments=order.payments)

    assert derive_status(cleared) == WorkStatus.PAYED
    assert settle_stored_status(Order(payments=order.payments)) == WorkStatus.PAYED


def test_manual_status_detection():
    payment = Payment(id=1, amount=100)
    assert is_manual_status(Order(status=WorkStatus.IN_PROGRESS, payments=[payment]))
    assert not is_manual_status(Order(status=WorkStatus.PAYED, payments=[payment]))
    assert not is_manual_status(Order(status=WorkStatus.IN_PROGRESS, customer="Иванов"))
    assert not is_manual_status(Order(status=WorkStatus.NEW, payments=[payment]))
