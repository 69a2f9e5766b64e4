from datetime import date, datetime

import pytest

from bakery_ledger.data.models import NewOrder, NewOrderItem, NewPayment, OrderUpdate
from bakery_ledger.exceptions import ValidationError
from bakery_ledger.services.reports import daily_report, dashboard_stats, distribution_list

DAY = date(2024, 3, 5)


def today():
    return DAY


@pytest.fixture
def ledger(store, customers, products, clock):
    """Two orders on DAY (Cem with items, Ali without) and one the day before."""
    clock.current = datetime(2024, 3, 4, 8, 0)
    store.insert_order(NewOrder(customer_id=customers["banu"].id, quantity=9, unit_price=10.0, total_price=90.0))

    clock.current = datetime(2024, 3, 5, 7, 0)
    cem = store.insert_order(NewOrder(customer_id=customers["cem"].id, quantity=5, unit_price=11.0, total_price=55.0)).data
    store.insert_order_items([
        NewOrderItem(order_id=cem.id, product_id=products["lavash"].id, quantity=3, unit_price=10.0, total_price=30.0),
        NewOrderItem(order_id=cem.id, product_id=products["pide"].id, quantity=2, unit_price=15.0, total_price=30.0),
    ])
    ali = store.insert_order(NewOrder(customer_id=customers["ali"].id, quantity=4, unit_price=10.0, total_price=40.0)).data
    store.update_order(ali.id, OrderUpdate(status="delivered"))
    return store


def test_daily_report_rows_sorted_by_customer(ledger):
    report = daily_report(ledger, DAY, today=today).data
    assert [r.customer_name for r in report.rows] == ["Ali", "Cem"]
    assert [r.product_summary for r in report.rows] == ["4 pcs", "3x Lavash, 2x Pide"]
    assert [r.status_label for r in report.rows] == ["paid", "unpaid"]
    assert (report.total_quantity, report.total_amount, report.order_count) == (9, 95.0, 2)


def test_daily_report_for_day_without_orders(ledger):
    report = daily_report(ledger, date(2024, 3, 1), today=today).data
    assert report.rows == []
    assert report.order_count == 0


def test_future_day_is_rejected(ledger):
    with pytest.raises(ValidationError):
        daily_report(ledger, date(2024, 3, 6), today=today)


def test_distribution_list(ledger):
    text = distribution_list(daily_report(ledger, DAY, today=today).data)
    lines = text.splitlines()
    assert lines[0] == "Distribution list 05.03.2024"
    assert lines[2] == "1. Ali: 4 pcs (₺40.00)"
    assert lines[3] == "2. Cem: 3x Lavash, 2x Pide (₺55.00)"
    assert lines[-2:] == ["Total quantity: 9", "Total revenue: ₺95.00"]


def test_dashboard_stats(ledger, customers):
    ledger.insert_payment(NewPayment(customer_id=customers["banu"].id, amount=100.0))
    stats = dashboard_stats(ledger, now=lambda: datetime(2024, 3, 5, 12, 0)).data
    # Quantity comes from item rows only
    assert stats.today_quantity == 5
    assert stats.today_revenue == 95.0
    assert stats.today_customers == 2
    # Banu is in credit (-10) and does not count
    assert stats.total_debt == 95.0
