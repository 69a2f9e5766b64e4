from datetime import datetime

import pytest

from bakery_ledger.data.backends.csv_backend import CsvLedgerStore
from bakery_ledger.data.models import (
    CustomerFilters, CustomerUpdate, NewCustomer, NewOrder, NewOrderItem, NewPayment, NewProduct,
    OrderFilters, OrderItemsFilters, OrderUpdate, PaymentFilters, ProductUpdate,
    FOREIGN_KEY_VIOLATION, NOT_FOUND, UNIQUE_VIOLATION,
)
from bakery_ledger.data.util import get_ledger_store


def order_for(customer_id, total, quantity=1, group=None):
    return NewOrder(customer_id=customer_id, quantity=quantity, unit_price=total / quantity,
                    total_price=total, order_group_id=group)


def balance(store, customer_id):
    return store.get_customer(customer_id).data.current_balance


def test_missing_data_dir_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        CsvLedgerStore(data_dir=tmp_path / "nope")


def test_empty_dir_starts_with_empty_tables(store):
    assert store.list_customers().data == []
    assert store.get_orders().data == []
    assert store.get_payments().data == []


def test_order_insert_debits_balance(store, customers):
    ali = customers["ali"].id
    store.insert_order(order_for(ali, 60.0))
    store.insert_order(order_for(ali, 15.0))
    assert balance(store, ali) == 75.0


def test_order_update_moves_balance_by_delta(store, customers):
    ali = customers["ali"].id
    order = store.insert_order(order_for(ali, 60.0)).data
    updated = store.update_order(order.id, OrderUpdate(total_price=45.0, quantity=4, unit_price=11.25))
    assert updated.data.total_price == 45.0
    assert balance(store, ali) == 45.0


def test_status_update_leaves_balance(store, customers):
    ali = customers["ali"].id
    order = store.insert_order(order_for(ali, 60.0)).data
    store.update_order(order.id, OrderUpdate(status="delivered"))
    assert balance(store, ali) == 60.0
    assert store.get_orders(OrderFilters(status="delivered")).data[0].id == order.id


def test_payment_credits_balance(store, customers):
    ali = customers["ali"].id
    store.insert_order(order_for(ali, 60.0))
    store.insert_payment(NewPayment(customer_id=ali, amount=100.0))
    assert balance(store, ali) == -40.0


def test_balance_equals_orders_minus_payments(store, customers):
    ali = customers["ali"].id
    for total in (10.0, 22.5, 7.5):
        store.insert_order(order_for(ali, total))
    store.insert_payment(NewPayment(customer_id=ali, amount=15.0))
    orders = sum(o.total_price for o in store.get_orders(OrderFilters(customer_id=ali)).data)
    payments = sum(p.amount for p in store.get_payments(PaymentFilters(customer_id=ali)).data)
    assert balance(store, ali) == orders - payments


def test_order_for_unknown_customer_is_fk_violation(store):
    response = store.insert_order(order_for("ghost", 10.0))
    assert response.error.code == FOREIGN_KEY_VIOLATION
    assert store.get_orders().data == []


def test_order_items_insert_is_all_or_nothing(store, customers, products):
    order = store.insert_order(order_for(customers["ali"].id, 25.0, quantity=2)).data
    response = store.insert_order_items([
        NewOrderItem(order_id=order.id, product_id=products["lavash"].id, quantity=1, unit_price=10.0, total_price=10.0),
        NewOrderItem(order_id=order.id, product_id="ghost", quantity=1, unit_price=15.0, total_price=15.0),
    ])
    assert response.error.code == FOREIGN_KEY_VIOLATION
    assert store.get_order_items().data == []


def test_delete_order_items(store, customers, products):
    order = store.insert_order(order_for(customers["ali"].id, 25.0, quantity=2)).data
    store.insert_order_items([
        NewOrderItem(order_id=order.id, product_id=products["lavash"].id, quantity=1, unit_price=10.0, total_price=10.0),
        NewOrderItem(order_id=order.id, product_id=products["pide"].id, quantity=1, unit_price=15.0, total_price=15.0),
    ])
    assert store.delete_order_items(order.id).data == 2
    assert store.get_order_items(OrderItemsFilters(order_id=order.id)).data == []


def test_duplicate_product_name_is_unique_violation(store, products):
    response = store.insert_product(NewProduct(name="Lavash", price=11.0))
    assert response.error.code == UNIQUE_VIOLATION
    renamed = store.update_product(products["pide"].id, ProductUpdate(name="Lavash"))
    assert renamed.error.code == UNIQUE_VIOLATION


def test_product_used_by_items_cannot_be_deleted(store, customers, products):
    order = store.insert_order(order_for(customers["ali"].id, 10.0)).data
    store.insert_order_items([
        NewOrderItem(order_id=order.id, product_id=products["lavash"].id, quantity=1, unit_price=10.0, total_price=10.0),
    ])
    assert store.delete_product(products["lavash"].id).error.code == FOREIGN_KEY_VIOLATION
    assert store.delete_product(products["pide"].id).ok


def test_customer_with_history_cannot_be_deleted(store, customers):
    store.insert_payment(NewPayment(customer_id=customers["ali"].id, amount=5.0))
    assert store.delete_customer(customers["ali"].id).error.code == FOREIGN_KEY_VIOLATION
    assert store.delete_customer(customers["cem"].id).ok
    assert store.get_customer(customers["cem"].id).error.code == NOT_FOUND


def test_update_customer_keeps_balance(store, customers):
    ali = customers["ali"].id
    store.insert_order(order_for(ali, 30.0))
    updated = store.update_customer(ali, CustomerUpdate(phone="0555", discount_type="fixed", discount_value=2.0))
    assert updated.data.phone == "0555"
    assert updated.data.current_balance == 30.0


def test_customer_search(store, customers):
    store.update_customer(customers["cem"].id, CustomerUpdate(phone="05321234567"))
    assert [c.name for c in store.list_customers(CustomerFilters(search="ban")).data] == ["Banu"]
    assert [c.name for c in store.list_customers(CustomerFilters(search="1234")).data] == ["Cem"]


def test_orders_filtered_by_day_and_newest_first(store, customers, clock):
    ali = customers["ali"].id
    first = store.insert_order(order_for(ali, 10.0)).data
    clock.advance(hours=2)
    second = store.insert_order(order_for(ali, 20.0)).data
    clock.advance(days=1)
    store.insert_order(order_for(ali, 30.0))

    day = store.get_orders(OrderFilters(start_ts=datetime(2024, 3, 5), end_ts=datetime(2024, 3, 5, 23, 59, 59))).data
    assert [o.id for o in day] == [second.id, first.id]


def test_tables_survive_reload(store, customers, products, tmp_path):
    ali = customers["ali"].id
    order = store.insert_order(order_for(ali, 25.0, quantity=2, group="batch-1")).data
    store.insert_order_items([
        NewOrderItem(order_id=order.id, product_id=products["lavash"].id, quantity=1, unit_price=10.0, total_price=10.0),
    ])
    store.insert_payment(NewPayment(customer_id=ali, amount=5.0, note="partial"))

    reloaded = CsvLedgerStore(data_dir=tmp_path / "data")
    assert balance(reloaded, ali) == 20.0
    assert reloaded.get_orders(OrderFilters(order_group_id="batch-1")).data[0].order_date == order.order_date
    assert reloaded.get_order_items(OrderItemsFilters(order_id=order.id)).data[0].quantity == 1
    assert reloaded.get_payments().data[0].note == "partial"
    assert reloaded.get_customer(customers["banu"].id).data.discount_type == "percentage"


def test_persist_false_writes_nothing(tmp_path):
    data_dir = tmp_path / "memory"
    data_dir.mkdir()
    store = CsvLedgerStore(data_dir=data_dir, persist=False)
    store.insert_customer(NewCustomer(name="Ali"))
    assert list(data_dir.iterdir()) == []


def test_get_ledger_store_uses_config(tmp_path):
    (tmp_path / "data").mkdir(exist_ok=True)
    assert isinstance(get_ledger_store(), CsvLedgerStore)
    with pytest.raises(ValueError):
        get_ledger_store("postgres")
