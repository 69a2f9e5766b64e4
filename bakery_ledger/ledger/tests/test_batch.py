import pytest

from bakery_ledger.data.models import Customer
from bakery_ledger.drafts.models import CartDraft, CartLine, QuantityDraft
from bakery_ledger.ledger.batch import build_order_batch, build_quantity_batch


def cart(*pairs, discount=0.0):
    items = [
        CartLine(product_id=f"p{i}", product_name=f"P{i}", quantity=q, unit_price=p)
        for i, (q, p) in enumerate(pairs)
    ]
    return CartDraft(items=items, discount_amount=discount)


CUSTOMERS = [
    Customer(id="c", name="Cem"),
    Customer(id="a", name="Ali"),
    Customer(id="b", name="Banu"),
]


def test_submissions_ordered_by_customer_name():
    batch = build_order_batch(CUSTOMERS, {"c": cart((1, 10.0)), "a": cart((1, 10.0)), "b": cart((1, 10.0))})
    assert [s.customer_name for s in batch.submissions] == ["Ali", "Banu", "Cem"]


def test_zero_subtotal_and_missing_drafts_are_skipped():
    batch = build_order_batch(CUSTOMERS, {"a": cart((2, 0.0)), "b": cart((1, 10.0))})
    assert [s.customer_id for s in batch.submissions] == ["b"]


def test_shared_batch_id():
    batch = build_order_batch(CUSTOMERS, {"a": cart((1, 10.0)), "b": cart((1, 10.0))})
    assert {s.order.order_group_id for s in batch.submissions} == {batch.batch_id}


def test_explicit_batch_id_is_used():
    batch = build_order_batch(CUSTOMERS, {"a": cart((1, 10.0))}, batch_id="fixed-id")
    assert batch.submissions[0].order.order_group_id == "fixed-id"


def test_parent_order_and_items_for_discounted_cart():
    batch = build_order_batch(CUSTOMERS, {"a": cart((3, 10.0), (2, 15.0), discount=6.0)})
    submission = batch.submissions[0]
    assert submission.order.quantity == 5
    assert submission.order.total_price == 54.0
    assert submission.order.unit_price == pytest.approx(10.8)
    assert submission.subtotal == 60.0
    assert submission.discount == 6.0
    assert [(i.quantity, i.unit_price, i.total_price) for i in submission.items] == [(3, 10.0, 30.0), (2, 15.0, 30.0)]
    assert sum(i.total_price for i in submission.items) == submission.subtotal


def test_zero_quantity_lines_produce_no_items():
    batch = build_order_batch(CUSTOMERS, {"a": cart((3, 10.0), (0, 15.0))})
    assert len(batch.submissions[0].items) == 1


def test_batch_totals():
    batch = build_order_batch(CUSTOMERS, {"a": cart((3, 10.0), discount=5.0), "b": cart((2, 15.0))})
    assert batch.customer_count == 2
    assert batch.total_items == 5
    assert batch.total_amount == 55.0


def test_quantity_batch_has_no_items():
    batch = build_quantity_batch(CUSTOMERS, {"a": QuantityDraft(quantity=4, unit_price=2.5), "b": QuantityDraft(quantity=0, unit_price=5.0)})
    assert len(batch.submissions) == 1
    submission = batch.submissions[0]
    assert submission.items == []
    assert (submission.order.quantity, submission.order.unit_price, submission.order.total_price) == (4, 2.5, 10.0)
