from bakery_ledger.drafts.models import CartLine
from bakery_ledger.drafts.session import CartSession


def test_open_without_draft_lists_every_product_at_zero(customers, products, drafts):
    session = CartSession.open(customers["ali"], products.values(), drafts)
    assert {line.product_id: line.quantity for line in session.lines} == {
        products["lavash"].id: 0,
        products["pide"].id: 0,
    }
    assert not session.has_items


def test_open_resumes_existing_draft(customers, products, drafts):
    lavash = products["lavash"]
    drafts.set_cart(customers["ali"].id, [CartLine(product_id=lavash.id, product_name="Lavash", quantity=4, unit_price=9.0)], 0.0)
    session = CartSession.open(customers["ali"], products.values(), drafts)
    assert session.quantity_of(lavash.id) == 4
    # Snapshot price wins over the current product price
    assert session.lines[0].unit_price == 9.0


def test_increment_never_goes_below_zero(customers, products, drafts):
    session = CartSession.open(customers["ali"], products.values(), drafts)
    lavash = products["lavash"].id
    session.increment(lavash, 2)
    session.increment(lavash, -5)
    assert session.quantity_of(lavash) == 0
    session.set_quantity(lavash, -3)
    assert session.quantity_of(lavash) == 0


def test_totals_apply_customer_discount(customers, products, drafts):
    session = CartSession.open(customers["banu"], products.values(), drafts)
    session.set_quantity(products["lavash"].id, 3)
    session.set_quantity(products["pide"].id, 2)
    assert session.subtotal == 60.0
    assert session.discount == 6.0
    assert session.total == 54.0


def test_save_stores_only_active_lines_with_discount(customers, products, drafts):
    session = CartSession.open(customers["cem"], products.values(), drafts)
    session.set_quantity(products["pide"].id, 1)
    saved = session.save()
    assert [line.product_id for line in saved.items] == [products["pide"].id]
    assert saved.discount_amount == 5.0
    assert drafts.get(customers["cem"].id) == saved


def test_save_of_empty_cart_removes_draft(customers, products, drafts):
    session = CartSession.open(customers["ali"], products.values(), drafts)
    session.set_quantity(products["lavash"].id, 2)
    session.save()
    session.set_quantity(products["lavash"].id, 0)
    assert session.save() is None
    assert customers["ali"].id not in drafts
