import pytest

from bakery_ledger.data.models import NewOrder, NewOrderItem
from bakery_ledger.exceptions import ValidationError
from bakery_ledger.services import products as service


def test_add_product_parses_price(store):
    response = service.add_product(store, " Simit ", "7,5", "20")
    assert response.ok
    assert (response.data.name, response.data.price, response.data.stock) == ("Simit", 7.5, 20)


@pytest.mark.parametrize("name,price,stock", [("", "5", 0), ("Simit", "-1", 0), ("Simit", "x", 0), ("Simit", "5", "-2")])
def test_add_product_validation(store, name, price, stock):
    with pytest.raises(ValidationError):
        service.add_product(store, name, price, stock)


def test_duplicate_name_is_reported(store, products):
    response = service.add_product(store, "Lavash", 12)
    assert response.error.code == "23505"
    assert response.error.message == "A product with this name already exists."


def test_update_product(store, products):
    response = service.update_product(store, products["pide"].id, "Pide", "16", 40)
    assert response.data.price == 16.0
    assert response.data.stock == 40
    assert service.update_product(store, products["pide"].id, "Lavash", 16, 40).error.code == "23505"


def test_delete_product_in_use(store, customers, products):
    order = store.insert_order(NewOrder(customer_id=customers["ali"].id, quantity=1, unit_price=10.0, total_price=10.0)).data
    store.insert_order_items([
        NewOrderItem(order_id=order.id, product_id=products["lavash"].id, quantity=1, unit_price=10.0, total_price=10.0),
    ])
    response = service.delete_product(store, products["lavash"].id)
    assert response.error.code == "23503"
    assert "cannot be deleted" in response.error.message
    assert service.delete_product(store, products["pide"].id).ok
