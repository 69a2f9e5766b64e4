from datetime import datetime, timedelta

import pytest

from bakery_ledger.config import set_config_for_test
from bakery_ledger.data.backends.csv_backend import CsvLedgerStore
from bakery_ledger.data.models import NewCustomer, NewProduct, StoreResponse
from bakery_ledger.drafts.storage import MemoryStorage
from bakery_ledger.drafts.store import CartDraftStore


class Clock:
    """Settable clock for backend timestamps."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


class FlakyStore:
    """Delegates to a real store but fails the n-th insert_order call (1-based)."""

    def __init__(self, inner, fail_on_order: int, message: str = "connection reset by peer") -> None:
        self.inner = inner
        self.fail_on_order = fail_on_order
        self.message = message
        self.order_calls = 0

    def insert_order(self, order):
        self.order_calls += 1
        if self.order_calls == self.fail_on_order:
            return StoreResponse.failure(self.message)
        return self.inner.insert_order(order)

    def __getattr__(self, name):
        return getattr(self.inner, name)


@pytest.fixture(autouse=True)
def test_config(tmp_path):
    set_config_for_test(
        data_dir=str(tmp_path / "data"),
        drafts_dir=str(tmp_path / "drafts"),
        log_level="WARNING",
        default_unit_price=10.0,
        currency_symbol="₺",
    )
    yield


@pytest.fixture
def clock():
    return Clock(datetime(2024, 3, 5, 7, 30))


@pytest.fixture
def store(tmp_path, clock):
    data_dir = tmp_path / "data"
    data_dir.mkdir(exist_ok=True)
    return CsvLedgerStore(data_dir=data_dir, now=clock)


@pytest.fixture
def products(store):
    lavash = store.insert_product(NewProduct(name="Lavash", price=10.0, stock=100)).data
    pide = store.insert_product(NewProduct(name="Pide", price=15.0, stock=50)).data
    return {"lavash": lavash, "pide": pide}


@pytest.fixture
def customers(store):
    ali = store.insert_customer(NewCustomer(name="Ali")).data
    banu = store.insert_customer(NewCustomer(name="Banu", discount_type="percentage", discount_value=10)).data
    cem = store.insert_customer(NewCustomer(name="Cem", discount_type="fixed", discount_value=5)).data
    return {"ali": ali, "banu": banu, "cem": cem}


@pytest.fixture
def draft_storage():
    return MemoryStorage()


@pytest.fixture
def drafts(draft_storage):
    return CartDraftStore(draft_storage)


@pytest.fixture
def flaky_store():
    return FlakyStore
