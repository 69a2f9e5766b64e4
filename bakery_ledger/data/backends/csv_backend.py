from __future__ import annotations

import uuid
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pandas as pd

from ..interface import LedgerStore
from ..models import (
    CustomerFilters, OrderFilters, OrderItemsFilters, PaymentFilters,
    Customer, Product, Order, OrderItem, Payment,
    NewCustomer, CustomerUpdate, NewProduct, ProductUpdate, NewOrder, OrderUpdate,
    NewOrderItem, NewPayment, StoreResponse,
    FOREIGN_KEY_VIOLATION, NOT_FOUND, UNIQUE_VIOLATION,
)
from ...config import get_config
from ...logging import get_logger


TABLE_COLUMNS: Dict[str, List[str]] = {
    "customers": ["id", "name", "phone", "current_balance", "discount_type", "discount_value", "created_at"],
    "products": ["id", "name", "price", "stock", "created_at"],
    "orders": ["id", "customer_id", "quantity", "unit_price", "total_price", "status", "order_date", "order_group_id"],
    "order_items": ["id", "order_id", "product_id", "quantity", "unit_price", "total_price", "created_at"],
    "payments": ["id", "customer_id", "amount", "payment_date", "note", "payment_method", "description"],
}

DATE_COLUMNS: Dict[str, List[str]] = {
    "customers": ["created_at"],
    "products": ["created_at"],
    "orders": ["order_date"],
    "order_items": ["created_at"],
    "payments": ["payment_date"],
}

INT_COLUMNS = {"stock", "quantity"}
FLOAT_COLUMNS = {"current_balance", "discount_value", "price", "unit_price", "total_price", "amount"}


def _match(series: pd.Series, value: str | list[str]) -> pd.Series:
    if isinstance(value, str):
        return series == value
    return series.isin(value)


class CsvLedgerStore(LedgerStore):
    """
    CSV-backed implementation of the ledger backend.
    - Loads one CSV per table from `data_dir` once at construction; missing tables start empty.
    - Every write updates the in-memory frame, then rewrites that table's CSV.
    - Emulates the backend balance trigger: order inserts/updates move
      `customers.current_balance` by the order total (or its delta), payments lower it.
    - Emulates the unique constraint on product names and the foreign keys between tables.
    """

    def __init__(
        self,
        data_dir: str | Path = None,
        persist: bool = True,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        if data_dir is None:
            config = get_config()
            data_dir = config.data_dir

        self.data_dir = Path(data_dir)
        self.persist = persist
        self._now = now
        self.logger = get_logger(__name__)

        # If the path is relative, make it relative to the repository root
        if not self.data_dir.is_absolute():
            current = Path.cwd()
            repo_root = None

            # Look up the directory tree for pyproject.toml
            for parent in [current] + list(current.parents):
                if (parent / "pyproject.toml").exists():
                    repo_root = parent
                    break

            self.data_dir = (repo_root or current) / self.data_dir

        self._tables = self._load_tables(self.data_dir)

    # ---------- loading / writing helpers ----------

    @staticmethod
    def _load_tables(data_dir: Path) -> Dict[str, pd.DataFrame]:
        if not data_dir.exists():
            raise FileNotFoundError(
                f"Data directory not found: {data_dir}\n"
                f"Please either:\n"
                f"  1. Generate sample data: python -m bakery_ledger.backend.seed_data\n"
                f"  2. Set DATA_DIR environment variable to point to your data directory\n"
                f"  3. Create a .env file with DATA_DIR=/path/to/your/data"
            )

        tables: Dict[str, pd.DataFrame] = {}
        for name, columns in TABLE_COLUMNS.items():
            path = data_dir / f"{name}.csv"
            if not path.exists():
                tables[name] = CsvLedgerStore._normalize(name, pd.DataFrame(columns=columns))
                continue
            text_cols = [
                c for c in columns
                if c not in INT_COLUMNS and c not in FLOAT_COLUMNS and c not in DATE_COLUMNS[name]
            ]
            try:
                df = pd.read_csv(path, dtype={c: str for c in text_cols})
            except Exception as e:
                raise RuntimeError(
                    f"Error reading {path}: {e}\n"
                    f"Please check that the CSV file is valid and readable."
                ) from e
            missing = [c for c in columns if c not in df.columns]
            if missing:
                raise RuntimeError(f"{path} is missing columns: {', '.join(missing)}")
            tables[name] = CsvLedgerStore._normalize(name, df[columns])
        return tables

    @staticmethod
    def _normalize(name: str, df: pd.DataFrame) -> pd.DataFrame:
        df = df.copy()
        for col in df.columns:
            if col in DATE_COLUMNS[name]:
                df[col] = pd.to_datetime(df[col])
            elif col in INT_COLUMNS:
                df[col] = pd.to_numeric(df[col]).fillna(0).astype("int64")
            elif col in FLOAT_COLUMNS:
                df[col] = pd.to_numeric(df[col]).fillna(0.0).astype(float)
        return df.reset_index(drop=True)

    def _write(self, name: str) -> None:
        if self.persist:
            self._tables[name].to_csv(self.data_dir / f"{name}.csv", index=False)

    def _append(self, name: str, rows: List[dict]) -> None:
        new = pd.DataFrame(rows, columns=TABLE_COLUMNS[name])
        current = self._tables[name]
        combined = new if current.empty else pd.concat([current, new], ignore_index=True)
        self._tables[name] = self._normalize(name, combined)
        self._write(name)

    @staticmethod
    def _records(df: pd.DataFrame) -> List[dict]:
        return df.astype(object).where(df.notna(), None).to_dict("records")

    def _row(self, name: str, row_id: str) -> Optional[dict]:
        df = self._tables[name]
        found = df[df["id"] == row_id]
        if found.empty:
            return None
        return self._records(found)[0]

    def _update(self, name: str, row_id: str, changes: dict) -> None:
        df = self._tables[name]
        mask = df["id"] == row_id
        for col, value in changes.items():
            df.loc[mask, col] = value
        self._tables[name] = self._normalize(name, df)
        self._write(name)

    def _adjust_balance(self, customer_id: str, delta: float) -> None:
        """The backend trigger: orders debit the balance, payments credit it."""
        if not delta:
            return
        df = self._tables["customers"]
        mask = df["id"] == customer_id
        df.loc[mask, "current_balance"] = df.loc[mask, "current_balance"] + delta
        self._write("customers")
        self.logger.info(f"Balance of customer {customer_id} moved by {delta:+.2f}")

    @staticmethod
    def _new_id() -> str:
        return str(uuid.uuid4())

    @staticmethod
    def _not_found(table: str, row_id: str) -> StoreResponse:
        return StoreResponse.failure(f"No row in {table} with id {row_id}", NOT_FOUND)

    @staticmethod
    def _fk_violation(table: str, constraint: str, on_delete_of: Optional[str] = None) -> StoreResponse:
        if on_delete_of:
            message = (
                f'update or delete on table "{on_delete_of}" violates foreign key constraint '
                f'"{constraint}" on table "{table}"'
            )
        else:
            message = f'insert or update on table "{table}" violates foreign key constraint "{constraint}"'
        return StoreResponse.failure(message, FOREIGN_KEY_VIOLATION)

    # ---------- customers ----------

    def list_customers(self, filters: CustomerFilters | None = None) -> StoreResponse:
        df = self._tables["customers"]

        if filters and filters.customer_id:
            df = df[_match(df["id"], filters.customer_id)]
        if filters and filters.search and filters.search.strip():
            s = filters.search.strip()
            by_name = df["name"].str.lower().str.contains(s.lower(), regex=False, na=False)
            by_phone = df["phone"].str.contains(s, regex=False, na=False)
            df = df[by_name | by_phone]

        df = df.sort_values("name", kind="stable")
        return StoreResponse.success([Customer(**r) for r in self._records(df)])

    def get_customer(self, customer_id: str) -> StoreResponse:
        row = self._row("customers", customer_id)
        if row is None:
            return self._not_found("customers", customer_id)
        return StoreResponse.success(Customer(**row))

    def insert_customer(self, customer: NewCustomer) -> StoreResponse:
        row = {
            "id": self._new_id(),
            "current_balance": 0.0,
            "created_at": self._now(),
            **customer.model_dump(),
        }
        self._append("customers", [row])
        return StoreResponse.success(Customer(**row))

    def update_customer(self, customer_id: str, changes: CustomerUpdate) -> StoreResponse:
        if self._row("customers", customer_id) is None:
            return self._not_found("customers", customer_id)
        self._update("customers", customer_id, changes.model_dump(exclude_unset=True))
        return self.get_customer(customer_id)

    def delete_customer(self, customer_id: str) -> StoreResponse:
        if self._row("customers", customer_id) is None:
            return self._not_found("customers", customer_id)
        if (self._tables["orders"]["customer_id"] == customer_id).any():
            return self._fk_violation("orders", "orders_customer_id_fkey", on_delete_of="customers")
        if (self._tables["payments"]["customer_id"] == customer_id).any():
            return self._fk_violation("payments", "payments_customer_id_fkey", on_delete_of="customers")
        df = self._tables["customers"]
        self._tables["customers"] = df[df["id"] != customer_id].reset_index(drop=True)
        self._write("customers")
        return StoreResponse.success(1)

    # ---------- products ----------

    def list_products(self) -> StoreResponse:
        df = self._tables["products"].sort_values("name", kind="stable")
        return StoreResponse.success([Product(**r) for r in self._records(df)])

    def _name_taken(self, name: str, exclude_id: Optional[str] = None) -> bool:
        df = self._tables["products"]
        clash = df["name"] == name
        if exclude_id is not None:
            clash &= df["id"] != exclude_id
        return bool(clash.any())

    def insert_product(self, product: NewProduct) -> StoreResponse:
        if self._name_taken(product.name):
            return StoreResponse.failure(
                'duplicate key value violates unique constraint "products_name_key"', UNIQUE_VIOLATION
            )
        row = {"id": self._new_id(), "created_at": self._now(), **product.model_dump()}
        self._append("products", [row])
        return StoreResponse.success(Product(**row))

    def update_product(self, product_id: str, changes: ProductUpdate) -> StoreResponse:
        if self._row("products", product_id) is None:
            return self._not_found("products", product_id)
        if changes.name is not None and self._name_taken(changes.name, exclude_id=product_id):
            return StoreResponse.failure(
                'duplicate key value violates unique constraint "products_name_key"', UNIQUE_VIOLATION
            )
        self._update("products", product_id, changes.model_dump(exclude_unset=True))
        return StoreResponse.success(Product(**self._row("products", product_id)))

    def delete_product(self, product_id: str) -> StoreResponse:
        if self._row("products", product_id) is None:
            return self._not_found("products", product_id)
        if (self._tables["order_items"]["product_id"] == product_id).any():
            return self._fk_violation("order_items", "order_items_product_id_fkey", on_delete_of="products")
        df = self._tables["products"]
        self._tables["products"] = df[df["id"] != product_id].reset_index(drop=True)
        self._write("products")
        return StoreResponse.success(1)

    # ---------- orders ----------

    def get_orders(self, filters: OrderFilters | None = None) -> StoreResponse:
        df = self._tables["orders"]
        filters = filters or OrderFilters()

        if filters.start_ts:
            df = df[df["order_date"] >= pd.Timestamp(filters.start_ts)]
        if filters.end_ts:
            df = df[df["order_date"] <= pd.Timestamp(filters.end_ts)]
        if filters.customer_id:
            df = df[_match(df["customer_id"], filters.customer_id)]
        if filters.order_id:
            df = df[_match(df["id"], filters.order_id)]
        if filters.order_group_id:
            df = df[df["order_group_id"] == filters.order_group_id]
        if filters.status:
            df = df[df["status"] == filters.status]

        df = df.sort_values("order_date", ascending=False, kind="stable")
        return StoreResponse.success([Order(**r) for r in self._records(df)])

    def insert_order(self, order: NewOrder) -> StoreResponse:
        if self._row("customers", order.customer_id) is None:
            return self._fk_violation("orders", "orders_customer_id_fkey")
        row = {
            "id": self._new_id(),
            "status": "pending",
            "order_date": self._now(),
            **order.model_dump(),
        }
        self._append("orders", [row])
        self._adjust_balance(order.customer_id, order.total_price)
        return StoreResponse.success(Order(**row))

    def update_order(self, order_id: str, changes: OrderUpdate) -> StoreResponse:
        current = self._row("orders", order_id)
        if current is None:
            return self._not_found("orders", order_id)
        values = changes.model_dump(exclude_unset=True)
        self._update("orders", order_id, values)
        if "total_price" in values:
            self._adjust_balance(current["customer_id"], values["total_price"] - current["total_price"])
        return StoreResponse.success(Order(**self._row("orders", order_id)))

    def get_order_items(self, filters: OrderItemsFilters | None = None) -> StoreResponse:
        df = self._tables["order_items"]

        if filters and filters.order_id:
            df = df[_match(df["order_id"], filters.order_id)]
        if filters and filters.product_id:
            df = df[_match(df["product_id"], filters.product_id)]

        return StoreResponse.success([OrderItem(**r) for r in self._records(df)])

    def insert_order_items(self, items: List[NewOrderItem]) -> StoreResponse:
        order_ids = set(self._tables["orders"]["id"])
        product_ids = set(self._tables["products"]["id"])
        # One statement: either every row goes in or none does
        for item in items:
            if item.order_id not in order_ids:
                return self._fk_violation("order_items", "order_items_order_id_fkey")
            if item.product_id not in product_ids:
                return self._fk_violation("order_items", "order_items_product_id_fkey")

        created_at = self._now()
        rows = [{"id": self._new_id(), "created_at": created_at, **item.model_dump()} for item in items]
        if rows:
            self._append("order_items", rows)
        return StoreResponse.success([OrderItem(**r) for r in rows])

    def delete_order_items(self, order_id: str) -> StoreResponse:
        df = self._tables["order_items"]
        mask = df["order_id"] == order_id
        deleted = int(mask.sum())
        self._tables["order_items"] = df[~mask].reset_index(drop=True)
        self._write("order_items")
        return StoreResponse.success(deleted)

    # ---------- payments ----------

    def get_payments(self, filters: PaymentFilters | None = None) -> StoreResponse:
        df = self._tables["payments"]
        filters = filters or PaymentFilters()

        if filters.start_ts:
            df = df[df["payment_date"] >= pd.Timestamp(filters.start_ts)]
        if filters.end_ts:
            df = df[df["payment_date"] <= pd.Timestamp(filters.end_ts)]
        if filters.customer_id:
            df = df[_match(df["customer_id"], filters.customer_id)]

        df = df.sort_values("payment_date", ascending=False, kind="stable")
        return StoreResponse.success([Payment(**r) for r in self._records(df)])

    def insert_payment(self, payment: NewPayment) -> StoreResponse:
        if self._row("customers", payment.customer_id) is None:
            return self._fk_violation("payments", "payments_customer_id_fkey")
        row = {"id": self._new_id(), "payment_date": self._now(), **payment.model_dump()}
        self._append("payments", [row])
        self._adjust_balance(payment.customer_id, -payment.amount)
        return StoreResponse.success(Payment(**row))
