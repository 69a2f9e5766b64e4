"""End-of-day report, distribution list and dashboard figures."""
from __future__ import annotations

from datetime import date, datetime, time
from typing import Callable, List, Optional

import pandas as pd
from pydantic import BaseModel, Field

from ..data.interface import LedgerStore
from ..data.models import OrderFilters, OrderItemsFilters, OrderStatus, StoreResponse
from ..exceptions import ValidationError
from ..logging import get_logger
from .formatting import format_currency

logger = get_logger(__name__)

STATUS_LABELS = {"delivered": "paid", "pending": "unpaid"}


class ReportRow(BaseModel):
    order_id: str
    customer_id: str
    customer_name: str
    quantity: int
    unit_price: float
    total_price: float
    status: OrderStatus
    status_label: str = Field(description="'paid' for delivered orders, 'unpaid' for pending ones")
    product_summary: str
    order_date: datetime


class DailyReport(BaseModel):
    day: date
    rows: List[ReportRow] = Field(default_factory=list)
    total_quantity: int = 0
    total_amount: float = 0.0
    order_count: int = 0


class DashboardStats(BaseModel):
    today_quantity: int = Field(default=0, description="Sum of today's order item quantities")
    today_revenue: float = Field(default=0.0, description="Sum of today's order totals")
    today_customers: int = Field(default=0, description="Distinct customers who ordered today")
    total_debt: float = Field(default=0.0, description="Sum of positive customer balances")


def _day_bounds(day: date) -> tuple[datetime, datetime]:
    return datetime.combine(day, time.min), datetime.combine(day, time.max)


def _item_summaries(store: LedgerStore, order_ids: List[str]) -> StoreResponse:
    """data: Series of '3x Lavash, 2x Pide' strings indexed by order id."""
    items = store.get_order_items(OrderItemsFilters(order_id=order_ids))
    if not items.ok:
        return items
    products = store.list_products()
    if not products.ok:
        return products
    if not items.data:
        return StoreResponse.success(pd.Series(dtype=object))

    names = {p.id: p.name for p in products.data}
    items_df = pd.DataFrame([i.model_dump() for i in items.data])
    items_df["label"] = (
        items_df["quantity"].astype(str) + "x " + items_df["product_id"].map(names).fillna("?")
    )
    return StoreResponse.success(items_df.groupby("order_id", sort=False)["label"].agg(", ".join))


def daily_report(
    store: LedgerStore,
    day: date,
    today: Optional[Callable[[], date]] = None,
) -> StoreResponse:
    """Every order placed on ``day``, sorted by customer name. data: DailyReport."""
    today = today or date.today
    if day > today():
        raise ValidationError("Reports can't be generated for future dates.")

    start_ts, end_ts = _day_bounds(day)
    orders = store.get_orders(OrderFilters(start_ts=start_ts, end_ts=end_ts))
    if not orders.ok:
        return orders
    if not orders.data:
        return StoreResponse.success(DailyReport(day=day))

    customers = store.list_customers()
    if not customers.ok:
        return customers
    summaries = _item_summaries(store, [o.id for o in orders.data])
    if not summaries.ok:
        return summaries

    names = {c.id: c.name for c in customers.data}
    df = pd.DataFrame([o.model_dump() for o in orders.data])
    df["customer_name"] = df["customer_id"].map(names).fillna("Unknown")
    df["status_label"] = df["status"].map(STATUS_LABELS)
    df["product_summary"] = df["id"].map(summaries.data)
    no_items = df["product_summary"].isna()
    df.loc[no_items, "product_summary"] = df.loc[no_items, "quantity"].astype(str) + " pcs"
    df = df.sort_values("customer_name", kind="stable")

    rows = [
        ReportRow(
            order_id=r["id"],
            customer_id=r["customer_id"],
            customer_name=r["customer_name"],
            quantity=r["quantity"],
            unit_price=r["unit_price"],
            total_price=r["total_price"],
            status=r["status"],
            status_label=r["status_label"],
            product_summary=r["product_summary"],
            order_date=r["order_date"],
        )
        for r in df.to_dict(orient="records")
    ]
    report = DailyReport(
        day=day,
        rows=rows,
        total_quantity=int(df["quantity"].sum()),
        total_amount=float(df["total_price"].sum()),
        order_count=len(rows),
    )
    logger.info(f"Daily report for {day}: {report.order_count} order(s), {report.total_amount:.2f}")
    return StoreResponse.success(report)


def distribution_list(report: DailyReport) -> str:
    """Plain-text list for the delivery round."""
    lines = [f"Distribution list {report.day.strftime('%d.%m.%Y')}", ""]
    for i, row in enumerate(report.rows, start=1):
        lines.append(f"{i}. {row.customer_name}: {row.product_summary} ({format_currency(row.total_price)})")
    if not report.rows:
        lines.append("No orders.")
    lines += [
        "",
        f"Total quantity: {report.total_quantity}",
        f"Total revenue: {format_currency(report.total_amount)}",
    ]
    return "\n".join(lines)


def dashboard_stats(store: LedgerStore, now: Optional[Callable[[], datetime]] = None) -> StoreResponse:
    """data: DashboardStats for the current day."""
    now = now or datetime.now
    start_ts, end_ts = _day_bounds(now().date())

    orders = store.get_orders(OrderFilters(start_ts=start_ts, end_ts=end_ts))
    if not orders.ok:
        return orders
    customers = store.list_customers()
    if not customers.ok:
        return customers

    stats = DashboardStats(
        today_revenue=sum(o.total_price for o in orders.data),
        today_customers=len({o.customer_id for o in orders.data}),
        total_debt=sum(c.current_balance for c in customers.data if c.current_balance > 0),
    )
    if orders.data:
        items = store.get_order_items(OrderItemsFilters(order_id=[o.id for o in orders.data]))
        if not items.ok:
            return items
        stats.today_quantity = sum(i.quantity for i in items.data)
    return StoreResponse.success(stats)
