#!/usr/bin/env python3
"""
seed_data.py

Generates a small bakery ledger to CSVs under a local folder (default: sample_data):
customers with discount policies, products, daily order batches with their item
rows, and payments. Every customer's current_balance equals their order totals
minus their payments, as the backend trigger would have left it.

Tables:
- customers, products, orders, order_items, payments

Run:
  python -m bakery_ledger.backend.seed_data --customers 25 --days 14
"""

from __future__ import annotations
import argparse
import csv
import os
import random
import sys
import uuid
from datetime import datetime, timedelta, date, time
from typing import Dict, List, Optional, Tuple

from ..config import get_config
from ..data.backends.csv_backend import TABLE_COLUMNS
from ..ledger.pricing import blended_unit_price

# -----------------------------
# Reference data
# -----------------------------

PRODUCTS: List[Tuple[str, float]] = [
    ("Lavash", 10.0),
    ("Pide", 15.0),
    ("Simit", 7.5),
    ("Bazlama", 12.0),
    ("Yufka", 20.0),
]

FIRST_NAMES = ["Ahmet", "Ayse", "Mehmet", "Fatma", "Mustafa", "Emine", "Ali", "Hatice", "Huseyin", "Zeynep",
               "Hasan", "Elif", "Ibrahim", "Meryem", "Osman", "Sultan", "Yusuf", "Hacer", "Murat", "Esra"]
BUSINESS_KINDS = ["Market", "Bufe", "Lokanta", "Kafe", "Bakkal", "Kebapci"]

PAYMENT_METHODS = ["cash", "cash", "cash", "transfer", "card"]


# -----------------------------
# Utility functions
# -----------------------------

def ensure_dir(path: str) -> None:
    if not os.path.exists(path):
        os.makedirs(path, exist_ok=True)

def new_id() -> str:
    return str(uuid.uuid4())

def money(x: float) -> float:
    return round(x, 2)

def random_phone() -> str:
    return "05" + "".join(random.choices("0123456789", k=9))

def delivery_time(day: date) -> datetime:
    """Morning round: batches go out between 06:00 and 09:59."""
    return datetime.combine(day, time(random.randint(6, 9), random.randint(0, 59), random.randint(0, 59)))


# -----------------------------
# Core generators
# -----------------------------

def gen_products(created: datetime) -> List[Dict]:
    return [
        {"id": new_id(), "name": name, "price": price, "stock": random.randint(0, 200), "created_at": created}
        for name, price in PRODUCTS
    ]

def gen_customers(n: int, created: datetime) -> List[Dict]:
    customers = []
    used = set()
    while len(customers) < n:
        name = f"{random.choice(FIRST_NAMES)} {random.choice(BUSINESS_KINDS)}"
        if name in used:
            name = f"{name} {len(customers) + 1}"
        used.add(name)

        r = random.random()
        if r < 0.7:
            discount_type, discount_value = "none", 0.0
        elif r < 0.85:
            discount_type, discount_value = "percentage", float(random.choice([5, 10, 15]))
        else:
            discount_type, discount_value = "fixed", float(random.choice([5, 10, 20]))

        customers.append({
            "id": new_id(),
            "name": name,
            "phone": random_phone() if random.random() < 0.8 else None,
            "current_balance": 0.0,
            "discount_type": discount_type,
            "discount_value": discount_value,
            "created_at": created,
        })
    return customers

def discount_for(customer: Dict, subtotal: float) -> float:
    value = customer["discount_value"]
    if customer["discount_type"] == "none" or value <= 0:
        return 0.0
    if customer["discount_type"] == "percentage":
        return min(subtotal * value / 100, subtotal)
    return min(value, subtotal)

def gen_orders_and_items(
    customers: List[Dict],
    products: List[Dict],
    start_d: date,
    days: int,
    today: date,
) -> Tuple[List[Dict], List[Dict]]:
    """One batch per day; each customer orders on roughly two days out of three."""
    orders: List[Dict] = []
    items: List[Dict] = []

    for offset in range(days):
        day = start_d + timedelta(days=offset)
        batch_id = new_id()
        order_ts = delivery_time(day)

        for customer in sorted(customers, key=lambda c: c["name"]):
            if random.random() > 0.65:
                continue
            chosen = random.sample(products, k=random.randint(1, min(3, len(products))))
            order_id = new_id()
            lines = []
            for product in chosen:
                qty = random.randint(5, 60)
                lines.append({
                    "id": new_id(),
                    "order_id": order_id,
                    "product_id": product["id"],
                    "quantity": qty,
                    "unit_price": product["price"],
                    "total_price": money(qty * product["price"]),
                    "created_at": order_ts,
                })

            quantity = sum(li["quantity"] for li in lines)
            subtotal = sum(li["total_price"] for li in lines)
            total = money(subtotal - discount_for(customer, subtotal))
            orders.append({
                "id": order_id,
                "customer_id": customer["id"],
                "quantity": quantity,
                "unit_price": money(blended_unit_price(total, quantity)),
                "total_price": total,
                # Older orders have been settled on delivery
                "status": "delivered" if day < today and random.random() < 0.6 else "pending",
                "order_date": order_ts,
                "order_group_id": batch_id,
            })
            items.extend(lines)
    return orders, items

def gen_payments(customers: List[Dict], orders: List[Dict], today: date) -> List[Dict]:
    """Each customer pays back part of what they owe, a few times over the window."""
    owed: Dict[str, float] = {}
    first_order: Dict[str, datetime] = {}
    for o in orders:
        owed[o["customer_id"]] = owed.get(o["customer_id"], 0.0) + o["total_price"]
        first_order[o["customer_id"]] = min(first_order.get(o["customer_id"], o["order_date"]), o["order_date"])

    payments: List[Dict] = []
    for customer in customers:
        total_owed = owed.get(customer["id"], 0.0)
        if total_owed <= 0:
            continue
        remaining = money(total_owed * random.uniform(0.5, 1.0))
        start = first_order[customer["id"]]
        span_days = max((datetime.combine(today, time(18, 0)) - start).days, 0)
        for _ in range(random.randint(1, 3)):
            if remaining <= 0:
                break
            amount = money(min(remaining, round(random.uniform(0.2, 0.6) * total_owed, -1) or remaining))
            remaining = money(remaining - amount)
            paid_at = start + timedelta(days=random.randint(0, span_days), hours=random.randint(1, 8))
            payments.append({
                "id": new_id(),
                "customer_id": customer["id"],
                "amount": amount,
                "payment_date": paid_at,
                "note": random.choice([None, None, "weekly settlement", "partial"]),
                "payment_method": random.choice(PAYMENT_METHODS),
                "description": None,
            })
    return payments

def apply_balances(customers: List[Dict], orders: List[Dict], payments: List[Dict]) -> None:
    """current_balance = sum(order totals) - sum(payments)."""
    by_id = {c["id"]: c for c in customers}
    for o in orders:
        by_id[o["customer_id"]]["current_balance"] += o["total_price"]
    for p in payments:
        by_id[p["customer_id"]]["current_balance"] -= p["amount"]
    for c in customers:
        c["current_balance"] = money(c["current_balance"])

def write_csv(path: str, rows: List[Dict], fieldnames: List[str]) -> None:
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fieldnames)
        w.writeheader()
        for r in rows:
            w.writerow({k: ("" if r.get(k) is None else r.get(k)) for k in fieldnames})


# -----------------------------
# Main
# -----------------------------

def main(argv: Optional[List[str]] = None) -> int:
    config = get_config()

    parser = argparse.ArgumentParser(description="Generate a sample bakery ledger to CSVs.")
    parser.add_argument("--customers", type=int, default=config.default_seed_customers, help="Number of customers.")
    parser.add_argument("--days", type=int, default=config.default_seed_days, help="Number of days of order history.")
    parser.add_argument("--start-date", type=str, default=None, help="YYYY-MM-DD (defaults to today - days + 1)")
    parser.add_argument("--output-dir", type=str, default=config.data_dir)
    parser.add_argument("--seed", type=int, default=config.default_seed_value)
    parser.add_argument("--no-overwrite", action="store_true", help="Fail if CSVs already exist.")
    args = parser.parse_args(argv)

    if args.customers < 1 or args.days < 1:
        print("--customers and --days must be at least 1", file=sys.stderr)
        return 2

    random.seed(args.seed)

    outdir = args.output_dir
    ensure_dir(outdir)

    files = {name: os.path.join(outdir, f"{name}.csv") for name in TABLE_COLUMNS}
    if args.no_overwrite:
        for p in files.values():
            if os.path.exists(p):
                print(f"Refusing to overwrite existing file: {p}", file=sys.stderr)
                return 2

    # time window
    today = date.today()
    if args.start_date:
        start_d = date.fromisoformat(args.start_date)
    else:
        start_d = today - timedelta(days=args.days - 1)
    created = datetime.combine(start_d - timedelta(days=30), time(8, 0))

    products = gen_products(created)
    customers = gen_customers(args.customers, created)
    orders, items = gen_orders_and_items(customers, products, start_d, args.days, today)
    payments = gen_payments(customers, orders, max(today, start_d + timedelta(days=args.days - 1)))
    apply_balances(customers, orders, payments)

    tables = {
        "customers": customers,
        "products": products,
        "orders": orders,
        "order_items": items,
        "payments": payments,
    }
    for name, rows in tables.items():
        write_csv(files[name], rows, TABLE_COLUMNS[name])

    # simple summary
    print(f"Generated data in {outdir}")
    print(f" customers: {len(customers)} | products: {len(products)}")
    print(f" orders: {len(orders)} | order_items: {len(items)} | payments: {len(payments)}")
    print(f" outstanding: {money(sum(max(c['current_balance'], 0) for c in customers)):,.2f}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
