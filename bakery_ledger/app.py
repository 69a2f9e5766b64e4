from datetime import date

import pandas as pd
import streamlit as st

# Configuration
from bakery_ledger.config import get_config
from bakery_ledger.logging import get_logger

# Backend + draft store
from bakery_ledger.data.util import get_ledger_store
from bakery_ledger.drafts.session import CartSession
from bakery_ledger.drafts.store import CartDraftStore
from bakery_ledger.exceptions import LedgerError
from bakery_ledger.ledger.submission import BatchSubmitter, SubmissionState
from bakery_ledger.ledger.summary import draft_preview, summarize_drafts
from bakery_ledger.services import customers as customer_service
from bakery_ledger.services import orders as order_service
from bakery_ledger.services import products as product_service
from bakery_ledger.services import reports
from bakery_ledger.services.formatting import format_currency

st.set_page_config(page_title="Bakery Ledger", layout="wide")

config = get_config()
logger = get_logger("bakery_ledger.app")

# -----------------------------------------------------------------------------
# Long-lived objects live in session_state so reruns reuse them
# -----------------------------------------------------------------------------
if "store" not in st.session_state:
    st.session_state.store = get_ledger_store()
if "drafts" not in st.session_state:
    st.session_state.drafts = CartDraftStore.from_config()
if "submitter" not in st.session_state:
    st.session_state.submitter = BatchSubmitter(st.session_state.store, st.session_state.drafts)

store = st.session_state.store
drafts: CartDraftStore = st.session_state.drafts
submitter: BatchSubmitter = st.session_state.submitter


def show_error(response) -> bool:
    """Render a failed StoreResponse; returns True when there was an error."""
    if response.ok:
        return False
    st.error(response.error.message)
    return True


customers_resp = store.list_customers()
products_resp = store.list_products()
if show_error(customers_resp) or show_error(products_resp):
    st.stop()
customers = customers_resp.data
products = products_resp.data

page = st.sidebar.radio("Page", ["Daily orders", "Customers", "Products", "Reports"])

# -----------------------------------------------------------------------------
# Dashboard strip
# -----------------------------------------------------------------------------
stats_resp = reports.dashboard_stats(store)
if not show_error(stats_resp):
    stats = stats_resp.data
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Today's quantity", f"{stats.today_quantity:,}")
    c2.metric("Today's revenue", format_currency(stats.today_revenue))
    c3.metric("Customers today", f"{stats.today_customers:,}")
    c4.metric("Outstanding debt", format_currency(stats.total_debt))

# -----------------------------------------------------------------------------
# Daily orders: cart per customer, summary, batch submission
# -----------------------------------------------------------------------------
if page == "Daily orders":
    st.markdown("### Daily orders")
    draft_map = drafts.draft_orders

    rows = []
    for c in customers:
        preview = draft_preview(draft_map, c.id)
        rows.append({
            "customer": c.name,
            "balance": c.current_balance,
            "items": preview.total_quantity if preview else 0,
            "total": preview.total if preview else 0.0,
        })
    st.dataframe(pd.DataFrame(rows), use_container_width=True)

    if customers and products:
        by_name = {c.name: c for c in customers}
        selected = st.selectbox("Customer", list(by_name))
        customer = by_name[selected]
        session = CartSession.open(customer, products, drafts)

        with st.form(f"cart-{customer.id}"):
            quantities = {
                line.product_id: st.number_input(
                    f"{line.product_name} ({format_currency(line.unit_price)})",
                    min_value=0, value=line.quantity, step=1, key=f"qty-{customer.id}-{line.product_id}",
                )
                for line in session.lines
            }
            saved = st.form_submit_button("Save cart", disabled=submitter.submitting)
        if saved:
            for product_id, qty in quantities.items():
                session.set_quantity(product_id, int(qty))
            try:
                session.save()
            except LedgerError as e:
                st.error(e.message)
            else:
                st.success(
                    f"Subtotal {format_currency(session.subtotal)}, discount {format_currency(session.discount)}, "
                    f"total {format_currency(session.total)}"
                )
                st.rerun()

    summary = summarize_drafts(customers, drafts.draft_orders)
    st.markdown("#### Batch summary")
    s1, s2, s3 = st.columns(3)
    s1.metric("Customers", summary.customer_count)
    s2.metric("Items", summary.total_items)
    s3.metric("Total", format_currency(summary.total_amount))

    b1, b2 = st.columns(2)
    if b1.button("Submit all", type="primary", disabled=summary.customer_count == 0 or submitter.submitting):
        try:
            result = submitter.submit(customers)
        except LedgerError as e:
            st.warning(e.message)
        else:
            if result.state is SubmissionState.SUCCESS:
                st.success(f"Submitted {result.customer_count} order(s), total {format_currency(result.total_amount)}")
            else:
                st.error(
                    f"Submission stopped: {result.error.message}. "
                    f"{len(result.committed_customer_ids)} customer(s) were already saved; "
                    "their drafts are still listed, so remove them before retrying."
                )
    if b2.button("Clear all drafts", disabled=len(drafts) == 0 or submitter.submitting):
        drafts.clear_drafts()
        st.rerun()

# -----------------------------------------------------------------------------
# Customers: maintenance, payments, timeline, order edit
# -----------------------------------------------------------------------------
elif page == "Customers":
    st.markdown("### Customers")
    with st.expander("Add customer"):
        with st.form("add-customer"):
            name = st.text_input("Name")
            phone = st.text_input("Phone")
            d_type = st.selectbox("Discount", ["none", "percentage", "fixed"])
            d_value = st.text_input("Discount value", value="0")
            if st.form_submit_button("Add"):
                try:
                    resp = customer_service.add_customer(store, name, phone, d_type, d_value)
                except LedgerError as e:
                    st.error(e.message)
                else:
                    if not show_error(resp):
                        st.rerun()

    if customers:
        by_name = {c.name: c for c in customers}
        customer = by_name[st.selectbox("Customer", list(by_name))]
        st.metric("Balance", format_currency(customer.current_balance))

        with st.form("payment"):
            amount = st.text_input("Payment amount")
            note = st.text_input("Note")
            if st.form_submit_button("Record payment"):
                try:
                    resp = customer_service.record_payment(store, customer.id, amount, note)
                except LedgerError as e:
                    st.error(e.message)
                else:
                    if not show_error(resp):
                        st.rerun()

        timeline = customer_service.customer_timeline(store, customer.id)
        if not show_error(timeline):
            st.dataframe(pd.DataFrame([t.model_dump() for t in timeline.data]), use_container_width=True)
            order_ids = [t.id for t in timeline.data if t.type == "order"]
            if order_ids:
                order_id = st.selectbox("Edit order", order_ids)
                loaded = order_service.load_order_for_edit(store, order_id)
                if not show_error(loaded):
                    with st.form(f"edit-{order_id}"):
                        edited = [
                            line.model_copy(update={"quantity": int(st.number_input(
                                line.product_name, min_value=0, value=line.quantity, step=1,
                                key=f"edit-{order_id}-{line.product_id}",
                            ))})
                            for line in loaded.data.lines
                        ]
                        if st.form_submit_button("Save order"):
                            try:
                                resp = order_service.save_order_edit(store, order_id, edited)
                            except LedgerError as e:
                                st.error(e.message)
                            else:
                                if not show_error(resp):
                                    st.rerun()

        if st.button("Delete customer"):
            if not show_error(customer_service.delete_customer(store, customer.id)):
                st.rerun()

# -----------------------------------------------------------------------------
# Products
# -----------------------------------------------------------------------------
elif page == "Products":
    st.markdown("### Products")
    st.dataframe(pd.DataFrame([p.model_dump() for p in products]), use_container_width=True)
    with st.form("add-product"):
        name = st.text_input("Name")
        price = st.text_input("Price", value="0")
        stock = st.number_input("Stock", min_value=0, value=0, step=1)
        if st.form_submit_button("Add product"):
            try:
                resp = product_service.add_product(store, name, price, int(stock))
            except LedgerError as e:
                st.error(e.message)
            else:
                if not show_error(resp):
                    st.rerun()
    if products:
        by_name = {p.name: p for p in products}
        product = by_name[st.selectbox("Product", list(by_name))]
        if st.button("Delete product"):
            if not show_error(product_service.delete_product(store, product.id)):
                st.rerun()

# -----------------------------------------------------------------------------
# Reports
# -----------------------------------------------------------------------------
else:
    st.markdown("### End-of-day report")
    day = st.date_input("Day", value=date.today(), max_value=date.today())
    try:
        report_resp = reports.daily_report(store, day)
    except LedgerError as e:
        st.error(e.message)
    else:
        if not show_error(report_resp):
            report = report_resp.data
            r1, r2, r3 = st.columns(3)
            r1.metric("Orders", report.order_count)
            r2.metric("Quantity", report.total_quantity)
            r3.metric("Revenue", format_currency(report.total_amount))
            st.dataframe(
                pd.DataFrame([r.model_dump() for r in report.rows]),
                use_container_width=True,
            )
            with st.expander("Distribution list"):
                st.text(reports.distribution_list(report))
