# pages/orders.py
import logging

import streamlit as st

from coursedesk import datasets
from coursedesk.config import get_settings
from coursedesk.exporter import Exporter, export_filename
from coursedesk.table_view import TableView
from pages.components import ensure_loaded, get_client, get_view, render_pager, render_table

logger = logging.getLogger(__name__)

VIEW_KEY = "orders_view"
XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def orders_view() -> TableView:
    # Orders keep the current page (clamped) when filters change.
    return get_view(
        VIEW_KEY,
        lambda: TableView("orders", "id", page_size=get_settings().page_size, retain_page_on_filter=True),
    )


def _exporter() -> Exporter:
    if "orders_exporter" not in st.session_state:
        st.session_state["orders_exporter"] = Exporter()
    return st.session_state["orders_exporter"]


def main():
    client = get_client()
    view = orders_view()
    ensure_loaded(view, client.get_orders)

    st.title("🧾 Orders")

    # --- Filters ---
    st.subheader("🔍 Filter Orders")
    col1, col2, col3 = st.columns(3)
    col4, col5, col6 = st.columns(3)
    with col1:
        search = st.text_input("Search (email, name, phone)")
    with col2:
        course = st.selectbox("Course", options=[""] + view.options("program_id"))
    with col3:
        payment_type = st.selectbox("Payment Type", options=[""] + view.options("payment_type"))
    with col4:
        status = st.selectbox("Status", options=[""] + datasets.ORDER_STATUSES)
    with col5:
        from_date = st.date_input("From", value=None, key="orders_from")
    with col6:
        to_date = st.date_input("To", value=None, key="orders_to")

    view.set_filters(datasets.order_filters(search, course, payment_type, status, from_date, to_date))

    # --- Export ---
    scope = st.radio("Export", ["Filtered", "All"], horizontal=True)
    records = view.filtered if scope == "Filtered" else view.records
    filters = view.filters if scope == "Filtered" else []
    exporter = _exporter()
    try:
        data = exporter.to_excel(records, datasets.ORDER_COLUMNS, sheet_name="Orders")
    except (ValueError, OSError) as e:
        logger.exception("Order export failed")
        st.error(f"Export failed: {e}")
    else:
        st.download_button(
            "⬇️ Export to Excel",
            data=data,
            file_name=export_filename("orders", filters),
            mime=XLSX_MIME,
            disabled=exporter.busy or not records,
        )

    # --- Table ---
    st.divider()
    render_table(view.page_records(), datasets.ORDER_COLUMNS)
    render_pager(view, "orders")


if __name__ == "__main__":
    main()
