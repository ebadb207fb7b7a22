# pages/coupons.py
import logging

import pandas as pd
import streamlit as st

from coursedesk import datasets
from coursedesk.config import get_settings
from coursedesk.coupons import CouponDefaults, apply_defaults, generate_coupons, submit_coupons
from coursedesk.exceptions import DashboardError
from coursedesk.table_view import TableView
from pages.components import (
    ensure_loaded,
    get_client,
    get_dispatcher,
    get_toasts,
    get_view,
    render_pager,
    render_toast,
    run_async,
)

logger = logging.getLogger(__name__)

VIEW_KEY = "coupons_view"
BATCH_KEY = "coupon_batch"
DEFAULTS_KEY = "coupon_defaults"


def coupons_view() -> TableView:
    return get_view(VIEW_KEY, lambda: TableView("coupons", "code", page_size=get_settings().page_size))


def _render_generator(view: TableView, client) -> None:
    toasts = get_toasts()
    if DEFAULTS_KEY not in st.session_state:
        st.session_state[DEFAULTS_KEY] = CouponDefaults()
    defaults: CouponDefaults = st.session_state[DEFAULTS_KEY]
    batch: list[dict] = st.session_state.setdefault(BATCH_KEY, [])

    st.subheader("🎟️ Create Coupons")
    with st.form("coupon_defaults_form"):
        c1, c2 = st.columns(2)
        with c1:
            discount = st.text_input("Default discount amount", value=defaults.discount_value)
        with c2:
            uses = st.text_input("Default uses per coupon", value=defaults.uses_per_coupon)
        if st.form_submit_button("Save Defaults"):
            defaults = CouponDefaults(discount_value=discount.strip(), uses_per_coupon=uses.strip())
            st.session_state[DEFAULTS_KEY] = defaults
            try:
                apply_defaults(batch, defaults)
                toasts.success("Defaults saved")
            except DashboardError as e:
                toasts.error(e.message)
            st.rerun()

    c1, c2 = st.columns([1, 3])
    with c1:
        count = st.number_input("How many coupons?", min_value=0, value=1, step=1)
    with c2:
        st.write("")
        if st.button("Generate"):
            existing = {r["code"] for r in view.records} | {c["code"] for c in batch}
            try:
                batch.extend(generate_coupons(int(count), defaults, get_settings().coupon_prefix, existing))
            except DashboardError as e:
                toasts.error(e.message)
            st.rerun()

    if not batch:
        return

    edited = st.data_editor(
        pd.DataFrame(batch, columns=["code", "discount_value", "uses_per_coupon"]),
        hide_index=True,
        disabled=["code"],
        use_container_width=True,
        key="coupon_batch_editor",
    )
    batch[:] = edited.fillna("").astype(str).to_dict("records")

    b1, b2, _ = st.columns([1, 1, 3])
    with b1:
        if st.button("💾 Save Coupons", type="primary"):
            try:
                saved = run_async(submit_coupons(client, batch))
            except DashboardError as e:
                logger.warning("Coupon save failed: %s", e)
                toasts.error(e.message)
            else:
                toasts.success(f"{saved} coupon(s) created")
                batch.clear()
                ensure_loaded(view, client.get_coupons, datasets.coupon_record, force=True)
            st.rerun()
    with b2:
        if st.button("Discard"):
            batch.clear()
            st.rerun()


def main():
    client = get_client()
    view = coupons_view()
    ensure_loaded(view, client.get_coupons, datasets.coupon_record)

    st.title("🏷️ Coupons")
    render_toast()

    _render_generator(view, client)

    # --- Existing coupons ---
    st.divider()
    st.subheader("Existing Coupons")
    c1, c2 = st.columns([3, 1])
    with c1:
        search = st.text_input("Search by code")
    with c2:
        active = st.selectbox("Active", options=["", "Yes", "No"])
    view.set_filters(datasets.coupon_filters(search, active))

    dispatcher = get_dispatcher(view)
    toggle = datasets.toggle_coupon_action(client)
    rows = view.page_records()
    if not rows:
        st.warning("No matching records found.")

    header = st.columns([3, 2, 2, 1, 1])
    for col, label in zip(header, ["Code", "Discount", "Uses / Coupon", "Active", ""]):
        col.markdown(f"**{label}**")
    for record in rows:
        key = record["code"]
        cols = st.columns([3, 2, 2, 1, 1])
        for col, column in zip(cols, datasets.COUPON_COLUMNS):
            col.write(column.extract(record))
        with cols[4]:
            label = "Disable" if record.get("is_active") else "Enable"
            if st.button(label, key=f"coupon_toggle_{key}", disabled=dispatcher.busy.is_busy(toggle.name, key)):
                run_async(dispatcher.run(toggle, key))
                st.rerun()

    render_pager(view, "coupons")


if __name__ == "__main__":
    main()
