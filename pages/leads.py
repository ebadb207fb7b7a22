# pages/leads.py
import streamlit as st

from coursedesk import datasets
from coursedesk.config import get_settings
from coursedesk.table_view import TableView
from pages.components import (
    ensure_loaded,
    get_client,
    get_dispatcher,
    get_view,
    render_pager,
    render_table,
    render_toast,
    run_async,
)

VIEW_KEY = "leads_view"


def leads_view() -> TableView:
    return get_view(VIEW_KEY, lambda: TableView("leads", "id", page_size=get_settings().page_size))


def main():
    client = get_client()
    view = leads_view()
    ensure_loaded(view, client.get_enquiries)

    st.title("📞 Leads")
    render_toast()

    # --- Filters ---
    st.subheader("🔍 Filter Leads")
    col1, col2, col3 = st.columns(3)
    col4, col5, col6 = st.columns(3)
    with col1:
        program = st.selectbox("Program", options=[""] + view.options("program"))
    with col2:
        city = st.selectbox("City", options=[""] + view.options("city"))
    with col3:
        state = st.selectbox("State", options=[""] + view.options("state"))
    with col4:
        status = st.selectbox("Status", options=[""] + view.options("status"))
    with col5:
        from_date = st.date_input("From", value=None, key="leads_from")
    with col6:
        to_date = st.date_input("To", value=None, key="leads_to")

    view.set_filters(datasets.lead_filters(program, city, state, status, from_date, to_date))

    if st.button("🔄 Refresh"):
        ensure_loaded(view, client.get_enquiries, force=True)

    # --- Rows ---
    st.divider()
    rows = view.page_records()
    if not rows:
        render_table(rows, datasets.LEAD_COLUMNS)

    dispatcher = get_dispatcher(view)
    update = datasets.lead_update_action(client)
    for record in rows:
        key = record["id"]
        with st.container(border=True):
            render_table([record], datasets.LEAD_COLUMNS)
            c1, c2, c3 = st.columns([2, 4, 1])
            current = record.get("status") or ""
            options = datasets.lead_status_options(current)
            with c1:
                new_status = st.selectbox(
                    "Status",
                    options=options,
                    index=options.index(current),
                    key=f"lead_status_{key}",
                )
            with c2:
                comment = st.text_input(
                    "Comment", value=record.get("sales_person_comment") or "", key=f"lead_comment_{key}"
                )
            changes = datasets.lead_edits(record, new_status, comment)
            if changes:
                view.patch(key, changes)
            with c3:
                st.write("")
                busy = dispatcher.busy.is_busy(update.name, key)
                if st.button("Update", key=f"lead_update_{key}", disabled=busy):
                    run_async(dispatcher.run(update, key))
                    st.rerun()

    render_pager(view, "leads")


if __name__ == "__main__":
    main()
