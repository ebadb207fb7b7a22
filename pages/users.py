# pages/users.py
import streamlit as st

from coursedesk import datasets
from coursedesk.config import get_settings
from coursedesk.table_view import TableView
from pages.components import ensure_loaded, get_client, get_view, render_pager, render_table

VIEW_KEY = "users_view"


def users_view() -> TableView:
    return get_view(VIEW_KEY, lambda: TableView("users", "id", page_size=get_settings().page_size))


def main():
    client = get_client()
    view = users_view()
    ensure_loaded(view, client.get_users)

    st.title("👥 Registered Users")

    search = st.text_input("Search by name, email or phone")
    view.set_filters(datasets.user_filters(search))
    st.caption(f"{len(view.filtered)} of {len(view.records)} users")

    render_table(view.page_records(), datasets.USER_COLUMNS)
    render_pager(view, "users")


if __name__ == "__main__":
    main()
