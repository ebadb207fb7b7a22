# pages/student_passwords.py
import streamlit as st

from coursedesk import datasets
from coursedesk.config import get_settings
from coursedesk.table_view import TableView
from pages.components import (
    ensure_loaded,
    get_client,
    get_dispatcher,
    get_view,
    render_page_size,
    render_pager,
    render_toast,
    run_async,
)

VIEW_KEY = "passwords_view"


def passwords_view() -> TableView:
    return get_view(
        VIEW_KEY, lambda: TableView("student passwords", "row_key", page_size=get_settings().page_size)
    )


def _fill_password(view: TableView, key: str, widget_key: str) -> None:
    # Runs as an on_click callback, before the text input is drawn again.
    password = datasets.generate_password()
    view.patch(key, {"password": password})
    st.session_state[widget_key] = password


def main():
    client = get_client()
    view = passwords_view()
    ensure_loaded(view, client.get_purchased_students, datasets.password_student)

    st.title("🔑 Student Passwords")
    render_toast()

    col1, col2, col3 = st.columns([3, 2, 1])
    with col1:
        search = st.text_input("Search by name or email", key="pw_search")
    with col2:
        course = st.selectbox("Course", options=[""] + view.options("course_title"), key="pw_course")
    with col3:
        render_page_size(view, "pw")
    view.set_filters(datasets.student_filters(search, course))

    dispatcher = get_dispatcher(view)
    send = datasets.send_password_action(client)

    rows = view.page_records()
    if not rows:
        st.warning("No matching records found.")

    for record in rows:
        key = record["row_key"]
        widget_key = f"pw_value_{key}"
        with st.container(border=True):
            c1, c2, c3, c4 = st.columns([3, 3, 1, 1])
            with c1:
                st.markdown(f"**{record['name']}**  \n{record['email']} · _{record['course_title']}_")
                if record["student_login_password"]:
                    st.caption(f"Current password: {record['student_login_password']}")
            with c2:
                password = st.text_input(
                    "Password",
                    value=record["password"] or record["student_login_password"],
                    key=widget_key,
                )
                view.patch(key, {"password": password})
            with c3:
                st.write("")
                st.button(
                    "Generate",
                    key=f"pw_gen_{key}",
                    on_click=_fill_password,
                    args=(view, key, widget_key),
                )
            with c4:
                st.write("")
                if st.button("Send", key=f"pw_send_{key}", disabled=dispatcher.busy.is_busy(send.name, key)):
                    run_async(dispatcher.run(send, key))
                    st.rerun()

    render_pager(view, "pw")


if __name__ == "__main__":
    main()
