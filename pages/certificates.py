# pages/certificates.py
from functools import partial

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

VIEW_KEY = "certificates_view"


def certificates_view() -> TableView:
    return get_view(
        VIEW_KEY, lambda: TableView("certificates", "row_key", page_size=get_settings().page_size)
    )


def _pick(label: str, options: list[str], current: str, key: str) -> str:
    return st.selectbox(
        label, options=options, index=options.index(current) if current in options else 0, key=key
    )


def main():
    settings = get_settings()
    client = get_client()
    view = certificates_view()
    ensure_loaded(
        view,
        client.get_purchased_students,
        partial(
            datasets.certificate_student,
            year_options=settings.year_options,
            duration_options=settings.duration_options,
        ),
    )

    st.title("🎓 Certificates")
    render_toast()

    col1, col2, col3 = st.columns([3, 2, 1])
    with col1:
        search = st.text_input("Search by name or email", key="cert_search")
    with col2:
        course = st.selectbox("Course", options=[""] + view.options("course_title"), key="cert_course")
    with col3:
        render_page_size(view, "cert")
    view.set_filters(datasets.student_filters(search, course))

    dispatcher = get_dispatcher(view)
    generate = datasets.generate_certificate_action(client)
    send = datasets.send_certificate_action(client)

    rows = view.page_records()
    if not rows:
        st.warning("No matching records found.")

    for record in rows:
        key = record["row_key"]
        with st.container(border=True):
            st.markdown(f"**{record['name']}** · {record['email']} · _{record['course_title']}_")
            c1, c2, c3, c4 = st.columns(4)
            with c1:
                student_id = st.text_input("Student ID", value=record["student_id"], key=f"cert_sid_{key}")
            with c2:
                score = st.text_input("Score", value=record["score"], key=f"cert_score_{key}")
            with c3:
                year = _pick("Academic Year", settings.year_options, record["academic_year"], f"cert_year_{key}")
            with c4:
                duration = _pick("Duration", settings.duration_options, record["duration"], f"cert_dur_{key}")
            view.patch(key, {
                "student_id": student_id,
                "score": score,
                "academic_year": year,
                "duration": duration,
            })

            b1, b2, b3 = st.columns([1, 1, 3])
            with b1:
                if st.button(
                    "Generate",
                    key=f"cert_gen_{key}",
                    disabled=dispatcher.busy.is_busy(generate.name, key),
                ):
                    run_async(dispatcher.run(generate, key))
                    st.rerun()
            if record.get("certificate_url"):
                with b2:
                    if st.button(
                        "📧 Send",
                        key=f"cert_send_{key}",
                        disabled=dispatcher.busy.is_busy(send.name, key),
                    ):
                        run_async(dispatcher.run(send, key))
                        st.rerun()
                with b3:
                    st.markdown(f"[View certificate]({datasets.certificate_link(record, settings.api_url)})")

    render_pager(view, "cert")


if __name__ == "__main__":
    main()
