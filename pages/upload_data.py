# pages/upload_data.py
import logging

import pandas as pd
import streamlit as st

from coursedesk.exceptions import DashboardError
from coursedesk.uploads import UPLOAD_KINDS, upload_csv
from pages.components import get_client, get_toasts, render_toast, run_async

logger = logging.getLogger(__name__)


def _render_uploader(client, kind: str) -> None:
    label = UPLOAD_KINDS[kind]
    st.subheader(f"📥 {label} Data")
    uploaded_file = st.file_uploader(f"{label} CSV", type=["csv"], key=f"upload_{kind}")
    if uploaded_file is None:
        return

    content = uploaded_file.getvalue()
    try:
        preview = pd.read_csv(uploaded_file, nrows=10)
        st.dataframe(preview, use_container_width=True)
    except (ValueError, UnicodeDecodeError) as e:
        st.error(f"Error reading file: {e}")

    if st.button(f"📤 Upload {label} Data", key=f"upload_btn_{kind}"):
        toasts = get_toasts()
        try:
            with st.spinner("Uploading..."):
                toasts.success(run_async(upload_csv(client, uploaded_file.name, content, kind)))
        except DashboardError as e:
            logger.warning("%s upload failed: %s", label, e)
            toasts.error(e.message)
        st.rerun()


def main():
    client = get_client()
    st.title("⬆️ Upload Data")
    render_toast()

    col1, col2 = st.columns(2)
    with col1:
        _render_uploader(client, "user")
    with col2:
        _render_uploader(client, "order")


if __name__ == "__main__":
    main()
