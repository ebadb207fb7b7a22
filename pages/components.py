import asyncio
import base64
import datetime
from collections.abc import Callable

import streamlit as st

from coursedesk.actions import ActionDispatcher, BusyRegistry
from coursedesk.api_client import AdminApiClient
from coursedesk.config import get_settings
from coursedesk.exporter import build_frame
from coursedesk.loader import DataLoader
from coursedesk.notifications import SUCCESS, ToastCenter
from coursedesk.table_view import Column, TableView

LOGO_PATH = "assets/logo.png"


def _b64(path: str) -> str | None:
    try:
        with open(path, "rb") as f:
            return base64.b64encode(f.read()).decode("utf-8")
    except OSError:
        return None


# =========================
# Session-scoped objects
# =========================
def run_async(coro):
    """Drive one coroutine to completion from a Streamlit rerun."""
    return asyncio.run(coro)


def get_client() -> AdminApiClient:
    settings = get_settings()
    return AdminApiClient(settings.api_url, timeout=settings.request_timeout)


def get_toasts() -> ToastCenter:
    if "toasts" not in st.session_state:
        st.session_state["toasts"] = ToastCenter(duration=get_settings().toast_seconds)
    return st.session_state["toasts"]


def get_view(state_key: str, factory: Callable[[], TableView]) -> TableView:
    if state_key not in st.session_state:
        st.session_state[state_key] = factory()
    return st.session_state[state_key]


def get_dispatcher(view: TableView) -> ActionDispatcher:
    busy_key = f"{view.name}_busy"
    if busy_key not in st.session_state:
        st.session_state[busy_key] = BusyRegistry()
    return ActionDispatcher(view, get_toasts(), st.session_state[busy_key])


def ensure_loaded(view: TableView, fetch, transform=None, force: bool = False) -> None:
    """Fetch the view's list on first render (or when ``force`` is set)."""
    if view.loaded and not force:
        return
    with st.spinner(f"Loading {view.name}..."):
        run_async(DataLoader(view, fetch, transform).load())


# =========================
# Widgets
# =========================
def render_toast() -> None:
    toast = get_toasts().current()
    if toast is None:
        return
    if toast.kind == SUCCESS:
        st.success(toast.message)
    else:
        st.error(toast.message)


def render_table(records, columns: list[Column]) -> None:
    if not records:
        st.warning("No matching records found.")
        return
    st.dataframe(build_frame(records, columns), hide_index=True, use_container_width=True)


def render_page_size(view: TableView, key: str) -> None:
    options = get_settings().page_size_options
    current = view.paginator.page_size
    size = st.selectbox(
        "Rows per page",
        options=options,
        index=options.index(current) if current in options else 0,
        key=f"{key}_page_size",
    )
    if size != current:
        view.set_page_size(size)


def render_pager(view: TableView, key: str) -> None:
    """Prev / numbered window / Next, plus a "Showing a-b of n" caption."""
    st.divider()
    buttons = view.page_buttons(get_settings().page_window)
    cols = st.columns([1] + [1] * len(buttons) + [1])
    with cols[0]:
        if st.button("⬅️ Prev", disabled=view.current_page <= 1, key=f"{key}_prev"):
            view.previous_page()
            st.rerun()
    for col, page in zip(cols[1:-1], buttons):
        with col:
            if page is None:
                st.markdown("<div style='text-align:center;'>…</div>", unsafe_allow_html=True)
            elif st.button(
                str(page),
                key=f"{key}_page_{page}",
                type="primary" if page == view.current_page else "secondary",
            ):
                view.go_to(page)
                st.rerun()
    with cols[-1]:
        if st.button("Next ➡️", disabled=view.current_page >= view.total_pages, key=f"{key}_next"):
            view.next_page()
            st.rerun()

    first, last = view.showing()
    st.markdown(
        f"<div style='text-align:center; font-weight:600;'>"
        f"Page {view.current_page} of {view.total_pages} • Showing {first}–{last} of {len(view.filtered)} records"
        f"</div>",
        unsafe_allow_html=True,
    )


# =========================
# Styles & footer
# =========================
def apply_global_styles() -> None:
    st.markdown("""
<style>
[data-testid="stSidebar"] { display: none; }
[data-testid="stSidebarNav"] { display: none; }

.topbar {
    width: 100%;
    background-color: #f2f2f2;
    border-bottom: 1px solid #d9d9d9;
    padding: 8px 12px;
    display: flex;
    align-items: center;
    gap: 16px;
    position: sticky;
    top: 0;
    z-index: 999;
}
.brand img { width: 80px; height: auto; display: block; }
.brand b { font-size: 18px; }
.topnav { display: flex; align-items: center; gap: 12px; flex-wrap: wrap; }
.topnav a {
    color: #111; text-decoration: none; font-weight: 600;
    padding: 8px 14px; border-radius: 8px; display: inline-block;
}
.topnav a:hover { background-color: #e6e6e6; }
.topnav a.active { background-color: #e6e6e6; border: 1px solid #bfbfbf; }

.kpi-card {
    background: #ffffff;
    border: 1px solid #eee;
    border-radius: 12px;
    padding: 14px;
    box-shadow: 0 2px 8px rgba(0,0,0,0.04);
    text-align: center;
    height: 100%;
}
.kpi-label { font-size: 0.9rem; color: #666; margin-bottom: 6px; font-weight: 600; }
.kpi-value { font-size: 1.4rem; font-weight: 800; color: #111; }
</style>
""", unsafe_allow_html=True)


def render_footer():
    year = datetime.datetime.now().year
    title = get_settings().app_title
    logo_b64 = _b64(LOGO_PATH)

    st.markdown("""
<style>
:root { --footer-h: 70px; }
[data-testid="stAppViewContainer"] { padding-bottom: var(--footer-h) !important; }
.footer-fixed {
  position: fixed;
  left: 50%;
  bottom: 0;
  transform: translateX(-50%);
  width: 100vw;
  background: #f5f5f5;
  border-top: 1px solid #dcdcdc;
  z-index: 999;
  padding: 12px 16px;
}
.footer-wrap { max-width: 1200px; margin: 0 auto; display: flex; align-items: center; gap: 24px; }
.footer-left img { height: 36px; }
.footer-note { flex: 1 1 auto; text-align: center; font-size: 12px; color: #555; }
footer { display: none !important; }
</style>
""", unsafe_allow_html=True)

    logo = f"<img src='data:image/png;base64,{logo_b64}' alt='logo'>" if logo_b64 else f"<b>{title}</b>"
    html = f"""<div class="footer-fixed">
<div class="footer-wrap">
  <div class="footer-left">{logo}</div>
  <div class="footer-note">© {year} <b>{title}</b>. Internal staff tool.</div>
</div>
</div>"""
    st.markdown(html, unsafe_allow_html=True)
