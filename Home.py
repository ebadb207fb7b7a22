import asyncio
import importlib

import matplotlib.pyplot as plt  # charts
import streamlit as st

from coursedesk import datasets
from coursedesk.config import get_settings
from coursedesk.exceptions import AuthenticationError
from coursedesk.filters import sort_records
from coursedesk.loader import DataLoader
from coursedesk.log_config import setup_logging
from coursedesk.session import SessionCoordinator
from pages.components import (
    apply_global_styles,
    get_client,
    render_footer,
    render_table,
    run_async,
)
from pages.leads import leads_view
from pages.orders import orders_view
from pages.users import users_view

# =========================
# Page Config
# =========================
settings = get_settings()
st.set_page_config(page_title=settings.app_title, layout="wide")
setup_logging()
apply_global_styles()

# Top-level routes -> page modules
NAV_OPTIONS = {
    "Home": None,
    "Users": "pages.users",
    "Leads": "pages.leads",
    "Orders": "pages.orders",
    "Certificates": "pages.certificates",
    "Passwords": "pages.student_passwords",
    "Coupons": "pages.coupons",
    "Meetings": "pages.meetings",
    "Upload Data": "pages.upload_data",
}


def _fmt_num(x):
    try:
        return f"{float(x):,.0f}"
    except (TypeError, ValueError):
        return "N/A"


async def _load_all(loaders: list[DataLoader]):
    return await asyncio.gather(*(loader.load() for loader in loaders))


def _kpi(label: str, value) -> None:
    st.markdown(
        f"<div class='kpi-card'><div class='kpi-label'>{label}</div>"
        f"<div class='kpi-value'>{_fmt_num(value)}</div></div>",
        unsafe_allow_html=True,
    )


# =========================
# Sign-in gate
# =========================
coordinator = SessionCoordinator(st.session_state, settings.admin_users)

if not coordinator.signed_in:
    st.title(f"🔐 {settings.app_title}")
    with st.form("sign_in_form"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign In")
    if submitted:
        try:
            coordinator.sign_in(email, password)
            st.rerun()
        except AuthenticationError as e:
            st.error(e.message)
    st.stop()

# =========================
# State & Query Params sync
# =========================
if "selected" not in st.session_state:
    st.session_state["selected"] = "Home"

qp = st.query_params
if "selected" in qp and qp["selected"] in NAV_OPTIONS:
    st.session_state["selected"] = qp["selected"]

current = st.session_state["selected"]

# =========================
# Topbar
# =========================
links = "".join(
    f'<a href="?selected={name.replace(" ", "%20")}" target="_self"'
    + (' class="active"' if name == current else "")
    + f">{name}</a>"
    for name in NAV_OPTIONS
)
st.markdown(
    f"""
<div id="app-topbar" class="topbar">
  <div class="brand"><b>{settings.app_title}</b></div>
  <div class="topnav">{links}</div>
</div>
""",
    unsafe_allow_html=True,
)

_, who, out = st.columns([6, 2, 1])
with who:
    st.caption(f"Signed in as {coordinator.current.email}")
with out:
    if st.button("Sign Out", key="sign_out"):
        coordinator.sign_out()
        st.rerun()

# =========================
# Routing
# =========================
if current == "Home":
    st.title("📊 Dashboard")
    client = get_client()

    # Users, leads and orders are fetched together on first visit.
    loaders = [
        DataLoader(view, fetch)
        for view, fetch in (
            (users_view(), client.get_users),
            (leads_view(), client.get_enquiries),
            (orders_view(), client.get_orders),
        )
        if not view.loaded
    ]
    if loaders:
        with st.spinner("Loading metrics..."):
            run_async(_load_all(loaders))

    orders = orders_view().records

    # =========================
    # KPI Cards
    # =========================
    k1, k2, k3 = st.columns(3)
    with k1:
        _kpi("Users", len(users_view().records))
    with k2:
        _kpi("Orders", len(orders))
    with k3:
        _kpi("Leads", len(leads_view().records))

    # =========================
    # Order status breakdown
    # =========================
    st.divider()
    st.subheader("🧾 Orders by Status")
    counts = {s: 0 for s in datasets.ORDER_STATUSES}
    for order in orders:
        status = str(order.get("status") or "unknown").lower()
        counts[status] = counts.get(status, 0) + 1

    if not orders:
        st.info("No orders yet.")
    else:
        s_left, s_center, s_right = st.columns([1, 2, 1])
        with s_center:
            fig, ax = plt.subplots(figsize=(6.0, 2.6))
            colors = {"success": "#2e7d32", "pending": "#f9a825", "failed": "#c62828"}
            ax.bar(
                list(counts),
                list(counts.values()),
                color=[colors.get(s, "#607d8b") for s in counts],
            )
            ax.tick_params(axis="both", labelsize=8)
            ax.grid(alpha=0.2, axis="y")
            for spine in ["top", "right"]:
                ax.spines[spine].set_visible(False)
            st.pyplot(fig, use_container_width=False)
            plt.close(fig)

    # =========================
    # Recent orders
    # =========================
    st.divider()
    st.subheader(f"🕒 Recent Orders ({len(orders)})")
    recent = sort_records(orders, "created_at", descending=True)[: settings.page_size]
    render_table(recent, datasets.ORDER_COLUMNS)

else:
    try:
        page = importlib.import_module(NAV_OPTIONS[current])
        page.main()
    except Exception as e:
        st.error(f"Failed to load {current} page: {e}")

# =========================
# Footer
# =========================
render_footer()
