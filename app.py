import streamlit as st

from sheetflow.config import APP_TITLE
from sheetflow.errors import ConfigurationError
from sheetflow.logging_setup import configure_logging
from sheetflow.services.sheets import get_adapter
from sheetflow.ui import dashboard, kanban, login, members, new_ticket, projects, questions, settings, tickets

# --- PAGE SETUP ---
st.set_page_config(
    page_title=APP_TITLE,
    page_icon="🗂️",
    layout="wide",
    initial_sidebar_state="expanded"
)
configure_logging()

PAGES = {
    "Dashboard": dashboard,
    "New Ticket": new_ticket,
    "Tickets": tickets,
    "Projects": projects,
    "Kanban": kanban,
    "Form Questions": questions,
    "Members": members,
    "Settings": settings,
}
MEMBER_PAGES = ["Dashboard", "New Ticket"]

# --- CONNECTION ---
try:
    get_adapter()
except ConfigurationError as e:
    st.error(f"Google Sheets is not configured: {e}")
    st.caption("Set GOOGLE_SHEETS_CLIENT_EMAIL, GOOGLE_SHEETS_PRIVATE_KEY and GOOGLE_SHEETS_SHEET_ID "
               "(or a [gcp_service_account] secret with spreadsheet_id).")
    st.stop()

# --- LOGIN ---
if "user" not in st.session_state:
    login.render()
    st.stop()

user = st.session_state.user
allowed = list(PAGES) if user["role"] == "admin" else MEMBER_PAGES
if "next_menu" in st.session_state:
    st.session_state.menu = st.session_state.pop("next_menu")
if st.session_state.get("menu") not in allowed:
    st.session_state.menu = allowed[0]

# --- SIDEBAR ---
with st.sidebar:
    st.title(APP_TITLE)
    st.caption("Tickets, projects and Kanban boards on Google Sheets")
    menu = st.radio("Navigation", allowed, key="menu")
    st.divider()
    st.info(f"👤 {user['name']} ({user['role']})")
    if st.button("Logout", use_container_width=True):
        login.logout()

PAGES[menu].render()

# --- FOOTER ---
st.sidebar.markdown("---")
st.sidebar.caption("Built with Streamlit + Google Sheets")
