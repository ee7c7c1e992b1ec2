import streamlit as st
from sheetflow.config import (
    KANBAN_COLUMNS,
    MEMBER_COLUMNS,
    QUESTION_COLUMNS,
    TABLE_KANBAN,
    TABLE_MEMBERS,
    TABLE_PROJECTS,
    TABLE_QUESTIONS,
    TABLE_TICKETS,
)
from sheetflow.errors import SheetsError
from sheetflow.services.sheets import clear_connection_cache, get_adapter

REQUIRED_COLUMNS = {
    TABLE_TICKETS: ["Ticket ID", "Created Date", "Status"],
    TABLE_MEMBERS: MEMBER_COLUMNS,
    TABLE_PROJECTS: ["Project ID", "Kanban Initialized"],
    TABLE_KANBAN: KANBAN_COLUMNS,
    TABLE_QUESTIONS: QUESTION_COLUMNS,
}


def render():
    st.header("Settings")
    st.subheader("Google Sheets Connection")
    adapter = get_adapter()
    st.info(f"Connected to spreadsheet: **{adapter.settings.spreadsheet_id}**")
    col1, col2 = st.columns(2)
    with col1:
        if st.button("Reload Data", use_container_width=True):
            st.session_state.pop("board", None)
            st.success("Data reloaded!")
            st.rerun()
    with col2:
        if st.button("Clear Cache", use_container_width=True):
            clear_connection_cache()
            st.success("Cache cleared!")
            st.rerun()
    st.divider()
    st.subheader("Sheet Diagnostics")
    for table, required in REQUIRED_COLUMNS.items():
        with st.expander(table):
            try:
                headers = adapter.headers(table)
            except SheetsError as e:
                st.error(f"Failed to read {table}: {e}")
                continue
            st.write("**Columns present:**")
            st.code(", ".join(headers) or "(empty)")
            missing = [c for c in required if c not in headers]
            if not headers:
                st.info("Empty table, it is created on first write.")
            elif missing:
                st.warning(f"Missing columns: {', '.join(missing)}")
                if st.button(f"Add missing columns to {table}", key=f"fix_{table}"):
                    result = adapter.ensure_columns(table, missing)
                    if result:
                        st.success("Columns added!")
                        st.rerun()
                    else:
                        st.error(result.error)
            else:
                st.success("Structure OK")
