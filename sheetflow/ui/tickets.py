import pandas as pd
import streamlit as st
from sheetflow.config import TICKET_STATUSES
from sheetflow.errors import SheetsError
from sheetflow.services.sheets import get_adapter
from sheetflow.services.tickets import (
    create_project_from_ticket,
    filter_tickets,
    get_all_tickets,
    list_tickets,
    update_ticket_status_by_id,
)


def render():
    st.header("Tickets")
    st.caption("Most recent first. Turn a ticket into a project to plan it on a Kanban board.")
    adapter = get_adapter()
    try:
        grid = get_all_tickets(adapter)
    except SheetsError as e:
        st.error(f"Failed to load tickets from Google Sheet: {e}")
        return
    if len(grid) < 2:
        st.info("No tickets yet.")
        return
    headers = grid[0]

    c1, c2, c3, c4 = st.columns(4)
    status = c1.selectbox("Status", ["All"] + TICKET_STATUSES)
    search = c2.text_input("Search")
    start = c3.date_input("From", value=None)
    end = c4.date_input("To", value=None)
    tickets = filter_tickets(list_tickets(grid), status=None if status == "All" else status,
                             search=search, start=start, end=end)
    if not tickets:
        st.info("No tickets match the filters.")
        return

    st.dataframe(pd.DataFrame(tickets, columns=headers), use_container_width=True, hide_index=True)
    st.divider()

    labels = {f"{t.get('Ticket ID', '')} - {t.get('Name', '')} ({t.get('Status', '')})": t for t in tickets}
    selected = labels[st.selectbox("Ticket", list(labels))]
    col_status, col_project = st.columns(2)
    with col_status:
        current = selected.get("Status", "Open")
        new_status = st.selectbox("Status", TICKET_STATUSES,
                                  index=TICKET_STATUSES.index(current) if current in TICKET_STATUSES else 0,
                                  key=f"status_{selected['row_index']}")
        if st.button("Update Status", use_container_width=True) and new_status != current:
            with st.spinner("Saving..."):
                result = update_ticket_status_by_id(adapter, selected.get("Ticket ID", ""), new_status)
            if result:
                st.toast(f"Ticket moved to {new_status}")
                st.rerun()
            else:
                st.error(result.error)
    with col_project:
        st.write("")
        if st.button("Create Project", use_container_width=True, type="primary",
                     disabled=selected.get("Status") != "Open"):
            values = [selected.get(h, "") for h in headers]
            with st.spinner("Creating project..."):
                result = create_project_from_ticket(adapter, selected["row_index"], values)
            if result:
                st.success(f"Project {result.data['Project ID']} created.")
                st.rerun()
            else:
                st.error(f"Failed to create project: {result.error}")
