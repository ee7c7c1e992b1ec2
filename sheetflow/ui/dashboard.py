import pandas as pd
import plotly.express as px
import streamlit as st
from sheetflow.config import TABLE_MEMBERS, TABLE_TICKETS, TICKET_STATUSES
from sheetflow.errors import SheetsError
from sheetflow.services.members import list_teams
from sheetflow.services.sheets import get_adapter
from sheetflow.services.tickets import filter_tickets, list_tickets, tickets_by_status


def render():
    st.header("Dashboard")
    st.markdown("Overview of submitted tickets.")
    try:
        ticket_grid, member_grid = get_adapter().read_tables(TABLE_TICKETS, TABLE_MEMBERS)
    except SheetsError as e:
        st.error(f"Failed to load data from Google Sheet: {e}")
        return
    tickets = list_tickets(ticket_grid)
    user = st.session_state.get("user", {})

    c1, c2, c3, c4 = st.columns(4)
    start = c1.date_input("From", value=None)
    end = c2.date_input("To", value=None)
    status = c3.selectbox("Status", ["All"] + TICKET_STATUSES)
    teams = list_teams(member_grid)
    if user.get("role") == "member" and user.get("team"):
        team = c4.selectbox("Team", [user["team"]], disabled=True)
    else:
        team = c4.selectbox("Team", ["All"] + teams)
    tickets = filter_tickets(tickets, status=None if status == "All" else status, start=start, end=end,
                             team=None if team == "All" else team)

    counts = tickets_by_status(tickets)
    total = len(tickets)
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total Tickets", total)
    col2.metric("Open", counts.get("Open", 0))
    col3.metric("In Progress", counts.get("In Progress", 0))
    col4.metric("Done Rate", f"{(counts.get('Done', 0) / total * 100):.1f}%" if total > 0 else "0%")
    st.divider()
    if not tickets:
        st.info("No tickets for the selected filters.")
        return

    df = pd.DataFrame(tickets).drop(columns=["row_index"])
    g1, g2 = st.columns(2)
    with g1:
        st.subheader("Tickets by Status")
        fig_status = px.pie(df, names="Status", hole=0.4, color_discrete_sequence=px.colors.qualitative.Set3)
        st.plotly_chart(fig_status, use_container_width=True)
    with g2:
        st.subheader("Tickets by Team")
        if "Team" in df.columns:
            fig_team = px.bar(df, x="Team", color="Status", color_discrete_sequence=px.colors.qualitative.Pastel)
            st.plotly_chart(fig_team, use_container_width=True)
    st.subheader("Tickets")
    st.dataframe(df[[c for c in ticket_grid[0] if c in df.columns]], use_container_width=True, hide_index=True)
