import pandas as pd
import streamlit as st
from sheetflow.config import PREDEFINED_TEAMS
from sheetflow.errors import SheetsError
from sheetflow.services.members import add_member, get_members, list_teams
from sheetflow.services.sheets import get_adapter


def render():
    st.header("Members")
    adapter = get_adapter()
    try:
        grid = get_members(adapter)
    except SheetsError as e:
        st.error(f"Failed to load members: {e}")
        return
    teams = list_teams(grid)
    with st.form("form_member", clear_on_submit=True):
        c1, c2 = st.columns(2)
        name = c1.text_input("Name*")
        team = c2.selectbox("Team*", sorted(set(teams) | set(PREDEFINED_TEAMS)))
        submitted = st.form_submit_button("Add Member", use_container_width=True, type="primary")
    if submitted:
        with st.spinner("Saving..."):
            result = add_member(adapter, name.strip(), team)
        if result:
            st.toast(f"{name} added to {team}. Their password is their name followed by 123.")
            st.rerun()
        else:
            st.error(result.error)
    if len(grid) < 2:
        st.info("No members yet.")
        return
    df = pd.DataFrame(grid[1:], columns=grid[0])
    col1, col2 = st.columns(2)
    col1.metric("Members", len(df))
    col2.metric("Teams", len(teams))
    st.dataframe(df, use_container_width=True, hide_index=True)
