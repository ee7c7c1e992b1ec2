from datetime import datetime
import pandas as pd
import streamlit as st
from sheetflow.config import PROJECT_COLUMNS, TABLE_MEMBERS, TABLE_PROJECTS
from sheetflow.errors import SheetsError
from sheetflow.services.members import member_names
from sheetflow.services.projects import initialize_kanban, list_projects, update_project
from sheetflow.services.sheets import get_adapter


def _parse_date(value):
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return None


def render():
    st.header("Projects")
    st.caption("Projects created from tickets. Initialize a Kanban board to start planning.")
    adapter = get_adapter()
    try:
        project_grid, member_grid = adapter.read_tables(TABLE_PROJECTS, TABLE_MEMBERS)
    except SheetsError as e:
        st.error(f"Failed to load data from Google Sheet: {e}")
        return
    projects = list_projects(project_grid)
    if not projects:
        st.info("No projects yet. Create one from the Tickets page.")
        return
    st.dataframe(pd.DataFrame(projects, columns=project_grid[0]), use_container_width=True, hide_index=True)
    st.divider()

    labels = {f"{p.get('Project ID', '')} - {p.get('Name', '')}": p for p in projects}
    project = labels[st.selectbox("Project", list(labels))]
    members = [""] + member_names(member_grid)
    with st.form(f"form_project_{project['row_index']}"):
        c1, c2, c3 = st.columns(3)
        assignee = c1.selectbox("Assignee", members,
                                index=members.index(project.get("Assignee")) if project.get("Assignee") in members else 0)
        start = c2.date_input("Start Date", value=_parse_date(project.get("Start Date", "")))
        end = c3.date_input("End Date", value=_parse_date(project.get("End Date", "")))
        saved = st.form_submit_button("Save", use_container_width=True)
    if saved:
        if start and end and end < start:
            st.error("End date must be after the start date.")
            st.stop()
        values = {
            "Assignee": assignee,
            "Start Date": start.strftime("%Y-%m-%d") if start else "",
            "End Date": end.strftime("%Y-%m-%d") if end else "",
        }
        with st.spinner("Saving..."):
            result = update_project(adapter, project["row_index"], values)
        if result:
            st.toast("Project updated")
            st.rerun()
        else:
            st.error(result.error)

    initialized = project.get(PROJECT_COLUMNS[4]) == "Yes"
    if initialized:
        if st.button("Open Kanban Board", use_container_width=True):
            st.session_state.board_project = project["Project ID"]
            st.session_state.next_menu = "Kanban"
            st.rerun()
    elif st.button("Initialize Kanban Board", use_container_width=True, type="primary"):
        with st.spinner("Creating board..."):
            result = initialize_kanban(adapter, project["row_index"], project["Project ID"])
        if result:
            st.success("Kanban board created!")
            st.rerun()
        else:
            st.error(f"Failed to initialize Kanban: {result.error}")
