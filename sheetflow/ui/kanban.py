from datetime import date
import streamlit as st
from sheetflow.config import KANBAN_PRIORITIES, KANBAN_STATUSES, KANBAN_TITLES, TABLE_MEMBERS, TABLE_PROJECTS
from sheetflow.errors import SheetsError
from sheetflow.services.kanban import (
    add_kanban_task,
    delete_kanban_task_by_id,
    filter_tasks,
    get_kanban_tasks,
    group_by_status,
    move_kanban_task,
    move_task,
)
from sheetflow.services.members import list_teams, member_names
from sheetflow.services.projects import list_projects
from sheetflow.services.sheets import get_adapter

COLORS = {
    "todo": "#6B7280",
    "inprogress": "#3B82F6",
    "review": "#EC4899",
    "done": "#22C55E",
}
PRIORITY_ICONS = {"Critical": "🔴", "High": "🟠", "Medium": "🟡", "Low": "🟢"}


def load_board(adapter, project_id):
    st.session_state.board = group_by_status(get_kanban_tasks(adapter, project_id))
    st.session_state.board_project = project_id


def _new_task_form(adapter, project_id, members):
    with st.expander("➕ New Task"):
        with st.form("form_new_task", clear_on_submit=True):
            title = st.text_input("Title*")
            c1, c2, c3 = st.columns(3)
            task_type = c1.selectbox("Type", ["Promotional", "Planning", "Design", "Development", "Task"])
            priority = c2.selectbox("Priority", KANBAN_PRIORITIES, index=1)
            assignee = c3.selectbox("Assignee", [""] + members)
            c4, c5 = st.columns(2)
            due_date = c4.date_input("Due Date", value=None, min_value=date.today())
            tags = c5.text_input("Tags", placeholder="comma separated")
            description = st.text_area("Description", height=80)
            submitted = st.form_submit_button("Add Task", use_container_width=True, type="primary")
        if submitted:
            result = add_kanban_task(
                adapter, project_id, title, description=description, type=task_type, priority=priority,
                assignee=assignee, due_date=due_date.strftime("%Y-%m-%d") if due_date else "",
                tags=[t.strip() for t in tags.split(",") if t.strip()],
            )
            if result:
                st.toast("Task added")
                load_board(adapter, project_id)
                st.rerun()
            else:
                st.error(f"Failed to add task: {result.error}")


def _card(adapter, project_id, task):
    icon = PRIORITY_ICONS.get(task.priority, "⚪")
    with st.expander(f"{icon} {task.title}", expanded=True):
        c1, c2 = st.columns(2)
        c1.caption(f"👤 **{task.assignee or 'Unassigned'}**")
        c2.caption(f"🏷️ {task.type}")
        if task.due_date:
            st.caption(f"📅 Due {task.due_date}")
        if task.description:
            st.write(task.description)
        if task.tags:
            st.caption(" ".join(f"`{t}`" for t in task.tags))
        new_status = st.selectbox("Move to:", KANBAN_STATUSES, format_func=KANBAN_TITLES.get,
                                  index=KANBAN_STATUSES.index(task.status) if task.status in KANBAN_STATUSES else 0,
                                  key=f"status_{task.id}")
        if new_status != task.status:
            # optimistic: the board in session state moves first
            st.session_state.board = move_task(st.session_state.board, task.id, new_status)
            with st.spinner("Saving..."):
                result = move_kanban_task(adapter, task.id, new_status)
            if not result:
                st.error(f"Failed to move task: {result.error}")
                load_board(adapter, project_id)
            st.rerun()
        if st.button("🗑️ Delete", key=f"delete_{task.id}", use_container_width=True):
            result = delete_kanban_task_by_id(adapter, task.id)
            if result:
                st.toast("Task deleted")
            else:
                st.error(result.error)
            load_board(adapter, project_id)
            st.rerun()


def render():
    st.header("Kanban Board")
    st.markdown(
        """
        <style>
        div[data-testid="column"]>div { background: #f9fafb; border: 1px solid #e5e7eb; border-radius: 12px; padding: 12px; min-height: 60vh; }
        .kanban-header { display: flex; justify-content: space-between; align-items: center; background: #ffffffd9; border: 1px solid #e5e7eb; border-left: 6px solid var(--accent, #6b7280); border-radius: 10px; padding: 8px 12px; margin-bottom: 10px; }
        .kanban-title { font-weight: 600; }
        .kanban-count { font-size: 12px; background: #0000000a; padding: 4px 8px; border-radius: 999px; }
        .kanban-empty { border: 1px dashed #cbd5e1; background: #ffffff; color: #64748b; border-radius: 8px; padding: 10px; text-align: center; }
        </style>
        """,
        unsafe_allow_html=True,
    )
    adapter = get_adapter()
    try:
        project_grid, member_grid = adapter.read_tables(TABLE_PROJECTS, TABLE_MEMBERS)
    except SheetsError as e:
        st.error(f"Failed to load Kanban board data: {e}")
        return
    project_ids = [p["Project ID"] for p in list_projects(project_grid) if p.get("Kanban Initialized") == "Yes"]
    if not project_ids:
        st.info("No Kanban boards yet. Initialize one from the Projects page.")
        return
    current = st.session_state.get("board_project")
    project_id = st.selectbox("Project", project_ids,
                              index=project_ids.index(current) if current in project_ids else 0)
    if "board" not in st.session_state or st.session_state.get("board_project") != project_id:
        load_board(adapter, project_id)

    members = member_names(member_grid)
    _new_task_form(adapter, project_id, members)

    c_filter1, c_filter2, c_filter3, c_filter4 = st.columns([2, 1, 1, 1])
    search = c_filter1.text_input("Search tasks")
    team = c_filter2.selectbox("Team", ["All"] + list_teams(member_grid))
    priority = c_filter3.selectbox("Priority", ["All"] + KANBAN_PRIORITIES)
    with c_filter4:
        st.write("")
        if st.button("🔄 Refresh", use_container_width=True):
            load_board(adapter, project_id)
            st.rerun()
    assignees = None if team == "All" else set(member_names(member_grid, team))

    cols = st.columns(len(KANBAN_STATUSES))
    for idx, status in enumerate(KANBAN_STATUSES):
        with cols[idx]:
            tasks = filter_tasks(st.session_state.board.get(status, []), search=search, assignees=assignees,
                                 priority=None if priority == "All" else priority)
            st.markdown(
                f"<div class='kanban-header' style='--accent:{COLORS[status]}'><span class='kanban-title'>{KANBAN_TITLES[status]}</span><span class='kanban-count'>{len(tasks)} tasks</span></div>",
                unsafe_allow_html=True,
            )
            if not tasks:
                st.markdown("<div class='kanban-empty'>No tasks</div>", unsafe_allow_html=True)
            for task in tasks:
                _card(adapter, project_id, task)
