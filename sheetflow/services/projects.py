import logging

from sheetflow.config import KANBAN_COLUMNS, TABLE_KANBAN, TABLE_PROJECTS
from sheetflow.errors import Result, SheetsError
from sheetflow.services.tickets import epoch_millis

logger = logging.getLogger(__name__)


def get_projects(adapter):
    return adapter.read_table(TABLE_PROJECTS)


def list_projects(grid):
    if not grid:
        return []
    headers = grid[0]
    projects = []
    for row_index, row in enumerate(grid[1:], start=1):
        project = dict(zip(headers, row))
        project["row_index"] = row_index
        projects.append(project)
    return projects


def update_project(adapter, row_index, values):
    """row_index is the 0-based grid position of the project (header is 0)."""
    try:
        grid = adapter.read_table(TABLE_PROJECTS)
    except SheetsError as e:
        logger.error("Error updating project: %s", e)
        return Result.fail(e)
    if not grid:
        return Result.fail("No projects found to update.")
    if row_index < 1 or row_index >= len(grid):
        return Result.fail("Project row not found.")
    return adapter.update_record(TABLE_PROJECTS, row_index, values)


def initialize_kanban(adapter, row_index, project_id):
    """Creates the kick-off task of a project board and flags the project as initialized."""
    columns = adapter.ensure_columns(TABLE_KANBAN, KANBAN_COLUMNS)
    if not columns:
        return columns
    kickoff = adapter.append_record(TABLE_KANBAN, {
        "Project ID": project_id,
        "Task ID": f"TASK-{epoch_millis()}",
        "Title": "Project Kick-off",
        "Status": "todo",
        "Assignee": "",
        "Due Date": "",
        "Description": "Initial setup and planning for the project.",
        "Type": "Planning",
        "Priority": "High",
        "Tags": "kickoff,planning",
    })
    if not kickoff:
        return kickoff
    logger.info("Kanban board initialized for %s", project_id)
    return update_project(adapter, row_index, {"Kanban Initialized": "Yes"})
