import logging
from dataclasses import dataclass, field, replace
from typing import List

from sheetflow.config import KANBAN_COLUMNS, KANBAN_STATUSES, TABLE_KANBAN
from sheetflow.errors import Result, SheetsError
from sheetflow.services.tickets import epoch_millis

logger = logging.getLogger(__name__)


@dataclass
class KanbanTask:
    row_index: int
    id: str
    project_id: str
    title: str
    status: str = "todo"
    assignee: str = ""
    due_date: str = ""
    description: str = ""
    type: str = "Task"
    priority: str = "Medium"
    tags: List[str] = field(default_factory=list)


def _task_from_row(row_index, row, positions):
    def value(column):
        position = positions.get(column, -1)
        return row[position] if 0 <= position < len(row) else ""

    tags = value("Tags")
    return KanbanTask(
        row_index=row_index,
        id=value("Task ID"),
        project_id=value("Project ID"),
        title=value("Title"),
        status=value("Status"),
        assignee=value("Assignee"),
        due_date=value("Due Date"),
        description=value("Description"),
        type=value("Type") or "Task",
        priority=value("Priority") or "Medium",
        tags=[t.strip() for t in tags.split(",") if t.strip()] if tags else [],
    )


def get_kanban_tasks(adapter, project_id):
    """Tasks of one project. Failures are logged and yield an empty board."""
    try:
        grid = adapter.read_table(TABLE_KANBAN)
    except SheetsError as e:
        logger.error("Error fetching Kanban tasks: %s", e)
        return []
    if not grid:
        return []
    positions = {name: i for i, name in enumerate(grid[0])}
    required = ["Project ID", "Task ID", "Status"]
    if any(column not in positions for column in required):
        logger.error("Required columns (%s) not found in %s", ", ".join(required), TABLE_KANBAN)
        return []
    tasks = [_task_from_row(i, row, positions) for i, row in enumerate(grid[1:], start=1)]
    return [task for task in tasks if task.project_id == project_id]


def group_by_status(tasks):
    """Board columns keyed by status; unknown statuses land in todo."""
    board = {status: [] for status in KANBAN_STATUSES}
    for task in tasks:
        board.get(task.status, board["todo"]).append(task)
    return board


def filter_tasks(tasks, search="", assignees=None, priority=None):
    search = (search or "").strip().lower()
    selected = []
    for task in tasks:
        if search and search not in task.title.lower() and search not in task.description.lower():
            continue
        if assignees is not None and task.assignee not in assignees:
            continue
        if priority and task.priority != priority:
            continue
        selected.append(task)
    return selected


def add_kanban_task(adapter, project_id, title, description="", type="Task", priority="Medium",
                    assignee="", due_date="", tags=()):
    if not title or not title.strip():
        return Result.fail("Task title is required.")
    task = {
        "Project ID": project_id,
        "Task ID": f"TASK-{epoch_millis()}",
        "Title": title.strip(),
        "Status": "todo",
        "Description": description,
        "Type": type,
        "Priority": priority,
        "Assignee": assignee,
        "Due Date": due_date,
        "Tags": ",".join(tags),
    }
    columns = adapter.ensure_columns(TABLE_KANBAN, KANBAN_COLUMNS)
    if not columns:
        return columns
    result = adapter.append_record(TABLE_KANBAN, task)
    if result:
        result.data = task
    return result


def update_kanban_task_status(adapter, row_index, new_status):
    """row_index is the 0-based grid position of the task row."""
    if new_status not in KANBAN_STATUSES:
        return Result.fail(f"Unknown status {new_status}.")
    try:
        grid = adapter.read_table(TABLE_KANBAN)
    except SheetsError as e:
        logger.error("Error updating task status: %s", e)
        return Result.fail(e)
    if not grid:
        return Result.fail("No kanban data found to update.")
    if row_index < 1 or row_index >= len(grid):
        return Result.fail("Task row not found.")
    if "Status" not in grid[0]:
        return Result.fail(f"Status column not found in {TABLE_KANBAN}.")
    position = grid[0].index("Status")
    return adapter.update_cell_range(TABLE_KANBAN, row_index, position, position, [new_status])


def move_task(board, task_id, new_status):
    """
    Optimistic move for the board in session state: returns a new board with
    the card appended to the target column. Nothing is written.
    """
    moved = None
    new_board = {}
    for status, tasks in board.items():
        kept = []
        for task in tasks:
            if task.id == task_id:
                moved = replace(task, status=new_status)
            else:
                kept.append(task)
        new_board[status] = kept
    if moved is None:
        return board
    new_board.setdefault(new_status, []).append(moved)
    return new_board


def move_kanban_task(adapter, task_id, new_status):
    """Persists a move, locating the row by Task ID just before the write."""
    try:
        row_index = adapter.find_row_index(TABLE_KANBAN, "Task ID", task_id)
    except SheetsError as e:
        logger.error("Error locating task %s: %s", task_id, e)
        return Result.fail(e)
    return update_kanban_task_status(adapter, row_index, new_status)


def delete_kanban_task(adapter, row_index):
    if row_index < 1:
        return Result.fail("Task row not found.")
    return adapter.delete_row(TABLE_KANBAN, row_index)


def delete_kanban_task_by_id(adapter, task_id):
    try:
        row_index = adapter.find_row_index(TABLE_KANBAN, "Task ID", task_id)
    except SheetsError as e:
        logger.error("Error locating task %s: %s", task_id, e)
        return Result.fail(e)
    return delete_kanban_task(adapter, row_index)
