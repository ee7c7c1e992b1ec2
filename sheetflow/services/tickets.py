import logging
import time
from datetime import datetime, timezone

from sheetflow.config import PROJECT_COLUMNS, TABLE_PROJECTS, TABLE_TICKETS
from sheetflow.errors import Result, SheetsError

logger = logging.getLogger(__name__)

TICKET_ID = "Ticket ID"
CREATED_DATE = "Created Date"
STATUS = "Status"


def epoch_millis():
    return int(time.time() * 1000)


def now_iso():
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def submit_ticket(adapter, data):
    """Stores a form submission as a new ticket with status Open."""
    ticket = dict(data)
    ticket[TICKET_ID] = f"TICKET-{epoch_millis()}"
    ticket[CREATED_DATE] = now_iso()
    ticket[STATUS] = "Open"
    columns = adapter.ensure_columns(TABLE_TICKETS, list(ticket))
    if not columns:
        return columns
    result = adapter.append_record(TABLE_TICKETS, ticket)
    if result:
        logger.info("Ticket %s submitted", ticket[TICKET_ID])
        result.data = ticket
    return result


def ticket_record(name, teams, work_type, answers):
    """Form submission as stored: answers keep the full question text as their column."""
    record = {"Name": name.strip(), "Team": ", ".join(teams), "Work Type": work_type}
    record.update(answers)
    return record


def get_all_tickets(adapter):
    return adapter.read_table(TABLE_TICKETS)


def list_tickets(grid):
    """Rows as dicts carrying their sheet row index, newest first."""
    if not grid:
        return []
    headers = grid[0]
    tickets = []
    for row_index, row in enumerate(grid[1:], start=1):
        ticket = dict(zip(headers, row))
        ticket["row_index"] = row_index
        tickets.append(ticket)
    tickets.reverse()
    return tickets


def _created_on(ticket):
    value = ticket.get(CREATED_DATE, "")
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def filter_tickets(tickets, status=None, search="", start=None, end=None, team=None):
    search = (search or "").strip().lower()
    selected = []
    for ticket in tickets:
        if status and ticket.get(STATUS) != status:
            continue
        if team and team not in [t.strip() for t in ticket.get("Team", "").split(",")]:
            continue
        if search and not any(search in str(v).lower() for k, v in ticket.items() if k != "row_index"):
            continue
        if start or end:
            created = _created_on(ticket)
            if created is None:
                continue
            if start and created < start:
                continue
            if end and created > end:
                continue
        selected.append(ticket)
    return selected


def update_ticket_status(adapter, row_index, new_status):
    try:
        grid = adapter.read_table(TABLE_TICKETS)
    except SheetsError as e:
        logger.error("Error updating ticket status: %s", e)
        return Result.fail(e)
    if not grid:
        return Result.fail("No ticket data found to update.")
    if row_index < 1 or row_index >= len(grid):
        return Result.fail("Ticket row not found.")
    headers = grid[0]
    if STATUS not in headers:
        return Result.fail(f"Status column not found in {TABLE_TICKETS}.")
    position = headers.index(STATUS)
    return adapter.update_cell_range(TABLE_TICKETS, row_index, position, position, [new_status])


def update_ticket_status_by_id(adapter, ticket_id, new_status):
    """Same as update_ticket_status, but finds the row by Ticket ID right before writing."""
    try:
        row_index = adapter.find_row_index(TABLE_TICKETS, TICKET_ID, ticket_id)
    except SheetsError as e:
        logger.error("Error locating ticket %s: %s", ticket_id, e)
        return Result.fail(e)
    return update_ticket_status(adapter, row_index, new_status)


def create_project_from_ticket(adapter, row_index, values):
    """
    Copies a ticket into the projects table and flips the ticket to In Progress.

    The two writes are independent: if the status update fails, the project row
    stays and the error is returned as is.
    """
    try:
        ticket_grid = adapter.read_table(TABLE_TICKETS)
    except SheetsError as e:
        logger.error("Error creating project: %s", e)
        return Result.fail(e)
    if not ticket_grid:
        return Result.fail("No ticket data found.")
    ticket_headers = ticket_grid[0]

    if TICKET_ID in ticket_headers:
        id_position = ticket_headers.index(TICKET_ID)
    else:
        id_position = next((i for i, h in enumerate(ticket_headers) if "id" in h.lower()), -1)
    project_id = ""
    if 0 <= id_position < len(values):
        project_id = values[id_position]
    project_id = project_id or f"PROJ-{epoch_millis()}"

    project_headers = PROJECT_COLUMNS + [h for h in ticket_headers if h not in PROJECT_COLUMNS]
    try:
        existing = adapter.read_table(TABLE_PROJECTS)
    except SheetsError as e:
        logger.error("Error creating project: %s", e)
        return Result.fail(e)
    if not existing:
        header = adapter.append_record(TABLE_PROJECTS, {h: "" for h in project_headers}, is_header_write=True)
        if not header:
            return header

    project = {
        "Project ID": project_id,
        "Start Date": "",
        "End Date": "",
        "Assignee": "",
        "Kanban Initialized": "No",
    }
    for i, header in enumerate(ticket_headers):
        if header not in project:
            project[header] = values[i] if i < len(values) else ""

    appended = adapter.append_record(TABLE_PROJECTS, project)
    if not appended:
        return appended
    logger.info("Project %s created from ticket row %s", project_id, row_index)

    status = update_ticket_status(adapter, row_index, "In Progress")
    if not status:
        return status
    return Result.ok(project)


def tickets_by_status(tickets):
    counts = {}
    for ticket in tickets:
        status = ticket.get(STATUS) or "Unknown"
        counts[status] = counts.get(status, 0) + 1
    return counts
