import logging

from sheetflow.config import ADMIN_USER, DEFAULT_MEMBER, MEMBER_COLUMNS, PREDEFINED_TEAMS, TABLE_MEMBERS
from sheetflow.errors import Result, SheetsError

logger = logging.getLogger(__name__)


def get_members(adapter):
    return adapter.read_table(TABLE_MEMBERS)


def _column(grid, name):
    if not grid or name not in grid[0]:
        return []
    position = grid[0].index(name)
    return [row[position] for row in grid[1:]]


def list_teams(grid):
    teams = []
    for team in _column(grid, "Team"):
        if team and team not in teams:
            teams.append(team)
    return teams


def member_names(grid, team=None):
    names = _column(grid, "Name")
    if team:
        names = [n for n, t in zip(names, _column(grid, "Team")) if t == team]
    return sorted({n for n in names if n and n != DEFAULT_MEMBER})


def add_member(adapter, name, team):
    """
    Adds a member, seeding one "Team Default" row for every predefined team
    that has nobody yet.
    """
    if not name or not team:
        return Result.fail("Name and team are required.")
    try:
        grid = adapter.read_table(TABLE_MEMBERS)
    except SheetsError as e:
        logger.error("Error adding member: %s", e)
        return Result.fail(e)

    headers = grid[0] if grid else MEMBER_COLUMNS
    if not grid:
        written = adapter.append_record(TABLE_MEMBERS, {h: h for h in headers}, is_header_write=True)
        if not written:
            return written

    existing_teams = set(list_teams(grid))
    for missing_team in [t for t in PREDEFINED_TEAMS if t not in existing_teams]:
        seeded = adapter.append_record(TABLE_MEMBERS, {"Name": DEFAULT_MEMBER, "Team": missing_team})
        if not seeded:
            return seeded
        logger.info("Seeded team %s", missing_team)

    if name == DEFAULT_MEMBER and team in PREDEFINED_TEAMS:
        return Result.ok()
    return adapter.append_record(TABLE_MEMBERS, {"Name": name, "Team": team})


def member_password(name):
    return f"{name.strip()}123"


def authenticate(adapter, username, password, admin_password):
    """Returns a Result whose data is {"name", "role", "team"} on success."""
    username = (username or "").strip()
    if not username:
        return Result.fail("Username is required.")
    if username.lower() == ADMIN_USER:
        if password == admin_password:
            return Result.ok({"name": ADMIN_USER, "role": "admin", "team": ""})
        return Result.fail("Incorrect password for admin.")

    try:
        grid = adapter.read_table(TABLE_MEMBERS)
    except SheetsError as e:
        logger.error("Error loading members for login: %s", e)
        return Result.fail(e)
    if not grid:
        return Result.fail("No members found in the system.")
    if "Name" not in grid[0]:
        return Result.fail("Member data sheet is not configured correctly (Missing Name column).")

    teams = _column(grid, "Team") or [""] * (len(grid) - 1)
    for name, team in zip(_column(grid, "Name"), teams):
        if name.strip().lower() == username.lower():
            if password != member_password(name):
                return Result.fail("Incorrect password.")
            return Result.ok({"name": name, "role": "member", "team": team})
    return Result.fail("User not found.")
