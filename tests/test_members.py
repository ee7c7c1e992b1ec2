import pytest

from sheetflow.config import DEFAULT_MEMBER, PREDEFINED_TEAMS, TABLE_MEMBERS
from sheetflow.services import members


@pytest.fixture
def member_table(spreadsheet):
    return spreadsheet.add_table(TABLE_MEMBERS, [
        ["Name", "Team"],
        [DEFAULT_MEMBER, "CM"],
        ["Ana", "CM"],
        ["Bo", "QAC"],
        ["Cy", "CM"],
    ])


def test_add_member_seeds_predefined_teams(adapter, spreadsheet):
    result = members.add_member(adapter, "Ana", "CM")

    assert result.success
    grid = spreadsheet.grid(TABLE_MEMBERS)
    assert grid[0] == ["Name", "Team"]
    assert grid[1:-1] == [[DEFAULT_MEMBER, team] for team in PREDEFINED_TEAMS]
    assert grid[-1] == ["Ana", "CM"]


def test_add_member_only_seeds_missing_teams(adapter, member_table, spreadsheet):
    members.add_member(adapter, "Dee", "Class Ops")

    grid = spreadsheet.grid(TABLE_MEMBERS)
    seeded = [row[1] for row in grid[5:] if row[0] == DEFAULT_MEMBER]
    assert seeded == ["SMD", "Class Ops"]
    assert grid[-1] == ["Dee", "Class Ops"]


def test_adding_a_default_member_does_not_duplicate_the_seed(adapter, spreadsheet):
    members.add_member(adapter, DEFAULT_MEMBER, "SMD")
    assert len(spreadsheet.grid(TABLE_MEMBERS)) == 1 + len(PREDEFINED_TEAMS)


@pytest.mark.parametrize("name, team", [("", "CM"), ("Ana", "")])
def test_add_member_requires_name_and_team(adapter, spreadsheet, name, team):
    assert not members.add_member(adapter, name, team).success
    assert spreadsheet.mutations == []


def test_member_names_and_teams(adapter, member_table):
    grid = members.get_members(adapter)
    assert members.member_names(grid) == ["Ana", "Bo", "Cy"]
    assert members.member_names(grid, team="CM") == ["Ana", "Cy"]
    assert members.list_teams(grid) == ["CM", "QAC"]
    assert members.member_names([]) == []


def test_admin_login(adapter):
    result = members.authenticate(adapter, "Admin", "secret", "secret")
    assert result.data == {"name": "admin", "role": "admin", "team": ""}
    assert members.authenticate(adapter, "admin", "nope", "secret").error == "Incorrect password for admin."


def test_member_login_is_case_insensitive(adapter, member_table):
    result = members.authenticate(adapter, " bo ", "Bo123", "secret")
    assert result.success
    assert result.data == {"name": "Bo", "role": "member", "team": "QAC"}


@pytest.mark.parametrize("username, password, error", [
    ("Bo", "bo123", "Incorrect password."),
    ("Zed", "Zed123", "User not found."),
    ("", "x", "Username is required."),
])
def test_member_login_failures(adapter, member_table, username, password, error):
    assert members.authenticate(adapter, username, password, "secret").error == error


def test_login_without_members(adapter):
    assert members.authenticate(adapter, "Ana", "Ana123", "secret").error == "No members found in the system."
