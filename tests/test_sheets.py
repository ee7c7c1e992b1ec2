from unittest import mock

import gspread
import pytest

from sheetflow.errors import ApiError, ColumnNotFound, NotFoundError, RowNotFound, SheetNotFound
from sheetflow.services.sheets import SheetTableAdapter
from conftest import FakeClient


def api_error(status=500, message="backend error"):
    response = mock.Mock(status_code=status, text=f'{{"error": {{"message": "{message}"}}}}')
    response.json.return_value = {"error": {"code": status, "message": message, "status": "INTERNAL"}}
    return gspread.exceptions.APIError(response)


def test_read_missing_table_is_empty(adapter):
    assert adapter.read_table("Nope") == []


def test_read_empty_table_is_empty(adapter, spreadsheet):
    spreadsheet.add_table("Sheet1")
    assert adapter.read_table("Sheet1") == []


def test_read_pads_short_rows(adapter, spreadsheet):
    spreadsheet.add_table("Sheet1", [["Name", "Team", "Role"], ["A"], ["B", "Y", "Admin"]])
    assert adapter.read_table("Sheet1") == [["Name", "Team", "Role"], ["A", "", ""], ["B", "Y", "Admin"]]


def test_append_to_empty_table_synthesizes_headers(adapter, spreadsheet):
    result = adapter.append_record("Sheet2", {"Name": "A", "Team": "X"})

    assert result.success
    assert adapter.read_table("Sheet2") == [["Name", "Team"], ["A", "X"]]
    kinds = [m[0] for m in spreadsheet.mutations]
    assert kinds == ["add_worksheet", "update", "append"]
    assert spreadsheet.mutations[1][2:] == ("A1", [["Name", "Team"]])


def test_append_adds_one_column_per_missing_key(adapter, spreadsheet):
    spreadsheet.add_table("Sheet2", [["Name", "Team"], ["A", "X"]])

    result = adapter.append_record("Sheet2", {"Name": "B", "Team": "Y", "Role": "Admin"})

    assert result.success
    grid = adapter.read_table("Sheet2")
    assert grid[0] == ["Name", "Team", "Role"]
    assert grid[1] == ["A", "X", ""]
    assert grid[2] == ["B", "Y", "Admin"]
    assert [m[:3] for m in spreadsheet.mutations] == [
        ("update", "Sheet2", "C1"),
        ("append", "Sheet2", ["B", "Y", "Admin"]),
    ]


def test_append_with_several_new_keys_keeps_key_order(adapter, spreadsheet):
    spreadsheet.add_table("Sheet2", [["Name"]])

    adapter.append_record("Sheet2", {"Role": "Admin", "Name": "B", "Email": "b@x.io"})

    assert adapter.headers("Sheet2") == ["Name", "Role", "Email"]
    assert adapter.read_table("Sheet2")[1] == ["B", "Admin", "b@x.io"]
    added = [m[2] for m in spreadsheet.mutations if m[0] == "update"]
    assert added == ["B1", "C1"]


def test_append_aligns_values_to_header_order(adapter, spreadsheet):
    spreadsheet.add_table("Sheet2", [["Name", "Team", "Note"]])

    adapter.append_record("Sheet2", {"Team": "X", "Name": "A", "Note": None})

    assert adapter.read_table("Sheet2")[1] == ["A", "X", ""]


def test_append_without_migration_drops_unknown_fields(adapter, spreadsheet):
    spreadsheet.add_table("Sheet2", [["Name"]])

    result = adapter.append_record("Sheet2", {"Name": "A", "Role": "Admin"}, migrate=False)

    assert result.success
    assert adapter.read_table("Sheet2") == [["Name"], ["A"]]


def test_header_write_extends_existing_headers(adapter, spreadsheet):
    spreadsheet.add_table("Sheet5", [["Team"], ["CM"]])

    result = adapter.append_record("Sheet5", {"Team": "Team", "QuestionText": "QuestionText"},
                                   is_header_write=True)

    assert result.success
    assert adapter.read_table("Sheet5") == [["Team", "QuestionText"], ["CM", ""]]


def test_header_write_on_empty_table_writes_only_headers(adapter, spreadsheet):
    adapter.append_record("Sheet3", {"Project ID": "", "Assignee": ""}, is_header_write=True)

    assert adapter.read_table("Sheet3") == [["Project ID", "Assignee"]]
    assert "append" not in [m[0] for m in spreadsheet.mutations]


def test_add_column_grows_a_full_grid(adapter, spreadsheet):
    sheet = spreadsheet.add_table("Wide", [["c%d" % i for i in range(3)]], cols=3)

    result = adapter.add_column("Wide", "c3")

    assert result.success
    assert result.data == 3
    assert sheet.col_count == 4
    assert adapter.headers("Wide") == ["c0", "c1", "c2", "c3"]


def test_ensure_columns_only_adds_absent_ones(adapter, spreadsheet):
    spreadsheet.add_table("Sheet4", [["Project ID", "Title"]])

    result = adapter.ensure_columns("Sheet4", ["Project ID", "Task ID", "Title", "Status"])

    assert result.data == ["Project ID", "Title", "Task ID", "Status"]
    assert len([m for m in spreadsheet.mutations if m[0] == "update"]) == 2


def test_rename_column(adapter, spreadsheet):
    spreadsheet.add_table("Sheet1", [["Name", "Team"], ["A", "X"]])

    assert adapter.rename_column("Sheet1", "Team", "Squad").success
    assert adapter.read_table("Sheet1") == [["Name", "Squad"], ["A", "X"]]


@pytest.mark.parametrize("operation", ["rename", "delete"])
def test_missing_column_fails_without_mutation(adapter, spreadsheet, operation):
    spreadsheet.add_table("Sheet1", [["Name", "Team"], ["A", "X"]])

    if operation == "rename":
        result = adapter.rename_column("Sheet1", "Role", "Position")
    else:
        result = adapter.delete_column("Sheet1", "Role")

    assert not result.success
    assert isinstance(result.exception, ColumnNotFound)
    assert isinstance(result.exception, NotFoundError)
    assert 'Column "Role" not found' in result.error
    assert spreadsheet.mutations == []


def test_delete_column(adapter, spreadsheet):
    spreadsheet.add_table("Other")
    spreadsheet.add_table("Sheet1", [["Name", "Team", "Role"], ["A", "X", "Dev"]])

    result = adapter.delete_column("Sheet1", "Team")

    assert result.success
    assert adapter.read_table("Sheet1") == [["Name", "Role"], ["A", "Dev"]]
    request = spreadsheet.mutations[0][2]["deleteDimension"]["range"]
    assert request == {"sheetId": 1, "dimension": "COLUMNS", "startIndex": 1, "endIndex": 2}


def test_delete_row_shifts_later_rows(adapter, spreadsheet):
    spreadsheet.add_table("Sheet4", [["Task"], ["t1"], ["t2"], ["t3"]])

    result = adapter.delete_row("Sheet4", 2)

    assert result.success
    grid = adapter.read_table("Sheet4")
    assert len(grid) == 3
    assert grid == [["Task"], ["t1"], ["t3"]]
    assert adapter.find_row_index("Sheet4", "Task", "t3") == 2


def test_delete_row_rejects_negative_index(adapter, spreadsheet):
    spreadsheet.add_table("Sheet4", [["Task"], ["t1"]])
    result = adapter.delete_row("Sheet4", -1)
    assert not result.success
    assert isinstance(result.exception, RowNotFound)


def test_delete_row_on_missing_table(adapter):
    result = adapter.delete_row("Ghost", 1)
    assert not result.success
    assert isinstance(result.exception, SheetNotFound)


def test_update_cell_range(adapter, spreadsheet):
    spreadsheet.add_table("Sheet1", [["A", "B", "C", "D"], ["1", "2", "3", "4"]])

    result = adapter.update_cell_range("Sheet1", 1, 1, 2, ["x", 5])

    assert result.success
    assert result.data == "B2:C2"
    assert adapter.read_table("Sheet1")[1] == ["1", "x", "5", "4"]


def test_update_cell_range_checks_span_length(adapter, spreadsheet):
    spreadsheet.add_table("Sheet1", [["A", "B"], ["1", "2"]])

    result = adapter.update_cell_range("Sheet1", 1, 0, 1, ["only one"])

    assert not result.success
    assert spreadsheet.mutations == []


def test_update_record_merges_known_columns(adapter, spreadsheet):
    spreadsheet.add_table("Sheet3", [["Project ID", "Assignee", "Kanban Initialized"], ["P1", "", "No"]])

    result = adapter.update_record("Sheet3", 1, {"Kanban Initialized": "Yes", "Unknown": "z"})

    assert result.success
    assert adapter.read_table("Sheet3")[1] == ["P1", "", "Yes"]


def test_update_record_missing_row(adapter, spreadsheet):
    spreadsheet.add_table("Sheet3", [["Project ID"], ["P1"]])
    assert not adapter.update_record("Sheet3", 5, {"Project ID": "x"}).success


def test_resolve_sheet_id(adapter, spreadsheet):
    spreadsheet.add_table("Sheet1")
    spreadsheet.add_table("Sheet2")
    assert adapter.resolve_sheet_id("Sheet2") == 1
    with pytest.raises(SheetNotFound, match='"Sheet9"'):
        adapter.resolve_sheet_id("Sheet9")


def test_find_column_and_row_index_raise(adapter, spreadsheet):
    spreadsheet.add_table("Sheet4", [["Task ID", "Title"], ["T1", "a"], ["T2", "b"]])
    assert adapter.find_column_index("Sheet4", "Title") == 1
    assert adapter.find_row_index("Sheet4", "Task ID", "T2") == 2
    with pytest.raises(ColumnNotFound):
        adapter.find_column_index("Sheet4", "Status")
    with pytest.raises(RowNotFound):
        adapter.find_row_index("Sheet4", "Task ID", "T9")


def test_api_errors_become_failed_results(adapter, spreadsheet):
    sheet = spreadsheet.add_table("Sheet1", [["Name"]])
    sheet.fail_with = api_error(500, "backend error")

    result = adapter.append_record("Sheet1", {"Name": "A"})

    assert not result.success
    assert isinstance(result.exception, ApiError)
    assert result.exception.status_code == 500
    assert "backend error" in result.error


def test_read_table_raises_api_error(adapter, spreadsheet):
    spreadsheet.add_table("Sheet1").fail_with = api_error(403, "The caller does not have permission")
    with pytest.raises(ApiError, match="permission"):
        adapter.read_table("Sheet1")


def test_read_tables_keeps_argument_order(adapter, spreadsheet):
    spreadsheet.add_table("Sheet1", [["Ticket"]])
    spreadsheet.add_table("Sheet2", [["Name"]])
    assert adapter.read_tables("Sheet2", "Sheet1") == [[["Name"]], [["Ticket"]]]


def test_spreadsheet_is_opened_once(settings, spreadsheet):
    client = FakeClient(spreadsheet)
    adapter = SheetTableAdapter(settings, client=client)
    adapter.read_table("Sheet1")
    adapter.read_table("Sheet2")
    assert client.opened == ["sheet-123"]


def test_token_provider_is_consulted_before_opening(settings, spreadsheet):
    provider = mock.Mock()
    adapter = SheetTableAdapter(settings, client=FakeClient(spreadsheet), token_provider=provider)
    adapter.read_table("Sheet1")
    provider.get_token.assert_called_once_with()
