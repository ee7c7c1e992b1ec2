import logging
import os
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager

import gspread
import requests
import streamlit as st
from google.auth.exceptions import GoogleAuthError

from sheetflow.config import SheetsSettings
from sheetflow.errors import (
    ApiError,
    AuthError,
    ColumnNotFound,
    ConfigurationError,
    Result,
    RowNotFound,
    SheetNotFound,
    SheetsError,
)
from sheetflow.services.auth import TokenProvider

logger = logging.getLogger(__name__)

NEW_SHEET_ROWS = 100
NEW_SHEET_COLS = 26


def column_letter(index):
    """0 -> A, 25 -> Z, 26 -> AA, 701 -> ZZ, 702 -> AAA."""
    if index < 0:
        raise ValueError(f"Column index must be non-negative, got {index}")
    letters = ""
    while index >= 0:
        letters = chr(index % 26 + ord("A")) + letters
        index = index // 26 - 1
    return letters


def column_index(letters):
    index = 0
    for char in letters.strip().upper():
        if not "A" <= char <= "Z":
            raise ValueError(f"Invalid column label: {letters!r}")
        index = index * 26 + ord(char) - ord("A") + 1
    if index == 0:
        raise ValueError("Empty column label")
    return index - 1


def _cell(value):
    if value is None:
        return ""
    return str(value)


def _pad(values):
    width = max((len(row) for row in values), default=0)
    return [[_cell(v) for v in row] + [""] * (width - len(row)) for row in values]


def _strip_trailing(headers):
    headers = [_cell(h) for h in headers]
    while headers and headers[-1] == "":
        headers.pop()
    return headers


def _api_error(action, exc):
    response = getattr(exc, "response", None)
    status = getattr(response, "status_code", None)
    body = getattr(response, "text", "") or str(exc)
    return ApiError(f"{action} failed ({status}): {body}", status_code=status, body=body)


class SheetTableAdapter:
    """
    Treats every tab of one spreadsheet as a table whose first row holds the
    column names.

    Row indices are 0-based over the whole grid, header included, so the first
    data row is 1. Deleting a row shifts every later index up by one.

    Mutations return a Result and never raise; the lookup helpers
    (resolve_sheet_id, find_column_index, find_row_index) raise NotFoundError
    subclasses.
    """

    def __init__(self, settings, client=None, token_provider=None):
        self.settings = settings
        if client is None:
            token_provider = token_provider or TokenProvider(settings)
            client = gspread.authorize(token_provider.credentials)
        self.token_provider = token_provider
        self.client = client
        self._spreadsheet = None

    @property
    def spreadsheet(self):
        if self._spreadsheet is None:
            with self._api("Opening spreadsheet"):
                if self.token_provider is not None:
                    self.token_provider.get_token()
                self._spreadsheet = self.client.open_by_key(self.settings.spreadsheet_id)
        return self._spreadsheet

    @contextmanager
    def _api(self, action):
        try:
            yield
        except gspread.exceptions.SpreadsheetNotFound as e:
            raise ConfigurationError(
                f"Spreadsheet '{self.settings.spreadsheet_id}' not found. "
                "Check the id and that it is shared with the service account.") from e
        except gspread.exceptions.APIError as e:
            raise _api_error(action, e) from e
        except GoogleAuthError as e:
            raise AuthError(f"{action}: {e}") from e
        except requests.exceptions.RequestException as e:
            raise ApiError(f"{action} failed: {e}") from e

    def _worksheet(self, name, create=False):
        with self._api(f"Opening table {name}"):
            try:
                return self.spreadsheet.worksheet(name)
            except gspread.exceptions.WorksheetNotFound:
                if not create:
                    raise SheetNotFound(f'Sheet with name "{name}" not found.')
                logger.info("Creating table %s", name)
                return self.spreadsheet.add_worksheet(title=name, rows=NEW_SHEET_ROWS, cols=NEW_SHEET_COLS)

    def _headers(self, worksheet):
        with self._api(f"Reading headers of {worksheet.title}"):
            return _strip_trailing(worksheet.row_values(1))

    # --- reads ---

    def read_table(self, name):
        """Full value grid, rows padded to equal width. [] if the table is empty or missing."""
        try:
            worksheet = self._worksheet(name)
        except SheetNotFound:
            return []
        with self._api(f"Reading {name}"):
            values = worksheet.get_all_values()
        logger.debug("Read %d rows from %s", len(values), name)
        return _pad(values)

    def read_tables(self, *names):
        """Reads independent tables in parallel, results in argument order."""
        with ThreadPoolExecutor(max_workers=max(len(names), 1)) as pool:
            return list(pool.map(self.read_table, names))

    def headers(self, name):
        grid = self.read_table(name)
        return _strip_trailing(grid[0]) if grid else []

    # --- lookups (raise) ---

    def find_column_index(self, name, column_name):
        headers = self.headers(name)
        if column_name not in headers:
            raise ColumnNotFound(f'Column "{column_name}" not found in {name}.')
        return headers.index(column_name)

    def find_row_index(self, name, column_name, value):
        """First data row whose column equals value; resolves stable ids to positions."""
        grid = self.read_table(name)
        headers = _strip_trailing(grid[0]) if grid else []
        if column_name not in headers:
            raise ColumnNotFound(f'Column "{column_name}" not found in {name}.')
        position = headers.index(column_name)
        for index, row in enumerate(grid[1:], start=1):
            if row[position] == str(value):
                return index
        raise RowNotFound(f'No row with {column_name} = "{value}" in {name}.')

    def resolve_sheet_id(self, name):
        with self._api("Fetching spreadsheet metadata"):
            metadata = self.spreadsheet.fetch_sheet_metadata({"fields": "sheets.properties"})
        for sheet in metadata.get("sheets", []):
            properties = sheet.get("properties", {})
            if properties.get("title") == name:
                return properties["sheetId"]
        raise SheetNotFound(f'Sheet with name "{name}" not found.')

    # --- writes (Result) ---

    def _run(self, action, func, *args):
        try:
            data = func(*args)
        except (SheetsError, ValueError) as e:
            logger.error("Error %s: %s", action, e)
            return Result.fail(e)
        return Result.ok(data)

    def append_record(self, name, fields, is_header_write=False, migrate=True):
        """
        Appends one row aligned to the header order.

        A table without headers gets them from the keys of ``fields`` first.
        Keys missing from the headers become new columns at the right when
        ``migrate`` is set. ``is_header_write`` only writes the header row.
        """
        return self._run(f"appending row to {name}", self._append_record, name, fields,
                         is_header_write, migrate)

    def _append_record(self, name, fields, is_header_write, migrate):
        worksheet = self._worksheet(name, create=True)
        headers = self._headers(worksheet)
        keys = [str(key) for key in fields]

        if not headers:
            headers = keys
            if not is_header_write:
                logger.info("Synthesizing header row for %s: %s", name, headers)
                self._write_header_row(worksheet, headers)
        missing = [key for key in keys if key not in headers]

        if is_header_write:
            headers = headers + missing
            self._write_header_row(worksheet, [_cell(fields.get(h) or h) for h in headers])
            return headers

        if missing:
            if migrate:
                for column_name in missing:
                    self._add_column(worksheet, column_name)
                headers = self._headers(worksheet)
            else:
                logger.warning("Dropping fields without a column in %s: %s", name, missing)

        row = [_cell(fields.get(h)) for h in headers]
        with self._api(f"Appending to {name}"):
            worksheet.append_row(row, value_input_option="USER_ENTERED", table_range="A1")
        return headers

    def _write_header_row(self, worksheet, labels):
        if len(labels) > worksheet.col_count:
            with self._api(f"Resizing {worksheet.title}"):
                worksheet.add_cols(len(labels) - worksheet.col_count)
        with self._api(f"Writing headers of {worksheet.title}"):
            worksheet.update(values=[labels], range_name="A1", value_input_option="USER_ENTERED")

    def _add_column(self, worksheet, column_name):
        index = len(self._headers(worksheet))
        if index >= worksheet.col_count:
            with self._api(f"Resizing {worksheet.title}"):
                worksheet.add_cols(index + 1 - worksheet.col_count)
        label = column_letter(index)
        logger.info("Adding column %s at %s1 in %s", column_name, label, worksheet.title)
        with self._api(f"Adding column {column_name}"):
            worksheet.update(values=[[column_name]], range_name=f"{label}1",
                             value_input_option="USER_ENTERED")
        return index

    def add_column(self, name, column_name):
        def add():
            return self._add_column(self._worksheet(name, create=True), column_name)
        return self._run(f"adding column {column_name} to {name}", add)

    def ensure_columns(self, name, column_names):
        """Adds every absent column at the end, in order. Data contains the final headers."""
        def ensure():
            worksheet = self._worksheet(name, create=True)
            headers = self._headers(worksheet)
            for column_name in column_names:
                if column_name not in headers:
                    self._add_column(worksheet, column_name)
                    headers.append(column_name)
            return headers
        return self._run(f"ensuring columns of {name}", ensure)

    def rename_column(self, name, old_name, new_name):
        def rename():
            index = self.find_column_index(name, old_name)
            worksheet = self._worksheet(name)
            with self._api(f"Renaming column {old_name}"):
                worksheet.update(values=[[new_name]], range_name=f"{column_letter(index)}1",
                                 value_input_option="USER_ENTERED")
            return index
        return self._run(f"renaming column {old_name} in {name}", rename)

    def delete_column(self, name, column_name):
        def delete():
            index = self.find_column_index(name, column_name)
            sheet_id = self.resolve_sheet_id(name)
            self._batch_update([_delete_dimension(sheet_id, "COLUMNS", index)])
            return index
        return self._run(f"deleting column {column_name} from {name}", delete)

    def delete_row(self, name, row_index):
        def delete():
            if row_index < 0:
                raise RowNotFound(f"Invalid row index {row_index} for {name}.")
            sheet_id = self.resolve_sheet_id(name)
            self._batch_update([_delete_dimension(sheet_id, "ROWS", row_index)])
            return row_index
        return self._run(f"deleting row {row_index} from {name}", delete)

    def update_cell_range(self, name, row_index, start_col, end_col, values):
        """Overwrites columns start_col..end_col (0-based, inclusive) of one row."""
        def update():
            if row_index < 0 or start_col < 0 or end_col < start_col:
                raise ValueError(f"Invalid range row={row_index} cols={start_col}..{end_col}")
            if len(values) != end_col - start_col + 1:
                raise ValueError(
                    f"Expected {end_col - start_col + 1} values for the range, got {len(values)}")
            worksheet = self._worksheet(name)
            cell_range = f"{column_letter(start_col)}{row_index + 1}:{column_letter(end_col)}{row_index + 1}"
            with self._api(f"Updating {name}!{cell_range}"):
                worksheet.update(values=[[_cell(v) for v in values]], range_name=cell_range,
                                 value_input_option="RAW")
            return cell_range
        return self._run(f"updating row {row_index} of {name}", update)

    def update_record(self, name, row_index, fields):
        """Merges header-keyed values into a stored row; unknown keys are ignored."""
        try:
            grid = self.read_table(name)
        except SheetsError as e:
            logger.error("Error reading %s: %s", name, e)
            return Result.fail(e)
        if not grid:
            return Result.fail(f"No data found in {name}.")
        if row_index < 1 or row_index >= len(grid):
            return Result.fail(f"Row {row_index} not found in {name}.")
        headers = _strip_trailing(grid[0])
        row = list(grid[row_index][:len(headers)])
        for key, value in fields.items():
            if key in headers:
                row[headers.index(key)] = _cell(value)
        return self.update_cell_range(name, row_index, 0, len(headers) - 1, row)

    def batch_update(self, requests_):
        return self._run("running batch update", self._batch_update, requests_)

    def _batch_update(self, requests_):
        with self._api("Batch update"):
            return self.spreadsheet.batch_update({"requests": requests_})


def _delete_dimension(sheet_id, dimension, index):
    return {
        "deleteDimension": {
            "range": {
                "sheetId": sheet_id,
                "dimension": dimension,
                "startIndex": index,
                "endIndex": index + 1,
            }
        }
    }


def load_settings():
    try:
        if "gcp_service_account" in st.secrets:
            return SheetsSettings.from_mapping(
                st.secrets["gcp_service_account"],
                st.secrets.get("spreadsheet_id") or os.environ.get("GOOGLE_SHEETS_SHEET_ID"),
            )
    except FileNotFoundError:
        logger.debug("No Streamlit secrets file, reading settings from the environment")
    return SheetsSettings.from_env()


@st.cache_resource(ttl=3600)
def get_adapter():
    return SheetTableAdapter(load_settings())


def clear_connection_cache():
    get_adapter.clear()
    st.cache_data.clear()
