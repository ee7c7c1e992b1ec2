import os
from dataclasses import dataclass

from dotenv import load_dotenv

from sheetflow.errors import ConfigurationError

APP_TITLE = "SheetFlow"
SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
TOKEN_URI = "https://oauth2.googleapis.com/token"

TABLE_TICKETS = os.environ.get("SHEETFLOW_TABLE_TICKETS", "Sheet1")
TABLE_MEMBERS = os.environ.get("SHEETFLOW_TABLE_MEMBERS", "Sheet2")
TABLE_PROJECTS = os.environ.get("SHEETFLOW_TABLE_PROJECTS", "Sheet3")
TABLE_KANBAN = os.environ.get("SHEETFLOW_TABLE_KANBAN", "Sheet4")
TABLE_QUESTIONS = os.environ.get("SHEETFLOW_TABLE_QUESTIONS", "Sheet5")

TICKET_STATUSES = ["Open", "In Progress", "Done"]
KANBAN_STATUSES = ["todo", "inprogress", "review", "done"]
KANBAN_TITLES = {"todo": "To Do", "inprogress": "In Progress", "review": "Review", "done": "Done"}
KANBAN_PRIORITIES = ["Low", "Medium", "High", "Critical"]
PREDEFINED_TEAMS = ["CM", "SMD", "QAC", "Class Ops"]
DEFAULT_MEMBER = "Team Default"

MEMBER_COLUMNS = ["Name", "Team"]
QUESTION_COLUMNS = ["Team", "QuestionText"]
PROJECT_COLUMNS = ["Project ID", "Start Date", "End Date", "Assignee", "Kanban Initialized"]
KANBAN_COLUMNS = ["Project ID", "Task ID", "Title", "Status", "Assignee", "Due Date",
                  "Description", "Type", "Priority", "Tags"]

ADMIN_USER = "admin"


@dataclass(frozen=True)
class SheetsSettings:
    """Service account credentials and the target spreadsheet, checked on creation."""

    client_email: str
    private_key: str
    spreadsheet_id: str

    def __post_init__(self):
        missing = [name for name in ("client_email", "private_key", "spreadsheet_id")
                   if not (getattr(self, name) or "").strip()]
        if missing:
            raise ConfigurationError(f"Missing Google Sheets settings: {', '.join(missing)}")
        # keys copied from .env files keep their newlines escaped
        object.__setattr__(self, "private_key", self.private_key.replace("\\n", "\n"))

    @classmethod
    def from_mapping(cls, data, spreadsheet_id=None):
        return cls(
            client_email=data.get("client_email", ""),
            private_key=data.get("private_key", ""),
            spreadsheet_id=spreadsheet_id or data.get("spreadsheet_id", ""),
        )

    @classmethod
    def from_env(cls, environ=None):
        if environ is None:
            load_dotenv()
            environ = os.environ
        return cls(
            client_email=environ.get("GOOGLE_SHEETS_CLIENT_EMAIL", ""),
            private_key=environ.get("GOOGLE_SHEETS_PRIVATE_KEY", ""),
            spreadsheet_id=environ.get("GOOGLE_SHEETS_SHEET_ID", ""),
        )

    def service_account_info(self):
        return {
            "type": "service_account",
            "client_email": self.client_email,
            "private_key": self.private_key,
            "token_uri": TOKEN_URI,
        }


def admin_password():
    return os.environ.get("SHEETFLOW_ADMIN_PASSWORD", "admin")


def log_level():
    return os.environ.get("SHEETFLOW_LOG_LEVEL", "INFO").upper()
