from dataclasses import dataclass, field
from typing import Any, Optional


class SheetsError(Exception):
    """Base exception for the spreadsheet storage layer."""


class ConfigurationError(SheetsError):
    """Raised when credentials or the spreadsheet id are missing or unusable."""


class AuthError(SheetsError):
    """Raised when the service account token exchange fails."""


class NotFoundError(SheetsError):
    """Raised when a sheet, column or row lookup finds nothing."""


class SheetNotFound(NotFoundError):
    pass


class ColumnNotFound(NotFoundError):
    pass


class RowNotFound(NotFoundError):
    pass


class ApiError(SheetsError):
    """Raised when the Sheets API answers with a non-2xx status."""

    def __init__(self, message, status_code=None, body=""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


@dataclass
class Result:
    """Outcome of a caller-facing operation. The UI only looks at ``success``."""

    success: bool
    error: Optional[str] = None
    data: Any = None
    exception: Optional[BaseException] = field(default=None, repr=False, compare=False)

    @classmethod
    def ok(cls, data=None):
        return cls(True, None, data)

    @classmethod
    def fail(cls, error):
        exception = error if isinstance(error, BaseException) else None
        return cls(False, str(error) or "An unknown error occurred.", None, exception)

    def __bool__(self):
        return self.success
