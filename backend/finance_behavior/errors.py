"""Error types raised by the finance behavior services."""


class FinanceError(Exception):
    """Base class for application errors."""

    code = "finance_error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(FinanceError):
    """Caller supplied a value that cannot be used (bad date, bad category...)."""

    code = "invalid_input"
    status_code = 400


class StorageUnavailableError(FinanceError):
    """The backing store could not be reached or failed mid-query."""

    code = "storage_unavailable"
    status_code = 503
