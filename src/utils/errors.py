from typing import Dict, Optional


class InvMgrError(Exception):
    """Base class for every error raised by the inventory manager."""


class ConfigurationError(InvMgrError):
    """Raised when configuration values are missing or invalid."""


class AuthError(InvMgrError):
    pass


class InvalidCredentials(AuthError):
    def __init__(self, message: str = "Invalid username or password"):
        super().__init__(message)


class AuthUnavailable(AuthError):
    """The credential repository could not be reached."""

    def __init__(self, message: str = "Database connection error"):
        super().__init__(message)


class RepositoryError(InvMgrError):
    """Transport, auth or storage failure of the data service."""


class NotFound(RepositoryError):
    def __init__(self, table: str, key: Optional[str] = None):
        self.table = table
        self.key = key
        super().__init__(f"No row in {table} with id {key!r}")


class ValidationError(InvMgrError):
    """
    Field-level errors of a product draft.

    errors maps field -> human readable message,
    codes maps field -> machine code (e.g. "EmptyName")
    """

    def __init__(self, errors: Dict[str, str], codes: Dict[str, str]):
        self.errors = errors
        self.codes = codes
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))


class RoleGateError(AssertionError):
    """
    A mutating product action was invoked without an admin session.
    The UI must never expose those entry points, so this is a gating bug.
    """
