from typing import Optional


class NoGranteesSpecifiedError(ValueError):
    pass


class QueryError(Exception):
    """Observed state could not be fetched or decoded."""

    def __init__(self, message: str, sql: Optional[str] = None):
        super().__init__(message)
        self.sql = sql


class UnknownGrantTypeError(Exception):
    def __init__(self, granted_to):
        super().__init__(f"Role granted_to unrecognized type({granted_to})")
        self.granted_to = granted_to


class StatementError(Exception):
    """A grant, revoke or alter statement failed at the database."""

    def __init__(self, message: str, sql: str, errno: Optional[int] = None):
        super().__init__(message)
        self.sql = sql
        self.errno = errno
