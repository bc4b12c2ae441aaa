"""Persistence layer exceptions.

Everything raised by the store derives from PersistenceError so callers can
treat "the store failed" as one case.
"""


class PersistenceError(Exception):
    """Base exception for all persistence layer errors."""


class DatabaseConnectionError(PersistenceError):
    """Raised when the database cannot be initialized or reached."""


class RecordNotFoundError(PersistenceError):
    """Raised when an operation needs a record that does not exist.

    Plain lookups return None instead.
    """


class DataIntegrityError(PersistenceError):
    """Raised on a constraint violation that is not an expected duplicate."""
