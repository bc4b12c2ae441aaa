"""Persistence layer for items, match records and notifications.

Public API:
    # Database initialization and session management
    - init_database(database_url: str) -> None
    - get_session() -> ContextManager[Session]
    - close_database() -> None
    - get_engine() -> Engine

    # Repository classes
    - ItemRepository: lost/found reports and their enrichment
    - MatchRepository: match records, including the atomic insert-if-absent
    - NotificationRepository: owner notifications

    # Exceptions
    - PersistenceError and its subclasses

Example usage:
    >>> from app.persistence import init_database, get_session, ItemRepository
    >>> init_database("sqlite:///./data/lost_found.db")
    >>> with get_session() as session:
    ...     item = ItemRepository(session).get_by_id("abc123")
"""

from .database import (
    DEFAULT_DATABASE_URL,
    close_database,
    get_engine,
    get_session,
    init_database,
)
from .exceptions import (
    DatabaseConnectionError,
    DataIntegrityError,
    PersistenceError,
    RecordNotFoundError,
)
from .repositories import ItemRepository, MatchRepository, NotificationRepository

__all__ = [
    "DEFAULT_DATABASE_URL",
    "init_database",
    "get_session",
    "close_database",
    "get_engine",
    "ItemRepository",
    "MatchRepository",
    "NotificationRepository",
    "PersistenceError",
    "DatabaseConnectionError",
    "RecordNotFoundError",
    "DataIntegrityError",
]
