"""Context propagation for structured logging.

Fields pushed here (item_id, run_id, trigger, the lost/found pair being
dispatched) are attached to every record emitted inside the scope. The
storage is a ContextVar, so worker threads and asyncio tasks each see
their own copy.
"""

from contextvars import ContextVar, Token
from typing import Any, Dict, Optional

LogContextVar: ContextVar[Dict[str, Any]] = ContextVar("log_context", default={})


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the current logging context."""
    return LogContextVar.get().copy()


def push_log_context(**kwargs) -> Token:
    """Merge fields into the logging context.

    Existing fields with the same name are replaced until the returned
    token is handed to pop_log_context().

    Args:
        **kwargs: Fields to attach to every record in this context

    Returns:
        Token that restores the previous context

    Example:
        >>> token = push_log_context(item_id="abc123", trigger="sweep")
        >>> # ... every record logged here carries item_id and trigger ...
        >>> pop_log_context(token)
    """
    return LogContextVar.set({**LogContextVar.get(), **kwargs})


def pop_log_context(token: Token) -> None:
    """Restore the logging context captured by ``token``.

    Args:
        token: Token returned from push_log_context()

    Example:
        >>> token = push_log_context(run_id="abc123")
        >>> pop_log_context(token)
    """
    LogContextVar.reset(token)


def clear_log_context() -> None:
    """Drop every context field (test helper)."""
    LogContextVar.set({})


class log_context:
    """Context manager for scoped logging context.

    Example:
        >>> with log_context(item_id="abc123", trigger="event"):
        ...     logger.info("Enriching item")  # carries item_id and trigger
    """

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.token: Optional[Token] = None

    def __enter__(self):
        self.token = push_log_context(**self.kwargs)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.token is not None:
            pop_log_context(self.token)
        return False
