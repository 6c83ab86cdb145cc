"""Database exceptions."""

class DatabaseError(Exception):
    """Base class for database errors."""
    pass

class DatabaseUnavailableError(DatabaseError):
    """Raised when the order database cannot be reached or a query fails.

    Aggregation treats this as fatal for the current call; callers own retries.
    """
    pass
