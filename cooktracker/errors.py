class CookTrackerError(Exception):
    """Base class for errors raised by the recipe library."""


class FetchError(CookTrackerError):
    """The backing store could not be read."""


class PersistenceError(CookTrackerError):
    """Staged changes could not be written to the backing store.

    The store is rolled back before this error reaches callers, so the durable
    and the in-memory state agree again and the operation can be retried.
    """


__all__ = ["CookTrackerError", "FetchError", "PersistenceError"]
