"""
Typed errors raised by the analytics engine.

InvalidArgument means the caller supplied a bad shape or value, NotFound means
the caller referenced an entity missing from the supplied records. Routers map
them to 400 and 404 respectively.
"""


class AnalyticsError(Exception):
    """Base class for every error the engine raises on purpose."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidArgument(AnalyticsError, ValueError):
    pass


class NotFound(AnalyticsError, LookupError):
    pass
