"""
Error taxonomy for the social graph core.

Validation errors are raised before any store access. Transient store
failures are retried in ``socialgraph.core.retry`` and surface as
``Unavailable`` once retries are exhausted.
"""


class GraphError(Exception):
    """Base class for all social graph errors."""


class InvalidArgument(GraphError, ValueError):
    """Self-follow attempt, malformed identifier or out-of-range parameter."""


class NotFound(GraphError, LookupError):
    """A referenced user does not exist in the user directory."""


class Unavailable(GraphError):
    """The backing store could not be reached after bounded retries."""

    def __init__(self, message: str, attempts: int = 0):
        super().__init__(message)
        self.attempts = attempts
