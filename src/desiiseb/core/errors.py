"""Exception hierarchy shared by repositories and services."""


class FeedCoreError(RuntimeError):
    """Base exception for failures raised by the feed core."""


class NotFoundError(FeedCoreError, LookupError):
    """Raised when a profile or post lookup misses."""


class ValidationError(FeedCoreError, ValueError):
    """Raised when input is rejected before any write reaches the store."""


class ConflictError(FeedCoreError):
    """Raised when an insert violates a uniqueness constraint.

    Toggle operations treat this as a benign "already present" outcome;
    other callers surface it.
    """


class SourceUnavailableError(FeedCoreError):
    """Raised when the content store fails for any reason other than a conflict."""
