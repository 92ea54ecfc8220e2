"""
Error taxonomy for Yomikata.

Storage failures are fatal for the current operation and are never retried
here. ``NotFound`` is recoverable where the search state machine says so and
a genuine error everywhere else.
"""


class YomikataError(Exception):
    """Base class for all Yomikata errors."""


class StorageError(YomikataError):
    """Connection or query failure in the dictionary store."""


class NotFound(YomikataError):
    """A literal or record is absent from the store."""

    def __init__(self, what: str, key):
        super().__init__(f"{what} not found: {key!r}")
        self.what = what
        self.key = key


class UndefinedQuery(YomikataError):
    """The request is malformed or incomplete."""


class EncodingError(YomikataError):
    """Malformed text input."""
