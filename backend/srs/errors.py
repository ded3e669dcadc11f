"""Errors raised by the memorization core.

Each is propagated to the caller unchanged; the API layer maps them to
HTTP status codes and the CLI prints them.
"""


class MemorizerError(Exception):
    """Base class for memorization core errors."""


class NotFoundError(MemorizerError):
    """An operation referenced a sentence pair that does not exist."""

    def __init__(self, pair_id: int) -> None:
        self.pair_id = pair_id
        super().__init__(f"Sentence pair {pair_id} not found")


class InvalidInputError(MemorizerError):
    """A payload was malformed and was rejected before touching storage."""


class StorageUnavailableError(MemorizerError):
    """The database could not be reached or written."""
