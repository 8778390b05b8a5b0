"""
Error taxonomy for deckster.

ValidationError is surfaced to the user. NotFoundError never leaves the
application layer: it is caught and turned into a logged no-op. StorageError is
raised by key-value adapters and absorbed by the storage service.
"""


class DecksterError(Exception):
    """Base class for all deckster errors."""


class ValidationError(DecksterError):
    """User input was rejected; the operation was aborted with no state change."""


class NotFoundError(DecksterError):
    """A deck or card id did not resolve."""

    def __init__(self, kind: str, ident: object):
        super().__init__(f"{kind} not found: {ident!r}")
        self.kind = kind
        self.ident = ident


class StorageError(DecksterError):
    """A key-value store read or write failed."""


class SessionError(DecksterError):
    """A study-session transition was requested from a state that does not allow it."""
