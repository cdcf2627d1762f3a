"""Exceptions raised by the usage ledger and its account stores."""


class LedgerError(Exception):
    """Base class for usage ledger errors."""


class ValidationError(LedgerError):
    """An argument failed validation; nothing was read or written."""


class RemoteUnavailable(LedgerError):
    """The remote account store failed or timed out."""


class AmbiguousWriteOutcome(RemoteUnavailable):
    """A write failed after it may already have been applied remotely.

    Never retried automatically. The next successful read resynchronises.
    """


class AccountNotFound(RemoteUnavailable):
    """A write targeted a user id with no stored account."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"No account stored for user '{user_id}'")
