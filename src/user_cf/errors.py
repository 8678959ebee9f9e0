"""Exception taxonomy for the user-based CF package."""

from __future__ import annotations


class UserCFError(Exception):
    """Base class for all errors raised by `user_cf`."""


class MalformedRecordError(UserCFError, ValueError):
    """A rating record could not be parsed into (user, item, value)."""

    def __init__(self, line_number: int, record: str, reason: str) -> None:
        self.line_number = int(line_number)
        self.record = record
        self.reason = reason
        super().__init__(f"line {self.line_number}: {reason} (record={record!r})")


class UnknownUserError(UserCFError, KeyError):
    """A user id was requested that is absent from the rating store."""

    def __init__(self, user_id: int) -> None:
        self.user_id = int(user_id)
        super().__init__(f"Unknown user_id: {self.user_id}")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message.
        return str(self.args[0])


class InsufficientDataError(UserCFError):
    """A similarity or evaluation score is undefined for lack of data."""
