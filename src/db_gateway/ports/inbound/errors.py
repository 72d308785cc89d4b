"""Error taxonomy of the public operation surface.

Every failure of a public operation is one of these. Deferred operations
resolve their future with the error; synchronous variants raise it.
"""

from __future__ import annotations

from db_gateway.ports.outbound.sql_engine import SQLITE_ERROR


class DatabaseError(Exception):
    """Base class for gateway errors.

    Attributes:
        message: Human-readable description, usually the engine's message.
        code: Engine result code, or SQLITE_ERROR when none applies.
    """

    kind = "database_error"

    def __init__(self, message: str, code: int = SQLITE_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.code = code

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, code={self.code})"


class OpenFailedError(DatabaseError):
    """Raised when a connection or statement could not be obtained.

    Covers open failures and prepare failures: in both cases no usable
    statement exists.
    """

    kind = "open_failed"


class BindFailedError(DatabaseError):
    """Raised when an argument could not be bound. The statement never steps."""

    kind = "bind_failed"


class QueryFailedError(DatabaseError):
    """Raised when stepping a statement fails."""

    kind = "query_failed"


class DecodeFailedError(DatabaseError):
    """Raised when a row cannot be decoded into a typed object.

    No rows of the failed query are returned.

    Attributes:
        cause: The underlying coercion or validation error.
    """

    kind = "decode_failed"

    def __init__(self, cause: Exception) -> None:
        super().__init__(f"decode failed: {cause}")
        self.cause = cause


class UnexpectedError(DatabaseError):
    """Raised for failures that fit no other category."""

    kind = "unexpected"
