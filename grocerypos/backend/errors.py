"""
Errors raised by backend calls.
"""


class BackendError(Exception):
    """An external call failed; message is safe to show to the user."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthError(BackendError):
    """The auth provider rejected the request."""


class DatabaseError(BackendError):
    """A table or RPC call failed."""


class StorageError(BackendError):
    """An object storage call failed."""
