"""
Backend collaborator: auth provider, tables, object storage and row-change
notifications, consumed by the stores through request/response calls.
"""

from .auth import AuthProvider, AuthSubscription
from .client import BackendClient
from .errors import AuthError, BackendError, DatabaseError, StorageError
from .realtime import RealtimeClient, RealtimeSubscription
from .storage import ObjectStorage

__all__ = [
    "AuthProvider", "AuthSubscription",
    "BackendClient",
    "BackendError", "AuthError", "DatabaseError", "StorageError",
    "RealtimeClient", "RealtimeSubscription",
    "ObjectStorage",
]
