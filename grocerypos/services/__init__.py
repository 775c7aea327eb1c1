"""
Business logic services for the Grocery POS application.
"""

from .admin_service import AdminService
from .catalog_service import CatalogService
from .pos_store import PosStore
from .session_store import SessionStore

__all__ = [
    "AdminService",
    "CatalogService",
    "PosStore",
    "SessionStore",
]
