"""
FastAPI dependencies exposing the register's stores.

The stores are created once in the application lifespan and live on
``app.state``; endpoints receive them through these dependencies.
"""
from fastapi import Depends, HTTPException, Request

from grocerypos.core.notifications import Notifier
from grocerypos.services.admin_service import AdminService
from grocerypos.services.catalog_service import CatalogService
from grocerypos.services.pos_store import PosStore
from grocerypos.services.session_store import SessionStore


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_pos_store(request: Request) -> PosStore:
    return request.app.state.pos_store


def get_catalog(request: Request) -> CatalogService:
    return request.app.state.pos_store.catalog


def get_notifier(request: Request) -> Notifier:
    return request.app.state.notifier


def get_admin_service(request: Request) -> AdminService:
    return request.app.state.admin_service


def require_session(session_store: SessionStore = Depends(get_session_store)) -> SessionStore:
    """Reject requests unless an approved profile is signed in on this register."""
    if not session_store.is_authenticated:
        raise HTTPException(status_code=401, detail="Not signed in")
    return session_store
