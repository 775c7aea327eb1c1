"""
Auth API endpoints: sign-in, sign-up, sign-out and session reconciliation.
"""
from typing import Any, Dict

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from grocerypos.api.deps import get_pos_store, get_session_store
from grocerypos.services.pos_store import PosStore
from grocerypos.services.session_store import SessionStore

router = APIRouter()


class SignInRequest(BaseModel):
    """Request model for signing in."""
    email: str = Field(..., description="Account email")
    password: str = Field(..., description="Account password")


class SignUpRequest(SignInRequest):
    """Request model for creating an account."""
    full_name: str = Field(..., description="Cashier display name")


def session_payload(session_store: SessionStore) -> Dict[str, Any]:
    return {
        "user": session_store.user.model_dump() if session_store.user else None,
        "profile": (
            session_store.profile.model_dump(exclude={"active_session_token"})
            if session_store.profile else None
        ),
        "loading": session_store.loading,
        "auth_loading": session_store.auth_loading,
        "is_authenticated": session_store.is_authenticated,
        "is_admin": session_store.is_admin,
    }


@router.post("/sign-in")
async def sign_in(
    request: SignInRequest,
    session_store: SessionStore = Depends(get_session_store),
    pos_store: PosStore = Depends(get_pos_store),
):
    """
    Sign in on this register.

    Unapproved accounts are rejected and any session created during the
    attempt is ended. On success the register state is reloaded for the
    new cashier.
    """
    result = await session_store.sign_in(request.email, request.password)
    if not result.success:
        return JSONResponse(status_code=401, content=result.model_dump())

    pos_store.reset()
    await pos_store.load()
    return {**result.model_dump(), **session_payload(session_store)}


@router.post("/sign-up")
async def sign_up(
    request: SignUpRequest,
    session_store: SessionStore = Depends(get_session_store),
):
    """Create a cashier account pending admin approval."""
    result = await session_store.sign_up(request.email, request.password, request.full_name)
    if not result.success:
        return JSONResponse(status_code=400, content=result.model_dump())
    return result.model_dump()


@router.post("/sign-out")
async def sign_out(
    session_store: SessionStore = Depends(get_session_store),
    pos_store: PosStore = Depends(get_pos_store),
):
    await session_store.sign_out()
    pos_store.reset()
    return session_payload(session_store)


@router.post("/refresh")
async def refresh_session(session_store: SessionStore = Depends(get_session_store)):
    """Re-check the session; signs this register out if another device took over."""
    await session_store.refresh_session()
    return session_payload(session_store)


@router.get("/me")
async def get_me(session_store: SessionStore = Depends(get_session_store)):
    return session_payload(session_store)
