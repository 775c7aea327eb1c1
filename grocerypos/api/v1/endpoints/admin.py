"""
Admin API endpoints for approving pending cashier accounts.
"""
from fastapi import APIRouter, Depends, HTTPException

from grocerypos.api.deps import get_admin_service, get_notifier, require_session
from grocerypos.backend.errors import BackendError
from grocerypos.core.exceptions import AuthorizationError, ValidationError
from grocerypos.core.notifications import Notifier
from grocerypos.services.admin_service import AdminService

router = APIRouter(dependencies=[Depends(require_session)])


@router.get("/pending-profiles")
async def pending_profiles(
    admin_service: AdminService = Depends(get_admin_service),
    notifier: Notifier = Depends(get_notifier),
):
    try:
        profiles = await admin_service.fetch_pending_profiles()
    except AuthorizationError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except BackendError as e:
        notifier.error(f"Failed to fetch pending users: {e.message}")
        raise HTTPException(status_code=502, detail=e.message)

    return {
        "profiles": [p.model_dump(include={"id", "full_name", "role", "approved"}) for p in profiles],
        "count": len(profiles),
    }


@router.post("/profiles/{profile_id}/approve")
async def approve_profile(
    profile_id: str,
    admin_service: AdminService = Depends(get_admin_service),
    notifier: Notifier = Depends(get_notifier),
):
    try:
        profile = await admin_service.approve_profile(profile_id)
    except AuthorizationError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except ValidationError as e:
        notifier.error(str(e))
        raise HTTPException(status_code=404, detail=str(e))
    except BackendError as e:
        notifier.error("Failed to approve user")
        raise HTTPException(status_code=502, detail=e.message)

    notifier.success("User approved successfully")
    return profile.model_dump(include={"id", "full_name", "role", "approved"})
