"""
Profile approval for administrators.
"""
import logging
from typing import List

from grocerypos.backend.client import BackendClient
from grocerypos.core.exceptions import AuthorizationError, ValidationError
from grocerypos.schemas.pos import Profile
from grocerypos.services.session_store import SessionStore

logger = logging.getLogger(__name__)


class AdminService:
    """Pending-profile review; every call requires an approved admin session."""

    def __init__(self, backend: BackendClient, session_store: SessionStore):
        self.backend = backend
        self.session_store = session_store

    def _require_admin(self) -> None:
        if not self.session_store.is_admin:
            raise AuthorizationError("You don't have permission to access this page.")

    async def fetch_pending_profiles(self) -> List[Profile]:
        self._require_admin()
        rows = await self.backend.select_pending_profiles()
        logger.info(f"Found {len(rows)} pending profiles")
        return [Profile(**row) for row in rows]

    async def approve_profile(self, profile_id: str) -> Profile:
        self._require_admin()
        existing = await self.backend.select_profile(profile_id)
        if existing is None:
            raise ValidationError("User not found")
        row = await self.backend.update_profile(profile_id, {"approved": True})
        logger.info(f"Profile approved: {profile_id}")
        return Profile(**row)
