"""
Session/profile store for the register.

Holds the signed-in identity and its profile, mediates sign-in, sign-up and
sign-out, and enforces a single active session per account: each sign-in
rotates ``profiles.active_session_token`` and keeps a copy in device-local
storage. A device whose copy no longer matches the profile (another device
signed in since) is signed out, either when the profile row-change
notification arrives or on the next ``refresh_session``.
"""
import logging
import secrets
from typing import Any, Dict, Optional

from grocerypos.backend.auth import AuthSubscription
from grocerypos.backend.client import BackendClient
from grocerypos.backend.errors import BackendError
from grocerypos.backend.realtime import RealtimeSubscription
from grocerypos.core.local_storage import SESSION_TOKEN_KEY, LocalStorage
from grocerypos.core.notifications import Notifier
from grocerypos.models.profiles import UserRole
from grocerypos.schemas.pos import AuthResult, AuthSession, AuthUser, Profile

logger = logging.getLogger(__name__)

PENDING_APPROVAL_MESSAGE = "Your account is pending approval by an administrator."
SESSION_REPLACED_MESSAGE = "You have been signed out because your account was signed in on another device."


class SessionStore:
    """Owns the identity/profile state of one device."""

    def __init__(self, backend: BackendClient, local_storage: LocalStorage, notifier: Notifier):
        self.backend = backend
        self.local_storage = local_storage
        self.notifier = notifier

        self.user: Optional[AuthUser] = None
        self.profile: Optional[Profile] = None
        self.loading = True
        self.auth_loading = False

        self._active = False
        self._auth_subscription: Optional[AuthSubscription] = None
        self._profile_subscription: Optional[RealtimeSubscription] = None
        self._watched_profile_id: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None and self.profile is not None and self.profile.approved

    @property
    def is_admin(self) -> bool:
        return self.is_authenticated and self.profile.role == UserRole.ADMIN.value

    # Lifecycle

    async def start(self) -> None:
        """Subscribe to auth changes and resolve the persisted session."""
        self._active = True
        self.loading = True
        self._auth_subscription = self.backend.auth.on_auth_state_change(self._on_auth_state_change)
        try:
            await self.refresh_session()
        finally:
            self.loading = False

    async def stop(self) -> None:
        """Tear down every listener; results settling afterwards are ignored."""
        self._active = False
        if self._auth_subscription is not None:
            self._auth_subscription.unsubscribe()
            self._auth_subscription = None
        await self._unwatch_profile()

    # Operations

    async def sign_in(self, email: str, password: str) -> AuthResult:
        if not email.strip() or not password:
            return self._fail("Email and password are required")

        self.auth_loading = True
        try:
            try:
                session = await self.backend.auth.sign_in_with_password(email, password)
            except BackendError as e:
                return self._fail(e.message)

            try:
                row = await self.backend.select_profile(session.user.id)
            except BackendError as e:
                await self._discard_session()
                return self._fail(e.message)

            if row is None:
                await self._discard_session()
                return self._fail("Profile not found for this account")

            if not row.get("approved"):
                await self._discard_session()
                return self._fail(PENDING_APPROVAL_MESSAGE)

            token = secrets.token_urlsafe(32)
            # Stored locally first so our own row-change notification matches
            self.local_storage.set(SESSION_TOKEN_KEY, token)
            try:
                row = await self.backend.update_profile(session.user.id, {"active_session_token": token})
            except BackendError as e:
                await self._discard_session()
                return self._fail(e.message)

            self.user = session.user
            self.profile = Profile(**row)
            await self._watch_profile(self.profile.id)
            logger.info(f"Session started for {self.user.id}")
            return AuthResult(success=True)
        finally:
            self.auth_loading = False

    async def sign_up(self, email: str, password: str, full_name: str) -> AuthResult:
        if not email.strip() or not password or not full_name.strip():
            return self._fail("Full name, email and password are required")

        self.auth_loading = True
        try:
            try:
                user = await self.backend.auth.sign_up(email, password)
            except BackendError as e:
                return self._fail(e.message)

            try:
                await self.backend.insert_profile(
                    {
                        "id": user.id,
                        "full_name": full_name.strip(),
                        "role": UserRole.CASHIER.value,
                        "approved": False,
                        "active_session_token": None,
                    }
                )
            except BackendError as e:
                logger.error(f"Profile creation failed for {user.id}: {e}")
                # Compensate: the identity and profile live in different systems
                try:
                    await self.backend.auth.admin_delete_user(user.id)
                except BackendError as rollback_error:
                    logger.error(f"Failed to roll back identity {user.id}: {rollback_error}")
                return self._fail("Failed to create user profile")

            self.notifier.success("Account created successfully. An administrator must approve it before you can sign in.")
            return AuthResult(success=True, message=PENDING_APPROVAL_MESSAGE)
        finally:
            self.auth_loading = False

    async def sign_out(self) -> None:
        self.auth_loading = True
        try:
            await self.backend.auth.sign_out()
        except BackendError as e:
            self.notifier.error(e.message)
        finally:
            self.local_storage.remove(SESSION_TOKEN_KEY)
            self.user = None
            self.profile = None
            await self._unwatch_profile()
            self.auth_loading = False

    async def refresh_session(self) -> None:
        """Re-read session and profile; sign out if another device took over."""
        try:
            session = await self.backend.auth.get_session()
            if session is None:
                self._clear_identity()
                await self._unwatch_profile()
                return
            row = await self.backend.select_profile(session.user.id)
        except BackendError as e:
            logger.error(f"Failed to refresh session: {e}")
            self.notifier.error(e.message)
            return

        if not self._active:
            return

        # Set before the checks so a forced sign-out also ends the persisted session
        self.user = session.user

        if row is None:
            await self._force_sign_out("Profile not found for this account")
            return

        if row.get("active_session_token") != self.local_storage.get(SESSION_TOKEN_KEY):
            await self._force_sign_out(SESSION_REPLACED_MESSAGE)
            return

        self.profile = Profile(**row)
        await self._watch_profile(self.profile.id)

    # Listeners

    async def _on_auth_state_change(self, event: str, session: Optional[AuthSession]) -> None:
        if not self._active:
            return
        logger.info(f"Auth state changed: {event}")
        if session is None:
            self._clear_identity()
            await self._unwatch_profile()
            return
        self.user = session.user
        await self._fetch_profile(session.user.id)

    async def _fetch_profile(self, user_id: str) -> None:
        try:
            row = await self.backend.select_profile(user_id)
        except BackendError as e:
            logger.error(f"Error fetching profile: {e}")
            return
        # Ignore results for a torn-down store or a since-changed identity
        if not self._active or self.user is None or self.user.id != user_id or row is None:
            return
        self.profile = Profile(**row)
        await self._watch_profile(user_id)

    async def handle_profile_change(self, payload: Dict[str, Any]) -> None:
        """Row-change notification for the watched profile."""
        if not self._active or payload.get("type") != "UPDATE":
            return
        new = payload.get("new") or {}
        if self.profile is None or new.get("id") != self.profile.id:
            return

        if new.get("active_session_token") != self.local_storage.get(SESSION_TOKEN_KEY):
            await self._force_sign_out(SESSION_REPLACED_MESSAGE)
            return
        self.profile = Profile(**new)

    async def _watch_profile(self, profile_id: str) -> None:
        if self.backend.realtime is None or not self._active:
            return
        if self._watched_profile_id == profile_id and self._profile_subscription is not None:
            return
        await self._unwatch_profile()
        try:
            self._profile_subscription = await self.backend.realtime.subscribe_row(
                "profiles", profile_id, self.handle_profile_change
            )
            self._watched_profile_id = profile_id
        except BackendError as e:
            logger.error(f"Session invalidation notifications unavailable: {e}")

    async def _unwatch_profile(self) -> None:
        subscription = self._profile_subscription
        self._profile_subscription = None
        self._watched_profile_id = None
        if subscription is not None:
            await subscription.unsubscribe()

    # Helpers

    async def _force_sign_out(self, message: str) -> None:
        """Terminal action of both the push and the poll path; safe to run twice."""
        if self.user is None and self.profile is None:
            return
        self._clear_identity()
        self.local_storage.remove(SESSION_TOKEN_KEY)
        await self._unwatch_profile()
        try:
            await self.backend.auth.sign_out()
        except BackendError as e:
            logger.error(f"Failed to end replaced session: {e}")
        logger.warning(f"Forced sign-out: {message}")
        self.notifier.notify("Signed out", message, variant="destructive")

    async def _discard_session(self) -> None:
        """End a session created during a rejected sign-in attempt."""
        try:
            await self.backend.auth.sign_out()
        except BackendError as e:
            logger.error(f"Failed to end rejected session: {e}")
        self._clear_identity()
        await self._unwatch_profile()

    def _clear_identity(self) -> None:
        self.user = None
        self.profile = None

    def _fail(self, message: str) -> AuthResult:
        self.notifier.error(message)
        return AuthResult(success=False, message=message)
