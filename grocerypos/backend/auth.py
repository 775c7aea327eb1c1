"""
Auth provider: identities, password sign-in and auth state change events.

One provider instance belongs to one device. It keeps the device's current
session in memory, persists it to local storage so a restarted register
resumes where it left off, and notifies listeners on every sign-in/sign-out.
"""
import inspect
import logging
import secrets
from typing import Awaitable, Callable, List, Optional, Union

import bcrypt
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from grocerypos.backend.errors import AuthError
from grocerypos.core.config import settings
from grocerypos.core.database import SessionLocal, get_db_context
from grocerypos.core.local_storage import AUTH_SESSION_KEY, LocalStorage
from grocerypos.models.profiles import AuthUser as AuthUserRecord
from grocerypos.schemas.pos import AuthSession, AuthUser

logger = logging.getLogger(__name__)

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"

AuthCallback = Callable[[str, Optional[AuthSession]], Union[None, Awaitable[None]]]


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Hash a password with bcrypt."""
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against a bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


class AuthSubscription:
    """Handle returned by ``on_auth_state_change``."""

    def __init__(self, provider: "AuthProvider", callback: AuthCallback):
        self._provider = provider
        self.callback = callback

    def unsubscribe(self) -> None:
        self._provider._remove_listener(self)


class AuthProvider:
    """Password auth over the ``auth_users`` table."""

    def __init__(
        self,
        session_factory=SessionLocal,
        local_storage: Optional[LocalStorage] = None,
        bcrypt_rounds: Optional[int] = None,
        min_password_length: Optional[int] = None,
    ):
        self._session_factory = session_factory
        self._local_storage = local_storage
        self._bcrypt_rounds = bcrypt_rounds or settings.bcrypt_rounds
        self._min_password_length = min_password_length or settings.min_password_length
        self._session: Optional[AuthSession] = None
        self._restored = False
        self._listeners: List[AuthSubscription] = []

    # Listeners

    def on_auth_state_change(self, callback: AuthCallback) -> AuthSubscription:
        subscription = AuthSubscription(self, callback)
        self._listeners.append(subscription)
        return subscription

    def _remove_listener(self, subscription: AuthSubscription) -> None:
        if subscription in self._listeners:
            self._listeners.remove(subscription)

    async def _emit(self, event: str, session: Optional[AuthSession]) -> None:
        for subscription in list(self._listeners):
            try:
                result = subscription.callback(event, session)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Auth state listener failed on {event}: {e}", exc_info=True)

    # Session persistence

    def _persist(self, session: Optional[AuthSession]) -> None:
        if self._local_storage is None:
            return
        if session is None:
            self._local_storage.remove(AUTH_SESSION_KEY)
        else:
            self._local_storage.set(AUTH_SESSION_KEY, session.model_dump())

    def _find_user(self, user_id: str) -> Optional[AuthUser]:
        try:
            with get_db_context(self._session_factory) as db:
                record = db.get(AuthUserRecord, user_id)
                if record is None:
                    return None
                return AuthUser(id=record.id, email=record.email)
        except SQLAlchemyError as e:
            logger.error(f"Failed to look up user {user_id}: {e}")
            raise AuthError("Failed to load session") from e

    # Public API

    async def sign_up(self, email: str, password: str) -> AuthUser:
        """Create an identity. Does not start a session."""
        email = email.strip().lower()
        if len(password) < self._min_password_length:
            raise AuthError(f"Password should be at least {self._min_password_length} characters")

        record = AuthUserRecord(email=email, password_hash=hash_password(password, self._bcrypt_rounds))
        try:
            with get_db_context(self._session_factory) as db:
                db.add(record)
                db.flush()
                user = AuthUser(id=record.id, email=record.email)
        except IntegrityError as e:
            raise AuthError("User already registered") from e
        except SQLAlchemyError as e:
            logger.error(f"Failed to create identity for {email}: {e}")
            raise AuthError("Failed to create account") from e

        logger.info(f"Identity created: {user.id}")
        return user

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        email = email.strip().lower()
        try:
            with get_db_context(self._session_factory) as db:
                record = db.query(AuthUserRecord).filter(AuthUserRecord.email == email).first()
                user = AuthUser(id=record.id, email=record.email) if record else None
                password_hash = record.password_hash if record else None
        except SQLAlchemyError as e:
            logger.error(f"Sign-in lookup failed for {email}: {e}")
            raise AuthError("Failed to sign in") from e

        if user is None or not verify_password(password, password_hash):
            raise AuthError("Invalid login credentials")

        session = AuthSession(access_token=secrets.token_urlsafe(32), user=user)
        self._session = session
        self._restored = True
        self._persist(session)
        logger.info(f"Signed in: {user.id}")
        await self._emit(SIGNED_IN, session)
        return session

    async def sign_out(self) -> None:
        had_session = self._session is not None
        self._session = None
        self._restored = True
        self._persist(None)
        if had_session:
            logger.info("Signed out")
            await self._emit(SIGNED_OUT, None)

    async def get_session(self) -> Optional[AuthSession]:
        """Current session, restoring the persisted one on first use."""
        if self._session is None and not self._restored and self._local_storage is not None:
            self._restored = True
            stored = self._local_storage.get(AUTH_SESSION_KEY)
            if stored:
                session = AuthSession.model_validate(stored)
                if self._find_user(session.user.id) is not None:
                    self._session = session
                else:
                    self._persist(None)
        return self._session

    async def get_user(self) -> Optional[AuthUser]:
        """Identity of the current session, re-checked against the provider."""
        session = await self.get_session()
        if session is None:
            return None
        return self._find_user(session.user.id)

    async def admin_delete_user(self, user_id: str) -> None:
        try:
            with get_db_context(self._session_factory) as db:
                record = db.get(AuthUserRecord, user_id)
                if record is not None:
                    db.delete(record)
        except SQLAlchemyError as e:
            logger.error(f"Failed to delete identity {user_id}: {e}")
            raise AuthError("Failed to delete user") from e
        logger.info(f"Identity deleted: {user_id}")
