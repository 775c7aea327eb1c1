"""
Tests for sign-in, sign-up and single-active-session enforcement.
"""
from unittest.mock import AsyncMock, patch

import pytest

from grocerypos.backend.auth import AuthProvider
from grocerypos.backend.client import BackendClient
from grocerypos.backend.errors import DatabaseError
from grocerypos.core.database import SessionLocal
from grocerypos.core.local_storage import AUTH_SESSION_KEY, SESSION_TOKEN_KEY, LocalStorage
from grocerypos.core.notifications import Notifier
from grocerypos.models.profiles import UserRole
from grocerypos.services.session_store import (
    PENDING_APPROVAL_MESSAGE,
    SESSION_REPLACED_MESSAGE,
    SessionStore,
)


def make_device(tmp_path, name, realtime=None):
    """One register: its own local storage, auth session and notifier."""
    local_storage = LocalStorage(str(tmp_path / f"{name}.json"))
    auth = AuthProvider(session_factory=SessionLocal, local_storage=local_storage)
    backend = BackendClient(session_factory=SessionLocal, auth=auth, realtime=realtime)
    return SessionStore(backend, local_storage, Notifier(maxlen=50))


def signed_out_notifications(store):
    return [n for n in store.notifier.pending() if n.title == "Signed out"]


class TestSignIn:
    """Sign-in flow."""

    @pytest.mark.asyncio
    async def test_success_rotates_session_token(self, session_store, backend, local_storage, create_account):
        user = await create_account(email="ana@example.com", password="secret123", full_name="Ana Cruz")
        await session_store.start()

        result = await session_store.sign_in("ana@example.com", "secret123")

        assert result.success is True
        assert session_store.is_authenticated
        assert session_store.profile.full_name == "Ana Cruz"
        stored = await backend.select_profile(user.id)
        assert stored["active_session_token"] is not None
        assert stored["active_session_token"] == local_storage.get(SESSION_TOKEN_KEY)
        assert session_store.auth_loading is False

    @pytest.mark.asyncio
    async def test_wrong_password(self, session_store, notifier, create_account):
        await create_account(email="ana@example.com", password="secret123")
        await session_store.start()

        result = await session_store.sign_in("ana@example.com", "wrong-password")

        assert result.success is False
        assert result.message == "Invalid login credentials"
        assert not session_store.is_authenticated
        assert notifier.drain()[-1].variant == "destructive"

    @pytest.mark.asyncio
    async def test_failed_attempt_keeps_open_session(self, session_store, backend, local_storage, create_account):
        user = await create_account(email="ana@example.com", password="secret123")
        await session_store.start()
        await session_store.sign_in("ana@example.com", "secret123")
        token = local_storage.get(SESSION_TOKEN_KEY)

        result = await session_store.sign_in("ana@example.com", "wrong-password")

        assert result.success is False
        assert session_store.is_authenticated
        assert session_store.user.id == user.id
        assert local_storage.get(SESSION_TOKEN_KEY) == token
        assert await backend.auth.get_session() is not None

    @pytest.mark.asyncio
    async def test_missing_fields(self, session_store):
        result = await session_store.sign_in("  ", "")
        assert result.success is False

    @pytest.mark.asyncio
    async def test_unapproved_account_is_rejected_and_session_ended(self, session_store, backend, create_account):
        await create_account(email="new@example.com", password="secret123", approved=False)
        await session_store.start()

        result = await session_store.sign_in("new@example.com", "secret123")

        assert result.success is False
        assert result.message == PENDING_APPROVAL_MESSAGE
        assert session_store.user is None
        assert session_store.profile is None
        assert await backend.auth.get_session() is None

    @pytest.mark.asyncio
    async def test_admin_flag(self, session_store, create_account):
        await create_account(email="boss@example.com", password="secret123", role=UserRole.ADMIN)
        await session_store.start()

        await session_store.sign_in("boss@example.com", "secret123")

        assert session_store.is_admin


class TestSignUp:
    """Sign-up flow."""

    @pytest.mark.asyncio
    async def test_creates_pending_cashier_without_signing_in(self, session_store, backend):
        await session_store.start()

        result = await session_store.sign_up("new@example.com", "secret123", "New Cashier")

        assert result.success is True
        assert not session_store.is_authenticated
        [pending] = await backend.select_pending_profiles()
        assert pending["full_name"] == "New Cashier"
        assert pending["role"] == "cashier"
        assert pending["approved"] is False

    @pytest.mark.asyncio
    async def test_duplicate_email(self, session_store, create_account):
        await create_account(email="ana@example.com")

        result = await session_store.sign_up("ana@example.com", "secret123", "Ana Again")

        assert result.success is False
        assert result.message == "User already registered"

    @pytest.mark.asyncio
    async def test_short_password(self, session_store):
        result = await session_store.sign_up("new@example.com", "123", "New Cashier")
        assert result.success is False
        assert "at least 6 characters" in result.message

    @pytest.mark.asyncio
    async def test_profile_failure_removes_identity(self, session_store, backend):
        with patch.object(backend, "insert_profile", AsyncMock(side_effect=DatabaseError("Failed to create profile"))):
            result = await session_store.sign_up("new@example.com", "secret123", "New Cashier")

        assert result.success is False
        assert result.message == "Failed to create user profile"
        # The email is free again because the orphaned identity was deleted
        retry = await session_store.sign_up("new@example.com", "secret123", "New Cashier")
        assert retry.success is True


class TestSingleActiveSession:
    """A second sign-in elsewhere ends the first device's session."""

    @pytest.mark.asyncio
    async def test_refresh_detects_replaced_session(self, tmp_path, create_account):
        await create_account(email="ana@example.com", password="secret123")
        device_a = make_device(tmp_path, "a")
        device_b = make_device(tmp_path, "b")
        await device_a.start()
        await device_b.start()

        assert (await device_a.sign_in("ana@example.com", "secret123")).success
        assert (await device_b.sign_in("ana@example.com", "secret123")).success

        await device_a.refresh_session()

        assert not device_a.is_authenticated
        assert device_a.local_storage.get(SESSION_TOKEN_KEY) is None
        [notice] = signed_out_notifications(device_a)
        assert notice.description == SESSION_REPLACED_MESSAGE

        await device_b.refresh_session()
        assert device_b.is_authenticated
        assert signed_out_notifications(device_b) == []

    @pytest.mark.asyncio
    async def test_refresh_keeps_matching_session(self, session_store, create_account):
        await create_account(email="ana@example.com", password="secret123")
        await session_store.start()
        await session_store.sign_in("ana@example.com", "secret123")

        await session_store.refresh_session()

        assert session_store.is_authenticated

    @pytest.mark.asyncio
    async def test_start_restores_persisted_session(self, tmp_path, create_account):
        await create_account(email="ana@example.com", password="secret123")
        first = make_device(tmp_path, "register")
        await first.start()
        await first.sign_in("ana@example.com", "secret123")
        await first.stop()

        # Same device, restarted
        restarted = make_device(tmp_path, "register")
        await restarted.start()

        assert restarted.is_authenticated
        assert restarted.loading is False

    @pytest.mark.asyncio
    async def test_start_ends_persisted_session_without_profile(self, tmp_path):
        first = make_device(tmp_path, "register")
        await first.backend.auth.sign_up("orphan@example.com", "secret123")
        await first.backend.auth.sign_in_with_password("orphan@example.com", "secret123")

        restarted = make_device(tmp_path, "register")
        await restarted.start()

        assert not restarted.is_authenticated
        assert restarted.local_storage.get(AUTH_SESSION_KEY) is None
        again = make_device(tmp_path, "register")
        assert await again.backend.auth.get_session() is None

    @pytest.mark.asyncio
    async def test_sign_in_watches_profile_and_publishes_change(self, tmp_path, realtime, create_account):
        user = await create_account(email="ana@example.com", password="secret123")
        store = make_device(tmp_path, "a", realtime=realtime)
        await store.start()

        await store.sign_in("ana@example.com", "secret123")

        realtime.subscribe_row.assert_awaited_with("profiles", user.id, store.handle_profile_change)
        table, row_id = realtime.publish_row_change.await_args.args[:2]
        assert (table, row_id) == ("profiles", user.id)

    @pytest.mark.asyncio
    async def test_own_row_change_does_not_sign_out(self, tmp_path, realtime, create_account):
        await create_account(email="ana@example.com", password="secret123")
        store = make_device(tmp_path, "a", realtime=realtime)
        await store.start()
        await store.sign_in("ana@example.com", "secret123")

        await store.handle_profile_change(
            {"type": "UPDATE", "table": "profiles", "new": store.profile.model_dump(), "old": None}
        )

        assert store.is_authenticated

    @pytest.mark.asyncio
    async def test_push_mismatch_signs_out_once(self, tmp_path, realtime, create_account):
        await create_account(email="ana@example.com", password="secret123")
        store = make_device(tmp_path, "a", realtime=realtime)
        await store.start()
        await store.sign_in("ana@example.com", "secret123")
        replaced = {**store.profile.model_dump(), "active_session_token": "from-another-device"}
        payload = {"type": "UPDATE", "table": "profiles", "new": replaced, "old": None}

        await store.handle_profile_change(payload)
        await store.handle_profile_change(payload)
        await store.refresh_session()

        assert store.user is None
        assert store.profile is None
        assert len(signed_out_notifications(store)) == 1
        assert await store.backend.auth.get_session() is None


class TestTeardown:
    """Nothing reaches a stopped store."""

    @pytest.mark.asyncio
    async def test_auth_events_after_stop_are_ignored(self, session_store, backend, create_account):
        await create_account(email="ana@example.com", password="secret123")
        await session_store.start()
        await session_store.stop()

        await backend.auth.sign_in_with_password("ana@example.com", "secret123")

        assert session_store.user is None
        assert session_store.profile is None

    @pytest.mark.asyncio
    async def test_row_changes_after_stop_are_ignored(self, tmp_path, realtime, create_account):
        await create_account(email="ana@example.com", password="secret123")
        store = make_device(tmp_path, "a", realtime=realtime)
        await store.start()
        await store.sign_in("ana@example.com", "secret123")
        replaced = {**store.profile.model_dump(), "active_session_token": "other"}

        await store.stop()
        await store.handle_profile_change({"type": "UPDATE", "new": replaced})

        assert store.user is not None
        assert signed_out_notifications(store) == []

    @pytest.mark.asyncio
    async def test_stop_unsubscribes_profile_watch(self, tmp_path, realtime, create_account):
        await create_account(email="ana@example.com", password="secret123")
        store = make_device(tmp_path, "a", realtime=realtime)
        await store.start()
        await store.sign_in("ana@example.com", "secret123")
        subscription = store._profile_subscription

        await store.stop()

        subscription.unsubscribe.assert_awaited_once()
