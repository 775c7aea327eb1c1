"""
Shared fixtures: an in-memory SQLite backend, device-local storage in a temp
directory, and stores wired the way the application lifespan wires them.
"""
import os
import tempfile

_TMP = tempfile.mkdtemp(prefix="grocerypos-tests-")

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REALTIME_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["STORAGE_DIR"] = os.path.join(_TMP, "storage")
os.environ["LOCAL_STATE_PATH"] = os.path.join(_TMP, "device.json")
os.environ["LOG_FORMAT"] = "console"

from unittest.mock import AsyncMock, Mock  # noqa: E402

import pytest  # noqa: E402

import grocerypos.models  # noqa: E402,F401
from grocerypos.backend.auth import AuthProvider  # noqa: E402
from grocerypos.backend.client import BackendClient  # noqa: E402
from grocerypos.backend.storage import ObjectStorage  # noqa: E402
from grocerypos.core.database import Base, SessionLocal, engine  # noqa: E402
from grocerypos.core.local_storage import LocalStorage  # noqa: E402
from grocerypos.core.notifications import Notifier  # noqa: E402
from grocerypos.models.profiles import UserRole  # noqa: E402
from grocerypos.services.pos_store import PosStore  # noqa: E402
from grocerypos.services.session_store import SessionStore  # noqa: E402


@pytest.fixture(autouse=True)
def database():
    """Fresh schema for every test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def local_storage(tmp_path):
    return LocalStorage(str(tmp_path / "device.json"))


@pytest.fixture
def object_storage(tmp_path):
    return ObjectStorage(str(tmp_path / "storage"), "http://testserver/storage")


@pytest.fixture
def realtime():
    """Row-change client double; subscriptions record their callback."""
    client = Mock()
    client.publish_row_change = AsyncMock(return_value=True)

    async def subscribe_row(table, row_id, callback):
        subscription = Mock(table=table, row_id=row_id, callback=callback)
        subscription.unsubscribe = AsyncMock()
        return subscription

    client.subscribe_row = AsyncMock(side_effect=subscribe_row)
    client.close = AsyncMock()
    return client


def make_backend(local_storage, object_storage=None, realtime=None) -> BackendClient:
    auth = AuthProvider(session_factory=SessionLocal, local_storage=local_storage)
    return BackendClient(session_factory=SessionLocal, auth=auth, storage=object_storage, realtime=realtime)


@pytest.fixture
def backend(local_storage, object_storage):
    return make_backend(local_storage, object_storage)


@pytest.fixture
def notifier():
    return Notifier(maxlen=50)


@pytest.fixture
def session_store(backend, local_storage, notifier):
    return SessionStore(backend, local_storage, notifier)


@pytest.fixture
def pos_store(backend, notifier):
    return PosStore(backend, notifier)


@pytest.fixture
def create_account(backend):
    """Create an identity and profile directly, bypassing the sign-up flow."""
    async def _create(email="cashier@example.com", password="secret123", full_name="Ana Cruz",
                      role=UserRole.CASHIER, approved=True):
        user = await backend.auth.sign_up(email, password)
        await backend.insert_profile(
            {"id": user.id, "full_name": full_name, "role": role.value, "approved": approved}
        )
        return user

    return _create


@pytest.fixture
def create_product(backend):
    async def _create(name="Piattos", price=18.0, category="Snacks", stock=10):
        return await backend.upsert_product(
            {"name": name, "price": price, "category": category, "stock": stock, "image": None}
        )

    return _create
